# src/pluginshell/core/handlers/rdtxt_handler.py
import codecs
import logging
from pathlib import Path
from typing import List

from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext
from pluginshell.core.exceptions import MaxErrorReachedError
from pluginshell.core.utils.args import NoExitArgumentParser, normalize_flags
from pluginshell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"
NAMED_ENCODINGS = {
    "utf8": "utf-8",
    "utf16": "utf-16",
    "latin9": "iso-8859-15",
    "win1252": "cp1252",
    "usascii": "ascii",
}


def _build_parser() -> NoExitArgumentParser:
    parser = NoExitArgumentParser(prog="rdtxt")
    parser.add_argument("paths", nargs="+")
    for flag in NAMED_ENCODINGS:
        parser.add_argument(f"-{flag}", dest=flag, action="store_true")
    parser.add_argument("-enc", dest="encoding", default=None)
    parser.add_argument("-maxerr", dest="max_errors", type=int, default=0)
    return parser


class ReadTextFileCommand(CommandBase):
    """
    Outputs the lines of one or more text files.

    A file that cannot be read is reported as an error and skipped; once more
    than '-maxerr' files have failed (0 by default) the command stops with
    MaxErrorReachedError.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        options = _build_parser().parse_intermixed_args(normalize_flags(context.arguments))
        encoding = self._select_encoding(options)
        base_dir = Path(context.environment.get("CD") or ".")

        errors: List[str] = []
        for raw_path in options.paths:
            path = PathUtils.resolve_user_path(raw_path, base_dir)
            try:
                self._output_file_lines(context, path, encoding)
            except (OSError, UnicodeDecodeError) as e:
                errors.append(str(path))
                self.output_error("Cannot read file %s: %s", str(path), e)
                if len(errors) > options.max_errors:
                    raise MaxErrorReachedError(
                        f"{len(errors)} file(s) could not be read (tolerance: {options.max_errors})"
                    ) from e
            if context.environment.cancel_pending:
                return

    def _output_file_lines(self, context: ExecutionContext, path: Path, encoding: str) -> None:
        if not path.is_file():
            raise FileNotFoundError(f"Cannot find file: {path}")
        with open(path, "r", encoding=encoding) as f:
            for line in f:
                if context.environment.cancel_pending:
                    return
                self.output_info(line.rstrip("\r\n"))

    def _select_encoding(self, options) -> str:
        for flag, encoding in NAMED_ENCODINGS.items():
            if getattr(options, flag):
                return encoding
        if options.encoding:
            try:
                return codecs.lookup(options.encoding).name
            except LookupError:
                self.output_warning(
                    "'%s' is not a supported encoding name. Default encoding will be used.",
                    options.encoding
                )
        return DEFAULT_ENCODING


def register(registrar) -> None:
    registrar.add(
        ReadTextFileCommand,
        category="*",
        keyword="rdtxt",
        description="Display the content of file",
        example="rdtxt ~/readme.txt -latin9",
        parameters=[
            "path:      Path of the file(s) to read.",
            "-utf8:     Use the UTF-8 encoding to read the file (default)",
            "-utf16:    Use the UTF-16 encoding.",
            "-latin9:   Use the Latin 9 (ISO) codepage.",
            "-win1252:  Use the Western European (Windows) codepage.",
            "-usascii:  Use the US-ASCII codepage.",
            "-enc=xxx:  Specify the encoding to use.",
            "-maxerr=n: Number of unreadable files tolerated (default 0).",
        ],
    )
