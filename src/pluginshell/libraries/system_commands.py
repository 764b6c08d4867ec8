# src/pluginshell/libraries/system_commands.py
"""
System commands library: log messages, hash files, read OS environment
variables, start processes and encode/decode base64.

Loaded from the library directory at start-up, or with 'load <path>'.
"""
import base64
import binascii
import hashlib
import logging
import os
import subprocess
import sys
import time
from pathlib import Path

from tqdm import tqdm

from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext
from pluginshell.core.utils.args import argument_exists, remove_flag
from pluginshell.core.utils.path_utils import PathUtils
from pluginshell.model import OutputMode

__version__ = "1.0.0"

logger = logging.getLogger(__name__)
script_logger = logging.getLogger("pluginshell.script")

HASH_ALGORITHMS = ("md5", "sha1", "sha256")
WAIT_POLL_INTERVAL = 0.1


class LogCommand(CommandBase):
    """Writes its arguments as one record of the shell log, at the level named by its keyword."""

    LEVELS = {
        "info": logging.INFO,
        "warn": logging.WARNING,
        "error": logging.ERROR,
        "debug": logging.DEBUG,
    }

    def execute_command(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("A message is required")
        level = self.LEVELS[self.descriptor.keyword.lower()]
        script_logger.log(level, " ".join(context.arguments))


class HashCommand(CommandBase):
    """
    Handles 'System\\hash <-md5|-sha1|-sha256> <file...>'.

    Prints 'ALGO: <base64 digest>' per algorithm and file. With several files
    on the console a progress bar is shown.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        args = list(context.arguments)
        if not args:
            raise ValueError("HashCommand does not take 0 parameters")
        algorithms = [a for a in HASH_ALGORITHMS if argument_exists(args, f"-{a}")]
        for a in HASH_ALGORITHMS:
            remove_flag(args, f"-{a}")
        if not algorithms:
            algorithms = ["sha256"]

        base_dir = Path(context.environment.get("CD") or ".")
        files = [p for p in (PathUtils.resolve_user_path(a, base_dir) for a in args) if p.is_file()]
        if not files:
            raise ValueError("You must provide a valid path")

        show_progress = (
            len(files) > 1
            and self.output_mode == OutputMode.CONSOLE
            and context.environment.run_in_console
        )
        for path in tqdm(files, desc="Hashing", unit="file", file=sys.stderr, disable=not show_progress):
            if context.environment.cancel_pending:
                return
            for algorithm in algorithms:
                digest = _digest_file(path, algorithm)
                if len(files) > 1:
                    self.output_info("%s: %s  %s", algorithm.upper(), digest, path.name)
                else:
                    self.output_info("%s: %s", algorithm.upper(), digest)


def _digest_file(path: Path, algorithm: str, chunk_size: int = 1024 * 1024) -> str:
    h = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            h.update(chunk)
    return base64.b64encode(h.digest()).decode("ascii")


class GetVarCommand(CommandBase):
    def execute_command(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("You must provide a valid variable name")
        self.output_info(os.environ.get(context.arguments[0], ""))


class SystemExecCommand(CommandBase):
    """
    Starts a process. With '-w' the command waits for it to end (or for a
    cancellation request, which terminates the process).
    """

    def execute_command(self, context: ExecutionContext) -> None:
        args = list(context.arguments)
        wait = argument_exists(args, "-w")
        remove_flag(args, "-w")
        if not args:
            raise ValueError("The path of the program to start is required")

        process = subprocess.Popen(args)
        self.output_debug("Started process %d: %s", process.pid, " ".join(args))
        if not wait:
            return

        while process.poll() is None:
            if context.environment.cancel_pending:
                process.terminate()
                process.wait()
                self.output_warning("Process %d terminated", process.pid)
                return
            time.sleep(WAIT_POLL_INTERVAL)
        self.output_debug("Process %d exited with code %d", process.pid, process.returncode)


class ToBase64Command(CommandBase):
    def execute_command(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("encb64 does not take 0 parameters")
        data = " ".join(context.arguments).encode("utf-8")
        self.output_info(base64.b64encode(data).decode("ascii"))


class FromBase64Command(CommandBase):
    def execute_command(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("decb64 does not take 0 parameters")
        try:
            data = base64.b64decode(context.arguments[0], validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 data: {e}") from e
        self.output_info(data.decode("utf-8", errors="replace"))


def register(registrar) -> None:
    for keyword, description in (
            ("info", "Write an info message in log"),
            ("warn", "Write a warning message in log"),
            ("error", "Write an error message in log"),
            ("debug", "Write a debug message in log"),
    ):
        registrar.add(
            LogCommand, category="Log", keyword=keyword,
            description=description,
            example=f'Log\\{keyword} "Hello World!"',
            parameters=["[Message]"],
        )

    registrar.add(
        HashCommand, category="System", keyword="hash",
        description="Generate a hash for the provided file(s)",
        example="hash <-md5|-sha1|-sha256> [FilePath]",
    )
    registrar.add(
        GetVarCommand, category="System", keyword="getvar",
        description="Retrieve the value of an OS environment variable",
        example="getvar [VariableName]",
        parameters=["VariableName= Name of the environment variable to retrieve"],
    )
    registrar.add(
        SystemExecCommand, category="System", keyword="exec",
        description="Start a system process",
        example="exec [-w] [Path] [args...]",
        parameters=["Path= Path of the program to start.", "-w: Wait for spawned process to terminate."],
    )
    registrar.add(
        ToBase64Command, category="*", keyword="encb64",
        description="Encode a string to base64.",
        example='encb64 "string data"',
        parameters=["String data to encode to base64."],
    )
    registrar.add(
        FromBase64Command, category="*", keyword="decb64",
        description="Decode a base64 encoded string.",
        example='decb64 "base64 data"',
        parameters=["Base64 data to decode."],
    )
