# src/pluginshell/core/commands/base.py
import abc
import logging
import sys
from pathlib import Path
from typing import IO, Any, List, Optional, Union

from pluginshell.core.context.execution_context import ExecutionContext
from pluginshell.core.exceptions import OutputRedirectionError
from pluginshell.core.utils.helptext import format_command_help
from pluginshell.model import CommandDescriptor, OutputMode

WARNING_PREFIX = "WARNING - "
ERROR_PREFIX = "ERROR - "


def format_message(message: str, args: tuple) -> str:
    """printf-style formatting that never fails: unusable args are appended instead."""
    if not args:
        return str(message)
    try:
        return str(message) % args
    except (TypeError, ValueError):
        return " ".join([str(message)] + [str(a) for a in args])


class CommandBase(metaclass=abc.ABCMeta):
    """
    Base class of every command.

    A subclass implements `execute_command(context)` and reports through
    `output_info`, `output_warning` and `output_error`. Where those lines end
    up (console, a list handed to the next pipeline stage, or a file) is
    decided by the interpreter through one of the three `execute*` methods.
    """

    def __init__(self, descriptor: CommandDescriptor):
        self.descriptor = descriptor
        self.logger = logging.getLogger(f"{type(self).__module__}.{type(self).__name__}")
        self.output_mode = OutputMode.CONSOLE
        self._captured: List[str] = []
        self._output_file: Optional[Path] = None
        self._file_handle: Optional[IO[str]] = None

    # --- Invocation ---

    def execute(self, context: ExecutionContext) -> None:
        self.output_mode = OutputMode.CONSOLE
        self.execute_command(context)

    def execute_captured(self, context: ExecutionContext) -> List[str]:
        """Runs the command and returns its output lines instead of printing them."""
        self.output_mode = OutputMode.CAPTURE
        self._captured = []
        self.execute_command(context)
        return self._captured

    def execute_to_file(self, context: ExecutionContext, output_path: Union[str, Path]) -> None:
        """
        Runs the command appending its output lines to `output_path`.

        The file is opened on the first line written: a command producing no
        output leaves no file behind.
        """
        self.output_mode = OutputMode.FILE
        self._output_file = Path(output_path)
        self._file_handle = None
        try:
            self.execute_command(context)
        finally:
            if self._file_handle is not None:
                self._file_handle.close()
                self._file_handle = None

    @abc.abstractmethod
    def execute_command(self, context: ExecutionContext) -> None:
        raise NotImplementedError

    # --- Output ---

    def output_info(self, message: Any = "", *args: Any) -> None:
        self._emit(format_message(message, args), sys.stdout)

    def output_warning(self, message: Any, *args: Any) -> None:
        self._emit(WARNING_PREFIX + format_message(message, args), sys.stdout)

    def output_error(self, message: Any, *args: Any) -> None:
        self._emit(ERROR_PREFIX + format_message(message, args), sys.stderr)

    def output_debug(self, message: Any, *args: Any) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(format_message(message, args))

    def _emit(self, line: str, stream: IO[str]) -> None:
        if self.output_mode == OutputMode.CAPTURE:
            self._captured.append(line)
        elif self.output_mode == OutputMode.FILE:
            try:
                if self._file_handle is None:
                    self._file_handle = open(self._output_file, "a", encoding="utf-8")
                self._file_handle.write(line + "\n")
            except (OSError, ValueError) as e:
                raise OutputRedirectionError(
                    f"Failed to redirect output to file {self._output_file}"
                ) from e
        else:
            print(line, file=stream)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.descriptor.full_name}>"


class ScriptCommandBase(CommandBase):
    """
    Base class of commands that only make sense inside a running script
    (goto, onerror, rem, sleep). Invoked from the prompt they print their help.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        if not context.in_script:
            for line in format_command_help(self.descriptor).split("\n"):
                self.output_info(line)
            return
        self.flow_control_execute(context)

    @abc.abstractmethod
    def flow_control_execute(self, context: ExecutionContext) -> None:
        raise NotImplementedError
