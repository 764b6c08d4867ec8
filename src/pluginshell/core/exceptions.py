# src/pluginshell/core/exceptions.py
from typing import Any, List, Optional, Sequence


class ShellError(Exception):
    """Base class for the error kinds the dispatch loops recover from."""


class UnknownCommandError(ShellError):
    """No token of the command line matched a registered keyword."""

    def __init__(self, arguments: Optional[Sequence[str]] = None):
        self.arguments: List[str] = list(arguments or [])
        super().__init__("Unknown command")


class CommandExecutionError(ShellError):
    """The body of a command failed."""

    def __init__(self, command: Any, message: str):
        self.command = command
        super().__init__(message)

    @property
    def command_name(self) -> str:
        descriptor = getattr(self.command, "descriptor", None)
        if descriptor is None:
            return "???"
        return descriptor.full_name


class CommandLineInterpretationError(ShellError):
    """The command line could not be parsed or its flow control failed."""

    def __init__(self, message: str, arguments: Optional[Sequence[str]] = None):
        self.arguments: List[str] = list(arguments or [])
        super().__init__(message)


class ServerConnectionError(ShellError):
    """A session with a server could not be established."""


class OutputRedirectionError(ShellError):
    """Command output could not be written to its redirect target."""


class MaxErrorReachedError(ShellError):
    """The error tolerance of an operation was exceeded."""


def format_exception_chain(message: str, exc: BaseException) -> str:
    """
    Appends one '=> Type: message' line per exception in the cause chain.
    """
    parts = [message]
    current: Optional[BaseException] = exc
    seen = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        parts.append(f"\n   => {type(current).__name__}: {current}")
        if current.__cause__ is not None or current.__suppress_context__:
            current = current.__cause__
        else:
            current = current.__context__
    return "".join(parts)
