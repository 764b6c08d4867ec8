# src/pluginshell/core/core.py
from __future__ import annotations

import logging
import os
import signal
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from pluginshell.core.cancellation import CancellationState
from pluginshell.core.command_registry import CommandRegistry
from pluginshell.core.context.environment import ShellEnvironment
from pluginshell.core.discovery import load_library_dir, register_builtin_commands
from pluginshell.core.exceptions import (
    CommandExecutionError,
    CommandLineInterpretationError,
    MaxErrorReachedError,
    OutputRedirectionError,
    ServerConnectionError,
    ShellError,
    UnknownCommandError,
    format_exception_chain,
)
from pluginshell.core.managers.config_manager import config_manager
from pluginshell.core.managers.temp_folder_manager import TempFolderManager
from pluginshell.core.parser import expand_variables
from pluginshell.core.utils.path_utils import PathUtils
from pluginshell.core.utils.version import SHELL_NAME, describe_libraries, get_shell_version
from pluginshell.core.xngine import ExecuteEngine
from pluginshell.model import RunningMode

logger = logging.getLogger(__name__)

LOGIN_PREFIX = "-login:"


@dataclass
class ShellOptions:
    """Start-up flags of the shell; everything else stays in `arguments`."""
    force_interactive: bool = False
    no_startup_script: bool = False
    no_logo: bool = False
    io_redirected: bool = False
    show_usage: bool = False
    arguments: List[str] = field(default_factory=list)

    @classmethod
    def from_argv(cls, argv: Sequence[str]) -> "ShellOptions":
        """Extracts the flags from argv (case-insensitive)."""
        flags = {
            "-forceinteractive": "force_interactive",
            "-nostartupscript": "no_startup_script",
            "-nologo": "no_logo",
            "-ioredirected": "io_redirected",
            "-?": "show_usage",
            "-h": "show_usage",
            "--help": "show_usage",
        }
        options = cls()
        for arg in argv:
            attribute = flags.get(arg.lower())
            if attribute:
                setattr(options, attribute, True)
                logger.debug("%s flag is on", arg)
            else:
                options.arguments.append(arg)
        return options

    @property
    def login_arguments(self) -> List[str]:
        return [a for a in self.arguments if a.lower().startswith(LOGIN_PREFIX)]

    @property
    def command_arguments(self) -> List[str]:
        return [a for a in self.arguments if not a.lower().startswith(LOGIN_PREFIX)]


def describe_error(exc: ShellError) -> str:
    """The one message a dispatch loop prints for a recognized error."""
    if isinstance(exc, UnknownCommandError):
        return "Unknown command"
    if isinstance(exc, ServerConnectionError):
        headline = "An exception occurred while connecting to server"
    elif isinstance(exc, OutputRedirectionError):
        headline = "An exception occurred while redirecting command output"
    elif isinstance(exc, CommandExecutionError):
        headline = f'An exception occurred while processing command "{exc.command_name}"'
    elif isinstance(exc, CommandLineInterpretationError):
        headline = "An exception occurred while processing command line"
    elif isinstance(exc, MaxErrorReachedError):
        headline = "The maximum number of errors was reached"
    else:
        headline = "An exception occurred"
    return format_exception_chain(headline, exc)


class Shell:
    """
    Owns one registry, one environment and one interpreter, plus the
    connection proxy and the temporary folders handed out to commands.
    """

    def __init__(
            self,
            registry: CommandRegistry,
            options: Optional[ShellOptions] = None,
            input_fn: Callable[[str], str] = input,
            library_dir: Optional[Path] = None,
            temp_root: Optional[Union[str, Path]] = None,
    ):
        self.registry = registry
        self.options = options or ShellOptions()
        self.library_dir = library_dir or _configured_library_dir()
        self.cancellation = CancellationState()
        self.environment = ShellEnvironment(
            registry,
            self.cancellation,
            run_in_console=not self.options.io_redirected,
            input_fn=input_fn,
        )
        self.temp_folders = TempFolderManager(temp_root or PathUtils.get_temp_root())
        self.environment.temp_folders = self.temp_folders
        self.client_proxy = registry.client_proxy_factory.create_proxy()
        self.engine = ExecuteEngine(self.environment, self.client_proxy)
        self._startup_done = False
        self._set_env_variables()
        self._login_from_arguments()

    # --- Properties ---

    @property
    def prompt(self) -> str:
        return (
            f"{self.client_proxy.connected_user}@{self.client_proxy.server_list}"
            f"\\{self.environment.current_category}>"
        )

    @property
    def args_contain_commands(self) -> bool:
        category = self.environment.current_category
        return any(self.registry.command_exists(category, a) for a in self.options.command_arguments)

    # --- Dispatch loops ---

    def input_command_line(self, line: Optional[str]) -> bool:
        """
        Interprets one line typed by the user.

        Recognized errors are reported on stderr and swallowed; anything else
        propagates and ends the shell.

        Returns:
            bool: False when a recognized error was reported.
        """
        try:
            self.engine.interpret_text(line)
            return True
        except ShellError as e:
            self._report(e)
            return False

    def run(self) -> int:
        """
        Runs the command line arguments once (batch mode).

        Returns:
            int: 0 on success, 1 when a recognized error was reported.
        """
        self.environment.running_mode = (
            RunningMode.INTERACTIVE if self.options.force_interactive else RunningMode.BATCH
        )
        self._execute_startup_script()
        args = [expand_variables(a, self.environment.variables) for a in self.options.command_arguments]
        try:
            self.engine.interpret_line(args)
        except ShellError as e:
            self._report(e)
            return 1
        return 0

    def start(self, read_line: Optional[Callable[[str], str]] = None) -> None:
        """Reads and interprets lines until 'exit' or end of input."""
        read_line = read_line or self.environment.input_fn
        self.environment.running_mode = RunningMode.INTERACTIVE
        self._execute_startup_script()

        while not self.environment.exit_pending:
            try:
                line = read_line(self.prompt)
            except EOFError:
                break
            except KeyboardInterrupt:
                continue
            logger.debug("Input: %s%s", self.prompt, line)
            self.input_command_line(line)
            print()

        if self.client_proxy.is_logged_in:
            self.client_proxy.disconnect()

    def close(self) -> None:
        """Releases temporary folders and the connection proxy."""
        self.temp_folders.release_all()
        try:
            if self.client_proxy.is_logged_in:
                self.client_proxy.disconnect()
        finally:
            self.client_proxy.close()

    # --- Signals ---

    def install_signal_handler(self) -> None:
        """Makes Ctrl+C request cancellation of the running command instead of killing the process."""
        def _on_sigint(signum, frame):
            self.cancellation.signal_cancel()

        signal.signal(signal.SIGINT, _on_sigint)

    # --- Helpers ---

    def print_logo(self) -> None:
        if self.options.no_logo:
            return
        print(f"Extensible command line shell {SHELL_NAME} [Version {get_shell_version()}]")
        print("Type 'help' for the list of commands.\n")

    def _report(self, error: ShellError) -> None:
        logger.debug("Command line failed", exc_info=error)
        print(describe_error(error), file=sys.stderr)

    def _set_env_variables(self) -> None:
        variables = self.environment.variables
        defaults = {
            "LIBDIR": str(self.library_dir),
            "LIBS": describe_libraries(self.registry.libraries),
            "TEMP": str(self.temp_folders.root),
            "CD": os.getcwd(),
        }
        for name, value in defaults.items():
            if name not in variables:
                variables[name] = value

    def _login_from_arguments(self) -> None:
        login_args = self.options.login_arguments
        if not login_args:
            return
        try:
            self.client_proxy.connect(login_args)
        except ServerConnectionError as e:
            logger.debug("Login failed", exc_info=True)
            print(format_exception_chain(f"Login failed: {e}", e), file=sys.stderr)
        except CommandLineInterpretationError as e:
            logger.debug("Login arguments rejected", exc_info=True)
            print(format_exception_chain("An exception occurred while processing command line", e),
                  file=sys.stderr)

    def _execute_startup_script(self) -> None:
        if self.options.no_startup_script or self._startup_done:
            return
        self._startup_done = True
        startup = _configured_startup_script()
        if not startup.is_file():
            logger.debug("No startup script at %s", startup)
            return
        try:
            self.engine.interpret_line(["run", str(startup)])
        except Exception as e:
            logger.debug("Startup script failed", exc_info=True)
            print(format_exception_chain("An exception occurred while executing startup script", e),
                  file=sys.stderr)


def _configured_library_dir() -> Path:
    configured = config_manager.get_nested("shell.library_dir")
    return Path(configured).expanduser() if configured else PathUtils.get_library_dir()


def _configured_startup_script() -> Path:
    configured = config_manager.get_nested("shell.startup_script")
    return Path(configured).expanduser() if configured else PathUtils.get_startup_script()


def build_shell(
        options: Optional[ShellOptions] = None,
        input_fn: Callable[[str], str] = input,
        library_dir: Optional[Path] = None,
        registry: Optional[CommandRegistry] = None,
) -> Shell:
    """Creates a registry with the built-in commands and the installed libraries, then a Shell on it."""
    registry = registry or CommandRegistry()
    register_builtin_commands(registry)
    directory = library_dir or _configured_library_dir()
    load_library_dir(registry, directory)
    return Shell(registry, options, input_fn=input_fn, library_dir=directory)
