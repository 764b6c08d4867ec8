from __future__ import annotations

import logging
import sys
from typing import Callable

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer
from prompt_toolkit.document import Document
from prompt_toolkit.history import FileHistory, InMemoryHistory

from pluginshell.core.core import Shell, ShellOptions, build_shell
from pluginshell.core.managers.completion_manager import CompletionManager
from pluginshell.core.managers.config_manager import config_manager
from pluginshell.core.utils.configure_logging import configure_logger
from pluginshell.core.utils.path_utils import PathUtils

# Initialize logging based on configuration
configure_logger(
    config_manager.get_nested("debug.level", "WARNING"),
    module_specific_levels=config_manager.get_nested("debug.modules"),
    silenced_loggers=config_manager.get_nested("debug.silenced"),
)
logger = logging.getLogger(__name__)

USAGE = """
Usage: pluginshell [flags] [command line]

  -forceInteractive   Start the interactive prompt after running the command line.
  -noStartUpScript    Do not run the startup script.
  -nologo             Do not print the banner.
  -IoRedirected       Read commands with plain input() (no line editor).
  -login:...          Log on to the server(s) at start-up.
  -? | -h             Show this help.

Without a command line the interactive prompt starts.
""".strip("\n")


class PromptToolkitCompleter(Completer):
    """
    A wrapper that uses the CompletionManager to generate suggestions
    in a way that prompt_toolkit expects.
    """

    def __init__(self, manager: CompletionManager):
        self.manager = manager

    def get_completions(self, document: Document, complete_event):
        yield from self.manager.generate_completions(document)


def _make_line_reader(shell: Shell) -> Callable[[str], str]:
    """Returns the function the interactive loop reads lines with."""
    if shell.options.io_redirected:
        return shell.environment.input_fn

    if config_manager.get_nested("shell.prompt_history", True):
        history_path = PathUtils.get_shell_history_file()
        history = FileHistory(str(history_path))
        logger.info("Shell startup; history file at: %s", history_path)
    else:
        history = InMemoryHistory()

    session = PromptSession(
        history=history,
        completer=PromptToolkitCompleter(CompletionManager(shell.environment)),
        complete_while_typing=False,
    )
    return session.prompt


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for running the shell from the command line."""
    options = ShellOptions.from_argv(sys.argv[1:] if argv is None else argv)
    if options.show_usage:
        print(USAGE)
        return 0

    shell = build_shell(options)
    shell.print_logo()
    shell.install_signal_handler()
    try:
        exit_code = 0
        if shell.args_contain_commands:
            exit_code = shell.run()
            if options.force_interactive and not shell.environment.exit_pending:
                shell.start(_make_line_reader(shell))
        else:
            shell.start(_make_line_reader(shell))
        return exit_code
    finally:
        shell.close()


if __name__ == "__main__":
    sys.exit(main())
