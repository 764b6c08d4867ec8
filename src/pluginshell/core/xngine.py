# src/pluginshell/core/xngine.py
from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, List, Optional

from pluginshell.core.client_proxy import ClientProxy, NullClientProxy
from pluginshell.core.context.environment import ShellEnvironment
from pluginshell.core.context.execution_context import ExecutionContext
from pluginshell.core.exceptions import (
    CommandExecutionError,
    CommandLineInterpretationError,
    OutputRedirectionError,
    ShellError,
)
from pluginshell.core.parser import split_flow_control, tokenize
from pluginshell.core.utils.perf_monitor import PerfMonitor
from pluginshell.model import OutputMode

if TYPE_CHECKING:
    from pluginshell.core.script_engine import ScriptState

logger = logging.getLogger(__name__)


class ExecuteEngine:
    """
    Interprets command lines: tokenizes them, splits them on '|', '>' and
    '>>', resolves each segment through the registry and runs it with the
    output of the previous segment appended to its arguments.
    """

    def __init__(self, environment: ShellEnvironment, client_proxy: Optional[ClientProxy] = None) -> None:
        self.environment = environment
        self.client_proxy = client_proxy or NullClientProxy()
        environment.interpreter = self

    @property
    def registry(self):
        return self.environment.registry

    def parse_command_line(self, line: Optional[str]) -> List[str]:
        """Expands %NAME% variables and splits the line into arguments."""
        return tokenize(line, self.environment.variables)

    def interpret_text(self, line: Optional[str], script: Optional["ScriptState"] = None) -> None:
        if not line:
            return
        self.interpret_line(self.parse_command_line(line), script)

    def interpret_line(self, args: List[str], script: Optional["ScriptState"] = None) -> None:
        """
        Runs one tokenized command line as a single cancellation scope.

        Raises:
            ShellError: recognized errors propagate unchanged; anything else
                is wrapped in CommandLineInterpretationError.
        """
        if not args:
            return

        with self.environment.cancellation.scope():
            try:
                flow = split_flow_control(args)
                if flow.redirect_path and not flow.append:
                    self._truncate(flow.redirect_path)

                piped: List[str] = []
                last = len(flow.segments) - 1
                for index, segment in enumerate(flow.segments):
                    if self.environment.cancel_pending:
                        logger.debug("Cancellation pending, stopping before segment %d", index)
                        return

                    if index < last:
                        mode = OutputMode.CAPTURE
                    elif flow.redirect_path:
                        mode = OutputMode.FILE
                    else:
                        mode = OutputMode.CONSOLE

                    output = self.execute_command(segment + piped, script, mode, flow.redirect_path)
                    piped = output or []
            except ShellError:
                raise
            except Exception as e:
                raise CommandLineInterpretationError(
                    "Error interpreting command line " + " ".join(args), args
                ) from e

    def execute_command(
            self,
            args: List[str],
            script: Optional["ScriptState"] = None,
            mode: OutputMode = OutputMode.CONSOLE,
            redirect_path: Optional[str] = None,
    ) -> Optional[List[str]]:
        """
        Resolves and runs one pipeline segment.

        Returns:
            The captured output lines in CAPTURE mode, None otherwise.
        """
        descriptor, remaining = self.registry.resolve_command(self.environment.current_category, args)
        command = descriptor.create()

        label = f'Command "{descriptor.full_name} {" ".join(remaining)}" execution time'
        with PerfMonitor(label, logger):
            if descriptor.requires_connection and not self.client_proxy.is_logged_in:
                raise CommandExecutionError(
                    command, "A connection to a server is required to process this command"
                )

            context = ExecutionContext(self.environment, self.client_proxy, remaining, script)
            try:
                if mode == OutputMode.CAPTURE:
                    return command.execute_captured(context)
                if mode == OutputMode.FILE:
                    command.execute_to_file(context, redirect_path)
                else:
                    command.execute(context)
                return None
            except ShellError:
                raise
            except Exception as e:
                raise CommandExecutionError(
                    command, f"Failed to process command {descriptor.full_name}"
                ) from e

    @staticmethod
    def _truncate(path: str) -> None:
        try:
            if os.path.isfile(path):
                os.remove(path)
        except OSError as e:
            raise OutputRedirectionError(f"Failed to truncate output file {path}") from e
