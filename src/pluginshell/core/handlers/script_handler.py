# src/pluginshell/core/handlers/script_handler.py
import logging
import time
from pathlib import Path

from pluginshell.core.commands.base import CommandBase, ScriptCommandBase
from pluginshell.core.context.execution_context import ExecutionContext
from pluginshell.core.exceptions import CommandExecutionError
from pluginshell.core.managers.config_manager import config_manager
from pluginshell.core.script_engine import ScriptEngine, ScriptState
from pluginshell.core.utils.path_utils import PathUtils
from pluginshell.model import ScriptStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.2


class RunCommand(CommandBase):
    """
    Handles 'run <scriptFilePath>'.

    The first argument naming an existing file is loaded and executed line by
    line. Relative paths are resolved against %CD%.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        env = context.environment
        base_dir = Path(env.get("CD") or ".")
        script_path = next(
            (p for p in (PathUtils.resolve_user_path(a, base_dir) for a in context.arguments) if p.is_file()),
            None,
        )
        if script_path is None:
            raise CommandExecutionError(self, "Cannot find script file")

        script = ScriptState.load(script_path)
        status = ScriptEngine(env).run(script, self)
        self.output_debug("Script %s ended with status %s", str(script.path), status.value)


class GotoCommand(ScriptCommandBase):
    def flow_control_execute(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("A line number is required")
        context.script.goto(context.arguments[0])


class OnErrorCommand(ScriptCommandBase):
    """Sets whether the running script stops ('break') or goes on ('continue') after a failing line."""

    def flow_control_execute(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("This command does not take 0 arguments")
        choice = context.arguments[0].lower()
        if choice == "break":
            context.script.break_on_error = True
        elif choice == "continue":
            context.script.break_on_error = False
        else:
            raise ValueError(f"Invalid value '{context.arguments[0]}': expected break or continue")
        self.output_debug("Break script on error set to %s", context.script.break_on_error)


class RemCommand(ScriptCommandBase):
    def flow_control_execute(self, context: ExecutionContext) -> None:
        current = context.script.current
        number = current.number if current else 0
        self.output_debug('Line %d "%s" commented out', number, " ".join(context.arguments))


class SleepCommand(ScriptCommandBase):
    """Waits the given number of seconds, returning early when cancellation is requested."""

    def flow_control_execute(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("waitTime is required")
        try:
            seconds = float(context.arguments[0])
        except ValueError:
            raise ValueError("Invalid value: failed to parse waitTime as a number") from None

        env = context.environment
        interval = float(config_manager.get_nested("shell.sleep_poll_interval", DEFAULT_POLL_INTERVAL))
        deadline = time.monotonic() + max(0.0, seconds)
        while not env.cancel_pending:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            time.sleep(min(interval, remaining))


class PauseCommand(CommandBase):
    """Waits for the user to press Enter. Does nothing outside interactive mode."""

    def execute_command(self, context: ExecutionContext) -> None:
        env = context.environment
        if not env.is_interactive:
            return
        script = context.script
        if script is not None:
            script.status = ScriptStatus.PAUSED
        try:
            env.wait_for_user("Press Enter to continue...")
        finally:
            if script is not None:
                script.status = ScriptStatus.RUNNING


def register(registrar) -> None:
    registrar.add(
        RunCommand, category="*", keyword="run",
        description="Run a script file",
        example="run scriptFilePath",
        parameters=["[scriptFilePath] = Path of the script file"],
    )
    registrar.add(
        GotoCommand, category="*", keyword="goto",
        description="Go to the specified script line",
        example="goto 5",
        parameters=["[lineNumber]: Line to go to in script file"],
    )
    registrar.add(
        OnErrorCommand, category="*", keyword="onerror",
        description="Define the behaviour of the script in case of an error is encountered",
        example="onerror [break|continue]",
    )
    registrar.add(
        RemCommand, category="*", keyword="rem",
        description="Comment a line in a script",
        example="rem",
    )
    registrar.add(
        SleepCommand, category="*", keyword="sleep",
        description="Wait for a given amount of seconds",
        example="sleep 10",
        parameters=["[waitTime]: Number of seconds to wait for"],
    )
    registrar.add(
        PauseCommand, category="*", keyword="pause",
        description="Pause a script",
        example="pause",
    )
