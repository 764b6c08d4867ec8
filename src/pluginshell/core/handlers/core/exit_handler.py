# src/pluginshell/core/handlers/core/exit_handler.py
from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext


class ExitCommand(CommandBase):
    """Signals the shell to stop after the current line."""

    def execute_command(self, context: ExecutionContext) -> None:
        context.environment.exit_pending = True


def register(registrar) -> None:
    registrar.add(ExitCommand, category="*", keyword="exit", description="Quit the shell", example="exit")
    registrar.add(ExitCommand, category="*", keyword="quit", description="Alias to exit", hidden=True)
