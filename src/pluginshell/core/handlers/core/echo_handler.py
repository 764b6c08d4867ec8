# src/pluginshell/core/handlers/core/echo_handler.py
from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext


class EchoCommand(CommandBase):
    """Writes its arguments, joined by single spaces, as one output line."""

    def execute_command(self, context: ExecutionContext) -> None:
        self.output_info(" ".join(context.arguments))


def register(registrar) -> None:
    registrar.add(
        EchoCommand,
        category="*",
        keyword="echo",
        description="Write a message to output channel",
        example="echo Hello",
    )
