# src/pluginshell/core/handlers/core/set_handler.py
import re

from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext

# Variable names are the ones %NAME% expansion can reach
_NAME_PATTERN = re.compile(r"^[\w\-]+$")


class SetVarCommand(CommandBase):
    """
    Handles the 'set' command.

    Without arguments, lists every variable as NAME=value. Otherwise the
    first argument (an optional trailing '=' is dropped) names the variable
    and the remaining arguments, joined by spaces, become its value.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        env = context.environment
        if not context.arguments:
            for name, value in sorted(env.variables.items(), key=lambda kv: kv[0].lower()):
                self.output_info("%s=%s", name, value)
            return

        head = context.arguments[0]
        name, _, inline_value = head.partition("=")
        if not _NAME_PATTERN.match(name):
            raise ValueError("A variable name can only contain letters, numbers, dashes and underscores")

        value_parts = ([inline_value] if inline_value else []) + list(context.arguments[1:])
        env.set(name, " ".join(value_parts))
        self.output_debug("Variable %s set to '%s'", name, env.get(name))


def register(registrar) -> None:
    registrar.add(
        SetVarCommand,
        category="*",
        keyword="set",
        description="Set a variable value",
        example="set VarName= value",
        parameters=["VarName = Name of the variable", "value = Value of the variable (may be empty)"],
    )
