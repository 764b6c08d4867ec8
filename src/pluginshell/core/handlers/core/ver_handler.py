# src/pluginshell/core/handlers/core/ver_handler.py
from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext
from pluginshell.core.utils.version import SHELL_NAME, get_shell_version


class VersionCommand(CommandBase):
    def execute_command(self, context: ExecutionContext) -> None:
        self.output_info("%s - %s", SHELL_NAME, get_shell_version())
        for library in context.environment.registry.libraries:
            if library.name != SHELL_NAME:
                self.output_info("%s - %s", library.name, library.version)


def register(registrar) -> None:
    registrar.add(
        VersionCommand,
        category="*",
        keyword="ver",
        description="Display version information",
        example="ver",
    )
