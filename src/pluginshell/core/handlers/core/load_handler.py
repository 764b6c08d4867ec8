# src/pluginshell/core/handlers/core/load_handler.py
from pathlib import Path

from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext
from pluginshell.core.utils.path_utils import PathUtils
from pluginshell.core.utils.version import describe_libraries


class LoadCommand(CommandBase):
    """
    Handles the 'load' command.

    Imports a command library from a Python file and registers its
    commands. Relative paths are resolved against %CD%.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("Library path not specified")

        env = context.environment
        base_dir = Path(env.get("CD") or ".")
        path = PathUtils.resolve_user_path(context.arguments[0], base_dir)

        count = env.registry.load_library(path)
        env.set("LIBS", describe_libraries(env.registry.libraries))
        if count == 0:
            self.output_info("No commands found in %s", path.name)
        else:
            self.output_info("Successfully registered %d command(s)", count)


def register(registrar) -> None:
    registrar.add(
        LoadCommand,
        category="*",
        keyword="load",
        description="Load a command library and register available commands",
        example="load ~/libs/my_commands.py",
        parameters=["Library path"],
    )
