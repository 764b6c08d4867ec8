# src/pluginshell/core/handlers/core/cls_handler.py
import os
import platform

from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext


class ClsCommand(CommandBase):
    """
    Clear the terminal screen (like `cls` on Windows or `clear` on Unix).
    Does nothing when the shell is not attached to a console.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        if not context.environment.run_in_console:
            return
        if "windows" in platform.system().lower():
            os.system("cls")
        else:
            os.system("clear")


def register(registrar) -> None:
    registrar.add(ClsCommand, category="*", keyword="cls", description="Clear screen", example="cls")
