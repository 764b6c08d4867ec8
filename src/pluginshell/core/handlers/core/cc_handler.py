# src/pluginshell/core/handlers/core/cc_handler.py
import logging

from pluginshell.core.command_registry import ROOT_CATEGORY
from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext

logger = logging.getLogger(__name__)

PARENT_ALIASES = ("\\", "..")


class ChangeCategoryCommand(CommandBase):
    """
    Changes the current command category.

    '\\' and '..' go back to the root category. An unknown category raises
    ValueError and leaves the current category unchanged.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("A category name is required")
        category = context.arguments[0]
        if category in PARENT_ALIASES:
            category = ROOT_CATEGORY
        context.environment.current_category = category


def register(registrar) -> None:
    registrar.add(
        ChangeCategoryCommand,
        category="*",
        keyword="cc",
        description="Change category",
        example="cc [CategoryName]",
        parameters=["[CategoryName] = Name of category"],
    )
    registrar.add(ChangeCategoryCommand, category="*", keyword="cd", description="Alias to cc", hidden=True)
