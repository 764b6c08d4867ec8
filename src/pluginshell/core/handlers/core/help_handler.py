# src/pluginshell/core/handlers/core/help_handler.py
from typing import Iterable

from pluginshell.core.command_registry import ROOT_CATEGORY
from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext
from pluginshell.core.utils.args import argument_exists, remove_flag
from pluginshell.core.utils.helptext import HEADER_HELP_TEXT, format_command_help, format_command_list
from pluginshell.model import CommandDescriptor

DETAILS_FLAG = "-d"


class HelpCommand(CommandBase):
    """
    Handles the 'help' command.

    'help <keyword>' shows the detailed help of a command, 'help <category>'
    lists a category and 'help' alone lists the current category (or every
    category from the root). '-d' shows detailed help for every listed command.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        args = list(context.arguments)
        detailed = argument_exists(args, DETAILS_FLAG)
        remove_flag(args, DETAILS_FLAG)

        env = context.environment
        registry = env.registry
        if args:
            topic = args[0]
            descriptor = registry.resolve(env.current_category, topic)
            if descriptor is not None:
                self._show_command(descriptor)
                return
            if registry.category_exists(topic, include_empty=True):
                self._show_category(topic, registry.list_commands(topic), detailed)
                return
            # a keyword of another category: show it wherever it is declared
            elsewhere = registry.find_categories(topic)
            if elsewhere:
                for category in sorted(elsewhere, key=str.lower):
                    self._show_command(registry.resolve(category, topic))
                return

        if env.current_category == ROOT_CATEGORY:
            for line in HEADER_HELP_TEXT.split("\n"):
                self.output_info(line)
            self.output_info()
            for category in sorted(registry.list_categories(), key=str.lower):
                self._show_category(category, registry.list_commands(category), detailed)
        else:
            self._show_category(env.current_category, registry.list_commands(env.current_category), detailed)

    def _show_category(self, category: str, descriptors: Iterable[CommandDescriptor], detailed: bool) -> None:
        if detailed:
            self.output_info("@\\%s\\>", category)
            for descriptor in sorted(descriptors, key=lambda d: d.keyword.lower()):
                self._show_command(descriptor)
            return
        for line in format_command_list(category, descriptors):
            self.output_info(line)

    def _show_command(self, descriptor: CommandDescriptor) -> None:
        for line in format_command_help(descriptor).split("\n"):
            self.output_info(line)


def register(registrar) -> None:
    registrar.add(
        HelpCommand,
        category="*",
        keyword="help",
        description="Show help",
        example="help [CommandName]",
        parameters=["[CommandName] = Name of the command to get help for", "-d = Show detailed help"],
    )
