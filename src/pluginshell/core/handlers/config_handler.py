# src/pluginshell/core/handlers/config_handler.py
import json
import logging

from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext
from pluginshell.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

USAGE = """
Usage:
  config list                Show the current configuration as JSON.
  config set <key> <value>   Set a config value for the session (e.g., more.page_size 40).
  config reset               Reload the configuration from settings.json.
""".strip("\n")


class ConfigCommand(CommandBase):
    """Handles the 'config' command for viewing and modifying session configuration."""

    def execute_command(self, context: ExecutionContext) -> None:
        args = context.arguments
        if not args:
            for line in USAGE.split("\n"):
                self.output_info(line)
            return

        action = args[0].lower()
        if action == "list":
            for line in json.dumps(config_manager.get_all(), indent=2).split("\n"):
                self.output_info(line)
            return

        if action == "set":
            if len(args) < 3:
                raise ValueError("Usage: config set <key> <value>")
            key_path, value = args[1], " ".join(args[2:])
            if not config_manager.set_nested(key_path, value):
                raise ValueError(f"Failed to set config value for key '{key_path}'")
            new_value = config_manager.get_nested(key_path)
            self.output_info("Config updated: %s = %s (type: %s)", key_path, new_value, type(new_value).__name__)
            return

        if action == "reset":
            config_manager.reset()
            self.output_info("Configuration has been reset to the values from settings.json.")
            return

        raise ValueError(f"Unknown config action: '{args[0]}'")


def register(registrar) -> None:
    registrar.add(
        ConfigCommand, category="*", keyword="config",
        description="Show or change the shell configuration",
        example="config set more.page_size 40",
        parameters=["list", "set <key> <value>", "reset"],
    )
