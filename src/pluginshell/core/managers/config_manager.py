# src/pluginshell/core/managers/config_manager.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pluginshell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"
_TRUE_WORDS = ("true", "1", "yes", "on")
_FALSE_WORDS = ("false", "0", "no", "off")


class ConfigManager:
    """
    Process-wide shell configuration.

    Values come from the settings.json shipped inside the package. `set_nested`
    changes them for the running session only; `reset` re-reads the file.
    Keys are dotted paths such as 'more.page_size'.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    @property
    def settings_path(self) -> Path:
        return PathUtils.get_shell_package_root() / SETTINGS_FILE_NAME

    def get_all(self) -> Dict[str, Any]:
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        node: Any = self._config
        for key in key_path.split('.'):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return default if node is None else node

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Stores a value under a dotted key, creating missing sections.

        A value replacing an existing one takes that value's type when it can
        be converted ('40' stays an int for 'more.page_size'). Sections cannot
        be replaced by a plain value.

        Returns:
            bool: False when the key path runs into a value or names a section.
        """
        located = self._locate_parent(key_path)
        if located is None:
            return False
        section, key = located

        current = section.get(key)
        if isinstance(current, dict):
            logger.error("Cannot overwrite section '%s' with a value.", key_path)
            return False
        if current is not None:
            try:
                value = _cast_like(current, value)
            except (ValueError, TypeError):
                logger.warning(
                    "Could not cast new value for '%s' to type %s. Storing as string.",
                    key_path, type(current).__name__
                )

        section[key] = value
        logger.info("Configuration updated: %s = %s", key_path, value)
        return True

    def reset(self) -> None:
        """Replaces the in-memory configuration with the content of settings.json."""
        self._config = _read_settings(self.settings_path)

    def _locate_parent(self, key_path: str) -> Optional[Tuple[Dict[str, Any], str]]:
        keys: List[str] = key_path.split('.')
        section = self._config
        for key in keys[:-1]:
            section = section.setdefault(key, {})
            if not isinstance(section, dict):
                logger.error("Cannot set value: '%s' is not a section.", key)
                return None
        return section, keys[-1]


def _read_settings(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        logger.warning("%s not found at %s. Using empty config.", SETTINGS_FILE_NAME, path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            settings = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("Failed to load %s: %s", path, e, exc_info=True)
        return {}
    if not isinstance(settings, dict):
        logger.error("%s must contain a JSON object, found %s", path, type(settings).__name__)
        return {}
    logger.debug("Configuration loaded from %s", path)
    return settings


def _cast_like(original: Any, value: Any) -> Any:
    """Converts `value` to the type of `original`; booleans accept on/off style words."""
    if isinstance(original, bool) and isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
        raise ValueError(value)
    return type(original)(value)


# The global singleton instance that the entire shell uses.
config_manager = ConfigManager()
