# src/pluginshell/core/utils/path_utils.py
import logging
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package and user paths.
    """

    # --- Package specific paths

    @staticmethod
    def get_shell_package_root() -> Path:
        """Returns the directory of the installed 'pluginshell' package."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_handlers_dir() -> Path:
        return PathUtils.get_shell_package_root() / "core" / "handlers"

    @staticmethod
    def get_library_dir() -> Path:
        """
        Returns the default directory scanned for '*_commands.py' libraries.
        (e.g., /path/to/site-packages/pluginshell/libraries)
        """
        return PathUtils.get_shell_package_root() / "libraries"

    @staticmethod
    def get_startup_script() -> Path:
        return PathUtils.get_shell_package_root() / "startup.pshell"

    # --- User specific paths ---

    @staticmethod
    def get_shell_history_file() -> Path:
        """
        Returns the path to the shell history file in the user's home directory.
        (e.g., ~/.pluginshell_history)
        """
        return Path.home() / ".pluginshell_history"

    @staticmethod
    def get_temp_root() -> Path:
        return Path(tempfile.gettempdir())

    # --- Helper methods ---

    @staticmethod
    def resolve_user_path(value: str, base_dir: Path) -> Path:
        """Resolves a path typed by the user against a base directory."""
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = base_dir / path
        return path
