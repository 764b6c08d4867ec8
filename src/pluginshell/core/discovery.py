# src/pluginshell/core/discovery.py
import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, List, Optional

from pluginshell.core.utils.path_utils import PathUtils

if TYPE_CHECKING:
    from pluginshell.core.command_registry import CommandRegistry

logger = logging.getLogger(__name__)

BUILTIN_LIBRARY_NAME = "pluginshell"
LIBRARY_GLOB = "*_commands.py"


def import_module_from_path(file_path: Path, module_name: Optional[str] = None) -> ModuleType:
    """
    Imports a Python source file that does not live on sys.path.

    The module is published in sys.modules under `module_name` (by default
    'pluginshell_libraries.<stem>'). A module that fails to execute is removed again.
    """
    name = module_name or f"pluginshell_libraries.{file_path.stem}"
    spec = importlib.util.spec_from_file_location(name, file_path)
    if not spec or not spec.loader:
        raise ImportError(f"Could not create spec for {file_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(name, None)
        raise
    return module


def discover_handler_modules() -> List[ModuleType]:
    """
    Scans the handlers directory and imports every '*_handler.py' module.

    Returns:
        List[ModuleType]: The modules exposing a register() entry point, sorted by path.
    """
    handlers_dir = PathUtils.get_handlers_dir()
    base_module_path = "pluginshell.core.handlers"
    modules: List[ModuleType] = []

    logger.debug("Scanning for handlers in: '%s'", handlers_dir)
    if not handlers_dir.is_dir():
        logger.warning("Handlers directory not found, skipping: %s", handlers_dir)
        return modules

    for file_path in sorted(handlers_dir.glob("**/*_handler.py")):
        relative_parts = list(file_path.relative_to(handlers_dir).parts)
        relative_parts[-1] = file_path.stem
        module_name = f"{base_module_path}.{'.'.join(relative_parts)}"
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            logger.error("Failed to load handler module %s: %s", file_path.name, e, exc_info=True)
            continue

        if callable(getattr(module, "register", None)):
            modules.append(module)
            logger.debug("Discovered handler module '%s'", module_name)
    return modules


def register_builtin_commands(registry: "CommandRegistry") -> int:
    """Registers every built-in command under one library entry."""
    total = 0
    for module in discover_handler_modules():
        total += registry.load_module(module, library_name=BUILTIN_LIBRARY_NAME)
    logger.debug("Successfully registered %d built-in commands.", total)
    return total


def load_library_dir(registry: "CommandRegistry", library_dir: Optional[Path] = None) -> int:
    """
    Loads every '*_commands.py' library found in the library directory.

    A library failing to load is reported and skipped.
    """
    directory = library_dir or PathUtils.get_library_dir()
    if not directory.is_dir():
        logger.debug("Library directory not found, skipping: %s", directory)
        return 0

    total = 0
    for file_path in sorted(directory.glob(LIBRARY_GLOB)):
        try:
            total += registry.load_library(file_path)
        except Exception as e:
            print(f"Failed to register commands in library {file_path.name}: {e}", file=sys.stderr)
            logger.error("Error registering command library %s", file_path, exc_info=True)
    return total
