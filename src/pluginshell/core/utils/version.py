# src/pluginshell/core/utils/version.py
from importlib import metadata
from typing import Iterable

from pluginshell.model import LibraryInfo

SHELL_NAME = "pluginshell"


def get_shell_version() -> str:
    try:
        return metadata.version(SHELL_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


def describe_libraries(libraries: Iterable[LibraryInfo]) -> str:
    """Value of the LIBS variable: '"name, version";' for the shell and each library."""
    entries = [f'"{SHELL_NAME}, {get_shell_version()}";']
    entries.extend(f'"{lib.name}, {lib.version}";' for lib in libraries if lib.name != SHELL_NAME)
    return "".join(entries)
