# src/pluginshell/core/command_registry.py
import logging
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, Union

from requests.structures import CaseInsensitiveDict

from pluginshell.core.client_proxy import ClientProxyFactory, NullClientProxyFactory
from pluginshell.core.discovery import import_module_from_path
from pluginshell.core.exceptions import UnknownCommandError
from pluginshell.core.utils.rw_lock import ReadWriteLock
from pluginshell.model import CommandDescriptor, LibraryInfo

logger = logging.getLogger(__name__)

ROOT_CATEGORY = ""
GLOBAL_CATEGORY = "*"
CATEGORY_SEPARATOR = "\\"


class Registrar:
    """
    Collects what one command library declares from its `register()` entry point.

    A library module looks like:

        def register(registrar):
            registrar.add(EchoCommand, category="*", keyword="echo",
                          description="Write a message to output channel",
                          example="echo Hello")
    """

    def __init__(self) -> None:
        self.descriptors: List[CommandDescriptor] = []
        self.client_proxy_factories: List[ClientProxyFactory] = []

    def add(self, command_type: Type[Any], *, category: str, keyword: str, **info: Any) -> CommandDescriptor:
        descriptor = CommandDescriptor(
            category=category, keyword=keyword, command_type=command_type, **info
        )
        self.descriptors.append(descriptor)
        return descriptor

    def set_client_proxy_factory(self, factory: ClientProxyFactory) -> None:
        self.client_proxy_factories.append(factory)


class CommandRegistry:
    """
    Owns the category -> keyword -> descriptor table.

    Both levels are case-insensitive. The root category ("") and the global
    wildcard category ("*") always exist. Reads run concurrently, registration
    takes the lock exclusively.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._table: CaseInsensitiveDict = CaseInsensitiveDict()
        self._table[ROOT_CATEGORY] = CaseInsensitiveDict()
        self._table[GLOBAL_CATEGORY] = CaseInsensitiveDict()
        self._libraries: Dict[str, LibraryInfo] = {}
        self._client_proxy_factory: Optional[ClientProxyFactory] = None

    # --- Registration ---

    def load_module(
            self,
            module: ModuleType,
            library_name: Optional[str] = None,
            library_path: Optional[Union[str, Path]] = None,
    ) -> int:
        """
        Runs a module's `register(registrar)` entry point and inserts what it declared.

        Returns:
            int: The number of commands actually registered.
        """
        register = getattr(module, "register", None)
        if not callable(register):
            raise ValueError(f"Module '{module.__name__}' has no register() entry point")

        registrar = Registrar()
        register(registrar)

        name = library_name or module.__name__
        version = str(getattr(module, "__version__", "0.0.0"))
        path = str(library_path) if library_path else getattr(module, "__file__", None)

        with self._lock.write():
            return self._insert(registrar, name, version, path)

    def load_library(self, path: Union[str, Path]) -> int:
        """Imports a command library from a Python file and registers its commands."""
        if not path:
            raise ValueError("The path provided to load a command library from is empty")
        library_path = Path(path).resolve()
        if not library_path.is_file():
            raise ValueError(f"File {library_path} doesn't exist")

        module = import_module_from_path(library_path)
        return self.load_module(module, library_name=library_path.stem, library_path=library_path)

    def _insert(self, registrar: Registrar, name: str, version: str, path: Optional[str]) -> int:
        count = 0
        for factory in registrar.client_proxy_factories:
            if self._client_proxy_factory is not None and not isinstance(
                    self._client_proxy_factory, NullClientProxyFactory):
                logger.warning(
                    "An instance of '%s' is already registered as the client proxy factory "
                    "and will be overwritten by an instance of '%s' from '%s'",
                    type(self._client_proxy_factory).__name__, type(factory).__name__, name
                )
            self._client_proxy_factory = factory
            logger.debug("Client proxy factory %s successfully registered", type(factory).__name__)

        for descriptor in registrar.descriptors:
            commands = self._table.get(descriptor.category)
            if commands is None:
                commands = CaseInsensitiveDict()
                self._table[descriptor.category] = commands
            if descriptor.keyword in commands:
                logger.warning(
                    "A command with keyword '%s' is already registered for category '%s'",
                    descriptor.keyword, descriptor.category
                )
                continue
            commands[descriptor.keyword] = descriptor
            count += 1
            logger.debug("Command %s successfully registered", descriptor.full_name)

        if count or registrar.client_proxy_factories:
            library = self._libraries.get(name)
            if library is None:
                self._libraries[name] = LibraryInfo(
                    name=name, version=version, path=path, command_count=count
                )
            else:
                library.command_count += count
        return count

    # --- Lookups ---

    def resolve(self, category: str, keyword: str) -> Optional[CommandDescriptor]:
        """
        Looks a keyword up: exact category, then "*", then an explicit
        'category\\keyword' token.
        """
        with self._lock.read():
            return self._resolve(category, keyword)

    def _resolve(self, category: str, keyword: str) -> Optional[CommandDescriptor]:
        if category is None:
            raise ValueError("category must not be None")
        if keyword is None:
            raise ValueError("keyword must not be None")

        commands = self._table.get(category)
        if commands is not None and keyword in commands:
            return commands[keyword]

        if keyword in self._table[GLOBAL_CATEGORY]:
            return self._table[GLOBAL_CATEGORY][keyword]

        parts = keyword.split(CATEGORY_SEPARATOR)
        if len(parts) == 2:
            explicit = self._table.get(parts[0])
            if explicit is not None and parts[1] in explicit:
                return explicit[parts[1]]
        return None

    def resolve_command(self, category: str, args: Sequence[str]) -> Tuple[CommandDescriptor, List[str]]:
        """
        Finds the first argument naming a command and removes it.

        Returns:
            The descriptor and the remaining arguments, in their original order.

        Raises:
            UnknownCommandError: when no argument resolves.
        """
        with self._lock.read():
            for index, token in enumerate(args):
                descriptor = self._resolve(category, token)
                if descriptor is not None:
                    remaining = list(args[:index]) + list(args[index + 1:])
                    return descriptor, remaining
        raise UnknownCommandError(args)

    def command_exists(self, category: str, keyword: str) -> bool:
        return self.resolve(category, keyword) is not None

    def find_categories(self, keyword: str) -> List[str]:
        """Returns every category declaring the given keyword."""
        with self._lock.read():
            return [name for name, commands in self._table.items() if keyword in commands]

    def category_exists(self, name: str, include_empty: bool = False) -> bool:
        if name is None:
            raise ValueError("category must not be None")
        with self._lock.read():
            if name not in self._table:
                return False
            if include_empty:
                return True
            return name == ROOT_CATEGORY or bool(self._browsable(name))

    def list_categories(self, include_empty: bool = False) -> List[str]:
        with self._lock.read():
            if include_empty:
                return list(self._table.keys())
            return [
                name for name in self._table.keys()
                if name == ROOT_CATEGORY or self._browsable(name)
            ]

    def list_commands(self, category: str, include_hidden: bool = False) -> List[CommandDescriptor]:
        if category is None:
            raise ValueError("category must not be None")
        with self._lock.read():
            if category not in self._table:
                raise ValueError(f"Unknown command category: {category}")
            if include_hidden:
                return list(self._table[category].values())
            return self._browsable(category)

    def _browsable(self, category: str) -> List[CommandDescriptor]:
        return [d for d in self._table[category].values() if not d.hidden]

    # --- Libraries & proxy factory ---

    @property
    def libraries(self) -> List[LibraryInfo]:
        with self._lock.read():
            return list(self._libraries.values())

    @property
    def client_proxy_factory(self) -> ClientProxyFactory:
        with self._lock.read():
            if self._client_proxy_factory is not None:
                return self._client_proxy_factory
        with self._lock.write():
            if self._client_proxy_factory is None:
                self._client_proxy_factory = NullClientProxyFactory()
            return self._client_proxy_factory

    def __repr__(self) -> str:
        return f"<CommandRegistry categories={len(self._table)} libraries={len(self._libraries)}>"
