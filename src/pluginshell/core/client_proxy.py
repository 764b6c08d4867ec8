# src/pluginshell/core/client_proxy.py
import abc
from typing import List


class ClientProxy(metaclass=abc.ABCMeta):
    """
    Connection to the server(s) some commands operate on.

    The shell resolves one proxy at start-up through the factory found by the
    command registry and hands it to every command it runs.
    """

    @property
    @abc.abstractmethod
    def is_logged_in(self) -> bool:
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def connected_user(self) -> str:
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def server_list(self) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def connect(self, args: List[str]) -> None:
        """Opens a session. Implementations raise ServerConnectionError on failure."""
        raise NotImplementedError

    @abc.abstractmethod
    def disconnect(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Releases resources held by the proxy."""


class NullClientProxy(ClientProxy):
    """Proxy used when no command library provides a factory."""

    @property
    def is_logged_in(self) -> bool:
        return False

    @property
    def connected_user(self) -> str:
        return ""

    @property
    def server_list(self) -> str:
        return ""

    def connect(self, args: List[str]) -> None:
        raise NotImplementedError(
            "No client proxy factory was provided: the connect method is not available."
        )

    def disconnect(self) -> None:
        raise NotImplementedError(
            "No client proxy factory was provided: the disconnect method is not available."
        )


class ClientProxyFactory(metaclass=abc.ABCMeta):
    """Capability a command library implements to supply the shell's proxy."""

    @abc.abstractmethod
    def create_proxy(self) -> ClientProxy:
        raise NotImplementedError


class NullClientProxyFactory(ClientProxyFactory):
    def create_proxy(self) -> ClientProxy:
        return NullClientProxy()
