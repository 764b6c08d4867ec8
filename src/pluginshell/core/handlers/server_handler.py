# src/pluginshell/core/handlers/server_handler.py
from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext

SERVERS_CATEGORY = "Servers"


class LoginCommand(CommandBase):
    """Opens a session through the connection proxy, closing any open one first."""

    def execute_command(self, context: ExecutionContext) -> None:
        proxy = context.client_proxy
        if proxy.is_logged_in:
            proxy.disconnect()
            self.output_debug("Client logged off")
        proxy.connect(list(context.arguments))
        self.output_debug("Client logged in as %s on %s", proxy.connected_user, proxy.server_list)


class LogoutCommand(CommandBase):
    def execute_command(self, context: ExecutionContext) -> None:
        context.client_proxy.disconnect()
        self.output_info("Client logged off")


def register(registrar) -> None:
    registrar.add(
        LoginCommand, category=SERVERS_CATEGORY, keyword="login",
        description="Log on to server",
        example="login [*|domain\\username,password] [Server]<;Server2;Server3>",
    )
    registrar.add(
        LogoutCommand, category=SERVERS_CATEGORY, keyword="logout",
        description="Logout",
        example="logout",
        requires_connection=True,
    )
