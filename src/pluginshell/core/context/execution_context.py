# src/pluginshell/core/context/execution_context.py
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from pluginshell.core.client_proxy import ClientProxy
from pluginshell.core.context.environment import ShellEnvironment

if TYPE_CHECKING:
    from pluginshell.core.script_engine import ScriptState


@dataclass
class ExecutionContext:
    """
    What one command invocation sees. A fresh instance is built for every
    execution, pipeline stages included, and commands must not keep it.
    """
    environment: ShellEnvironment
    client_proxy: ClientProxy
    arguments: List[str] = field(default_factory=list)
    script: Optional["ScriptState"] = None

    @property
    def in_script(self) -> bool:
        return self.script is not None
