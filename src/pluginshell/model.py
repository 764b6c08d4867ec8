# src/pluginshell/model.py (Shell Layer)
from enum import Enum
from typing import Any, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RunningMode(str, Enum):
    BATCH = "batch"
    INTERACTIVE = "interactive"


class ScriptStatus(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"
    ABORTED = "aborted"


class OutputMode(str, Enum):
    """Where a command writes its output for one invocation."""
    CONSOLE = "console"
    CAPTURE = "capture"
    FILE = "file"


class CommandDescriptor(BaseModel):
    """
    Immutable metadata describing one registered command.

    The category "*" makes the keyword reachable from every category and the
    empty category is the root namespace.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    category: str = Field(description="Namespace the keyword belongs to.")
    keyword: str = Field(description="Token a user types to select the command.")
    command_type: Type[Any] = Field(description="Class instantiated to run the command.")
    description: str = ""
    example: str = ""
    parameters: List[str] = Field(default_factory=list)
    requires_connection: bool = False
    hidden: bool = False

    @field_validator("keyword")
    @classmethod
    def _check_keyword(cls, value: str) -> str:
        if not value or any(ch.isspace() for ch in value) or "\\" in value:
            raise ValueError(f"Invalid command keyword: {value!r}")
        return value

    @field_validator("category")
    @classmethod
    def _check_category(cls, value: str) -> str:
        if "\\" in value or any(ch.isspace() for ch in value):
            raise ValueError(f"Invalid command category: {value!r}")
        return value

    @property
    def full_name(self) -> str:
        return f"{self.category}\\{self.keyword}"

    def create(self) -> Any:
        """Instantiates the command bound to this descriptor."""
        return self.command_type(self)


class LibraryInfo(BaseModel):
    name: str
    version: str = "0.0.0"
    path: Optional[str] = None
    command_count: int = 0


class ScriptLine(BaseModel):
    """One non-blank line of a script with its 1-based source line number."""
    model_config = ConfigDict(frozen=True)

    number: int
    text: str
