# src/pluginshell/core/context/environment.py
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from requests.structures import CaseInsensitiveDict

from pluginshell.core.cancellation import CancellationState
from pluginshell.core.command_registry import ROOT_CATEGORY, CommandRegistry
from pluginshell.model import RunningMode

# Prevent circular imports during runtime, but retain type hinting for static analysis
if TYPE_CHECKING:
    from pluginshell.core.managers.temp_folder_manager import TempFolder, TempFolderManager
    from pluginshell.core.xngine import ExecuteEngine
    from pluginshell.model import ScriptLine

logger = logging.getLogger(__name__)


class ShellEnvironment:
    """
    Mutable per-shell state shared by the interpreter and every command it runs:
    current category, variables, running mode and the exit flag.

    The interpreter and the temporary folder manager are attached by the Shell
    once they exist.
    """

    def __init__(
            self,
            registry: CommandRegistry,
            cancellation: Optional[CancellationState] = None,
            run_in_console: bool = True,
            input_fn: Callable[[str], str] = input,
    ):
        self.registry = registry
        self.cancellation = cancellation or CancellationState()
        self.variables: CaseInsensitiveDict = CaseInsensitiveDict()
        self.running_mode = RunningMode.INTERACTIVE
        self.exit_pending = False
        self.run_in_console = run_in_console
        self.input_fn = input_fn
        self.interpreter: Optional["ExecuteEngine"] = None
        self.temp_folders: Optional["TempFolderManager"] = None
        self._current_category = ROOT_CATEGORY

    @property
    def current_category(self) -> str:
        return self._current_category

    @current_category.setter
    def current_category(self, value: str) -> None:
        if value is None:
            raise ValueError("Command category must not be None")
        if not self.registry.category_exists(value):
            raise ValueError(f"Command category {value} does not exist")
        self._current_category = value
        logger.debug("Current category set to '%s'", value)

    @property
    def cancel_pending(self) -> bool:
        return self.cancellation.is_cancel_pending()

    @property
    def is_interactive(self) -> bool:
        return self.running_mode == RunningMode.INTERACTIVE

    def set(self, key: str, value: Any) -> None:
        self.variables[key] = "" if value is None else str(value)

    def get(self, key: str) -> Optional[str]:
        return self.variables.get(key)

    def interpret_script_line(self, line: "ScriptLine", script: Any = None) -> None:
        """Runs one line of a script through the interpreter, with the script attached."""
        if self.interpreter is None:
            raise RuntimeError("No interpreter is attached to this environment")
        self.interpreter.interpret_text(line.text, script)

    def get_temp_folder(self) -> "TempFolder":
        if self.temp_folders is None:
            raise RuntimeError("No temporary folder manager is attached to this environment")
        return self.temp_folders.create()

    def wait_for_user(self, prompt: str = "Press Enter to continue...") -> str:
        return self.input_fn(prompt)

    def __repr__(self) -> str:
        return (
            f"<ShellEnvironment category='{self._current_category}' mode={self.running_mode.value} "
            f"vars_count={len(self.variables)}>"
        )
