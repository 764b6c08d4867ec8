# src/pluginshell/core/script_engine.py
import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

from pluginshell.core.exceptions import CommandExecutionError, ShellError
from pluginshell.model import ScriptLine, ScriptStatus

if TYPE_CHECKING:
    from pluginshell.core.commands.base import CommandBase
    from pluginshell.core.context.environment import ShellEnvironment

logger = logging.getLogger(__name__)

REM_KEYWORD = "rem"


def is_comment(text: str) -> bool:
    stripped = text.strip()
    head = stripped[:len(REM_KEYWORD)].lower()
    return head == REM_KEYWORD and (len(stripped) == len(REM_KEYWORD) or stripped[len(REM_KEYWORD)].isspace())


class ScriptState:
    """
    A loaded script and the cursor running through it.

    The cursor starts before the first line; `move_next()` advances it.
    Flow-control commands receive this object through their execution
    context and may move the cursor (goto) or change the error policy
    (onerror).
    """

    def __init__(self, path: Union[str, Path], lines: List[ScriptLine], break_on_error: bool = False):
        self.path = Path(path)
        self.lines = lines
        self.break_on_error = break_on_error
        self.status = ScriptStatus.RUNNING
        self._index = -1

    @classmethod
    def load(cls, path: Union[str, Path], encoding: str = "utf-8") -> "ScriptState":
        """Reads the whole file, keeping non-blank lines with their 1-based numbers."""
        script_path = Path(path).resolve()
        with open(script_path, "r", encoding=encoding) as f:
            lines = [
                ScriptLine(number=number, text=text.rstrip("\r\n"))
                for number, text in enumerate(f, start=1)
                if text.strip()
            ]
        logger.debug("Loaded script %s (%d lines)", script_path, len(lines))
        return cls(script_path, lines)

    @property
    def current(self) -> Optional[ScriptLine]:
        if 0 <= self._index < len(self.lines):
            return self.lines[self._index]
        return None

    @property
    def position(self) -> int:
        return self._index

    def move_next(self) -> bool:
        if self._index < len(self.lines):
            self._index += 1
        return self._index < len(self.lines)

    def reset(self) -> None:
        self._index = -1

    def goto(self, line_number: Union[int, str]) -> None:
        """
        Resets the cursor and advances it so that the next step runs the
        line_number-th kept (non-blank) line. Past the last line, the script ends.

        Raises:
            ValueError: if line_number is not an integer.
        """
        try:
            target = int(line_number)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid line number: {line_number!r}") from None

        self.reset()
        for _ in range(min(max(target - 1, 0), len(self.lines))):
            self.move_next()
        logger.debug("Script cursor moved before line %d of %s", target, self.path)

    def __repr__(self) -> str:
        return f"<ScriptState path={self.path} position={self._index} status={self.status.value}>"


class ScriptEngine:
    """Drives the interpreter one script line at a time."""

    def __init__(self, environment: "ShellEnvironment"):
        self.environment = environment

    def run(self, script: ScriptState, command: "CommandBase") -> ScriptStatus:
        """
        Runs a script to completion on behalf of `command` (the 'run' command).

        Returns:
            ScriptStatus: FINISHED, or ABORTED when cancellation was requested.

        Raises:
            CommandExecutionError: when a line fails and the script breaks on error.
        """
        script.status = ScriptStatus.RUNNING
        while True:
            if self.environment.cancel_pending:
                script.status = ScriptStatus.ABORTED
                logger.debug("Script %s aborted at position %d", script.path, script.position)
                return script.status
            if not script.move_next():
                break

            line = script.current
            logger.debug("Running script line: %d - %s", line.number, line.text)
            if is_comment(line.text):
                logger.debug('Line %d "%s" commented out', line.number, line.text)
                continue

            try:
                self.environment.interpret_script_line(line, script)
            except ShellError as ex:
                if script.break_on_error:
                    script.status = ScriptStatus.ABORTED
                    raise CommandExecutionError(
                        command,
                        f'Error in line {line.number} in script {script.path}: "{line.text}"'
                    ) from ex
                command.output_error("Error in script %s, line %d: %s", str(script.path), line.number, ex)
                logger.debug("Error in script %s, line %d", script.path, line.number, exc_info=True)

        script.status = ScriptStatus.FINISHED
        return script.status
