# src/pluginshell/core/handlers/filter_handler.py
import logging
import re
import shutil
from pathlib import Path
from typing import List, Optional

import pandas as pd

from pluginshell.core.commands.base import CommandBase
from pluginshell.core.context.execution_context import ExecutionContext
from pluginshell.core.managers.config_manager import config_manager
from pluginshell.core.utils.args import get_first_argument
from pluginshell.model import OutputMode

logger = logging.getLogger(__name__)

DATE_FORMAT = r"[0-9]{1,4}[/\-.][0-9]{1,4}[/\-.][0-9]{1,4}"
_DATE_VALUE = re.compile(rf"(?i)(?<![a-z])d=(?P<val>{DATE_FORMAT})")
MORE_PROMPT = "-- More -- (Enter: next page, q: quit) "


class CountCommand(CommandBase):
    """Outputs the number of arguments it received (typically piped lines)."""

    def execute_command(self, context: ExecutionContext) -> None:
        self.output_info(str(len(context.arguments)))


class LimitCommand(CommandBase):
    def execute_command(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("This command doesn't take zero argument")
        try:
            limit = int(context.arguments[0])
        except ValueError:
            raise ValueError("Argument must be a valid integer value") from None

        for item in context.arguments[1:1 + max(0, limit)]:
            if context.environment.cancel_pending:
                return
            self.output_info(item)


class GrepCommand(CommandBase):
    """
    Handles 'grep <pattern> [data...]'.

    For every data argument matching the regular expression, outputs the
    matched part of it.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        if not context.arguments:
            raise ValueError("The provided argument list must contain at least one element.")
        pattern = re.compile(context.arguments[0])
        for item in context.arguments[1:]:
            if context.environment.cancel_pending:
                return
            m = pattern.search(item)
            if m:
                self.output_info(m.group(0))


def parse_date(value: Optional[str]) -> Optional[pd.Timestamp]:
    """Parses dd/mm/yyyy-like values; returns None when the value is not a valid date."""
    if not value:
        return None
    parsed = pd.to_datetime(value, dayfirst=True, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed


class FilterByDateCommand(CommandBase):
    """
    Keeps the arguments carrying a 'd=<date>' value, optionally bounded by
    'min=<date>' and 'max=<date>' (both inclusive).
    """

    def execute_command(self, context: ExecutionContext) -> None:
        args = context.arguments
        min_date = parse_date(get_first_argument(args, "min", DATE_FORMAT))
        max_date = parse_date(get_first_argument(args, "max", DATE_FORMAT))

        for item in args:
            if context.environment.cancel_pending:
                return
            m = _DATE_VALUE.search(item)
            if not m:
                continue
            date = parse_date(m.group("val"))
            if date is None:
                continue
            if min_date is not None and date < min_date:
                continue
            if max_date is not None and date > max_date:
                continue
            self.output_info(item)


class MoreCommand(CommandBase):
    """
    Pages through its arguments (or the lines of a file given as the only
    argument). Paging only happens on an interactive console; otherwise every
    line is written straight through.
    """

    def execute_command(self, context: ExecutionContext) -> None:
        lines: List[str] = list(context.arguments)
        if len(lines) == 1 and Path(lines[0]).is_file():
            with open(lines[0], "r", encoding="utf-8", errors="replace") as f:
                lines = [line.rstrip("\r\n") for line in f]

        env = context.environment
        if (not env.is_interactive or not env.run_in_console
                or self.output_mode != OutputMode.CONSOLE):
            for line in lines:
                self.output_info(line)
            return

        page_size = self._page_size()
        for start in range(0, len(lines), page_size):
            if env.cancel_pending:
                return
            for line in lines[start:start + page_size]:
                self.output_info(line)
            if start + page_size < len(lines):
                answer = env.wait_for_user(MORE_PROMPT)
                if answer.strip().lower() == "q":
                    return

    @staticmethod
    def _page_size() -> int:
        configured = config_manager.get_nested("more.page_size")
        if configured:
            return max(1, int(configured))
        return max(1, shutil.get_terminal_size().lines - 2)


def register(registrar) -> None:
    registrar.add(
        CountCommand, category="*", keyword="count",
        description="count the number of elements returned by a command",
        example="help | count",
    )
    registrar.add(
        LimitCommand, category="*", keyword="limit",
        description="limit the number of elements returned by a command",
        example="help | limit 10",
        parameters=["The number of element to limit the list to"],
    )
    registrar.add(
        GrepCommand, category="*", keyword="grep",
        description="Filter a command output according to a regular expression",
        example="grep [pattern] [data]",
    )
    registrar.add(
        FilterByDateCommand, category="*", keyword="fdate",
        description="Filter the input based on a date",
        example="fdate d=01/01/2012 [d=02/01/2012 d=...] [min=10/12/2011] [max=10/01/2012]",
        parameters=[
            "d=dd/mm/yyyy: The date value to which the filter is applied.",
            "min=dd/mm/yyyy: The date to which the filtered dates should be superior or equal.",
            "max=dd/mm/yyyy: The date to which the filtered dates should be inferior or equal.",
        ],
    )
    registrar.add(
        MoreCommand, category="*", keyword="more",
        description="Pages through the output of a piped command",
        example="help | more",
    )
