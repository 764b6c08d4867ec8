# src/pluginshell/core/utils/args.py
import argparse
import re
from typing import List, Optional, Sequence


def argument_exists(args: Sequence[str], name: str) -> bool:
    """Case-insensitive test for a flag such as '-utf16'."""
    lowered = name.lower()
    return any(a.lower() == lowered for a in args)


def remove_flag(args: List[str], name: str) -> bool:
    """Removes every occurrence of a flag (case-insensitive). Returns True if one was found."""
    lowered = name.lower()
    before = len(args)
    args[:] = [a for a in args if a.lower() != lowered]
    return len(args) != before


def get_all_arguments(args: Sequence[str], name: str, value_format: str = ".*") -> List[str]:
    """
    Returns the values of every 'name=value' argument whose value matches `value_format`.

    >>> get_all_arguments(["d=01/02/2012", "x", "D=03/04/2012"], "d", r"[\\d/]+")
    ['01/02/2012', '03/04/2012']
    """
    expression = re.compile(rf"(?i)^(?:{name})=(?P<val>{value_format})$")
    values = []
    for arg in args:
        m = expression.match(arg)
        if m:
            values.append(m.group("val"))
    return values


def get_first_argument(args: Sequence[str], name: str, value_format: str = ".*",
                       default: Optional[str] = None) -> Optional[str]:
    values = get_all_arguments(args, name, value_format)
    return values[0] if values else default


class NoExitArgumentParser(argparse.ArgumentParser):
    """Argument parser that raises ValueError instead of exiting the shell."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("add_help", False)
        super().__init__(*args, **kwargs)

    def error(self, message):
        raise ValueError(message)

    def exit(self, status=0, message=None):
        raise ValueError(message or "Argument parsing stopped")


def normalize_flags(args: Sequence[str]) -> List[str]:
    """Lower-cases '-flag' arguments (keeping any '=value' part) so flags match case-insensitively."""
    normalized = []
    for arg in args:
        if arg.startswith("-") and len(arg) > 1:
            name, sep, value = arg.partition("=")
            normalized.append(name.lower() + sep + value)
        else:
            normalized.append(arg)
    return normalized
