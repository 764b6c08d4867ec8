# src/pluginshell/core/parser.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from pluginshell.core.exceptions import CommandLineInterpretationError

logger = logging.getLogger(__name__)

# Pattern to identify variable expansion: %name%
VAR_PATTERN = re.compile(r"%([\w\-]+)%")
# A run of non-blank, non-quote characters, or a double-quoted span (closing quote optional)
TOKEN_PATTERN = re.compile(r'[^\s"]+|"[^"]*"?')

PIPE = "|"
REDIRECT = ">"
REDIRECT_APPEND = ">>"


@dataclass
class FlowControl:
    """A tokenized line split into pipeline segments plus its optional redirect."""
    segments: List[List[str]] = field(default_factory=list)
    redirect_path: Optional[str] = None
    append: bool = False


def expand_variables(text: str, variables: Mapping[str, str]) -> str:
    """
    Replaces every %NAME% with the value of the variable NAME.

    `variables` is expected to be case-insensitive (the environment uses a
    CaseInsensitiveDict); names that are not defined stay verbatim.
    """
    def repl(m: re.Match) -> str:
        name = m.group(1)
        if name in variables:
            value = variables[name]
            return "" if value is None else str(value)
        return m.group(0)

    return VAR_PATTERN.sub(repl, text)


def tokenize(line: Optional[str], variables: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Expands variables in a raw command line and splits it into arguments.

    Args:
        line (str): The raw input string.
        variables (Mapping[str, str]): Variables available for %NAME% expansion.

    Returns:
        List[str]: The arguments, quotes stripped, empty tokens dropped.
    """
    if not line:
        return []
    if variables is not None:
        line = expand_variables(line, variables)

    tokens = []
    for raw in TOKEN_PATTERN.findall(line):
        token = raw.replace('"', "").strip()
        if token:
            tokens.append(token)

    logger.debug("Parsed command line: %s", " ".join(f"[{t}]" for t in tokens))
    return tokens


def split_flow_control(args: List[str]) -> FlowControl:
    """
    Splits an argument list on its flow-control operators.

    The first '>' or '>>' token applies to the whole line: it and everything
    after it are removed from the pipeline. The rest is split on '|'.

    Raises:
        CommandLineInterpretationError: on a redirect without a path or a
            pipe without a command on one of its sides.
    """
    redirect_path = None
    append = False
    tokens = list(args)
    for i, token in enumerate(tokens):
        if token in (REDIRECT, REDIRECT_APPEND):
            if i + 1 >= len(tokens):
                raise CommandLineInterpretationError(
                    f"Missing output path after '{token}'", args
                )
            redirect_path = tokens[i + 1]
            append = token == REDIRECT_APPEND
            tokens = tokens[:i]
            break

    segments: List[List[str]] = [[]]
    for token in tokens:
        if token == PIPE:
            segments.append([])
        else:
            segments[-1].append(token)

    if len(segments) > 1 and any(not segment for segment in segments):
        raise CommandLineInterpretationError(f"Missing command around '{PIPE}'", args)

    return FlowControl(segments=segments, redirect_path=redirect_path, append=append)
