# src/pluginshell/core/utils/helptext.py
from typing import Iterable, List

from pluginshell.model import CommandDescriptor

HEADER_WIDTH = 50
KEYWORD_COLUMN = 15
PARAMETER_INDENT = " " * 17

# The static part of 'help' without arguments
HEADER_HELP_TEXT = """
LINE SYNTAX
  %NAME%              Replaced by the value of the variable NAME (see 'set').
  "a b"               Keeps a and b together as one argument.
  A | B               The output lines of A become trailing arguments of B.
  A > file            Write the output of the line to file (overwrite).
  A >> file           Append the output of the line to file.
  category\\keyword    Run a command of another category without changing to it.

Type 'help <command>' for details on a command and 'cc <category>' to browse.
""".strip("\n")


def format_command_help(descriptor: CommandDescriptor) -> str:
    """
    Renders the detailed help block of one command, e.g.

     _[\\cc]_______________________________________________
      Description:.. Change the current command category
      Parameters:... CategoryName: The category to change to
      Example:...... cc [CategoryName]
    """
    category, keyword = descriptor.category, descriptor.keyword
    underline = "_" * max(1, HEADER_WIDTH - len(keyword) - len(category))
    lines = [
        "",
        f" _[{category}\\{keyword}]{underline}",
        "",
        f"  Description:.. {descriptor.description}",
    ]
    parameters = descriptor.parameters or ["none"]
    lines.append(f"  Parameters:... {parameters[0]}")
    lines.extend(f"{PARAMETER_INDENT}{p}" for p in parameters[1:])
    lines.append(f"  Example:...... {descriptor.example}")
    lines.append("")
    return "\n".join(lines)


def format_command_list(category: str, descriptors: Iterable[CommandDescriptor]) -> List[str]:
    """Renders the one-line-per-command listing of a category."""
    lines = ["Commands:", "", f"@\\{category}\\>"]
    for d in sorted(descriptors, key=lambda x: x.keyword.lower()):
        pad = " " * max(1, KEYWORD_COLUMN - len(d.keyword))
        lines.append(f"{d.keyword}:{pad}{d.description}")
    lines.append("")
    return lines
