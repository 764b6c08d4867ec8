# src/pluginshell/core/managers/completion_manager.py
import logging
import os
from pathlib import Path
from typing import Iterable, List

from prompt_toolkit.completion import Completion
from prompt_toolkit.document import Document

from pluginshell.core.command_registry import CATEGORY_SEPARATOR, GLOBAL_CATEGORY, ROOT_CATEGORY
from pluginshell.core.commands.base import ScriptCommandBase
from pluginshell.core.context.environment import ShellEnvironment
from pluginshell.model import CommandDescriptor

logger = logging.getLogger(__name__)

PARENT_CATEGORY = ".."


def _looks_like_path(word: str) -> bool:
    return (
        word.startswith(("/", "~", "./", "../"))
        or (len(word) >= 2 and word[1] == ":")
        or (os.sep in word and os.sep != CATEGORY_SEPARATOR)
    )


class CompletionManager:
    """
    Generates completion suggestions for the word before the cursor:
    file system paths, %variables%, categories and command keywords.
    """

    def __init__(self, environment: ShellEnvironment):
        self.env = environment

    def generate_completions(self, document: Document) -> Iterable[Completion]:
        word = document.get_word_before_cursor(WORD=True)
        if document.text_before_cursor and document.text_before_cursor[-1].isspace():
            word = ""
        word = word.lstrip('"')

        try:
            if word.startswith("%"):
                yield from self._get_variable_completions(word)
            elif _looks_like_path(word):
                yield from self._get_path_completions(word)
            elif CATEGORY_SEPARATOR in word:
                category, _, prefix = word.partition(CATEGORY_SEPARATOR)
                yield from self._get_command_completions(category, prefix, "Command")
            else:
                yield from self._get_category_completions(word)
                yield from self._get_command_completions(self.env.current_category, word, "Command")
                if self.env.current_category != GLOBAL_CATEGORY:
                    yield from self._get_command_completions(GLOBAL_CATEGORY, word, "Global Command")
        except (OSError, ValueError) as e:
            logger.debug("Exception in command line completion handler: %s", e, exc_info=True)

    # --- Helper methods for different completion types ---

    def _get_category_completions(self, word: str) -> Iterable[Completion]:
        if not word and self.env.current_category != ROOT_CATEGORY:
            yield Completion(PARENT_CATEGORY, start_position=0, display_meta="Parent Category")
        for category in sorted(self.env.registry.list_categories(), key=str.lower):
            if category in (ROOT_CATEGORY, GLOBAL_CATEGORY):
                continue
            if category.lower().startswith(word.lower()):
                yield Completion(category, start_position=-len(word), display_meta="Category")

    def _get_command_completions(self, category: str, prefix: str, meta: str) -> Iterable[Completion]:
        registry = self.env.registry
        if not registry.category_exists(category, include_empty=True):
            return
        for descriptor in sorted(registry.list_commands(category), key=lambda d: d.keyword.lower()):
            if not self._is_completable(descriptor):
                continue
            if descriptor.keyword.lower().startswith(prefix.lower()):
                yield Completion(
                    descriptor.keyword,
                    start_position=-len(prefix),
                    display_meta=f"{meta}: {descriptor.description}" if descriptor.description else meta,
                )

    @staticmethod
    def _is_completable(descriptor: CommandDescriptor) -> bool:
        return not issubclass(descriptor.command_type, ScriptCommandBase)

    def _get_variable_completions(self, word: str) -> Iterable[Completion]:
        prefix = word[1:].lower()
        for name in sorted(self.env.variables.keys(), key=str.lower):
            if name.lower().startswith(prefix):
                yield Completion(f"%{name}%", start_position=-len(word), display_meta="Variable")

    def _get_path_completions(self, word: str) -> Iterable[Completion]:
        expanded = os.path.expanduser(word)
        directory, partial = os.path.split(expanded)
        base = Path(directory or ".")
        if not base.is_dir():
            return
        entries: List[Path] = sorted(base.iterdir(), key=lambda p: (not p.is_dir(), p.name.lower()))
        for entry in entries:
            if not entry.name.lower().startswith(partial.lower()):
                continue
            suffix = "/" if entry.is_dir() else ""
            yield Completion(
                entry.name + suffix,
                start_position=-len(partial),
                display_meta="Directory" if entry.is_dir() else "File",
            )
