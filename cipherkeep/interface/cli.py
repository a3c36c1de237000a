#!/usr/bin/env python3
# cipherkeep/interface/cli.py
from __future__ import annotations

"""
Interactive input frontends.

Selection:
    1) prompt_toolkit on a terminal (completion + 0600 file history)
    2) plain input() when stdin is not a terminal (scripts, tests)

History records command lines only. Secrets are always read through the
echo-free passphrase prompt and never reach the history file.
"""

import sys
from pathlib import Path
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings

from cipherkeep.interface.completion import _split_current_token, suggest
from cipherkeep.security import create_private_file

PROMPT_TEXT = "cipherkeep> "
LOCKED_PROMPT_TEXT = "cipherkeep (locked)> "


class BaseCLI:
    """
    Base interface for CLI frontends, usable as a context manager.

    Subclasses implement get_line(); setup()/teardown() are optional.
    """

    def __init__(self, ctx: Any = None) -> None:
        self.ctx = ctx

    def prompt_text(self) -> str:
        session = getattr(self.ctx, "session", None)
        if session is not None and not session.is_unlocked:
            return LOCKED_PROMPT_TEXT
        return PROMPT_TEXT

    def setup(self) -> None:
        ...

    def get_line(self) -> str:
        return input(self.prompt_text())

    def teardown(self) -> None:
        ...

    def __enter__(self) -> "BaseCLI":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()


class _ShellCompleter(Completer):
    def __init__(self, ctx: Any) -> None:
        self._ctx = ctx

    def get_completions(self, document, complete_event):
        text_before_cursor = document.text_before_cursor
        _, current_prefix = _split_current_token(text_before_cursor)
        for word in suggest(text_before_cursor, self._ctx):
            # replace exactly the current token
            yield Completion(word, start_position=-len(current_prefix))


class PromptToolkitCLI(BaseCLI):
    """Line editor with history and live completion."""

    def __init__(
        self,
        ctx: Any = None,
        *,
        history_path: Path | None = None,
        enable_completion: bool = True,
    ) -> None:
        super().__init__(ctx)
        self._history_path = history_path
        self._enable_completion = enable_completion
        self._session: PromptSession | None = None

        kb = KeyBindings()

        @kb.add("backspace")
        def _(event):
            b = event.app.current_buffer
            if b.selection_state:
                b.delete_selection()
            else:
                b.delete_before_cursor(1)
            if self._enable_completion:
                b.start_completion(select_first=False)

        self._key_bindings = kb

    def setup(self) -> None:
        if self._history_path is not None:
            history = FileHistory(str(create_private_file(self._history_path)))
        else:
            history = InMemoryHistory()
        self._session = PromptSession(
            history=history,
            completer=_ShellCompleter(self.ctx) if self._enable_completion else None,
            complete_while_typing=self._enable_completion,
            key_bindings=self._key_bindings,
        )

    def get_line(self) -> str:
        if self._session is None:
            self.setup()
        return self._session.prompt(self.prompt_text())  # type: ignore[union-attr]


def make_cli(ctx: Any = None) -> BaseCLI:
    """Pick the frontend for the current stdin."""
    if not sys.stdin.isatty():
        return BaseCLI(ctx)
    config = getattr(ctx, "config", None)
    return PromptToolkitCLI(
        ctx,
        history_path=getattr(config, "history_file_path", None),
        enable_completion=getattr(config, "enable_completion", True),
    )
