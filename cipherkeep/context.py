#!/usr/bin/env python3
# cipherkeep/context.py
from __future__ import annotations

"""
Runtime wiring shared by every command: config, session, store, and the
external collaborators (passphrase prompt, clipboard, editor).
"""

import getpass
import logging
from dataclasses import dataclass, field
from typing import Callable

from cipherkeep.errors import ConfirmationMismatch
from cipherkeep.helpers import Clipboard, ExternalEditor
from cipherkeep.session import PassphrasePrompt, Session
from cipherkeep.store import AppConfig, CredentialStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AppContext:
    config: AppConfig
    session: Session
    store: CredentialStore
    # Echo-free prompt for the master passphrase and for secrets
    prompt: PassphrasePrompt = getpass.getpass
    clipboard: Clipboard | None = None
    editor: Callable[[bytes], bytes] | None = None
    _names_cache: list[str] | None = field(default=None, repr=False)

    def unlock(self) -> None:
        """Make sure the session holds a passphrase.

        A brand-new database asks for confirmation; an existing one does not.
        """
        self.session.ensure_unlocked(self.prompt, new_database=not self.store.exists())

    def ask_secret(self, label: str = "Secret: ", *, confirm: bool = True) -> str:
        value = self.prompt(label)
        if confirm and self.prompt("Repeat secret: ") != value:
            raise ConfirmationMismatch("Secrets do not match.")
        return value

    def cached_names(self) -> list[str]:
        """Entry names for completion; empty while locked, never prompts."""
        if not self.session.is_unlocked:
            return []
        if self._names_cache is None:
            self._names_cache = self.store.names()
        return self._names_cache

    def invalidate_names(self) -> None:
        self._names_cache = None


def build_context(config: AppConfig, *, prompt: PassphrasePrompt | None = None) -> AppContext:
    session = Session()
    store = CredentialStore(config.store_path, session, suite=config.cipher, kdf=config.kdf)
    logger.debug("Store at %s (cipher %s)", config.store_path, config.cipher)
    return AppContext(
        config=config,
        session=session,
        store=store,
        prompt=prompt or getpass.getpass,
        clipboard=Clipboard(config.clipboard_command, timeout=config.clipboard_timeout),
        editor=ExternalEditor(config.editor, workdir=config.store_path.parent),
    )
