#!/usr/bin/env python3
# cipherkeep/session.py
from __future__ import annotations

"""
Interactive session: the only holder of the master passphrase.

LOCKED --unlock()--> UNLOCKED --lock() / exit / AuthError--> LOCKED

The passphrase is kept in a bytearray and zeroed on lock. Python may still
hold transient str copies; clearing is best effort, not a guarantee.
"""

import enum
import hmac
import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from cipherkeep.errors import AuthError, ConfirmationMismatch, SessionLocked

logger = logging.getLogger(__name__)

# prompt(text) -> typed value, echo disabled (getpass-like)
PassphrasePrompt = Callable[[str], str]


class SessionState(enum.Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"


class Session:
    """Caches the passphrase between commands until locked."""

    def __init__(self) -> None:
        self._secret: bytearray | None = None

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.lock()

    def __repr__(self) -> str:
        return f"Session(state={self.state.value})"

    @property
    def state(self) -> SessionState:
        return SessionState.UNLOCKED if self._secret is not None else SessionState.LOCKED

    @property
    def is_unlocked(self) -> bool:
        return self._secret is not None

    @property
    def passphrase(self) -> str:
        if self._secret is None:
            raise SessionLocked()
        return self._secret.decode("utf-8")

    def unlock(self, passphrase: str) -> None:
        if not passphrase:
            raise ValueError("Passphrase must not be empty.")
        self.lock()
        self._secret = bytearray(passphrase.encode("utf-8"))
        logger.debug("Session unlocked")

    def lock(self) -> None:
        if self._secret is None:
            return
        for i in range(len(self._secret)):
            self._secret[i] = 0
        self._secret = None
        logger.debug("Session locked")

    def establish(self, prompt: PassphrasePrompt, *, confirm: bool) -> None:
        """Ask for a passphrase (twice when `confirm`) and unlock with it.

        Raises:
            ConfirmationMismatch: The two entries differ; session stays locked.
            ValueError: Empty passphrase.
        """
        first = prompt("Master passphrase: ")
        if confirm:
            second = prompt("Confirm passphrase: ")
            if not hmac.compare_digest(first.encode("utf-8"), second.encode("utf-8")):
                raise ConfirmationMismatch()
        self.unlock(first)

    def ensure_unlocked(self, prompt: PassphrasePrompt, *, new_database: bool) -> None:
        """Reuse the cached passphrase, or prompt for one.

        Confirmation is requested only when a new database is being created.
        """
        if self._secret is None:
            self.establish(prompt, confirm=new_database)

    @contextmanager
    def guard(self) -> Iterator["Session"]:
        """Scoped clear: lock the session if an AuthError escapes the block."""
        try:
            yield self
        except AuthError:
            self.lock()
            raise
