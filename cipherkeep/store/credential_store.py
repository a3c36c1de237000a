#!/usr/bin/env python3
# cipherkeep/store/credential_store.py
from __future__ import annotations

"""Encrypted credential database bound to an interactive Session.

Every operation:
- checks owner-only permissions on the database and its backup first,
- takes the passphrase from the Session (locking it on BadPassphrase),
- writes only through `commit` (backup, then atomic replace).

Errors are translated here into the StoreError family:
    AuthError  -> BadPassphrase
    FormatError -> CorruptStore
    OSError    -> StoreIOError
"""

import logging
from pathlib import Path
from typing import Callable

from cipherkeep.errors import (
    AuthError,
    BadPassphrase,
    CorruptStore,
    FormatError,
    StoreError,
    StoreIOError,
)
from cipherkeep.security import assert_private_file
from cipherkeep.security.encryption.envelope import (
    DEFAULT_SUITE,
    KdfParams,
    detect_suite,
    unseal,
)
from cipherkeep.session import Session
from cipherkeep.store.codec import Entry, decode, encode, validate_entry
from cipherkeep.store.mutation import BACKUP_SUFFIX, backup_path, commit
from cipherkeep.store.matchers import NameMatcher

logger = logging.getLogger(__name__)

# editor(current_plaintext) -> edited_plaintext
PlaintextEditor = Callable[[bytes], bytes]


class CredentialStore:
    """Owns one encrypted database file and its single backup slot."""

    def __init__(
        self,
        path: Path,
        session: Session,
        *,
        suite: str = DEFAULT_SUITE,
        kdf: KdfParams = KdfParams(),
        backup_suffix: str = BACKUP_SUFFIX,
    ) -> None:
        self._path = Path(path)
        self._session = session
        self._suite = suite
        self._kdf = kdf
        self._backup_suffix = backup_suffix

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path:
        return backup_path(self._path, self._backup_suffix)

    @property
    def suite(self) -> str:
        return self._suite

    @property
    def session(self) -> Session:
        return self._session

    # ---------------- reading ----------------

    def exists(self) -> bool:
        return self._path.is_file()

    def check_permissions(self) -> None:
        """Raise InsecurePermissions if the database or backup is not private."""
        assert_private_file(self._path)
        assert_private_file(self.backup_path)

    def _read_blob(self) -> bytes:
        self.check_permissions()
        try:
            return self._path.read_bytes()
        except FileNotFoundError:
            return b""
        except OSError as exc:
            raise StoreIOError(f"Cannot read {self._path}: {exc.strerror or exc}") from exc

    def _open(self, passphrase: str) -> bytes:
        blob = self._read_blob()
        try:
            plaintext = unseal(blob, passphrase)
        except AuthError as exc:
            logger.warning("Failed to open %s", self._path)
            raise BadPassphrase() from exc
        found = detect_suite(blob)
        if found is not None and found != self._suite:
            logger.info("%s is sealed with %s; next commit uses %s",
                        self._path, found, self._suite)
        return plaintext

    def sealed_suite(self) -> str | None:
        """Suite of the file on disk, read from its header without decrypting."""
        return detect_suite(self._read_blob())

    def read_plaintext(self) -> bytes:
        """Decrypt the database to its raw text (empty if no file exists)."""
        with self._session.guard():
            return self._open(self._session.passphrase)

    def load(self) -> list[Entry]:
        plaintext = self.read_plaintext()
        try:
            return decode(plaintext)
        except FormatError as exc:
            raise CorruptStore(f"{self._path}: {exc}") from exc

    def lookup(self, matcher: NameMatcher) -> list[Entry]:
        return [e for e in self.load() if matcher.matches(e.name)]

    def names(self) -> list[str]:
        return [e.name for e in self.load()]

    # ---------------- writing ----------------

    def _commit(self, plaintext: bytes, passphrase: str) -> None:
        self.check_permissions()
        try:
            commit(
                self._path,
                plaintext,
                passphrase,
                suite=self._suite,
                kdf=self._kdf,
                backup_suffix=self._backup_suffix,
            )
        except OSError as exc:
            raise StoreIOError(f"Commit to {self._path} failed: {exc}") from exc

    def upsert(self, name: str, secret: str) -> bool:
        """Store `secret` under `name`, replacing any entry with that name.

        Returns True when an existing entry was replaced.
        """
        validate_entry(name, secret)
        entries = self.load()
        kept = [e for e in entries if e.name != name]
        kept.append(Entry(name, secret))
        self._commit(encode(kept), self._session.passphrase)
        return len(kept) == len(entries)

    def remove(self, name: str) -> bool:
        entries = self.load()
        kept = [e for e in entries if e.name != name]
        if len(kept) == len(entries):
            return False
        self._commit(encode(kept), self._session.passphrase)
        return True

    def replace_whole(self, new_plaintext: bytes) -> None:
        """Commit raw text as the new database without codec validation.

        This is the free-form edit path. The current database must still
        open with the session passphrase before it is replaced.
        """
        with self._session.guard():
            passphrase = self._session.passphrase
            if self.exists():
                self._open(passphrase)
            self._commit(bytes(new_plaintext), passphrase)

    def edit(self, editor: PlaintextEditor) -> bool:
        """Run `editor` over the raw text; commit if it changed anything."""
        current = self.read_plaintext()
        updated = editor(current)
        if updated == current:
            logger.info("Edit of %s made no changes", self._path)
            return False
        self.replace_whole(updated)
        return True

    def rekey(self, old_passphrase: str, new_passphrase: str) -> None:
        """Re-seal the identical plaintext under a new passphrase.

        Raises:
            BadPassphrase: `old_passphrase` does not open the database.
            StoreError: No database exists yet.
        """
        if not new_passphrase:
            raise ValueError("Passphrase must not be empty.")
        if not self.exists():
            raise StoreError(f"No database at {self._path} to re-key.")
        with self._session.guard():
            plaintext = self._open(old_passphrase)
        self._commit(plaintext, new_passphrase)
        self._session.unlock(new_passphrase)
        logger.info("Re-keyed %s", self._path)
