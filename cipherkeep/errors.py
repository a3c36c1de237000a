#!/usr/bin/env python3
# cipherkeep/errors.py
from __future__ import annotations

"""
Exception taxonomy shared by the envelope, codec, store and shell.

Hierarchy:
    CipherKeepError
    ├── AuthError               cannot open a sealed blob (wrong key / tampered)
    ├── FormatError             plaintext is not in the entry format
    ├── StoreError
    │   ├── BadPassphrase       (also AuthError)
    │   ├── CorruptStore        (also FormatError)
    │   ├── StoreIOError
    │   └── InsecurePermissions (also builtin PermissionError, fatal)
    ├── ConfirmationMismatch
    ├── InvalidEntryError       (also ValueError)
    ├── SessionLocked
    ├── ClipboardUnavailable
    └── EditorError
"""


class CipherKeepError(Exception):
    """Base class for every error raised by cipherkeep."""


class AuthError(CipherKeepError):
    """Blob cannot be opened: wrong passphrase or corrupt/tampered data."""


class FormatError(CipherKeepError):
    """Decrypted plaintext does not parse as `name:secret` lines."""


class StoreError(CipherKeepError):
    """Failure of a credential store operation."""


class BadPassphrase(StoreError, AuthError):
    def __init__(self, message: str = "Cannot open store: wrong passphrase or corrupt data.") -> None:
        super().__init__(message)


class CorruptStore(StoreError, FormatError):
    pass


class StoreIOError(StoreError):
    pass


class InsecurePermissions(StoreError, PermissionError):
    """File is readable by someone other than its owner, or not ours.

    Fatal for the whole session; the operator must fix the mode/ownership.
    """


class ConfirmationMismatch(CipherKeepError):
    def __init__(self, message: str = "Passphrases do not match.") -> None:
        super().__init__(message)


class InvalidEntryError(CipherKeepError, ValueError):
    pass


class SessionLocked(CipherKeepError):
    def __init__(self, message: str = "Session is locked.") -> None:
        super().__init__(message)


class ClipboardUnavailable(CipherKeepError):
    pass


class EditorError(CipherKeepError):
    pass


__all__ = [
    "CipherKeepError",
    "AuthError",
    "FormatError",
    "StoreError",
    "BadPassphrase",
    "CorruptStore",
    "StoreIOError",
    "InsecurePermissions",
    "ConfirmationMismatch",
    "InvalidEntryError",
    "SessionLocked",
    "ClipboardUnavailable",
    "EditorError",
]
