#!/usr/bin/env python3
# cipherkeep/store/__init__.py
from __future__ import annotations

"""
Package for credential persistence and configuration.

Provides:
- Configuration loader with environment variable overrides (`config`).
- Entry codec and name matchers (`codec`, `matchers`).
- Backup-then-atomic-replace commit (`mutation`).
- The encrypted credential store itself (`credential_store`).
"""


from .config import AppConfig, load_config
from .codec import Entry, decode, encode, validate_entry
from .matchers import Contains, ExactName, NameMatcher
from .mutation import BACKUP_SUFFIX, backup_path, commit
from .credential_store import CredentialStore

__all__ = [
    "AppConfig",
    "load_config",
    "Entry",
    "decode",
    "encode",
    "validate_entry",
    "Contains",
    "ExactName",
    "NameMatcher",
    "BACKUP_SUFFIX",
    "backup_path",
    "commit",
    "CredentialStore",
]
