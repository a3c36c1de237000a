#!/usr/bin/env python3
# cipherkeep/security/__init__.py
from __future__ import annotations

"""
Package for owner-only file handling and the encryption envelope.

Provides:
- Private directory/file creation (`ensure_private_dir`, `create_private_file`).
- Fail-closed permission checks (`assert_private_file`).
- Default store location (`default_store_root`).

The envelope lives in `cipherkeep.security.encryption.envelope` and is
imported explicitly by its users.
"""

from .permissions import (  # noqa: F401
    PRIVATE_DIR_MODE,
    PRIVATE_FILE_MODE,
    assert_private_file,
    create_private_file,
    default_store_root,
    ensure_private_dir,
    write_private_bytes,
)

__all__ = [
    "PRIVATE_DIR_MODE",
    "PRIVATE_FILE_MODE",
    "assert_private_file",
    "create_private_file",
    "default_store_root",
    "ensure_private_dir",
    "write_private_bytes",
]
