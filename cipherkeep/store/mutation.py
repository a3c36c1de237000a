#!/usr/bin/env python3
# cipherkeep/store/mutation.py
from __future__ import annotations

"""
Backup-then-atomic-replace commit of a new encrypted database.

Sequence for `commit(path, plaintext, passphrase, ...)`:
  1) seal the plaintext in memory (fresh salt/nonce)
  2) if `path` exists, snapshot it byte-for-byte to `path + backup_suffix`
     (the snapshot itself goes through temp + replace); abort on failure
  3) write the sealed blob to a 0600 temp file next to `path`, fsync
  4) os.replace(temp, path), then fsync the directory (best effort)
The temp file is removed on every exit path. A crash at any point leaves
either the old database or the new one at `path`, never a partial file.
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from cipherkeep.security import ensure_private_dir, write_private_bytes
from cipherkeep.security.encryption.envelope import (
    DEFAULT_SUITE,
    KdfParams,
    seal,
)

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"


def backup_path(path: Path, suffix: str = BACKUP_SUFFIX) -> Path:
    return path.with_name(path.name + suffix)


@contextmanager
def scoped_temp_file(directory: Path, *, prefix: str) -> Iterator[Path]:
    """Yield a fresh 0600 temp file in `directory`; always unlink it afterwards."""
    fd, name = tempfile.mkstemp(prefix=prefix, suffix=".tmp", dir=directory)
    os.close(fd)
    tmp = Path(name)
    try:
        yield tmp
    finally:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass


def _fsync_dir(directory: Path) -> None:
    if os.name == "nt":
        return
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


def atomic_write(path: Path, data: bytes) -> None:
    """Replace `path` with `data` via a scoped temp file in the same directory."""
    directory = path.parent
    with scoped_temp_file(directory, prefix=f".{path.name}.") as tmp:
        write_private_bytes(tmp, data)
        os.replace(tmp, path)
    _fsync_dir(directory)


def snapshot(path: Path, suffix: str = BACKUP_SUFFIX) -> Path:
    """Copy the current database to its single backup slot."""
    target = backup_path(path, suffix)
    atomic_write(target, path.read_bytes())
    logger.debug("Backed up %s -> %s", path, target)
    return target


def commit(
    path: Path,
    plaintext: bytes,
    passphrase: str,
    *,
    suite: str = DEFAULT_SUITE,
    kdf: KdfParams = KdfParams(),
    backup_suffix: str = BACKUP_SUFFIX,
) -> None:
    """Persist `plaintext` sealed under `passphrase` at `path`.

    Raises:
        OSError: Backup or write failed; `path` is left as it was.
        ValueError: Unknown suite or invalid KDF parameters.
    """
    path = Path(path)
    ensure_private_dir(path.parent)
    blob = seal(plaintext, passphrase, suite=suite, kdf=kdf)
    if path.exists():
        snapshot(path, backup_suffix)
    atomic_write(path, blob)
    logger.info("Committed %s (%d bytes, %s)", path, len(blob), suite)
