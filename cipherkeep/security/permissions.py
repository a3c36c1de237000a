#!/usr/bin/env python3
# cipherkeep/security/permissions.py
from __future__ import annotations
"""
Owner-only file and directory management.

Everything cipherkeep persists (database, backup, history, log) must be
private to the current user. Checks are fail-closed: a file that is group or
world accessible, a symlink, or owned by another uid raises
InsecurePermissions and the caller must stop.

Notes:
- POSIX only. On Windows the checks are skipped (ACLs are not modelled here).
- Directories are created 0700; an existing directory with looser bits is
  logged but tolerated, the files inside are what get enforced.
"""

import logging
import os
import stat
from pathlib import Path

from cipherkeep.errors import InsecurePermissions

logger = logging.getLogger(__name__)

PRIVATE_FILE_MODE = 0o600
PRIVATE_DIR_MODE = 0o700

# group/other permission bits
_FOREIGN_BITS = stat.S_IRWXG | stat.S_IRWXO


def default_store_root() -> Path:
    """
    Base directory for the database and its sidecar files:
      - Windows: %LOCALAPPDATA%/CipherKeep
      - POSIX:   ~/.cipherkeep
    """
    if os.name == "nt":
        base_dir = Path(os.environ.get(
            "LOCALAPPDATA", Path.home() / "AppData" / "Local"
        ))
        return base_dir / "CipherKeep"
    return Path.home() / ".cipherkeep"


def ensure_private_dir(path: Path) -> Path:
    """Create `path` (and parents) with mode 0700 if missing."""
    path = Path(path)
    if not path.exists():
        path.mkdir(mode=PRIVATE_DIR_MODE, parents=True, exist_ok=True)
        if os.name != "nt":
            os.chmod(path, PRIVATE_DIR_MODE)
        logger.debug("Created private directory %s", path)
        return path
    if not path.is_dir():
        raise NotADirectoryError(f"Not a directory: {path}")
    if os.name != "nt":
        mode = stat.S_IMODE(path.stat().st_mode)
        if mode & _FOREIGN_BITS:
            logger.warning("Directory %s has mode %o; 700 is recommended", path, mode)
    return path


def assert_private_file(path: Path) -> None:
    """Raise InsecurePermissions unless `path` is absent or owner-only.

    Absent files pass: there is nothing to leak yet.
    """
    if os.name == "nt":
        return
    try:
        st = os.lstat(path)
    except (FileNotFoundError, NotADirectoryError):
        return

    if stat.S_ISLNK(st.st_mode):
        raise InsecurePermissions(f"Refusing to follow symlink: {path}")
    if not stat.S_ISREG(st.st_mode):
        raise InsecurePermissions(f"Not a regular file: {path}")
    if st.st_uid != os.getuid():
        raise InsecurePermissions(
            f"{path} is owned by uid {st.st_uid}, not the current user")
    mode = stat.S_IMODE(st.st_mode)
    if mode & _FOREIGN_BITS:
        raise InsecurePermissions(
            f"{path} has mode {mode:03o}; expected 600 (run: chmod 600 {path})")


def create_private_file(path: Path) -> Path:
    """Create an empty 0600 file if missing, then verify it (history, log)."""
    path = Path(path)
    ensure_private_dir(path.parent)
    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, PRIVATE_FILE_MODE)
    except FileExistsError:
        pass
    else:
        os.close(fd)
        logger.debug("Created private file %s", path)
    assert_private_file(path)
    return path


def write_private_bytes(path: Path, data: bytes) -> None:
    """Write `data` to a new or truncated 0600 file and fsync it."""
    fd = os.open(path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, PRIVATE_FILE_MODE)
    with os.fdopen(fd, "wb") as fh:
        fh.write(data)
        fh.flush()
        os.fsync(fh.fileno())
