#!/usr/bin/env python3
# cipherkeep/helpers/editor.py
from __future__ import annotations

"""
External text editor collaborator for free-form edits of the database text.

The plaintext is written to a 0600 temp file inside the private store
directory, the editor runs synchronously on that path, and the file is read
back afterwards. On every exit path the temp file is overwritten with zeros
and removed.
"""

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path

from cipherkeep.errors import EditorError
from cipherkeep.security import ensure_private_dir, write_private_bytes

logger = logging.getLogger(__name__)


def resolve_editor(configured: str | None = None) -> list[str]:
    """Editor argv: configured value, then $VISUAL, $EDITOR, then a platform default."""
    cmd = (
        configured
        or os.environ.get("VISUAL")
        or os.environ.get("EDITOR")
        or ("notepad" if os.name == "nt" else "vi")
    )
    argv = shlex.split(cmd)
    if not argv:
        raise EditorError("Editor command is empty.")
    return argv


def _wipe(path: Path) -> None:
    try:
        size = path.stat().st_size
        with path.open("r+b") as fh:
            fh.write(b"\0" * size)
            fh.flush()
            os.fsync(fh.fileno())
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Could not overwrite %s before removal: %s", path, exc)
    try:
        path.unlink()
    except FileNotFoundError:
        pass


class ExternalEditor:
    """Callable `bytes -> bytes` that round-trips text through an editor process."""

    def __init__(self, command: str | None = None, *, workdir: Path) -> None:
        self._command = command
        self._workdir = Path(workdir)

    def __call__(self, plaintext: bytes) -> bytes:
        argv = resolve_editor(self._command)
        ensure_private_dir(self._workdir)
        fd, name = tempfile.mkstemp(prefix=".edit-", suffix=".txt", dir=self._workdir)
        os.close(fd)
        tmp = Path(name)
        try:
            write_private_bytes(tmp, plaintext)
            try:
                proc = subprocess.run([*argv, str(tmp)], check=False)
            except OSError as exc:
                raise EditorError(f"Cannot start editor {argv[0]!r}: {exc}") from exc
            if proc.returncode != 0:
                raise EditorError(f"Editor {argv[0]!r} exited with {proc.returncode}; nothing saved.")
            try:
                return tmp.read_bytes()
            except FileNotFoundError as exc:
                raise EditorError("Editor removed the file; nothing saved.") from exc
        finally:
            _wipe(tmp)
