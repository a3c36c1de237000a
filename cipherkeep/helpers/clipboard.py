#!/usr/bin/env python3
# cipherkeep/helpers/clipboard.py
from __future__ import annotations

"""
Clipboard sink backed by an external utility.

Detection order (first found on PATH wins):
    wl-copy, xclip -selection clipboard, xsel --clipboard --input, pbcopy, clip

The utility runs with a timeout so a hung clipboard owner can never block the
shell. Absence or failure raises ClipboardUnavailable; callers degrade.
"""

import logging
import shlex
import shutil
import subprocess
from typing import Optional, Sequence

from cipherkeep.errors import ClipboardUnavailable

logger = logging.getLogger(__name__)

_CANDIDATES: tuple[tuple[str, ...], ...] = (
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("pbcopy",),
    ("clip",),
)


def detect_clipboard_command() -> Optional[list[str]]:
    """Return argv for the first clipboard utility found, else None."""
    for candidate in _CANDIDATES:
        path = shutil.which(candidate[0])
        if path:
            return [path, *candidate[1:]]
    return None


class Clipboard:
    """Copies text through an external clipboard utility."""

    def __init__(self, command: Optional[Sequence[str] | str] = None, *, timeout: float = 5) -> None:
        if isinstance(command, str):
            command = shlex.split(command)
        self._command = list(command) if command else None
        self._timeout = timeout

    @property
    def command(self) -> Optional[list[str]]:
        if self._command is None:
            self._command = detect_clipboard_command()
        return self._command

    @property
    def available(self) -> bool:
        argv = self.command
        return bool(argv) and shutil.which(argv[0]) is not None

    def copy(self, text: str) -> None:
        argv = self.command
        if not argv or shutil.which(argv[0]) is None:
            raise ClipboardUnavailable("No clipboard utility found.")
        try:
            proc = subprocess.run(
                argv,
                input=text.encode("utf-8"),
                check=False,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise ClipboardUnavailable(
                f"{argv[0]} did not finish within {self._timeout}s.") from exc
        except OSError as exc:
            raise ClipboardUnavailable(f"Cannot run {argv[0]}: {exc}") from exc
        if proc.returncode != 0:
            raise ClipboardUnavailable(f"{argv[0]} exited with {proc.returncode}.")
        logger.debug("Copied %d chars via %s", len(text), argv[0])
