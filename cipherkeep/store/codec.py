#!/usr/bin/env python3
# cipherkeep/store/codec.py
from __future__ import annotations

"""
Entry codec: the plaintext inside the envelope.

Format: one entry per line, `name:secret\\n`, UTF-8. The name is everything
before the first ':'; the secret is the rest of the line and may itself
contain ':'. Blank lines are ignored.

Malformed lines are rejected: `decode` raises FormatError for the first line
without a ':' or with an empty name, and for bytes that are not UTF-8. Error
messages carry the line number only, never the line itself.
"""

from dataclasses import dataclass
from typing import Iterable

from cipherkeep.errors import FormatError, InvalidEntryError

DELIMITER = ":"


@dataclass(frozen=True, slots=True)
class Entry:
    name: str
    secret: str


def validate_entry(name: str, secret: str) -> None:
    """Enforce the name/secret constraints at the store boundary."""
    if not name:
        raise InvalidEntryError("Entry name must not be empty.")
    if DELIMITER in name:
        raise InvalidEntryError(f"Entry name must not contain {DELIMITER!r}.")
    if "\n" in name or "\r" in name:
        raise InvalidEntryError("Entry name must not contain a line break.")
    if "\n" in secret or "\r" in secret:
        raise InvalidEntryError("Secret must not contain a line break.")


def encode(entries: Iterable[Entry]) -> bytes:
    """Serialize entries to `name:secret` lines."""
    return "".join(
        f"{e.name}{DELIMITER}{e.secret}\n" for e in entries
    ).encode("utf-8")


def decode(data: bytes) -> list[Entry]:
    """Parse plaintext into entries, preserving order.

    Raises:
        FormatError: On non-UTF-8 data or a malformed line.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"Store is not valid UTF-8 (byte offset {exc.start}).") from exc

    entries: list[Entry] = []
    for lineno, line in enumerate(text.split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        if not line.strip():
            continue
        name, sep, secret = line.partition(DELIMITER)
        if not sep:
            raise FormatError(f"Line {lineno}: missing '{DELIMITER}' separator.")
        if not name:
            raise FormatError(f"Line {lineno}: empty entry name.")
        entries.append(Entry(name, secret))
    return entries
