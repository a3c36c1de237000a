#!/usr/bin/env python3
# cipherkeep/helpers/passgen.py
from __future__ import annotations

"""Random secret generation from the OS CSPRNG (`secrets`)."""

import secrets
import string

# ':' is the entry delimiter; harmless in secrets but awkward to read back
DEFAULT_ALPHABET = (
    string.ascii_letters + string.digits + string.punctuation.replace(":", "")
)

MIN_LENGTH = 8


def generate_password(length: int = 24, *, alphabet: str = DEFAULT_ALPHABET) -> str:
    """Return a random password of `length` characters drawn from `alphabet`.

    At least one letter and one digit are guaranteed when the alphabet has them.
    """
    if length < MIN_LENGTH:
        raise ValueError(f"Password length must be at least {MIN_LENGTH}.")
    if not alphabet:
        raise ValueError("Alphabet must not be empty.")
    has_letters = any(c.isalpha() for c in alphabet)
    has_digits = any(c.isdigit() for c in alphabet)
    while True:
        candidate = "".join(secrets.choice(alphabet) for _ in range(length))
        if has_letters and not any(c.isalpha() for c in candidate):
            continue
        if has_digits and not any(c.isdigit() for c in candidate):
            continue
        return candidate
