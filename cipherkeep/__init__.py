#!/usr/bin/env python3
# cipherkeep/__init__.py
from __future__ import annotations
"""
cipherkeep: a single-user encrypted secret store with an interactive shell.

The shell wiring (commands, interface, boot) is imported lazily by
`cipherkeep.__main__`; importing this package only pulls in the error types.
"""

from cipherkeep.errors import CipherKeepError  # noqa: F401

__version__ = "0.1.0"
