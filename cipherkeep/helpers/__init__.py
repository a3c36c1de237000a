#!/usr/bin/env python3
# cipherkeep/helpers/__init__.py
from __future__ import annotations

from .clipboard import Clipboard, detect_clipboard_command
from .editor import ExternalEditor, resolve_editor
from .passgen import DEFAULT_ALPHABET, generate_password

__all__ = [
    "Clipboard",
    "detect_clipboard_command",
    "ExternalEditor",
    "resolve_editor",
    "DEFAULT_ALPHABET",
    "generate_password",
]
