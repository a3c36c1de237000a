#!/usr/bin/env python3
# cipherkeep/commands/__init__.py
from __future__ import annotations

"""
Command registration for the interactive shell.

Provides:
- Data structures (`Command`, `CommandResult`, `CommandCallback`).
- In-memory registry and decorator (`REGISTRY`, `command`, `register_command`).
"""


from .command_types import CONTEXT_PARAM, Command, CommandResult, CommandCallback
from .commands import REGISTRY, CommandRegistry, command, register_command

__all__ = [
    "CONTEXT_PARAM",
    "Command",
    "CommandResult",
    "CommandCallback",
    "REGISTRY",
    "CommandRegistry",
    "command",
    "register_command",
]
