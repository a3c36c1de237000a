#!/usr/bin/env python3
# cipherkeep/interface/__init__.py
from __future__ import annotations

"""
Package for the interactive console interface and command dispatch.

Provides:
- CLI frontends with history and completion (prompt_toolkit / plain input).
- Token-aware completion helpers.
- Parser utilities for binding arguments to command functions.
- Command dispatcher and help formatting.
- Dynamic command loader for the plugins package.
"""


from .completion import suggest, BUILT_IN_COMMANDS
from .parser import tokenize, bind_args, build_usage
from .handler import handle_line, run_command, HELP_TEXT, list_categories, format_command_help
from .loader import load_commands
from .cli import BaseCLI, PromptToolkitCLI, make_cli

__all__ = [
    "suggest",
    "BUILT_IN_COMMANDS",
    "tokenize",
    "bind_args",
    "build_usage",
    "handle_line",
    "run_command",
    "HELP_TEXT",
    "list_categories",
    "format_command_help",
    "load_commands",
    "BaseCLI",
    "PromptToolkitCLI",
    "make_cli",
]
