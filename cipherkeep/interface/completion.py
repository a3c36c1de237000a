#!/usr/bin/env python3
# cipherkeep/interface/completion.py
from __future__ import annotations

"""
Command line completion utilities.

Token-aware suggestions for:
- First token: built-in commands + all registered command names and aliases.
- 'help <partial>': categories and command names.
- Subsequent tokens: key= names and values from per-command completers.

Completers receive (text=, argv=, index=, ctx=) and must never prompt.
"""

import shlex
from typing import Any

from cipherkeep.commands import REGISTRY

BUILT_IN_COMMANDS: tuple[str, ...] = ("help", "exit", "quit", "clear", "cls")


def _split_current_token(raw_input: str) -> tuple[list[str], str]:
    """
    Return (parts, current_prefix).

    Trailing whitespace starts a new, empty token. Unbalanced quotes fall back
    to whitespace splitting.
    """
    if not raw_input:
        return [], ""
    try:
        parts = shlex.split(raw_input, posix=True)
    except ValueError:
        parts = raw_input.split()
    if raw_input[-1].isspace():
        parts.append("")
    return parts, (parts[-1] if parts else "")


def suggest(text_before_cursor: str, ctx: Any = None) -> list[str]:
    raw_buffer = text_before_cursor.lstrip()
    parts, current_prefix = _split_current_token(raw_buffer)

    if len(parts) <= 1:
        universe = [*BUILT_IN_COMMANDS, *REGISTRY.names()]
        return sorted(w for w in universe if w.startswith(current_prefix))

    if parts[0] == "help":
        universe = set(REGISTRY.categories()) | set(REGISTRY.names())
        return sorted(w for w in universe if w.startswith(parts[1]))

    command_obj = REGISTRY.get(parts[0])
    if not command_obj:
        return []

    argument_tokens = parts[1:]
    current_token = argument_tokens[-1]
    key, sep, value_prefix = current_token.partition("=")

    if sep and key in command_obj.param_names:
        provider = command_obj.completers.get(key)
        if not provider:
            return []
        values = provider(text=value_prefix, argv=argument_tokens, index=None, ctx=ctx)
        return [f"{key}={v}" for v in values]

    positional = [t for t in argument_tokens if "=" not in t]
    index = max(0, len(positional) - 1)
    suggestions: list[str] = []
    provider = command_obj.completers.get(f"pos{index}") or command_obj.completers.get("pos*")
    if provider:
        suggestions.extend(provider(text=current_token, argv=argument_tokens, index=index, ctx=ctx))
    if current_token:
        suggestions.extend(f"{k}=" for k in command_obj.param_names
                           if f"{k}=".startswith(current_token))
    return suggestions
