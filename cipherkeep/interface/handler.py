#!/usr/bin/env python3
# cipherkeep/interface/handler.py
from __future__ import annotations

"""
Command dispatch and help formatting.

One input line runs one command. There is no chaining, piping or
redirection: command output may carry secrets and must only reach the
terminal it was asked on.
"""

import difflib
import inspect
import logging
from typing import Any, Tuple

from cipherkeep.commands import CONTEXT_PARAM, REGISTRY, Command, CommandResult
from cipherkeep.errors import InsecurePermissions
from cipherkeep.interface.parser import bind_args, build_usage, tokenize
from cipherkeep.ui import clear_screen, format_table

logger = logging.getLogger(__name__)

# Short hint shown at startup and used in unknown command errors
HELP_TEXT = "Type 'help <command>' for more information on a specific command."


def _suggest_similar_names(name: str) -> str:
    universe = REGISTRY.names() + ["help", "exit", "quit"]
    matches = difflib.get_close_matches(name, universe, n=3, cutoff=0.6)
    return f" Did you mean: {', '.join(matches)}?" if matches else ""


def list_categories() -> str:
    """Render the categories overview table."""
    categories = REGISTRY.categories()
    if not categories:
        return "No commands loaded."

    rows = []
    for category_name in sorted(categories):
        count = len(categories[category_name])
        rows.append([
            category_name,
            f"{count} command{'s' if count != 1 else ''}",
            REGISTRY.get_category_description(category_name),
        ])
    table = format_table(rows, headers=["Category", "Commands", "Description"])
    return f"{table}\n{HELP_TEXT}"


def _format_category_help(category: str) -> str:
    rows = []
    for command_obj in sorted(REGISTRY.categories()[category], key=lambda c: c.name):
        alias_display = ", ".join(command_obj.aliases) if command_obj.aliases else "-"
        rows.append([command_obj.name, alias_display, command_obj.description.splitlines()[0]
                     if command_obj.description else ""])
    return format_table(rows, headers=["Command", "Aliases", "Description"])


def format_command_help(name: str) -> str:
    """Help for a command, a category, or 'all'."""
    command_obj = REGISTRY.get(name)
    if not command_obj:
        categories = REGISTRY.categories()
        if name in categories:
            return _format_category_help(name)
        if name == "all":
            return "\n".join(_format_category_help(c) for c in sorted(categories))
        return f"No such command or category: {name}"

    alias_text = ", ".join(command_obj.aliases) if command_obj.aliases else "(none)"
    lines = [
        f"Name:        {command_obj.name}",
        f"Aliases:     {alias_text}",
        f"Category:    {command_obj.category}",
        f"Description: {command_obj.description or '(none)'}",
        f"Example:     {command_obj.example or '(none)'}",
        f"Usage:       {build_usage(command_obj.name, command_obj.callback)}",
    ]
    return "\n".join(lines)


def _inject_context(
    positional: Tuple[Any, ...],
    keywords: dict[str, Any],
    command_obj: Command,
    ctx: Any,
) -> Tuple[Tuple[Any, ...], dict[str, Any]]:
    params = inspect.signature(command_obj.callback).parameters
    parameter = params.get(CONTEXT_PARAM)
    if parameter is None:
        return positional, keywords
    if parameter.kind is parameter.KEYWORD_ONLY or keywords and not positional:
        return positional, {**keywords, CONTEXT_PARAM: ctx}
    return (ctx, *positional), keywords


def _render(result: Any) -> Tuple[str | None, bool]:
    if isinstance(result, CommandResult):
        text = result.message or None
        if text is not None and not result.ok:
            text = f"[error] {text}"
        return text, result.ok
    return (None if result is None else str(result)), True


def run_command(line: str, ctx: Any = None) -> Tuple[str | None, bool]:
    """
    Run one input line. Returns (output, success).

    InsecurePermissions and SystemExit propagate to the caller; any other
    failure becomes an '[error] Type: message' line.
    """
    line = line.strip()
    if not line:
        return None, True

    lowered = line.lower()
    if lowered in {"exit", "quit"}:
        raise SystemExit(0)
    if lowered in {"clear", "cls"}:
        clear_screen()
        return None, True
    if lowered == "help":
        return list_categories(), True
    if lowered.startswith("help "):
        return format_command_help(line.partition(" ")[2].strip()), True

    try:
        command_name, *arg_tokens = tokenize(line)
    except ValueError as exc:
        return f"[error] {exc}", False

    command_obj = REGISTRY.get(command_name)
    if not command_obj:
        return f"Unknown command: {command_name}.{_suggest_similar_names(command_name)} {HELP_TEXT}", False

    try:
        positional, keywords = bind_args(command_obj.callback, arg_tokens)
    except TypeError as exc:
        return f"[error] {exc}\nUsage: {build_usage(command_obj.name, command_obj.callback)}", False

    positional, keywords = _inject_context(positional, keywords, command_obj, ctx)
    try:
        result = command_obj.invoke(*positional, **keywords)
    except (SystemExit, InsecurePermissions):
        raise
    except Exception as exc:
        logger.debug("Command %s failed", command_obj.name, exc_info=True)
        return f"[error] {type(exc).__name__}: {exc}", False
    finally:
        invalidate = getattr(ctx, "invalidate_names", None)
        if invalidate is not None:
            invalidate()
    return _render(result)


def handle_line(input_line: str, ctx: Any = None) -> str | None:
    """Execute a line and return printable output, or None."""
    output, _ok = run_command(input_line, ctx)
    return output
