#!/usr/bin/env python3
# cipherkeep/plugins/vault/entrypoint.py
from __future__ import annotations

import logging
from typing import Iterable

from cipherkeep.commands import CommandResult, command
from cipherkeep.errors import CipherKeepError, ClipboardUnavailable, EditorError
from cipherkeep.helpers import generate_password
from cipherkeep.store import Contains, Entry, ExactName, validate_entry
from cipherkeep.ui import format_table

logger = logging.getLogger(__name__)

CATEGORY = "vault"


# -------------------------- helpers --------------------------

def _entry_names(*, text: str, argv, index, ctx) -> list[str]:
    """Completion provider; stays silent while locked or on any store error."""
    if ctx is None:
        return []
    try:
        names = ctx.cached_names()
    except CipherKeepError as exc:
        logger.debug("Name completion unavailable: %s", exc)
        return []
    return sorted(n for n in names if n.startswith(text))


_NAME_COMPLETION = {"pos0": _entry_names, "name": _entry_names}


def _entries_table(entries: Iterable[Entry]) -> str:
    return format_table([[e.name, e.secret] for e in entries], headers=["Name", "Secret"])


def _empty_store(ctx) -> CommandResult | None:
    if ctx.store.exists():
        return None
    return CommandResult(message=f"No database yet at {ctx.store.path}.", data=[])


def _find_one(ctx, name: str) -> Entry | None:
    matches = ctx.store.lookup(ExactName(name))
    return matches[-1] if matches else None


def _to_clipboard(ctx, text: str) -> str | None:
    """Copy text; return an explanation instead of raising when unavailable."""
    if ctx.clipboard is None:
        return "no clipboard configured"
    try:
        ctx.clipboard.copy(text)
    except ClipboardUnavailable as exc:
        return str(exc)
    return None


# -------------------------- commands --------------------------

@command(
    name="find",
    description="List entries whose name contains the given text (case-sensitive).",
    example="find mail",
    category=CATEGORY,
    aliases=["search"],
)
def find(ctx, text: str) -> CommandResult:
    empty = _empty_store(ctx)
    if empty:
        return empty
    ctx.unlock()
    entries = ctx.store.lookup(Contains(text))
    if not entries:
        return CommandResult(message=f"No entries match {text!r}.", data=[])
    return CommandResult(message=_entries_table(entries), data=entries)


@command(
    name="show",
    description="Show the entry with exactly this name.",
    example="show github",
    category=CATEGORY,
    completers=_NAME_COMPLETION,
    aliases=["get"],
)
def show(ctx, name: str) -> CommandResult:
    empty = _empty_store(ctx)
    if empty:
        return CommandResult(ok=False, message=f"No entry named {name!r}.")
    ctx.unlock()
    entry = _find_one(ctx, name)
    if entry is None:
        return CommandResult(ok=False, message=f"No entry named {name!r}.")
    return CommandResult(message=_entries_table([entry]), data=entry)


@command(
    name="list",
    description="List entry names (secrets are not shown).",
    category=CATEGORY,
    aliases=["ls"],
)
def list_entries(ctx) -> CommandResult:
    empty = _empty_store(ctx)
    if empty:
        return empty
    ctx.unlock()
    names = sorted(ctx.store.names())
    if not names:
        return CommandResult(message="Store is empty.", data=[])
    return CommandResult(message="\n".join(names), data=names)


@command(
    name="put",
    description="Add or replace an entry; the secret is typed without echo.",
    example="put github",
    category=CATEGORY,
    completers=_NAME_COMPLETION,
    aliases=["add", "set"],
)
def put(ctx, name: str) -> CommandResult:
    validate_entry(name, "")
    ctx.unlock()
    secret = ctx.ask_secret(f"Secret for {name}: ")
    if not secret:
        return CommandResult(ok=False, message="Empty secret; nothing stored.")
    replaced = ctx.store.upsert(name, secret)
    return CommandResult(message=f"{'Updated' if replaced else 'Stored'} {name}.")


@command(
    name="gen",
    description="Generate a random secret for an entry and copy it to the clipboard.",
    example="gen github 32",
    category=CATEGORY,
    completers=_NAME_COMPLETION,
    aliases=["generate"],
)
def gen(ctx, name: str, length: int = 0) -> CommandResult:
    validate_entry(name, "")
    secret = generate_password(length or ctx.config.password_length)
    ctx.unlock()
    ctx.store.upsert(name, secret)
    problem = _to_clipboard(ctx, secret)
    if problem is None:
        return CommandResult(message=f"Stored {name}; secret copied to clipboard.")
    return CommandResult(message=f"Stored {name} (clipboard: {problem}).\n{secret}")


@command(
    name="copy",
    description="Copy an entry's secret to the clipboard.",
    example="copy github",
    category=CATEGORY,
    completers=_NAME_COMPLETION,
    aliases=["cp", "clip"],
)
def copy(ctx, name: str) -> CommandResult:
    if not ctx.store.exists():
        return CommandResult(ok=False, message=f"No entry named {name!r}.")
    ctx.unlock()
    entry = _find_one(ctx, name)
    if entry is None:
        return CommandResult(ok=False, message=f"No entry named {name!r}.")
    problem = _to_clipboard(ctx, entry.secret)
    if problem is not None:
        return CommandResult(ok=False, message=f"Clipboard unavailable: {problem}. Use 'show {name}'.")
    return CommandResult(message=f"Copied secret for {name}.")


@command(
    name="rm",
    description="Delete an entry.",
    example="rm github",
    category=CATEGORY,
    completers=_NAME_COMPLETION,
    aliases=["del", "remove"],
)
def rm(ctx, name: str) -> CommandResult:
    if not ctx.store.exists():
        return CommandResult(ok=False, message=f"No entry named {name!r}.")
    ctx.unlock()
    if not ctx.store.remove(name):
        return CommandResult(ok=False, message=f"No entry named {name!r}.")
    return CommandResult(message=f"Removed {name}.")


@command(
    name="edit",
    description="Edit the whole decrypted store in an external editor.",
    category=CATEGORY,
)
def edit(ctx) -> CommandResult:
    if ctx.editor is None:
        raise EditorError("No editor configured.")
    ctx.unlock()
    changed = ctx.store.edit(ctx.editor)
    return CommandResult(message="Saved changes." if changed else "No changes.", data=changed)
