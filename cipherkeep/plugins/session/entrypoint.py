#!/usr/bin/env python3
# cipherkeep/plugins/session/entrypoint.py
from __future__ import annotations

import hmac

from cipherkeep.commands import CommandResult, command
from cipherkeep.errors import ConfirmationMismatch
from cipherkeep.ui import format_table

CATEGORY = "session"


@command(
    name="unlock",
    description="Enter the master passphrase and verify it against the store.",
    category=CATEGORY,
    aliases=["login"],
)
def unlock(ctx) -> CommandResult:
    if ctx.session.is_unlocked:
        return CommandResult(message="Already unlocked.")
    if not ctx.store.exists():
        ctx.session.establish(ctx.prompt, confirm=True)
        return CommandResult(message=f"Unlocked. A new database will be created at {ctx.store.path}.")
    ctx.session.establish(ctx.prompt, confirm=False)
    count = len(ctx.store.load())
    return CommandResult(message=f"Unlocked ({count} entr{'y' if count == 1 else 'ies'}).")


@command(
    name="lock",
    description="Forget the cached passphrase.",
    category=CATEGORY,
)
def lock(ctx) -> CommandResult:
    ctx.session.lock()
    return CommandResult(message="Locked.")


@command(
    name="passwd",
    description="Change the master passphrase (re-encrypts the store).",
    category=CATEGORY,
    aliases=["rekey"],
)
def passwd(ctx) -> CommandResult:
    if not ctx.store.exists():
        return CommandResult(ok=False, message="No database yet; 'put' an entry first.")
    old = ctx.prompt("Current passphrase: ")
    new = ctx.prompt("New passphrase: ")
    confirm = ctx.prompt("Confirm new passphrase: ")
    if not hmac.compare_digest(new.encode("utf-8"), confirm.encode("utf-8")):
        raise ConfirmationMismatch()
    ctx.store.rekey(old, new)
    return CommandResult(message="Passphrase changed.")


@command(
    name="status",
    description="Show store location, cipher and session state.",
    category=CATEGORY,
)
def status(ctx) -> CommandResult:
    store = ctx.store
    exists = store.exists()
    on_disk = store.sealed_suite() if exists else None
    clipboard = ctx.clipboard.command if ctx.clipboard is not None else None
    rows = [
        ["Store", str(store.path)],
        ["Exists", "yes" if exists else "no"],
        ["Backup", "yes" if store.backup_path.exists() else "no"],
        ["Cipher (config)", store.suite],
        ["Cipher (on disk)", on_disk or "-"],
        ["Session", ctx.session.state.value],
        ["Clipboard", clipboard[0] if clipboard else "unavailable"],
    ]
    return CommandResult(message=format_table(rows), data=dict(rows))
