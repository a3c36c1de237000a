#!/usr/bin/env python3
# cipherkeep/boot/boot.py
from __future__ import annotations
"""
Boot sequence for the cipherkeep shell.

Each step prints a Linux-style `[  OK  ]` / `[FAILED]` line. A failing step
re-raises; an insecure store or history file stops the boot.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional
import logging
import platform

from cipherkeep.commands import REGISTRY
from cipherkeep.context import AppContext, build_context
from cipherkeep.interface.loader import load_commands
from cipherkeep.security import create_private_file, ensure_private_dir
from cipherkeep.session import PassphrasePrompt
from cipherkeep.store import AppConfig, load_config
from cipherkeep.ui import colorize, enable_windows_vt, init_logger, print_line


@dataclass(slots=True)
class BootState:
    config: AppConfig
    context: AppContext
    logger: logging.Logger
    loaded_count: int
    history_path: Optional[Path]


def _step(label: str, fn: Callable[[], Any], *, quiet: bool = False) -> Any:
    """Run a boot step with status output."""
    try:
        out = fn()
    except Exception as exc:
        print_line(colorize(f"[FAILED] {label} ({type(exc).__name__}: {exc})", "red"))
        raise
    if not quiet:
        print_line(colorize(f"[  OK  ] {label}", "green"))
    return out


def _prepare_history(config: AppConfig) -> Optional[Path]:
    return create_private_file(config.history_file_path)


def boot_sequence(
    *,
    config: AppConfig | None = None,
    prompt: PassphrasePrompt | None = None,
    quiet: bool = False,
) -> BootState:
    _step("Enable ANSI sequences", enable_windows_vt, quiet=quiet)
    _step(
        f"Detect environment: {platform.system()} {platform.release()} / Python {platform.python_version()}",
        lambda: None,
        quiet=quiet,
    )

    if config is None:
        config = _step("Load configuration", load_config, quiet=quiet)

    logger = _step(
        "Initialize logger",
        lambda: init_logger(
            "cipherkeep",
            level=config.log_level or logging.WARNING,
            logfile=config.log_file_path,
        ),
        quiet=quiet,
    )

    _step(f"Open private store directory {config.store_path.parent}",
          lambda: ensure_private_dir(config.store_path.parent), quiet=quiet)

    context = build_context(config, prompt=prompt)
    _step("Check store file permissions", context.store.check_permissions, quiet=quiet)
    history_path = _step("Prepare history file", lambda: _prepare_history(config), quiet=quiet)

    _step("Import command modules", load_commands, quiet=quiet)
    loaded_count = _step("Load command definitions", lambda: len(REGISTRY.all()), quiet=quiet)

    state = "found" if context.store.exists() else "not created yet"
    _step(f"Store {config.store_path} ({state}, {config.cipher})", lambda: None, quiet=quiet)
    _step("Boot complete", lambda: None, quiet=quiet)

    logger.debug("Boot complete: %d commands", loaded_count)
    return BootState(
        config=config,
        context=context,
        logger=logger,
        loaded_count=loaded_count,
        history_path=history_path,
    )
