#!/usr/bin/env python3
# cipherkeep/interface/loader.py
from __future__ import annotations

"""
Dynamic command loader.

- Imports every subpackage `entrypoint` under a package (default
  'cipherkeep.plugins'); the @command decorator registers on import.
- Entry modules may also export COMMAND/COMMANDS objects.
- Category defaults to the subpackage name; its description comes from
  CATEGORY_DESCRIPTION or the subpackage docstring.
"""

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import Iterable

from cipherkeep.commands import REGISTRY, Command

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "cipherkeep.plugins"


def _register_from_entry_module(module: ModuleType) -> int:
    """Register COMMAND/COMMANDS exported by an entry module, if present."""
    registered_count = 0
    single = getattr(module, "COMMAND", None)
    if isinstance(single, Command):
        REGISTRY.register(single)
        registered_count += 1
    many = getattr(module, "COMMANDS", None)
    if isinstance(many, Iterable):
        for item in many:
            if isinstance(item, Command):
                REGISTRY.register(item)
                registered_count += 1
    return registered_count


def load_commands(commands_package: str = DEFAULT_PACKAGE) -> int:
    """Import all command modules under `commands_package`; return the module count."""
    package = importlib.import_module(commands_package)
    package_paths = list(getattr(package, "__path__", []))
    if not package_paths:
        raise RuntimeError(f"'{commands_package}' must be a package with command modules.")

    loaded_count = 0
    subpackages: dict[str, ModuleType] = {}

    for modinfo in pkgutil.iter_modules(package_paths):
        if modinfo.name.startswith("_"):
            continue
        if modinfo.ispkg:
            subpackage = importlib.import_module(f"{commands_package}.{modinfo.name}")
            subpackages[modinfo.name] = subpackage
            try:
                module = importlib.import_module(f"{commands_package}.{modinfo.name}.entrypoint")
            except ModuleNotFoundError as exc:
                if exc.name != f"{commands_package}.{modinfo.name}.entrypoint":
                    raise
                continue
        else:
            module = importlib.import_module(f"{commands_package}.{modinfo.name}")
        _register_from_entry_module(module)
        loaded_count += 1

    _assign_categories_from_modules(commands_package)
    for category, module in subpackages.items():
        text = getattr(module, "CATEGORY_DESCRIPTION", None)
        if not isinstance(text, str):
            text = module.__doc__ or ""
        REGISTRY.set_category_description(category, text)

    logger.debug("Loaded %d command modules from %s", loaded_count, commands_package)
    return loaded_count


def _assign_categories_from_modules(commands_package: str) -> None:
    """Category = first segment below the package unless set explicitly."""
    prefix = f"{commands_package}."
    for command_obj in REGISTRY.all():
        if command_obj.category != "general" or not command_obj.module.startswith(prefix):
            continue
        segments = command_obj.module[len(prefix):].split(".")
        if len(segments) >= 2:
            command_obj.category = segments[0]
