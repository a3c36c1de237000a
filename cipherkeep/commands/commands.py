#!/usr/bin/env python3
# cipherkeep/commands/commands.py
from __future__ import annotations

"""
Command registry and decorator utilities.

- CommandRegistry: in-memory registry of commands and aliases.
- command: decorator to register functions as commands with metadata.
- register_command: explicit API to register pre-built Command objects.
"""

import inspect
from typing import Any, Callable, Dict, Mapping, Optional

from .command_types import CONTEXT_PARAM, Command


class CommandRegistry:
    """Holds all command definitions and provides lookup utilities."""

    def __init__(self) -> None:
        self._commands_by_name: Dict[str, Command] = {}
        self._alias_to_primary: Dict[str, str] = {}
        self._category_descriptions: Dict[str, str] = {}

    # ---------------- Registration ----------------

    def _taken(self, key: str) -> bool:
        return key in self._commands_by_name or key in self._alias_to_primary

    def register(self, command_obj: Command) -> None:
        """Register a command and its aliases, rejecting any collision."""
        primary_key = command_obj.name.lower()
        if self._taken(primary_key):
            raise ValueError(f"Command '{command_obj.name}' already registered.")
        for alias in command_obj.aliases:
            if self._taken(alias.lower()) or alias.lower() == primary_key:
                raise ValueError(
                    f"Alias '{alias}' for '{command_obj.name}' collides with an existing name.")

        self._commands_by_name[primary_key] = command_obj
        for alias in command_obj.aliases:
            self._alias_to_primary[alias.lower()] = primary_key

    def clear(self) -> None:
        self._commands_by_name.clear()
        self._alias_to_primary.clear()
        self._category_descriptions.clear()

    # ---------------- Lookup ----------------

    def get(self, name: str) -> Optional[Command]:
        """Return the command by primary name or alias, or None."""
        key = name.lower()
        if key in self._alias_to_primary:
            key = self._alias_to_primary[key]
        return self._commands_by_name.get(key)

    def all(self) -> list[Command]:
        """Primary commands only."""
        return list(self._commands_by_name.values())

    def names(self) -> list[str]:
        """All primary names and aliases, for completion."""
        return [*self._commands_by_name.keys(), *self._alias_to_primary.keys()]

    # ---------------- Categories ----------------

    def categories(self) -> dict[str, list[Command]]:
        grouped: dict[str, list[Command]] = {}
        for cmd in self._commands_by_name.values():
            grouped.setdefault(cmd.category, []).append(cmd)
        return grouped

    def set_category_description(self, category: str, description: str) -> None:
        self._category_descriptions[category] = description.strip()

    def get_category_description(self, category: str) -> str:
        return self._category_descriptions.get(category, "")


# Global registry used across the app
REGISTRY = CommandRegistry()


def command(
    *,
    name: str | None = None,
    description: str | None = None,
    example: str | None = None,
    category: str | None = None,
    completers: Mapping[str, Callable[..., object]] | None = None,
    aliases: list[str] | None = None,
    registry: CommandRegistry | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to register a function as a shell command.

    - snake_case function names become kebab-case command names unless `name` is given.
    - The `ctx` parameter is filled by the dispatcher and hidden from users.
    """

    def wrapper(func: Callable[..., Any]) -> Callable[..., Any]:
        signature = inspect.signature(func)
        param_names = [p.name for p in signature.parameters.values()
                       if p.name != CONTEXT_PARAM]

        command_obj = Command(
            name=(name or func.__name__).replace("_", "-"),
            description=(description or (func.__doc__ or "")).strip(),
            example=example or "",
            callback=func,
            category=category or "general",
            completers=completers or {},
            aliases=aliases or [],
            param_names=param_names,
        )
        command_obj.module = func.__module__
        (registry or REGISTRY).register(command_obj)
        return func

    return wrapper


def register_command(command_obj: Command) -> None:
    """Explicit API for modules that construct Command objects directly."""
    REGISTRY.register(command_obj)
