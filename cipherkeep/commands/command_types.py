#!/usr/bin/env python3
# cipherkeep/commands/command_types.py
from __future__ import annotations

"""
Command data structures and protocols.

- CommandCallback: the callable protocol for any command implementation.
- CommandResult: what a command hands back to the dispatcher.
- Command: a registered command with metadata and a callable.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol

# Parameter name the dispatcher fills with the AppContext; never bound from input
CONTEXT_PARAM = "ctx"


class CommandCallback(Protocol):
    def __call__(self, *args: Any, **kwargs: Any) -> Any:  # pragma: no cover - signature only
        ...


@dataclass(slots=True)
class CommandResult:
    """
    Result container from command execution.

    Attributes:
        ok: False marks a user-level failure (rendered as an error).
        message: Text shown to the user.
        data: Optional payload for tests and callers.
    """
    ok: bool = True
    message: str = ""
    data: Any = None

    def __str__(self) -> str:
        return self.message if self.message else ("ok" if self.ok else "error")


@dataclass(slots=True)
class Command:
    """
    A registered command.

    Important fields:
        name: Primary unique command name.
        description: Short, user-facing description.
        example: One-line example usage string (optional).
        callback: Function implementing the command.
        category: Group shown in the help menu.
        completers: Providers for positional ('pos0', 'pos*') and key=value completion.
        aliases: Extra names resolving to the same command.
        param_names: User-facing parameter names (the context parameter excluded).
    """

    name: str
    description: str
    example: str
    callback: CommandCallback
    module: str = field(default="", repr=False)
    category: str = "general"
    completers: Mapping[str, Callable[..., object]] = field(  # type: ignore
        default_factory=dict)
    aliases: list[str] = field(default_factory=list)  # type: ignore
    param_names: list[str] = field(default_factory=list)  # type: ignore

    @property
    def wants_context(self) -> bool:
        return CONTEXT_PARAM in inspect.signature(self.callback).parameters

    def invoke(self, *args: Any, **kwargs: Any) -> Any:
        return self.callback(*args, **kwargs)
