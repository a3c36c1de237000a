#!/usr/bin/env python3
# cipherkeep/store/matchers.py
from __future__ import annotations

"""Name matchers used by lookups. Both are case-sensitive."""

from dataclasses import dataclass
from typing import Protocol


class NameMatcher(Protocol):
    def matches(self, name: str) -> bool:  # pragma: no cover - signature only
        ...


@dataclass(frozen=True, slots=True)
class Contains:
    """Name contains `text` anywhere (empty text matches everything)."""
    text: str

    def matches(self, name: str) -> bool:
        return self.text in name


@dataclass(frozen=True, slots=True)
class ExactName:
    text: str

    def matches(self, name: str) -> bool:
        return name == self.text
