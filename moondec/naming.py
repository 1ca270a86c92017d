"""Identifier helpers and the per-decompilation name registry."""

from __future__ import annotations

import re
from collections import defaultdict
from typing import DefaultDict, FrozenSet, Set

LUA_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "and",
        "break",
        "do",
        "else",
        "elseif",
        "end",
        "false",
        "for",
        "function",
        "if",
        "in",
        "local",
        "nil",
        "not",
        "or",
        "repeat",
        "return",
        "then",
        "true",
        "until",
        "while",
    }
)

FALLBACK_NAME = "var"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_NON_IDENTIFIER_RE = re.compile(r"[^A-Za-z0-9_]+")
_LEADING_DIGITS_RE = re.compile(r"^[0-9]+")


def is_identifier(text: str) -> bool:
    """Return ``True`` when *text* can be used as a bare Lua name."""

    return bool(_IDENTIFIER_RE.match(text)) and text not in LUA_KEYWORDS


def sanitize_identifier(text: str, fallback: str = FALLBACK_NAME) -> str:
    """Turn arbitrary text into an identifier base name.

    Non-identifier characters are dropped, then any leading run of digits.
    An empty result falls back to ``fallback``; keywords get a trailing
    underscore.
    """

    cleaned = _NON_IDENTIFIER_RE.sub("", str(text))
    cleaned = _LEADING_DIGITS_RE.sub("", cleaned)
    if not cleaned or cleaned[0].isdigit():
        cleaned = fallback + cleaned
    if cleaned in LUA_KEYWORDS:
        cleaned += "_"
    return cleaned


class NameRegistry:
    """Hands out unique names within one decompilation call.

    Repeated requests for the same base yield ``name``, ``name_2``,
    ``name_3`` and so on.
    """

    def __init__(self) -> None:
        self._counters: DefaultDict[str, int] = defaultdict(int)
        self._used: Set[str] = set()

    def unique(self, hint: str) -> str:
        base = sanitize_identifier(hint)
        while True:
            self._counters[base] += 1
            count = self._counters[base]
            candidate = base if count == 1 else f"{base}_{count}"
            if candidate not in self._used:
                self._used.add(candidate)
                return candidate

    def reserve(self, name: str) -> None:
        self._used.add(name)

    def __contains__(self, name: object) -> bool:
        return name in self._used


__all__ = [
    "LUA_KEYWORDS",
    "FALLBACK_NAME",
    "is_identifier",
    "sanitize_identifier",
    "NameRegistry",
]
