"""Collect notable string constants for the trailing report block."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from .patterns import LONG_STRING_HINT, string_hint

PREVIEW_LIMIT = 60


@dataclass(frozen=True)
class StringReference:
    value: str
    hint: Optional[str]
    full_length: int

    def as_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "hint": self.hint, "full_length": self.full_length}


def preview(value: str, limit: int = PREVIEW_LIMIT) -> str:
    if len(value) <= limit:
        return value
    return value[: max(limit - 3, 0)] + "..."


class StringCollector:
    """Deduplicating collector shared by every builder of one call."""

    def __init__(self, long_threshold: int) -> None:
        self.long_threshold = long_threshold
        self._seen: Set[str] = set()
        self.references: List[StringReference] = []

    def is_long(self, value: str) -> bool:
        return len(value) >= self.long_threshold

    def observe(self, value: str) -> Optional[StringReference]:
        hint = string_hint(value)
        if hint is None and self.is_long(value):
            hint = LONG_STRING_HINT
        if hint is None or value in self._seen:
            return None
        self._seen.add(value)
        reference = StringReference(preview(value), hint, len(value))
        self.references.append(reference)
        return reference


__all__ = ["PREVIEW_LIMIT", "StringReference", "StringCollector", "preview"]
