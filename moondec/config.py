"""Decompiler options and the per-call runtime guard."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Mapping, Optional

from .exceptions import BudgetExceeded, DecompilationCancelled, DepthExceeded

LOG = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64
DEFAULT_LONG_STRING_THRESHOLD = 40


@dataclass
class DecompileOptions:
    """User-facing switches for a single :func:`moondec.decompile` call."""

    simulate_environment: bool = True
    max_depth: int = DEFAULT_MAX_DEPTH
    instruction_budget: Optional[int] = None
    long_string_threshold: int = DEFAULT_LONG_STRING_THRESHOLD
    indent_width: int = 4
    header: bool = True
    include_call_graph: bool = True
    include_string_refs: bool = True
    validate_syntax: bool = False
    cancel_check: Optional[Callable[[], bool]] = None

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "DecompileOptions":
        """Build options from a plain mapping, ignoring unknown keys."""

        if not mapping:
            return cls()
        known = {item.name for item in fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            if key not in known:
                LOG.warning("Ignoring unknown decompiler option %r", key)
                continue
            kwargs[key] = value
        return cls(**kwargs)


@dataclass
class DecompileLimits:
    """Runtime limits enforced while one decompilation executes.

    A fresh instance is created for every call; nothing here outlives it.
    """

    max_depth: Optional[int] = DEFAULT_MAX_DEPTH
    instruction_budget: Optional[int] = None
    cancel_check: Optional[Callable[[], bool]] = None
    instructions: int = 0
    depth: int = 0
    max_depth_seen: int = field(default=0)

    @classmethod
    def from_options(cls, options: DecompileOptions) -> "DecompileLimits":
        return cls(
            max_depth=options.max_depth,
            instruction_budget=options.instruction_budget,
            cancel_check=options.cancel_check,
        )

    # ------------------------------------------------------------------
    # Limit helpers
    # ------------------------------------------------------------------

    def enter(self) -> None:
        if self.max_depth is not None and self.max_depth >= 0 and self.depth >= self.max_depth:
            raise DepthExceeded(f"closure nesting deeper than {self.max_depth} levels")
        self.depth += 1
        self.max_depth_seen = max(self.max_depth_seen, self.depth)

    def leave(self) -> None:
        if self.depth > 0:
            self.depth -= 1

    def consume(self, index: int) -> None:
        self.instructions += 1
        if self.instruction_budget is not None and self.instructions > self.instruction_budget:
            raise BudgetExceeded(
                f"instruction budget of {self.instruction_budget} exceeded", index=index
            )

    def check_cancelled(self, index: int) -> None:
        if self.cancel_check is not None and self.cancel_check():
            raise DecompilationCancelled("decompilation cancelled by caller", index=index)


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_LONG_STRING_THRESHOLD",
    "DecompileOptions",
    "DecompileLimits",
]
