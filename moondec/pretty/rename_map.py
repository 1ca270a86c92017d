"""Identifier renaming hook applied to rendered output.

The decompiler does not pick "good" names itself beyond the simulator
heuristics; callers may plug in a :class:`SymbolRenamer` that sees the text
plus identifier occurrence counts and returns an old -> new map.  The map is
applied token by token so strings, comments and field names stay intact.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Dict, Iterator, Mapping, Protocol, Tuple

from ..naming import LUA_KEYWORDS, is_identifier

LOGGER = logging.getLogger(__name__)

RenameMap = Dict[str, str]

_TOKEN_RE = re.compile(
    r"""
    (?P<long_comment>--\[(?P<lc_eq>=*)\[.*?\](?P=lc_eq)\])
  | (?P<comment>--[^\n]*)
  | (?P<long_string>\[(?P<ls_eq>=*)\[.*?\](?P=ls_eq)\])
  | (?P<string>"(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*')
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<number>0[xX][0-9A-Fa-f]+|[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?)
  | (?P<space>\s+)
  | (?P<other>\.\.\.|\.\.|.)
    """,
    re.VERBOSE | re.DOTALL,
)


class SymbolRenamer(Protocol):
    """External collaborator that proposes identifier renames."""

    def __call__(self, source: str, identifiers: Mapping[str, int]) -> Mapping[str, str]:
        ...


def _tokens(source: str) -> Iterator[Tuple[str, str]]:
    for match in _TOKEN_RE.finditer(source):
        yield match.lastgroup or "other", match.group(0)


def _renameable_names(source: str) -> Iterator[Tuple[str, str, bool]]:
    """Yield ``(kind, text, is_candidate)`` for every token in *source*."""

    previous = ""
    for kind, text in _tokens(source):
        if kind == "name":
            candidate = text not in LUA_KEYWORDS and previous not in {".", ":"}
            yield kind, text, candidate
        else:
            yield kind, text, False
        if kind not in {"space", "comment", "long_comment"}:
            previous = text


def extract_identifiers(source: str) -> Dict[str, int]:
    """Count identifier occurrences outside strings, comments and field names."""

    counts: Counter[str] = Counter()
    for _, text, candidate in _renameable_names(source):
        if candidate:
            counts[text] += 1
    return dict(counts)


def _validated(mapping: Mapping[str, str]) -> RenameMap:
    accepted: RenameMap = {}
    for old in sorted(mapping, key=lambda key: (-len(key), key)):
        new = mapping[old]
        if not is_identifier(old) or old in LUA_KEYWORDS:
            LOGGER.warning("Skipping rename of non-identifier or keyword %r", old)
            continue
        if not isinstance(new, str) or not is_identifier(new):
            LOGGER.warning("Skipping rename %r -> %r: target is not a valid identifier", old, new)
            continue
        if old != new:
            accepted[old] = new
    return accepted


def apply_renames(source: str, mapping: Mapping[str, str]) -> str:
    """Apply whole-identifier renames to *source*.

    Keys are considered longest first; keywords are never renamed nor used as
    targets, and names inside strings, comments or after ``.``/``:`` are left
    alone.
    """

    renames = _validated(mapping)
    if not renames:
        return source
    parts = []
    for _, text, candidate in _renameable_names(source):
        parts.append(renames.get(text, text) if candidate else text)
    return "".join(parts)


def run_renamer(source: str, renamer: SymbolRenamer) -> Tuple[str, RenameMap]:
    """Invoke *renamer* on *source* and apply its proposal."""

    identifiers = extract_identifiers(source)
    proposal = renamer(source, identifiers) or {}
    renames = _validated(proposal)
    LOGGER.debug("Renamer proposed %d rename(s), %d accepted", len(proposal), len(renames))
    return apply_renames(source, renames), renames


__all__ = [
    "RenameMap",
    "SymbolRenamer",
    "extract_identifiers",
    "apply_renames",
    "run_renamer",
]
