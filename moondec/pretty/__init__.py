"""Helpers for human-friendly presentation of recovered code."""

from .printer import HEADER_LINES, LuaPrinter, render_call_graph, render_string_refs
from .rename_map import SymbolRenamer, apply_renames, extract_identifiers, run_renamer
from .syntax_check import check_lua_syntax, is_valid_lua

__all__ = [
    "HEADER_LINES",
    "LuaPrinter",
    "render_call_graph",
    "render_string_refs",
    "SymbolRenamer",
    "apply_renames",
    "extract_identifiers",
    "run_renamer",
    "check_lua_syntax",
    "is_valid_lua",
]
