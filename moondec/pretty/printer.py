"""Render a recovered AST to indented Lua text."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from ..analysis.environment import CallGraphEntry
from ..analysis.strings import StringReference
from ..exceptions import MalformedControlFlow
from ..lua_ast import (
    Assign,
    AstNode,
    BlockMarker,
    Call,
    FunctionLiteral,
    MarkerKind,
    Raw,
    Return,
    quote_string,
)

LOG = logging.getLogger(__name__)

HEADER_LINES = (
    "-- Decompiled with High-Level Flow Recovery",
    "-- Target: Roblox / Moonsec VM",
)


def _with_comment(text: str, comment: str | None) -> str:
    if comment:
        return f"{text} -- {comment}"
    return text


def _param_list(literal: FunctionLiteral) -> str:
    params = list(literal.params)
    if literal.is_vararg:
        params.append("...")
    return ", ".join(params)


class LuaPrinter:
    """Depth-first renderer driven by a single indentation counter.

    With ``clamp=False`` a close marker that would drive the counter below
    the enclosing function's level raises :class:`MalformedControlFlow`.
    """

    def __init__(self, indent_width: int = 4, *, clamp: bool = False) -> None:
        self.indent_width = max(0, int(indent_width))
        self.clamp = clamp
        self._lines: List[str] = []
        self._level = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, literal: FunctionLiteral) -> str:
        """Render the root function body without a wrapping header."""

        self._lines = []
        self._level = 0
        if literal.captured_upvalues:
            self._line(f"-- upvalues: {', '.join(literal.captured_upvalues)}")
        self._body(literal.body, 0)
        return "\n".join(self._lines)

    def render_function(self, literal: FunctionLiteral, *, local: bool = True) -> str:
        """Render *literal* as a standalone function definition."""

        self._lines = []
        self._level = 0
        header = f"local function {literal.name}" if local else f"function {literal.name}"
        self._function(f"{header}({_param_list(literal)})", literal)
        return "\n".join(self._lines)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _line(self, text: str) -> None:
        self._lines.append(" " * (self.indent_width * self._level) + text)

    def _function(self, header: str, literal: FunctionLiteral) -> None:
        self._line(header)
        base = self._level
        self._level += 1
        if literal.captured_upvalues:
            self._line(f"-- upvalues: {', '.join(literal.captured_upvalues)}")
        self._body(literal.body, base + 1)
        self._level = base
        self._line("end")

    def _body(self, nodes: Iterable[AstNode], floor: int) -> None:
        for node in nodes:
            self._node(node, floor)
        if self._level != floor:
            self._unbalanced(f"{self._level - floor} block(s) left open at end of function body")
            self._level = floor

    def _dedent(self, floor: int, marker: str) -> None:
        if self._level <= floor:
            self._unbalanced(f"'{marker}' without an open block")
            self._level = floor
            return
        self._level -= 1

    def _unbalanced(self, message: str) -> None:
        if not self.clamp:
            raise MalformedControlFlow(f"printer indentation error: {message}")
        LOG.warning("Clamping printer indentation: %s", message)

    def _node(self, node: AstNode, floor: int) -> None:
        if isinstance(node, BlockMarker):
            if node.kind is MarkerKind.OPEN:
                self._line(node.text)
                self._level += 1
            elif node.kind is MarkerKind.MIDDLE:
                self._dedent(floor, node.text)
                self._line(node.text)
                self._level += 1
            else:
                self._dedent(floor, node.text)
                self._line(node.text)
        elif isinstance(node, Assign):
            if isinstance(node.value, FunctionLiteral):
                if node.is_declaration:
                    header = f"local function {node.target}({_param_list(node.value)})"
                else:
                    header = f"{node.target} = function({_param_list(node.value)})"
                self._function(_with_comment(header, node.comment), node.value)
            else:
                prefix = "local " if node.is_declaration else ""
                self._line(_with_comment(f"{prefix}{node.target} = {node.value}", node.comment))
        elif isinstance(node, Call):
            self._line(_with_comment(node.expression, node.comment))
        elif isinstance(node, Return):
            text = "return " + ", ".join(node.values) if node.values else "return"
            self._line(_with_comment(text, node.comment))
        elif isinstance(node, FunctionLiteral):
            self._function(f"function {node.name}({_param_list(node)})", node)
        elif isinstance(node, Raw):
            self._line(node.text)
        else:
            raise TypeError(f"Cannot print node {node!r}")


def render_call_graph(entries: Sequence[CallGraphEntry]) -> List[str]:
    if not entries:
        return []
    lines = ["-- Call graph:"]
    for entry in entries:
        lines.append(f"--   [{entry.kind}] {entry.name}({', '.join(entry.args)})")
    return lines


def render_string_refs(references: Sequence[StringReference]) -> List[str]:
    if not references:
        return []
    lines = ["-- String references:"]
    for ref in references:
        # keep the preview on one comment line
        value = quote_string(ref.value)
        lines.append(f"--   [{ref.hint}] {value} (length {ref.full_length})")
    return lines


__all__ = [
    "HEADER_LINES",
    "LuaPrinter",
    "render_call_graph",
    "render_string_refs",
]
