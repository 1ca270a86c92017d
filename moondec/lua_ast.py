"""Statement nodes produced by the builder and consumed by the printer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Union


class AstNode:
    """Base class for statements emitted by the builder."""


class MarkerKind(str, Enum):
    OPEN = "open"
    MIDDLE = "middle"
    CLOSE = "close"


@dataclass
class Block:
    """Ordered statement list; order is source order and must be kept."""

    statements: List[AstNode] = field(default_factory=list)

    def append(self, node: AstNode) -> None:
        self.statements.append(node)

    def extend(self, nodes: Sequence[AstNode]) -> None:
        self.statements.extend(nodes)

    def __iter__(self) -> Iterator[AstNode]:
        return iter(self.statements)

    def __len__(self) -> int:
        return len(self.statements)


@dataclass
class FunctionLiteral(AstNode):
    name: str
    body: Block = field(default_factory=Block)
    is_anonymous: bool = True
    captured_upvalues: List[str] = field(default_factory=list)
    params: List[str] = field(default_factory=list)
    is_vararg: bool = True


@dataclass
class Assign(AstNode):
    target: str
    value: Union[str, FunctionLiteral]
    is_declaration: bool = False
    comment: Optional[str] = None


@dataclass
class Call(AstNode):
    callee: str
    args: List[str] = field(default_factory=list)
    comment: Optional[str] = None

    @property
    def expression(self) -> str:
        return render_call(self.callee, self.args)


@dataclass
class Return(AstNode):
    values: List[str] = field(default_factory=list)
    comment: Optional[str] = None


@dataclass
class BlockMarker(AstNode):
    text: str
    kind: MarkerKind = MarkerKind.OPEN


@dataclass
class Raw(AstNode):
    text: str


_SHORT_ESCAPES: Dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def render_call(callee: str, args: Sequence[str]) -> str:
    return f"{callee}({', '.join(args)})"


def quote_string(value: str) -> str:
    """Quote *value* as a double-quoted Lua string literal.

    Control characters without a short escape use the fixed three-digit
    decimal form so a following digit is never read as part of the escape.
    """

    parts = []
    for ch in value:
        escape = _SHORT_ESCAPES.get(ch)
        if escape is not None:
            parts.append(escape)
        elif ord(ch) < 32 or ord(ch) == 127:
            parts.append(f"\\{ord(ch):03d}")
        else:
            parts.append(ch)
    return '"' + "".join(parts) + '"'


__all__ = [
    "AstNode",
    "MarkerKind",
    "Block",
    "FunctionLiteral",
    "Assign",
    "Call",
    "Return",
    "BlockMarker",
    "Raw",
    "render_call",
    "quote_string",
]
