"""Numeric proxies used by the environment simulator.

A :class:`NumericProxy` stands in for a VM number.  When both operands of an
arithmetic hook carry a known value the result folds to a new literal;
otherwise the hook produces a textual expression.  Division and modulo by a
known zero fold to ``0`` instead of raising.
"""

from __future__ import annotations

import math
import operator
from dataclasses import dataclass
from typing import Callable, Optional, Union

Operand = Union["NumericProxy", int, float, str]


def format_number(value: float) -> str:
    """Return canonical Lua text for a number (``3`` rather than ``3.0``)."""

    if math.isnan(value):
        return "(0/0)"
    if math.isinf(value):
        return "math.huge" if value > 0 else "-math.huge"
    if float(value).is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(float(value))


def needs_parens(text: str) -> bool:
    """Return ``True`` when *text* has a top-level operator gap."""

    depth = 0
    quote: Optional[str] = None
    escaped = False
    for ch in text:
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == " " and depth == 0:
            return True
    return False


def wrap(text: str) -> str:
    return f"({text})" if needs_parens(text) else text


def _lua_mod(left: float, right: float) -> float:
    if right == 0:
        return 0.0
    return left - math.floor(left / right) * right


def _lua_div(left: float, right: float) -> float:
    if right == 0:
        return 0.0
    return left / right


_BINARY_OPS: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _lua_div,
    "%": _lua_mod,
    "^": operator.pow,
}

_COMPARE_OPS: dict[str, Callable[[float, float], bool]] = {
    "==": operator.eq,
    "~=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
}


@dataclass(frozen=True)
class SymbolicBool:
    """Outcome of a proxy comparison."""

    text: str
    value: Optional[bool] = None

    def __str__(self) -> str:
        return self.text


class NumericProxy:
    """Symbolic number with operator hooks."""

    __slots__ = ("text", "value")

    def __init__(self, text: str, value: Optional[float] = None) -> None:
        self.text = text
        self.value = value

    @classmethod
    def known(cls, value: float) -> "NumericProxy":
        return cls(format_number(float(value)), float(value))

    @classmethod
    def symbol(cls, text: str) -> "NumericProxy":
        return cls(text, None)

    @classmethod
    def coerce(cls, operand: Operand) -> "NumericProxy":
        if isinstance(operand, NumericProxy):
            return operand
        if isinstance(operand, bool):
            return cls.symbol("true" if operand else "false")
        if isinstance(operand, (int, float)):
            return cls.known(operand)
        return cls.symbol(str(operand))

    @property
    def is_known(self) -> bool:
        return self.value is not None

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def binary(self, op: str, other: Operand, *, reflected: bool = False) -> "NumericProxy":
        rhs = NumericProxy.coerce(other)
        left, right = (rhs, self) if reflected else (self, rhs)
        if left.value is not None and right.value is not None:
            try:
                folded = _BINARY_OPS[op](left.value, right.value)
            except (OverflowError, ZeroDivisionError, ValueError):
                folded = None
            if isinstance(folded, float) and math.isfinite(folded):
                return NumericProxy.known(folded)
            if isinstance(folded, int):
                return NumericProxy.known(float(folded))
        return NumericProxy.symbol(f"{wrap(left.text)} {op} {wrap(right.text)}")

    def compare(self, op: str, other: Operand) -> SymbolicBool:
        rhs = NumericProxy.coerce(other)
        text = f"{wrap(self.text)} {op} {wrap(rhs.text)}"
        if self.value is not None and rhs.value is not None:
            result = _COMPARE_OPS[op](self.value, rhs.value)
            return SymbolicBool("true" if result else "false", result)
        return SymbolicBool(text)

    def __add__(self, other: Operand) -> "NumericProxy":
        return self.binary("+", other)

    def __radd__(self, other: Operand) -> "NumericProxy":
        return self.binary("+", other, reflected=True)

    def __sub__(self, other: Operand) -> "NumericProxy":
        return self.binary("-", other)

    def __rsub__(self, other: Operand) -> "NumericProxy":
        return self.binary("-", other, reflected=True)

    def __mul__(self, other: Operand) -> "NumericProxy":
        return self.binary("*", other)

    def __rmul__(self, other: Operand) -> "NumericProxy":
        return self.binary("*", other, reflected=True)

    def __truediv__(self, other: Operand) -> "NumericProxy":
        return self.binary("/", other)

    def __rtruediv__(self, other: Operand) -> "NumericProxy":
        return self.binary("/", other, reflected=True)

    def __mod__(self, other: Operand) -> "NumericProxy":
        return self.binary("%", other)

    def __rmod__(self, other: Operand) -> "NumericProxy":
        return self.binary("%", other, reflected=True)

    def __pow__(self, other: Operand) -> "NumericProxy":
        return self.binary("^", other)

    def __rpow__(self, other: Operand) -> "NumericProxy":
        return self.binary("^", other, reflected=True)

    def __neg__(self) -> "NumericProxy":
        if self.value is not None:
            return NumericProxy.known(-self.value)
        return NumericProxy.symbol(f"-{wrap(self.text)}")

    def eq(self, other: Operand) -> SymbolicBool:
        return self.compare("==", other)

    def lt(self, other: Operand) -> SymbolicBool:
        return self.compare("<", other)

    def le(self, other: Operand) -> SymbolicBool:
        return self.compare("<=", other)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"NumericProxy({self.text!r}, value={self.value!r})"


__all__ = [
    "format_number",
    "needs_parens",
    "wrap",
    "SymbolicBool",
    "NumericProxy",
]
