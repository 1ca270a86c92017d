"""Register state tracking for the AST builder."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set

from ..analysis.symbolic import NumericProxy, format_number
from ..bytecode import (
    RK_THRESHOLD,
    BoolConstant,
    Constant,
    NilConstant,
    NumberConstant,
    StringConstant,
)
from ..lua_ast import quote_string


class ValueKind(Enum):
    LITERAL = "literal"
    EXPR = "expr"
    CLOSURE = "closure"
    UNSET = "unset"


@dataclass(frozen=True)
class RegisterValue:
    """What a register currently holds.

    ``handle`` links the value to a simulator object; ``receiver`` and
    ``method`` are set for the callee slot produced by a ``SELF`` fusion.
    ``number`` is the known numeric value of a literal, when there is one.
    """

    kind: ValueKind
    text: str
    number: Optional[float] = None
    handle: Optional[int] = None
    receiver: Optional[int] = None
    method: Optional[str] = None
    is_string: bool = False

    @classmethod
    def literal(cls, text: str, *, number: Optional[float] = None, is_string: bool = False) -> "RegisterValue":
        return cls(ValueKind.LITERAL, text, number=number, is_string=is_string)

    @classmethod
    def expr(cls, text: str, *, handle: Optional[int] = None) -> "RegisterValue":
        return cls(ValueKind.EXPR, text, handle=handle)

    @classmethod
    def closure(cls, name: str) -> "RegisterValue":
        return cls(ValueKind.CLOSURE, name)

    @classmethod
    def unset(cls, index: int) -> "RegisterValue":
        return cls(ValueKind.UNSET, placeholder(index))

    @property
    def is_unset(self) -> bool:
        return self.kind is ValueKind.UNSET

    def as_number(self) -> NumericProxy:
        return NumericProxy(self.text, self.number)

    def renamed(self, text: str) -> "RegisterValue":
        """Return the value as read through a bound local called *text*."""

        return replace(self, kind=ValueKind.EXPR, text=text, number=None, is_string=False)


def placeholder(index: int) -> str:
    return f"reg{index}"


def format_constant(constant: Constant) -> str:
    """Render a constant as a Lua literal."""

    if isinstance(constant, StringConstant):
        return quote_string(constant.value)
    if isinstance(constant, NumberConstant):
        return format_number(constant.value)
    if isinstance(constant, BoolConstant):
        return "true" if constant.value else "false"
    if isinstance(constant, NilConstant):
        return "nil"
    raise TypeError(f"Unsupported constant: {constant!r}")


def constant_value(constant: Constant) -> RegisterValue:
    text = format_constant(constant)
    if isinstance(constant, NumberConstant):
        return RegisterValue.literal(text, number=constant.value)
    return RegisterValue.literal(text, is_string=isinstance(constant, StringConstant))


class RegisterTable:
    """Per-function register map plus constant pool access.

    Out-of-range constant indexes degrade to ``nil`` and are queued on
    :attr:`anomalies` for the builder to report.
    """

    def __init__(self, constants: Sequence[Constant]) -> None:
        self._constants = list(constants)
        self._values: Dict[int, RegisterValue] = {}
        self._unread: Set[int] = set()
        self.anomalies: List[str] = []

    # ------------------------------------------------------------------
    # Register access
    # ------------------------------------------------------------------

    def get(self, index: int) -> RegisterValue:
        self._unread.discard(index)
        return self.peek(index)

    def peek(self, index: int) -> RegisterValue:
        """Like :meth:`get` but does not count as a read."""

        value = self._values.get(index)
        if value is None:
            return RegisterValue.unset(index)
        return value

    def resolve(self, index: int) -> str:
        return self.get(index).text

    def set(self, index: int, value: RegisterValue, *, unread: bool = False) -> None:
        """Store *value*.  ``unread`` marks a write that nothing has consumed yet."""

        self._values[index] = value
        if unread:
            self._unread.add(index)
        else:
            self._unread.discard(index)

    def is_unread(self, index: int) -> bool:
        return index in self._unread

    def unread(self) -> List[int]:
        return sorted(self._unread)

    def clear(self, index: int) -> None:
        self._values.pop(index, None)
        self._unread.discard(index)

    def is_bound(self, index: int) -> bool:
        return index in self._values

    def bound_above(self, base: int) -> List[int]:
        """Contiguous bound registers starting at ``base + 1``."""

        found: List[int] = []
        index = base + 1
        while index in self._values:
            found.append(index)
            index += 1
        return found

    def snapshot(self) -> Dict[int, str]:
        return {index: value.text for index, value in sorted(self._values.items())}

    # ------------------------------------------------------------------
    # Constants
    # ------------------------------------------------------------------

    @property
    def constants(self) -> Sequence[Constant]:
        return self._constants

    def constant(self, index: int) -> Optional[Constant]:
        if 0 <= index < len(self._constants):
            return self._constants[index]
        self.anomalies.append(f"constant index {index} out of range (pool size {len(self._constants)})")
        return None

    def constant_value(self, index: int) -> RegisterValue:
        constant = self.constant(index)
        if constant is None:
            return RegisterValue.literal("nil")
        return constant_value(constant)

    def constant_string(self, index: int) -> Optional[str]:
        constant = self.constant(index)
        if isinstance(constant, StringConstant):
            return constant.value
        return None

    def resolve_rk_value(self, operand: int) -> RegisterValue:
        if operand >= RK_THRESHOLD:
            return self.constant_value(operand - RK_THRESHOLD)
        return self.get(operand)

    def resolve_rk(self, operand: int) -> str:
        return self.resolve_rk_value(operand).text

    def drain_anomalies(self) -> List[str]:
        pending, self.anomalies = self.anomalies, []
        return pending


__all__ = [
    "ValueKind",
    "RegisterValue",
    "RegisterTable",
    "placeholder",
    "format_constant",
    "constant_value",
]
