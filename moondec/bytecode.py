"""Passive bytecode model consumed by the decompiler.

Instructions, constants and prototypes are produced by an external bytecode
reader.  The helpers here only normalise in-memory payloads (dicts, lists or
JSON-like structures) into the typed model; nothing in this module touches
the filesystem.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

LOG = logging.getLogger(__name__)

RK_THRESHOLD = 256


class OpKind(Enum):
    """Closed set of operations understood by the builder."""

    MOVE = "MOVE"
    LOAD_CONST = "LOADK"
    LOAD_BOOL = "LOADBOOL"
    LOAD_NIL = "LOADNIL"
    GET_UPVALUE = "GETUPVAL"
    LOAD_GLOBAL = "GETGLOBAL"
    GET_FIELD = "GETTABLE"
    SET_GLOBAL = "SETGLOBAL"
    SET_UPVALUE = "SETUPVAL"
    SET_FIELD = "SETTABLE"
    NEW_TABLE = "NEWTABLE"
    SELF_INDEX = "SELF"
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"
    MOD = "MOD"
    POW = "POW"
    UNM = "UNM"
    NOT = "NOT"
    LEN = "LEN"
    CONCAT = "CONCAT"
    JUMP = "JMP"
    COMPARE_EQ = "EQ"
    COMPARE_LT = "LT"
    COMPARE_LE = "LE"
    CALL = "CALL"
    RETURN = "RETURN"
    MAKE_CLOSURE = "CLOSURE"
    NOP = "NOP"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_name(cls, name: Any) -> "OpKind":
        """Return the kind for a Lua mnemonic or an enum-style name.

        Unrecognised names map to :attr:`UNKNOWN` instead of raising.
        """

        if isinstance(name, OpKind):
            return name
        if not isinstance(name, str):
            return cls.UNKNOWN
        text = name.strip().upper()
        if not text:
            return cls.UNKNOWN
        compact = text.replace("_", "")
        return _NAME_ALIASES.get(text) or _NAME_ALIASES.get(compact) or cls.UNKNOWN

    @property
    def is_compare(self) -> bool:
        return self in (OpKind.COMPARE_EQ, OpKind.COMPARE_LT, OpKind.COMPARE_LE)


_NAME_ALIASES: Dict[str, OpKind] = {}
for _kind in OpKind:
    _NAME_ALIASES[_kind.value] = _kind
    _NAME_ALIASES[_kind.name] = _kind
    _NAME_ALIASES[_kind.name.replace("_", "")] = _kind
_NAME_ALIASES.update(
    {
        "LOADCONST": OpKind.LOAD_CONST,
        "GETGLOBAL": OpKind.LOAD_GLOBAL,
        "GETTABLE": OpKind.GET_FIELD,
        "SETTABLE": OpKind.SET_FIELD,
        "SELFINDEX": OpKind.SELF_INDEX,
        "MAKECLOSURE": OpKind.MAKE_CLOSURE,
        "JUMP": OpKind.JUMP,
        "COMPAREEQ": OpKind.COMPARE_EQ,
        "COMPARELT": OpKind.COMPARE_LT,
        "COMPARELE": OpKind.COMPARE_LE,
    }
)

# Lua 5.1 dispatch order.  Slots without a dedicated kind (TEST, FORLOOP, ...)
# are left out so they decode as UNKNOWN and degrade to a comment.
LUA51_OPCODES: Mapping[int, OpKind] = {
    0x00: OpKind.MOVE,
    0x01: OpKind.LOAD_CONST,
    0x02: OpKind.LOAD_BOOL,
    0x03: OpKind.LOAD_NIL,
    0x04: OpKind.GET_UPVALUE,
    0x05: OpKind.LOAD_GLOBAL,
    0x06: OpKind.GET_FIELD,
    0x07: OpKind.SET_GLOBAL,
    0x08: OpKind.SET_UPVALUE,
    0x09: OpKind.SET_FIELD,
    0x0A: OpKind.NEW_TABLE,
    0x0B: OpKind.SELF_INDEX,
    0x0C: OpKind.ADD,
    0x0D: OpKind.SUB,
    0x0E: OpKind.MUL,
    0x0F: OpKind.DIV,
    0x10: OpKind.MOD,
    0x11: OpKind.POW,
    0x12: OpKind.UNM,
    0x13: OpKind.NOT,
    0x14: OpKind.LEN,
    0x15: OpKind.CONCAT,
    0x16: OpKind.JUMP,
    0x17: OpKind.COMPARE_EQ,
    0x18: OpKind.COMPARE_LT,
    0x19: OpKind.COMPARE_LE,
    0x1C: OpKind.CALL,
    0x1E: OpKind.RETURN,
    0x24: OpKind.MAKE_CLOSURE,
}


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction.  ``b`` and ``c`` are signed."""

    opcode: OpKind
    a: int = 0
    b: int = 0
    c: int = 0
    raw_opcode: Optional[int] = None

    @property
    def mnemonic(self) -> str:
        if self.opcode is OpKind.UNKNOWN and self.raw_opcode is not None:
            return f"OP_{self.raw_opcode:02X}"
        return self.opcode.value


@dataclass(frozen=True)
class StringConstant:
    value: str


@dataclass(frozen=True)
class NumberConstant:
    value: float


@dataclass(frozen=True)
class BoolConstant:
    value: bool


@dataclass(frozen=True)
class NilConstant:
    pass


Constant = Union[StringConstant, NumberConstant, BoolConstant, NilConstant]


@dataclass
class Function:
    """A function prototype.  Each prototype exclusively owns its children."""

    instructions: List[Instruction] = field(default_factory=list)
    constants: List[Constant] = field(default_factory=list)
    children: List["Function"] = field(default_factory=list)
    name: str = ""
    num_params: int = 0
    is_vararg: bool = True
    upvalue_count: int = 0
    upvalue_names: List[str] = field(default_factory=list)


def make_constant(value: Any) -> Constant:
    """Wrap a plain Python value into the matching constant record."""

    if isinstance(value, (StringConstant, NumberConstant, BoolConstant, NilConstant)):
        return value
    if value is None:
        return NilConstant()
    if isinstance(value, bool):
        return BoolConstant(value)
    if isinstance(value, (int, float)):
        return NumberConstant(float(value))
    if isinstance(value, (bytes, bytearray)):
        return StringConstant(bytes(value).decode("latin-1"))
    if isinstance(value, str):
        return StringConstant(value)
    if isinstance(value, Mapping):
        kind = str(value.get("type") or value.get("kind") or "").lower()
        inner = value.get("value")
        if kind in {"nil", "null"}:
            return NilConstant()
        if kind in {"bool", "boolean"}:
            return BoolConstant(bool(inner))
        if kind in {"number", "num", "int", "float"}:
            return NumberConstant(float(inner))
        if kind in {"string", "str"}:
            return StringConstant(str(inner))
    raise TypeError(f"Unsupported constant: {value!r}")


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.lstrip("-").isdigit():
        return int(value)
    return default


def _decode_opcode(value: Any) -> Tuple[OpKind, Optional[int]]:
    if isinstance(value, OpKind):
        return value, None
    if isinstance(value, int) and not isinstance(value, bool):
        kind = LUA51_OPCODES.get(value, OpKind.UNKNOWN)
        return kind, value
    return OpKind.from_name(value), None


def make_instruction(row: Any) -> Instruction:
    """Normalise a single instruction row.

    Rows may be :class:`Instruction` objects, mappings with ``op``/``opcode``/
    ``mnemonic`` plus ``A``/``B``/``C`` keys (either case), or ``[op, a, b, c]``
    sequences.
    """

    if isinstance(row, Instruction):
        return row
    if isinstance(row, Mapping):
        op = None
        for key in ("op", "mnemonic", "opcode", "opnum"):
            if row.get(key) is not None:
                op = row[key]
                break
        kind, raw = _decode_opcode(op)
        if kind is OpKind.UNKNOWN and raw is None and isinstance(row.get("opcode"), int):
            raw = row["opcode"]

        def _operand(name: str) -> int:
            for key in (name, name.lower()):
                if key in row:
                    return _as_int(row[key])
            return 0

        b = _operand("B")
        if "sBx" in row:
            b = _as_int(row["sBx"])
        elif "Bx" in row and "B" not in row and "b" not in row:
            b = _as_int(row["Bx"])
        return Instruction(kind, _operand("A"), b, _operand("C"), raw_opcode=raw)
    if isinstance(row, Sequence) and not isinstance(row, (str, bytes, bytearray)):
        items = list(row) + [0, 0, 0, 0]
        kind, raw = _decode_opcode(items[0])
        return Instruction(kind, _as_int(items[1]), _as_int(items[2]), _as_int(items[3]), raw_opcode=raw)
    raise TypeError(f"Unsupported instruction row: {row!r}")


def _first_present(payload: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def function_from_mapping(payload: Any) -> Function:
    """Build a :class:`Function` tree from a JSON-like payload."""

    if isinstance(payload, Function):
        return payload
    if not isinstance(payload, Mapping):
        raise TypeError(f"Expected a mapping for a function prototype, got {type(payload).__name__}")

    rows = _first_present(payload, ("instructions", "code", "bytecode")) or []
    consts = _first_present(payload, ("constants", "consts")) or []
    kids = _first_present(payload, ("children", "prototypes", "functions")) or []

    function = Function(
        instructions=[make_instruction(row) for row in rows],
        constants=[make_constant(value) for value in consts],
        children=[function_from_mapping(child) for child in kids],
        name=str(payload.get("name") or ""),
        num_params=_as_int(payload.get("num_params", payload.get("numparams")), 0),
        is_vararg=bool(payload.get("is_vararg", True)),
        upvalue_count=_as_int(payload.get("upvalue_count", payload.get("nups")), 0),
        upvalue_names=[str(name) for name in payload.get("upvalue_names") or []],
    )
    LOG.debug(
        "Normalised prototype %r (instructions=%d, constants=%d, children=%d)",
        function.name or "<anonymous>",
        len(function.instructions),
        len(function.constants),
        len(function.children),
    )
    return function


__all__ = [
    "RK_THRESHOLD",
    "OpKind",
    "LUA51_OPCODES",
    "Instruction",
    "StringConstant",
    "NumberConstant",
    "BoolConstant",
    "NilConstant",
    "Constant",
    "Function",
    "make_constant",
    "make_instruction",
    "function_from_mapping",
]
