"""Symbolic environment simulator.

The simulator keeps an arena of :class:`EnvironmentObject` records addressed
by integer handles.  Objects never execute anything: they only carry a
display name and a kind so the builder can name registers after what they
resolve to (``Players`` instead of ``v3``) and so calls that cross a
remote/foreign boundary can be logged to a side-channel call graph.

Three dispatch points mirror the proxy hooks of the host environment:

* :meth:`EnvironmentSimulator.read` for field and global reads,
* :meth:`EnvironmentSimulator.write` for field writes (recorded as output),
* :meth:`EnvironmentSimulator.call` for calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..lua_ast import Assign
from ..naming import NameRegistry, is_identifier, sanitize_identifier
from .patterns import (
    GLOBAL_SERVICE_ALIASES,
    ROOT_NAMESPACE,
    SERVICE_LOOKUP_METHODS,
    SERVICE_SHORTCUTS,
    call_category,
)
from .symbolic import NumericProxy

LOG = logging.getLogger(__name__)

ROOT_HANDLE = 0

UI_METHOD_PREFIXES = ("Create", "Add", "New", "Make")
CONSTRUCTOR_CALLS = frozenset({"Instance.new"})
NUMERIC_PROPERTIES = frozenset(
    {"Health", "MaxHealth", "WalkSpeed", "JumpPower", "JumpHeight", "Value", "Transparency"}
)


class ObjectKind(str, Enum):
    SERVICE = "service"
    UI_LIBRARY = "ui_library"
    NUMERIC_PROXY = "numeric_proxy"
    GENERIC = "generic"


@dataclass(frozen=True, eq=False)
class EnvironmentObject:
    """Arena record.  ``parent`` is a name-lookup back-reference only."""

    id: int
    display_name: str
    kind: ObjectKind
    parent: Optional[int] = None
    key: Optional[str] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EnvironmentObject):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class CallGraphEntry:
    kind: str
    name: str
    args: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "name": self.name, "args": list(self.args)}


@dataclass
class ReadResult:
    handle: int
    text: str


@dataclass
class CallResult:
    """Outcome of :meth:`EnvironmentSimulator.call`."""

    callee: str
    args: List[str]
    handle: Optional[int] = None
    category: Optional[str] = None


@dataclass
class _Arena:
    objects: List[EnvironmentObject] = field(default_factory=list)
    children: Dict[Tuple[Optional[int], str], int] = field(default_factory=dict)


def _unquote(text: str) -> Optional[str]:
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return text[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return None


def field_access(base: str, key_text: str) -> str:
    """Render ``base.key`` or ``base[key]`` for a formatted key operand."""

    key = _unquote(key_text)
    if key is not None and is_identifier(key):
        return f"{base}.{key}"
    return f"{base}[{key_text}]"


class EnvironmentSimulator:
    """Per-decompilation object graph used for naming and telemetry."""

    def __init__(self, names: NameRegistry) -> None:
        self._names = names
        self._arena = _Arena()
        self.call_graph: List[CallGraphEntry] = []
        names.reserve(ROOT_NAMESPACE)
        self._new(ROOT_NAMESPACE, ObjectKind.GENERIC, None, None, fixed=True)

    # ------------------------------------------------------------------
    # Arena helpers
    # ------------------------------------------------------------------

    def _new(
        self,
        hint: str,
        kind: ObjectKind,
        parent: Optional[int],
        key: Optional[str],
        *,
        fixed: bool = False,
    ) -> int:
        handle = len(self._arena.objects)
        name = hint if fixed else self._names.unique(hint)
        self._arena.objects.append(EnvironmentObject(handle, name, kind, parent, key))
        LOG.debug("Simulator object #%d %s (%s)", handle, name, kind.value)
        return handle

    def _child(self, parent: Optional[int], key: str, kind: ObjectKind, hint: str) -> int:
        slot = (parent, key)
        handle = self._arena.children.get(slot)
        if handle is None:
            handle = self._new(hint, kind, parent, key)
            self._arena.children[slot] = handle
        return handle

    def object(self, handle: int) -> EnvironmentObject:
        return self._arena.objects[handle]

    def objects(self) -> Sequence[EnvironmentObject]:
        return tuple(self._arena.objects)

    def __len__(self) -> int:
        return len(self._arena.objects)

    def name_of(self, handle: int) -> str:
        return self.object(handle).display_name

    def is_service(self, handle: Optional[int]) -> bool:
        return handle is not None and self.object(handle).kind is ObjectKind.SERVICE

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def service(self, key: str) -> int:
        shortcut = SERVICE_SHORTCUTS.get(key) or sanitize_identifier(key)
        return self._child(ROOT_HANDLE, key, ObjectKind.SERVICE, shortcut)

    def read_global(self, name: str) -> Optional[ReadResult]:
        """Resolve a global read.  Plain globals (``print``) are not simulated."""

        if name == ROOT_NAMESPACE:
            return ReadResult(ROOT_HANDLE, ROOT_NAMESPACE)
        alias = GLOBAL_SERVICE_ALIASES.get(name)
        if alias is not None:
            return ReadResult(self.service(alias), name)
        return None

    def read(self, handle: int, key_text: str, base_text: str) -> ReadResult:
        """Resolve ``base[key]`` where ``base`` is the simulated object *handle*."""

        key = _unquote(key_text)
        if handle == ROOT_HANDLE and key is not None and key in SERVICE_SHORTCUTS:
            return ReadResult(self.service(key), f'{base_text}:GetService("{key}")')
        text = field_access(base_text, key_text)
        if key is None:
            return ReadResult(self._child(handle, key_text, ObjectKind.GENERIC, "field"), text)
        kind = ObjectKind.NUMERIC_PROXY if key in NUMERIC_PROPERTIES else ObjectKind.GENERIC
        if self.object(handle).kind is ObjectKind.UI_LIBRARY:
            kind = ObjectKind.UI_LIBRARY
        return ReadResult(self._child(handle, key, kind, key), text)

    def write(self, target_text: str, key_text: str, value_text: str) -> Assign:
        """Record ``target[key] = value`` as an output statement."""

        return Assign(field_access(target_text, key_text), value_text, is_declaration=False)

    def call(
        self,
        callee: str,
        args: Sequence[str],
        *,
        callee_handle: Optional[int] = None,
        receiver: Optional[int] = None,
        method: Optional[str] = None,
    ) -> CallResult:
        """Apply call-site conventions and log boundary-crossing calls."""

        arg_list = list(args)
        result = CallResult(callee, arg_list)

        library = _unquote(callee)
        first = _unquote(arg_list[0]) if arg_list else None
        if library is not None and first is not None:
            # "Library"("Button", ...) -> Library:Button(...)
            lib_name = sanitize_identifier(library)
            result.callee = f"{lib_name}:{sanitize_identifier(first)}"
            result.args = arg_list[1:]
            result.handle = self._ui_object(first, None)
        elif callee_handle == ROOT_HANDLE and arg_list:
            result.callee = f"{callee}:GetService"
            if first is not None:
                result.handle = self.service(first)
        elif receiver == ROOT_HANDLE and method in SERVICE_LOOKUP_METHODS and first is not None:
            result.handle = self.service(first)
        elif callee in CONSTRUCTOR_CALLS and first is not None:
            result.handle = self._new(first, ObjectKind.GENERIC, None, None)
        elif receiver is not None and method is not None and self._is_ui_receiver(receiver):
            result.handle = self._ui_object(method, receiver)

        category = call_category(result.callee)
        if category is not None:
            result.category = category
            self.call_graph.append(CallGraphEntry(category, result.callee, tuple(result.args)))
            LOG.debug("Call graph: %s %s(%s)", category, result.callee, ", ".join(result.args))
        return result

    # ------------------------------------------------------------------
    # Numeric proxies
    # ------------------------------------------------------------------

    @staticmethod
    def number(text: str, value: Optional[float]) -> NumericProxy:
        return NumericProxy(text, value)

    def arith(
        self,
        op: str,
        left: NumericProxy,
        right: Optional[NumericProxy] = None,
    ) -> NumericProxy:
        if op == "unm":
            return -left
        if right is None:
            raise ValueError(f"binary operator {op!r} needs two operands")
        return left.binary(op, right)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _is_ui_receiver(self, handle: int) -> bool:
        obj = self.object(handle)
        return obj.kind is ObjectKind.UI_LIBRARY

    def _ui_object(self, method: str, parent: Optional[int]) -> int:
        name = method
        for prefix in UI_METHOD_PREFIXES:
            if name.startswith(prefix) and len(name) > len(prefix):
                name = name[len(prefix):]
                break
        return self._new(name, ObjectKind.UI_LIBRARY, parent, method)


__all__ = [
    "ROOT_HANDLE",
    "ObjectKind",
    "EnvironmentObject",
    "CallGraphEntry",
    "ReadResult",
    "CallResult",
    "EnvironmentSimulator",
    "field_access",
]
