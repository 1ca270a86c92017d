"""Environment simulation and constant analysis."""

from .environment import CallGraphEntry, EnvironmentObject, EnvironmentSimulator, ObjectKind
from .strings import StringCollector, StringReference
from .symbolic import NumericProxy, SymbolicBool, format_number

__all__ = [
    "CallGraphEntry",
    "EnvironmentObject",
    "EnvironmentSimulator",
    "ObjectKind",
    "StringCollector",
    "StringReference",
    "NumericProxy",
    "SymbolicBool",
    "format_number",
]
