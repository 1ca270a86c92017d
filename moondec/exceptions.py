"""Custom exception hierarchy and diagnostics for the decompiler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .lua_ast import FunctionLiteral


class ErrorCode(str, Enum):
    """Machine readable codes shared by failures and diagnostics."""

    MALFORMED_CONTROL_FLOW = "MALFORMED_CONTROL_FLOW"
    UNKNOWN_OPCODE = "UNKNOWN_OPCODE"
    CONSTANT_INDEX_OUT_OF_RANGE = "CONSTANT_INDEX_OUT_OF_RANGE"
    DEPTH_EXCEEDED = "DEPTH_EXCEEDED"
    EMPTY_OR_INVALID_INPUT = "EMPTY_OR_INVALID_INPUT"
    BUDGET_EXCEEDED = "BUDGET_EXCEEDED"
    CANCELLED = "CANCELLED"
    AMBIGUOUS_ARG_COUNT = "AMBIGUOUS_ARG_COUNT"
    UNBALANCED_BLOCK = "UNBALANCED_BLOCK"
    OUTPUT_SYNTAX = "OUTPUT_SYNTAX"


class DecompilationError(Exception):
    """Base class for structural failures that abort a function build.

    ``partial`` is filled in by the builders while the exception unwinds so
    the caller can still render whatever was recovered before the failure.
    """

    code = ErrorCode.MALFORMED_CONTROL_FLOW

    def __init__(self, message: str, *, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.index = index
        self.partial: Optional["FunctionLiteral"] = None


class MalformedControlFlow(DecompilationError):
    """Raised when a compare instruction is not followed by its jump."""

    code = ErrorCode.MALFORMED_CONTROL_FLOW


class DepthExceeded(DecompilationError):
    """Raised when nested closures exceed the configured depth."""

    code = ErrorCode.DEPTH_EXCEEDED


class EmptyOrInvalidInput(DecompilationError):
    code = ErrorCode.EMPTY_OR_INVALID_INPUT


class BudgetExceeded(DecompilationError):
    code = ErrorCode.BUDGET_EXCEEDED


class DecompilationCancelled(DecompilationError):
    code = ErrorCode.CANCELLED


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal anomaly recovered locally during a build."""

    code: ErrorCode
    message: str
    function_path: str = "main"
    index: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "function": self.function_path,
        }
        if self.index is not None:
            payload["index"] = self.index
        return payload


__all__ = [
    "ErrorCode",
    "DecompilationError",
    "MalformedControlFlow",
    "DepthExceeded",
    "EmptyOrInvalidInput",
    "BudgetExceeded",
    "DecompilationCancelled",
    "Diagnostic",
]
