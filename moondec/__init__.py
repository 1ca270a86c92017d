"""moondec: structured source recovery for Lua-5.1-style VM bytecode."""

from .bytecode import (
    BoolConstant,
    Function,
    Instruction,
    NilConstant,
    NumberConstant,
    OpKind,
    StringConstant,
    function_from_mapping,
)
from .config import DecompileOptions
from .exceptions import DecompilationError, Diagnostic, ErrorCode
from .lifter.runner import DecompileResult, decompile

__version__ = "0.1.0"

__all__ = [
    "BoolConstant",
    "Function",
    "Instruction",
    "NilConstant",
    "NumberConstant",
    "OpKind",
    "StringConstant",
    "function_from_mapping",
    "DecompileOptions",
    "DecompilationError",
    "Diagnostic",
    "ErrorCode",
    "DecompileResult",
    "decompile",
    "__version__",
]
