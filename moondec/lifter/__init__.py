"""Bytecode-to-AST lifting."""

from .controlflow import BlockScheduler, jump_target
from .emulator import RegisterTable, RegisterValue, format_constant
from .lifter import BuildContext, FunctionBuilder, build_function
from .runner import DecompileResult, decompile

__all__ = [
    "BlockScheduler",
    "jump_target",
    "RegisterTable",
    "RegisterValue",
    "format_constant",
    "BuildContext",
    "FunctionBuilder",
    "build_function",
    "DecompileResult",
    "decompile",
]
