"""Top-level entry point: build, print and report one decompilation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..analysis.environment import CallGraphEntry
from ..analysis.strings import StringReference
from ..bytecode import Function, function_from_mapping
from ..config import DecompileOptions
from ..exceptions import (
    DecompilationError,
    Diagnostic,
    EmptyOrInvalidInput,
    ErrorCode,
    MalformedControlFlow,
)
from ..logging_config import trace_to_file
from ..lua_ast import FunctionLiteral
from ..pretty.printer import HEADER_LINES, LuaPrinter, render_call_graph, render_string_refs
from ..pretty.rename_map import RenameMap, SymbolRenamer, run_renamer
from ..pretty.syntax_check import check_lua_syntax
from .lifter import BuildContext, build_function

LOG = logging.getLogger(__name__)

ROOT_NAME = "main"


@dataclass
class DecompileResult:
    """Container returned by :func:`decompile`."""

    text: str
    ast: Optional[FunctionLiteral]
    call_graph: List[CallGraphEntry] = field(default_factory=list)
    string_refs: List[StringReference] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    error_code: Optional[ErrorCode] = None
    partial: bool = False
    renames: RenameMap = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error_code is None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "call_graph": [entry.as_dict() for entry in self.call_graph],
            "string_refs": [ref.as_dict() for ref in self.string_refs],
            "diagnostics": [diag.as_dict() for diag in self.diagnostics],
            "error_code": self.error_code.value if self.error_code else None,
            "partial": self.partial,
            "renames": dict(self.renames),
        }


def _coerce_function(function: Any) -> Function:
    if function is None:
        raise EmptyOrInvalidInput("no function supplied")
    if isinstance(function, Mapping):
        try:
            function = function_from_mapping(function)
        except (TypeError, ValueError) as exc:
            raise EmptyOrInvalidInput(f"invalid function payload: {exc}") from exc
    if not isinstance(function, Function):
        raise EmptyOrInvalidInput(f"expected a Function, got {type(function).__name__}")
    if not function.instructions:
        raise EmptyOrInvalidInput("function has no instructions")
    return function


def _coerce_options(options: Union[DecompileOptions, Mapping[str, Any], None]) -> DecompileOptions:
    if options is None:
        return DecompileOptions()
    if isinstance(options, DecompileOptions):
        return options
    return DecompileOptions.from_mapping(options)


def _failure_result(options: DecompileOptions, exc: DecompilationError) -> DecompileResult:
    lines = list(HEADER_LINES) if options.header else []
    lines.append(f"-- PARTIAL OUTPUT ({exc.code.value}): {exc.message}")
    return DecompileResult(
        text="\n".join(lines) + "\n",
        ast=None,
        diagnostics=[Diagnostic(exc.code, exc.message, ROOT_NAME, exc.index)],
        error_code=exc.code,
        partial=True,
    )


def decompile(
    function: Union[Function, Mapping[str, Any], None],
    options: Union[DecompileOptions, Mapping[str, Any], None] = None,
    *,
    renamer: Optional[SymbolRenamer] = None,
    debug_logger: Optional[logging.Logger] = None,
    trace_path: Optional[Union[str, Path]] = None,
) -> DecompileResult:
    """Decompile *function* into structured Lua text.

    Structural failures never escape: the result then carries the error code,
    ``partial=True`` and whatever the builders recovered, labelled as partial
    output.  Passing ``debug_logger`` enables a per-instruction trace;
    ``trace_path`` writes that trace to a fresh file instead.
    """

    if trace_path is not None and debug_logger is None:
        with trace_to_file(trace_path) as logger:
            return _decompile(function, options, renamer, logger)
    return _decompile(function, options, renamer, debug_logger)


def _decompile(
    function: Union[Function, Mapping[str, Any], None],
    options: Union[DecompileOptions, Mapping[str, Any], None],
    renamer: Optional[SymbolRenamer],
    debug_logger: Optional[logging.Logger],
) -> DecompileResult:
    opts = _coerce_options(options)
    try:
        root = _coerce_function(function)
    except EmptyOrInvalidInput as exc:
        LOG.warning("Rejecting decompile input: %s", exc.message)
        return _failure_result(opts, exc)

    context = BuildContext.create(opts, debug_logger=debug_logger)
    if debug_logger is not None:
        debug_logger.debug(
            "Starting decompiler (instructions=%d, max_depth=%s, budget=%s, simulate=%s)",
            len(root.instructions),
            opts.max_depth,
            opts.instruction_budget,
            opts.simulate_environment,
        )

    error: Optional[DecompilationError] = None
    try:
        literal = build_function(root, context, name=ROOT_NAME)
    except DecompilationError as exc:
        LOG.warning("Decompilation aborted (%s): %s", exc.code.value, exc.message)
        error = exc
        literal = exc.partial or FunctionLiteral(ROOT_NAME)
        context.diagnostics.append(Diagnostic(exc.code, exc.message, ROOT_NAME, exc.index))

    try:
        body = LuaPrinter(opts.indent_width).render(literal)
    except MalformedControlFlow as exc:
        context.report(ErrorCode.UNBALANCED_BLOCK, exc.message, ROOT_NAME)
        body = LuaPrinter(opts.indent_width, clamp=True).render(literal)

    renames: RenameMap = {}
    if renamer is not None:
        body, renames = run_renamer(body, renamer)

    if opts.validate_syntax and error is None:
        problem = check_lua_syntax(body)
        if problem is not None:
            context.report(ErrorCode.OUTPUT_SYNTAX, problem, ROOT_NAME)

    call_graph = list(context.simulator.call_graph) if context.simulator is not None else []
    string_refs = list(context.strings.references)

    lines: List[str] = list(HEADER_LINES) if opts.header else []
    if error is not None:
        lines.append(f"-- PARTIAL OUTPUT ({error.code.value}): {error.message}")
    if lines and body:
        lines.append("")
    if body:
        lines.append(body)
    trailer: List[str] = []
    if opts.include_call_graph:
        trailer.extend(render_call_graph(call_graph))
    if opts.include_string_refs:
        trailer.extend(render_string_refs(string_refs))
    if trailer:
        lines.append("")
        lines.extend(trailer)

    if debug_logger is not None:
        debug_logger.debug(
            "Decompiler finished (instructions=%d, depth=%d, diagnostics=%d, partial=%s)",
            context.limits.instructions,
            context.limits.max_depth_seen,
            len(context.diagnostics),
            error is not None,
        )

    return DecompileResult(
        text="\n".join(lines).rstrip() + "\n",
        ast=literal,
        call_graph=call_graph,
        string_refs=string_refs,
        diagnostics=list(context.diagnostics),
        error_code=error.code if error is not None else None,
        partial=error is not None,
        renames=renames,
    )


__all__ = ["ROOT_NAME", "DecompileResult", "decompile"]
