"""Instruction lifting: turn one function prototype into an AST."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..analysis.environment import EnvironmentSimulator, field_access
from ..analysis.strings import StringCollector
from ..analysis.symbolic import NumericProxy, wrap
from ..bytecode import Function, Instruction, OpKind, StringConstant
from ..config import DecompileLimits, DecompileOptions
from ..exceptions import DecompilationError, Diagnostic, ErrorCode
from ..lua_ast import (
    Assign,
    AstNode,
    Block,
    BlockMarker,
    Call,
    FunctionLiteral,
    Raw,
    Return,
    quote_string,
    render_call,
)
from ..naming import NameRegistry, is_identifier
from .controlflow import COMPARE_OPERATORS, BlockScheduler, compare_condition
from .emulator import RegisterTable, RegisterValue, ValueKind, format_constant

LOG = logging.getLogger(__name__)

VARIABLE_ARGS_COMMENT = "variable argument count"

_ARITH_OPERATORS: Dict[OpKind, str] = {
    OpKind.ADD: "+",
    OpKind.SUB: "-",
    OpKind.MUL: "*",
    OpKind.DIV: "/",
    OpKind.MOD: "%",
    OpKind.POW: "^",
}

# opcodes whose A operand is written without being read first
_OVERWRITES_A = frozenset(
    {
        OpKind.LOAD_BOOL,
        OpKind.LOAD_NIL,
        OpKind.GET_UPVALUE,
        OpKind.LOAD_GLOBAL,
        OpKind.NEW_TABLE,
        OpKind.MAKE_CLOSURE,
    }
)


@dataclass
class BuildContext:
    """State shared by every builder of one :func:`decompile` call."""

    options: DecompileOptions
    limits: DecompileLimits
    names: NameRegistry
    strings: StringCollector
    simulator: Optional[EnvironmentSimulator] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    debug_logger: Optional[logging.Logger] = None

    @classmethod
    def create(
        cls,
        options: Optional[DecompileOptions] = None,
        *,
        debug_logger: Optional[logging.Logger] = None,
    ) -> "BuildContext":
        options = options or DecompileOptions()
        names = NameRegistry()
        simulator = EnvironmentSimulator(names) if options.simulate_environment else None
        return cls(
            options=options,
            limits=DecompileLimits.from_options(options),
            names=names,
            strings=StringCollector(options.long_string_threshold),
            simulator=simulator,
            debug_logger=debug_logger,
        )

    def report(self, code: ErrorCode, message: str, path: str, index: Optional[int] = None) -> None:
        LOG.debug("Diagnostic %s in %s at %s: %s", code.value, path, index, message)
        self.diagnostics.append(Diagnostic(code, message, path, index))


@dataclass
class _Upvalue:
    name: str
    handle: Optional[int] = None


class FunctionBuilder:
    """Single forward pass over one prototype producing a :class:`FunctionLiteral`."""

    def __init__(
        self,
        function: Function,
        context: BuildContext,
        *,
        name: str = "main",
        path: str = "main",
        upvalues: Optional[Sequence[Tuple[str, Optional[int]]]] = None,
    ) -> None:
        self._function = function
        self._instructions = list(function.instructions)
        self._ctx = context
        self._sim = context.simulator
        self._name = name
        self._path = path
        self._regs = RegisterTable(function.constants)
        self._flow = BlockScheduler(self._instructions)
        self._body = Block()
        self._reg_names: Dict[int, str] = {}
        self._object_names: Dict[int, str] = {}
        self._top: Optional[int] = None
        self._captured: List[str] = []
        self._upvalues: List[_Upvalue] = [_Upvalue(n, h) for n, h in (upvalues or [])]
        for index, debug_name in enumerate(function.upvalue_names):
            if index >= len(self._upvalues):
                self._upvalues.append(_Upvalue(debug_name))
        self._params: List[str] = []
        for index in range(max(0, function.num_params)):
            param = context.names.unique(f"arg{index}")
            self._params.append(param)
            self._reg_names[index] = param
            self._regs.set(index, RegisterValue.expr(param))
        self._translators: Dict[OpKind, Callable[[Instruction, int], int]] = {
            OpKind.MOVE: self._translate_move,
            OpKind.LOAD_CONST: self._translate_loadk,
            OpKind.LOAD_BOOL: self._translate_loadbool,
            OpKind.LOAD_NIL: self._translate_loadnil,
            OpKind.GET_UPVALUE: self._translate_getupval,
            OpKind.SET_UPVALUE: self._translate_setupval,
            OpKind.LOAD_GLOBAL: self._translate_getglobal,
            OpKind.SET_GLOBAL: self._translate_setglobal,
            OpKind.GET_FIELD: self._translate_gettable,
            OpKind.SET_FIELD: self._translate_settable,
            OpKind.NEW_TABLE: self._translate_newtable,
            OpKind.SELF_INDEX: self._translate_self,
            OpKind.UNM: self._translate_unary,
            OpKind.NOT: self._translate_unary,
            OpKind.LEN: self._translate_unary,
            OpKind.CONCAT: self._translate_concat,
            OpKind.CALL: self._translate_call,
            OpKind.RETURN: self._translate_return,
            OpKind.MAKE_CLOSURE: self._translate_closure,
            OpKind.COMPARE_EQ: self._translate_compare,
            OpKind.COMPARE_LT: self._translate_compare,
            OpKind.COMPARE_LE: self._translate_compare,
            OpKind.JUMP: self._translate_jump,
            OpKind.NOP: self._translate_nop,
        }
        for kind in _ARITH_OPERATORS:
            self._translators[kind] = self._translate_arith

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self) -> FunctionLiteral:
        self._ctx.limits.enter()
        try:
            self._debug(
                "Building %s (instructions=%d, constants=%d, children=%d)",
                self._path,
                len(self._instructions),
                len(self._function.constants),
                len(self._function.children),
            )
            self._collect_strings()
            self._run()
        except DecompilationError as exc:
            if exc.partial is None:
                self._emit(Raw(f"-- {exc.code.value}: {exc.message}"))
            self._emit_all(self._flow.finish(len(self._instructions)))
            self._flow.drain_anomalies()
            exc.partial = self._literal()
            raise
        finally:
            self._ctx.limits.leave()
        return self._literal()

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def _run(self) -> None:
        limits = self._ctx.limits
        count = len(self._instructions)
        index = 0
        while index < count:
            limits.check_cancelled(index)
            limits.consume(index)
            self._emit_all(self._flow.markers_due(index))
            instr = self._instructions[index]
            mark = len(self._body)
            if instr.opcode in _OVERWRITES_A:
                self._flush_unread(instr.a)
            translator = self._translators.get(instr.opcode, self._translate_unknown)
            try:
                step = translator(instr, index)
            except DecompilationError as exc:
                if exc.index is None:
                    exc.index = index
                raise
            for skipped in range(index + 1, index + step):
                self._emit_all(self._flow.markers_due(skipped))
            self._drain_anomalies(index)
            self._log_instruction(index, instr, self._body.statements[mark:])
            index += step
        for reg in self._regs.unread():
            self._flush_unread(reg)
        self._emit_all(self._flow.finish(count))
        self._drain_anomalies(count)

    def _literal(self) -> FunctionLiteral:
        return FunctionLiteral(
            name=self._name,
            body=self._body,
            is_anonymous=not bool(self._function.name),
            captured_upvalues=list(self._captured),
            params=list(self._params),
            is_vararg=self._function.is_vararg,
        )

    def _collect_strings(self) -> None:
        for constant in self._function.constants:
            if isinstance(constant, StringConstant):
                self._ctx.strings.observe(constant.value)

    # ------------------------------------------------------------------
    # Emission helpers
    # ------------------------------------------------------------------

    def _emit(self, node: AstNode) -> None:
        self._body.append(node)

    def _emit_all(self, nodes: Sequence[AstNode]) -> None:
        self._body.extend(nodes)

    def _report(self, code: ErrorCode, message: str, index: Optional[int]) -> None:
        self._ctx.report(code, message, self._path, index)

    def _drain_anomalies(self, index: int) -> None:
        for message in self._regs.drain_anomalies():
            self._emit(Raw(f"-- {message}"))
            self._report(ErrorCode.CONSTANT_INDEX_OUT_OF_RANGE, message, index)
        for at, message in self._flow.drain_anomalies():
            self._report(ErrorCode.UNBALANCED_BLOCK, message, at)

    def _debug(self, message: str, *args: object) -> None:
        LOG.debug(message, *args)
        if self._ctx.debug_logger is not None:
            self._ctx.debug_logger.debug(message, *args)

    def _log_instruction(self, index: int, instr: Instruction, emitted: Sequence[AstNode]) -> None:
        if self._ctx.debug_logger is None:
            return
        summary = " | ".join(_summarize(node) for node in emitted)
        registers = ", ".join(f"r{reg}={text}" for reg, text in self._regs.snapshot().items())
        self._ctx.debug_logger.debug(
            "[%04d] %s %s => %s || registers: %s",
            index,
            instr.mnemonic,
            f"A={instr.a} B={instr.b} C={instr.c}",
            summary or "<no-op>",
            registers or "<empty>",
        )

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    def _local_name(self, reg: int, value: RegisterValue, hint: Optional[str]) -> str:
        if value.handle is not None and self._sim is not None:
            display = self._sim.name_of(value.handle)
            if display not in self._reg_names.values():
                return display
            return self._ctx.names.unique(display)
        return self._ctx.names.unique(hint or f"v{reg}")

    def _bind(
        self,
        reg: int,
        value: RegisterValue,
        *,
        hint: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> str:
        """Materialise *value* into a named local for register *reg*."""

        name = self._reg_names.get(reg)
        declaration = name is None
        if name is None:
            name = self._local_name(reg, value, hint)
            self._reg_names[reg] = name
        else:
            self._forget_objects(name)
        self._emit(Assign(name, value.text, is_declaration=declaration, comment=comment))
        self._regs.set(reg, value.renamed(name))
        if value.handle is not None:
            self._object_names[value.handle] = name
        return name

    def _forget_objects(self, name: str) -> None:
        stale = [handle for handle, bound in self._object_names.items() if bound == name]
        for handle in stale:
            del self._object_names[handle]

    def _ensure_named(self, reg: int) -> str:
        value = self._regs.get(reg)
        name = self._reg_names.get(reg)
        if name is not None and value.text == name:
            return name
        return self._bind(reg, value)

    def _upvalue(self, index: int) -> _Upvalue:
        if 0 <= index < len(self._upvalues):
            upvalue = self._upvalues[index]
        else:
            upvalue = _Upvalue(f"upval{index}")
        if upvalue.name not in self._captured:
            self._captured.append(upvalue.name)
        return upvalue

    def _set_object(self, reg: int, text: str, handle: Optional[int]) -> None:
        """Bind a simulator object read, reusing an existing local for it."""

        if handle is not None and handle in self._object_names:
            self._regs.set(reg, RegisterValue.expr(self._object_names[handle], handle=handle))
            return
        value = RegisterValue.expr(text, handle=handle)
        is_service = self._sim is not None and self._sim.is_service(handle)
        first_binding = reg not in self._reg_names
        if is_service or first_binding:
            if handle is not None and self._sim is not None and self._sim.name_of(handle) == text:
                self._regs.set(reg, value)
                return
            self._bind(reg, value)
            return
        self._regs.set(reg, value)

    # ------------------------------------------------------------------
    # Translators.  Each returns the number of instructions consumed.
    # ------------------------------------------------------------------

    def _translate_move(self, instr: Instruction, _: int) -> int:
        self._regs.set(instr.a, self._regs.get(instr.b))
        return 1

    def _translate_loadk(self, instr: Instruction, _: int) -> int:
        self._flush_unread(instr.a)
        value = self._regs.constant_value(instr.b)
        text = self._regs.constant_string(instr.b) if value.is_string else None
        if text is not None and self._ctx.strings.is_long(text):
            self._bind(instr.a, value)
        else:
            self._regs.set(instr.a, value, unread=True)
        return 1

    def _flush_unread(self, reg: int) -> None:
        """Materialise a constant load that is about to be lost unread."""

        if self._regs.is_unread(reg):
            self._bind(reg, self._regs.peek(reg))

    def _translate_loadbool(self, instr: Instruction, _: int) -> int:
        self._regs.set(instr.a, RegisterValue.literal("true" if instr.b else "false"))
        return 1

    def _translate_loadnil(self, instr: Instruction, _: int) -> int:
        for reg in range(instr.a, max(instr.a, instr.b) + 1):
            self._regs.set(reg, RegisterValue.literal("nil"))
        return 1

    def _translate_getupval(self, instr: Instruction, _: int) -> int:
        upvalue = self._upvalue(instr.b)
        name = self._bind(instr.a, RegisterValue.expr(upvalue.name))
        if upvalue.handle is not None:
            # keep simulator lookups working through the local copy
            self._regs.set(instr.a, RegisterValue.expr(name, handle=upvalue.handle))
        return 1

    def _translate_setupval(self, instr: Instruction, _: int) -> int:
        upvalue = self._upvalue(instr.b)
        self._emit(Assign(upvalue.name, self._regs.resolve(instr.a)))
        return 1

    def _global_name(self, index: int) -> str:
        constant = self._regs.constant(index)
        if isinstance(constant, StringConstant):
            return constant.value
        if constant is None:
            return f"unknown_global_{index}"
        return format_constant(constant)

    def _translate_getglobal(self, instr: Instruction, _: int) -> int:
        name = self._global_name(instr.b)
        text = name if is_identifier(name) else f"_G[{quote_string(name)}]"
        if self._sim is not None:
            resolved = self._sim.read_global(name)
            if resolved is not None:
                if self._sim.is_service(resolved.handle):
                    self._set_object(instr.a, resolved.text, resolved.handle)
                else:
                    self._regs.set(instr.a, RegisterValue.expr(resolved.text, handle=resolved.handle))
                return 1
        self._regs.set(instr.a, RegisterValue.expr(text))
        return 1

    def _translate_setglobal(self, instr: Instruction, _: int) -> int:
        name = self._global_name(instr.b)
        target = name if is_identifier(name) else f"_G[{quote_string(name)}]"
        self._emit(Assign(target, self._regs.resolve(instr.a)))
        return 1

    def _translate_gettable(self, instr: Instruction, _: int) -> int:
        base = self._regs.get(instr.b)
        key = self._regs.resolve_rk_value(instr.c)
        if self._sim is not None and base.handle is not None:
            resolved = self._sim.read(base.handle, key.text, base.text)
            self._set_object(instr.a, resolved.text, resolved.handle)
            return 1
        self._set_object(instr.a, field_access(base.text, key.text), None)
        return 1

    def _translate_settable(self, instr: Instruction, _: int) -> int:
        target = self._regs.resolve(instr.a)
        key = self._regs.resolve_rk(instr.b)
        value = self._regs.resolve_rk(instr.c)
        if self._sim is not None:
            self._emit(self._sim.write(target, key, value))
        else:
            self._emit(Assign(field_access(target, key), value))
        return 1

    def _translate_newtable(self, instr: Instruction, _: int) -> int:
        self._bind(instr.a, RegisterValue.expr("{}"))
        return 1

    def _translate_self(self, instr: Instruction, _: int) -> int:
        receiver = self._regs.get(instr.b)
        key = self._regs.resolve_rk_value(instr.c)
        method = None
        if key.is_string and len(key.text) >= 2:
            candidate = key.text[1:-1]
            if is_identifier(candidate):
                method = candidate
        if method is not None:
            callee = RegisterValue(
                ValueKind.EXPR,
                f"{receiver.text}:{method}",
                receiver=receiver.handle,
                method=method,
            )
        else:
            callee = RegisterValue.expr(field_access(receiver.text, key.text))
        self._regs.set(instr.a + 1, receiver)
        self._regs.set(instr.a, callee)
        return 1

    def _translate_arith(self, instr: Instruction, _: int) -> int:
        op = _ARITH_OPERATORS[instr.opcode]
        left = self._regs.resolve_rk_value(instr.b)
        right = self._regs.resolve_rk_value(instr.c)
        if self._sim is not None:
            result = self._sim.arith(op, left.as_number(), right.as_number())
        else:
            result = NumericProxy.symbol(left.text).binary(op, NumericProxy.symbol(right.text))
        if result.value is not None:
            self._regs.set(instr.a, RegisterValue.literal(result.text, number=result.value))
        else:
            self._regs.set(instr.a, RegisterValue.expr(result.text))
        return 1

    def _translate_unary(self, instr: Instruction, _: int) -> int:
        operand = self._regs.get(instr.b)
        if instr.opcode is OpKind.UNM:
            if self._sim is not None:
                result = self._sim.arith("unm", operand.as_number())
            else:
                result = -NumericProxy.symbol(operand.text)
            if result.value is not None:
                self._regs.set(instr.a, RegisterValue.literal(result.text, number=result.value))
            else:
                self._regs.set(instr.a, RegisterValue.expr(result.text))
        elif instr.opcode is OpKind.NOT:
            self._regs.set(instr.a, RegisterValue.expr(f"not {wrap(operand.text)}"))
        else:
            self._regs.set(instr.a, RegisterValue.expr(f"#{wrap(operand.text)}"))
        return 1

    def _translate_concat(self, instr: Instruction, _: int) -> int:
        parts = [wrap(self._regs.resolve(reg)) for reg in range(instr.b, max(instr.b, instr.c) + 1)]
        self._regs.set(instr.a, RegisterValue.expr(" .. ".join(parts)))
        return 1

    def _argument_registers(self, base: int, count_operand: int) -> Tuple[List[int], bool]:
        if count_operand != 0:
            return list(range(base + 1, base + max(0, count_operand - 1) + 1)), False
        if self._top is not None and self._top > base:
            top, self._top = self._top, None
            return list(range(base + 1, top + 1)), False
        return self._regs.bound_above(base), True

    def _translate_call(self, instr: Instruction, index: int) -> int:
        base = instr.a
        callee = self._regs.get(base)
        arg_regs, ambiguous = self._argument_registers(base, instr.b)
        if callee.method is not None and arg_regs and arg_regs[0] == base + 1:
            arg_regs = arg_regs[1:]
        args = [self._regs.resolve(reg) for reg in arg_regs]
        comment = None
        if ambiguous:
            comment = VARIABLE_ARGS_COMMENT
            self._report(
                ErrorCode.AMBIGUOUS_ARG_COUNT,
                f"call to {callee.text} with open argument list",
                index,
            )

        callee_text = callee.text
        handle: Optional[int] = None
        if self._sim is not None:
            outcome = self._sim.call(
                callee_text,
                args,
                callee_handle=callee.handle,
                receiver=callee.receiver,
                method=callee.method,
            )
            callee_text, args, handle = outcome.callee, outcome.args, outcome.handle

        for reg in range(base + 1, base + 1 + max(len(arg_regs), instr.b - 1)):
            self._regs.clear(reg)

        expression = render_call(callee_text, args)
        results = instr.c - 1
        if results > 0:
            value = RegisterValue.expr(expression, handle=handle)
            if results == 1:
                self._bind(base, value, comment=comment)
            else:
                self._bind_many(base, results, expression, comment)
        elif instr.c == 0 and self._feeds_open_list(index):
            self._regs.set(base, RegisterValue.expr(expression, handle=handle))
            self._top = base
        else:
            self._emit(Call(callee_text, args, comment=comment))
            if base not in self._reg_names:
                self._regs.clear(base)
        return 1

    def _bind_many(self, base: int, count: int, expression: str, comment: Optional[str]) -> None:
        targets: List[str] = []
        declaration = False
        for reg in range(base, base + count):
            name = self._reg_names.get(reg)
            if name is None:
                name = self._ctx.names.unique(f"v{reg}")
                self._reg_names[reg] = name
                declaration = True
            else:
                self._forget_objects(name)
            targets.append(name)
            self._regs.set(reg, RegisterValue.expr(name))
        self._emit(Assign(", ".join(targets), expression, is_declaration=declaration, comment=comment))

    def _feeds_open_list(self, index: int) -> bool:
        follow = index + 1
        if follow >= len(self._instructions):
            return False
        nxt = self._instructions[follow]
        return nxt.opcode in (OpKind.CALL, OpKind.RETURN) and nxt.b == 0

    def _translate_return(self, instr: Instruction, index: int) -> int:
        if instr.b == 1:
            if index != len(self._instructions) - 1:
                self._emit(Return([]))
            return 1
        if instr.b > 1:
            regs = range(instr.a, instr.a + instr.b - 1)
            self._emit(Return([self._regs.resolve(reg) for reg in regs]))
            return 1
        arg_regs, ambiguous = self._argument_registers(instr.a - 1, 0)
        values = [self._regs.resolve(reg) for reg in arg_regs]
        comment = None
        if ambiguous:
            comment = VARIABLE_ARGS_COMMENT
            self._report(ErrorCode.AMBIGUOUS_ARG_COUNT, "return with open value list", index)
        self._emit(Return(values, comment=comment))
        return 1

    def _translate_closure(self, instr: Instruction, index: int) -> int:
        children = self._function.children
        if not 0 <= instr.b < len(children):
            message = f"closure prototype index {instr.b} out of range ({len(children)} children)"
            self._emit(Raw(f"-- {message}"))
            self._report(ErrorCode.CONSTANT_INDEX_OUT_OF_RANGE, message, index)
            self._regs.set(instr.a, RegisterValue.literal("nil"))
            return 1
        child = children[instr.b]

        declaration = instr.a not in self._reg_names
        if declaration:
            name = self._ctx.names.unique(child.name or "func")
            self._reg_names[instr.a] = name
        else:
            name = self._reg_names[instr.a]
            self._forget_objects(name)

        captures: List[Tuple[str, Optional[int]]] = []
        consumed = 0
        for offset in range(1, max(0, child.upvalue_count) + 1):
            if index + offset >= len(self._instructions):
                break
            pseudo = self._instructions[index + offset]
            if pseudo.opcode is OpKind.MOVE:
                if pseudo.b == instr.a:
                    captures.append((name, None))
                else:
                    handle = self._regs.get(pseudo.b).handle
                    captures.append((self._ensure_named(pseudo.b), handle))
            elif pseudo.opcode is OpKind.GET_UPVALUE:
                upvalue = self._upvalue(pseudo.b)
                captures.append((upvalue.name, upvalue.handle))
            else:
                break
            consumed += 1

        builder = FunctionBuilder(
            child,
            self._ctx,
            name=name,
            path=f"{self._path}/{name}",
            upvalues=captures,
        )
        try:
            literal = builder.build()
        except DecompilationError as exc:
            if exc.partial is not None:
                self._emit(Assign(name, exc.partial, is_declaration=declaration))
            raise
        self._emit(Assign(name, literal, is_declaration=declaration))
        self._regs.set(instr.a, RegisterValue.closure(name))
        return 1 + consumed

    def _translate_compare(self, instr: Instruction, index: int) -> int:
        jump = self._flow.paired_jump(index)
        left = self._regs.resolve_rk_value(instr.b)
        right = self._regs.resolve_rk_value(instr.c)
        if self._sim is not None and left.number is not None and right.number is not None:
            folded = left.as_number().compare(COMPARE_OPERATORS[instr.opcode], right.as_number())
            condition = f"not ({folded.text})" if instr.a == 1 else folded.text
        else:
            condition = compare_condition(instr, left.text, right.text)
        self._emit(self._flow.open_conditional(index, jump, condition))
        return 2

    def _translate_jump(self, instr: Instruction, index: int) -> int:
        self._emit_all(self._flow.standalone_jump(index, instr))
        return 1

    def _translate_nop(self, instr: Instruction, _: int) -> int:
        return 1

    def _translate_unknown(self, instr: Instruction, index: int) -> int:
        message = f"unknown opcode {instr.mnemonic} (A={instr.a}, B={instr.b}, C={instr.c})"
        self._emit(Raw(f"-- {message}"))
        self._report(ErrorCode.UNKNOWN_OPCODE, message, index)
        return 1


def _summarize(node: AstNode) -> str:
    if isinstance(node, Assign):
        value = node.value.name if isinstance(node.value, FunctionLiteral) else node.value
        prefix = "local " if node.is_declaration else ""
        return f"{prefix}{node.target} = {value}"
    if isinstance(node, Call):
        return node.expression
    if isinstance(node, Return):
        return f"return {', '.join(node.values)}".rstrip()
    if isinstance(node, (BlockMarker, Raw)):
        return node.text
    return type(node).__name__


def build_function(
    function: Function,
    context: BuildContext,
    *,
    name: str = "main",
) -> FunctionLiteral:
    """Build the root prototype with a fresh builder."""

    return FunctionBuilder(function, context, name=name, path=name).build()


__all__ = [
    "VARIABLE_ARGS_COMMENT",
    "BuildContext",
    "FunctionBuilder",
    "build_function",
]
