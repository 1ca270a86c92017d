"""Structured control-flow recovery from compare/jump pairs.

Blocks are opened with a marker as soon as their header is seen and closed
by ``end`` markers scheduled at absolute instruction indexes.  The scheduler
owns the stack of open blocks so the emitted markers always balance.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import DefaultDict, Dict, List, Optional, Sequence, Set, Tuple

from ..bytecode import Instruction, OpKind
from ..exceptions import MalformedControlFlow
from ..lua_ast import AstNode, BlockMarker, MarkerKind, Raw

LOG = logging.getLogger(__name__)

COMPARE_OPERATORS: Dict[OpKind, str] = {
    OpKind.COMPARE_EQ: "==",
    OpKind.COMPARE_LT: "<",
    OpKind.COMPARE_LE: "<=",
}


def jump_target(index: int, offset: int) -> int:
    """Index the VM resumes at after the jump at *index*.

    The program counter has already moved past the jump, so the landing
    index is ``index + 1 + offset``.  For a compare at ``i`` with its paired
    jump at ``i + 1`` this is ``i + offset + 2``.
    """

    return index + 1 + offset


def compare_condition(instr: Instruction, left: str, right: str) -> str:
    operator = COMPARE_OPERATORS[instr.opcode]
    condition = f"{left} {operator} {right}"
    if instr.a == 1:
        return f"not ({condition})"
    return condition


@dataclass
class OpenBlock:
    kind: str
    opened_at: int
    end_index: Optional[int] = None
    closed: bool = False
    has_else: bool = False


def _end() -> BlockMarker:
    return BlockMarker("end", MarkerKind.CLOSE)


class BlockScheduler:
    """Tracks open blocks and deferred markers for one function body."""

    def __init__(self, instructions: Sequence[Instruction]) -> None:
        self._instructions = list(instructions)
        self._stack: List[OpenBlock] = []
        self._pending: DefaultDict[int, List[Tuple[OpenBlock, MarkerKind]]] = defaultdict(list)
        self._loop_headers: DefaultDict[int, int] = defaultdict(int)
        self._loop_closers: Set[int] = set()
        self.anomalies: List[Tuple[int, str]] = []
        self._discover_loops()

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------

    def _discover_loops(self) -> None:
        pending_while: List[int] = []
        index = 0
        count = len(self._instructions)
        while index < count:
            instr = self._instructions[index]
            if instr.opcode.is_compare:
                paired = self._instructions[index + 1] if index + 1 < count else None
                if paired is not None and paired.opcode is OpKind.JUMP:
                    if paired.b < 0:
                        pending_while.append(index)
                    index += 2
                    continue
            elif instr.opcode is OpKind.JUMP and instr.b < 0:
                target = jump_target(index, instr.b)
                if pending_while and target <= pending_while[-1]:
                    pending_while.pop()
                    self._loop_closers.add(index)
                elif 0 <= target <= index:
                    self._loop_headers[target] += 1
                    self._loop_closers.add(index)
            index += 1
        LOG.debug(
            "Loop scan: %d header(s), %d closer(s), %d unterminated while",
            sum(self._loop_headers.values()),
            len(self._loop_closers),
            len(pending_while),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def depth(self) -> int:
        return len(self._stack)

    def pending_indexes(self) -> List[int]:
        return sorted(index for index, items in self._pending.items() if items)

    def paired_jump(self, index: int) -> Instruction:
        """Return the jump that must follow the compare at *index*."""

        follow = index + 1
        if follow >= len(self._instructions):
            raise MalformedControlFlow(
                f"compare at {index} is the last instruction; expected a jump", index=index
            )
        paired = self._instructions[follow]
        if paired.opcode is not OpKind.JUMP:
            raise MalformedControlFlow(
                f"compare at {index} is followed by {paired.mnemonic}, expected JMP",
                index=index,
            )
        return paired

    # ------------------------------------------------------------------
    # Marker emission
    # ------------------------------------------------------------------

    def markers_due(self, index: int) -> List[AstNode]:
        """Markers to emit before the statement produced at *index*."""

        nodes: List[AstNode] = []
        due = self._pending.pop(index, [])
        # innermost first
        order = {id(block): pos for pos, block in enumerate(self._stack)}
        due.sort(key=lambda item: order.get(id(item[0]), -1), reverse=True)
        for block, kind in due:
            if block.closed:
                continue
            if kind is MarkerKind.MIDDLE:
                nodes.append(BlockMarker("else", MarkerKind.MIDDLE))
            else:
                nodes.extend(self._close(block, index))
        for _ in range(self._loop_headers.pop(index, 0)):
            self._stack.append(OpenBlock("while", index))
            nodes.append(BlockMarker("while true do", MarkerKind.OPEN))
        return nodes

    def open_conditional(self, compare_index: int, jump: Instruction, condition: str) -> BlockMarker:
        jump_index = compare_index + 1
        if jump.b < 0:
            self._stack.append(OpenBlock("while", compare_index))
            return BlockMarker(f"while {condition} do", MarkerKind.OPEN)
        target = jump_target(jump_index, jump.b)
        block = OpenBlock("if", compare_index, end_index=target)
        self._stack.append(block)
        self._pending[target].append((block, MarkerKind.CLOSE))
        return BlockMarker(f"if {condition} then", MarkerKind.OPEN)

    def standalone_jump(self, index: int, jump: Instruction) -> List[AstNode]:
        target = jump_target(index, jump.b)
        if index in self._loop_closers:
            loop = self._innermost("while")
            if loop is not None:
                return self._close(loop, index)
            self.anomalies.append((index, f"loop back-edge at {index} has no open loop"))
            return [Raw(f"-- goto {target}")]
        if jump.b < 0:
            return [Raw(f"-- goto {target}")]
        if self._convert_to_else(index, target):
            return []
        LOG.debug("Forward jump at %d to %d left unstructured", index, target)
        return []

    def finish(self, end_index: int) -> List[AstNode]:
        """Flush markers due at or past the end and close leftover blocks."""

        nodes: List[AstNode] = []
        for index in self.pending_indexes():
            nodes.extend(self.markers_due(index))
        while self._stack:
            block = self._stack[-1]
            self.anomalies.append(
                (end_index, f"{block.kind} block opened at {block.opened_at} left open at end of function")
            )
            nodes.append(Raw(f"-- unterminated {block.kind} block opened at {block.opened_at}"))
            nodes.extend(self._close(block, end_index))
        return nodes

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _innermost(self, kind: str) -> Optional[OpenBlock]:
        for block in reversed(self._stack):
            if block.kind == kind:
                return block
        return None

    def _close(self, block: OpenBlock, index: int) -> List[AstNode]:
        nodes: List[AstNode] = []
        while self._stack:
            top = self._stack.pop()
            top.closed = True
            if top is block:
                nodes.append(_end())
                break
            self.anomalies.append(
                (index, f"{top.kind} block opened at {top.opened_at} closed early by enclosing block")
            )
            nodes.append(Raw(f"-- {top.kind} block opened at {top.opened_at} closed early"))
            nodes.append(_end())
        return nodes

    def _convert_to_else(self, index: int, target: int) -> bool:
        if not self._stack:
            return False
        innermost = self._stack[-1]
        if innermost.kind != "if" or innermost.has_else or innermost.end_index != index + 1:
            return False
        due = [item for item in self._pending.get(index + 1, []) if not item[0].closed]
        if len(due) != 1 or due[0][0] is not innermost:
            return False
        if len(self._stack) > 1:
            outer = self._stack[-2]
            if outer.end_index is not None and target > outer.end_index:
                return False
        self._pending[index + 1] = [(innermost, MarkerKind.MIDDLE)]
        self._pending[target].append((innermost, MarkerKind.CLOSE))
        innermost.has_else = True
        innermost.end_index = target
        return True

    def drain_anomalies(self) -> List[Tuple[int, str]]:
        pending, self.anomalies = self.anomalies, []
        return pending


__all__ = [
    "COMPARE_OPERATORS",
    "jump_target",
    "compare_condition",
    "OpenBlock",
    "BlockScheduler",
]
