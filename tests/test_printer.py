import pytest

from moondec.analysis.environment import CallGraphEntry
from moondec.analysis.strings import StringReference
from moondec.exceptions import MalformedControlFlow
from moondec.lua_ast import (
    Assign,
    Block,
    BlockMarker,
    Call,
    FunctionLiteral,
    MarkerKind,
    Raw,
    Return,
)
from moondec.pretty.printer import LuaPrinter, render_call_graph, render_string_refs


def _literal(*nodes, **extra) -> FunctionLiteral:
    return FunctionLiteral("main", Block(list(nodes)), **extra)


def test_render_root_body_with_nested_blocks() -> None:
    literal = _literal(
        BlockMarker("if ready then", MarkerKind.OPEN),
        Call("print", ['"go"']),
        BlockMarker("else", MarkerKind.MIDDLE),
        Return(["nil"], comment="bail"),
        BlockMarker("end", MarkerKind.CLOSE),
    )

    assert LuaPrinter(indent_width=2).render(literal) == "\n".join(
        ["if ready then", '  print("go")', "else", "  return nil -- bail", "end"]
    )


def test_nested_function_definitions() -> None:
    inner = FunctionLiteral("helper", Block([Raw("-- empty")]), params=["a"], is_vararg=False)
    literal = _literal(
        Assign("helper", inner, is_declaration=True),
        Assign("helper", FunctionLiteral("helper", Block(), is_vararg=True)),
    )

    assert LuaPrinter().render(literal).splitlines() == [
        "local function helper(a)",
        "    -- empty",
        "end",
        "helper = function(...)",
        "end",
    ]


def test_render_function_with_upvalues() -> None:
    literal = FunctionLiteral(
        "tick", Block([Call("step")]), captured_upvalues=["state"], is_vararg=False
    )
    assert LuaPrinter().render_function(literal).splitlines() == [
        "local function tick()",
        "    -- upvalues: state",
        "    step()",
        "end",
    ]


def test_unbalanced_close_raises() -> None:
    literal = _literal(Call("f"), BlockMarker("end", MarkerKind.CLOSE))
    with pytest.raises(MalformedControlFlow, match="printer indentation error"):
        LuaPrinter().render(literal)


def test_unclosed_block_raises() -> None:
    literal = _literal(BlockMarker("while true do", MarkerKind.OPEN), Call("f"))
    with pytest.raises(MalformedControlFlow):
        LuaPrinter().render(literal)


def test_clamp_mode_recovers() -> None:
    literal = _literal(Call("f"), BlockMarker("end", MarkerKind.CLOSE), Call("g"))
    assert LuaPrinter(clamp=True).render(literal).splitlines() == ["f()", "end", "g()"]


def test_close_marker_cannot_escape_nested_function() -> None:
    inner = FunctionLiteral("f", Block([BlockMarker("end", MarkerKind.CLOSE)]), is_vararg=False)
    literal = _literal(BlockMarker("do", MarkerKind.OPEN), Assign("f", inner, is_declaration=True))
    with pytest.raises(MalformedControlFlow):
        LuaPrinter().render(literal)


def test_report_sections() -> None:
    assert render_call_graph([]) == []
    assert render_call_graph([CallGraphEntry("http", "HttpService:GetAsync", ('"url"',))]) == [
        "-- Call graph:",
        '--   [http] HttpService:GetAsync("url")',
    ]
    assert render_string_refs([StringReference('say "hi"', "long string", 8)]) == [
        "-- String references:",
        '--   [long string] "say \\"hi\\"" (length 8)',
    ]
