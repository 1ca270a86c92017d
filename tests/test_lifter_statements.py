"""Statement-level lifting of straight-line bytecode."""

from moondec import DecompileOptions, ErrorCode, decompile


def _quiet(**extra) -> DecompileOptions:
    settings = {"header": False, "include_call_graph": False, "include_string_refs": False}
    settings.update(extra)
    return DecompileOptions(**settings)


def test_self_index_fuses_into_method_call(build_function, render_body) -> None:
    function = build_function(
        [["GETGLOBAL", 0, 0, 0], ["SELF", 0, 0, 257], ["CALL", 0, 2, 1], ["RETURN", 0, 1, 0]],
        ["obj", "Foo"],
    )
    assert render_body(function) == ["obj:Foo()"]


def test_self_index_with_receiver_in_adjacent_register(build_function, render_body) -> None:
    function = build_function(
        [["GETGLOBAL", 0, 0, 0], ["SELF", 1, 0, 257], ["CALL", 1, 1, 1], ["RETURN", 0, 1, 0]],
        ["obj", "Foo"],
    )
    assert render_body(function) == ["obj:Foo()"]


def test_first_write_declares_local(build_function, render_body) -> None:
    function = build_function(
        [["NEWTABLE", 3, 0, 0], ["NEWTABLE", 3, 0, 0], ["RETURN", 0, 1, 0]]
    )
    assert render_body(function) == ["local v3 = {}", "v3 = {}"]


def test_service_reads_are_named_after_the_service(build_function, render_body) -> None:
    function = build_function(
        [
            ["GETGLOBAL", 0, 0, 0],
            ["GETTABLE", 1, 0, 257],
            ["GETTABLE", 2, 1, 258],
            ["RETURN", 0, 1, 0],
        ],
        ["game", "Players", "LocalPlayer"],
    )
    assert render_body(function) == [
        'local Players = game:GetService("Players")',
        "local LocalPlayer = Players.LocalPlayer",
    ]


def test_get_service_method_call_uses_shortcut_name(build_function, render_body) -> None:
    function = build_function(
        [
            ["GETGLOBAL", 0, 0, 0],
            ["SELF", 0, 0, 257],
            ["LOADK", 2, 2, 0],
            ["CALL", 0, 3, 2],
            ["RETURN", 0, 1, 0],
        ],
        ["game", "GetService", "ReplicatedStorage"],
    )
    assert render_body(function) == ['local RS = game:GetService("ReplicatedStorage")']


def test_without_simulation_reads_stay_plain(build_function, render_body) -> None:
    function = build_function(
        [["GETGLOBAL", 0, 0, 0], ["GETTABLE", 1, 0, 257], ["RETURN", 0, 1, 0]],
        ["game", "Players"],
    )
    assert render_body(function, simulate_environment=False) == ["local v1 = game.Players"]


def test_open_results_feed_the_next_call(build_function, render_body) -> None:
    function = build_function(
        [
            ["GETGLOBAL", 0, 0, 0],
            ["GETGLOBAL", 1, 1, 0],
            ["CALL", 1, 1, 0],
            ["CALL", 0, 0, 1],
            ["RETURN", 0, 1, 0],
        ],
        ["print", "tick"],
    )
    assert render_body(function) == ["print(tick())"]


def test_open_argument_list_is_flagged(build_function) -> None:
    function = build_function(
        [["GETGLOBAL", 0, 0, 0], ["LOADK", 1, 1, 0], ["CALL", 0, 0, 1], ["RETURN", 0, 1, 0]],
        ["print", "hi"],
    )

    result = decompile(function, _quiet())

    assert result.text.splitlines() == ['print("hi") -- variable argument count']
    assert [diag.code for diag in result.diagnostics] == [ErrorCode.AMBIGUOUS_ARG_COUNT]


def test_multiple_results_bind_several_locals(build_function, render_body) -> None:
    function = build_function([["GETGLOBAL", 0, 0, 0], ["CALL", 0, 1, 3], ["RETURN", 0, 1, 0]], ["f"])
    assert render_body(function) == ["local v0, v1 = f()"]


def test_long_strings_are_bound_to_locals(build_function, render_body) -> None:
    message = "Welcome to the game, please read the rules first!"
    function = build_function(
        [["GETGLOBAL", 0, 0, 0], ["LOADK", 1, 1, 0], ["CALL", 0, 2, 1], ["RETURN", 0, 1, 0]],
        ["print", message],
    )
    assert render_body(function) == [f'local v1 = "{message}"', "print(v1)"]


def test_short_strings_stay_inline(build_function, render_body) -> None:
    function = build_function(
        [["GETGLOBAL", 0, 0, 0], ["LOADK", 1, 1, 0], ["CALL", 0, 2, 1], ["RETURN", 0, 1, 0]],
        ["print", "hi"],
    )
    assert render_body(function) == ['print("hi")']


def test_overwritten_constant_is_kept(build_function, render_body) -> None:
    function = build_function([["LOADK", 3, 0, 0], ["LOADK", 3, 1, 0], ["RETURN", 0, 1, 0]], ["a", "b"])
    assert render_body(function) == ['local v3 = "a"', 'v3 = "b"']


def test_constant_replaced_by_global_read_is_kept(build_function, render_body) -> None:
    function = build_function(
        [["LOADK", 0, 1, 0], ["GETGLOBAL", 0, 0, 0], ["SETGLOBAL", 0, 2, 0], ["RETURN", 0, 1, 0]],
        ["x", 5, "y"],
    )
    assert render_body(function) == ["local v0 = 5", "y = x"]


def test_unused_constant_at_end_is_kept(build_function, render_body) -> None:
    function = build_function([["LOADK", 0, 0, 0], ["RETURN", 0, 1, 0]], [7])
    assert render_body(function) == ["local v0 = 7"]


def test_division_by_zero_folds_to_zero(build_function, render_body) -> None:
    function = build_function(
        [["DIV", 0, 257, 258], ["SETGLOBAL", 0, 0, 0], ["RETURN", 0, 1, 0]],
        ["x", 10, 0],
    )
    assert render_body(function) == ["x = 0"]


def test_known_arithmetic_folds(build_function, render_body) -> None:
    function = build_function(
        [["ADD", 0, 257, 258], ["MUL", 0, 0, 258], ["SETGLOBAL", 0, 0, 0], ["RETURN", 0, 1, 0]],
        ["x", 2, 3],
    )
    assert render_body(function) == ["x = 15"]


def test_arithmetic_without_simulation_stays_textual(build_function, render_body) -> None:
    function = build_function(
        [["DIV", 0, 257, 258], ["SETGLOBAL", 0, 0, 0], ["RETURN", 0, 1, 0]],
        ["x", 10, 0],
    )
    assert render_body(function, simulate_environment=False) == ["x = 10 / 0"]


def test_unknown_opcode_is_commented_and_skipped(build_function) -> None:
    function = build_function(
        [[33, 1, 2, 3], ["LOADK", 0, 1, 0], ["SETGLOBAL", 0, 0, 0], ["RETURN", 0, 1, 0]],
        ["x", 5],
    )

    result = decompile(function, _quiet())

    assert result.ok
    assert result.text.splitlines() == ["-- unknown opcode OP_21 (A=1, B=2, C=3)", "x = 5"]
    assert result.diagnostics[0].code is ErrorCode.UNKNOWN_OPCODE
    assert result.diagnostics[0].index == 0


def test_constant_out_of_range_degrades_to_nil(build_function) -> None:
    function = build_function(
        [["LOADK", 0, 7, 0], ["SETGLOBAL", 0, 0, 0], ["RETURN", 0, 1, 0]], ["x"]
    )

    result = decompile(function, _quiet())

    assert result.ok
    assert result.text.splitlines() == [
        "-- constant index 7 out of range (pool size 1)",
        "x = nil",
    ]
    assert result.diagnostics[0].code is ErrorCode.CONSTANT_INDEX_OUT_OF_RANGE


def test_field_writes_and_concat(build_function, render_body) -> None:
    function = build_function(
        [
            ["GETGLOBAL", 0, 0, 0],
            ["SETTABLE", 0, 257, 258],
            ["LOADK", 1, 3, 0],
            ["GETGLOBAL", 2, 4, 0],
            ["CONCAT", 3, 1, 2],
            ["SETTABLE", 0, 261, 3],
            ["RETURN", 0, 1, 0],
        ],
        ["Frame", "Visible", False, "Hi ", "name", "Text"],
    )
    assert render_body(function) == ["Frame.Visible = false", 'Frame.Text = "Hi " .. name']


def test_non_identifier_globals_use_env_table(build_function, render_body) -> None:
    function = build_function(
        [["GETGLOBAL", 0, 0, 0], ["SETGLOBAL", 0, 1, 0], ["RETURN", 0, 1, 0]],
        ["my-global", "copy"],
    )
    assert render_body(function) == ['copy = _G["my-global"]']


def test_return_values(build_function, render_body) -> None:
    function = build_function([["GETGLOBAL", 0, 0, 0], ["RETURN", 0, 2, 0]], ["x"])
    assert render_body(function) == ["return x"]
