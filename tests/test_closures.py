from moondec import DecompileOptions, ErrorCode, decompile


def _child(instructions, constants=None, **extra):
    payload = {"instructions": instructions, "constants": constants or [], "is_vararg": False}
    payload.update(extra)
    return payload


def test_sibling_closures_get_unique_names(build_function, render_text) -> None:
    table_body = [["NEWTABLE", 0, 0, 0], ["RETURN", 0, 1, 0]]
    function = build_function(
        [["CLOSURE", 0, 0, 0], ["CLOSURE", 1, 1, 0], ["RETURN", 0, 1, 0]],
        children=[_child(table_body), _child(table_body)],
    )

    assert render_text(function) == "\n".join(
        [
            "local function func()",
            "    local v0 = {}",
            "end",
            "local function func_2()",
            "    local v0_2 = {}",
            "end",
        ]
    )


def test_nested_closures_keep_register_names_apart(build_function, render_text) -> None:
    grandchild = _child([["NEWTABLE", 0, 0, 0], ["RETURN", 0, 1, 0]])
    child = _child([["NEWTABLE", 0, 0, 0], ["CLOSURE", 1, 0, 0], ["RETURN", 0, 1, 0]])
    child["children"] = [grandchild]
    function = build_function([["CLOSURE", 0, 0, 0], ["RETURN", 0, 1, 0]], children=[child])

    assert render_text(function) == "\n".join(
        [
            "local function func()",
            "    local v0 = {}",
            "    local function func_2()",
            "        local v0_2 = {}",
            "    end",
            "end",
        ]
    )


def test_named_prototype_keeps_name_and_params(build_function, render_body) -> None:
    function = build_function(
        [["CLOSURE", 0, 0, 0], ["RETURN", 0, 1, 0]],
        children=[
            {
                "name": "onClick",
                "numparams": 1,
                "instructions": [["RETURN", 0, 2, 0]],
            }
        ],
    )
    assert render_body(function) == [
        "local function onClick(arg0, ...)",
        "    return arg0",
        "end",
    ]


def test_captured_locals_are_listed_as_upvalues(build_function, render_body) -> None:
    function = build_function(
        [["NEWTABLE", 0, 0, 0], ["CLOSURE", 1, 0, 0], ["MOVE", 0, 0, 0], ["RETURN", 0, 1, 0]],
        children=[
            _child(
                [["GETUPVAL", 0, 0, 0], ["SETGLOBAL", 0, 0, 0], ["RETURN", 0, 1, 0]],
                ["shared"],
                nups=1,
            )
        ],
    )
    assert render_body(function) == [
        "local v0 = {}",
        "local function func()",
        "    -- upvalues: v0",
        "    local v0_2 = v0",
        "    shared = v0_2",
        "end",
    ]


def test_missing_prototype_is_reported(build_function) -> None:
    function = build_function([["CLOSURE", 0, 3, 0], ["RETURN", 0, 1, 0]])

    result = decompile(
        function,
        DecompileOptions(header=False, include_call_graph=False, include_string_refs=False),
    )

    assert result.ok
    assert result.text.splitlines() == ["-- closure prototype index 3 out of range (0 children)"]
    assert result.diagnostics[0].code is ErrorCode.CONSTANT_INDEX_OUT_OF_RANGE


def test_failure_inside_closure_keeps_enclosing_output(build_function) -> None:
    broken = _child([["EQ", 0, 0, 0], ["RETURN", 0, 1, 0]])
    function = build_function(
        [["NEWTABLE", 0, 0, 0], ["CLOSURE", 1, 0, 0], ["RETURN", 0, 1, 0]],
        children=[broken],
    )

    result = decompile(
        function,
        DecompileOptions(header=False, include_call_graph=False, include_string_refs=False),
    )

    assert result.partial
    assert result.error_code is ErrorCode.MALFORMED_CONTROL_FLOW
    lines = result.text.splitlines()
    assert lines[0].startswith("-- PARTIAL OUTPUT (MALFORMED_CONTROL_FLOW): compare at 0")
    assert "local v0 = {}" in lines
    assert "local function func()" in lines
    assert any(line.startswith("    -- MALFORMED_CONTROL_FLOW:") for line in lines)
    assert result.diagnostics[-1].index == 0
