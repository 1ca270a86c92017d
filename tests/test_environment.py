"""Tests for the environment simulator and its lookup tables."""

from moondec.analysis.environment import (
    ROOT_HANDLE,
    EnvironmentSimulator,
    ObjectKind,
    field_access,
)
from moondec.analysis.patterns import call_category, string_hint
from moondec.analysis.strings import StringCollector
from moondec.naming import NameRegistry


def _simulator() -> EnvironmentSimulator:
    return EnvironmentSimulator(NameRegistry())


def test_root_object_is_game() -> None:
    sim = _simulator()
    root = sim.object(ROOT_HANDLE)
    assert root.display_name == "game"
    assert sim.read_global("game").handle == ROOT_HANDLE
    assert sim.read_global("print") is None


def test_service_read_uses_shortcut_and_is_idempotent() -> None:
    sim = _simulator()
    first = sim.read(ROOT_HANDLE, '"UserInputService"', "game")
    second = sim.read(ROOT_HANDLE, '"UserInputService"', "game")

    assert first.handle == second.handle
    assert first.text == 'game:GetService("UserInputService")'
    obj = sim.object(first.handle)
    assert obj.display_name == "UIS"
    assert obj.kind is ObjectKind.SERVICE
    assert obj.parent == ROOT_HANDLE


def test_workspace_global_aliases_service() -> None:
    sim = _simulator()
    alias = sim.read_global("workspace")
    via_root = sim.read(ROOT_HANDLE, '"Workspace"', "game")
    assert alias.handle == via_root.handle
    assert sim.is_service(alias.handle)


def test_unknown_keys_get_sanitised_names() -> None:
    sim = _simulator()
    parent = sim.read(ROOT_HANDLE, '"Players"', "game").handle
    child = sim.read(parent, '"Local Player"', "Players")
    assert child.text == 'Players["Local Player"]'
    assert sim.name_of(child.handle) == "LocalPlayer"


def test_objects_compare_by_handle() -> None:
    sim = _simulator()
    handle = sim.read(ROOT_HANDLE, '"Lighting"', "game").handle
    assert sim.object(handle) == sim.object(handle)
    assert sim.object(handle) != sim.object(ROOT_HANDLE)
    assert len(sim) == 2


def test_ui_library_calls_are_rewritten_and_disambiguated() -> None:
    sim = _simulator()
    first = sim.call('"Library"', ['"Button"', '"Click me"'])
    second = sim.call('"Library"', ['"Button"'])

    assert first.callee == "Library:Button"
    assert first.args == ['"Click me"']
    assert sim.name_of(first.handle) == "Button"
    assert sim.name_of(second.handle) == "Button_2"
    assert sim.object(first.handle).kind is ObjectKind.UI_LIBRARY


def test_ui_library_methods_strip_constructor_prefix() -> None:
    sim = _simulator()
    window = sim.call('"Library"', ['"CreateWindow"']).handle
    tab = sim.call("Window:CreateTab", ['"Main"'], receiver=window, method="CreateTab")
    assert sim.name_of(window) == "Window"
    assert sim.name_of(tab.handle) == "Tab"


def test_calling_game_resolves_service() -> None:
    sim = _simulator()
    result = sim.call("game", ['"Players"'], callee_handle=ROOT_HANDLE)
    assert result.callee == "game:GetService"
    assert sim.name_of(result.handle) == "Players"


def test_get_service_method_resolves_service() -> None:
    sim = _simulator()
    result = sim.call(
        "game:GetService", ['"ReplicatedStorage"'], receiver=ROOT_HANDLE, method="GetService"
    )
    assert sim.name_of(result.handle) == "RS"
    assert sim.call_graph == []


def test_remote_calls_are_logged() -> None:
    sim = _simulator()
    sim.call("Remote:FireServer", ['"buy"', "5"])
    sim.call("print", ['"hi"'])
    sim.call("loadstring", ["source"])

    assert [entry.kind for entry in sim.call_graph] == ["remote_event", "dynamic_code"]
    assert sim.call_graph[0].as_dict() == {
        "kind": "remote_event",
        "name": "Remote:FireServer",
        "args": ['"buy"', "5"],
    }


def test_write_records_assignment() -> None:
    sim = _simulator()
    node = sim.write("Frame", '"Visible"', "false")
    assert node.target == "Frame.Visible"
    assert node.value == "false"
    assert not node.is_declaration


def test_field_access_brackets_non_identifiers() -> None:
    assert field_access("t", '"name"') == "t.name"
    assert field_access("t", '"end"') == 't["end"]'
    assert field_access("t", "1") == "t[1]"


def test_arith_folds_division_by_zero() -> None:
    sim = _simulator()
    result = sim.arith("/", sim.number("10", 10.0), sim.number("0", 0.0))
    assert result.text == "0"


def test_call_categories_and_string_hints() -> None:
    assert call_category("a.b:InvokeServer") == "remote_function"
    assert call_category("HttpService:GetAsync") == "http"
    assert call_category("print") is None
    assert string_hint("https://example.com/x") == "url"
    assert string_hint("rbxassetid://1234") == "asset id"
    assert string_hint("https://discord.com/api/webhooks/1/abc") == "webhook"
    assert string_hint("hello") is None


def test_string_collector_dedupes_and_previews() -> None:
    collector = StringCollector(long_threshold=40)
    long_value = "hello world " * 10
    assert collector.observe("short") is None
    first = collector.observe(long_value)
    assert collector.observe(long_value) is None
    assert first.hint == "long string"
    assert first.full_length == 120
    assert len(first.value) == 60
    assert first.value.endswith("...")
    assert len(collector.references) == 1
