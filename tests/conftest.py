"""Test configuration ensuring the project source tree is importable."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import importlib

import pytest

ROOT = Path(__file__).resolve().parent.parent

root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)
else:
    idx = sys.path.index(root_str)
    if idx != 0:
        sys.path.insert(0, sys.path.pop(idx))

# Import the project package eagerly so subsequent imports reuse it
importlib.import_module("moondec")

from moondec import DecompileOptions, Function, decompile, function_from_mapping  # noqa: E402


def make_function(
    instructions: Sequence[Any],
    constants: Optional[Sequence[Any]] = None,
    children: Optional[Sequence[Dict[str, Any]]] = None,
    **extra: Any,
) -> Function:
    payload: Dict[str, Any] = {
        "instructions": list(instructions),
        "constants": list(constants or []),
        "children": list(children or []),
    }
    payload.update(extra)
    return function_from_mapping(payload)


def body_text(function: Function, **options: Any) -> str:
    """Decompile *function* and return only the rendered body."""

    settings = {"header": False, "include_call_graph": False, "include_string_refs": False}
    settings.update(options)
    result = decompile(function, DecompileOptions(**settings))
    assert result.error_code is None, result.text
    return result.text.rstrip("\n")


def body_lines(function: Function, **options: Any) -> List[str]:
    return body_text(function, **options).splitlines()


@pytest.fixture
def build_function() -> Callable[..., Function]:
    return make_function


@pytest.fixture
def render_body() -> Callable[..., List[str]]:
    return body_lines


@pytest.fixture
def render_text() -> Callable[..., str]:
    return body_text
