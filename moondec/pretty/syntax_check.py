"""Optional syntax validation of rendered output using :mod:`luaparser`."""

from __future__ import annotations

import logging
from typing import Optional

LOG = logging.getLogger(__name__)


def check_lua_syntax(source: str) -> Optional[str]:
    """Return ``None`` when *source* parses, otherwise the parser's message."""

    try:
        from luaparser import ast
    except ImportError as exc:  # pragma: no cover - dependency declared in pyproject
        raise RuntimeError("syntax validation requires luaparser to be installed") from exc

    try:
        ast.parse(source)
    except Exception as exc:  # luaparser raises several unrelated types
        LOG.debug("Rendered output failed to parse: %s", exc)
        return str(exc) or type(exc).__name__
    return None


def is_valid_lua(source: str) -> bool:
    return check_lua_syntax(source) is None


__all__ = ["check_lua_syntax", "is_valid_lua"]
