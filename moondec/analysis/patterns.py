"""Curated lookup tables for the environment simulator.

Each table is plain data so it can be tested and extended independently of
the code that consumes it.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional, Pattern, Sequence, Tuple

ROOT_NAMESPACE = "game"

# Service key -> short display name used for the bound local.
SERVICE_SHORTCUTS: Mapping[str, str] = {
    "Players": "Players",
    "Workspace": "workspace",
    "ReplicatedStorage": "RS",
    "ReplicatedFirst": "ReplicatedFirst",
    "ServerStorage": "ServerStorage",
    "ServerScriptService": "SSS",
    "StarterGui": "StarterGui",
    "StarterPlayer": "StarterPlayer",
    "CoreGui": "CoreGui",
    "Lighting": "Lighting",
    "RunService": "RunService",
    "UserInputService": "UIS",
    "TweenService": "TweenService",
    "HttpService": "HttpService",
    "TeleportService": "TeleportService",
    "MarketplaceService": "MarketplaceService",
    "VirtualInputManager": "VIM",
    "VirtualUser": "VirtualUser",
    "ContextActionService": "CAS",
    "SoundService": "SoundService",
    "Debris": "Debris",
    "TextChatService": "TextChatService",
}

# Globals that are aliases of a service object.
GLOBAL_SERVICE_ALIASES: Mapping[str, str] = {
    "workspace": "Workspace",
    "Workspace": "Workspace",
}

SERVICE_LOOKUP_METHODS = frozenset({"GetService", "FindService"})

# Method/function name -> call-graph category.  Matching is on the last
# path segment of the resolved callee (``a.b:FireServer`` -> ``FireServer``).
CALL_PATTERNS: Mapping[str, str] = {
    "FireServer": "remote_event",
    "FireClient": "remote_event",
    "FireAllClients": "remote_event",
    "InvokeServer": "remote_function",
    "InvokeClient": "remote_function",
    "HttpGet": "http",
    "HttpGetAsync": "http",
    "HttpPost": "http",
    "HttpPostAsync": "http",
    "GetAsync": "http",
    "PostAsync": "http",
    "RequestAsync": "http",
    "request": "http",
    "http_request": "http",
    "loadstring": "dynamic_code",
    "load": "dynamic_code",
    "require": "module",
    "Teleport": "teleport",
    "TeleportToPlaceInstance": "teleport",
}

# Regex -> hint label for string reference reporting.  First match wins.
STRING_HINTS: Sequence[Tuple[Pattern[str], str]] = (
    (re.compile(r"discord(?:app)?\.com/api/webhooks/", re.IGNORECASE), "webhook"),
    (re.compile(r"^rbxassetid://|^rbxasset://", re.IGNORECASE), "asset id"),
    (re.compile(r"^https?://", re.IGNORECASE), "url"),
    (re.compile(r"^[A-Za-z0-9+/]{24,}={0,2}$"), "base64-like blob"),
)

LONG_STRING_HINT = "long string"


def call_category(callee: str) -> Optional[str]:
    """Return the call-graph category for a resolved callee, if any."""

    segment = re.split(r"[.:]", callee)[-1] if callee else ""
    return CALL_PATTERNS.get(segment)


def string_hint(value: str) -> Optional[str]:
    for pattern, label in STRING_HINTS:
        if pattern.search(value):
            return label
    return None


__all__ = [
    "ROOT_NAMESPACE",
    "SERVICE_SHORTCUTS",
    "GLOBAL_SERVICE_ALIASES",
    "SERVICE_LOOKUP_METHODS",
    "CALL_PATTERNS",
    "STRING_HINTS",
    "LONG_STRING_HINT",
    "call_category",
    "string_hint",
]
