"""Shared models used across the mock LLM server."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, List, Union

Value = Union[None, bool, int, float, str, Dict[str, "Value"], List["Value"]]
"""Canonical JSON-like tree that every comparison operates on."""


class MatchMode(str, enum.Enum):
    """How a mock's expected value is compared with the tail message."""

    EXACT = "exact"
    CONTAINS = "contains"


class Vendor(str, enum.Enum):
    """Provider APIs the server can stand in for."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


@dataclass(frozen=True)
class MockEntry:
    """A registered (match description, canned response) pair.

    ``match`` holds the vendor-shaped value from configuration; it is only
    interpreted through the vendor's provider adapter. ``response`` is returned
    verbatim and never inspected.
    """

    name: str
    match_mode: MatchMode
    match: Any
    response: Any
