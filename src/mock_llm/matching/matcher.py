"""Structural comparison of expected and actual value trees."""

from __future__ import annotations

import logging

from ..models import MatchMode, Value
from .normalize import serialize

LOGGER = logging.getLogger(__name__)


def matches(mode: MatchMode, expected: Value, actual: Value) -> bool:
    """Return whether *actual* satisfies *expected* under *mode*.

    ``exact`` requires structurally identical trees. ``contains`` treats
    *expected* as a partial description of *actual*: strings match as
    substrings, objects as key subsets, arrays position by position.
    Never raises; anything that cannot be compared is a non-match.
    """

    try:
        if mode == MatchMode.EXACT:
            return _exact(expected, actual)
        if mode == MatchMode.CONTAINS:
            return _contains(expected, actual)
    except (TypeError, ValueError, RecursionError):
        LOGGER.debug("Comparison failed for mode %s", mode, exc_info=True)
        return False
    return False


def _exact(expected: Value, actual: Value) -> bool:
    if expected is None or actual is None:
        return expected is None and actual is None
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and expected == actual
    if isinstance(expected, (int, float)):
        return isinstance(actual, (int, float)) and expected == actual
    if isinstance(expected, str):
        return isinstance(actual, str) and expected == actual
    if isinstance(expected, dict):
        if not isinstance(actual, dict) or expected.keys() != actual.keys():
            return False
        return all(_exact(item, actual[key]) for key, item in expected.items())
    if isinstance(expected, list):
        if not isinstance(actual, list) or len(expected) != len(actual):
            return False
        return all(_exact(item, other) for item, other in zip(expected, actual))
    return False


def _contains(expected: Value, actual: Value) -> bool:
    if expected is None:
        return actual is None
    if isinstance(expected, str):
        if isinstance(actual, str):
            return expected in actual
        return expected in serialize(actual)
    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return False
        for key, item in expected.items():
            if key not in actual or not _contains(item, actual[key]):
                return False
        return True
    if isinstance(expected, list):
        if not isinstance(actual, list):
            return False
        if not expected:
            return True
        # Positional, equal-length comparison; not subset or subsequence containment.
        if len(expected) != len(actual):
            return False
        return all(_contains(item, other) for item, other in zip(expected, actual))
    return serialize(expected) == serialize(actual)
