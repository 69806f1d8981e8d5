"""Helpers for the scalar-or-list shape of normalized XML trees."""

from typing import Any, List


def to_sequence(value: Any) -> List[Any]:
    """Return ``value`` as a list.

    A child element that occurs once is normalized to a scalar and one that
    occurs several times to a list, so every access site goes through here.
    ``None`` becomes an empty list.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def first_present(element: Any, *keys: str) -> Any:
    """Return the first non-empty value among ``keys`` of a mapping."""
    if not isinstance(element, dict):
        return None
    for key in keys:
        value = element.get(key)
        if value not in (None, ""):
            return value
    return None
