"""Key normalization rules shared by the case-insensitive containers."""

from __future__ import annotations

from collections import UserString
from typing import Any, Final

# A key is string-like iff it is an instance of one of these types.
STRING_LIKE_TYPES: Final[tuple[type, ...]] = (str, UserString)


def is_string_like(key: Any) -> bool:
    """Return True if `key` can be used as a map key."""
    return isinstance(key, STRING_LIKE_TYPES)


def fold(key: str | UserString) -> str:
    """
    Normalize a string-like key for case-insensitive comparison.

    Folding is lossy: the original casing cannot be recovered from the result.

    Examples:
        >>> fold("Content-Type")
        'content-type'
        >>> fold("ETag")
        'etag'

    """
    return str(key).lower()
