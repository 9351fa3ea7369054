"""Key normalization used by every relation lookup."""

from typing import Iterable, List, Optional

KEY_SEPARATOR = "|"


def is_empty(value: Optional[str]) -> bool:
    """True for None, blank strings and the ``-`` placeholder."""
    if value is None:
        return True
    stripped = value.strip()
    return stripped == "" or stripped == "-"


def normalize_key(value: Optional[str], empty_like_dash: bool = False) -> str:
    """
    Canonical form of a single key part.

    Args:
        value: Raw field value
        empty_like_dash: Treat a lone ``-`` as empty

    Returns:
        Trimmed, case-folded value, or "" when the value is missing

    Examples:
        >>> normalize_key("  Main ")
        'main'
        >>> normalize_key("-", empty_like_dash=True)
        ''
    """
    if value is None:
        return ""
    stripped = value.strip()
    if not stripped:
        return ""
    if empty_like_dash and stripped == "-":
        return ""
    return stripped.casefold()


def build_composite_key(
    parts: Iterable[Optional[str]], empty_like_dash: bool = False
) -> str:
    """
    Join normalized parts with ``|``.

    Any empty part makes the whole key empty, so partially filled
    references never match.
    """
    normalized: List[str] = []
    for part in parts:
        key = normalize_key(part, empty_like_dash=empty_like_dash)
        if not key:
            return ""
        normalized.append(key)
    return KEY_SEPARATOR.join(normalized)


def split_underscore_parts(value: Optional[str]) -> List[str]:
    """Split on ``_``, trim, drop empty segments and lowercase."""
    if not value:
        return []
    return [part.strip().lower() for part in value.split("_") if part.strip()]


def raw_key(parts: Iterable[Optional[str]]) -> str:
    """Raw (un-normalized) parts joined with ``|``, for display."""
    return KEY_SEPARATOR.join(part or "" for part in parts)
