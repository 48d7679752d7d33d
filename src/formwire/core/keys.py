"""
Bracketed dynamic-key codec shared by the decode and encode walkers.

Dynamic (map-shaped) fields are spread across a family of flat keys that share the
field's logical key as a prefix: ``<key>[<subkey>]``. Only one bracket level is
supported and sub-keys are not escaped, so a sub-key containing ``]`` does not
round-trip. A sub-key cannot contain a newline.

Examples
--------
>>> from formwire.core.keys import map_key, match_subkey, subkey_pattern
>>> map_key("filters", "color")
'filters[color]'
>>> match_subkey(subkey_pattern("filters"), "filters[color]")
'color'
>>> match_subkey(subkey_pattern("filters"), "filters") is None
True
"""

from __future__ import annotations

import re

from .errors import PatternError

__all__ = [
    "map_key",
    "subkey_pattern",
    "match_subkey",
]


def _check_key(key: str) -> None:
    if "[" in key or "]" in key:
        raise PatternError(f"logical key {key!r} cannot contain brackets")


def map_key(key: str, subkey: str) -> str:
    """
    Build the flat key for one dynamic-map entry.

    Raises:
        PatternError: If the logical key itself contains a bracket.
    """
    _check_key(key)
    return f"{key}[{subkey}]"


def subkey_pattern(key: str) -> re.Pattern[str]:
    """
    Compile the matcher for ``<key>[<subkey>]`` flat keys.

    Args:
        key (str): Logical key of the dynamic-map field.

    Returns:
        re.Pattern[str]: Pattern whose first group captures the sub-key, greedy up
        to the final closing bracket.

    Raises:
        PatternError: If the logical key itself contains a bracket.
    """
    _check_key(key)
    return re.compile(rf"{re.escape(key)}\[(.*)\]")


def match_subkey(pattern: re.Pattern[str], raw_key: str) -> str | None:
    """Return the captured sub-key, or None when ``raw_key`` does not match."""
    m = pattern.fullmatch(raw_key)
    return m.group(1) if m else None
