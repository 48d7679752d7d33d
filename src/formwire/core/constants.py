"""
Form codec defaults and literal tokens.

Defines the tag grammar tokens, the boolean token set and the duration units
consumed by the tag resolver and the scalar coercion layer. This module is zero-IO
and uses only the Python standard library.

Notes:
    - Changes to the tag tokens are wire-visible: records tagged with one token set
      will not decode payloads produced under another.
    - DEFAULT_TAG_NAME is the metadata key read from dataclass field metadata and
      pydantic ``json_schema_extra``; FormSettings may override it per call.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_TAG_NAME",
    "TAG_SEPARATOR",
    "TAG_SKIP",
    "TAG_OMITEMPTY",
    "TRUE_TOKENS",
    "FALSE_TOKENS",
    "DURATION_UNITS_NS",
]

# Metadata key carrying the form tag on each field.
DEFAULT_TAG_NAME: str = "form"

# Tag grammar: "<key>[,<flag>...]"; "-" excludes the field.
TAG_SEPARATOR: str = ","
TAG_SKIP: str = "-"
TAG_OMITEMPTY: str = "omitempty"

# Accepted boolean literals (case variants are enumerated, not folded).
TRUE_TOKENS: frozenset[str] = frozenset({"1", "t", "T", "TRUE", "true", "True"})
FALSE_TOKENS: frozenset[str] = frozenset({"0", "f", "F", "FALSE", "false", "False"})

# Duration unit suffix -> nanoseconds.
DURATION_UNITS_NS: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek small letter mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 60 * 60 * 1_000_000_000,
}
