"""
Form tag resolution.

A field's tag is a comma-separated string: the first segment is the logical key
matched against flat form map keys, later segments are flags. Only ``omitempty``
is recognized; unknown flags are ignored.

Examples
--------
>>> from formwire.core.tags import parse_tag
>>> parse_tag("int_param,omitempty")
FieldTag(key='int_param', omit_empty=True)
>>> parse_tag("-").included
False
>>> parse_tag(None)
FieldTag(key='', omit_empty=False)
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import TAG_OMITEMPTY, TAG_SEPARATOR, TAG_SKIP

__all__ = [
    "FieldTag",
    "parse_tag",
]


@dataclass(slots=True, frozen=True)
class FieldTag:
    """Parsed form tag: logical key and omit-empty flag."""

    key: str
    omit_empty: bool = False

    @property
    def included(self) -> bool:
        """True when the field takes part in encode/decode."""
        return self.key != "" and self.key != TAG_SKIP


def parse_tag(raw: str | None) -> FieldTag:
    """
    Parse a raw tag string into a FieldTag.

    Args:
        raw (str | None): Tag text from field metadata, or None when the field has
            no tag.

    Returns:
        FieldTag: Logical key (empty when untagged) and the omit-empty flag.

    Notes:
        Never raises. Malformed tags degrade to "key = first segment, flag = False".
    """
    if not raw:
        return FieldTag(key="")

    key, *flags = raw.split(TAG_SEPARATOR)
    if key == TAG_SKIP:
        return FieldTag(key=TAG_SKIP)
    return FieldTag(key=key, omit_empty=TAG_OMITEMPTY in flags)
