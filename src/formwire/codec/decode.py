"""
Decode walker: flat form map -> record tree.

Form data is flat, with key/value pairings ``field = val`` where ``field`` is
matched against a field's tag. The same key may repeat (``field = a, field = b``);
list fields collect every value, other fields take the first. Dynamic pairs are
encoded in the key as ``field[subkey] = val`` and land in ``dict[str, X]`` fields.

Notes
- The destination is mutated in place; the top-level instance is never replaced.
- Nested records share the flat key space with their parent (no key prefix).
- Optional values, lists and maps are allocated only when something is actually
  written through them.
- An absent optional (its own key has no values) is skipped, unless it wraps a
  dynamic map. Optional nested records are therefore only decoded when their own
  key is submitted; required nested records are always decoded.
- A bare string value is treated as a single value.
- ``omitempty`` has no effect on decoding.

Examples
--------
>>> from dataclasses import dataclass, field
>>> from formwire import unmarshal
>>> @dataclass
... class Search:
...     query: str = field(default="", metadata={"form": "q"})
...     page: int = field(default=0, metadata={"form": "page"})
>>> s = Search()
>>> unmarshal({"q": ["shoes"], "page": ["2", "3"]}, s)
>>> s
Search(query='shoes', page=2)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from formwire.config import FormSettings
from formwire.core.errors import DecodeError, ShapeMismatchError
from formwire.core.fields import (
    Kind,
    TypeShape,
    describe_shape,
    is_frozen_record,
    is_record,
    new_record,
    record_fields,
)
from formwire.core.keys import map_key, match_subkey, subkey_pattern
from formwire.core.scalars import decode_leaf

__all__ = [
    "Decoder",
    "unmarshal",
]

logger = logging.getLogger(__name__)


def _as_values(values: Any) -> Sequence[str]:
    # A bare string is one value, not a sequence of characters.
    if isinstance(values, str):
        return (values,)
    return values or ()


def unmarshal(
    src: Mapping[str, Sequence[str]], dest: Any, settings: FormSettings | None = None
) -> None:
    """
    Populate the record ``dest`` from the flat form map ``src``.

    Args:
        src (Mapping[str, Sequence[str]]): Flat form map, e.g. parsed request form.
        dest (Any): Mutable dataclass or pydantic model instance.
        settings (FormSettings | None): Codec settings; defaults when None.

    Raises:
        ShapeMismatchError: If ``dest`` is not a mutable record instance.
        DecodeError: If a field value cannot be coerced.
        PatternError: If a dynamic-map field's logical key contains a bracket.
    """
    Decoder(src, settings).decode(dest)


class Decoder:
    """Decode a flat form map into record instances."""

    def __init__(
        self, src: Mapping[str, Sequence[str]], settings: FormSettings | None = None
    ) -> None:
        self.src = src
        self.settings = settings or FormSettings()

    def decode(self, dest: Any) -> None:
        """Decode into ``dest``, which must be a mutable record instance."""
        if not is_record(dest):
            raise ShapeMismatchError(
                f"destination ({describe_shape(dest)}) must be a dataclass or pydantic model instance"
            )
        if is_frozen_record(dest):
            raise ShapeMismatchError(f"destination ({type(dest).__name__}) is frozen")
        logger.debug("decoding %d form keys into %s", len(self.src), type(dest).__name__)
        self._decode_record(dest)

    def _values(self, key: str) -> Sequence[str]:
        return _as_values(self.src.get(key))

    def _decode_record(self, dest: Any) -> bool:
        """Decode every included field of ``dest``; report whether anything was written."""
        wrote = False
        for fd in record_fields(type(dest), self.settings.tag_name):
            if not fd.tag.included:
                continue
            changed, value = self._decode_field(fd.shape, fd.key, getattr(dest, fd.name, None))
            if changed:
                setattr(dest, fd.name, value)
                wrote = True
        return wrote

    def _decode_field(self, shape: TypeShape, key: str, current: Any) -> tuple[bool, Any]:
        kind = shape.kind
        if kind is Kind.DYNAMIC_MAP:
            return self._decode_map(shape, key, current)
        if kind is Kind.RECORD:
            target = current if current is not None else new_record(shape.type)
            return self._decode_record(target), target
        if kind is Kind.OPTIONAL and shape.elem is not None:
            if shape.elem.kind is not Kind.DYNAMIC_MAP and not self._values(key):
                return False, current
            # Inner handlers allocate on write, so None stays None when nothing matches.
            return self._decode_field(shape.elem, key, current)

        values = self._values(key)
        if not values:
            return False, current
        if kind is Kind.SEQUENCE and shape.elem is not None:
            target = current if current is not None else []
            for raw in values:
                target.append(decode_leaf(shape.elem, raw, key))
            return True, target
        return True, decode_leaf(shape, values[0], key, current)

    def _decode_map(self, shape: TypeShape, key: str, current: Any) -> tuple[bool, Any]:
        pattern = subkey_pattern(key)
        elem = shape.elem
        out: dict[str, Any] = {}
        for raw_key, values in self.src.items():
            subkey = match_subkey(pattern, raw_key)
            values = _as_values(values)
            if subkey is None or not values:
                continue
            path = map_key(key, subkey)
            if elem is not None and elem.is_sequence:
                try:
                    out[subkey] = [decode_leaf(elem.elem, raw, path) for raw in values]
                except DecodeError as exc:
                    raise DecodeError(key, f"error decoding map slice: {exc}") from exc
            else:
                try:
                    out[subkey] = decode_leaf(elem, values[0], path)
                except DecodeError as exc:
                    raise DecodeError(key, f"error decoding map value: {exc}") from exc

        if not out:
            return False, current
        return True, out
