"""
Encode walker: record tree -> flat form map.

Notes
- Fields are visited in declaration order with the same dispatch as the decoder:
  text capability first, then structural kind.
- ``omitempty`` drops zero-valued fields entirely (no key is emitted). Optional,
  list and map values are zero only when None; lists additionally drop when empty.
- A present optional leaf is always emitted, even when the value it holds is zero.
  A present optional list still honors ``omitempty`` when it is empty.
- Nested records merge into the same flat map as their parent.
- Dynamic maps emit one ``key[subkey]`` entry per item; sub-keys are not escaped.

Examples
--------
>>> from dataclasses import dataclass, field
>>> from formwire import marshal
>>> @dataclass
... class Search:
...     query: str = field(default="", metadata={"form": "q"})
...     page: int = field(default=0, metadata={"form": "page,omitempty"})
>>> marshal(Search(query="shoes"))
{'q': ['shoes']}
"""

from __future__ import annotations

import logging
from typing import Any

from formwire.config import FormSettings
from formwire.core.errors import EncodeError, ShapeMismatchError
from formwire.core.fields import Kind, TypeShape, describe_shape, is_record, is_zero, record_fields
from formwire.core.keys import map_key
from formwire.core.scalars import encode_leaf
from formwire.core.typing import FlatFormMap

__all__ = [
    "Encoder",
    "marshal",
]

logger = logging.getLogger(__name__)


def marshal(src: Any, settings: FormSettings | None = None) -> FlatFormMap:
    """
    Serialize the record ``src`` into a new flat form map.

    Args:
        src (Any): Dataclass or pydantic model instance.
        settings (FormSettings | None): Codec settings; defaults when None.

    Returns:
        FlatFormMap: Mapping of form key -> ordered values.

    Raises:
        ShapeMismatchError: If ``src`` is not a record instance.
        EncodeError: If a field value cannot be rendered.
        PatternError: If a dynamic-map field's logical key contains a bracket.
    """
    dest: FlatFormMap = {}
    Encoder(dest, settings).encode(src)
    return dest


class Encoder:
    """Encode record instances into a flat form map owned by the caller."""

    def __init__(self, dest: FlatFormMap, settings: FormSettings | None = None) -> None:
        self.dest = dest
        self.settings = settings or FormSettings()

    def encode(self, src: Any) -> None:
        """Encode ``src`` into the destination map."""
        if not is_record(src):
            raise ShapeMismatchError(
                f"source ({describe_shape(src)}) must be a dataclass or pydantic model instance"
            )
        logger.debug("encoding %s", type(src).__name__)
        self._encode_record(src)

    def _encode_record(self, src: Any) -> None:
        for fd in record_fields(type(src), self.settings.tag_name):
            if not fd.tag.included:
                continue
            self._encode_field(fd.shape, fd.key, getattr(src, fd.name, None), fd.tag.omit_empty)

    def _encode_field(self, shape: TypeShape, key: str, value: Any, omit_empty: bool) -> None:
        if value is None:
            return

        kind = shape.kind
        if kind is Kind.OPTIONAL and shape.elem is not None:
            # Presence clears omitempty for leaves; containers still drop when empty.
            keep = shape.elem.kind in (Kind.SEQUENCE, Kind.DYNAMIC_MAP)
            self._encode_field(shape.elem, key, value, omit_empty and keep)
        elif kind is Kind.SEQUENCE and shape.elem is not None:
            self._encode_sequence(shape.elem, key, value, omit_empty)
        elif kind is Kind.DYNAMIC_MAP and shape.elem is not None:
            self._encode_map(shape.elem, key, value)
        elif kind is Kind.RECORD:
            self._encode_record(value)
        elif kind is Kind.TEXT:
            # Zero check happens before the capability is invoked.
            if omit_empty and is_zero(value, shape):
                return
            self._append(key, encode_leaf(shape, value, key))
        else:
            text = encode_leaf(shape, value, key)
            if omit_empty and is_zero(value, shape):
                return
            self._append(key, text)

    def _append(self, key: str, text: str | None) -> None:
        if text is not None:
            self.dest.setdefault(key, []).append(text)

    def _encode_values(self, elem: TypeShape, key: str, items: Any) -> list[str]:
        out: list[str] = []
        for item in items:
            text = encode_leaf(elem, item, key)
            if text is not None:
                out.append(text)
        return out

    def _encode_sequence(self, elem: TypeShape, key: str, value: Any, omit_empty: bool) -> None:
        if not value and (omit_empty or not self.settings.emit_empty_sequences):
            return
        try:
            self.dest[key] = self._encode_values(elem, key, value)
        except EncodeError as exc:
            raise EncodeError(key, f"unable to encode slice: {exc}") from exc

    def _encode_map(self, elem: TypeShape, key: str, value: Any) -> None:
        for subkey, item in value.items():
            if item is None:
                continue
            path = map_key(key, str(subkey))
            try:
                if elem.is_sequence and elem.elem is not None:
                    self.dest[path] = self._encode_values(elem.elem, path, item)
                else:
                    self._append(path, encode_leaf(elem, item, path))
            except EncodeError as exc:
                raise EncodeError(key, f"unable to encode map key {path}: {exc}") from exc
