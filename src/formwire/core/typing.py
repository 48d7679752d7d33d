"""
Typing aliases and capability protocols used by records and the codec walkers.

Provides the flat form map alias, sized numeric aliases that carry a bit width for
range checking, and the text capability protocols a type implements to bypass the
built-in coercion rules. This module contains no runtime logic and is zero-IO.

Notes:
    - Plain ``int`` is treated as a signed 64-bit integer and plain ``float`` as a
      64-bit float. Use the sized aliases to narrow the accepted range.
    - Sized aliases are ``typing.Annotated`` wrappers, so values stay plain ``int``
      and ``float`` at runtime.

Examples:
    Declare a record with sized fields.

    >>> from dataclasses import dataclass, field
    >>> from formwire.core.typing import Int8, Float32
    >>> @dataclass
    ... class Sample:
    ...     level: Int8 = field(default=0, metadata={"form": "level"})
    ...     ratio: Float32 = field(default=0.0, metadata={"form": "ratio"})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Protocol, runtime_checkable

__all__ = [
    "FlatFormMap",
    "Width",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
    "TextMarshaler",
    "TextUnmarshaler",
]

# Wire representation: key -> ordered values.
FlatFormMap = dict[str, list[str]]


@dataclass(slots=True, frozen=True)
class Width:
    """Bit width (and signedness) marker attached to numeric annotations."""

    bits: int
    signed: bool = True


Int8 = Annotated[int, Width(8)]
Int16 = Annotated[int, Width(16)]
Int32 = Annotated[int, Width(32)]
Int64 = Annotated[int, Width(64)]
UInt = Annotated[int, Width(64, signed=False)]
UInt8 = Annotated[int, Width(8, signed=False)]
UInt16 = Annotated[int, Width(16, signed=False)]
UInt32 = Annotated[int, Width(32, signed=False)]
UInt64 = Annotated[int, Width(64, signed=False)]
Float32 = Annotated[float, Width(32)]
Float64 = Annotated[float, Width(64)]


@runtime_checkable
class TextMarshaler(Protocol):
    """Type that renders itself as form text, overriding kind-based coercion."""

    def marshal_text(self) -> bytes | str: ...


@runtime_checkable
class TextUnmarshaler(Protocol):
    """
    Type that populates itself from form text, overriding kind-based coercion.

    Notes:
        The decoder allocates the instance with a no-argument call before invoking
        ``unmarshal_text``. Any exception raised is reported as a DecodeError for
        the field being decoded.
    """

    def unmarshal_text(self, raw: bytes) -> None: ...
