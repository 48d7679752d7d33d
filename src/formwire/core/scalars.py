"""
Scalar coercion layer: string <-> leaf value conversion.

Responsibilities
- Parse integers (base auto-detected from the literal prefix), unsigned integers,
  floats, booleans, strings and durations, sized to the declared bit width.
- Format the inverse: decimal integers, shortest positional floats, ``true/false``
  and canonical unit-suffixed durations.
- Dispatch text leaves: built-in timestamps (``datetime``/``date``) and any type
  implementing the ``unmarshal_text``/``marshal_text`` capability.

Notes
- ``decode_leaf``/``encode_leaf`` are the only entry points used by the walkers;
  they wrap conversion failures into field-scoped DecodeError/EncodeError.
- The text capability is consulted before kind-based coercion at every level,
  including elements of sequences and dynamic maps.
- Durations are ``datetime.timedelta``; nanosecond input is truncated toward zero
  to microsecond resolution.

Examples
--------
>>> from formwire.core.scalars import parse_int, format_float, format_duration
>>> parse_int("0x1f")
31
>>> parse_int("010")
8
>>> format_float(1e21)
'1000000000000000000000'
>>> from datetime import timedelta
>>> format_duration(timedelta(minutes=30))
'30m0s'
"""

from __future__ import annotations

import math
import operator
import re
import struct
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

from .constants import DURATION_UNITS_NS, FALSE_TOKENS, TRUE_TOKENS
from .errors import DecodeError, EncodeError, UnsupportedKindError
from .fields import Kind, TypeShape
from .typing import Width

__all__ = [
    "parse_int",
    "parse_uint",
    "parse_float",
    "parse_bool",
    "parse_duration",
    "parse_datetime",
    "format_float",
    "format_duration",
    "format_datetime",
    "decode_leaf",
    "encode_leaf",
]

_DEFAULT_INT = Width(64)
_DEFAULT_FLOAT = Width(64)

_INT_RE = re.compile(
    r"""
    (?P<sign>[+-])?
    (?:
        0[xX](?P<hex>(?:_?[0-9a-fA-F])+)
      | 0[oO](?P<oct>(?:_?[0-7])+)
      | 0[bB](?P<bin>(?:_?[01])+)
      | 0(?P<legacy>(?:_?[0-7])*)
      | (?P<dec>[1-9](?:_?[0-9])*)
    )
    """,
    re.VERBOSE,
)
_DIGITS = r"[0-9]+"
_DEC_FLOAT_RE = re.compile(
    rf"[+-]?(?:{_DIGITS}(?:\.(?:{_DIGITS})?)?|\.{_DIGITS})(?:[eE][+-]?{_DIGITS})?"
)
_HEX_FLOAT_RE = re.compile(
    r"[+-]?0[xX](?:_?[0-9a-fA-F])*(?:\.[0-9a-fA-F]*)?[pP][+-]?[0-9]+"
)
_SPECIAL_FLOAT_RE = re.compile(r"[+-]?(?:infinity|inf)|nan", re.IGNORECASE)
_DURATION_TERM_RE = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")
_MAX_DURATION_NS = (1 << 63) - 1


def _syntax(text: str) -> ValueError:
    return ValueError(f"parsing {text!r}: invalid syntax")


def _range(text: str) -> ValueError:
    return ValueError(f"parsing {text!r}: value out of range")


def _bounds(width: Width) -> tuple[int, int]:
    if width.signed:
        return -(1 << (width.bits - 1)), (1 << (width.bits - 1)) - 1
    return 0, (1 << width.bits) - 1


def _parse_integer(text: str, width: Width) -> int:
    m = _INT_RE.fullmatch(text)
    if m is None or (m.group("sign") and not width.signed):
        raise _syntax(text)
    if m.group("hex") is not None:
        value = int(m.group("hex").replace("_", ""), 16)
    elif m.group("oct") is not None:
        value = int(m.group("oct").replace("_", ""), 8)
    elif m.group("bin") is not None:
        value = int(m.group("bin").replace("_", ""), 2)
    elif m.group("dec") is not None:
        value = int(m.group("dec").replace("_", ""), 10)
    else:
        legacy = m.group("legacy").replace("_", "")
        value = int(legacy, 8) if legacy else 0
    if m.group("sign") == "-":
        value = -value

    lo, hi = _bounds(width)
    if not lo <= value <= hi:
        raise _range(text)
    return value


def parse_int(text: str, width: Width = _DEFAULT_INT) -> int:
    """
    Parse a signed integer literal.

    Args:
        text (str): Literal; optional sign, base prefix ``0x``/``0o``/``0b`` or a
            legacy leading ``0`` for octal, underscores between digits.
        width (Width): Destination width; values outside it are rejected.

    Returns:
        int: Parsed value.

    Raises:
        ValueError: On malformed or out-of-range input.
    """
    return _parse_integer(text, width if width.signed else Width(width.bits))


def parse_uint(text: str, width: Width = Width(64, signed=False)) -> int:
    """Parse an unsigned integer literal (same grammar as parse_int, no sign)."""
    return _parse_integer(text, Width(width.bits, signed=False))


def parse_float(text: str, width: Width = _DEFAULT_FLOAT) -> float:
    """
    Parse a decimal, scientific, hexadecimal or special (nan/inf) float literal.

    Digit underscores are accepted only after a ``0x`` prefix.

    Raises:
        ValueError: On malformed input, or when a finite literal overflows the
            declared width.
    """
    if _SPECIAL_FLOAT_RE.fullmatch(text):
        value = float(text)
    elif _DEC_FLOAT_RE.fullmatch(text):
        value = float(text)
    elif _HEX_FLOAT_RE.fullmatch(text):
        value = float.fromhex(text.replace("_", ""))
    else:
        raise _syntax(text)

    if math.isinf(value) and not _SPECIAL_FLOAT_RE.fullmatch(text):
        raise _range(text)
    if width.bits == 32 and math.isfinite(value):
        try:
            value = struct.unpack(">f", struct.pack(">f", value))[0]
        except OverflowError as exc:
            raise _range(text) from exc
    return value


def parse_bool(text: str) -> bool:
    """Parse one of ``1,t,T,TRUE,true,True,0,f,F,FALSE,false,False``."""
    if text in TRUE_TOKENS:
        return True
    if text in FALSE_TOKENS:
        return False
    raise _syntax(text)


def parse_duration(text: str) -> timedelta:
    """
    Parse a unit-suffixed duration such as ``"30s"``, ``"1h15m"`` or ``"-1.5ms"``.

    Units: ``ns``, ``us`` (or ``µs``/``μs``), ``ms``, ``s``, ``m``, ``h``. The bare
    literal ``"0"`` is accepted without a unit.

    Raises:
        ValueError: On malformed input, unknown or missing units, or overflow of a
            signed 64-bit nanosecond count.
    """
    s = text
    negative = False
    if s[:1] in ("-", "+"):
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    total = 0
    while s:
        m = _DURATION_TERM_RE.match(s)
        whole, frac, unit = m.group(1), m.group(2), m.group(3)
        if not whole and not frac:
            raise ValueError(f"invalid duration {text!r}")
        if not unit:
            raise ValueError(f"missing unit in duration {text!r}")
        # A unit runs until the next digit or dot; anything unknown is an error.
        if unit not in DURATION_UNITS_NS:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")
        scale = DURATION_UNITS_NS[unit]
        total += int(whole or 0) * scale
        if frac:
            total += int(frac) * scale // 10 ** len(frac)
        if total > _MAX_DURATION_NS + (1 if negative else 0):
            raise ValueError(f"invalid duration {text!r}")
        s = s[m.end() :]

    micros = total // 1000
    return timedelta(microseconds=-micros if negative else micros)


def parse_datetime(text: str) -> datetime:
    """Parse an RFC 3339 / ISO 8601 timestamp (``Z`` suffix accepted)."""
    return datetime.fromisoformat(text)


def format_float(value: float) -> str:
    """
    Format a float as the shortest round-trippable decimal in positional notation.

    Examples:
        >>> format_float(6.0), format_float(0.1), format_float(float("-inf"))
        ('6', '0.1', '-Inf')
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _split_frac(value: int, prec: int) -> tuple[int, str]:
    whole, frac = divmod(value, 10**prec)
    digits = f"{frac:0{prec}d}".rstrip("0")
    return whole, f".{digits}" if digits else ""


def format_duration(value: timedelta) -> str:
    """
    Format a duration with the largest units first: ``"1h0m0s"``, ``"1.5s"``,
    ``"250ms"``; the zero duration is ``"0s"``.
    """
    ns = ((value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds) * 1000
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    u = abs(ns)

    if u < 1_000_000_000:
        if u < 1_000:
            return f"{sign}{u}ns"
        prec, unit = (3, "µs") if u < 1_000_000 else (6, "ms")
        whole, frac = _split_frac(u, prec)
        return f"{sign}{whole}{frac}{unit}"

    secs, frac = _split_frac(u, 9)
    out = f"{secs % 60}{frac}s"
    mins = secs // 60
    if mins:
        out = f"{mins % 60}m{out}"
        hours = mins // 60
        if hours:
            out = f"{hours}h{out}"
    return sign + out


def format_datetime(value: datetime) -> str:
    """
    Format a timestamp as RFC 3339: ``Z`` for UTC, a numeric offset otherwise,
    fractional seconds only when non-zero. Naive timestamps carry no offset.
    """
    text = value.replace(microsecond=0, tzinfo=None).isoformat()
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if offset is None:
        return text
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hh, mm = divmod(abs(minutes), 60)
    return f"{text}{sign}{hh:02d}:{mm:02d}"


def _decode_text(shape: TypeShape, raw: str, current: Any) -> Any:
    tp = shape.type
    if tp is datetime:
        return parse_datetime(raw)
    if tp is date:
        return date.fromisoformat(raw)
    target = current if current is not None else tp()
    target.unmarshal_text(raw.encode("utf-8"))
    return target


def _decode_scalar(shape: TypeShape, raw: str) -> Any:
    tp = shape.type
    if tp is bool:
        return parse_bool(raw)
    if tp is int:
        width = shape.width or _DEFAULT_INT
        return parse_int(raw, width) if width.signed else parse_uint(raw, width)
    if tp is float:
        return parse_float(raw, shape.width or _DEFAULT_FLOAT)
    if tp is str:
        return raw
    return parse_duration(raw)


def decode_leaf(shape: TypeShape, raw: str, key: str, current: Any = None) -> Any:
    """
    Coerce one wire string into a leaf value.

    Args:
        shape (TypeShape): Leaf shape (scalar, text, or optional of either).
        raw (str): Wire value.
        key (str): Logical key used for error attribution.
        current (Any): Existing value, reused as the target of ``unmarshal_text``.

    Returns:
        Any: Decoded value.

    Raises:
        DecodeError: On conversion or capability failure, or when the shape has no
            coercion rule (cause is UnsupportedKindError).
    """
    if shape.kind is Kind.OPTIONAL and shape.elem is not None:
        return decode_leaf(shape.elem, raw, key, current)
    if shape.kind is Kind.TEXT and (
        shape.type in (datetime, date) or callable(getattr(shape.type, "unmarshal_text", None))
    ):
        try:
            return _decode_text(shape, raw, current)
        except Exception as exc:
            raise DecodeError(key, exc) from exc
    if shape.kind is not Kind.SCALAR:
        raise DecodeError(key, UnsupportedKindError(shape.type))
    try:
        return _decode_scalar(shape, raw)
    except ValueError as exc:
        raise DecodeError(key, exc) from exc


def _check_width(value: int, width: Width) -> int:
    lo, hi = _bounds(width)
    if not lo <= value <= hi:
        raise ValueError(f"{value} overflows {width.bits}-bit {'int' if width.signed else 'uint'}")
    return value


def _encode_scalar(shape: TypeShape, value: Any) -> str:
    tp = shape.type
    if tp is bool:
        return "true" if value else "false"
    if tp is int:
        return str(_check_width(operator.index(value), shape.width or _DEFAULT_INT))
    if tp is float:
        return format_float(float(value))
    if tp is str:
        return str(value)
    return format_duration(value)


def encode_leaf(shape: TypeShape, value: Any, key: str) -> str | None:
    """
    Render one leaf value as a wire string.

    Returns:
        str | None: Wire text, or None when ``value`` is None (absent optional).

    Raises:
        EncodeError: On capability failure, a value that does not fit the declared
            type or width, or an unsupported shape.
    """
    if value is None:
        return None
    if shape.kind is Kind.OPTIONAL and shape.elem is not None:
        return encode_leaf(shape.elem, value, key)
    if shape.kind is Kind.TEXT:
        if isinstance(value, datetime):
            return format_datetime(value)
        if isinstance(value, date):
            return value.isoformat()
        if callable(getattr(value, "marshal_text", None)):
            try:
                text = value.marshal_text()
            except Exception as exc:
                raise EncodeError(key, exc) from exc
            return text.decode("utf-8") if isinstance(text, bytes) else str(text)
    if shape.kind is not Kind.SCALAR:
        raise EncodeError(key, UnsupportedKindError(shape.type))
    try:
        return _encode_scalar(shape, value)
    except (TypeError, ValueError, AttributeError) as exc:
        raise EncodeError(key, exc) from exc
