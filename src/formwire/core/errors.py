"""
Exception types raised by the form codec walkers and coercion layer.

Provides typed exceptions for codec failures:
- ShapeMismatchError when the decode destination or encode source is not a record.
- DecodeError / EncodeError for field-scoped coercion or text capability failures.
- UnsupportedKindError for types that have no coercion rule and no text capability.
- PatternError when a logical key cannot be expressed as a bracketed dynamic key.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - DecodeError and EncodeError carry the logical key (``field``) and the underlying
      failure (``cause``). Map and sequence sub-paths wrap an inner error so the
      message reads outermost key first.
    - UnsupportedKindError is never raised bare by the walkers; it is the ``cause``
      of a DecodeError or EncodeError so callers can attribute it to a field.

Examples:
    Inspect a field-scoped decode failure.

    >>> from formwire.core.errors import DecodeError
    >>> err = DecodeError("int_param", ValueError("invalid integer literal 'two'"))
    >>> str(err)
    "unable to decode tag 'int_param': invalid integer literal 'two'"
    >>> err.field
    'int_param'
"""

from __future__ import annotations

__all__ = [
    "FormError",
    "ShapeMismatchError",
    "DecodeError",
    "EncodeError",
    "UnsupportedKindError",
    "PatternError",
]


class FormError(ValueError):
    """Base class for all form codec failures."""


class ShapeMismatchError(FormError, TypeError):
    """Destination or source is not a (mutable) record instance."""


class _FieldError(FormError):
    _verb = "process"

    def __init__(self, field: str, cause: BaseException | str) -> None:
        self.field = field
        self.cause = cause
        super().__init__(f"unable to {self._verb} tag '{field}': {cause}")


class DecodeError(_FieldError):
    """
    Field-scoped failure while decoding a flat form map into a record.

    Attributes:
        field (str): Logical key of the field (or dynamic sub-key) that failed.
        cause (BaseException | str): Underlying conversion failure or a
            path-describing message wrapping an inner DecodeError.
    """

    _verb = "decode"


class EncodeError(_FieldError):
    """
    Field-scoped failure while encoding a record into a flat form map.

    Attributes:
        field (str): Logical key of the field that failed.
        cause (BaseException | str): Underlying conversion failure.
    """

    _verb = "encode"


class UnsupportedKindError(FormError, TypeError):
    """A type has no coercion rule and implements no text capability."""

    def __init__(self, tp: object) -> None:
        self.type = tp
        name = getattr(tp, "__name__", None) or repr(tp)
        super().__init__(f"unsupported kind {name}")


class PatternError(FormError):
    """A logical key cannot be used as the prefix of a bracketed dynamic key."""
