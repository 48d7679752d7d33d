"""
Field descriptors: record introspection, structural kinds and zero values.

Responsibilities
- Recognize record types (stdlib dataclasses and pydantic v2 models).
- Derive one FieldDescriptor per declared field: attribute name, parsed tag and the
  structural shape of its annotation.
- Classify annotations into the closed set of structural kinds the walkers dispatch
  on: scalar, text, optional, sequence, record, dynamic_map (or unsupported).
- Define the per-kind zero value used by ``omitempty`` and by lazy allocation.

Notes
- Descriptors are recomputed on every call; nothing is cached at module level.
- Unsupported annotations are classified, not rejected. The walkers raise when they
  actually reach such a field, so the error names the field's logical key.
- Text capability is checked before kind dispatch: a record or any other class that
  defines ``unmarshal_text`` or ``marshal_text`` is a text leaf.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Annotated, Any, Union

from pydantic import BaseModel

from .constants import DEFAULT_TAG_NAME
from .tags import FieldTag, parse_tag
from .typing import Width

__all__ = [
    "Kind",
    "TypeShape",
    "FieldDescriptor",
    "is_record_type",
    "is_record",
    "is_frozen_record",
    "describe_shape",
    "shape_of",
    "record_fields",
    "new_record",
    "zero_value",
    "is_zero",
]

_SCALAR_TYPES: tuple[type, ...] = (bool, int, float, str, timedelta)
_BUILTIN_TEXT_TYPES: tuple[type, ...] = (datetime, date)


class Kind(Enum):
    """Structural kind of an annotation, as seen by the walkers."""

    SCALAR = "scalar"
    TEXT = "text"
    OPTIONAL = "optional"
    SEQUENCE = "sequence"
    RECORD = "record"
    DYNAMIC_MAP = "dynamic_map"
    UNSUPPORTED = "unsupported"


@dataclass(slots=True, frozen=True)
class TypeShape:
    """
    Structural description of one annotation.

    Attributes:
        kind (Kind): Structural kind.
        type (Any): Leaf python type (scalar, text or record class); for composite
            kinds the container type; for unsupported kinds the raw annotation.
        width (Width | None): Bit width for numeric scalars, None for defaults.
        elem (TypeShape | None): Contained element shape for optional, sequence and
            dynamic_map kinds.
    """

    kind: Kind
    type: Any
    width: Width | None = None
    elem: TypeShape | None = None

    @property
    def is_sequence(self) -> bool:
        return self.kind is Kind.SEQUENCE


@dataclass(slots=True, frozen=True)
class FieldDescriptor:
    """One declared record field with its parsed tag and shape."""

    name: str
    tag: FieldTag
    shape: TypeShape

    @property
    def key(self) -> str:
        return self.tag.key


def is_record_type(tp: Any) -> bool:
    """True for dataclass classes and pydantic model classes."""
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def is_record(obj: Any) -> bool:
    """True for dataclass and pydantic model instances (not classes)."""
    return not isinstance(obj, type) and is_record_type(type(obj))


def describe_shape(obj: Any) -> str:
    """Short type description used in shape mismatch messages."""
    if isinstance(obj, type):
        return f"type[{obj.__name__}]"
    return type(obj).__name__


def is_frozen_record(obj: Any) -> bool:
    """True when attribute assignment on the record instance is rejected."""
    if isinstance(obj, BaseModel):
        return bool(type(obj).model_config.get("frozen", False))
    params = getattr(type(obj), "__dataclass_params__", None)
    return bool(params is not None and params.frozen)


def _has_text_capability(tp: Any) -> bool:
    return isinstance(tp, type) and (
        callable(getattr(tp, "unmarshal_text", None)) or callable(getattr(tp, "marshal_text", None))
    )


def shape_of(annotation: Any, metadata: typing.Sequence[Any] = ()) -> TypeShape:
    """
    Classify an annotation into a TypeShape.

    Args:
        annotation (Any): Field annotation (resolved, not a string).
        metadata (Sequence[Any]): Extra ``Annotated`` metadata that was split off
            the annotation by the record framework (pydantic does this).

    Returns:
        TypeShape: Shape of the annotation; kind UNSUPPORTED when no rule applies.
    """
    width = next((m for m in metadata if isinstance(m, Width)), None)

    origin = typing.get_origin(annotation)
    if origin is Annotated:
        base, *extra = typing.get_args(annotation)
        return shape_of(base, [*metadata, *extra])

    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) != 1 or len(args) == len(typing.get_args(annotation)):
            return TypeShape(Kind.UNSUPPORTED, annotation)
        return TypeShape(Kind.OPTIONAL, annotation, elem=shape_of(args[0], metadata))

    if origin is list:
        (item,) = typing.get_args(annotation) or (Any,)
        return TypeShape(Kind.SEQUENCE, list, elem=shape_of(item))

    if origin is dict:
        key_type, value_type = typing.get_args(annotation) or (Any, Any)
        if key_type is not str:
            return TypeShape(Kind.UNSUPPORTED, annotation)
        return TypeShape(Kind.DYNAMIC_MAP, dict, elem=shape_of(value_type))

    if origin is not None:
        return TypeShape(Kind.UNSUPPORTED, annotation)

    if _has_text_capability(annotation) or annotation in _BUILTIN_TEXT_TYPES:
        return TypeShape(Kind.TEXT, annotation)
    if annotation in _SCALAR_TYPES:
        return TypeShape(Kind.SCALAR, annotation, width=width)
    if is_record_type(annotation):
        return TypeShape(Kind.RECORD, annotation)
    return TypeShape(Kind.UNSUPPORTED, annotation)


def _tag_of(raw: Any, tag_name: str) -> FieldTag:
    return parse_tag(raw.get(tag_name) if isinstance(raw, Mapping) else None)


def record_fields(tp: type, tag_name: str = DEFAULT_TAG_NAME) -> list[FieldDescriptor]:
    """
    Describe every declared field of a record type, in declaration order.

    Args:
        tp (type): Dataclass or pydantic model class.
        tag_name (str): Metadata key carrying the form tag.

    Returns:
        list[FieldDescriptor]: All fields, including untagged and excluded ones;
        private fields (leading underscore) are dropped here.

    Raises:
        NameError: If a dataclass annotation cannot be resolved.
    """
    out: list[FieldDescriptor] = []
    if issubclass(tp, BaseModel):
        for name, info in tp.model_fields.items():
            if name.startswith("_"):
                continue
            out.append(
                FieldDescriptor(
                    name=name,
                    tag=_tag_of(info.json_schema_extra, tag_name),
                    shape=shape_of(info.annotation, info.metadata),
                )
            )
        return out

    hints = typing.get_type_hints(tp, include_extras=True)
    for f in dataclasses.fields(tp):
        if f.name.startswith("_"):
            continue
        out.append(
            FieldDescriptor(
                name=f.name,
                tag=_tag_of(f.metadata, tag_name),
                shape=shape_of(hints.get(f.name, f.type)),
            )
        )
    return out


def new_record(tp: type) -> Any:
    """
    Construct a zero instance of a record type.

    Fields without a default are filled with their kind's zero value; fields with a
    default keep it. Pydantic models are built with ``model_construct`` so zero
    values are not validated.
    """
    if issubclass(tp, BaseModel):
        required = {
            name: zero_value(shape_of(info.annotation, info.metadata))
            for name, info in tp.model_fields.items()
            if info.is_required()
        }
        return tp.model_construct(**required)

    hints = typing.get_type_hints(tp, include_extras=True)
    kwargs = {
        f.name: zero_value(shape_of(hints.get(f.name, f.type)))
        for f in dataclasses.fields(tp)
        if f.init
        and f.default is dataclasses.MISSING
        and f.default_factory is dataclasses.MISSING
    }
    return tp(**kwargs)


def zero_value(shape: TypeShape) -> Any:
    """
    Return the zero value for a shape.

    Notes:
        - optional, sequence and dynamic_map -> None
        - scalars -> their default-constructed value (0, 0.0, False, "", timedelta(0))
        - datetime / date -> datetime.min / date.min
        - records -> new_record(...)
        - text leaves -> no-argument construction, or None when that is impossible
    """
    kind = shape.kind
    if kind is Kind.SCALAR:
        return shape.type()
    if kind is Kind.RECORD:
        return new_record(shape.type)
    if kind is Kind.TEXT:
        if shape.type is datetime:
            return datetime.min
        if shape.type is date:
            return date.min
        try:
            return shape.type()
        except TypeError:
            return None
    return None


def is_zero(value: Any, shape: TypeShape) -> bool:
    """
    Report whether ``value`` equals the zero value of its kind.

    Optional, sequence and dynamic-map values are zero only when None, not when
    empty. Datetimes compare by wall time so ``datetime.min`` with any tzinfo is
    zero.
    Records are zero when every field is zero for its kind; field defaults are not
    zero unless they equal that value.
    """
    if value is None:
        return True
    kind = shape.kind
    if kind in (Kind.OPTIONAL, Kind.SEQUENCE, Kind.DYNAMIC_MAP):
        return False
    if kind is Kind.TEXT and isinstance(value, datetime):
        return value.replace(tzinfo=None) == datetime.min
    if kind is Kind.TEXT and not isinstance(value, date):
        try:
            return bool(value == type(value)())
        except TypeError:
            return False
    if kind is Kind.RECORD:
        return all(
            is_zero(getattr(value, fd.name, None), fd.shape) for fd in record_fields(type(value))
        )
    return bool(value == zero_value(shape))
