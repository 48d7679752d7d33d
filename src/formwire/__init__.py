"""
formwire: bidirectional codec between flat form maps and typed records.

## Contracts
- `marshal(record)`: record → `dict[str, list[str]]`.
- `unmarshal(form, record)`: flat form map → record, mutated in place.
- Tags live in field metadata under `"form"`: `"<key>"`, `"<key>,omitempty"`, or `"-"`.
- Dynamic pairs use bracketed keys: `<key>[<subkey>]` ↔ `dict[str, X]` fields.

## Notes
- Zero-IO: stdlib + pydantic only.
- Records are stdlib dataclasses or pydantic v2 models.
- Types opt out of built-in coercion by defining `marshal_text` / `unmarshal_text`.

## Examples
```python
from dataclasses import dataclass, field
from formwire import marshal, unmarshal

@dataclass
class Filters:
    tags: list[str] = field(default_factory=list, metadata={"form": "tag,omitempty"})
    ranges: dict[str, list[int]] | None = field(default=None, metadata={"form": "range"})

form = marshal(Filters(tags=["a", "b"], ranges={"price": [10, 20]}))
# {'tag': ['a', 'b'], 'range[price]': ['10', '20']}

back = Filters()
unmarshal(form, back)
```
"""

from formwire.codec import Decoder, Encoder, marshal, unmarshal
from formwire.config import FormSettings
from formwire.core.errors import (
    DecodeError,
    EncodeError,
    FormError,
    PatternError,
    ShapeMismatchError,
    UnsupportedKindError,
)
from formwire.core.typing import FlatFormMap, TextMarshaler, TextUnmarshaler

__all__ = [
    "marshal",
    "unmarshal",
    "Decoder",
    "Encoder",
    "FormSettings",
    "FlatFormMap",
    "TextMarshaler",
    "TextUnmarshaler",
    "FormError",
    "ShapeMismatchError",
    "DecodeError",
    "EncodeError",
    "UnsupportedKindError",
    "PatternError",
]
