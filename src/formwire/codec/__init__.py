"""
Recursive encode/decode walkers over record trees.

- decode: flat form map → record (Decoder, unmarshal)
- encode: record → flat form map (Encoder, marshal)

Both walkers depend on formwire.core (tags, fields, scalars, keys) and share the
same dispatch order: text capability, then structural kind.
"""

from .decode import Decoder, unmarshal
from .encode import Encoder, marshal

__all__ = [
    "Decoder",
    "Encoder",
    "marshal",
    "unmarshal",
]
