"""
Core contracts for formwire (tags, field descriptors, coercion, dynamic keys, errors).

## Contracts (single source of truth)
- Tags: `<key>[,omitempty]` parsing; `-` excludes a field.
- Fields: structural kinds (scalar, text, optional, sequence, record, dynamic_map)
  and per-kind zero values.
- Scalars: string ⇄ leaf conversion, text capability dispatch.
- Keys: `<key>[<subkey>]` generation and matching.
- Errors: ShapeMismatchError, DecodeError, EncodeError, UnsupportedKindError, PatternError.

## Notes
- Zero-IO policy: stdlib + pydantic only.
- Leaves (tags, scalars) do not import the walkers in formwire.codec.
"""
