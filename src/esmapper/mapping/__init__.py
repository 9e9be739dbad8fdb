"""Record mapping — Field resolution and document encode/decode."""

from esmapper.mapping.codec import decode, decode_into, encode, encode_without_id
from esmapper.mapping.fields import FieldDescriptor, find_identifier, resolve_fields

__all__ = [
    "FieldDescriptor",
    "decode",
    "decode_into",
    "encode",
    "encode_without_id",
    "find_identifier",
    "resolve_fields",
]
