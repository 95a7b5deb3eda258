"""
chainprim Core Data Structures
"""

from chainprim.core.types import Hash, BlockHash, Extrinsic
from chainprim.core.serialization import (
    ByteReader,
    ByteWriter,
    encode_u8,
    encode_u32,
    encode_compact,
    encode_compact_u32,
    encode_bytes,
    decode_u32,
    decode_compact,
    decode_compact_u32,
    decode_bytes,
    compact_size,
)

__all__ = [
    # Types
    "Hash",
    "BlockHash",
    "Extrinsic",
    # Serialization
    "ByteReader",
    "ByteWriter",
    "encode_u8",
    "encode_u32",
    "encode_compact",
    "encode_compact_u32",
    "encode_bytes",
    "decode_u32",
    "decode_compact",
    "decode_compact_u32",
    "decode_bytes",
    "compact_size",
]
