"""
chainprim Primitive Types

Hash values and opaque extrinsics.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from chainprim.constants import ENGINE_ID_SIZE, HASH_SIZE, LITTLE_ENDIAN
from chainprim.core.serialization import ByteReader, ByteWriter, BytesLike, decode_exact


@dataclass(frozen=True, slots=True)
class Hash:
    """
    256-bit hash / trie root.

    SIZE: 32 bytes
    SERIALIZATION: raw bytes
    """
    data: bytes = field(default_factory=lambda: bytes(HASH_SIZE))

    def __post_init__(self):
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))
        if len(self.data) != HASH_SIZE:
            raise ValueError(f"Hash must be {HASH_SIZE} bytes, got {len(self.data)}")

    def __bytes__(self) -> bytes:
        return self.data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Hash):
            return self.data == other.data
        if isinstance(other, bytes):
            return self.data == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data.hex()[:16]}...)"

    def hex(self) -> str:
        return self.data.hex()

    @classmethod
    def from_hex(cls, hex_string: str) -> Hash:
        if hex_string.startswith("0x"):
            hex_string = hex_string[2:]
        return cls(bytes.fromhex(hex_string))

    @classmethod
    def zero(cls) -> Hash:
        return cls(bytes(HASH_SIZE))

    @classmethod
    def from_u256(cls, value: int) -> Hash:
        """Build from a 256-bit unsigned integer (little-endian bytes)."""
        if not 0 <= value < (1 << (8 * HASH_SIZE)):
            raise ValueError(f"u256 value out of range: {value}")
        return cls(value.to_bytes(HASH_SIZE, LITTLE_ENDIAN))

    def to_u256(self) -> int:
        """Interpret as a 256-bit unsigned integer (little-endian bytes)."""
        return int.from_bytes(self.data, LITTLE_ENDIAN)

    def is_zero(self) -> bool:
        return self.data == bytes(HASH_SIZE)

    def encode_to(self, writer: ByteWriter) -> None:
        writer.write_fixed_bytes(self.data, HASH_SIZE)

    def encode(self) -> bytes:
        """Encode to raw bytes."""
        return self.data

    @classmethod
    def decode_from(cls, reader: ByteReader) -> Hash:
        return cls(reader.read_fixed_bytes(HASH_SIZE, "hash"))

    @classmethod
    def decode(cls, data: BytesLike) -> Hash:
        return decode_exact(cls.decode_from, data, "hash")


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class BlockHash(Hash):
    """Hash of a block, derived from its header's canonical encoding."""


@dataclass(frozen=True, slots=True)
class Extrinsic:
    """
    Opaque transaction blob.

    SERIALIZATION: compact(length) || data
    """
    data: bytes = b""

    def __post_init__(self):
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"Extrinsic({self.data.hex()[:32]}{'...' if len(self.data) > 16 else ''})"

    def encode_to(self, writer: ByteWriter) -> None:
        writer.write_bytes(self.data)

    def encode(self) -> bytes:
        writer = ByteWriter()
        self.encode_to(writer)
        return writer.to_bytes()

    @classmethod
    def decode_from(cls, reader: ByteReader) -> Extrinsic:
        return cls(reader.read_bytes())

    @classmethod
    def decode(cls, data: BytesLike) -> Extrinsic:
        return decode_exact(cls.decode_from, data, "extrinsic")


def check_engine_id(engine_id: BytesLike) -> None:
    """Raise ValueError unless engine_id is exactly 4 bytes."""
    size = memoryview(engine_id).nbytes
    if size != ENGINE_ID_SIZE:
        raise ValueError(f"Engine id must be {ENGINE_ID_SIZE} bytes, got {size}")
