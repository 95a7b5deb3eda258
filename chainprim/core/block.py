"""
chainprim Block Structure

Block header, block hash derivation and block body.

A block is its header plus an ordered list of opaque extrinsics. The block
hash covers only the header; extrinsics enter it indirectly through
extrinsics_root. Nothing here checks that the roots match the content, that
is the job of an external verifier.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple
import logging

from chainprim.constants import GENESIS_NUMBER
from chainprim.core.digest import Digest, DigestItem
from chainprim.core.serialization import ByteReader, ByteWriter, BytesLike, decode_exact
from chainprim.core.types import BlockHash, Extrinsic, Hash
from chainprim.crypto.hash import Hasher, blake2_256

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Header:
    """
    Block header.

    SERIALIZATION:
        parent_hash (32) || compact(number) || state_root (32)
        || extrinsics_root (32) || digest
    """
    parent_hash: Hash                   # Previous block hash, zero for genesis
    number: int                         # u32 - Block height
    state_root: Hash                    # Storage trie root
    extrinsics_root: Hash               # Extrinsics trie root
    digest: Digest = field(default_factory=Digest)

    def encode_to(self, writer: ByteWriter) -> None:
        """Write fields in declaration order."""
        self.parent_hash.encode_to(writer)
        writer.write_compact_u32(self.number)
        self.state_root.encode_to(writer)
        self.extrinsics_root.encode_to(writer)
        self.digest.encode_to(writer)

    def encode(self) -> bytes:
        """Encode block header."""
        writer = ByteWriter()
        self.encode_to(writer)
        return writer.to_bytes()

    @classmethod
    def decode_from(cls, reader: ByteReader) -> Header:
        parent_hash = Hash.decode_from(reader)
        number = reader.read_compact_u32()
        state_root = Hash.decode_from(reader)
        extrinsics_root = Hash.decode_from(reader)
        digest = Digest.decode_from(reader)

        return cls(
            parent_hash=parent_hash,
            number=number,
            state_root=state_root,
            extrinsics_root=extrinsics_root,
            digest=digest,
        )

    @classmethod
    def decode(cls, data: BytesLike) -> Header:
        """Decode block header, rejecting trailing bytes."""
        return decode_exact(cls.decode_from, data, "header")

    def block_hash(self, hasher: Hasher = blake2_256) -> BlockHash:
        """
        Compute the block hash from the canonical encoding.

        Recomputed on every call. hasher is the hash primitive; the default is
        unkeyed BLAKE2b-256.
        """
        return BlockHash(hasher(self.encode()).data)

    def with_digest_item(self, item: DigestItem) -> Header:
        """Return a copy of this header with item appended to its digest."""
        return Header(
            parent_hash=self.parent_hash,
            number=self.number,
            state_root=self.state_root,
            extrinsics_root=self.extrinsics_root,
            digest=self.digest.push(item),
        )

    @classmethod
    def genesis(
        cls,
        state_root: Optional[Hash] = None,
        extrinsics_root: Optional[Hash] = None,
        digest: Optional[Digest] = None,
    ) -> Header:
        """Create a height-0 header with the zero parent sentinel."""
        return cls(
            parent_hash=Hash.zero(),
            number=GENESIS_NUMBER,
            state_root=state_root if state_root is not None else Hash.zero(),
            extrinsics_root=extrinsics_root if extrinsics_root is not None else Hash.zero(),
            digest=digest if digest is not None else Digest(),
        )

    def is_genesis(self) -> bool:
        return self.number == GENESIS_NUMBER and self.parent_hash.is_zero()

    def to_dict(self) -> dict:
        return {
            "parent_hash": self.parent_hash.hex(),
            "number": self.number,
            "state_root": self.state_root.hex(),
            "extrinsics_root": self.extrinsics_root.hex(),
            "digest": self.digest.to_dict(),
        }

    def __repr__(self) -> str:
        return (
            f"Header(number={self.number}, "
            f"parent={self.parent_hash.hex()[:16]}..., "
            f"logs={len(self.digest)})"
        )


@dataclass(frozen=True, slots=True)
class Block:
    """
    Header plus ordered extrinsics.

    SERIALIZATION: header || compact(count) || extrinsic_0 || ... || extrinsic_n
    """
    header: Header
    extrinsics: Tuple[Extrinsic, ...] = ()

    def __post_init__(self):
        if not isinstance(self.extrinsics, tuple):
            object.__setattr__(self, "extrinsics", tuple(self.extrinsics))

    def encode_to(self, writer: ByteWriter) -> None:
        self.header.encode_to(writer)
        writer.write_compact(len(self.extrinsics))
        for extrinsic in self.extrinsics:
            extrinsic.encode_to(writer)

    def encode(self) -> bytes:
        """Encode complete block."""
        writer = ByteWriter()
        self.encode_to(writer)
        return writer.to_bytes()

    @classmethod
    def decode_from(cls, reader: ByteReader) -> Block:
        header = Header.decode_from(reader)
        count = reader.read_length("extrinsics")
        extrinsics = tuple(Extrinsic.decode_from(reader) for _ in range(count))
        return cls(header=header, extrinsics=extrinsics)

    @classmethod
    def decode(cls, data: BytesLike) -> Block:
        """Decode complete block, rejecting trailing bytes."""
        return decode_exact(cls.decode_from, data, "block")

    def block_hash(self, hasher: Hasher = blake2_256) -> BlockHash:
        """Compute block hash from header."""
        return self.header.block_hash(hasher)

    @classmethod
    def from_parts(cls, header: Header, extrinsics: Iterable[bytes]) -> Block:
        """Build a block from raw extrinsic blobs."""
        return cls(header=header, extrinsics=tuple(Extrinsic(data) for data in extrinsics))

    def to_dict(self) -> dict:
        return {
            "header": self.header.to_dict(),
            "extrinsics": [extrinsic.data.hex() for extrinsic in self.extrinsics],
        }

    def __repr__(self) -> str:
        return (
            f"Block(number={self.header.number}, "
            f"extrinsics={len(self.extrinsics)})"
        )


def block_hash(header: Header, hasher: Hasher = blake2_256) -> BlockHash:
    """Compute the block hash of a header."""
    hash_value = header.block_hash(hasher)
    logger.debug(f"Block #{header.number} hash {hash_value.hex()}")
    return hash_value
