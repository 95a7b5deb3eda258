"""
chainprim Changes Trie Signal Types

Configuration payload for the auxiliary changes trie index used by light
clients. Opaque to this package beyond serialization.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from chainprim.core.serialization import ByteReader, ByteWriter, BytesLike, decode_exact
from chainprim.errors import InvalidDiscriminantError


@dataclass(frozen=True, slots=True)
class ChangesTrieConfiguration:
    """
    Changes trie configuration.

    SIZE: 8 bytes
    SERIALIZATION: u32(digest_interval) || u32(digest_levels), little-endian
    """
    digest_interval: int = 0            # u32 - Blocks between level-1 digests
    digest_levels: int = 0              # u32 - Depth of the digest hierarchy

    def encode_to(self, writer: ByteWriter) -> None:
        writer.write_u32(self.digest_interval)
        writer.write_u32(self.digest_levels)

    def encode(self) -> bytes:
        writer = ByteWriter()
        self.encode_to(writer)
        return writer.to_bytes()

    @classmethod
    def decode_from(cls, reader: ByteReader) -> ChangesTrieConfiguration:
        digest_interval = reader.read_u32()
        digest_levels = reader.read_u32()
        return cls(digest_interval=digest_interval, digest_levels=digest_levels)

    @classmethod
    def decode(cls, data: BytesLike) -> ChangesTrieConfiguration:
        return decode_exact(cls.decode_from, data, "changes trie configuration")

    def to_dict(self) -> dict:
        return {
            "digest_interval": self.digest_interval,
            "digest_levels": self.digest_levels,
        }


class ChangesTrieSignalKind(IntEnum):
    """Variant index of a changes trie signal."""
    NEW_CONFIGURATION = 0


@dataclass(frozen=True, slots=True)
class ChangesTrieSignal:
    """
    Signal from the changes trie manager.

    The only variant is NEW_CONFIGURATION: a new configuration (or None to
    disable the changes trie) is enacted starting from the next block.

    SERIALIZATION: u8(kind) || option(configuration)
    """
    configuration: Optional[ChangesTrieConfiguration] = None
    kind: ChangesTrieSignalKind = ChangesTrieSignalKind.NEW_CONFIGURATION

    @classmethod
    def new_configuration(
        cls, configuration: Optional[ChangesTrieConfiguration]
    ) -> ChangesTrieSignal:
        return cls(configuration=configuration)

    def encode_to(self, writer: ByteWriter) -> None:
        writer.write_u8(self.kind)
        writer.write_option_flag(self.configuration is not None)
        if self.configuration is not None:
            self.configuration.encode_to(writer)

    def encode(self) -> bytes:
        writer = ByteWriter()
        self.encode_to(writer)
        return writer.to_bytes()

    @classmethod
    def decode_from(cls, reader: ByteReader) -> ChangesTrieSignal:
        raw_kind = reader.read_u8("changes trie signal kind")
        try:
            kind = ChangesTrieSignalKind(raw_kind)
        except ValueError:
            raise InvalidDiscriminantError(raw_kind, "changes trie signal") from None

        configuration = None
        if reader.read_option_flag("changes trie configuration"):
            configuration = ChangesTrieConfiguration.decode_from(reader)

        return cls(configuration=configuration, kind=kind)

    @classmethod
    def decode(cls, data: BytesLike) -> ChangesTrieSignal:
        return decode_exact(cls.decode_from, data, "changes trie signal")

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.name.lower(),
            "configuration": self.configuration.to_dict() if self.configuration else None,
        }
