"""
chainprim Header Digest

Extensible tagged log attached to a block header.

Two representations share one wire format:

- DigestItem variants own their payload (bytes).
- DigestItemRef is a view over payload bytes owned elsewhere (memoryview),
  for producers that want to encode data they already hold without copying it.

DigestItem.encode() goes through DigestItemRef, so there is a single encoder.

SERIALIZATION: compact(type) || shape(type), where shape is

    CHANGES_TRIE_ROOT     hash (32 bytes)
    PRE_RUNTIME           engine_id (4 bytes) || compact(len) || payload
    CONSENSUS             engine_id (4 bytes) || compact(len) || payload
    SEAL                  engine_id (4 bytes) || compact(len) || payload
    CHANGES_TRIE_SIGNAL   ChangesTrieSignal
    OTHER                 compact(len) || payload
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import (
    Callable,
    ClassVar,
    Dict,
    Iterable,
    Iterator,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from chainprim.constants import ENGINE_ID_SIZE, RESERVED_DIGEST_ITEM_TYPES
from chainprim.core.changes_trie import ChangesTrieSignal
from chainprim.core.serialization import ByteReader, ByteWriter, BytesLike, decode_exact
from chainprim.core.types import Hash, check_engine_id
from chainprim.errors import InvalidDiscriminantError

T = TypeVar("T")


class DigestItemType(IntEnum):
    """
    Wire tag of a digest item.

    Values are assigned explicitly and never derived from declaration order.
    1 and 3 are reserved and must not be reused.
    """
    OTHER = 0
    CHANGES_TRIE_ROOT = 2
    CONSENSUS = 4
    SEAL = 5
    PRE_RUNTIME = 6
    CHANGES_TRIE_SIGNAL = 7

    def encode_to(self, writer: ByteWriter) -> None:
        writer.write_compact_u32(self.value)

    @classmethod
    def decode_from(cls, reader: ByteReader) -> DigestItemType:
        raw = reader.read_compact()
        if raw in RESERVED_DIGEST_ITEM_TYPES:
            raise InvalidDiscriminantError(raw, "digest item", "reserved tag")
        try:
            return cls(raw)
        except ValueError:
            raise InvalidDiscriminantError(raw, "digest item") from None


def _view(data: BytesLike) -> memoryview:
    return memoryview(data).cast("B")


# ==============================================================================
# Borrowing Representation
# ==============================================================================

@dataclass(frozen=True, slots=True)
class DigestItemRef:
    """
    Non-owning digest item.

    Payload fields are memoryviews into the caller's buffers; nothing is
    copied until the bytes are written to the output.
    """
    item_type: DigestItemType
    engine_id: Optional[memoryview] = None
    payload: Optional[memoryview] = None
    root: Optional[Hash] = None
    signal: Optional[ChangesTrieSignal] = None

    @classmethod
    def changes_trie_root(cls, root: Hash) -> DigestItemRef:
        return cls(DigestItemType.CHANGES_TRIE_ROOT, root=root)

    @classmethod
    def pre_runtime(cls, engine_id: BytesLike, data: BytesLike) -> DigestItemRef:
        return cls._engine(DigestItemType.PRE_RUNTIME, engine_id, data)

    @classmethod
    def consensus(cls, engine_id: BytesLike, data: BytesLike) -> DigestItemRef:
        return cls._engine(DigestItemType.CONSENSUS, engine_id, data)

    @classmethod
    def seal(cls, engine_id: BytesLike, signature: BytesLike) -> DigestItemRef:
        return cls._engine(DigestItemType.SEAL, engine_id, signature)

    @classmethod
    def changes_trie_signal(cls, signal: ChangesTrieSignal) -> DigestItemRef:
        return cls(DigestItemType.CHANGES_TRIE_SIGNAL, signal=signal)

    @classmethod
    def other(cls, data: BytesLike) -> DigestItemRef:
        return cls(DigestItemType.OTHER, payload=_view(data))

    @classmethod
    def _engine(
        cls, item_type: DigestItemType, engine_id: BytesLike, data: BytesLike
    ) -> DigestItemRef:
        check_engine_id(engine_id)
        return cls(item_type, engine_id=_view(engine_id), payload=_view(data))

    def encode_to(self, writer: ByteWriter) -> None:
        """Write tag then the shape for that tag."""
        self.item_type.encode_to(writer)
        _SHAPE_ENCODERS[self.item_type](self, writer)

    def encode(self) -> bytes:
        writer = ByteWriter()
        self.encode_to(writer)
        return writer.to_bytes()

    def to_owned(self) -> DigestItem:
        """Copy the viewed data into an owning DigestItem."""
        t = self.item_type
        if t == DigestItemType.CHANGES_TRIE_ROOT:
            return ChangesTrieRootDigest(self.root)
        if t == DigestItemType.CHANGES_TRIE_SIGNAL:
            return ChangesTrieSignalDigest(self.signal)
        if t == DigestItemType.OTHER:
            return OtherDigest(bytes(self.payload))
        return _ENGINE_VARIANTS[t](bytes(self.engine_id), bytes(self.payload))


def _encode_root(item: DigestItemRef, writer: ByteWriter) -> None:
    item.root.encode_to(writer)


def _encode_engine(item: DigestItemRef, writer: ByteWriter) -> None:
    writer.write_fixed_bytes(item.engine_id, ENGINE_ID_SIZE)
    writer.write_bytes(item.payload)


def _encode_signal(item: DigestItemRef, writer: ByteWriter) -> None:
    item.signal.encode_to(writer)


def _encode_other(item: DigestItemRef, writer: ByteWriter) -> None:
    writer.write_bytes(item.payload)


_SHAPE_ENCODERS: Dict[DigestItemType, Callable[[DigestItemRef, ByteWriter], None]] = {
    DigestItemType.OTHER: _encode_other,
    DigestItemType.CHANGES_TRIE_ROOT: _encode_root,
    DigestItemType.CONSENSUS: _encode_engine,
    DigestItemType.SEAL: _encode_engine,
    DigestItemType.PRE_RUNTIME: _encode_engine,
    DigestItemType.CHANGES_TRIE_SIGNAL: _encode_signal,
}


# ==============================================================================
# Owning Representation
# ==============================================================================

class DigestItem:
    """
    Base class of the owning digest item variants.

    Subclasses: ChangesTrieRootDigest, PreRuntimeDigest, ConsensusDigest,
    SealDigest, ChangesTrieSignalDigest, OtherDigest.
    """
    __slots__ = ()

    item_type: ClassVar[DigestItemType]

    def dref(self) -> DigestItemRef:
        """Return a referencing view of this item."""
        raise NotImplementedError

    def encode_to(self, writer: ByteWriter) -> None:
        self.dref().encode_to(writer)

    def encode(self) -> bytes:
        return self.dref().encode()

    @classmethod
    def decode_from(cls, reader: ByteReader) -> DigestItem:
        """Decode whichever variant the leading tag names."""
        item_type = DigestItemType.decode_from(reader)
        return _VARIANT_DECODERS[item_type](reader)

    @classmethod
    def decode(cls, data: BytesLike) -> DigestItem:
        return decode_exact(DigestItem.decode_from, data, "digest item")

    def as_changes_trie_root(self) -> Optional[Hash]:
        return None

    def as_pre_runtime(self) -> Optional[Tuple[bytes, bytes]]:
        return None

    def as_consensus(self) -> Optional[Tuple[bytes, bytes]]:
        return None

    def as_seal(self) -> Optional[Tuple[bytes, bytes]]:
        return None

    def as_changes_trie_signal(self) -> Optional[ChangesTrieSignal]:
        return None

    def as_other(self) -> Optional[bytes]:
        return None

    def to_dict(self) -> dict:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class ChangesTrieRootDigest(DigestItem):
    """Root of the changes trie at this block."""
    root: Hash

    item_type: ClassVar[DigestItemType] = DigestItemType.CHANGES_TRIE_ROOT

    def dref(self) -> DigestItemRef:
        return DigestItemRef.changes_trie_root(self.root)

    def as_changes_trie_root(self) -> Optional[Hash]:
        return self.root

    def to_dict(self) -> dict:
        return {"type": "changes_trie_root", "root": self.root.hex()}


@dataclass(frozen=True, slots=True)
class _EngineDigest(DigestItem):
    """Item keyed by a 4-byte consensus engine id."""
    engine_id: bytes
    data: bytes

    def __post_init__(self):
        check_engine_id(self.engine_id)
        if not isinstance(self.engine_id, bytes):
            object.__setattr__(self, "engine_id", bytes(self.engine_id))
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    def dref(self) -> DigestItemRef:
        return DigestItemRef._engine(self.item_type, self.engine_id, self.data)

    def to_dict(self) -> dict:
        return {
            "type": self.item_type.name.lower(),
            "engine_id": self.engine_id.hex(),
            "data": self.data.hex(),
        }


@dataclass(frozen=True, slots=True)
class PreRuntimeDigest(_EngineDigest):
    """Message from the consensus engine to the runtime."""

    item_type: ClassVar[DigestItemType] = DigestItemType.PRE_RUNTIME

    def as_pre_runtime(self) -> Optional[Tuple[bytes, bytes]]:
        return self.engine_id, self.data


@dataclass(frozen=True, slots=True)
class ConsensusDigest(_EngineDigest):
    """Message from the runtime to the consensus engine."""

    item_type: ClassVar[DigestItemType] = DigestItemType.CONSENSUS

    def as_consensus(self) -> Optional[Tuple[bytes, bytes]]:
        return self.engine_id, self.data


@dataclass(frozen=True, slots=True)
class SealDigest(_EngineDigest):
    """Seal produced by native consensus code, never seen by the runtime."""

    item_type: ClassVar[DigestItemType] = DigestItemType.SEAL

    def as_seal(self) -> Optional[Tuple[bytes, bytes]]:
        return self.engine_id, self.data


@dataclass(frozen=True, slots=True)
class ChangesTrieSignalDigest(DigestItem):
    """Signal from the changes trie manager to native code."""
    signal: ChangesTrieSignal

    item_type: ClassVar[DigestItemType] = DigestItemType.CHANGES_TRIE_SIGNAL

    def dref(self) -> DigestItemRef:
        return DigestItemRef.changes_trie_signal(self.signal)

    def as_changes_trie_signal(self) -> Optional[ChangesTrieSignal]:
        return self.signal

    def to_dict(self) -> dict:
        return {"type": "changes_trie_signal", "signal": self.signal.to_dict()}


@dataclass(frozen=True, slots=True)
class OtherDigest(DigestItem):
    """Opaque item, unsupported and experimental."""
    data: bytes

    item_type: ClassVar[DigestItemType] = DigestItemType.OTHER

    def __post_init__(self):
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    def dref(self) -> DigestItemRef:
        return DigestItemRef.other(self.data)

    def as_other(self) -> Optional[bytes]:
        return self.data

    def to_dict(self) -> dict:
        return {"type": "other", "data": self.data.hex()}


_ENGINE_VARIANTS = {
    DigestItemType.PRE_RUNTIME: PreRuntimeDigest,
    DigestItemType.CONSENSUS: ConsensusDigest,
    DigestItemType.SEAL: SealDigest,
}


def _decode_engine(variant: type) -> Callable[[ByteReader], DigestItem]:
    def decode(reader: ByteReader) -> DigestItem:
        engine_id = reader.read_fixed_bytes(ENGINE_ID_SIZE, "engine id")
        data = reader.read_bytes()
        return variant(engine_id, data)
    return decode


_VARIANT_DECODERS: Dict[DigestItemType, Callable[[ByteReader], DigestItem]] = {
    DigestItemType.OTHER: lambda reader: OtherDigest(reader.read_bytes()),
    DigestItemType.CHANGES_TRIE_ROOT: lambda reader: ChangesTrieRootDigest(Hash.decode_from(reader)),
    DigestItemType.CONSENSUS: _decode_engine(ConsensusDigest),
    DigestItemType.SEAL: _decode_engine(SealDigest),
    DigestItemType.PRE_RUNTIME: _decode_engine(PreRuntimeDigest),
    DigestItemType.CHANGES_TRIE_SIGNAL: lambda reader: ChangesTrieSignalDigest(
        ChangesTrieSignal.decode_from(reader)
    ),
}


# ==============================================================================
# Digest
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Digest:
    """
    Ordered list of digest items.

    SERIALIZATION: compact(count) || item_0 || ... || item_n
    """
    logs: Tuple[DigestItem, ...] = ()

    def __post_init__(self):
        if not isinstance(self.logs, tuple):
            object.__setattr__(self, "logs", tuple(self.logs))

    def __len__(self) -> int:
        return len(self.logs)

    def __iter__(self) -> Iterator[DigestItem]:
        return iter(self.logs)

    def push(self, item: DigestItem) -> Digest:
        """Return a new digest with item appended."""
        return Digest(self.logs + (item,))

    def convert_first(self, predicate: Callable[[DigestItem], Optional[T]]) -> Optional[T]:
        """Return the first non-None result of predicate over the logs."""
        for item in self.logs:
            result = predicate(item)
            if result is not None:
                return result
        return None

    def pre_runtime(self, engine_id: bytes) -> Optional[bytes]:
        """Return the payload of the first pre-runtime item for engine_id."""
        def match(item: DigestItem) -> Optional[bytes]:
            pair = item.as_pre_runtime()
            if pair is not None and pair[0] == engine_id:
                return pair[1]
            return None
        return self.convert_first(match)

    def seal(self) -> Optional[SealDigest]:
        """Return the trailing seal, if the last item is one."""
        if self.logs and isinstance(self.logs[-1], SealDigest):
            return self.logs[-1]
        return None

    def encode_to(self, writer: ByteWriter) -> None:
        encode_digest_to(self.logs, writer)

    def encode(self) -> bytes:
        writer = ByteWriter()
        self.encode_to(writer)
        return writer.to_bytes()

    @classmethod
    def decode_from(cls, reader: ByteReader) -> Digest:
        count = reader.read_length("digest")
        return cls(tuple(DigestItem.decode_from(reader) for _ in range(count)))

    @classmethod
    def decode(cls, data: BytesLike) -> Digest:
        return decode_exact(cls.decode_from, data, "digest")

    def to_dict(self) -> dict:
        return {"logs": [item.to_dict() for item in self.logs]}


def encode_digest_to(
    items: Iterable[Union[DigestItem, DigestItemRef]], writer: ByteWriter
) -> None:
    """
    Encode a digest from owning items, views, or a mix of both.

    Producers holding their payloads elsewhere can pass DigestItemRefs and get
    the same bytes as an owned Digest.
    """
    items = tuple(items)
    writer.write_compact(len(items))
    for item in items:
        item.encode_to(writer)


def encode_digest(items: Iterable[Union[DigestItem, DigestItemRef]]) -> bytes:
    writer = ByteWriter()
    encode_digest_to(items, writer)
    return writer.to_bytes()
