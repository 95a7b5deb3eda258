"""
chainprim Storage Proof

Serialized trie nodes accessed while looking up a set of keys. A verifier
rebuilds the partial trie from these nodes; that happens outside this package.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

from chainprim.core.serialization import ByteReader, ByteWriter, BytesLike, decode_exact


@dataclass(frozen=True, slots=True)
class StorageProof:
    """
    Ordered collection of opaque trie-node blobs.

    SERIALIZATION: compact(count) || (compact(len) || node)*
    """
    trie_nodes: Tuple[bytes, ...] = ()

    def __post_init__(self):
        nodes = tuple(bytes(node) for node in self.trie_nodes)
        object.__setattr__(self, "trie_nodes", nodes)

    @classmethod
    def empty(cls) -> StorageProof:
        """An empty proof, valid only for an empty key set."""
        return cls(())

    def is_empty(self) -> bool:
        return not self.trie_nodes

    def iter_nodes(self) -> Iterator[bytes]:
        return iter(self.trie_nodes)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.trie_nodes)

    def __len__(self) -> int:
        return len(self.trie_nodes)

    @classmethod
    def merge(cls, proofs: Iterable[StorageProof]) -> StorageProof:
        """
        Combine several proofs into one.

        Duplicate nodes are kept once, at their first position.
        """
        seen = set()
        nodes = []
        for proof in proofs:
            for node in proof.trie_nodes:
                if node not in seen:
                    seen.add(node)
                    nodes.append(node)
        return cls(tuple(nodes))

    def encode_to(self, writer: ByteWriter) -> None:
        writer.write_compact(len(self.trie_nodes))
        for node in self.trie_nodes:
            writer.write_bytes(node)

    def encode(self) -> bytes:
        writer = ByteWriter()
        self.encode_to(writer)
        return writer.to_bytes()

    @classmethod
    def decode_from(cls, reader: ByteReader) -> StorageProof:
        count = reader.read_length("storage proof")
        return cls(tuple(reader.read_bytes() for _ in range(count)))

    @classmethod
    def decode(cls, data: BytesLike) -> StorageProof:
        return decode_exact(cls.decode_from, data, "storage proof")

    def to_dict(self) -> dict:
        return {"trie_nodes": [node.hex() for node in self.trie_nodes]}

    def __repr__(self) -> str:
        size = sum(len(node) for node in self.trie_nodes)
        return f"StorageProof(nodes={len(self.trie_nodes)}, bytes={size})"
