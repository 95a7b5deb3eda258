"""
chainprim Test Fixtures
"""

import pytest

from chainprim.core.types import Hash, Extrinsic
from chainprim.core.block import Header, Block
from chainprim.core.digest import (
    Digest,
    ChangesTrieRootDigest,
    PreRuntimeDigest,
    ConsensusDigest,
    SealDigest,
    ChangesTrieSignalDigest,
    OtherDigest,
)
from chainprim.core.changes_trie import ChangesTrieConfiguration, ChangesTrieSignal

# BLAKE2b-256 of the all-zero genesis header (98 zero bytes)
GENESIS_HASH_HEX = "dcdd89927d8a348e00257e1ecc8617f45edb5118efff3ea2f9961b2ad9b7690a"

# Header(parent=0x11*32, number=64, state=0x22*32, extrinsics=0x33*32,
#        digest=[PreRuntime(b"AURA", b"\x01\x02")])
SAMPLE_HEADER_HEX = (
    "11" * 32
    + "0101"
    + "22" * 32
    + "33" * 32
    + "041841555241080102"
)
SAMPLE_HEADER_HASH_HEX = "f68bc2286bab2c79a367c6ae438e8838df3a47c61626c39b491144b8362a5796"


@pytest.fixture
def zero_hash() -> Hash:
    """Create a zero hash."""
    return Hash.zero()


@pytest.fixture
def mock_hash() -> Hash:
    """Create a mock hash for testing."""
    return Hash(bytes([i % 256 for i in range(32)]))


@pytest.fixture
def genesis_header() -> Header:
    """All-zero genesis header with an empty digest."""
    return Header(
        parent_hash=Hash.zero(),
        number=0,
        state_root=Hash.zero(),
        extrinsics_root=Hash.zero(),
        digest=Digest(),
    )


@pytest.fixture
def sample_header() -> Header:
    """Header matching SAMPLE_HEADER_HEX."""
    return Header(
        parent_hash=Hash(b"\x11" * 32),
        number=64,
        state_root=Hash(b"\x22" * 32),
        extrinsics_root=Hash(b"\x33" * 32),
        digest=Digest([PreRuntimeDigest(b"AURA", b"\x01\x02")]),
    )


@pytest.fixture
def full_digest(mock_hash) -> Digest:
    """Digest containing one item of every variant."""
    return Digest([
        PreRuntimeDigest(b"BABE", b"\x01\x02\x03"),
        ChangesTrieRootDigest(mock_hash),
        ConsensusDigest(b"FRNK", b"\xaa" * 70),
        ChangesTrieSignalDigest(
            ChangesTrieSignal.new_configuration(ChangesTrieConfiguration(4, 2))
        ),
        ChangesTrieSignalDigest(ChangesTrieSignal.new_configuration(None)),
        OtherDigest(b"\xde\xad"),
        SealDigest(b"BABE", b"\x55" * 64),
    ])


@pytest.fixture
def sample_block(genesis_header) -> Block:
    """Genesis header with a single three-byte extrinsic."""
    return Block(header=genesis_header, extrinsics=[Extrinsic(bytes([1, 2, 3]))])
