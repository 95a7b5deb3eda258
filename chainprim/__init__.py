"""
chainprim: block primitives

Canonical binary encoding and hashing of block headers, header digests,
blocks and storage proofs.
"""

__version__ = "0.3.0"
__author__ = "chainprim developers"

from chainprim.core.types import Hash, BlockHash, Extrinsic
from chainprim.core.digest import (
    Digest,
    DigestItem,
    DigestItemRef,
    DigestItemType,
    ChangesTrieRootDigest,
    PreRuntimeDigest,
    ConsensusDigest,
    SealDigest,
    ChangesTrieSignalDigest,
    OtherDigest,
)
from chainprim.core.changes_trie import ChangesTrieConfiguration, ChangesTrieSignal
from chainprim.core.block import Header, Block, block_hash
from chainprim.core.proof import StorageProof
from chainprim.errors import (
    DecodeError,
    TruncatedError,
    InvalidDiscriminantError,
    InvalidLengthError,
    MalformedError,
)

__all__ = [
    # Types
    "Hash",
    "BlockHash",
    "Extrinsic",
    "Header",
    "Block",
    "block_hash",
    "StorageProof",
    # Digest
    "Digest",
    "DigestItem",
    "DigestItemRef",
    "DigestItemType",
    "ChangesTrieRootDigest",
    "PreRuntimeDigest",
    "ConsensusDigest",
    "SealDigest",
    "ChangesTrieSignalDigest",
    "OtherDigest",
    "ChangesTrieConfiguration",
    "ChangesTrieSignal",
    # Errors
    "DecodeError",
    "TruncatedError",
    "InvalidDiscriminantError",
    "InvalidLengthError",
    "MalformedError",
    "__version__",
]
