"""
chainprim Hash Functions

Unkeyed BLAKE2b with 256-bit output (RFC 7693). Two interchangeable bindings
are provided, the standard library one and the pycryptodome one; both must
produce identical digests.
"""

from __future__ import annotations
import hashlib
from typing import Callable, Dict

from Crypto.Hash import BLAKE2b

from chainprim.constants import (
    BLAKE2_256_OUTPUT_SIZE,
    DEFAULT_HASH_BACKEND,
    HASH_BACKEND_HASHLIB,
    HASH_BACKEND_PYCRYPTODOME,
)
from chainprim.core.serialization import BytesLike
from chainprim.core.types import Hash

Hasher = Callable[[BytesLike], Hash]


def blake2_256(data: BytesLike) -> Hash:
    """
    BLAKE2b-256 hash function (hashlib binding).

    Args:
        data: Input data to hash

    Returns:
        Hash: 32-byte hash output wrapped in Hash type
    """
    return Hash(blake2_256_raw(data))


def blake2_256_raw(data: BytesLike) -> bytes:
    """BLAKE2b-256 returning raw bytes."""
    return hashlib.blake2b(data, digest_size=BLAKE2_256_OUTPUT_SIZE).digest()


def blake2_256_pycryptodome(data: BytesLike) -> Hash:
    """
    BLAKE2b-256 hash function (pycryptodome binding).

    Args:
        data: Input data to hash

    Returns:
        Hash: 32-byte hash output wrapped in Hash type
    """
    hasher = BLAKE2b.new(digest_bits=BLAKE2_256_OUTPUT_SIZE * 8)
    hasher.update(bytes(data))
    return Hash(hasher.digest())


_BACKENDS: Dict[str, Hasher] = {
    HASH_BACKEND_HASHLIB: blake2_256,
    HASH_BACKEND_PYCRYPTODOME: blake2_256_pycryptodome,
}


def get_hasher(backend: str = DEFAULT_HASH_BACKEND) -> Hasher:
    """
    Return the hash primitive for a backend name.

    Raises:
        ValueError: If the backend is unknown
    """
    try:
        return _BACKENDS[backend.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown hash backend: {backend} (expected one of {sorted(_BACKENDS)})"
        ) from None

