"""
chainprim Hash Primitive Bindings
"""

from chainprim.crypto.hash import blake2_256, blake2_256_pycryptodome, get_hasher

__all__ = [
    "blake2_256",
    "blake2_256_pycryptodome",
    "get_hasher",
]
