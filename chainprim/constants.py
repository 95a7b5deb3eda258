"""
chainprim Constants

All codec constants defined here for single source of truth.
"""

from typing import Final, Tuple

# ==============================================================================
# HASHING CONSTANTS
# ==============================================================================

HASH_SIZE: Final[int] = 32
BLAKE2_256_OUTPUT_SIZE: Final[int] = 32

HASH_BACKEND_HASHLIB: Final[str] = "hashlib"
HASH_BACKEND_PYCRYPTODOME: Final[str] = "pycryptodome"
HASH_BACKENDS: Final[Tuple[str, ...]] = (
    HASH_BACKEND_HASHLIB,
    HASH_BACKEND_PYCRYPTODOME,
)
DEFAULT_HASH_BACKEND: Final[str] = HASH_BACKEND_HASHLIB

# ==============================================================================
# COMPACT INTEGER CONSTANTS
# ==============================================================================

# Mode selector lives in the two low bits of the first byte
COMPACT_MODE_SINGLE: Final[int] = 0b00          # 1 byte,  value < 2^6
COMPACT_MODE_TWO: Final[int] = 0b01             # 2 bytes, value < 2^14
COMPACT_MODE_FOUR: Final[int] = 0b10            # 4 bytes, value < 2^30
COMPACT_MODE_BIG: Final[int] = 0b11             # length-prefixed big integer
COMPACT_MODE_MASK: Final[int] = 0b11

COMPACT_SINGLE_LIMIT: Final[int] = 1 << 6
COMPACT_TWO_LIMIT: Final[int] = 1 << 14
COMPACT_FOUR_LIMIT: Final[int] = 1 << 30
COMPACT_BIG_MIN_BYTES: Final[int] = 4
COMPACT_BIG_MAX_BYTES: Final[int] = 67          # (0b111111 + 4)
COMPACT_BIG_LIMIT: Final[int] = 1 << (8 * COMPACT_BIG_MAX_BYTES)

U8_MAX: Final[int] = 0xFF
U32_MAX: Final[int] = 0xFFFFFFFF

# ==============================================================================
# DIGEST CONSTANTS
# ==============================================================================

ENGINE_ID_SIZE: Final[int] = 4

# Tags that were assigned once and must never be reused
RESERVED_DIGEST_ITEM_TYPES: Final[Tuple[int, ...]] = (1, 3)

# Option<T> presence flag
OPTION_NONE: Final[int] = 0x00
OPTION_SOME: Final[int] = 0x01

# ==============================================================================
# GENESIS CONSTANTS
# ==============================================================================

GENESIS_NUMBER: Final[int] = 0

# Byte order
LITTLE_ENDIAN: Final[str] = "little"
