"""
chainprim Serialization Utilities

Fixed-width integers are LITTLE-ENDIAN. Lengths and block numbers use the
compact integer format:

    0b00: 1 byte,  value < 2^6
    0b01: 2 bytes, value < 2^14
    0b10: 4 bytes, value < 2^30
    0b11: 1 byte ((n - 4) << 2 | 0b11) followed by n value bytes, n >= 4
"""

from __future__ import annotations
from typing import Callable, Tuple, TypeVar, Union
import logging

from chainprim.constants import (
    COMPACT_BIG_LIMIT,
    COMPACT_BIG_MIN_BYTES,
    COMPACT_FOUR_LIMIT,
    COMPACT_MODE_BIG,
    COMPACT_MODE_FOUR,
    COMPACT_MODE_MASK,
    COMPACT_MODE_SINGLE,
    COMPACT_MODE_TWO,
    COMPACT_SINGLE_LIMIT,
    COMPACT_TWO_LIMIT,
    LITTLE_ENDIAN,
    OPTION_NONE,
    OPTION_SOME,
    U8_MAX,
    U32_MAX,
)
from chainprim.errors import (
    DecodeError,
    InvalidLengthError,
    MalformedError,
    TruncatedError,
)

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]
T = TypeVar("T")


# ==============================================================================
# Fixed-Width Integers (Little-Endian)
# ==============================================================================

def encode_u8(value: int) -> bytes:
    """Encode unsigned 8-bit integer."""
    if not 0 <= value <= U8_MAX:
        raise ValueError(f"u8 value out of range: {value}")
    return bytes([value])


def encode_u32(value: int) -> bytes:
    """Encode unsigned 32-bit integer (little-endian)."""
    if not 0 <= value <= U32_MAX:
        raise ValueError(f"u32 value out of range: {value}")
    return value.to_bytes(4, LITTLE_ENDIAN)


def decode_u32(data: BytesLike, offset: int = 0) -> Tuple[int, int]:
    """
    Decode unsigned 32-bit integer (little-endian).
    Returns (value, bytes_consumed).
    """
    _require(data, offset, 4, "u32")
    return int.from_bytes(data[offset:offset + 4], LITTLE_ENDIAN), 4


# ==============================================================================
# Compact Integers
# ==============================================================================

def encode_compact(value: int) -> bytes:
    """
    Encode a non-negative integer in the shortest compact form.

    Raises ValueError for negative values and values >= 2^536.
    """
    if value < 0:
        raise ValueError(f"Compact value cannot be negative: {value}")

    if value < COMPACT_SINGLE_LIMIT:
        return bytes([(value << 2) | COMPACT_MODE_SINGLE])
    elif value < COMPACT_TWO_LIMIT:
        return ((value << 2) | COMPACT_MODE_TWO).to_bytes(2, LITTLE_ENDIAN)
    elif value < COMPACT_FOUR_LIMIT:
        return ((value << 2) | COMPACT_MODE_FOUR).to_bytes(4, LITTLE_ENDIAN)
    elif value < COMPACT_BIG_LIMIT:
        size = max(COMPACT_BIG_MIN_BYTES, (value.bit_length() + 7) // 8)
        prefix = ((size - COMPACT_BIG_MIN_BYTES) << 2) | COMPACT_MODE_BIG
        return bytes([prefix]) + value.to_bytes(size, LITTLE_ENDIAN)
    else:
        raise ValueError(f"Compact value too large: {value.bit_length()} bits")


def encode_compact_u32(value: int) -> bytes:
    """Encode a u32 in compact form."""
    if not 0 <= value <= U32_MAX:
        raise ValueError(f"u32 value out of range: {value}")
    return encode_compact(value)


def decode_compact(data: BytesLike, offset: int = 0) -> Tuple[int, int]:
    """
    Decode a compact integer.
    Returns (value, bytes_consumed).

    Non-canonical encodings (a value that fits a shorter mode) are rejected.
    """
    _require(data, offset, 1, "compact prefix")
    first_byte = data[offset]
    mode = first_byte & COMPACT_MODE_MASK

    if mode == COMPACT_MODE_SINGLE:
        return first_byte >> 2, 1

    if mode == COMPACT_MODE_TWO:
        _require(data, offset, 2, "compact integer")
        value = int.from_bytes(data[offset:offset + 2], LITTLE_ENDIAN) >> 2
        if value < COMPACT_SINGLE_LIMIT:
            raise MalformedError(f"non-canonical compact integer {value} in 2-byte mode")
        return value, 2

    if mode == COMPACT_MODE_FOUR:
        _require(data, offset, 4, "compact integer")
        value = int.from_bytes(data[offset:offset + 4], LITTLE_ENDIAN) >> 2
        if value < COMPACT_TWO_LIMIT:
            raise MalformedError(f"non-canonical compact integer {value} in 4-byte mode")
        return value, 4

    size = (first_byte >> 2) + COMPACT_BIG_MIN_BYTES
    _require(data, offset + 1, size, "compact integer")
    value = int.from_bytes(data[offset + 1:offset + 1 + size], LITTLE_ENDIAN)
    if value < COMPACT_FOUR_LIMIT or (size > COMPACT_BIG_MIN_BYTES and value >> (8 * (size - 1)) == 0):
        raise MalformedError(f"non-canonical compact integer {value} in {size}-byte big mode")
    return value, 1 + size


def decode_compact_u32(data: BytesLike, offset: int = 0) -> Tuple[int, int]:
    """Decode a compact integer that must fit in a u32."""
    value, consumed = decode_compact(data, offset)
    if value > U32_MAX:
        raise MalformedError(f"compact integer {value} exceeds u32")
    return value, consumed


def compact_size(value: int) -> int:
    """Return the number of bytes needed to encode value in compact form."""
    if value < COMPACT_SINGLE_LIMIT:
        return 1
    elif value < COMPACT_TWO_LIMIT:
        return 2
    elif value < COMPACT_FOUR_LIMIT:
        return 4
    return 1 + max(COMPACT_BIG_MIN_BYTES, (value.bit_length() + 7) // 8)


# ==============================================================================
# Byte Sequences
# ==============================================================================

def encode_bytes(data: BytesLike) -> bytes:
    """
    Encode variable-length byte array with compact length prefix.
    Format: compact(length) || data
    """
    view = memoryview(data).cast("B")
    return encode_compact(len(view)) + bytes(view)


def decode_bytes(data: BytesLike, offset: int = 0) -> Tuple[bytes, int]:
    """
    Decode variable-length byte array.
    Returns (bytes_data, total_bytes_consumed).
    """
    length, length_size = decode_compact(data, offset)
    start = offset + length_size
    remaining = len(data) - start
    if length > remaining:
        raise InvalidLengthError(length, remaining, "byte sequence")
    return bytes(data[start:start + length]), length_size + length


def _require(data: BytesLike, offset: int, size: int, what: str) -> None:
    remaining = len(data) - offset
    if remaining < size:
        raise TruncatedError(size, max(remaining, 0), what)


# ==============================================================================
# Reader / Writer
# ==============================================================================

class ByteReader:
    """
    Helper class for sequential decoding.

    Every read is bounds-checked and raises a DecodeError subclass instead of
    returning short data.
    """

    def __init__(self, data: BytesLike):
        self.data = memoryview(data).cast("B")
        self.offset = 0

    def read_u8(self, what: str = "u8") -> int:
        _require(self.data, self.offset, 1, what)
        value = self.data[self.offset]
        self.offset += 1
        return value

    def read_u32(self) -> int:
        value, size = decode_u32(self.data, self.offset)
        self.offset += size
        return value

    def read_compact(self) -> int:
        value, size = decode_compact(self.data, self.offset)
        self.offset += size
        return value

    def read_compact_u32(self) -> int:
        value, size = decode_compact_u32(self.data, self.offset)
        self.offset += size
        return value

    def read_bytes(self) -> bytes:
        """Read variable-length byte array (compact-prefixed)."""
        value, size = decode_bytes(self.data, self.offset)
        self.offset += size
        return value

    def read_fixed_bytes(self, size: int, what: str = "fixed bytes") -> bytes:
        """Read fixed-length byte array."""
        _require(self.data, self.offset, size, what)
        value = bytes(self.data[self.offset:self.offset + size])
        self.offset += size
        return value

    def read_length(self, what: str = "sequence") -> int:
        """
        Read a compact item count.

        Every item occupies at least one byte, so a count larger than the
        remaining input can never be satisfied.
        """
        count = self.read_compact()
        if count > self.remaining():
            raise InvalidLengthError(count, self.remaining(), what)
        return count

    def read_option_flag(self, what: str = "option") -> bool:
        """Read an Option presence byte."""
        flag = self.read_u8(what)
        if flag == OPTION_NONE:
            return False
        if flag == OPTION_SOME:
            return True
        raise MalformedError(f"invalid {what} presence flag 0x{flag:02x}")

    def remaining(self) -> int:
        """Return number of bytes remaining."""
        return len(self.data) - self.offset

    def is_empty(self) -> bool:
        """Check if all bytes have been read."""
        return self.offset >= len(self.data)

    def finish(self, what: str = "value") -> None:
        """Require that the whole input has been consumed."""
        if not self.is_empty():
            raise MalformedError(f"{self.remaining()} trailing bytes after {what}")


class ByteWriter:
    """
    Helper class for sequential encoding.

    Byte-like payloads (including memoryviews) are appended straight into the
    output buffer.
    """

    def __init__(self):
        self.buffer = bytearray()

    def write_u8(self, value: int) -> "ByteWriter":
        self.buffer.extend(encode_u8(value))
        return self

    def write_u32(self, value: int) -> "ByteWriter":
        self.buffer.extend(encode_u32(value))
        return self

    def write_compact(self, value: int) -> "ByteWriter":
        self.buffer.extend(encode_compact(value))
        return self

    def write_compact_u32(self, value: int) -> "ByteWriter":
        self.buffer.extend(encode_compact_u32(value))
        return self

    def write_bytes(self, data: BytesLike) -> "ByteWriter":
        """Write variable-length byte array (compact-prefixed)."""
        view = memoryview(data).cast("B")
        self.buffer.extend(encode_compact(len(view)))
        self.buffer.extend(view)
        return self

    def write_fixed_bytes(self, data: BytesLike, size: int) -> "ByteWriter":
        """Write fixed-length byte array."""
        view = memoryview(data).cast("B")
        if len(view) != size:
            raise ValueError(f"Expected {size} bytes, got {len(view)}")
        self.buffer.extend(view)
        return self

    def write_option_flag(self, present: bool) -> "ByteWriter":
        self.buffer.append(OPTION_SOME if present else OPTION_NONE)
        return self

    def to_bytes(self) -> bytes:
        """Return the encoded bytes."""
        return bytes(self.buffer)

    def __len__(self) -> int:
        return len(self.buffer)


# ==============================================================================
# Whole-Input Decoding
# ==============================================================================

def decode_exact(decode_from: Callable[[ByteReader], T], data: BytesLike, what: str) -> T:
    """
    Decode a complete value from data, rejecting trailing bytes.

    Failures are logged at debug level and re-raised unchanged.
    """
    reader = ByteReader(data)
    try:
        value = decode_from(reader)
        reader.finish(what)
    except DecodeError as e:
        logger.debug(f"{what} decode failed at offset {reader.offset}: {e}")
        raise
    return value
