"""
chainprim Error Handling

All error codes and exception classes.
"""

from enum import IntEnum
from typing import Optional, Any


class ErrorCode(IntEnum):
    """Codec error codes."""

    # 1xxx - General errors
    INVALID_CONFIG = 1001

    # 2xxx - Decode errors
    TRUNCATED = 2001
    INVALID_DISCRIMINANT = 2002
    INVALID_LENGTH = 2003
    MALFORMED = 2004


class ChainPrimError(Exception):
    """Base exception for all chainprim errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for CLI output."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class InvalidConfigError(ChainPrimError):
    def __init__(self, errors: list):
        super().__init__(
            ErrorCode.INVALID_CONFIG,
            f"Invalid configuration: {'; '.join(errors)}",
            {"errors": list(errors)}
        )


# ==============================================================================
# Decode Errors (2xxx)
# ==============================================================================

class DecodeError(ChainPrimError):
    """Base class for every failure raised while decoding bytes."""


class TruncatedError(DecodeError):
    def __init__(self, needed: int, remaining: int, what: str = "value"):
        super().__init__(
            ErrorCode.TRUNCATED,
            f"Input truncated reading {what}: need {needed} bytes, {remaining} left",
            {"needed": needed, "remaining": remaining, "what": what}
        )


class InvalidDiscriminantError(DecodeError):
    def __init__(self, value: int, what: str, reason: str = ""):
        msg = f"Invalid {what} discriminant: {value}"
        if reason:
            msg += f" ({reason})"
        super().__init__(
            ErrorCode.INVALID_DISCRIMINANT,
            msg,
            {"value": value, "what": what}
        )


class InvalidLengthError(DecodeError):
    def __init__(self, length: int, remaining: int, what: str = "sequence"):
        super().__init__(
            ErrorCode.INVALID_LENGTH,
            f"Invalid {what} length prefix: {length} > {remaining} bytes remaining",
            {"length": length, "remaining": remaining, "what": what}
        )


class MalformedError(DecodeError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.MALFORMED,
            f"Malformed input: {reason}",
            {"reason": reason}
        )
