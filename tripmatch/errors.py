"""
Error taxonomy for the matching engine.

Three families of failure are distinguished:
- Decode failures: a persisted record cannot be parsed. Returned as a
  ``DecodeError`` value from ``try_decode_trip`` so batch scans can skip the
  record, or raised as ``RecordDecodeError`` for direct callers.
- Validation failures: a pre-filter query is missing or malformed. Raised
  before any scanning happens.
- Configuration failures: aggregation weights are invalid. Raised when the
  configuration is loaded, never from a per-call scoring function.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DecodeErrorKind(Enum):
    """Reasons a trip record can fail to decode."""
    TRUNCATED = "truncated"
    INVALID_UTF8 = "invalid_utf8"


@dataclass(frozen=True)
class DecodeError:
    """
    Typed decode failure.

    Attributes:
        kind: Failure category
        offset: Byte offset at which the failing read started
        message: Human-readable detail
    """
    kind: DecodeErrorKind
    offset: int
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value} at offset {self.offset}: {self.message}"


class RecordDecodeError(ValueError):
    """Raised when a single record must decode but cannot."""

    def __init__(self, error: DecodeError):
        super().__init__(str(error))
        self.error = error

    @property
    def kind(self) -> DecodeErrorKind:
        return self.error.kind


class ValidationError(ValueError):
    """Raised when a pre-filter query is missing fields or malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ConfigurationError(ValueError):
    """Raised when scoring or pre-filter configuration is invalid."""
