"""
Binary codec for persisted trip records.

Record layout (all integers little-endian):

    offset  size  field
    0       8     record-type discriminator (skipped, not validated)
    8       32    owner public key
    40      4     destination grid hash length N (u32)
    44      N     destination grid hash (UTF-8)
    ...     8     start date (i64, Unix seconds)
    ...     8     end date (i64, Unix seconds)
    ...     4     encrypted payload length M (u32)
    ...     M     encrypted payload (opaque)
    ...     1     active flag (nonzero = true)
    ...     8     creation timestamp (i64, Unix seconds)

Decoding never reads past the buffer: any length prefix that would overrun
the buffer yields a TRUNCATED error rather than a short record.
"""

import struct
from dataclasses import dataclass
from typing import Union

import base58

from ..errors import DecodeError, DecodeErrorKind, RecordDecodeError

DISCRIMINATOR_SIZE = 8
OWNER_SIZE = 32

# discriminator + owner + two length prefixes + two dates + flag + created_at
MIN_RECORD_SIZE = DISCRIMINATOR_SIZE + OWNER_SIZE + 4 + 8 + 8 + 4 + 1 + 8

_U32 = struct.Struct("<I")
_I64 = struct.Struct("<q")


def encode_base58(data: bytes) -> str:
    """Owner key text form (Bitcoin-alphabet base58, as the ledger prints keys)."""
    return base58.b58encode(bytes(data)).decode("ascii")


@dataclass(frozen=True)
class Trip:
    """
    Decoded trip record.

    Attributes:
        owner: 32-byte owner public key
        destination_grid_hash: Coarse grid cell identifier of the destination
        start_date: Trip start, Unix seconds
        end_date: Trip end, Unix seconds (not guaranteed >= start_date)
        encrypted_data: Opaque encrypted trip payload
        is_active: Whether the trip is open for matching
        created_at: Creation time, Unix seconds
    """
    owner: bytes
    destination_grid_hash: str
    start_date: int
    end_date: int
    encrypted_data: bytes
    is_active: bool
    created_at: int

    @property
    def owner_id(self) -> str:
        """Owner key in its base58 text form."""
        return encode_base58(self.owner)


class _Reader:
    """Bounds-checked cursor over a record buffer."""

    def __init__(self, buffer: bytes, offset: int = 0):
        self.buffer = buffer
        self.offset = offset

    def take(self, size: int, field_name: str) -> Union[bytes, DecodeError]:
        end = self.offset + size
        if end > len(self.buffer):
            return DecodeError(
                DecodeErrorKind.TRUNCATED,
                self.offset,
                f"{field_name} needs {size} bytes, {len(self.buffer) - self.offset} available"
            )
        chunk = bytes(self.buffer[self.offset:end])
        self.offset = end
        return chunk


def try_decode_trip(buffer: bytes) -> Union[Trip, DecodeError]:
    """
    Decode a trip record without raising.

    Args:
        buffer: Raw account bytes, discriminator included

    Returns:
        Trip on success, DecodeError describing the first failing read otherwise
    """
    reader = _Reader(buffer)

    skipped = reader.take(DISCRIMINATOR_SIZE, "discriminator")
    if isinstance(skipped, DecodeError):
        return skipped

    owner = reader.take(OWNER_SIZE, "owner")
    if isinstance(owner, DecodeError):
        return owner

    raw_len = reader.take(_U32.size, "grid hash length")
    if isinstance(raw_len, DecodeError):
        return raw_len
    grid_offset = reader.offset
    grid_bytes = reader.take(_U32.unpack(raw_len)[0], "grid hash")
    if isinstance(grid_bytes, DecodeError):
        return grid_bytes
    try:
        grid_hash = grid_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        return DecodeError(DecodeErrorKind.INVALID_UTF8, grid_offset + e.start, e.reason)

    raw_start = reader.take(_I64.size, "start date")
    if isinstance(raw_start, DecodeError):
        return raw_start
    raw_end = reader.take(_I64.size, "end date")
    if isinstance(raw_end, DecodeError):
        return raw_end

    raw_len = reader.take(_U32.size, "payload length")
    if isinstance(raw_len, DecodeError):
        return raw_len
    payload = reader.take(_U32.unpack(raw_len)[0], "encrypted payload")
    if isinstance(payload, DecodeError):
        return payload

    flag = reader.take(1, "active flag")
    if isinstance(flag, DecodeError):
        return flag

    raw_created = reader.take(_I64.size, "created_at")
    if isinstance(raw_created, DecodeError):
        return raw_created

    return Trip(
        owner=owner,
        destination_grid_hash=grid_hash,
        start_date=_I64.unpack(raw_start)[0],
        end_date=_I64.unpack(raw_end)[0],
        encrypted_data=payload,
        is_active=flag[0] != 0,
        created_at=_I64.unpack(raw_created)[0],
    )


def decode_trip(buffer: bytes) -> Trip:
    """
    Decode a trip record, raising on failure.

    Raises:
        RecordDecodeError: If the buffer is truncated or the grid hash is not UTF-8
    """
    result = try_decode_trip(buffer)
    if isinstance(result, DecodeError):
        raise RecordDecodeError(result)
    return result


def encode_trip(trip: Trip, discriminator: bytes = b"\x00" * DISCRIMINATOR_SIZE) -> bytes:
    """
    Canonical encoder, the inverse of ``decode_trip``.

    The active flag is always written as exactly 0 or 1.
    """
    if len(discriminator) != DISCRIMINATOR_SIZE:
        raise ValueError(f"discriminator must be {DISCRIMINATOR_SIZE} bytes, got {len(discriminator)}")
    if len(trip.owner) != OWNER_SIZE:
        raise ValueError(f"owner must be {OWNER_SIZE} bytes, got {len(trip.owner)}")

    grid_bytes = trip.destination_grid_hash.encode("utf-8")
    parts = [
        discriminator,
        trip.owner,
        _U32.pack(len(grid_bytes)),
        grid_bytes,
        _I64.pack(trip.start_date),
        _I64.pack(trip.end_date),
        _U32.pack(len(trip.encrypted_data)),
        trip.encrypted_data,
        b"\x01" if trip.is_active else b"\x00",
        _I64.pack(trip.created_at),
    ]
    return b"".join(parts)
