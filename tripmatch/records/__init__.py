"""Persisted trip record decoding."""

from .trip_codec import (
    Trip,
    decode_trip,
    try_decode_trip,
    encode_trip,
    encode_base58,
    MIN_RECORD_SIZE,
)

__all__ = [
    "Trip",
    "decode_trip",
    "try_decode_trip",
    "encode_trip",
    "encode_base58",
    "MIN_RECORD_SIZE",
]
