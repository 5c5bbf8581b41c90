"""Shared fixtures for the matching engine tests."""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tripmatch.dates import SECONDS_PER_DAY
from tripmatch.records import Trip, encode_trip

JUNE_1 = 1748736000  # 2025-06-01T00:00:00Z
DAY = SECONDS_PER_DAY


def june(day: int) -> int:
    """Unix seconds for midnight UTC on the given day of June 2025."""
    return JUNE_1 + (day - 1) * DAY


def make_trip(
    owner_byte: int = 1,
    grid: str = "8a",
    start: int = None,
    end: int = None,
    payload: bytes = b"\xde\xad\xbe\xef",
    active: bool = True,
    created_at: int = JUNE_1 - 7 * DAY,
) -> Trip:
    return Trip(
        owner=bytes([owner_byte]) * 32,
        destination_grid_hash=grid,
        start_date=june(1) if start is None else start,
        end_date=june(10) if end is None else end,
        encrypted_data=payload,
        is_active=active,
        created_at=created_at,
    )


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def config_path(project_root) -> str:
    return str(project_root / "configs" / "config.yaml")


@pytest.fixture
def trip_factory():
    return make_trip


@pytest.fixture
def record_factory():
    def _make(**kwargs) -> bytes:
        return encode_trip(make_trip(**kwargs))
    return _make
