"""
Shared fixtures: an in-memory store with a controllable clock.
"""

import random

import pytest

from Venue_POS.data.snapshot_store import MemorySnapshotBackend
from Venue_POS.services.pos_store import PosStore
from Venue_POS.utils.ids import SequentialIdStrategy, UuidIdStrategy

# 2023-11-14 22:13:20 UTC
T0 = 1_700_000_000_000


class FakeClock:
    def __init__(self, start: int = T0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemorySnapshotBackend()


@pytest.fixture
def store(backend, clock):
    return PosStore(backend, id_strategy=UuidIdStrategy(random.Random(7)), clock=clock)


@pytest.fixture
def seq_store(clock):
    return PosStore(MemorySnapshotBackend(), id_strategy=SequentialIdStrategy(), clock=clock)


@pytest.fixture
def sauna_items():
    return [
        {"service_id": 1, "service_name": "Sauna", "service_price": 100, "quantity": 2},
    ]
