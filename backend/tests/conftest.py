from datetime import datetime, timedelta, timezone

import pytest

from wastebin.core.crypto import ScryptParams
from wastebin.core.lifecycle import PasteManager
from wastebin.infra.database import build_engine, init_db
from wastebin.infra.store import SqlPasteStore

# cheap enough to keep the suite fast, same code path as production
FAST_KDF = ScryptParams(n=2 ** 8, r=8, p=1)

AT_REST_KEY = bytes(range(32))


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'pastes.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return SqlPasteStore(engine)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def manager(store, clock):
    return PasteManager(store, kdf_params=FAST_KDF, clock=clock)


@pytest.fixture
def sealing_manager(store, clock):
    return PasteManager(store, server_key=AT_REST_KEY, kdf_params=FAST_KDF, clock=clock)
