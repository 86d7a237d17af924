# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio

from taskreward.database import init_db, make_engine, make_session_factory
from taskreward.services.rewards import RewardService


@pytest_asyncio.fixture()
async def engine(tmp_path: Path):
    """
    Real SQLite file per test.

    A file (not :memory:) so that concurrent sessions get their own
    connections and actually contend for the same rows.
    """
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'rewards.sqlite3'}", pool_size=8)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def sessions(engine):
    return make_session_factory(engine)


@pytest.fixture()
def service(sessions) -> RewardService:
    return RewardService(sessions, tx_timeout=5.0)
