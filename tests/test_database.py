"""Tests for engine construction and transactional session scope."""
import pytest

from bizhealth.config import Settings
from bizhealth.database.connection import create_engine_from_settings, session_scope


class FakeSession:
    def __init__(self):
        self.committed = False
        self.rolled_back = False
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True
        return False

    async def commit(self):
        self.committed = True

    async def rollback(self):
        self.rolled_back = True


class FakeSessionFactory:
    def __init__(self):
        self.sessions = []

    def __call__(self):
        session = FakeSession()
        self.sessions.append(session)
        return session


@pytest.mark.asyncio
async def test_engine_uses_pool_settings():
    config = Settings(_env_file=None, database_pool_size=3, database_max_overflow=2)
    engine = create_engine_from_settings(config)
    try:
        assert engine.sync_engine.pool.size() == 3
        assert engine.sync_engine.echo is False
        assert engine.url.drivername == "postgresql+asyncpg"
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_session_scope_commits_on_success():
    factory = FakeSessionFactory()

    async with session_scope(factory) as session:
        assert session is factory.sessions[0]

    [session] = factory.sessions
    assert session.committed
    assert not session.rolled_back
    assert session.closed


@pytest.mark.asyncio
async def test_session_scope_rolls_back_and_reraises():
    factory = FakeSessionFactory()

    with pytest.raises(RuntimeError, match="write failed"):
        async with session_scope(factory):
            raise RuntimeError("write failed")

    [session] = factory.sessions
    assert session.rolled_back
    assert not session.committed
    assert session.closed
