"""Tests for database initialization, sessions and shutdown."""

import pytest
from sqlalchemy import select

from clockblocked.core import database
from clockblocked.core.database import (
    close_database,
    get_db_session,
    get_session_factory,
    health_check,
    init_database,
)
from clockblocked.models import Alarm

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
async def _reset_database():
    await close_database()
    yield
    await close_database()


class TestInitDatabase:
    async def test_memory_database_is_shared_across_sessions(self):
        await init_database(MEMORY_URL)

        async with get_db_session() as session:
            session.add(Alarm(id="a1", user_id="u1", hours=7, minutes=0, selected_days=[1]))
            await session.commit()

        async with get_db_session() as session:
            result = await session.execute(select(Alarm))
            assert [alarm.id for alarm in result.scalars()] == ["a1"]

    async def test_file_database_creates_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "clockblocked.db"

        await init_database(f"sqlite+aiosqlite:///{db_path}")

        assert db_path.parent.is_dir()
        assert await health_check() is True

    async def test_health_check(self):
        await init_database(MEMORY_URL)
        assert await health_check() is True


class TestSessionFactory:
    async def test_raises_before_init(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            get_session_factory()

    async def test_available_after_init(self):
        await init_database(MEMORY_URL)
        assert get_session_factory() is database._session_factory

    async def test_get_db_session_initializes_lazily(self):
        async with get_db_session() as session:
            assert session is not None
        assert database._engine is not None


class TestSessionErrors:
    async def test_error_rolls_back_and_propagates(self):
        await init_database(MEMORY_URL)

        with pytest.raises(RuntimeError, match="boom"):
            async with get_db_session() as session:
                session.add(Alarm(id="a1", user_id="u1", hours=7, minutes=0, selected_days=[1]))
                raise RuntimeError("boom")

        async with get_db_session() as session:
            assert await session.get(Alarm, "a1") is None


class TestCloseDatabase:
    async def test_resets_globals(self):
        await init_database(MEMORY_URL)

        await close_database()

        assert database._engine is None
        with pytest.raises(RuntimeError):
            get_session_factory()

    async def test_close_without_init_is_noop(self):
        await close_database()
