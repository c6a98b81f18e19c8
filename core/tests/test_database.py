"""Tests for engine construction and the health ping."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core import database
from core.errors import ConfigurationError


@pytest.fixture
def fresh_engine():
    database.set_engine(None)
    yield
    database.set_engine(None)


class TestGetEngine:
    def test_pool_size_follows_max_connections(self, monkeypatch, fresh_engine):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@localhost/roster")
        monkeypatch.setenv("MAX_DB_CONNECTIONS", "7")

        engine = database.get_engine()

        assert engine.url.drivername == "postgresql+asyncpg"
        assert engine.pool.size() == 7

    def test_default_pool_size(self, monkeypatch, fresh_engine):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@localhost/roster")
        monkeypatch.delenv("MAX_DB_CONNECTIONS", raising=False)

        assert database.get_engine().pool.size() == 5

    def test_missing_url_is_fatal(self, monkeypatch, fresh_engine):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(ConfigurationError):
            database.get_engine()


class TestSyncUrl:
    def test_converts_asyncpg_url(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@localhost/roster")
        assert database.get_sync_database_url() == "postgresql://u:p@localhost/roster"


class TestPing:
    @pytest.mark.asyncio
    async def test_runs_select_1(self):
        conn = MagicMock()
        conn.execute = AsyncMock()
        with patch("core.database.get_connection") as mock_get:
            mock_get.return_value.__aenter__.return_value = conn
            mock_get.return_value.__aexit__.return_value = False
            await database.ping()

        assert str(conn.execute.call_args[0][0]) == "SELECT 1"

    @pytest.mark.asyncio
    async def test_propagates_driver_errors(self):
        with patch("core.database.get_connection") as mock_get:
            mock_get.return_value.__aenter__.side_effect = OSError("refused")
            with pytest.raises(OSError):
                await database.ping()
