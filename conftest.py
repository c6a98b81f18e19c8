"""Root pytest configuration."""

import itertools
import os
from pathlib import Path

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import create_async_engine

from core.errors import TransportError

# Load environment variables before tests run
_root = Path(__file__).parent
load_dotenv(_root / ".env")
load_dotenv(_root / ".env.local", override=True)


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()


class FakeTransport:
    """
    In-memory Transport.

    Records sends and deletes. Destinations in fail_send / fail_delete raise
    TransportError, as do deletes while fail_all_deletes is set.
    """

    def __init__(self, ready: bool = True):
        self.ready = ready
        self.sent: list[tuple[int, str, dict]] = []
        self.deleted: list[tuple[int, int]] = []
        self.fail_send: set[int] = set()
        self.fail_delete: set[int] = set()
        self.fail_all_deletes = False
        self.unreachable: set[int] = set()
        self._ids = itertools.count(1000)

    async def send(self, destination: int, text: str, **format_options) -> int:
        if destination in self.fail_send:
            raise TransportError(f"send to {destination} failed")
        self.sent.append((destination, text, format_options))
        return next(self._ids)

    async def delete(self, destination: int, message_id: int) -> None:
        if self.fail_all_deletes or message_id in self.fail_delete:
            raise TransportError(f"delete of {message_id} failed")
        self.deleted.append((destination, message_id))

    def is_ready(self) -> bool:
        return self.ready

    async def verify_destination(self, destination: int) -> bool:
        return destination not in self.unreachable

    def sent_to(self) -> list[int]:
        return [destination for destination, _, _ in self.sent]


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest_asyncio.fixture
async def db_engine():
    """
    Inject a fresh engine into core.database for integration tests.

    Skips when DATABASE_URL is not configured. Code under test opens its own
    connections and commits, so tests clean up the rows they create.
    """
    from core.database import set_engine

    database_url = os.environ.get("DATABASE_URL", "")
    if not database_url:
        pytest.skip("DATABASE_URL not configured")
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    # Create fresh engine for this test (avoids event loop mismatch)
    engine = create_async_engine(
        database_url,
        connect_args={"statement_cache_size": 0},
    )
    set_engine(engine)

    yield engine

    set_engine(None)
    await engine.dispose()
