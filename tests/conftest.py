import json

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from chatrelay.database.postgres import initialize_db
from chatrelay.services.broadcast_router import BroadcastRouter
from chatrelay.services.call_coordinator import CallSignalingCoordinator
from chatrelay.services.event_gateway import EventGateway
from chatrelay.services.session_directory import SessionDirectory
from chatrelay.store.ephemeral import EphemeralMessageStore
from chatrelay.store.sql import SqlMessageStore
from chatrelay.utils.websocket_manager import ConnectionManager

DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeWebSocket:
    """Records decoded frames instead of writing to a socket."""

    def __init__(self, fail_sends: bool = False):
        self.accepted = False
        self.fail_sends = fail_sends
        self.received = []

    async def accept(self):
        self.accepted = True

    async def send_text(self, text: str):
        if self.fail_sends:
            raise RuntimeError("socket is closed")
        self.received.append(json.loads(text))


@pytest.fixture
async def engine():
    engine = create_async_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await initialize_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sql_store(engine):
    return SqlMessageStore(engine)


@pytest.fixture
def ephemeral_store():
    return EphemeralMessageStore()


@pytest.fixture
async def broken_store(tmp_path):
    # The parent directory does not exist, so every connection attempt fails.
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'relay.db'}")
    yield SqlMessageStore(engine)
    await engine.dispose()


@pytest.fixture
def fake_socket():
    return FakeWebSocket


@pytest.fixture
def make_gateway():
    def _make(store):
        return EventGateway(
            store=store,
            router=BroadcastRouter(ConnectionManager()),
            sessions=SessionDirectory(),
            calls=CallSignalingCoordinator(),
        )
    return _make


@pytest.fixture
def gateway(make_gateway, ephemeral_store):
    return make_gateway(ephemeral_store)


@pytest.fixture
def frame():
    def _frame(event_type: str, data=None) -> str:
        return json.dumps({"type": event_type, "data": data})
    return _frame


async def _connect_three(gateway):
    clients = {}
    for name in ("a", "b", "c"):
        ws = FakeWebSocket()
        clients[name] = (await gateway.connect(ws), ws)
    return clients


@pytest.fixture
async def clients(gateway):
    """Clients a, b and c connected to ``gateway`` as (connection_id, socket)."""
    return await _connect_three(gateway)


@pytest.fixture
def connect_three():
    return _connect_three
