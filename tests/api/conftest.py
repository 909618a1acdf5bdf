import pytest
from httpx import AsyncClient, ASGITransport

from chatrelay.core.config import Settings
from chatrelay.main import create_app


@pytest.fixture
def test_settings(tmp_path):
    return Settings(static_dir=str(tmp_path / "no-static"), history_limit=50)


@pytest.fixture
def make_client(test_settings):
    def _make(store, settings=None):
        app = create_app(settings=settings or test_settings, store=store)
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    return _make


@pytest.fixture
async def async_test_client(make_client, sql_store):
    async with make_client(sql_store) as client:
        yield client


@pytest.fixture
async def demo_client(make_client, ephemeral_store):
    async with make_client(ephemeral_store) as client:
        yield client


@pytest.fixture
async def broken_client(make_client, broken_store):
    async with make_client(broken_store) as client:
        yield client
