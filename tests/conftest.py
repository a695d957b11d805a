import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from imagevault.config import get_settings
from imagevault.main import app
from imagevault.routers.images import get_object_store
from tests.fakes import FakeObjectStore, make_settings


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def fake_store():
    return FakeObjectStore()


@pytest_asyncio.fixture
async def client(settings, fake_store):
    # Routes get the in-memory store instead of S3
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_object_store] = lambda: fake_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
