import json

import httpx
import pytest
import pytest_asyncio

from admin.app import create_app
from core.backend import BackendClient, get_backend
from core.cache_service import CommentTreeCache, get_comment_tree_cache
from factories import BACKEND_URL


class FakeBackendAPI:
    """Подменяет внешний API маркетплейса: маршруты задаются в тесте, вызовы записываются"""

    def __init__(self):
        self.routes: dict[tuple[str, str], tuple[int, object]] = {}
        self.calls: list[tuple[str, str, object]] = []

    def add(self, method: str, path: str, body: object = None, status: int = 200) -> None:
        self.routes[(method, path)] = (status, body)

    def called(self, method: str, path: str) -> bool:
        return any(m == method and p == path for m, p, _ in self.calls)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        payload = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, payload))
        status, body = self.routes.get(
            (request.method, path), (404, {"message": f"No route {request.method} {path}"})
        )
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


@pytest.fixture
def fake_backend():
    return FakeBackendAPI()


@pytest.fixture
def comment_cache():
    return CommentTreeCache(ttl=300)


@pytest.fixture
def app(fake_backend, comment_cache):
    application = create_app()

    async def _get_test_backend():
        transport = httpx.MockTransport(fake_backend.handler)
        async with httpx.AsyncClient(transport=transport, base_url=BACKEND_URL) as client:
            yield BackendClient(client)

    async def _get_test_cache():
        return comment_cache

    application.dependency_overrides[get_backend] = _get_test_backend
    application.dependency_overrides[get_comment_tree_cache] = _get_test_cache
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
