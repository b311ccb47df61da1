import json
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from userbff.core.config import Settings
from userbff.core.security import PasswordHasher
from userbff.db.store import RemoteStoreClient
from userbff.main import create_app
from userbff.repositories.users import RemoteUserRepository

REST_PREFIX = "/rest/v1"


class FakeRemoteStore:
    """In-process stand-in for the PostgREST collection and its RPCs.

    Every request is recorded. ``fail`` forces a status code for an
    operation key, ``raise_on`` makes it a transport error and ``hooks`` run
    just before the operation is applied.
    """

    def __init__(self, resource: str = "trans_users") -> None:
        self.resource = resource
        self.rows: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.calls: list[str] = []
        self.fail: dict[str, int] = {}
        self.raise_on: set[str] = set()
        self.hooks: dict[str, Callable[[], None]] = {}
        self._transactions = 0

    def count(self, key: str) -> int:
        return self.calls.count(key)

    def _key(self, request: httpx.Request) -> str:
        route = request.url.path.removeprefix(REST_PREFIX)
        if route.startswith("/rpc/"):
            return route.removeprefix("/rpc/").removesuffix("_transaction")
        return {
            "GET": "select",
            "POST": "insert",
            "PATCH": "patch",
            "DELETE": "delete",
        }[request.method]

    def _matching(self, request: httpx.Request) -> list[dict]:
        matches = list(self.rows.values())
        for column, expr in request.url.params.items():
            value = expr.removeprefix("eq.")
            matches = [row for row in matches if str(row.get(column)) == value]
        return matches

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = self._key(request)
        self.calls.append(key)
        if key in self.hooks:
            self.hooks[key]()

        if key in self.raise_on:
            raise httpx.ConnectError("connection refused", request=request)
        if key in self.fail:
            return httpx.Response(self.fail[key], json={"message": f"{key} rejected"})

        if key == "begin":
            self._transactions += 1
            return httpx.Response(200, json={"transaction_id": f"tx-{self._transactions}"})
        if key in ("commit", "rollback"):
            return httpx.Response(200, json={})
        if key == "select":
            return httpx.Response(200, json=self._matching(request))
        if key == "insert":
            row = json.loads(request.content)
            self.rows[row["id"]] = row
            return httpx.Response(201, json=[row])
        if key == "patch":
            changes = json.loads(request.content)
            updated = []
            for row in self._matching(request):
                row.update(changes)
                updated.append(row)
            return httpx.Response(200, json=updated)
        if key == "delete":
            for row in self._matching(request):
                del self.rows[row["id"]]
            return httpx.Response(204)
        raise AssertionError(f"Unhandled request {request.method} {request.url}")


class TickingClock:
    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 30, 0, 123456)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        SUPABASE_URL="http://store.test",
        SUPABASE_ANON_KEY="test_key",
        JWT_SECRET_KEY="test-secret",
        BCRYPT_ROUNDS=4,
    )


@pytest.fixture
def fake_store() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest_asyncio.fixture
async def store_client(settings, fake_store):
    client = RemoteStoreClient.from_settings(settings, transport=httpx.MockTransport(fake_store))
    yield client
    await client.aclose()


@pytest.fixture
def repository(store_client, hasher) -> RemoteUserRepository:
    return RemoteUserRepository(store_client, hasher, clock=TickingClock())


@pytest.fixture
def app_instance(settings, store_client, repository):
    return create_app(settings, store=store_client, repository=repository)


@pytest_asyncio.fixture
async def client(app_instance):
    transport = ASGITransport(app=app_instance)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
