"""
Shared fixtures.

``FakeSupabase`` answers the subset of the REST gateway and object storage
API the application uses, so requests travel through the real ``RestClient``
and ``StorageClient`` over an ``httpx.MockTransport``.
"""

import asyncio
import json
from collections import defaultdict
from datetime import datetime, timedelta, timezone

import fakeredis
import httpx
import pytest
from fastapi.testclient import TestClient

import main
from app.core.config import Settings
from app.core.rest_client import RestClient, get_rest_client
from app.core.security import JWTTokenVerifier, create_access_token, get_settings, get_token_verifier
from app.core.storage import StorageClient, get_storage_client

TEST_SETTINGS = Settings(
    _env_file=None,
    SUPABASE_URL="https://diary.test",
    SUPABASE_SERVICE_ROLE_KEY="service-key",
    SECRET_KEY="test-secret",
    READ_TIMEOUT_MS=250,
    WRITE_TIMEOUT_MS=250,
    STORAGE_TIMEOUT_MS=250,
)

REST_PREFIX = "/rest/v1/"
STORAGE_PREFIX = "/storage/v1/"
UNIQUE_COLUMNS = {"users": ("username", "email")}
EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _encode(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class FakeSupabase:
    def __init__(self):
        self.tables = defaultdict(list)
        self.objects = {}
        self.buckets = set()
        self.requests = []
        self.failing = {}
        self.stalled = set()
        self.hidden = set()
        self._ids = defaultdict(int)
        self._ticks = 0

    # -- helpers for tests -------------------------------------------------

    def _now(self) -> str:
        self._ticks += 1
        return (EPOCH + timedelta(seconds=self._ticks)).isoformat()

    def seed(self, table: str, **row) -> dict:
        self._ids[table] += 1
        row.setdefault("id", self._ids[table])
        row.setdefault("created_at", self._now())
        if table == "notes":
            row.setdefault("updated_at", row["created_at"])
        if table == "users":
            row.setdefault("join_date", row["created_at"])
        self.tables[table].append(row)
        return dict(row)

    def fail(self, table: str, status: int = 500, body: str = '{"message":"boom"}') -> None:
        self.failing[table] = (status, body)

    def stall(self, table: str) -> None:
        self.stalled.add(table)

    def hide(self, table: str) -> None:
        """Reads of ``table`` see no rows; writes still hit the stored ones"""
        self.hidden.add(table)

    def rows(self, table: str):
        return [dict(row) for row in self.tables[table]]

    # -- transport -----------------------------------------------------------

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith(REST_PREFIX):
            table = path[len(REST_PREFIX):]
            if table in self.stalled:
                await asyncio.sleep(5)
            if table in self.failing:
                status, body = self.failing[table]
                return httpx.Response(status, text=body)
            return self._rest(request, table)
        if path.startswith(STORAGE_PREFIX):
            return self._storage(request, path[len(STORAGE_PREFIX):])
        return httpx.Response(404, json={"message": "not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def _rest(self, request: httpx.Request, table: str) -> httpx.Response:
        select, order, limit, filters = "*", None, None, []
        for key, value in request.url.params.multi_items():
            if key == "select":
                select = value
            elif key == "order":
                order = value
            elif key == "limit":
                limit = int(value)
            elif value.startswith("eq."):
                filters.append((key, value[3:]))

        matching = [
            row for row in self.tables[table]
            if all(_encode(row.get(column)) == value for column, value in filters)
        ]

        if request.method in ("GET", "HEAD"):
            if table in self.hidden:
                matching = []
            if order:
                column, direction = order.rsplit(".", 1)
                matching = sorted(
                    matching,
                    key=lambda row: (row.get(column) is not None, str(row.get(column))),
                    reverse=direction == "desc",
                )
            if limit:
                matching = matching[:limit]
            if request.method == "HEAD":
                total = len(matching)
                content_range = f"0-{total - 1}/{total}" if total else "*/0"
                return httpx.Response(200, headers={"content-range": content_range})
            if select != "*":
                columns = select.split(",")
                return httpx.Response(200, json=[{c: row.get(c) for c in columns} for row in matching])
            return httpx.Response(200, json=[dict(row) for row in matching])

        if request.method == "POST":
            record = json.loads(request.content)
            for column in UNIQUE_COLUMNS.get(table, ()):
                if any(row.get(column) == record.get(column) for row in self.tables[table]):
                    return httpx.Response(409, json={"message": f"duplicate key value violates unique constraint on {column}"})
            return httpx.Response(201, json=[self.seed(table, **record)])

        if request.method == "PATCH":
            patch = json.loads(request.content)
            for row in matching:
                row.update(patch)
            return httpx.Response(200, json=[dict(row) for row in matching])

        if request.method == "DELETE":
            self.tables[table] = [row for row in self.tables[table] if row not in matching]
            return httpx.Response(200, json=[dict(row) for row in matching])

        return httpx.Response(405)

    def _storage(self, request: httpx.Request, path: str) -> httpx.Response:
        if path.startswith("bucket"):
            if request.method == "GET":
                bucket = path.split("/", 1)[1]
                if bucket in self.buckets:
                    return httpx.Response(200, json={"id": bucket, "public": True})
                return httpx.Response(404, json={"message": "Bucket not found"})
            body = json.loads(request.content)
            self.buckets.add(body["id"])
            return httpx.Response(200, json={"name": body["id"]})

        if not path.startswith("object/"):
            return httpx.Response(404)
        bucket, key = path[len("object/"):].split("/", 1)

        if request.method == "POST":
            if bucket not in self.buckets:
                return httpx.Response(404, json={"message": "Bucket not found"})
            if (bucket, key) in self.objects:
                return httpx.Response(400, json={"message": "The resource already exists"})
            self.objects[(bucket, key)] = (request.content, request.headers.get("content-type"))
            return httpx.Response(200, json={"Key": f"{bucket}/{key}"})
        if request.method == "GET":
            if (bucket, key) not in self.objects:
                return httpx.Response(404, json={"message": "Object not found"})
            return httpx.Response(200, content=self.objects[(bucket, key)][0])
        if request.method == "DELETE":
            if self.objects.pop((bucket, key), None) is None:
                return httpx.Response(404, json={"message": "Object not found"})
            return httpx.Response(200, json=[{"name": key}])
        return httpx.Response(405)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeAsyncRedis(decode_responses=True)


@pytest.fixture
def rest_client(fake_supabase):
    return RestClient(TEST_SETTINGS, transport=fake_supabase.transport)


@pytest.fixture
def client(fake_supabase, fake_redis, monkeypatch):
    rest = RestClient(TEST_SETTINGS, transport=fake_supabase.transport)
    storage = StorageClient(TEST_SETTINGS, transport=fake_supabase.transport)

    async def fake_init_redis(url):
        return fake_redis

    monkeypatch.setattr(main, "init_redis", fake_init_redis)
    app = main.app
    app.dependency_overrides[get_rest_client] = lambda: rest
    app.dependency_overrides[get_storage_client] = lambda: storage
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    app.dependency_overrides[get_token_verifier] = lambda: JWTTokenVerifier(TEST_SETTINGS)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user_id: int) -> dict:
    token = create_access_token({"sub": user_id}, config=TEST_SETTINGS)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers
