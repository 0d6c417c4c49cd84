"""Tests for the REST gateway client."""

import pytest

from app.core.config import Settings
from app.core.errors import StoreError, StoreTimeout
from app.core.rest_client import (
    RestClient,
    build_query_params,
    encode_filter_value,
    parse_content_range_total,
)

from conftest import TEST_SETTINGS


class TestQueryParams:
    def test_booleans_are_lowercase(self):
        assert encode_filter_value(True) == "true"
        assert encode_filter_value(False) == "false"
        assert encode_filter_value(7) == "7"

    def test_filters_order_and_limit(self):
        params = build_query_params(
            filters={"user_id": 7, "is_deleted": False},
            order_by="created_at",
            limit=1,
        )
        assert params == [
            ("user_id", "eq.7"),
            ("is_deleted", "eq.false"),
            ("order", "created_at.desc"),
            ("limit", "1"),
        ]

    def test_ascending_order(self):
        assert build_query_params(order_by="deadline", ascending=True) == [("order", "deadline.asc")]

    def test_none_filters_are_skipped(self):
        assert build_query_params(filters={"category": None, "user_id": 3}) == [("user_id", "eq.3")]

    def test_explicit_select(self):
        assert build_query_params(select="id,username") == [("select", "id,username")]


class TestContentRange:
    def test_total(self):
        assert parse_content_range_total("0-9/42") == 42

    def test_empty(self):
        assert parse_content_range_total("*/0") == 0

    def test_missing_or_unknown(self):
        assert parse_content_range_total(None) == 0
        assert parse_content_range_total("0-9/*") == 0


@pytest.mark.anyio
class TestRestClient:
    async def test_query_sends_keys_and_filters(self, fake_supabase, rest_client):
        fake_supabase.seed("entries", title="a", content="x", user_id=7)
        fake_supabase.seed("entries", title="b", content="y", user_id=8)

        rows = await rest_client.query("entries", filters={"user_id": 7})

        assert [row["title"] for row in rows] == ["a"]
        request = fake_supabase.requests[-1]
        assert request.headers["apikey"] == "service-key"
        assert request.headers["authorization"] == "Bearer service-key"
        assert request.url.params["user_id"] == "eq.7"

    async def test_insert_returns_created_row(self, fake_supabase, rest_client):
        row = await rest_client.insert("moods", {"mood": "happy", "date": "2025-01-02", "user_id": 7})

        assert row["id"] == 1
        assert row["mood"] == "happy"
        assert fake_supabase.requests[-1].headers["prefer"] == "return=representation"

    async def test_update_of_missing_row_returns_none(self, rest_client):
        assert await rest_client.update("tasks", 99, {"title": "x"}) is None

    async def test_delete_returns_removed_rows(self, fake_supabase, rest_client):
        fake_supabase.seed("tasks", title="t", deadline="2025-02-01", user_id=1)

        removed = await rest_client.delete("tasks", 1)

        assert [row["id"] for row in removed] == [1]
        assert fake_supabase.rows("tasks") == []

    async def test_count(self, fake_supabase, rest_client):
        for _ in range(3):
            fake_supabase.seed("notes", title="n", content="c", user_id=5, is_favorite=False)
        fake_supabase.seed("notes", title="n", content="c", user_id=6, is_favorite=False)

        assert await rest_client.count("notes", filters={"user_id": 5}) == 3
        assert fake_supabase.requests[-1].method == "HEAD"

    async def test_http_error_is_store_error(self, fake_supabase, rest_client):
        fake_supabase.fail("todos", status=503, body="unavailable")

        with pytest.raises(StoreError) as excinfo:
            await rest_client.query("todos")

        assert not isinstance(excinfo.value, StoreTimeout)
        assert excinfo.value.message == "Database error (HTTP 503)"
        assert excinfo.value.details == "unavailable"
        assert excinfo.value.status == 503
        assert excinfo.value.status_code == 500

    async def test_timeout_is_distinct_from_http_error(self, fake_supabase, rest_client):
        fake_supabase.stall("todos")

        with pytest.raises(StoreTimeout) as excinfo:
            await rest_client.query("todos", timeout_ms=50)

        assert excinfo.value.message == "Query timeout after 50ms"
        assert excinfo.value.status_code == 504

    async def test_missing_configuration(self, fake_supabase):
        client = RestClient(Settings(_env_file=None), transport=fake_supabase.transport)

        with pytest.raises(StoreError) as excinfo:
            await client.query("entries")

        assert excinfo.value.message == "Server configuration error"
        assert excinfo.value.status is None
        assert fake_supabase.requests == []
        await client.aclose()

    async def test_anon_key_fallback(self, fake_supabase):
        config = Settings(_env_file=None, SUPABASE_URL="https://diary.test", SUPABASE_ANON_KEY="anon")
        client = RestClient(config, transport=fake_supabase.transport)

        await client.query("entries")

        assert fake_supabase.requests[-1].headers["apikey"] == "anon"
        await client.aclose()

    async def test_write_timeout_used_for_writes(self, fake_supabase):
        config = TEST_SETTINGS.model_copy(update={"WRITE_TIMEOUT_MS": 40})
        client = RestClient(config, transport=fake_supabase.transport)
        fake_supabase.stall("entries")

        with pytest.raises(StoreTimeout) as excinfo:
            await client.insert("entries", {"title": "t", "content": "c", "user_id": 1})

        assert excinfo.value.message == "Insert timeout after 40ms"
        await client.aclose()
