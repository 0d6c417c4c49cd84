"""
REST data client for the hosted Postgres gateway.

Builds PostgREST-style filtered queries (``column=eq.value``) and issues
GET/POST/PATCH/DELETE against ``<SUPABASE_URL>/rest/v1/<table>``. Every call
makes a single attempt bounded by a timeout; expiry raises ``StoreTimeout``,
a non-2xx answer raises ``StoreError`` with the response body as details.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx
from fastapi import Request

from app.core.config import Settings
from app.core.errors import StoreError, StoreTimeout

logger = logging.getLogger(__name__)


def encode_filter_value(value: Any) -> str:
    """Render a filter value the way the gateway expects it"""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_params(
    select: str = "*",
    filters: Optional[Dict[str, Any]] = None,
    order_by: Optional[str] = None,
    ascending: bool = False,
    limit: Optional[int] = None,
) -> List[Tuple[str, str]]:
    params = []
    if select != "*":
        params.append(("select", select))
    for column, value in (filters or {}).items():
        if value is None:
            continue
        params.append((column, f"eq.{encode_filter_value(value)}"))
    if order_by:
        params.append(("order", f"{order_by}.{'asc' if ascending else 'desc'}"))
    if limit:
        params.append(("limit", str(limit)))
    return params


def parse_content_range_total(header: Optional[str]) -> int:
    """Total from a ``Content-Range`` header such as ``0-9/42`` or ``*/0``"""
    if not header or "/" not in header:
        return 0
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else 0


class RestClient:
    """Async client for the tabular REST gateway"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.read_timeout_ms = settings.READ_TIMEOUT_MS
        self.write_timeout_ms = settings.WRITE_TIMEOUT_MS
        key = settings.service_key
        self._client = httpx.AsyncClient(
            base_url=f"{settings.SUPABASE_URL.rstrip('/')}/rest/v1",
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            },
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        action: str,
        method: str,
        table: str,
        timeout_ms: int,
        params=None,
        json=None,
        headers=None,
    ) -> httpx.Response:
        if not self.settings.store_configured:
            raise StoreError("Server configuration error", details="Supabase configuration missing")

        seconds = timeout_ms / 1000
        started = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.request(
                    method, f"/{table}", params=params, json=json, headers=headers, timeout=seconds
                ),
                timeout=seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("%s on %s timed out after %sms", action, table, timeout_ms)
            raise StoreTimeout(f"{action} timeout after {timeout_ms}ms")
        except httpx.HTTPError as exc:
            logger.warning("%s on %s failed: %s", action, table, exc)
            raise StoreError("Database connection failed", details=str(exc))

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.debug("%s %s -> %s in %.0fms", method, table, response.status_code, elapsed_ms)

        if response.is_error:
            logger.warning("%s on %s returned HTTP %s", action, table, response.status_code)
            raise StoreError(
                f"Database error (HTTP {response.status_code})",
                details=response.text,
                status=response.status_code,
            )
        return response

    async def query(
        self,
        table: str,
        select: str = "*",
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        ascending: bool = False,
        limit: Optional[int] = None,
        timeout_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params = build_query_params(select, filters, order_by, ascending, limit)
        response = await self._send(
            "Query", "GET", table, timeout_ms or self.read_timeout_ms, params=params
        )
        return response.json()

    async def count(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        timeout_ms: Optional[int] = None,
    ) -> int:
        params = build_query_params(filters=filters)
        response = await self._send(
            "Count",
            "HEAD",
            table,
            timeout_ms or self.read_timeout_ms,
            params=params,
            headers={"Prefer": "count=exact"},
        )
        return parse_content_range_total(response.headers.get("content-range"))

    async def insert(
        self, table: str, record: Dict[str, Any], timeout_ms: Optional[int] = None
    ) -> Dict[str, Any]:
        response = await self._send(
            "Insert", "POST", table, timeout_ms or self.write_timeout_ms, json=record
        )
        result = response.json()
        return result[0] if isinstance(result, list) else result

    async def update(
        self,
        table: str,
        record_id: int,
        patch: Dict[str, Any],
        timeout_ms: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        response = await self._send(
            "Update",
            "PATCH",
            table,
            timeout_ms or self.write_timeout_ms,
            params=[("id", f"eq.{record_id}")],
            json=patch,
        )
        result = response.json()
        if isinstance(result, list):
            return result[0] if result else None
        return result

    async def delete(
        self, table: str, record_id: int, timeout_ms: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        response = await self._send(
            "Delete",
            "DELETE",
            table,
            timeout_ms or self.write_timeout_ms,
            params=[("id", f"eq.{record_id}")],
        )
        return response.json() if response.content else []


async def get_rest_client(request: Request) -> RestClient:
    """Get the REST client created at startup"""
    return request.app.state.rest_client
