"""
Ownership-scoped data access shared by the resource endpoints.

Every read is filtered by ``user_id`` on the server and filtered again here,
so a filter bug on either side cannot leak another user's rows. Single-row
operations look the row up by id AND owner first; a miss is reported as
``NotFoundOrDenied`` whether the row is absent or belongs to someone else.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.errors import NotFoundOrDenied
from app.core.rest_client import RestClient


def utc_now() -> str:
    """Current UTC time as ISO 8601, for timestamp columns written by the app"""
    return datetime.now(timezone.utc).isoformat()


def owned_only(records: List[Dict[str, Any]], user_id: int) -> List[Dict[str, Any]]:
    return [record for record in records if record.get("user_id") == user_id]


async def list_owned(
    rest: RestClient,
    table: str,
    user_id: int,
    filters: Optional[Dict[str, Any]] = None,
    order_by: Optional[str] = "created_at",
    ascending: bool = False,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    scoped = dict(filters or {})
    scoped["user_id"] = user_id
    records = await rest.query(
        table, filters=scoped, order_by=order_by, ascending=ascending, limit=limit
    )
    return owned_only(records, user_id)


async def get_owned(
    rest: RestClient,
    table: str,
    record_id: int,
    user_id: int,
    filters: Optional[Dict[str, Any]] = None,
    label: str = "Record",
) -> Dict[str, Any]:
    scoped = dict(filters or {})
    scoped.update({"id": record_id, "user_id": user_id})
    rows = owned_only(await rest.query(table, filters=scoped, limit=1), user_id)
    if not rows:
        raise NotFoundOrDenied(f"{label} not found or access denied")
    return rows[0]


async def create_owned(
    rest: RestClient, table: str, user_id: int, record: Dict[str, Any]
) -> Dict[str, Any]:
    return await rest.insert(table, {**record, "user_id": user_id})


async def update_owned(
    rest: RestClient,
    table: str,
    record_id: int,
    user_id: int,
    patch: Dict[str, Any],
    filters: Optional[Dict[str, Any]] = None,
    label: str = "Record",
) -> Dict[str, Any]:
    await get_owned(rest, table, record_id, user_id, filters=filters, label=label)
    updated = await rest.update(table, record_id, patch)
    if updated is None:
        raise NotFoundOrDenied(f"{label} not found or access denied")
    return updated


async def delete_owned(
    rest: RestClient,
    table: str,
    record_id: int,
    user_id: int,
    filters: Optional[Dict[str, Any]] = None,
    label: str = "Record",
) -> Dict[str, Any]:
    """Hard delete; returns the row as it was before deletion"""
    record = await get_owned(rest, table, record_id, user_id, filters=filters, label=label)
    await rest.delete(table, record_id)
    return record
