"""Storage accessor for the single shared records table.

Every entity lives in the same table keyed by ``id``; ``entity`` and
``created_at`` back the only secondary access path (latest records of one
kind, newest first). Everything else a record carries sits in the JSON
``data`` column, so filters on those attributes are JSON equality checks
evaluated by the database.

Each call opens its own short-lived session. Nothing here is transactional
across calls: a read followed by a write is two independent operations.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional
from uuid import uuid4

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orderdesk.core.database import session_scope
from orderdesk.core.errors import FieldError, RecordNotFoundError
from orderdesk.models.record import Record

logger = logging.getLogger(__name__)

PRIMARY_KEY = "id"
IMMUTABLE_ATTRIBUTES = frozenset({PRIMARY_KEY, "entity", "createdAt"})


@dataclass
class QueryPage:
    items: list[dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[str] = None


def new_record_id() -> str:
    return str(uuid4())


def utc_now_iso() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="microseconds").replace("+00:00", "Z")


def build_item(entity: str, attributes: Mapping[str, Any], *, owner_sub: str | None) -> dict[str, Any]:
    """Attach the server-assigned metadata to a sanitized attribute set."""
    return {
        PRIMARY_KEY: new_record_id(),
        "entity": entity,
        "createdAt": utc_now_iso(),
        "ownerSub": owner_sub,
        **attributes,
    }


def encode_cursor(created_at: str, record_id: str) -> str:
    raw = json.dumps([created_at, record_id], separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_cursor(cursor: str) -> tuple[str, str]:
    try:
        created_at, record_id = json.loads(base64.urlsafe_b64decode(cursor.encode("ascii")))
    except (ValueError, TypeError, UnicodeError) as exc:
        raise FieldError("cursor", "Invalid cursor") from exc
    if not isinstance(created_at, str) or not isinstance(record_id, str):
        raise FieldError("cursor", "Invalid cursor")
    return created_at, record_id


def _to_item(row: Record) -> dict[str, Any]:
    return {
        PRIMARY_KEY: row.id,
        "entity": row.entity,
        "createdAt": row.created_at,
        **(row.data or {}),
    }


def _json_equals(attribute: str, value: Any):
    element = Record.data[attribute]
    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, (int, float)):
        return element.as_float() == float(value)
    return element.as_string() == str(value)


class RecordStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_key(self, record_id: str) -> dict[str, Any] | None:
        async with session_scope(self._session_factory) as session:
            row = await session.get(Record, record_id)
            return _to_item(row) if row is not None else None

    async def put_record(self, item: Mapping[str, Any]) -> None:
        attributes = dict(item)
        record_id = attributes.pop(PRIMARY_KEY)
        entity = attributes.pop("entity")
        created_at = attributes.pop("createdAt")
        async with session_scope(self._session_factory) as session:
            await session.merge(Record(id=record_id, entity=entity, created_at=created_at, data=attributes))
        logger.debug("Stored %s record id=%s", entity, record_id)

    async def update_fields(self, record_id: str, updates: Mapping[str, Any]) -> dict[str, Any]:
        """Merge ``updates`` into the stored record and return the result.

        A ``None`` value is stored as an explicit null, which is how optional
        attributes get cleared.
        """
        forbidden = IMMUTABLE_ATTRIBUTES.intersection(updates)
        if forbidden:
            raise ValueError(f"Immutable attributes cannot be updated: {', '.join(sorted(forbidden))}")

        async with session_scope(self._session_factory) as session:
            row = await session.get(Record, record_id)
            if row is None:
                raise RecordNotFoundError()
            data = dict(row.data or {})
            data.update(updates)
            row.data = data
            await session.flush()
            return _to_item(row)

    async def delete_by_key(self, record_id: str) -> dict[str, Any] | None:
        async with session_scope(self._session_factory) as session:
            row = await session.get(Record, record_id)
            if row is None:
                return None
            item = _to_item(row)
            await session.delete(row)
            return item

    async def query_by_entity(
        self,
        entity: str,
        *,
        filters: Mapping[str, Any] | None = None,
        exclude_id: str | None = None,
        limit: int | None = None,
        cursor: str | None = None,
        newest_first: bool = True,
    ) -> QueryPage:
        if limit is not None and limit < 1:
            raise ValueError("limit must be a positive integer")

        stmt = select(Record).where(Record.entity == entity)
        for attribute, value in (filters or {}).items():
            stmt = stmt.where(_json_equals(attribute, value))
        if exclude_id:
            stmt = stmt.where(Record.id != exclude_id)

        if cursor:
            last_created_at, last_id = decode_cursor(cursor)
            if newest_first:
                stmt = stmt.where(
                    or_(
                        Record.created_at < last_created_at,
                        and_(Record.created_at == last_created_at, Record.id < last_id),
                    )
                )
            else:
                stmt = stmt.where(
                    or_(
                        Record.created_at > last_created_at,
                        and_(Record.created_at == last_created_at, Record.id > last_id),
                    )
                )

        if newest_first:
            stmt = stmt.order_by(Record.created_at.desc(), Record.id.desc())
        else:
            stmt = stmt.order_by(Record.created_at.asc(), Record.id.asc())

        if limit is not None:
            stmt = stmt.limit(limit + 1)

        async with session_scope(self._session_factory) as session:
            rows = list((await session.execute(stmt)).scalars().all())

        next_cursor = None
        if limit is not None and len(rows) > limit:
            rows = rows[:limit]
            last = rows[-1]
            next_cursor = encode_cursor(last.created_at, last.id)

        return QueryPage(items=[_to_item(row) for row in rows], next_cursor=next_cursor)
