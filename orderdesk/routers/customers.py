from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response

from orderdesk.core.config import LIST_DEFAULT_LIMIT, LIST_MAX_LIMIT
from orderdesk.core.http import read_json_body
from orderdesk.deps import get_record_store, require_claims
from orderdesk.schemas.records import CUSTOMER_ENTITY, CustomerListResponse, CustomerRecord
from orderdesk.services.access_policy import AccessPolicy, Claims
from orderdesk.services.record_store import RecordStore, build_item
from orderdesk.services.validators import validate_customer_create, validate_customer_update

router = APIRouter(prefix="/customers", tags=["customers"])


async def _get_customer_or_404(store: RecordStore, customer_id: str) -> dict:
    item = await store.get_by_key(customer_id)
    if not item or item.get("entity") != CUSTOMER_ENTITY:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return item


@router.post("", response_model=CustomerRecord, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_customer(
    request: Request,
    claims: Claims = Depends(require_claims),
    store: RecordStore = Depends(get_record_store),
):
    payload = await read_json_body(request)
    AccessPolicy.ensure_can_mutate(claims, None, "create", entity=CUSTOMER_ENTITY)

    sanitized = await validate_customer_create(store, payload)
    item = build_item(CUSTOMER_ENTITY, sanitized.to_item(), owner_sub=claims.subject)
    await store.put_record(item)
    return item


@router.get("", response_model=CustomerListResponse, response_model_exclude_none=True)
async def list_customers(
    limit: int = Query(default=LIST_DEFAULT_LIMIT, ge=1, le=LIST_MAX_LIMIT),
    cursor: Optional[str] = Query(default=None),
    store: RecordStore = Depends(get_record_store),
):
    page = await store.query_by_entity(CUSTOMER_ENTITY, limit=limit, cursor=cursor)
    return {"items": page.items, "count": len(page.items), "nextCursor": page.next_cursor}


@router.get("/{customer_id}", response_model=CustomerRecord, response_model_exclude_none=True)
async def get_customer(customer_id: str, store: RecordStore = Depends(get_record_store)):
    return await _get_customer_or_404(store, customer_id)


@router.put("/{customer_id}", response_model=CustomerRecord, response_model_exclude_none=True)
async def update_customer(
    customer_id: str,
    request: Request,
    claims: Claims = Depends(require_claims),
    store: RecordStore = Depends(get_record_store),
):
    payload = await read_json_body(request)
    existing = await _get_customer_or_404(store, customer_id)
    AccessPolicy.ensure_can_mutate(claims, existing, "update")

    patch = await validate_customer_update(store, payload, existing)
    return await store.update_fields(customer_id, patch.changes())


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: str,
    claims: Claims = Depends(require_claims),
    store: RecordStore = Depends(get_record_store),
):
    AccessPolicy.ensure_can_mutate(claims, None, "delete", entity=CUSTOMER_ENTITY)

    existing = await _get_customer_or_404(store, customer_id)
    await store.delete_by_key(existing["id"])
    return Response(status_code=status.HTTP_204_NO_CONTENT)
