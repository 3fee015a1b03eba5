from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from orderdesk.core.config import LIST_DEFAULT_LIMIT, LIST_MAX_LIMIT
from orderdesk.core.http import read_json_body
from orderdesk.deps import get_record_store, require_claims
from orderdesk.schemas.records import PRODUCT_ENTITY, ProductListResponse, ProductRecord
from orderdesk.services.access_policy import AccessPolicy, Claims
from orderdesk.services.record_store import RecordStore, build_item
from orderdesk.services.validators import validate_product_create, validate_product_update

router = APIRouter(prefix="/products", tags=["products"])


async def _get_product_or_404(store: RecordStore, product_id: str) -> dict:
    item = await store.get_by_key(product_id)
    if not item or item.get("entity") != PRODUCT_ENTITY:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return item


@router.post("", response_model=ProductRecord, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: Request,
    claims: Claims = Depends(require_claims),
    store: RecordStore = Depends(get_record_store),
):
    AccessPolicy.ensure_can_mutate(claims, None, "create", entity=PRODUCT_ENTITY)
    payload = await read_json_body(request)

    sanitized = await validate_product_create(store, payload)
    item = build_item(PRODUCT_ENTITY, sanitized.to_item(), owner_sub=claims.subject)
    await store.put_record(item)
    return item


@router.get("", response_model=ProductListResponse, response_model_exclude_none=True)
async def list_products(
    limit: int = Query(default=LIST_DEFAULT_LIMIT, ge=1, le=LIST_MAX_LIMIT),
    cursor: Optional[str] = Query(default=None),
    store: RecordStore = Depends(get_record_store),
):
    page = await store.query_by_entity(PRODUCT_ENTITY, limit=limit, cursor=cursor)
    return {"items": page.items, "count": len(page.items), "nextCursor": page.next_cursor}


@router.get("/{product_id}", response_model=ProductRecord, response_model_exclude_none=True)
async def get_product(product_id: str, store: RecordStore = Depends(get_record_store)):
    return await _get_product_or_404(store, product_id)


@router.put("/{product_id}", response_model=ProductRecord, response_model_exclude_none=True)
async def update_product(
    product_id: str,
    request: Request,
    claims: Claims = Depends(require_claims),
    store: RecordStore = Depends(get_record_store),
):
    AccessPolicy.ensure_can_mutate(claims, None, "update", entity=PRODUCT_ENTITY)
    payload = await read_json_body(request)
    existing = await _get_product_or_404(store, product_id)

    patch = await validate_product_update(store, payload, existing)
    return await store.update_fields(product_id, patch.changes())


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    claims: Claims = Depends(require_claims),
    store: RecordStore = Depends(get_record_store),
):
    AccessPolicy.ensure_can_mutate(claims, None, "delete", entity=PRODUCT_ENTITY)

    await _get_product_or_404(store, product_id)
    deleted = await store.delete_by_key(product_id)
    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return {"deleted": True}
