"""Cross-record checks: uniqueness of constrained fields and reference lookups.

Both run as plain reads before the caller writes. Two requests racing on the
same email or SKU can both pass ``ensure_unique`` and both write.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

from orderdesk.core.config import PRODUCT_SCAN_PAGE_SIZE
from orderdesk.core.errors import ConflictError, ReferenceNotFoundError
from orderdesk.schemas.records import CUSTOMER_ENTITY, PRODUCT_ENTITY
from orderdesk.services.record_store import RecordStore

logger = logging.getLogger(__name__)


async def ensure_unique(
    store: RecordStore,
    entity: str,
    field: str,
    value: Any,
    *,
    exclude_id: str | None = None,
) -> None:
    page = await store.query_by_entity(entity, filters={field: value}, exclude_id=exclude_id, limit=1)
    if page.items:
        logger.info(
            "Uniqueness conflict entity=%s field=%s existing_id=%s",
            entity,
            field,
            page.items[0].get("id"),
        )
        raise ConflictError(entity.lower(), field, value)


async def resolve_customer(store: RecordStore, customer_id: str) -> dict[str, Any]:
    item = await store.get_by_key(customer_id)
    if not item or item.get("entity") != CUSTOMER_ENTITY:
        logger.info("Customer reference not found id=%s", customer_id)
        raise ReferenceNotFoundError("customer", customer_id)
    return item


async def resolve_product_by_sku(
    store: RecordStore,
    sku: str,
    *,
    page_size: int = PRODUCT_SCAN_PAGE_SIZE,
) -> dict[str, Any]:
    # Sem indice por SKU: percorre a particao PRODUCT pagina a pagina.
    cursor = None
    while True:
        page = await store.query_by_entity(
            PRODUCT_ENTITY,
            filters={"sku": sku},
            limit=page_size,
            cursor=cursor,
        )
        if page.items:
            return page.items[0]
        cursor = page.next_cursor
        if not cursor:
            break

    logger.info("Product reference not found sku=%s", sku)
    raise ReferenceNotFoundError("product", sku, f"Product not found for sku {sku}")


async def resolve_products(store: RecordStore, skus: Iterable[str]) -> list[dict[str, Any]]:
    """Resolve every distinct SKU concurrently; the first failure wins."""
    distinct = list(dict.fromkeys(skus))
    tasks = [asyncio.ensure_future(resolve_product_by_sku(store, sku)) for sku in distinct]
    try:
        return list(await asyncio.gather(*tasks))
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
