"""Order payload validation.

Shape checks for every field run before any lookup, so a malformed payload
never costs a read. The customer reference is resolved first, then all
distinct line-item SKUs concurrently. ``total`` is taken as sent and is not
compared with line-item prices.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from orderdesk.core.errors import FieldError, NoChangeError
from orderdesk.schemas.records import DEFAULT_ORDER_STATUS, LineItem, OrderFields, OrderPatch
from orderdesk.services.integrity import resolve_customer, resolve_products
from orderdesk.services.normalizers import (
    ensure_mapping,
    normalize_amount,
    normalize_optional_text,
    normalize_quantity,
    normalize_sku,
    normalize_status,
    sanitize_string,
)
from orderdesk.services.record_store import PRIMARY_KEY, RecordStore

logger = logging.getLogger(__name__)


def normalize_customer_reference(value: Any, *, required: bool = False) -> str | None:
    """Return the referenced customer id from a ``{"id": ...}`` object."""
    if value is None:
        if required:
            raise FieldError("customer", "Missing: customer")
        return None
    if not isinstance(value, dict):
        raise FieldError("customer", "Invalid customer object")
    customer_id = sanitize_string(value.get("id"))
    if not customer_id:
        raise FieldError("customer.id", "Missing: customer.id")
    return customer_id


def normalize_line_items(value: Any, *, required: bool = False) -> list[LineItem] | None:
    if value is None:
        if required:
            raise FieldError("products", "Missing: products")
        return None
    if not isinstance(value, list) or not value:
        raise FieldError("products", "Products must be a non-empty array")

    seen: set[str] = set()
    items: list[LineItem] = []
    for idx, entry in enumerate(value, start=1):
        if not isinstance(entry, dict):
            raise FieldError("products", f"Product entry #{idx} must be an object")
        sku = normalize_sku(entry.get("sku"))
        if not sku:
            raise FieldError("products", f"Product entry #{idx} is missing sku")
        if sku in seen:
            raise FieldError("products", f"Duplicate sku in products: {sku}")
        qty = normalize_quantity(entry.get("qty"))
        if qty is None:
            raise FieldError("products", f"Product entry #{idx} has an invalid qty")
        seen.add(sku)
        items.append(LineItem(sku=sku, qty=qty))
    return items


async def validate_order_create(store: RecordStore, payload: Any) -> OrderFields:
    payload = ensure_mapping(payload)

    customer_id = normalize_customer_reference(payload.get("customer"), required=True)
    products = normalize_line_items(payload.get("products"), required=True)
    total = normalize_amount(payload.get("total"), field="total", required=True)
    status = normalize_status(payload.get("status")) or DEFAULT_ORDER_STATUS
    notes = normalize_optional_text(payload.get("notes"), field="notes")

    await resolve_customer(store, customer_id)
    await resolve_products(store, [item.sku for item in products])

    return OrderFields(
        customer_id=customer_id,
        products=products,
        product_skus=[item.sku for item in products],
        total=total,
        status=status,
        notes=notes,
    )


async def validate_order_update(
    store: RecordStore,
    payload: Any,
    current: Mapping[str, Any] | None = None,
) -> OrderPatch:
    payload = ensure_mapping(payload)

    updates: dict[str, Any] = {}
    if "customer" in payload:
        updates["customer_id"] = normalize_customer_reference(payload["customer"], required=True)
    if "products" in payload:
        # a lista inteira e substituida, nunca item a item
        products = normalize_line_items(payload["products"], required=True)
        updates["products"] = products
        updates["product_skus"] = [item.sku for item in products]
    if "total" in payload:
        updates["total"] = normalize_amount(payload["total"], field="total", required=True)
    if "status" in payload:
        updates["status"] = normalize_status(payload["status"], required=True)
    if "notes" in payload:
        updates["notes"] = normalize_optional_text(payload["notes"], field="notes")

    if not updates:
        raise NoChangeError()

    if "customer_id" in updates:
        await resolve_customer(store, updates["customer_id"])
    if "product_skus" in updates:
        await resolve_products(store, updates["product_skus"])

    logger.debug("Order update id=%s fields=%s", (current or {}).get(PRIMARY_KEY), sorted(updates))
    return OrderPatch(**updates)
