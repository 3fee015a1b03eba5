from __future__ import annotations

from typing import Any, Mapping

from orderdesk.core.errors import NoChangeError
from orderdesk.schemas.records import PRODUCT_ENTITY, ProductFields, ProductPatch
from orderdesk.services.integrity import ensure_unique
from orderdesk.services.normalizers import (
    ensure_mapping,
    normalize_amount,
    normalize_boolean,
    normalize_optional_text,
    normalize_sku,
    normalize_string,
    sanitize_string,
)
from orderdesk.services.record_store import PRIMARY_KEY, RecordStore


async def validate_product_create(store: RecordStore, payload: Any) -> ProductFields:
    payload = ensure_mapping(payload)

    fields = ProductFields(
        name=normalize_string(payload.get("name"), field="name", required=True),
        price=normalize_amount(payload.get("price"), field="price", required=True),
        sku=normalize_sku(payload.get("sku"), required=True),
        description=normalize_optional_text(payload.get("description"), field="description"),
        active=normalize_boolean(payload.get("active"), default=True),
    )

    await ensure_unique(store, PRODUCT_ENTITY, "sku", fields.sku)
    return fields


async def validate_product_update(
    store: RecordStore,
    payload: Any,
    current: Mapping[str, Any] | None,
) -> ProductPatch:
    payload = ensure_mapping(payload)
    current = current or {}

    updates: dict[str, Any] = {}
    if "name" in payload:
        updates["name"] = normalize_string(payload["name"], field="name", required=True)
    if "price" in payload:
        updates["price"] = normalize_amount(payload["price"], field="price", required=True)
    if "sku" in payload:
        updates["sku"] = normalize_sku(payload["sku"], required=True)
    if "description" in payload:
        updates["description"] = normalize_optional_text(payload["description"], field="description")
    if "active" in payload:
        updates["active"] = normalize_boolean(payload["active"], required=True)

    if not updates:
        raise NoChangeError()

    if "sku" in updates:
        current_sku = sanitize_string(current.get("sku")).upper()
        if updates["sku"] != current_sku:
            await ensure_unique(
                store,
                PRODUCT_ENTITY,
                "sku",
                updates["sku"],
                exclude_id=current.get(PRIMARY_KEY),
            )

    return ProductPatch(**updates)
