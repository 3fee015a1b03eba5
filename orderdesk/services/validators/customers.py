from __future__ import annotations

import logging
from typing import Any, Mapping

from orderdesk.core.errors import NoChangeError
from orderdesk.schemas.records import CUSTOMER_ENTITY, CustomerFields, CustomerPatch
from orderdesk.services.integrity import ensure_unique
from orderdesk.services.normalizers import (
    ensure_mapping,
    normalize_boolean,
    normalize_email,
    normalize_optional_text,
    normalize_string,
    sanitize_string,
)
from orderdesk.services.record_store import PRIMARY_KEY, RecordStore

logger = logging.getLogger(__name__)


async def validate_customer_create(store: RecordStore, payload: Any) -> CustomerFields:
    payload = ensure_mapping(payload)

    fields = CustomerFields(
        name=normalize_string(payload.get("name"), field="name", required=True),
        email=normalize_email(payload.get("email"), required=True),
        phone=normalize_optional_text(payload.get("phone"), field="phone"),
        address=normalize_optional_text(payload.get("address"), field="address"),
        active=normalize_boolean(payload.get("active"), default=True),
    )

    await ensure_unique(store, CUSTOMER_ENTITY, "email", fields.email)
    return fields


async def validate_customer_update(
    store: RecordStore,
    payload: Any,
    current: Mapping[str, Any] | None,
) -> CustomerPatch:
    payload = ensure_mapping(payload)
    current = current or {}

    updates: dict[str, Any] = {}
    if "name" in payload:
        updates["name"] = normalize_string(payload["name"], field="name", required=True)
    if "email" in payload:
        updates["email"] = normalize_email(payload["email"], required=True)
    # phone/address aceitam null para limpar o campo
    if "phone" in payload:
        updates["phone"] = normalize_optional_text(payload["phone"], field="phone")
    if "address" in payload:
        updates["address"] = normalize_optional_text(payload["address"], field="address")
    if "active" in payload:
        updates["active"] = normalize_boolean(payload["active"], required=True)

    if not updates:
        raise NoChangeError()

    if "email" in updates:
        current_email = sanitize_string(current.get("email")).lower()
        if updates["email"] != current_email:
            await ensure_unique(
                store,
                CUSTOMER_ENTITY,
                "email",
                updates["email"],
                exclude_id=current.get(PRIMARY_KEY),
            )

    logger.debug("Customer update id=%s fields=%s", current.get(PRIMARY_KEY), sorted(updates))
    return CustomerPatch(**updates)
