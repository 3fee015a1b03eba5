from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from orderdesk.core.config import ADMIN_GROUP
from orderdesk.core.errors import AuthorizationError
from orderdesk.schemas.records import CUSTOMER_ENTITY, ORDER_ENTITY, PRODUCT_ENTITY

logger = logging.getLogger(__name__)

ACTIONS = ("create", "update", "delete")


@dataclass(frozen=True)
class Claims:
    subject: str | None = None
    groups: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_token_payload(cls, payload: Mapping[str, Any]) -> "Claims":
        raw_groups = payload.get("cognito:groups", payload.get("groups"))
        if isinstance(raw_groups, str):
            groups: Iterable[str] = raw_groups.split(",")
        elif isinstance(raw_groups, (list, tuple, set, frozenset)):
            groups = raw_groups
        else:
            groups = ()
        subject = payload.get("sub")
        return cls(
            subject=str(subject) if subject not in (None, "") else None,
            groups=frozenset(str(group).strip() for group in groups if str(group).strip()),
        )


class AccessPolicy:
    """Decide whether a caller may mutate a record.

    Products are admin-only. Customers and orders can be created by any
    identified caller, updated by their owner or an admin, and deleted by
    admins only.
    """

    @staticmethod
    def is_admin(claims: Claims) -> bool:
        return ADMIN_GROUP in claims.groups

    @staticmethod
    def is_owner(claims: Claims, record: Mapping[str, Any] | None) -> bool:
        owner_sub = (record or {}).get("ownerSub")
        return bool(owner_sub) and bool(claims.subject) and owner_sub == claims.subject

    @classmethod
    def can_mutate(
        cls,
        claims: Claims,
        record: Mapping[str, Any] | None,
        action: str,
        *,
        entity: str | None = None,
    ) -> bool:
        if action not in ACTIONS:
            raise ValueError(f"Unknown action: {action}")
        entity = entity or (record or {}).get("entity")

        if entity == PRODUCT_ENTITY:
            return cls.is_admin(claims)
        if entity not in (CUSTOMER_ENTITY, ORDER_ENTITY):
            return False
        if action == "create":
            return bool(claims.subject)
        if action == "delete":
            return cls.is_admin(claims)
        return cls.is_admin(claims) or cls.is_owner(claims, record)

    @classmethod
    def ensure_can_mutate(
        cls,
        claims: Claims,
        record: Mapping[str, Any] | None,
        action: str,
        *,
        entity: str | None = None,
    ) -> None:
        if cls.can_mutate(claims, record, action, entity=entity):
            return
        resolved_entity = entity or (record or {}).get("entity")
        logger.warning(
            "Access denied (%s): subject=%s entity=%s record_id=%s",
            action,
            claims.subject,
            resolved_entity,
            (record or {}).get("id"),
        )
        raise AuthorizationError(cls._denial_message(resolved_entity, action))

    @staticmethod
    def _denial_message(entity: str | None, action: str) -> str:
        label = (entity or "record").lower()
        if action == "create" and entity != PRODUCT_ENTITY:
            return "Authenticated caller required"
        if action in ("create", "delete") or entity == PRODUCT_ENTITY:
            return f"Only admin can {action} {label}s"
        return f"Not allowed to {action} this {label}"


def can_mutate(claims: Claims, record: Mapping[str, Any] | None, action: str, *, entity: str | None = None) -> bool:
    return AccessPolicy.can_mutate(claims, record, action, entity=entity)
