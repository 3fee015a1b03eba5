from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

CUSTOMER_ENTITY = "CUSTOMER"
PRODUCT_ENTITY = "PRODUCT"
ORDER_ENTITY = "ORDER"

ORDER_STATUSES = ("NEW", "PAID", "CANCELLED")
DEFAULT_ORDER_STATUS = "NEW"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_item(self) -> dict[str, Any]:
        # opcionais ausentes nao sao gravados como null
        return self.model_dump(by_alias=True, exclude_none=True)


class _Patch(_WireModel):
    """Only the attributes explicitly assigned are part of the update."""

    def changes(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


# =========================
# Sanitized attribute sets (create path)
# =========================
class CustomerFields(_WireModel):
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    active: bool = True


class ProductFields(_WireModel):
    name: str
    price: float
    sku: str
    description: Optional[str] = None
    active: bool = True


class LineItem(_WireModel):
    sku: str
    qty: int


class OrderFields(_WireModel):
    customer_id: str
    products: list[LineItem]
    product_skus: list[str]
    total: float
    status: Literal["NEW", "PAID", "CANCELLED"] = DEFAULT_ORDER_STATUS
    notes: Optional[str] = None


# =========================
# Partial updates (update path)
# =========================
class CustomerPatch(_Patch):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    active: Optional[bool] = None


class ProductPatch(_Patch):
    name: Optional[str] = None
    price: Optional[float] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    active: Optional[bool] = None


class OrderPatch(_Patch):
    customer_id: Optional[str] = None
    products: Optional[list[LineItem]] = None
    product_skus: Optional[list[str]] = None
    total: Optional[float] = None
    status: Optional[Literal["NEW", "PAID", "CANCELLED"]] = None
    notes: Optional[str] = None


# =========================
# Stored records (tagged by entity)
# =========================
class _RecordMeta(_WireModel):
    id: str
    created_at: str
    owner_sub: Optional[str] = None


class CustomerRecord(_RecordMeta, CustomerFields):
    entity: Literal["CUSTOMER"] = CUSTOMER_ENTITY


class ProductRecord(_RecordMeta, ProductFields):
    entity: Literal["PRODUCT"] = PRODUCT_ENTITY


class OrderRecord(_RecordMeta, OrderFields):
    entity: Literal["ORDER"] = ORDER_ENTITY


class CustomerListResponse(_WireModel):
    items: list[CustomerRecord]
    count: int
    next_cursor: Optional[str] = None


class ProductListResponse(_WireModel):
    items: list[ProductRecord]
    count: int
    next_cursor: Optional[str] = None


class OrderListResponse(_WireModel):
    items: list[OrderRecord]
    count: int
    next_cursor: Optional[str] = None
