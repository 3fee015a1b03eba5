from orderdesk.services.validators.customers import validate_customer_create, validate_customer_update
from orderdesk.services.validators.orders import validate_order_create, validate_order_update
from orderdesk.services.validators.products import validate_product_create, validate_product_update

__all__ = [
    "validate_customer_create",
    "validate_customer_update",
    "validate_order_create",
    "validate_order_update",
    "validate_product_create",
    "validate_product_update",
]
