import pytest

from orderdesk.core.errors import AuthorizationError
from orderdesk.schemas.records import CUSTOMER_ENTITY, ORDER_ENTITY, PRODUCT_ENTITY
from orderdesk.services.access_policy import AccessPolicy, Claims, can_mutate
from tests.fixtures_data import ADMIN_SUB, EXISTING_CUSTOMER, EXISTING_ORDER, EXISTING_PRODUCT, OTHER_SUB, OWNER_SUB

ADMIN = Claims(subject=ADMIN_SUB, groups=frozenset({"admin"}))
OWNER = Claims(subject=OWNER_SUB)
STRANGER = Claims(subject=OTHER_SUB, groups=frozenset({"staff"}))
ANONYMOUS = Claims()


def test_claims_from_token_payload_accepts_comma_separated_groups():
    claims = Claims.from_token_payload({"sub": "abc", "cognito:groups": "admin, staff"})

    assert claims.subject == "abc"
    assert claims.groups == frozenset({"admin", "staff"})
    assert Claims.from_token_payload({"sub": "abc", "groups": ["admin"]}).groups == frozenset({"admin"})
    assert Claims.from_token_payload({}).subject is None


@pytest.mark.parametrize("action", ["create", "update", "delete"])
def test_products_are_admin_only(action):
    record = None if action == "create" else EXISTING_PRODUCT

    assert can_mutate(ADMIN, record, action, entity=PRODUCT_ENTITY) is True
    assert can_mutate(STRANGER, record, action, entity=PRODUCT_ENTITY) is False
    assert can_mutate(Claims(subject=ADMIN_SUB), EXISTING_PRODUCT, action) is False


def test_customer_update_allowed_for_owner_or_admin():
    assert can_mutate(OWNER, EXISTING_CUSTOMER, "update") is True
    assert can_mutate(ADMIN, EXISTING_CUSTOMER, "update") is True
    assert can_mutate(STRANGER, EXISTING_CUSTOMER, "update") is False


def test_stranger_update_raises_authorization_error():
    with pytest.raises(AuthorizationError) as exc:
        AccessPolicy.ensure_can_mutate(STRANGER, EXISTING_CUSTOMER, "update")

    assert exc.value.status_code == 403
    assert exc.value.message == "Not allowed to update this customer"


def test_record_without_owner_is_not_owned_by_anyone():
    record = dict(EXISTING_CUSTOMER, ownerSub=None)

    assert can_mutate(OWNER, record, "update") is False
    assert can_mutate(ANONYMOUS, record, "update") is False


@pytest.mark.parametrize("entity,record", [(CUSTOMER_ENTITY, EXISTING_CUSTOMER), (ORDER_ENTITY, EXISTING_ORDER)])
def test_delete_requires_admin_even_for_owner(entity, record):
    assert can_mutate(OWNER, record, "delete") is False
    assert can_mutate(ADMIN, record, "delete") is True
    with pytest.raises(AuthorizationError, match=f"Only admin can delete {entity.lower()}s"):
        AccessPolicy.ensure_can_mutate(OWNER, record, "delete")


@pytest.mark.parametrize("entity", [CUSTOMER_ENTITY, ORDER_ENTITY])
def test_create_requires_identity_only(entity):
    assert can_mutate(STRANGER, None, "create", entity=entity) is True
    assert can_mutate(ANONYMOUS, None, "create", entity=entity) is False


def test_order_update_owner_or_admin():
    assert can_mutate(OWNER, EXISTING_ORDER, "update") is True
    assert can_mutate(STRANGER, EXISTING_ORDER, "update") is False


def test_unknown_action_is_rejected():
    with pytest.raises(ValueError):
        can_mutate(ADMIN, EXISTING_ORDER, "archive")
