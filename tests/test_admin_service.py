# tests/test_admin_service.py
import pytest
from fastapi import HTTPException

from app.schemas.order import TrackingUpdate
from app.schemas.user import ShippingAddress

ADMIN_EMAIL = "admin@example.com"
CUSTOMER_ID = "c0000000-0000-0000-0000-000000000002"


@pytest.fixture
def admin(storefront, client):
    client.auth.add_account(ADMIN_EMAIL, "admin-pass", "a0000000-0000-0000-0000-000000000001")
    client.rpc_results["is_admin"] = True
    assert storefront.gate.admin_login(ADMIN_EMAIL, "admin-pass").success
    client.tables["admin_orders"] = [
        {"order_id": 1, "user_id": CUSTOMER_ID, "amount_total": 2950, "currency": "eur", "order_date": "2026-04-01T09:00:00+00:00"},
        {"order_id": 2, "user_id": "someone-else", "amount_total": 6950, "currency": "eur", "order_date": "2026-05-01T09:00:00+00:00"},
    ]
    client.tables["admin_customers"] = [
        {"user_id": CUSTOMER_ID, "email": "c@example.com", "total_orders": 1, "total_spent": 2950},
    ]
    client.tables["order_tracking"] = [{"order_id": "1", "status": "pending"}]
    return storefront.admin


def test_non_admin_is_rejected(storefront, client):
    client.tables["admin_orders"] = []
    with pytest.raises(HTTPException) as exc_info:
        storefront.admin.list_orders()
    assert exc_info.value.status_code == 403
    assert client.calls_to("admin_orders", "select") == []


def test_list_orders_newest_first(admin):
    orders = admin.list_orders()
    assert [o.order_id for o in orders] == ["2", "1"]


def test_every_call_rechecks_privilege(admin, client):
    admin.list_orders()
    admin.list_customers()
    assert len(client.calls_to("rpc", "is_admin")) == 3  # login + 2 calls


def test_revoked_admin_is_signed_out(admin, storefront, client):
    client.rpc_results["is_admin"] = False

    with pytest.raises(HTTPException) as exc_info:
        admin.list_orders()

    assert exc_info.value.status_code == 403
    assert not storefront.gate.is_admin
    assert client.auth.session is None


def test_update_shipping_status_any_transition(admin, client):
    admin.update_shipping_status("1", "delivered")
    admin.update_shipping_status("1", "pending")

    assert client.tables["order_tracking"][0]["status"] == "pending"


def test_update_tracking_marks_shipped(admin, client):
    admin.update_tracking("1", TrackingUpdate(tracking_number="6A123", carrier="Colissimo"))

    row = client.tables["order_tracking"][0]
    assert row["status"] == "shipped"
    assert row["tracking_number"] == "6A123"
    assert row["carrier"] == "Colissimo"


def test_update_tracking_upstream_failure(admin, client):
    client.failing_tables.add("order_tracking")
    with pytest.raises(HTTPException) as exc_info:
        admin.update_tracking("1", TrackingUpdate(tracking_number="x", carrier="y"))
    assert exc_info.value.status_code == 502


def test_get_customer_detail(admin, client):
    client.tables["user_profiles"] = [
        {"id": CUSTOMER_ID, "shipping_address": {"line1": "1 rue A", "postal_code": "69001", "city": "Lyon"}},
    ]

    detail = admin.get_customer(CUSTOMER_ID)

    assert detail.email == "c@example.com"
    assert detail.shipping_address.city == "Lyon"
    assert [o.order_id for o in detail.orders] == ["1"]


def test_get_unknown_customer(admin):
    with pytest.raises(HTTPException) as exc_info:
        admin.get_customer("nobody")
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Client non trouvé"


def test_update_customer_address(admin, client):
    address = ShippingAddress(line1=" 3 quai B ", postal_code="33000", city="Bordeaux")

    admin.update_customer_address(CUSTOMER_ID, address)

    [row] = client.tables["user_profiles"]
    assert row["id"] == CUSTOMER_ID
    assert row["shipping_address"]["line1"] == "3 quai B"


def test_admin_amounts_in_euros(admin, client):
    client.tables["user_profiles"] = []

    orders = admin.list_orders()
    [customer] = admin.list_customers()
    detail = admin.get_customer(CUSTOMER_ID)

    assert [o.amount_total for o in orders] == [69.50, 29.50]
    assert customer.total_spent == 29.50
    assert detail.total_spent == 29.50
    assert detail.orders[0].amount_total == 29.50
