# tests/test_routers.py
import anyio
import pytest
from fastapi.testclient import TestClient

from app.core.auth import get_storefront
from app.main import app
from app.routers.orders import connection_alive
from app.schemas.cart import CartItemCreate
from tests.conftest import USER_EMAIL

API = "/api/v1"


@pytest.fixture
def api(storefront):
    # No lifespan: the storefront comes from the fixtures
    app.dependency_overrides[get_storefront] = lambda: storefront
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def customer_api(api):
    response = api.post(f"{API}/auth/sign-in", json={"email": USER_EMAIL, "password": "secret"})
    assert response.json()["success"] is True
    return api


def test_health(api):
    assert api.get("/").json()["status"] == "ok"


def test_cart_flow(api):
    assert api.get(f"{API}/cart").json() == {"items": [], "item_count": 0, "total": 0.0}

    api.post(f"{API}/cart", json={"id": "p1", "title": "Pack", "quantity": 1})
    body = api.post(f"{API}/cart", json={"id": "p1", "title": "Pack", "quantity": 2}).json()
    assert body["items"][0]["quantity"] == 3
    assert body["total"] == 69.50

    body = api.patch(f"{API}/cart/p1", json={"quantity": 1}).json()
    assert body["total"] == 29.50

    body = api.delete(f"{API}/cart/p1").json()
    assert body["item_count"] == 0


def test_cart_rejects_caller_price(api):
    body = api.post(
        f"{API}/cart",
        json={"id": "p1", "title": "Pack", "quantity": 1, "price": 0.01},
    ).json()
    assert body["items"][0]["price"] == 29.50


def test_remove_unknown_cart_item(api):
    response = api.delete(f"{API}/cart/nope")
    assert response.status_code == 404
    assert response.json()["detail"] == "Article introuvable dans le panier"


def test_clear_cart(api):
    api.post(f"{API}/cart", json={"id": "p1", "title": "Pack"})
    assert api.delete(f"{API}/cart").json()["item_count"] == 0


def test_session_endpoints(api):
    assert api.get(f"{API}/auth/session").json()["is_authenticated"] is False

    bad = api.post(f"{API}/auth/sign-in", json={"email": USER_EMAIL, "password": "wrong"})
    assert bad.status_code == 200
    assert bad.json() == {"success": False, "message": "Email ou mot de passe incorrect"}

    api.post(f"{API}/auth/sign-in", json={"email": USER_EMAIL, "password": "secret"})
    assert api.get(f"{API}/auth/session").json()["user"]["email"] == USER_EMAIL

    state = api.post(f"{API}/auth/sign-out").json()
    assert state["is_authenticated"] is False


def test_sign_in_validates_email(api):
    response = api.post(f"{API}/auth/sign-in", json={"email": "not-an-email", "password": "x"})
    assert response.status_code == 422


def test_account_requires_sign_in(api):
    response = api.get(f"{API}/account/me")
    assert response.status_code == 401


def test_account_address(customer_api):
    response = customer_api.put(
        f"{API}/account/me/address",
        json={"line1": "12 rue des Lilas", "postal_code": "75011", "city": "Paris"},
    )
    assert response.status_code == 200

    profile = customer_api.get(f"{API}/account/me").json()
    assert profile["shipping_address"]["city"] == "Paris"
    assert profile["shipping_address"]["country"] == "FR"


def test_account_address_rejects_blank_fields(customer_api):
    response = customer_api.put(
        f"{API}/account/me/address",
        json={"line1": "   ", "postal_code": "75011", "city": "Paris"},
    )
    assert response.status_code == 422


def test_customize_form_and_prompt(api):
    assert len(api.get(f"{API}/customize/colors").json()) == 24

    form = api.patch(f"{API}/customize/form", json={"title": "SUPER MAMAN"}).json()
    assert form["title"] == "SUPER MAMAN"

    prompt = api.get(f"{API}/customize/prompt").json()
    assert "SUPER MAMAN" in prompt["prompt"]

    assert api.delete(f"{API}/customize/form").json()["title"] == ""


def test_design_upload_requires_sign_in(api):
    response = api.post(
        f"{API}/customize/design",
        files={"file": ("design.png", b"\x89PNG", "image/png")},
    )
    assert response.status_code == 401


def test_design_upload_rejects_non_images(customer_api):
    response = customer_api.post(
        f"{API}/customize/design",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400


def test_design_upload_adds_pack(customer_api, client):
    response = customer_api.post(
        f"{API}/customize/design",
        files={"file": ("design.png", b"\x89PNG", "image/png")},
        data={"image_url": "https://img.example.com/d.png"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["item_count"] == 1
    assert body["items"][0]["image_url"] == "https://img.example.com/d.png"
    assert len(client.uploads) == 1


def test_checkout_as_guest(api):
    response = api.post(f"{API}/checkout", json={})
    assert response.status_code == 401


def test_checkout_redirect(customer_api):
    customer_api.post(f"{API}/cart", json={"id": "p1", "title": "Pack"})

    response = customer_api.post(
        f"{API}/checkout",
        json={"shipping_address": {"line1": "1 rue A", "postal_code": "69001", "city": "Lyon"}},
    )

    assert response.status_code == 200
    assert response.json()["url"].startswith("https://checkout.stripe.com/")


def test_order_success_without_session_id(customer_api):
    assert customer_api.get(f"{API}/orders/success").status_code == 400


def test_my_orders(customer_api):
    assert customer_api.get(f"{API}/orders/me").json() == []


def test_admin_routes_reject_customers(customer_api):
    assert customer_api.get(f"{API}/admin/orders").status_code == 403
    assert customer_api.get(f"{API}/auth/admin/me").status_code == 403


def test_admin_sign_in_denied(api, client):
    response = api.post(f"{API}/auth/admin/sign-in", json={"email": USER_EMAIL, "password": "secret"})
    assert response.json() == {"success": False, "message": "Accès non autorisé"}
    assert client.auth.session is None


def test_admin_shipping_status(api, client):
    client.rpc_results["is_admin"] = True
    api.post(f"{API}/auth/admin/sign-in", json={"email": USER_EMAIL, "password": "secret"})

    response = api.patch(f"{API}/admin/orders/7/shipping-status", json={"status": "delivered"})
    assert response.json() == {"status": "delivered"}

    response = api.patch(f"{API}/admin/orders/7/shipping-status", json={"status": "lost"})
    assert response.status_code == 422


def test_order_success_clears_cart(customer_api, client, storefront):
    customer_api.post(f"{API}/cart", json={"id": "p1", "title": "Pack"})
    client.tables["stripe_orders"] = [
        {"id": 42, "checkout_session_id": "cs_test_1", "amount_total": 2950, "currency": "eur"},
    ]

    response = customer_api.get(f"{API}/orders/success", params={"session_id": "cs_test_1"})

    assert response.status_code == 200
    assert response.json()["order_id"] == "42"
    assert response.json()["amount_total"] == 29.50
    assert storefront.cart.items == []


class _Request:
    def __init__(self, disconnected: bool):
        self.disconnected = disconnected

    async def is_disconnected(self) -> bool:
        return self.disconnected


@pytest.mark.parametrize("disconnected", [False, True])
def test_connection_alive_reports_disconnect(disconnected):
    is_alive = connection_alive(_Request(disconnected))

    async def check():
        return await anyio.to_thread.run_sync(is_alive)

    assert anyio.run(check) is (not disconnected)


def test_abandoned_success_page_keeps_cart(storefront, sleeps):
    storefront.gate.sign_in(USER_EMAIL, "secret")
    storefront.cart.add_item(CartItemCreate(id="p1", title="Pack"))
    is_alive = connection_alive(_Request(disconnected=True))

    async def confirm():
        return await anyio.to_thread.run_sync(
            lambda: storefront.orders.confirm_checkout("cs_missing", is_alive=is_alive)
        )

    assert anyio.run(confirm) is None
    assert sleeps == [2.0]
    assert [i.id for i in storefront.cart.items] == ["p1"]
