"""Integration tests for the GameZone HTTP API."""

import pytest
from fastapi.testclient import TestClient
from gamezone.api.app import create_app

SHIPPING = {
    "name": "Arjun Mehta",
    "phone": "9876543210",
    "street": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


@pytest.fixture
def client(services):
    return TestClient(create_app(services))


def _register(client, email="arjun@example.com", phone="9876543210"):
    response = client.post(
        "/auth/register",
        json={"name": "Arjun Mehta", "email": email, "phone": phone, "password": "secret123"},
    )
    assert response.status_code == 201, response.text
    return response.json()


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(client):
    return _bearer(_register(client)["token"])


@pytest.fixture
def other_headers(client):
    return _bearer(_register(client, email="meera@example.com", phone="9000000002")["token"])


@pytest.fixture
def staff_headers(client, services):
    """Headers for a registered account with the given role."""

    def _headers(role):
        services.accounts.register(
            name=f"{role.title()} Account",
            email=f"{role}@gamezone.com",
            phone=f"99999{len(role):05d}",
            password="staff123",
            role=role,
        )
        response = client.post("/auth/login", json={"email": f"{role}@gamezone.com", "password": "staff123"})
        return _bearer(response.json()["token"])

    return _headers


@pytest.fixture
def product_id(client, staff_headers):
    response = client.post(
        "/products",
        json={
            "name": "Spider-Man 2",
            "description": "Swing through New York",
            "price": 2499,
            "originalPrice": 3999,
            "platform": "ps5",
            "condition": "excellent",
            "stock": 1,
            "tags": ["action"],
        },
        headers=staff_headers("seller"),
    )
    assert response.status_code == 201, response.text
    return response.json()["product"]["id"]


def _place(client, headers, product_id, quantity=1, **extra_headers):
    client.post("/cart/add", json={"productId": product_id, "quantity": quantity}, headers=headers)
    return client.post(
        "/orders/place",
        json={"shippingAddress": SHIPPING, "paymentMethod": "cod"},
        headers={**headers, **extra_headers},
    )


@pytest.mark.fast
class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "domain": "gamezone"}

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestAuth:
    def test_register(self, client):
        body = _register(client)
        assert body["token"]
        assert body["user"]["email"] == "arjun@example.com"
        assert body["user"]["role"] == "user"
        assert "password" not in body["user"]
        assert "passwordHash" not in body["user"]

    def test_duplicate_registration(self, client):
        _register(client)
        response = client.post(
            "/auth/register",
            json={"name": "Someone", "email": "ARJUN@example.com", "phone": "9000000005", "password": "secret123"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "User already exists with this email or phone"

    def test_short_password(self, client):
        response = client.post(
            "/auth/register",
            json={"name": "A", "email": "a@example.com", "phone": "9000000006", "password": "123"},
        )
        assert response.status_code == 400

    def test_malformed_email(self, client):
        response = client.post(
            "/auth/register",
            json={"name": "A", "email": "not-an-email", "phone": "9000000007", "password": "secret123"},
        )
        assert response.status_code == 422

    def test_login(self, client):
        _register(client)
        response = client.post("/auth/login", json={"email": "arjun@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert response.json()["token"]

    def test_bad_credentials(self, client):
        _register(client)
        response = client.post("/auth/login", json={"email": "arjun@example.com", "password": "nope"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email or password"

    def test_profile_requires_token(self, client):
        response = client.get("/auth/profile")
        assert response.status_code == 401
        assert response.json()["error"] == "No token, authorization denied"

    def test_profile_rejects_bad_token(self, client):
        response = client.get("/auth/profile", headers=_bearer("garbage"))
        assert response.status_code == 401

    def test_update_profile(self, client, user_headers):
        response = client.put(
            "/auth/profile",
            json={"name": "Arjun M", "address": {"city": "Mysuru", "pincode": "570001"}},
            headers=user_headers,
        )
        assert response.status_code == 200
        assert response.json()["user"]["address"]["city"] == "Mysuru"
        assert client.get("/auth/profile", headers=user_headers).json()["name"] == "Arjun M"

    def test_wishlist_toggle(self, client, user_headers, product_id):
        added = client.post(f"/auth/wishlist/{product_id}", headers=user_headers)
        assert added.json() == {"message": "Added to wishlist", "wishlist": [product_id]}
        removed = client.post(f"/auth/wishlist/{product_id}", headers=user_headers)
        assert removed.json()["wishlist"] == []


class TestProducts:
    def test_list_is_public(self, client, product_id):
        response = client.get("/products", params={"minPrice": 2000, "maxPrice": 3000})
        body = response.json()
        assert response.status_code == 200
        assert body["totalProducts"] == 1
        assert body["currentPage"] == 1
        product = body["products"][0]
        assert product["originalPrice"] == 3999
        assert product["discount"] == 38

    def test_price_filter_excludes(self, client, product_id):
        assert client.get("/products", params={"maxPrice": 100}).json()["totalProducts"] == 0

    def test_get_unknown(self, client):
        response = client.get("/products/missing")
        assert response.status_code == 404
        assert response.json()["error"] == "Product not found"

    def test_users_cannot_list(self, client, user_headers):
        response = client.post(
            "/products",
            json={
                "name": "X",
                "description": "Y",
                "price": 1,
                "originalPrice": 2,
                "platform": "pc",
                "condition": "good",
            },
            headers=user_headers,
        )
        assert response.status_code == 403

    def test_seller_updates_and_deletes(self, client, staff_headers, product_id):
        # The seller fixture account is reused by logging in again
        headers = _bearer(
            client.post("/auth/login", json={"email": "seller@gamezone.com", "password": "staff123"}).json()["token"]
        )
        updated = client.put(f"/products/{product_id}", json={"price": 1999}, headers=headers)
        assert updated.status_code == 200
        assert updated.json()["product"]["price"] == 1999

        deleted = client.delete(f"/products/{product_id}", headers=headers)
        assert deleted.json() == {"message": "Product deleted!"}
        assert client.get(f"/products/{product_id}").status_code == 404


class TestCart:
    def test_add_and_view(self, client, user_headers, product_id):
        added = client.post("/cart/add", json={"productId": product_id, "quantity": 1}, headers=user_headers)
        assert added.status_code == 200
        assert added.json()["message"] == "Added to cart!"

        cart = client.get("/cart", headers=user_headers).json()
        assert cart["totalPrice"] == 2499
        assert cart["items"][0]["productId"] == product_id
        assert cart["items"][0]["lineTotal"] == 2499

    def test_requires_token(self, client):
        assert client.get("/cart").status_code == 401

    def test_update_missing_item(self, client, user_headers, product_id):
        response = client.put("/cart/update", json={"productId": product_id, "quantity": 2}, headers=user_headers)
        assert response.status_code == 404

    def test_remove_and_clear(self, client, user_headers, product_id):
        client.post("/cart/add", json={"productId": product_id}, headers=user_headers)
        assert client.delete(f"/cart/remove/{product_id}", headers=user_headers).json()["items"] == []

        client.post("/cart/add", json={"productId": product_id}, headers=user_headers)
        cleared = client.delete("/cart/clear", headers=user_headers)
        assert cleared.json()["message"] == "Cart cleared"
        assert client.get("/cart", headers=user_headers).json()["items"] == []


class TestOrders:
    def test_place_order(self, client, user_headers, product_id):
        response = _place(client, user_headers, product_id)
        assert response.status_code == 201
        order = response.json()["order"]
        assert order["orderStatus"] == "placed"
        assert order["subtotal"] == 2499
        assert order["deliveryCharge"] == 0
        assert order["totalAmount"] == 2499
        assert order["trackingId"].startswith("GZ")
        assert client.get("/cart", headers=user_headers).json()["items"] == []

    def test_empty_cart(self, client, user_headers):
        response = client.post("/orders/place", json={"shippingAddress": SHIPPING}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "EmptyCart"

    def test_sold_out(self, client, user_headers, other_headers, product_id):
        client.post("/cart/add", json={"productId": product_id}, headers=other_headers)
        assert _place(client, user_headers, product_id).status_code == 201

        response = client.post("/orders/place", json={"shippingAddress": SHIPPING}, headers=other_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "InsufficientStock"
        assert response.json()["product_id"] == product_id

    def test_idempotency_key(self, client, user_headers, staff_headers):
        seller = staff_headers("seller")
        created = client.post(
            "/products",
            json={
                "name": "Hades",
                "description": "Roguelike",
                "price": 299,
                "originalPrice": 599,
                "platform": "pc",
                "condition": "new",
                "stock": 5,
            },
            headers=seller,
        )
        product_id = created.json()["product"]["id"]

        first = _place(client, user_headers, product_id, **{"Idempotency-Key": "abc"})
        second = _place(client, user_headers, product_id, **{"Idempotency-Key": "abc"})
        assert first.json()["order"]["id"] == second.json()["order"]["id"]
        assert client.get(f"/products/{product_id}").json()["stock"] == 4

    def test_my_orders_and_access(self, client, user_headers, other_headers, product_id):
        order_id = _place(client, user_headers, product_id).json()["order"]["id"]

        mine = client.get("/orders/my-orders", headers=user_headers).json()
        assert [o["id"] for o in mine] == [order_id]
        assert client.get(f"/orders/{order_id}", headers=user_headers).status_code == 200
        assert client.get(f"/orders/{order_id}", headers=other_headers).status_code == 403
        assert client.get("/orders/missing", headers=user_headers).status_code == 404

    def test_cancel(self, client, user_headers, product_id):
        order_id = _place(client, user_headers, product_id).json()["order"]["id"]

        response = client.put(f"/orders/{order_id}/cancel", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["order"]["orderStatus"] == "cancelled"
        assert client.get(f"/products/{product_id}").json()["stock"] == 1

        again = client.put(f"/orders/{order_id}/cancel", headers=user_headers)
        assert again.status_code == 400


class TestAdmin:
    def test_requires_admin(self, client, user_headers):
        assert client.get("/orders/admin/all", headers=user_headers).status_code == 403
        assert client.post("/orders/admin/reconcile", headers=user_headers).status_code == 403

    def test_list_and_update_status(self, client, user_headers, staff_headers, product_id):
        admin = staff_headers("admin")
        order_id = _place(client, user_headers, product_id).json()["order"]["id"]

        listing = client.get("/orders/admin/all", headers=admin).json()
        assert listing["stats"] == {"totalOrders": 1, "totalRevenue": 2499, "pendingOrders": 1, "deliveredOrders": 0}

        skipped = client.put(f"/orders/{order_id}/status", json={"orderStatus": "shipped"}, headers=admin)
        assert skipped.status_code == 400
        assert skipped.json()["code"] == "InvalidTransition"

        confirmed = client.put(f"/orders/{order_id}/status", json={"orderStatus": "confirmed"}, headers=admin)
        assert confirmed.json()["order"]["orderStatus"] == "confirmed"

        filtered = client.get("/orders/admin/all", params={"status": "confirmed"}, headers=admin).json()
        assert [o["id"] for o in filtered["orders"]] == [order_id]

    def test_user_cannot_update_status(self, client, user_headers, product_id):
        order_id = _place(client, user_headers, product_id).json()["order"]["id"]
        response = client.put(f"/orders/{order_id}/status", json={"orderStatus": "confirmed"}, headers=user_headers)
        assert response.status_code == 403

    def test_reconcile_with_nothing_in_flight(self, client, staff_headers):
        response = client.post("/orders/admin/reconcile", params={"older_than_seconds": 0}, headers=staff_headers("admin"))
        assert response.status_code == 200
        assert response.json() == {"placed": [], "failed": [], "cancelled": [], "stalled": []}
