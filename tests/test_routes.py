from decimal import Decimal

from mhp.auth import SESSION_COOKIE
from mhp.menu import QUANTITY_COOKIE


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_landing_page_for_guest(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "Order Now" in resp.text
    assert "Sign In" in resp.text
    assert "My Orders" not in resp.text


def test_menu_lists_available_items(client, catalog):
    resp = client.get("/menu")
    assert resp.status_code == 200
    assert "Pizza" in resp.text
    assert "$9.50" in resp.text
    assert "Secret Special" not in resp.text


def test_menu_category_filter_hides_other_items(client, catalog):
    resp = client.get("/menu", params={"category": catalog.drinks.id})
    assert f'id="item-{catalog.lemonade.id}" data-category="{catalog.drinks.id}">' in resp.text
    # every available item is on the page so switching category needs no reload
    assert f'id="item-{catalog.pizza.id}" data-category="{catalog.mains.id}" hidden>' in resp.text
    assert f'data-filter="{catalog.mains.id}"' in resp.text


def test_empty_category_shows_placeholder(client, catalog):
    resp = client.get("/menu", params={"category": "no-such-category"})
    assert 'id="no-items">' in resp.text


def test_menu_filter_script_is_served(client):
    resp = client.get("/static/menu.js")
    assert resp.status_code == 200
    assert "data-filter" in resp.text


def test_guest_add_redirects_to_sign_in(client, catalog):
    resp = client.post(f"/menu/{catalog.pizza.id}/add", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"].startswith("/auth?err=Please+sign+in")


def test_guest_cart_and_orders_redirect(client):
    for path in ("/cart", "/orders"):
        resp = client.get(path, follow_redirects=False)
        assert resp.status_code == 302
        assert resp.headers["location"] == "/auth"


def test_bad_credentials(client, user):
    resp = client.post("/auth/sign-in", data={"email": user.email, "password": "nope"}, follow_redirects=False)
    assert resp.headers["location"] == "/auth?err=Invalid+credentials"


def test_sign_up_then_navbar_shows_cart(client, data):
    resp = client.post("/auth/sign-up", data={
        "email": "New@Example.com", "password": "long-enough", "full_name": "Nia New",
    })
    assert resp.status_code == 200
    assert "My Orders" in resp.text
    assert data.find_user_by_email("new@example.com") is not None


def test_sign_up_rejects_short_password(client, data):
    resp = client.post("/auth/sign-up", data={"email": "a@b.co", "password": "short"}, follow_redirects=False)
    assert "err=Password+must+be+at+least+8+characters" in resp.headers["location"]
    assert data.find_user_by_email("a@b.co") is None


def test_quantity_selector_then_add(signed_in_client, data, user, catalog):
    client = signed_in_client
    for _ in range(2):
        client.post(f"/menu/{catalog.pizza.id}/quantity", data={"delta": "1"}, follow_redirects=False)

    resp = client.post(f"/menu/{catalog.pizza.id}/add", data={"category": "all"}, follow_redirects=False)
    assert resp.headers["location"] == "/menu?category=all&ok=Added+Pizza+to+cart"
    assert data.cart_quantities(user.id) == [2]

    page = client.get("/menu")
    assert 'id="cart-count">2<' in page.text


def test_cart_checkout_flow(signed_in_client, data, user, catalog):
    client = signed_in_client
    data.insert_cart_item(user.id, catalog.pizza.id, 2)
    data.insert_cart_item(user.id, catalog.lemonade.id, 1)

    cart = client.get("/cart")
    assert cart.status_code == 200
    assert "$22.25" in cart.text

    resp = client.post("/cart/checkout", data={
        "delivery_address": "12 Baker St", "phone": "555-0100", "notes": "",
    }, follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"].startswith("/orders?ok=Order+placed")

    orders = client.get("/orders")
    assert "Pending" in orders.text
    assert "2x Pizza - $19.00" in orders.text
    assert "12 Baker St" in orders.text
    assert data.cart_lines(user.id) == []
    assert data.list_orders(user.id)[0].total_amount == Decimal("22.25")


def test_checkout_missing_phone(signed_in_client, data, user, catalog):
    data.insert_cart_item(user.id, catalog.pizza.id, 1)
    resp = signed_in_client.post("/cart/checkout", data={"delivery_address": "12 Baker St"}, follow_redirects=False)
    assert resp.headers["location"].startswith("/cart?err=")
    assert data.list_orders(user.id) == []


def test_cart_quantity_and_remove(signed_in_client, data, user, catalog):
    row = data.insert_cart_item(user.id, catalog.pizza.id, 1)

    signed_in_client.post(f"/cart/{row.id}/quantity", data={"quantity": "0"}, follow_redirects=False)
    assert data.cart_quantities(user.id) == [1]

    signed_in_client.post(f"/cart/{row.id}/quantity", data={"quantity": "4"}, follow_redirects=False)
    assert data.cart_quantities(user.id) == [4]

    resp = signed_in_client.post(f"/cart/{row.id}/remove", follow_redirects=False)
    assert resp.headers["location"] == "/cart?ok=Item+removed+from+cart"
    assert data.cart_quantities(user.id) == []


def test_unknown_status_renders_with_default_badge(signed_in_client, data, user):
    order = data.insert_order(user.id, Decimal("5"), "1 Main St", "555", None, status="lost_in_space")
    resp = signed_in_client.get("/orders")
    assert f"Order #{order.id[:8]}" in resp.text
    assert "Lost In Space" in resp.text
    assert "#6b7280" in resp.text


def test_sign_out_clears_session(signed_in_client):
    resp = signed_in_client.post("/auth/sign-out", follow_redirects=False)
    assert resp.headers["location"] == "/"
    signed_in_client.cookies.clear()
    assert signed_in_client.get("/cart", follow_redirects=False).headers["location"] == "/auth"


def test_tampered_quantity_cookie_is_ignored(client, catalog):
    client.cookies.set(QUANTITY_COOKIE, "not-a-signed-value")
    resp = client.get("/menu")
    assert resp.status_code == 200


def test_expired_session_is_signed_out(monkeypatch, signed_in_client):
    assert signed_in_client.get("/cart", follow_redirects=False).status_code == 200
    monkeypatch.setattr("mhp.auth.SESSION_MAX_AGE", -1)
    resp = signed_in_client.get("/cart", follow_redirects=False)
    assert resp.headers["location"] == "/auth"


def test_forged_session_cookie_is_ignored(client, user):
    client.cookies.set(SESSION_COOKIE, "forged.token.value")
    resp = client.get("/orders", follow_redirects=False)
    assert resp.headers["location"] == "/auth"
