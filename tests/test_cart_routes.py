from storefront.models.cart import CartItem
from tests.conftest import auth_headers


def test_cart_starts_empty(client, shopper):
    resp = client.get("/cart", headers=auth_headers(shopper))
    assert resp.status_code == 200
    assert resp.json() == {"items": [], "total_items": 0, "total_price": 0}


def test_add_update_remove_flow(client, shopper, make_product):
    headers = auth_headers(shopper)
    mug = make_product(price=10.0)
    bag = make_product(name="Tote", price=2.5)

    client.post("/cart/items", json={"product_id": mug.id}, headers=headers)
    resp = client.post("/cart/items", json={"product_id": mug.id}, headers=headers)
    body = resp.json()
    assert resp.status_code == 200
    assert len(body["items"]) == 1
    assert body["items"][0]["quantity"] == 2
    assert body["total_price"] == 20.0

    client.post("/cart/items", json={"product_id": bag.id}, headers=headers)
    resp = client.put(f"/cart/items/{bag.id}", json={"quantity": 3}, headers=headers)
    body = resp.json()
    assert body["total_items"] == 5
    assert body["total_price"] == 27.5

    resp = client.put(f"/cart/items/{mug.id}", json={"quantity": 0}, headers=headers)
    body = resp.json()
    assert [i["product_id"] for i in body["items"]] == [bag.id]

    resp = client.delete(f"/cart/items/{bag.id}", headers=headers)
    assert resp.json()["items"] == []


def test_clear_cart(client, shopper, make_product):
    headers = auth_headers(shopper)
    client.post("/cart/items", json={"product_id": make_product().id}, headers=headers)

    resp = client.delete("/cart", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["total_items"] == 0


def test_add_unknown_product_is_404(client, shopper):
    resp = client.post("/cart/items", json={"product_id": 999}, headers=auth_headers(shopper))
    assert resp.status_code == 404


def test_anonymous_mutation_redirects_to_login(client, make_product, db_session):
    mug = make_product()

    resp = client.post("/cart/items", json={"product_id": mug.id}, follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"

    resp = client.delete("/cart", follow_redirects=False)
    assert resp.status_code == 303

    db_session.expire_all()
    assert db_session.query(CartItem).count() == 0


def test_anonymous_cart_read_is_empty(client):
    resp = client.get("/cart")
    assert resp.status_code == 200
    assert resp.json()["items"] == []


def test_carts_are_per_user(client, shopper, make_user, make_product):
    other = make_user(email="other@example.com")
    mug = make_product()
    client.post("/cart/items", json={"product_id": mug.id}, headers=auth_headers(shopper))

    assert client.get("/cart", headers=auth_headers(other)).json()["items"] == []


def test_anonymous_update_checks_session_before_product(client):
    resp = client.put("/cart/items/999", json={"quantity": 2}, follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"

    resp = client.post("/cart/items", json={"product_id": 999}, follow_redirects=False)
    assert resp.status_code == 303
