from storefront.models.order import Order, OrderItem, OrderStatus
from tests.conftest import auth_headers


def _order(db, user, product, quantity=1, price=None):
    order = Order(user_id=user.id, status=OrderStatus.PENDING, payment_method="visa",
                  total_amount=(price or product.price) * quantity, shipping_city="Leeds")
    db.add(order)
    db.flush()
    db.add(OrderItem(order_id=order.id, product_id=product.id, quantity=quantity,
                     price_at_time=price or product.price))
    db.commit()
    return order


def test_list_returns_only_own_orders_newest_first(client, db_session, shopper, make_user, make_product):
    other = make_user(email="other@example.com")
    mug = make_product(price=3.0)
    first = _order(db_session, shopper, mug)
    second = _order(db_session, shopper, mug, quantity=2)
    _order(db_session, other, mug)

    resp = client.get("/orders", headers=auth_headers(shopper))
    assert resp.status_code == 200
    body = resp.json()
    assert [o["id"] for o in body] == [second.id, first.id]
    assert body[0]["total"] == 6.0
    assert body[0]["items"][0]["product_name"] == mug.name


def test_orders_require_session(client):
    assert client.get("/orders").status_code == 401


def test_foreign_order_is_hidden(client, db_session, shopper, make_user, make_product):
    other = make_user(email="other@example.com")
    order = _order(db_session, other, make_product())
    assert client.get(f"/orders/{order.id}", headers=auth_headers(shopper)).status_code == 404


def test_admin_reads_any_order(client, db_session, shopper, admin, make_product):
    order = _order(db_session, shopper, make_product())
    resp = client.get(f"/orders/{order.id}", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["user_id"] == shopper.id
