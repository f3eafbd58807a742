import pytest
from sqlalchemy.exc import OperationalError

from storefront.models.cart import CartItem
from storefront.utils.cart_state import CartState, AuthenticationRequired, CartSyncError


def _rows(db, user):
    db.expire_all()
    return {r.product_id: r.quantity for r in db.query(CartItem).filter(CartItem.user_id == user.id)}


def test_add_inserts_then_increments(db_session, shopper, make_product):
    mug = make_product()
    cart = CartState(db_session, shopper)

    cart.add(mug)
    cart.add(mug)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2
    assert _rows(db_session, shopper) == {mug.id: 2}


def test_totals_follow_any_sequence(db_session, shopper, make_product):
    mug = make_product(price=10.0)
    bag = make_product(name="Tote", price=2.5)
    cart = CartState(db_session, shopper)

    cart.add(mug)
    cart.add(bag)
    cart.add(bag)
    cart.update_quantity(mug.id, 4)
    cart.add(bag)
    cart.remove(mug.id)
    cart.add(mug)

    assert cart.total_items == sum(line.quantity for line in cart.items) == 4
    assert cart.total_price == pytest.approx(3 * 2.5 + 10.0)


def test_quantity_zero_or_below_removes_line(db_session, shopper, make_product):
    mug = make_product()
    bag = make_product(name="Tote")
    cart = CartState(db_session, shopper)
    cart.add(mug)
    cart.add(bag)

    cart.update_quantity(mug.id, 0)
    cart.update_quantity(bag.id, -3)

    assert cart.items == []
    assert _rows(db_session, shopper) == {}


def test_overlapping_adds_of_same_line_keep_one_row(db_session, shopper, make_product):
    mug = make_product()
    first = CartState(db_session, shopper)
    second = CartState(db_session, shopper)

    # Both mirrors were loaded empty, so both write quantity 1 for a new line
    first._write("adding to cart", lambda: (first._upsert(mug.id, 1), second._upsert(mug.id, 1)))
    second.add(mug)

    assert _rows(db_session, shopper) == {mug.id: 1}
    assert db_session.query(CartItem).filter(CartItem.user_id == shopper.id).count() == 1


def test_update_overwrites_existing_row(db_session, shopper, make_product):
    mug = make_product()
    cart = CartState(db_session, shopper)
    cart.add(mug)

    cart.update_quantity(mug.id, 3)

    assert cart.find(mug.id).quantity == 3
    assert _rows(db_session, shopper) == {mug.id: 3}


def test_clear_wipes_rows(db_session, shopper, make_product):
    cart = CartState(db_session, shopper)
    cart.add(make_product())
    cart.add(make_product(name="Tote"))

    cart.clear()

    assert cart.total_items == 0
    assert _rows(db_session, shopper) == {}


def test_mirror_loads_persisted_rows(db_session, shopper, make_product):
    mug = make_product(price=4.0)
    CartState(db_session, shopper).add(mug)

    fresh = CartState(db_session, shopper)
    assert [(l.product_id, l.quantity) for l in fresh.items] == [(mug.id, 1)]
    assert fresh.total_price == 4.0


def test_mutations_without_session_write_nothing(db_session, shopper, make_product):
    mug = make_product()
    cart = CartState(db_session, None)

    with pytest.raises(AuthenticationRequired):
        cart.add(mug)
    with pytest.raises(AuthenticationRequired):
        cart.update_quantity(mug.id, 3)
    with pytest.raises(AuthenticationRequired):
        cart.remove(mug.id)
    with pytest.raises(AuthenticationRequired):
        cart.clear()

    assert cart.items == []
    db_session.expire_all()
    assert db_session.query(CartItem).count() == 0


def test_failed_write_leaves_mirror_unchanged(db_session, shopper, make_product, monkeypatch):
    mug = make_product()
    cart = CartState(db_session, shopper)
    cart.add(mug)

    def _boom():
        raise OperationalError("COMMIT", {}, Exception("connection lost"))

    monkeypatch.setattr(db_session, "commit", _boom)
    with pytest.raises(CartSyncError):
        cart.add(mug)
    with pytest.raises(CartSyncError):
        cart.clear()

    assert [(l.product_id, l.quantity) for l in cart.items] == [(mug.id, 1)]
