# storefront/routes/checkout.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.product import Product
from storefront.models.users import Profile
from storefront.routes.orders import order_to_out
from storefront.schemas.order import CheckoutPayload, CheckoutResponse
from storefront.utils.audit import write_log, client_ip
from storefront.utils.card import get_card_type, format_expiry_date, is_valid_expiry
from storefront.utils.cart_state import CartState
from storefront.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/checkout", tags=["Checkout"])
logger = logging.getLogger(__name__)


def _validate_payment(payload: CheckoutPayload) -> str:
    card_type = get_card_type(payload.card_number)
    if card_type == "unknown":
        raise HTTPException(status_code=400, detail="Unsupported card number")
    if not is_valid_expiry(format_expiry_date(payload.expiry)):
        raise HTTPException(status_code=400, detail="Invalid expiry date, expected MM/YY")
    return card_type


def _snapshot_items(db: Session, order: Order, cart: CartState):
    # price_at_time is read from the product row now, not from the cart mirror
    prices = dict(
        db.query(Product.id, Product.price)
        .filter(Product.id.in_([line.product_id for line in cart.items]))
        .all()
    )
    db.add_all([
        OrderItem(
            order_id=order.id,
            product_id=line.product_id,
            quantity=line.quantity,
            price_at_time=prices.get(line.product_id, line.price),
        )
        for line in cart.items
    ])


@router.post("", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
def checkout(
    payload: CheckoutPayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """Turn the caller's cart into a pending order.

    The order row, its item rows and the cart wipe commit together; any
    failure rolls all three back and the cart is left as it was.
    """
    cart = CartState(db, current_user)
    if not cart.items:
        raise HTTPException(status_code=400, detail="Cart is empty")

    card_type = _validate_payment(payload)
    user_id = current_user.id

    try:
        order = Order(
            user_id=user_id,
            status=OrderStatus.PENDING,
            payment_method=card_type,
            total_amount=round(cart.total_price, 2),
            shipping_street=payload.street,
            shipping_city=payload.city,
            shipping_state=payload.state,
            shipping_zip=payload.zip,
        )
        db.add(order)
        db.flush()

        _snapshot_items(db, order, cart)
        db.query(CartItem).filter(CartItem.user_id == user_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Checkout failed for user %s", user_id)
        raise HTTPException(status_code=500, detail="Failed to place order. Please try again.")

    cart.lines = []
    db.refresh(order)

    write_log(
        db, user_id=user_id, action="CHECKOUT", resource="orders", status="SUCCESS",
        ip=client_ip(request),
        meta={"order_id": order.id, "total": order.total_amount, "items": len(order.items)},
    )
    return {"order": order_to_out(order), "redirect_to": "/orders"}
