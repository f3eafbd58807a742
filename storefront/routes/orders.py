# storefront/routes/orders.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload

from storefront.database import get_db
from storefront.models.order import Order, OrderItem
from storefront.models.users import Profile
from storefront.schemas.order import OrderResponse, OrderItemOut, ShippingAddress
from storefront.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/orders", tags=["Orders"])


# Map Order model to OrderResponse schema, totals come from the price snapshots
def order_to_out(order: Order) -> OrderResponse:
    items: List[OrderItemOut] = []
    for it in order.items:
        product_name = it.product.name if it.product else "Deleted product"
        items.append(OrderItemOut(
            product_id=it.product_id,
            product_name=product_name,
            quantity=it.quantity,
            price_at_time=it.price_at_time,
            line_total=round(it.quantity * it.price_at_time, 2),
        ))
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        status=order.status,
        payment_method=order.payment_method,
        total_amount=round(order.total_amount, 2),
        total=round(sum(i.line_total for i in items), 2),
        shipping_address=ShippingAddress(
            street=order.shipping_street,
            city=order.shipping_city,
            state=order.shipping_state,
            zip=order.shipping_zip,
        ),
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=items,
    )


# List the caller's orders, newest first
@router.get("", response_model=List[OrderResponse])
def list_my_orders(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    rows = db.query(Order).options(
        joinedload(Order.items).joinedload(OrderItem.product)
    ).filter(Order.user_id == current_user.id).order_by(Order.created_at.desc(), Order.id.desc()).all()
    return [order_to_out(o) for o in rows]


@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    o = db.query(Order).options(
        joinedload(Order.items).joinedload(OrderItem.product)
    ).filter(Order.id == order_id).first()

    if not o or (o.user_id != current_user.id and current_user.role != "admin"):
        raise HTTPException(status_code=404, detail="Order not found or forbidden")
    return order_to_out(o)
