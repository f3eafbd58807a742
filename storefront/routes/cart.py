# storefront/routes/cart.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.product import Product
from storefront.models.users import Profile
from storefront.schemas.cart import CartAddItem, CartUpdateItem, CartOut, CartItemOut
from storefront.utils.audit import write_log, client_ip
from storefront.utils.cart_state import CartState
from storefront.utils.tokenJWT import get_optional_user

router = APIRouter(prefix="/cart", tags=["Cart"])


# Cart mirror for this request; empty and read-only without a session
def get_cart_state(
    db: Session = Depends(get_db),
    current_user: Optional[Profile] = Depends(get_optional_user),
) -> CartState:
    return CartState(db, current_user)


def _cart_to_out(cart: CartState) -> CartOut:
    items_out = [
        CartItemOut(
            product_id=line.product_id,
            name=line.name,
            price=line.price,
            image_url=line.image_url,
            quantity=line.quantity,
            line_total=round(line.line_total, 2),
        )
        for line in cart.items
    ]
    return CartOut(items=items_out, total_items=cart.total_items, total_price=round(cart.total_price, 2))


def _log(cart: CartState, request: Request, action: str, meta: dict):
    write_log(
        cart.db,
        user_id=cart.user.id,
        action=action,
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={**meta, "total_items": cart.total_items, "total": round(cart.total_price, 2)},
    )


@router.get("", response_model=CartOut)
def get_cart(cart: CartState = Depends(get_cart_state)):
    return _cart_to_out(cart)


@router.post("/items", response_model=CartOut)
def add_to_cart(payload: CartAddItem, request: Request, cart: CartState = Depends(get_cart_state)):
    cart.require_session()
    product = cart.db.query(Product).filter(Product.id == payload.product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    cart.add(product)
    _log(cart, request, "CART_ADD", {"product_id": product.id})
    return _cart_to_out(cart)


@router.put("/items/{product_id}", response_model=CartOut)
def update_cart_item(
    product_id: int,
    payload: CartUpdateItem,
    request: Request,
    cart: CartState = Depends(get_cart_state),
):
    # Session before the product lookup
    cart.require_session()
    if payload.quantity > 0 and cart.find(product_id) is None:
        exists = cart.db.query(Product.id).filter(Product.id == product_id).first()
        if not exists:
            raise HTTPException(status_code=404, detail="Product not found")

    cart.update_quantity(product_id, payload.quantity)
    _log(cart, request, "CART_UPDATE", {"product_id": product_id, "quantity": payload.quantity})
    return _cart_to_out(cart)


@router.delete("/items/{product_id}", response_model=CartOut)
def delete_cart_item(product_id: int, request: Request, cart: CartState = Depends(get_cart_state)):
    cart.remove(product_id)
    _log(cart, request, "CART_DELETE", {"product_id": product_id})
    return _cart_to_out(cart)


@router.delete("", response_model=CartOut)
def clear_cart(request: Request, cart: CartState = Depends(get_cart_state)):
    cart.clear()
    _log(cart, request, "CART_CLEAR", {})
    return _cart_to_out(cart)
