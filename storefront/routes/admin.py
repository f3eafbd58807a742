# storefront/routes/admin.py
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status, UploadFile, File, Form
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.cart import CartItem
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.users import Profile, ManagedUser
from storefront.schemas.order import OrderStatusPatch, OrderSummary
from storefront.schemas.product import ProductOut
from storefront.schemas.user import ManagedUserResponse, RoleUpdate
from storefront.utils.audit import write_log, client_ip
from storefront.utils.guard import admin_route_guard
from storefront.utils.realtime import order_feed
from storefront.utils.storage import ProductImageBucket, InvalidImage, get_bucket

# Every route below sits behind the admin route guard
router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(admin_route_guard)])
logger = logging.getLogger(__name__)


def _store_image(bucket: ProductImageBucket, file: UploadFile) -> str:
    try:
        return bucket.public_url(bucket.upload(file))
    except InvalidImage as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        logger.error("Image upload failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to upload image")


# =========================
# USERS
# =========================
@router.get("/users", response_model=List[ManagedUserResponse])
def list_users(db: Session = Depends(get_db)):
    return db.query(ManagedUser).order_by(ManagedUser.created_at.desc(), ManagedUser.id.desc()).all()


@router.put("/users/{user_id}/role")
def update_user_role(
    user_id: int,
    new_role: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(admin_route_guard),
):
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    profile.role = new_role.role
    db.commit()
    db.refresh(profile)

    write_log(db, user_id=current_user.id, action="USER_ROLE_CHANGE", resource="users", status="SUCCESS",
              ip=client_ip(request), meta={"target": profile.id, "role": profile.role})
    return {"message": f"User {profile.email} role updated to {profile.role}", "id": profile.id, "role": profile.role}


def _purge_user(db: Session, user_id: int, managed: Optional[ManagedUser], profile: Optional[Profile]) -> dict:
    """Stage every row owned by the user for deletion; the caller commits."""
    cart_rows = db.query(CartItem).filter(CartItem.user_id == user_id).delete(synchronize_session=False)
    orders = db.query(Order).filter(Order.user_id == user_id).all()
    for order in orders:
        db.delete(order)  # items follow through the relationship cascade
    if managed:
        db.delete(managed)
        db.flush()
    if profile:
        db.delete(profile)
    db.flush()
    return {"cart_items": cart_rows, "orders": len(orders)}


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(admin_route_guard),
):
    """Remove a user from the admin directory and from profiles.

    The user's cart rows and orders are deleted with them. Everything goes in
    one transaction, so a failure on any step leaves every row in place.
    """
    if user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    managed = db.query(ManagedUser).filter(ManagedUser.id == user_id).first()
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not managed and not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    admin_id = current_user.id
    try:
        removed = _purge_user(db, user_id, managed, profile)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting user %s", user_id)
        write_log(db, user_id=admin_id, action="USER_DELETE", resource="users", status="FAIL",
                  ip=client_ip(request), meta={"target": user_id})
        raise HTTPException(status_code=500, detail="Failed to delete user. Please try again.")

    write_log(db, user_id=admin_id, action="USER_DELETE", resource="users", status="SUCCESS",
              ip=client_ip(request), meta={"target": user_id, **removed})
    return {"message": "User successfully deleted from all tables"}


# =========================
# PRODUCTS
# =========================
@router.get("/products", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return db.query(Product).order_by(Product.created_at.desc(), Product.id.desc()).all()


@router.post("/products", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(admin_route_guard),
    bucket: ProductImageBucket = Depends(get_bucket),
    file: Optional[UploadFile] = File(None),
    name: str = Form(...),
    price: float = Form(..., ge=0),
    stock_quantity: int = Form(0, ge=0),
    description: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None),
):
    # Uploaded file wins over a pasted URL
    if file is not None and file.filename:
        image_url = _store_image(bucket, file)

    product = Product(
        name=name, description=description, price=price,
        stock_quantity=stock_quantity, image_url=image_url,
    )
    db.add(product)
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products", status="SUCCESS",
              ip=client_ip(request), meta={"id": product.id})
    return product


@router.patch("/products/{product_id}", response_model=ProductOut)
def edit_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(admin_route_guard),
    bucket: ProductImageBucket = Depends(get_bucket),
    file: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    price: Optional[float] = Form(None, ge=0),
    stock_quantity: Optional[int] = Form(None, ge=0),
    description: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None),
):
    p = db.query(Product).filter(Product.id == product_id).first()
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")

    if file is not None and file.filename:
        p.image_url = _store_image(bucket, file)
    elif image_url is not None:
        p.image_url = image_url

    if name is not None: p.name = name
    if price is not None: p.price = price
    if stock_quantity is not None: p.stock_quantity = stock_quantity
    if description is not None: p.description = description

    db.commit()
    db.refresh(p)

    write_log(db, user_id=current_user.id, action="PRODUCT_EDIT", resource="products", status="SUCCESS",
              ip=client_ip(request), meta={"id": p.id})
    return p


@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(admin_route_guard),
    bucket: ProductImageBucket = Depends(get_bucket),
):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    pid, pname, admin_id = product.id, product.name, current_user.id
    object_name = bucket.object_name(product.image_url)

    # Cart lines go with the product, order lines keep their snapshot with product_id NULL
    try:
        db.delete(product)
        db.flush()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting product %s", pid)
        raise HTTPException(status_code=500, detail="Failed to delete product. Please try again.")

    # Image goes only once the row delete went through, and never blocks the commit
    image_removed = None
    if object_name:
        try:
            bucket.remove(object_name)
            image_removed = True
        except OSError as e:
            image_removed = False
            logger.warning("Could not remove image %s for product %s: %s", object_name, pid, e)

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting product %s", pid)
        raise HTTPException(status_code=500, detail="Failed to delete product. Please try again.")

    write_log(db, user_id=admin_id, action="PRODUCT_DELETE", resource="products", status="SUCCESS",
              ip=client_ip(request), meta={"id": pid, "image_removed": image_removed})
    return {"detail": f"Product '{pname}' deleted", "image_removed": image_removed}


# =========================
# ORDERS
# =========================
@router.get("/orders", response_model=List[OrderSummary])
def list_orders(db: Session = Depends(get_db)):
    return db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).all()


@router.patch("/orders/{order_id}/status", response_model=OrderSummary)
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(admin_route_guard),
):
    # Re-check the role right before writing, it may have changed since the guard ran
    role = db.query(Profile.role).filter(Profile.id == current_user.id).scalar()
    if role != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")

    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    # Any status may follow any other
    old_status, new_status = order.status, payload.status
    order.status = new_status
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating status of order %s", order_id)
        raise HTTPException(status_code=500, detail="Failed to update order status")
    db.refresh(order)

    out = OrderSummary.model_validate(order)
    order_feed.publish(out.model_dump(mode="json"))

    write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": order.id, "old": old_status.value, "new": new_status.value})
    return out
