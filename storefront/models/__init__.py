from storefront.models.users import Profile, ManagedUser
from storefront.models.product import Product
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.log import Log

__all__ = [
    "Profile", "ManagedUser", "Product", "CartItem",
    "Order", "OrderItem", "OrderStatus", "Log",
]
