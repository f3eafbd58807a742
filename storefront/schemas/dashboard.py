from pydantic import BaseModel
from typing import List

from storefront.schemas.order import OrderSummary
from storefront.schemas.product import ProductOut
from storefront.schemas.user import ManagedUserResponse


# Admin dashboard payload, each section fetched independently
class DashboardResponse(BaseModel):
    users: List[ManagedUserResponse]
    products: List[ProductOut]
    orders: List[OrderSummary]
    errors: List[str] = []
