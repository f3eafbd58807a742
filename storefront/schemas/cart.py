from pydantic import BaseModel
from typing import List, Optional

# Request schema for adding a product to the cart (always one unit)
class CartAddItem(BaseModel):
    product_id: int

# Request schema for setting a line quantity, <= 0 removes the line
class CartUpdateItem(BaseModel):
    quantity: int

# Response schema for a single cart line
class CartItemOut(BaseModel):
    product_id: int
    name: str
    price: float
    image_url: Optional[str] = None
    quantity: int
    line_total: float

# Response schema for the whole cart
class CartOut(BaseModel):
    items: List[CartItemOut]
    total_items: int
    total_price: float
