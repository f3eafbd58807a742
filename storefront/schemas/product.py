# storefront/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Shared base attributes for product entities
class ProductBase(ORMBase):
    name: str
    description: Optional[str] = None
    price: float = Field(ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    image_url: Optional[str] = None


class ProductOut(ProductBase):
    id: int
    created_at: Optional[datetime] = None


# Storefront listing, stale is set when served from the catalog cache
class CatalogPage(BaseModel):
    items: List[ProductOut]
    stale: bool = False
