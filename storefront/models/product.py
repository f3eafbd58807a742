# storefront/models/product.py
from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint, func
from storefront.database import Base

# Represents a catalog item offered in the storefront.
# Shoppers only read products; admins create, edit and delete them.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String)

    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    stock_quantity = Column(Integer, CheckConstraint("stock_quantity >= 0"), nullable=False, default=0)

    # Public URL of the product picture (bucket object or external link)
    image_url = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
