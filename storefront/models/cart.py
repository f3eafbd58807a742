# storefront/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from storefront.database import Base

# A single cart line (product + quantity) owned by a user
class CartItem(Base):
    __tablename__ = "cart_items" # Table name

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False) # Owner of the cart
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False, default=1)

    product = relationship("Product") # Relationship to Product

    __table_args__ = (
        # One line per product in a user's cart, upserts target this pair
        UniqueConstraint("user_id", "product_id", name="uq_cartitem_user_product"),
    )
