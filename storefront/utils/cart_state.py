# storefront/utils/cart_state.py
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from storefront.models.cart import CartItem
from storefront.models.product import Product
from storefront.models.users import Profile

logger = logging.getLogger(__name__)


class AuthenticationRequired(Exception):
    """Raised when a cart mutation is attempted without a session."""


class CartSyncError(Exception):
    """Raised when the database write behind a cart mutation fails."""


@dataclass
class CartLine:
    product_id: int
    name: str
    price: float
    image_url: Optional[str]
    quantity: int

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class CartState:
    """Mirror of one user's persisted cart rows.

    Built per request once the session is known and thrown away with the
    request. Every mutation writes to the database first and only touches
    the in-memory lines after the write committed, so a failed write leaves
    the mirror as it was.
    """

    def __init__(self, db: Session, user: Optional[Profile]):
        self.db = db
        self.user = user
        self.lines: List[CartLine] = []
        if user is not None:
            self.load()

    # ---- read side ----

    def load(self):
        rows = (
            self.db.query(CartItem)
            .options(joinedload(CartItem.product))
            .filter(CartItem.user_id == self.user.id)
            .order_by(CartItem.id.asc())
            .all()
        )
        self.lines = [
            CartLine(
                product_id=row.product_id,
                name=row.product.name,
                price=row.product.price,
                image_url=row.product.image_url,
                quantity=row.quantity,
            )
            for row in rows
            if row.product is not None
        ]

    @property
    def items(self) -> List[CartLine]:
        return list(self.lines)

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total_price(self) -> float:
        return sum(line.price * line.quantity for line in self.lines)

    def find(self, product_id: int) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    # ---- mutations ----

    def require_session(self):
        if self.user is None:
            raise AuthenticationRequired()

    def _upsert(self, product_id: int, quantity: int):
        # One statement keyed on (user_id, product_id), concurrent adds cannot collide
        dialect = self.db.get_bind().dialect.name
        insert = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}.get(dialect)
        if insert is None:
            row = self.db.query(CartItem).filter(
                CartItem.user_id == self.user.id, CartItem.product_id == product_id
            ).first()
            if row:
                row.quantity = quantity
            else:
                self.db.add(CartItem(user_id=self.user.id, product_id=product_id, quantity=quantity))
            return

        stmt = insert(CartItem).values(user_id=self.user.id, product_id=product_id, quantity=quantity)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "product_id"],
            set_={"quantity": stmt.excluded.quantity},
        )
        self.db.execute(stmt)

    def _delete(self, product_id: Optional[int] = None):
        query = self.db.query(CartItem).filter(CartItem.user_id == self.user.id)
        if product_id is not None:
            query = query.filter(CartItem.product_id == product_id)
        query.delete(synchronize_session=False)

    def _write(self, what: str, op):
        # Database first; callers mirror locally only after this returns
        try:
            op()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Error %s: %s", what, e)
            raise CartSyncError(what) from e

    def add(self, product: Product):
        self.require_session()
        existing = self.find(product.id)
        new_quantity = existing.quantity + 1 if existing else 1

        self._write("adding to cart", lambda: self._upsert(product.id, new_quantity))

        if existing:
            existing.quantity = new_quantity
        else:
            self.lines.append(CartLine(
                product_id=product.id,
                name=product.name,
                price=product.price,
                image_url=product.image_url,
                quantity=1,
            ))

    def remove(self, product_id: int):
        self.require_session()
        self._write("removing from cart", lambda: self._delete(product_id))
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def update_quantity(self, product_id: int, quantity: int):
        self.require_session()
        if quantity <= 0:
            self.remove(product_id)
            return

        self._write("updating quantity", lambda: self._upsert(product_id, quantity))

        line = self.find(product_id)
        if line:
            line.quantity = quantity
        else:
            # Row did not exist in this mirror, reload to pick up product details
            self.load()

    def clear(self):
        self.require_session()
        self._write("clearing cart", self._delete)
        self.lines = []
