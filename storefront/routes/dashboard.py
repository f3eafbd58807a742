# storefront/routes/dashboard.py
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.users import ManagedUser, Profile
from storefront.schemas.dashboard import DashboardResponse
from storefront.schemas.order import OrderSummary
from storefront.schemas.product import ProductOut
from storefront.schemas.user import ManagedUserResponse
from storefront.utils.tokenJWT import role_required

router = APIRouter(tags=["Dashboard"])
logger = logging.getLogger(__name__)

# Section name -> (model, output schema); each is fetched on its own
SECTIONS = {
    "users": (ManagedUser, ManagedUserResponse),
    "products": (Product, ProductOut),
    "orders": (Order, OrderSummary),
}


@router.get("/admin-dashboard", response_model=DashboardResponse)
def admin_dashboard(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("admin")),
):
    result = {"errors": []}
    for section, (model, schema) in SECTIONS.items():
        try:
            rows = db.query(model).order_by(model.created_at.desc(), model.id.desc()).all()
            result[section] = [schema.model_validate(r) for r in rows]
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Error fetching %s", section)
            result[section] = []
            result["errors"].append(f"Failed to load {section}")
    return result
