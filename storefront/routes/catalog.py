# storefront/routes/catalog.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.database import get_db
from storefront.models.product import Product
from storefront.schemas.product import CatalogPage, ProductOut
from storefront.utils.catalog_cache import CatalogCache, catalog_cache

router = APIRouter(tags=["Catalog"])
logger = logging.getLogger(__name__)


def get_catalog_cache() -> CatalogCache:
    return catalog_cache


# Storefront home: newest products first
@router.get("/", response_model=CatalogPage)
def list_products(
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    try:
        rows: List[Product] = (
            db.query(Product)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .limit(settings.CATALOG_PAGE_SIZE)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Error fetching products")
        cached = cache.get()
        if cached is None:
            raise HTTPException(status_code=500, detail="Failed to load products")
        return {"items": cached, "stale": True}

    items = [ProductOut.model_validate(p).model_dump(mode="json") for p in rows]
    cache.put(items)
    return {"items": items, "stale": False}


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
