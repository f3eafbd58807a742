# storefront/seed.py
"""Seed the catalog from CSV and make sure an admin account exists.

Run with ``python -m storefront.seed``. Admin credentials come from the
ADMIN_EMAIL / ADMIN_PASSWORD environment variables.
"""
import logging
import os
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from storefront.database import SessionLocal, init_db
from storefront.models.product import Product
from storefront.models.users import Profile, ManagedUser
from storefront.utils.hashing import get_password_hash

load_dotenv()
logger = logging.getLogger(__name__)

# Configuration
DATA_DIR = Path(__file__).parent / "data_source"
PRODUCTS_CSV = DATA_DIR / "products.csv"
# End Configuration


def load_products(session, csv_path=PRODUCTS_CSV) -> int:
    """Insert products from the CSV whose name is not in the catalog yet."""
    df = pd.read_csv(csv_path)
    df = df.dropna(subset=["name", "price"])
    df["description"] = df["description"].fillna("")
    df["stock_quantity"] = df["stock_quantity"].fillna(0).astype(int)
    df["image_url"] = df["image_url"].astype(object).where(df["image_url"].notna(), None)

    existing = {name for (name,) in session.query(Product.name).all()}
    added = 0
    for row in df.itertuples(index=False):
        if row.name in existing:
            continue
        session.add(Product(
            name=row.name,
            description=row.description or None,
            price=round(float(row.price), 2),
            stock_quantity=int(row.stock_quantity),
            image_url=row.image_url,
        ))
        added += 1
    session.commit()
    return added


def ensure_admin(session, email: str, password: str) -> Profile:
    email = email.strip().lower()
    admin = session.query(Profile).filter(Profile.email == email).first()
    if admin:
        if admin.role != "admin":
            admin.role = "admin"
            session.commit()
        return admin

    admin = Profile(email=email, password_hash=get_password_hash(password), full_name="Administrator", role="admin")
    session.add(admin)
    session.flush()
    session.add(ManagedUser(id=admin.id, full_name=admin.full_name, email=admin.email, status="active"))
    session.commit()
    return admin


def main():
    logging.basicConfig(level=logging.INFO)
    init_db()
    session = SessionLocal()
    try:
        added = load_products(session)
        logger.info("Added %d products", added)

        email, password = os.getenv("ADMIN_EMAIL"), os.getenv("ADMIN_PASSWORD")
        if email and password:
            admin = ensure_admin(session, email, password)
            logger.info("Admin account ready: %s", admin.email)
        else:
            logger.warning("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin account")
    finally:
        session.close()


if __name__ == "__main__":
    main()
