import os
import tempfile

# Keep module-level engine/upload setup away from the working tree
_tmp = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_tmp}/import.db")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_tmp, "uploads"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.database import Base, enforce_sqlite_foreign_keys, get_db
from storefront.main import app
from storefront.models.product import Product
from storefront.models.users import Profile, ManagedUser
from storefront.routes.catalog import get_catalog_cache
from storefront.utils.catalog_cache import CatalogCache
from storefront.utils.hashing import get_password_hash
from storefront.utils.storage import ProductImageBucket, get_bucket
from storefront.utils.tokenJWT import create_access_token


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # Turned on before the first connection so ON DELETE actions apply
    enforce_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def bucket(tmp_path):
    return ProductImageBucket(root=tmp_path / "uploads", bucket="product-images")


@pytest.fixture
def catalog_cache():
    return CatalogCache()


@pytest.fixture
def client(session_factory, bucket, catalog_cache):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_bucket] = lambda: bucket
    app.dependency_overrides[get_catalog_cache] = lambda: catalog_cache
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make_user(email="shopper@example.com", role="normal", password="secret123", full_name="Test Shopper"):
        profile = Profile(email=email, password_hash=get_password_hash(password), full_name=full_name, role=role)
        db_session.add(profile)
        db_session.flush()
        db_session.add(ManagedUser(id=profile.id, full_name=full_name, email=email, status="active"))
        db_session.commit()
        db_session.refresh(profile)
        return profile
    return _make_user


@pytest.fixture
def make_product(db_session):
    def _make_product(name="Enamel Mug", price=10.0, stock_quantity=5, image_url=None, description=None):
        product = Product(
            name=name, price=price, stock_quantity=stock_quantity,
            image_url=image_url, description=description,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product
    return _make_product


def auth_headers(profile):
    token = create_access_token({"sub": profile.email, "role": profile.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def shopper(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role="admin", full_name="Admin")
