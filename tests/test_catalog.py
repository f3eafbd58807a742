from sqlalchemy.exc import OperationalError

from storefront.database import get_db
from storefront.main import app


def test_home_lists_newest_first(client, make_product):
    first = make_product(name="First")
    second = make_product(name="Second")

    resp = client.get("/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["stale"] is False
    assert [p["id"] for p in body["items"]] == [second.id, first.id]


def test_single_product(client, make_product):
    mug = make_product()
    assert client.get(f"/products/{mug.id}").json()["name"] == mug.name
    assert client.get("/products/999").status_code == 404


class _BrokenSession:
    def query(self, *args):
        raise OperationalError("SELECT", {}, Exception("database unavailable"))

    def close(self):
        pass


def test_cached_listing_served_when_database_fails(client, make_product, catalog_cache):
    make_product(name="Cached")
    client.get("/")

    app.dependency_overrides[get_db] = lambda: _BrokenSession()
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["stale"] is True
    assert [p["name"] for p in resp.json()["items"]] == ["Cached"]


def test_failure_without_cache(client, catalog_cache):
    app.dependency_overrides[get_db] = lambda: _BrokenSession()
    resp = client.get("/")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to load products"
