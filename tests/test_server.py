import pytest
from fastapi.testclient import TestClient

from listing_browse.store import InMemoryListingStore

import server

from .conftest import make_catalog, make_record


@pytest.fixture
def client():
    records = make_catalog(145) + [
        make_record("w1", minutes=500, categoryId="watch", brandId="rolex", modelId="sub", title="Submariner", price=9000),
        make_record("w2", minutes=501, categoryId="watch", brandId="rolex", modelId="gmt", title="GMT", price=12000),
    ]
    store = InMemoryListingStore(records)
    server.app.dependency_overrides[server.get_store] = lambda: store
    yield TestClient(server.app)
    server.app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_browse_category_first_view(client):
    response = client.get("/browse/category/saat")

    assert response.status_code == 200
    body = response.json()
    assert len(body["records"]) == 24
    assert body["loaded_count"] == 60
    assert body["total_count"] == 145
    assert body["has_more"] is True
    assert body["url"] == "/browse/category/saat"
    assert body["records"][0]["id"] == "r0144"


def test_browse_hydrates_and_canonicalizes_query(client):
    response = client.get("/browse/category/saat?size=200&sort=priceDesc&maxPrice=100&junk=1")

    body = response.json()
    assert body["sort"] == "priceDesc"
    assert body["view_size"] == 200
    assert body["has_more"] is False
    assert body["matched_count"] == 100
    assert body["records"][0]["price"] == 100
    assert body["url"] == "/browse/category/saat?maxPrice=100&sort=priceDesc&size=200"
    assert body["filters"] == [{"key": "price", "label": "Fiyat: 0 - 100"}]


def test_browse_brand_page(client):
    body = client.get("/browse/brand/rolex?q=gmt").json()
    assert [r["id"] for r in body["records"]] == ["w2"]


def test_unknown_variant_is_404(client):
    assert client.get("/browse/shop/saat").status_code == 404


def test_browse_brand_page_filters_by_model(client):
    body = client.get("/browse/brand/rolex?modelId=sub").json()

    assert [r["id"] for r in body["records"]] == ["w1"]
    assert body["url"] == "/browse/brand/rolex?modelId=sub"
    assert body["filters"] == [{"key": "model", "label": "Model: sub"}]


def test_oversized_numeric_parameters_are_ignored(client):
    response = client.get("/browse/category/saat?size=" + "9" * 5000)

    assert response.status_code == 200
    assert response.json()["view_size"] == 24
