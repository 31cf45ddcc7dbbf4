import pytest
from fastapi.testclient import TestClient

from raster_catalog.api.catalog_api import create_app
from raster_catalog.catalog.registry import Registry
from raster_catalog.config.constants import MEDIA_TYPE_GEOJSON, MEDIA_TYPE_JSON


@pytest.fixture
def client(registry: Registry) -> TestClient:
    return TestClient(create_app(registry))


def test_landing_page(client: TestClient) -> None:
    """
    Test that the landing page links to collections and the API description.
    """
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"] == MEDIA_TYPE_JSON
    body = response.json()
    assert body["type"] == "Catalog"
    rels = [link["rel"] for link in body["links"]]
    assert rels == ["root", "self", "child", "child", "service-desc", "service-doc"]
    assert body["links"][4]["href"] == "http://localhost:8000/openapi.json"


def test_collection_document_and_filtered_collection(client: TestClient) -> None:
    """
    Test that /collections/{id} returns the collection unless query parameters are given.
    """
    response = client.get("/collections/imagery")
    assert response.status_code == 200
    assert response.json()["type"] == "Collection"

    response = client.get("/collections/imagery", params={"sortby": "-spatial_resolution", "limit": "2"})
    assert response.status_code == 200
    assert response.headers["content-type"] == MEDIA_TYPE_GEOJSON
    assert [f["id"] for f in response.json()["features"]] == ["img2", "img3"]


def test_collection_items_query(client: TestClient) -> None:
    """
    Test filtering items with WKT and sorting with a URL-decoded '+'.
    """
    response = client.get(
        "/collections/imagery/items",
        params={"intersects": "POLYGON ((4 4, 6 4, 6 6, 4 6, 4 4))"},
    )
    assert response.status_code == 200
    assert [f["id"] for f in response.json()["features"]] == ["img1", "img2"]

    response = client.get("/collections/imagery/items?sortby=+spatial_resolution")
    assert response.status_code == 200
    assert [f["id"] for f in response.json()["features"]] == ["img1", "img3", "img2"]


def test_items(client: TestClient) -> None:
    """
    Test both item routes and the geo+json media type.
    """
    for path in ("/collections/imagery/items/img1", "/collections/imagery/img1"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.headers["content-type"] == MEDIA_TYPE_GEOJSON
        body = response.json()
        assert body["type"] == "Feature"
        assert body["collection"] == "imagery"


def test_not_found(client: TestClient) -> None:
    """
    Test 404 responses for unknown collections and items.
    """
    response = client.get("/collections/missing")
    assert response.status_code == 404
    assert response.json()["detail"] == "Collection not found: missing"

    response = client.get("/collections/imagery/items/dem1")
    assert response.status_code == 404
    assert response.json()["detail"] == "Item not found: dem1"


def test_bad_requests(client: TestClient) -> None:
    """
    Test 400 responses carrying the error name.
    """
    response = client.get("/collections/imagery/items", params={"contains": "POINT (1 1)"})
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "MalformedFilter"

    response = client.get("/collections/imagery/items", params={"bbox": "0,0,1,1", "intersects": "POINT (1 1)"})
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "ConflictingFilters"

    response = client.get("/collections/imagery/items", params={"limit": "-5"})
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "InvalidLimit"


def test_search(client: TestClient) -> None:
    """
    Test searching across collections with a JSON body.
    """
    response = client.post("/search", json={"bbox": [4, 4, 6, 6], "limit": "2"})
    assert response.status_code == 200
    assert response.headers["content-type"] == MEDIA_TYPE_GEOJSON
    assert [f["id"] for f in response.json()["features"]] == ["img1", "img2"]

    response = client.post("/search", json={"collections": ["dem"], "sortby": "cloud_cover"})
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "UnsupportedSort"


def test_search_is_also_served_under_stac_prefix(client: TestClient) -> None:
    """
    Test the /stac/search alias used by sat-api-browser.
    """
    response = client.post("/stac/search", json={"collections": ["dem"]})
    assert response.status_code == 200
    assert [f["id"] for f in response.json()["features"]] == ["dem1"]


def test_search_rejects_nan_bbox(client: TestClient) -> None:
    """
    Test that a NaN literal in the JSON body bbox is a malformed filter.
    """
    response = client.post(
        "/search", content='{"bbox": [NaN, 0, 1, 1]}', headers={"content-type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "MalformedFilter"
