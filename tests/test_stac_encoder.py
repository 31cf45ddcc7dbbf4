from datetime import datetime, timezone

import pytest
from shapely.geometry import box

from raster_catalog.catalog.collection import Collection
from raster_catalog.catalog.registry import Registry
from raster_catalog.catalog.stac_encoder import (
    collection_extent,
    collection_url,
    collections_url,
    create_feature_collection,
    create_landing_page,
    create_stac_collection,
    create_stac_item,
    item_url,
)
from raster_catalog.config.constants import MEDIA_TYPE_GEOJSON, STAC_CORE_CONFORMANCE
from raster_catalog.models.models import CatalogRecord, Resolution

BASE_URL = "http://localhost:8000/"


def test_urls_are_joined_relative_to_base_url() -> None:
    """
    Test URL construction with and without a trailing slash on the base URL.
    """
    assert collections_url(BASE_URL) == "http://localhost:8000/collections/"
    assert collection_url(BASE_URL, "imagery") == "http://localhost:8000/collections/imagery/"
    assert item_url(BASE_URL, "imagery", "img1") == "http://localhost:8000/collections/imagery/img1"
    assert collection_url("http://example.com/api/", "dem") == "http://example.com/api/collections/dem/"
    # Without a trailing slash the last path segment is replaced
    assert collections_url("http://example.com/api") == "http://example.com/collections/"


def test_urls_escape_ids() -> None:
    """
    Test that IDs are escaped as single path segments.
    """
    assert item_url(BASE_URL, "my imagery", "a/b") == "http://localhost:8000/collections/my%20imagery/a%2Fb"


def test_landing_page_links(registry: Registry) -> None:
    """
    Test that the landing page links to root, itself and every collection.
    """
    document = create_landing_page(registry).to_dict()

    assert document["type"] == "Catalog"
    assert document["id"] == "raster-catalog"
    assert document["conformsTo"] == [STAC_CORE_CONFORMANCE]
    assert [link["rel"] for link in document["links"]] == ["root", "self", "child", "child"]
    assert document["links"][0]["href"] == BASE_URL
    assert [link["href"] for link in document["links"][2:]] == [
        "http://localhost:8000/collections/imagery/",
        "http://localhost:8000/collections/dem/",
    ]


def test_stac_collection_document(imagery: Collection) -> None:
    """
    Test the collection document: links, license and extent.
    """
    document = create_stac_collection(imagery, BASE_URL).to_dict()

    assert document["type"] == "Collection"
    assert document["id"] == "imagery"
    assert document["title"] == "Imagery"
    assert document["license"] == "proprietary"
    assert [link["rel"] for link in document["links"]] == ["root", "self", "item", "item", "item"]
    assert document["links"][1]["href"] == "http://localhost:8000/collections/imagery/"
    item_links = document["links"][2:]
    assert [link["href"] for link in item_links][0] == "http://localhost:8000/collections/imagery/img1"
    assert all(link["type"] == MEDIA_TYPE_GEOJSON for link in item_links)

    assert document["extent"]["spatial"]["bbox"] == [[0.0, 0.0, 110.0, 15.0]]
    assert document["extent"]["temporal"]["interval"] == [["2023-05-01T00:00:00Z", "2023-06-01T00:00:00Z"]]


def test_empty_collection_extent() -> None:
    """
    Test that an empty collection spans the whole world with an open interval.
    """
    extent = collection_extent(Collection("empty", "Empty", ""))
    assert extent.spatial.bbox == [[-180.0, -90.0, 180.0, 90.0]]
    assert extent.temporal.interval == [[None, None]]


def test_stac_item_document(imagery: Collection) -> None:
    """
    Test the item document built from a record.

    Verifies the bbox is the envelope of the geometry and that optional
    properties are omitted unless set, except datetime.
    """
    document = create_stac_item(imagery.get_item("img1")).to_dict()

    assert document["type"] == "Feature"
    assert document["stac_version"] == "1.0.0"
    assert document["id"] == "img1"
    assert document["collection"] == "imagery"
    assert document["bbox"] == pytest.approx([0.0, 0.0, 10.0, 10.0], abs=1e-9)
    assert document["geometry"]["type"] == "Polygon"
    assert document["links"] == []
    assert document["assets"] == {"file": {"href": "/data/rasters/img1.tif"}}

    properties = document["properties"]
    assert properties["title"] == "img1"
    assert properties["spatial_resolution"] == 10.0
    assert properties["datetime"] == "2023-05-01T00:00:00Z"
    assert "eo:cloud_cover" not in properties
    assert "description" not in properties


def test_stac_item_keeps_null_datetime_and_cloud_cover(imagery: Collection) -> None:
    """
    Test that a record without timestamp serializes datetime as null and carries cloud cover.
    """
    properties = create_stac_item(imagery.get_item("img3")).to_dict()["properties"]
    assert properties["datetime"] is None
    assert properties["eo:cloud_cover"] == 12.5


def test_stac_item_bbox_matches_reprojected_boundary() -> None:
    """
    Test that the bbox equals the envelope for a non-rectangular footprint.
    """
    record = CatalogRecord(
        id="tilted",
        source_ref="s3://bucket/imagery/tilted.tif",
        boundary=box(0, 0, 1, 1).union(box(1, 0, 3, 0.5)).convex_hull,
        source_crs="EPSG:32633",
        resolution=Resolution(x=10, y=20),
        band_count=3,
        description="Tilted scene",
        timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )
    document = create_stac_item(record).to_dict()

    assert document["bbox"] == pytest.approx([0.0, 0.0, 3.0, 1.0], abs=1e-9)
    assert document["properties"]["spatial_resolution"] == 15.0
    assert document["properties"]["description"] == "Tilted scene"
    assert "collection" not in document


def test_feature_collection(imagery: Collection) -> None:
    """
    Test that a feature collection lists one feature per record in order.
    """
    document = create_feature_collection(imagery.all()).to_dict()
    assert document["type"] == "FeatureCollection"
    assert [feature["id"] for feature in document["features"]] == ["img1", "img2", "img3"]
    assert create_feature_collection([]).to_dict() == {"type": "FeatureCollection", "features": []}
