from datetime import datetime, timezone

import pytest
from shapely.geometry import box

from raster_catalog.catalog.collection import Collection
from raster_catalog.catalog.registry import Registry
from raster_catalog.models.models import CatalogRecord, Resolution

BASE_URL = "http://localhost:8000/"


def make_record(
    record_id: str,
    bounds: tuple[float, float, float, float],
    resolution: float = 10.0,
    collection_id: str | None = None,
    timestamp: datetime | None = None,
    cloud_coverage: float | None = None,
) -> CatalogRecord:
    """Build a record with a rectangular footprint and a square pixel size."""
    return CatalogRecord(
        id=record_id,
        source_ref=f"/data/{collection_id or 'rasters'}/{record_id}.tif",
        boundary=box(*bounds),
        source_crs="EPSG:4326",
        resolution=Resolution(x=resolution, y=resolution),
        band_count=1,
        cloud_coverage=cloud_coverage,
        timestamp=timestamp,
        collection_id=collection_id,
    )


@pytest.fixture
def imagery() -> Collection:
    """Three imagery records; img1 and img2 overlap, img3 lies far to the east."""
    return Collection(
        "imagery",
        "Imagery",
        "Optical imagery",
        [
            make_record("img1", (0, 0, 10, 10), 10.0, timestamp=datetime(2023, 5, 1, tzinfo=timezone.utc)),
            make_record("img2", (5, 5, 15, 15), 30.0, timestamp=datetime(2023, 6, 1, tzinfo=timezone.utc)),
            make_record("img3", (100, 0, 110, 10), 20.0, cloud_coverage=12.5),
        ],
    )


@pytest.fixture
def dem() -> Collection:
    return Collection("dem", "DEM", "Elevation models", [make_record("dem1", (0, 0, 20, 20), 90.0)])


@pytest.fixture
def registry(imagery: Collection, dem: Collection) -> Registry:
    return Registry(
        id="raster-catalog",
        title="Raster Catalog",
        description="Test catalog",
        base_url=BASE_URL,
        collections=[imagery, dem],
    )


@pytest.fixture
def record_factory():
    return make_record
