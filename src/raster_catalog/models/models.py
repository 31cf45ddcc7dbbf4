"""Data models for cataloged raster resources."""

from datetime import datetime
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field as PydanticField, field_validator
from shapely.geometry import Polygon

from raster_catalog.models.stac import Asset, ItemProperties


class Resolution(BaseModel):
    """Ground sample distance of one pixel.

    Meters when the source CRS was detected as geographic, native map units otherwise.

    :param x: Horizontal pixel size
    :param y: Vertical pixel size
    """

    model_config = ConfigDict(frozen=True)

    x: float = PydanticField(..., gt=0, description="Horizontal pixel size")
    y: float = PydanticField(..., gt=0, description="Vertical pixel size")

    @property
    def average(self) -> float:
        """Simple average of the x and y resolution."""
        return (self.x + self.y) / 2


class RasterHeader(BaseModel):
    """Header information read from a raster resource by the ingestion reader.

    :param href: Path or URI the raster was opened from
    :param name: Resource name used as record ID
    :param width: Raster width in pixels
    :param height: Raster height in pixels
    :param geotransform: GDAL-ordered affine coefficients
    :param crs: Source CRS identifier
    :param band_count: Number of bands
    :param description: Value of the image description tag
    :param cloud_coverage: Cloud coverage percentage from metadata
    :param timestamp: Acquisition time from metadata
    """

    model_config = ConfigDict(frozen=True)

    href: str = PydanticField(..., description="Path or URI the raster was opened from")
    name: str = PydanticField(..., description="Resource name used as record ID")
    width: int = PydanticField(..., description="Raster width in pixels")
    height: int = PydanticField(..., description="Raster height in pixels")
    geotransform: tuple[float, float, float, float, float, float] = PydanticField(
        ..., description="GDAL-ordered geotransform coefficients"
    )
    crs: str = PydanticField(..., description="Source CRS identifier")
    band_count: int = PydanticField(..., ge=0, description="Number of bands")
    description: str | None = PydanticField(default=None, description="Image description tag")
    cloud_coverage: float | None = PydanticField(default=None, description="Cloud coverage percentage")
    timestamp: datetime | None = PydanticField(default=None, description="Acquisition time")


class CatalogRecord(BaseModel):
    """One cataloged raster resource.

    Records are immutable once created. ``collection_id`` is stamped when the
    record is placed into a collection.

    :param id: Record ID, unique within its collection
    :param source_ref: Opaque locator of the raster
    :param boundary: Footprint polygon in longitude/latitude
    :param source_crs: CRS the raster is stored in
    :param resolution: Ground resolution estimate
    :param band_count: Number of bands
    :param description: Optional description
    :param cloud_coverage: Optional cloud coverage percentage (0-100)
    :param timestamp: Optional acquisition time
    :param collection_id: ID of the owning collection
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str = PydanticField(..., min_length=1, description="Record ID, unique within its collection")
    source_ref: str = PydanticField(..., description="Path or URI of the raster")
    boundary: Polygon = PydanticField(..., description="Footprint in geographic coordinates")
    source_crs: str = PydanticField(..., description="CRS the raster is natively stored in")
    resolution: Resolution
    band_count: int = PydanticField(..., ge=0, description="Number of bands")
    description: str | None = PydanticField(default=None, description="Image description")
    cloud_coverage: float | None = PydanticField(default=None, ge=0, le=100, description="Cloud coverage percentage")
    timestamp: datetime | None = PydanticField(default=None, description="Acquisition time")
    collection_id: str | None = PydanticField(default=None, description="ID of the owning collection")

    @field_validator("boundary")
    @classmethod
    def _check_boundary(cls, value: Polygon) -> Polygon:
        if value.is_empty or len(value.exterior.coords) < 4:
            raise ValueError("boundary must be a closed ring with at least 4 vertices")
        return value

    def stac_properties(self) -> ItemProperties:
        """Create STAC item properties from the record.

        :returns: ItemProperties instance
        """
        return ItemProperties(
            title=self.id,
            description=self.description,
            datetime=self.timestamp,
            spatial_resolution=self.resolution.average,
            cloud_cover=self.cloud_coverage,
        )

    def stac_assets(self) -> dict[str, Asset]:
        """Create STAC assets pointing at the raster file.

        :returns: Mapping of asset key to Asset
        """
        return {"file": Asset(href=self.source_ref)}


@runtime_checkable
class FeatureSource(Protocol):
    """Anything that can be encoded as a STAC Item."""

    @property
    def id(self) -> str: ...

    @property
    def collection_id(self) -> str | None: ...

    @property
    def boundary(self) -> Polygon: ...

    def stac_properties(self) -> ItemProperties: ...

    def stac_assets(self) -> dict[str, Asset]: ...
