"""STAC document models returned by the catalog.

The models may hold more than the protocol requires internally, but their
serialized form only carries STAC fields.
"""

from datetime import datetime as dt
from enum import Enum
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field as PydanticField, SerializerFunctionWrapHandler, model_serializer

from raster_catalog.config.constants import STAC_CORE_CONFORMANCE, STAC_DEFAULT_LICENSE, STAC_VERSION


class StacRel(str, Enum):
    """Link relations describing how a link relates to the current document."""

    SELF = "self"
    ROOT = "root"
    PARENT = "parent"
    CHILD = "child"
    ITEM = "item"
    SERVICE_DESC = "service-desc"
    SERVICE_DOC = "service-doc"


class StacModel(BaseModel):
    """Base for STAC documents.

    Optional members left as ``None`` are dropped from the serialized form,
    except the keys listed in ``keep_null_keys``.
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    keep_null_keys: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _drop_unset_members(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        return {key: value for key, value in data.items() if value is not None or key in self.keep_null_keys}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary.

        :returns: Document dictionary
        """
        result: dict[str, Any] = self.model_dump(mode="json", by_alias=True)
        return result

    def to_json(self) -> str:
        """Serialize to JSON text.

        :returns: JSON string
        """
        return self.model_dump_json(by_alias=True)


class StacLink(StacModel):
    """Entry in the ``links`` list of a STAC document."""

    rel: StacRel = PydanticField(..., description="Relation to the current document")
    type: str = PydanticField(..., description="Media type the client can expect from the link")
    href: str = PydanticField(..., description="Hyperlink")


class Asset(StacModel):
    """Downloadable file attached to an item."""

    href: str = PydanticField(..., description="Locator of the asset")
    type: str | None = PydanticField(default=None, description="Media type of the asset")
    title: str | None = PydanticField(default=None, description="Human readable title")


class ItemProperties(StacModel):
    """Properties object of a STAC Item (core and common metadata)."""

    keep_null_keys: ClassVar[frozenset[str]] = frozenset({"datetime"})

    title: str = PydanticField(..., description="Item title")
    description: str | None = PydanticField(default=None, description="Item description")
    datetime: dt | None = PydanticField(default=None, description="Acquisition time")
    created: dt | None = PydanticField(default=None, description="Metadata creation time")
    updated: dt | None = PydanticField(default=None, description="Metadata update time")
    spatial_resolution: float = PydanticField(..., description="Average ground resolution of a pixel")
    cloud_cover: float | None = PydanticField(
        default=None, serialization_alias="eo:cloud_cover", description="Cloud coverage percentage"
    )


class Item(StacModel):
    """A STAC Item: GeoJSON Feature with STAC members."""

    type: Literal["Feature"] = "Feature"
    stac_version: str = STAC_VERSION
    id: str = PydanticField(..., description="Item ID, unique within its collection")
    bbox: list[float] = PydanticField(..., description="Envelope of the geometry")
    geometry: dict[str, Any] = PydanticField(..., description="GeoJSON geometry of the footprint")
    properties: ItemProperties
    links: list[StacLink] = PydanticField(default_factory=list)
    assets: dict[str, Asset] = PydanticField(default_factory=dict)
    collection: str | None = PydanticField(default=None, description="ID of the owning collection")


class FeatureCollection(StacModel):
    """GeoJSON FeatureCollection of items, used for filtered results."""

    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[Item] = PydanticField(default_factory=list)


class SpatialExtent(StacModel):
    bbox: list[list[float]]


class TemporalExtent(StacModel):
    interval: list[list[dt | None]]


class Extent(StacModel):
    spatial: SpatialExtent
    temporal: TemporalExtent


class StacCollection(StacModel):
    """A STAC Collection with one item link per record."""

    type: Literal["Collection"] = "Collection"
    stac_version: str = STAC_VERSION
    id: str
    title: str
    description: str
    license: str = STAC_DEFAULT_LICENSE
    extent: Extent
    links: list[StacLink] = PydanticField(default_factory=list)


class LandingPage(StacModel):
    """The STAC API landing page."""

    type: Literal["Catalog"] = "Catalog"
    stac_version: str = STAC_VERSION
    id: str
    title: str
    description: str
    conforms_to: list[str] = PydanticField(
        default_factory=lambda: [STAC_CORE_CONFORMANCE], serialization_alias="conformsTo"
    )
    links: list[StacLink] = PydanticField(default_factory=list)
