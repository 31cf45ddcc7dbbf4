"""Helper functions to render catalog objects as STAC documents."""

from collections.abc import Iterable, Sequence
from urllib.parse import quote, urljoin

from shapely.geometry import mapping

from raster_catalog.catalog.collection import Collection
from raster_catalog.catalog.registry import Registry
from raster_catalog.config.constants import MEDIA_TYPE_GEOJSON, MEDIA_TYPE_JSON
from raster_catalog.models.models import FeatureSource
from raster_catalog.models.stac import (
    Extent,
    FeatureCollection,
    Item,
    LandingPage,
    SpatialExtent,
    StacCollection,
    StacLink,
    StacRel,
    TemporalExtent,
)

WORLD_BBOX = [-180.0, -90.0, 180.0, 90.0]


def collections_url(base_url: str) -> str:
    """URL of the collections listing.

    Joins are relative, so a base URL without a trailing slash loses its last
    path segment, as ``urljoin`` does.

    :param base_url: Service base URL
    :returns: URL ending in ``collections/``
    """
    return urljoin(base_url, "collections/")


def collection_url(base_url: str, collection_id: str) -> str:
    """URL of a collection, with a trailing slash so item URLs can be joined onto it.

    :param base_url: Service base URL
    :param collection_id: Collection ID
    :returns: Collection URL
    """
    return urljoin(collections_url(base_url), quote(collection_id, safe="") + "/")


def item_url(base_url: str, collection_id: str, item_id: str) -> str:
    """URL of an item within its collection.

    :param base_url: Service base URL
    :param collection_id: Collection ID
    :param item_id: Item ID
    :returns: Item URL
    """
    return urljoin(collection_url(base_url, collection_id), quote(item_id, safe=""))


def root_link(base_url: str) -> StacLink:
    return StacLink(rel=StacRel.ROOT, type=MEDIA_TYPE_JSON, href=base_url)


def self_link(href: str) -> StacLink:
    return StacLink(rel=StacRel.SELF, type=MEDIA_TYPE_JSON, href=href)


def child_link(base_url: str, collection_id: str) -> StacLink:
    return StacLink(rel=StacRel.CHILD, type=MEDIA_TYPE_JSON, href=collection_url(base_url, collection_id))


def item_link(base_url: str, collection_id: str, item_id: str) -> StacLink:
    return StacLink(rel=StacRel.ITEM, type=MEDIA_TYPE_GEOJSON, href=item_url(base_url, collection_id, item_id))


def create_landing_page(registry: Registry, extra_links: Sequence[StacLink] = ()) -> LandingPage:
    """Create the STAC landing page of a registry.

    Links are root, self, then one child link per collection.

    :param registry: Service registry
    :param extra_links: Links appended after the collection links
    :returns: LandingPage instance
    """
    links = [root_link(registry.base_url), self_link(registry.base_url)]
    links.extend(child_link(registry.base_url, collection_id) for collection_id in registry.collections)
    links.extend(extra_links)
    return LandingPage(
        id=registry.id,
        title=registry.title,
        description=registry.description,
        links=links,
    )


def collection_extent(collection: Collection) -> Extent:
    """Spatial and temporal extent covering every record of a collection.

    :param collection: Collection
    :returns: Extent instance; the whole world when the collection is empty
    """
    records = collection.all()
    if records:
        bounds = [record.boundary.bounds for record in records]
        bbox = [
            min(b[0] for b in bounds),
            min(b[1] for b in bounds),
            max(b[2] for b in bounds),
            max(b[3] for b in bounds),
        ]
    else:
        bbox = list(WORLD_BBOX)

    timestamps = [record.timestamp for record in records if record.timestamp is not None]
    interval = [min(timestamps), max(timestamps)] if timestamps else [None, None]
    return Extent(spatial=SpatialExtent(bbox=[bbox]), temporal=TemporalExtent(interval=[interval]))


def create_stac_collection(collection: Collection, base_url: str) -> StacCollection:
    """Create a STAC Collection with root, self and one item link per record.

    :param collection: Collection
    :param base_url: Service base URL
    :returns: StacCollection instance
    """
    links = [root_link(base_url), self_link(collection_url(base_url, collection.id))]
    links.extend(item_link(base_url, collection.id, record.id) for record in collection.all())
    return StacCollection(
        id=collection.id,
        title=collection.title,
        description=collection.description,
        extent=collection_extent(collection),
        links=links,
    )


def create_stac_item(source: FeatureSource) -> Item:
    """Create a STAC Item (GeoJSON Feature) for a record.

    The bbox is the envelope of the boundary.

    :param source: Record to encode
    :returns: Item instance
    """
    boundary = source.boundary
    return Item(
        id=source.id,
        bbox=list(boundary.bounds),
        geometry=mapping(boundary),
        properties=source.stac_properties(),
        links=[],
        assets=source.stac_assets(),
        collection=source.collection_id,
    )


def create_feature_collection(sources: Iterable[FeatureSource]) -> FeatureCollection:
    """Convert records into a GeoJSON FeatureCollection of STAC Items.

    :param sources: Records to encode
    :returns: FeatureCollection instance
    """
    return FeatureCollection(features=[create_stac_item(source) for source in sources])
