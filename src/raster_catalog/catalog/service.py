"""Query surface of the catalog.

Every function takes the registry explicitly. Caller errors come back as
``BadRequest`` values and missing collections or items as ``NotFound``; no
exception crosses this boundary for a bad request.
"""

from collections.abc import Sequence

from raster_catalog.catalog.registry import Registry
from raster_catalog.catalog.stac_encoder import (
    create_feature_collection,
    create_landing_page,
    create_stac_collection,
    create_stac_item,
)
from raster_catalog.errors import CallerError
from raster_catalog.geospatial.filters import build_spatial_filter
from raster_catalog.geospatial.query import parse_limit, parse_sort, query
from raster_catalog.models.models import CatalogRecord
from raster_catalog.models.query import BadRequest, NotFound, SearchRequest
from raster_catalog.models.stac import FeatureCollection, Item, LandingPage, StacCollection, StacLink


def _run_query(
    records: Sequence[CatalogRecord],
    intersects: str | None,
    contains: str | None,
    bbox: str | Sequence[float] | None,
    sortby: str | None,
    limit: int | str | None,
) -> FeatureCollection | BadRequest:
    try:
        spatial_filter = build_spatial_filter(intersects=intersects, contains=contains, bbox=bbox)
        sort = parse_sort(sortby) if sortby is not None else None
        max_items = parse_limit(limit)
    except CallerError as e:
        return BadRequest.from_error(e)
    return create_feature_collection(query(records, spatial_filter=spatial_filter, sort=sort, limit=max_items))


def get_landing(registry: Registry, extra_links: Sequence[StacLink] = ()) -> LandingPage:
    """STAC landing page of the service.

    :param registry: Service registry
    :param extra_links: Links appended after the collection links
    :returns: LandingPage
    """
    return create_landing_page(registry, extra_links)


def get_collection(registry: Registry, collection_id: str) -> StacCollection | NotFound:
    """STAC Collection document.

    :param registry: Service registry
    :param collection_id: Collection ID
    :returns: StacCollection, or NotFound
    """
    collection = registry.get_collection(collection_id)
    if collection is None:
        return NotFound(resource="collection", id=collection_id)
    return create_stac_collection(collection, registry.base_url)


def find_items(
    registry: Registry,
    collection_id: str,
    intersects: str | None = None,
    contains: str | None = None,
    bbox: str | Sequence[float] | None = None,
    sortby: str | None = None,
    limit: int | str | None = None,
) -> FeatureCollection | NotFound | BadRequest:
    """Items of a collection matching the filter, sorted and limited.

    :param registry: Service registry
    :param collection_id: Collection ID
    :param intersects: WKT geometry records must intersect
    :param contains: WKT polygon records must contain
    :param bbox: Bounding box records must intersect
    :param sortby: Sort expression
    :param limit: Maximum number of items
    :returns: FeatureCollection, NotFound or BadRequest
    """
    collection = registry.get_collection(collection_id)
    if collection is None:
        return NotFound(resource="collection", id=collection_id)
    return _run_query(collection.all(), intersects, contains, bbox, sortby, limit)


def get_collection_items(
    registry: Registry,
    collection_id: str,
    intersects: str | None = None,
    contains: str | None = None,
    bbox: str | Sequence[float] | None = None,
    sortby: str | None = None,
    limit: int | str | None = None,
) -> StacCollection | FeatureCollection | NotFound | BadRequest:
    """Collection details, as a filtered feature list when any query parameter is given.

    With no filter, sort or limit the full STAC Collection document is returned.

    :param registry: Service registry
    :param collection_id: Collection ID
    :param intersects: WKT geometry records must intersect
    :param contains: WKT polygon records must contain
    :param bbox: Bounding box records must intersect
    :param sortby: Sort expression
    :param limit: Maximum number of items
    :returns: StacCollection, FeatureCollection, NotFound or BadRequest
    """
    if all(param is None for param in (intersects, contains, bbox, sortby, limit)):
        return get_collection(registry, collection_id)
    return find_items(registry, collection_id, intersects, contains, bbox, sortby, limit)


def get_item(registry: Registry, collection_id: str, item_id: str) -> Item | NotFound:
    """A single item. Item IDs are scoped to their collection.

    :param registry: Service registry
    :param collection_id: Collection ID
    :param item_id: Item ID
    :returns: Item, or NotFound
    """
    collection = registry.get_collection(collection_id)
    if collection is None:
        return NotFound(resource="collection", id=collection_id)
    record = collection.get_item(item_id)
    if record is None:
        return NotFound(resource="item", id=item_id)
    return create_stac_item(record)


def search(registry: Registry, request: SearchRequest) -> FeatureCollection | BadRequest:
    """Search items across collections.

    :param registry: Service registry
    :param request: Search parameters
    :returns: FeatureCollection, or BadRequest
    """
    records = registry.all_records(request.collections)
    return _run_query(records, request.intersects, request.contains, request.bbox, request.sortby, request.limit)
