"""FastAPI application serving the raster catalog as a STAC API.

The registry is built once before the app is created and read on every
request; nothing here mutates it.
"""

from urllib.parse import urljoin

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from raster_catalog.catalog import service
from raster_catalog.catalog.registry import Registry
from raster_catalog.config.constants import MEDIA_TYPE_GEOJSON, MEDIA_TYPE_HTML, MEDIA_TYPE_JSON, MEDIA_TYPE_OPENAPI
from raster_catalog.models.query import BadRequest, NotFound, SearchRequest
from raster_catalog.models.stac import FeatureCollection, Item, StacLink, StacModel, StacRel

WKT_DESCRIPTION = "WKT geometry, e.g. POLYGON ((30 10, 40 40, 20 40, 10 20, 30 10))"


def get_registry(request: Request) -> Registry:
    """Dependency returning the registry the app was created with."""
    registry: Registry = request.app.state.registry
    return registry


def _respond(result: StacModel | NotFound | BadRequest, media_type: str = MEDIA_TYPE_JSON) -> Response:
    """Convert a query outcome into an HTTP response.

    :param result: Document, NotFound or BadRequest
    :param media_type: Media type of a successful response
    :returns: Response with the JSON document
    :raises HTTPException: 404 for NotFound, 400 for BadRequest
    """
    if isinstance(result, NotFound):
        raise HTTPException(status_code=404, detail=result.message)
    if isinstance(result, BadRequest):
        raise HTTPException(status_code=400, detail={"error": result.error, "reason": result.reason})
    if isinstance(result, (Item, FeatureCollection)):
        media_type = MEDIA_TYPE_GEOJSON
    return Response(content=result.to_json(), media_type=media_type)


def _service_links(registry: Registry) -> list[StacLink]:
    """Links to the OpenAPI description and the interactive docs FastAPI serves."""
    return [
        StacLink(
            rel=StacRel.SERVICE_DESC,
            type=MEDIA_TYPE_OPENAPI,
            href=urljoin(registry.base_url, "openapi.json"),
        ),
        StacLink(rel=StacRel.SERVICE_DOC, type=MEDIA_TYPE_HTML, href=urljoin(registry.base_url, "docs")),
    ]


def create_app(registry: Registry) -> FastAPI:
    """Create the STAC API application for a registry.

    :param registry: Service registry to serve
    :returns: FastAPI application
    """
    app = FastAPI(
        title=registry.title,
        description=registry.description,
        version="1.0.0",
    )
    app.state.registry = registry
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/")
    def landing(registry: Registry = Depends(get_registry)) -> Response:
        """STAC API landing page."""
        return _respond(service.get_landing(registry, extra_links=_service_links(registry)))

    @app.get("/collections/{collection_id}/items")
    def list_collection_items(
        collection_id: str,
        intersects: str | None = Query(default=None, description=WKT_DESCRIPTION),
        contains: str | None = Query(default=None, description=WKT_DESCRIPTION),
        bbox: str | None = Query(default=None, description="Bounding box: minx,miny,maxx,maxy"),
        sortby: str | None = Query(default=None, description="Sort expression, e.g. -spatial_resolution"),
        limit: str | None = Query(default=None, description="Maximum number of items to return"),
        registry: Registry = Depends(get_registry),
    ) -> Response:
        """Items of a collection, filtered, sorted and limited."""
        return _respond(service.find_items(registry, collection_id, intersects, contains, bbox, sortby, limit))

    @app.get("/collections/{collection_id}/items/{item_id}")
    def get_item(collection_id: str, item_id: str, registry: Registry = Depends(get_registry)) -> Response:
        """A single STAC Item."""
        return _respond(service.get_item(registry, collection_id, item_id))

    @app.get("/collections/{collection_id}/{item_id}")
    def get_collection_item(collection_id: str, item_id: str, registry: Registry = Depends(get_registry)) -> Response:
        """A single STAC Item, addressed relative to the collection URL."""
        return _respond(service.get_item(registry, collection_id, item_id))

    @app.get("/collections/{collection_id}")
    def get_collection(
        collection_id: str,
        intersects: str | None = Query(default=None, description=WKT_DESCRIPTION),
        contains: str | None = Query(default=None, description=WKT_DESCRIPTION),
        bbox: str | None = Query(default=None, description="Bounding box: minx,miny,maxx,maxy"),
        sortby: str | None = Query(default=None, description="Sort expression, e.g. -spatial_resolution"),
        limit: str | None = Query(default=None, description="Maximum number of items to return"),
        registry: Registry = Depends(get_registry),
    ) -> Response:
        """A STAC Collection, or a filtered FeatureCollection when query parameters are supplied.

        example: /collections/imagery?intersects=POLYGON ((30 10, 40 40, 20 40, 10 20, 30 10))
        """
        return _respond(service.get_collection_items(registry, collection_id, intersects, contains, bbox, sortby, limit))

    @app.post("/search")
    @app.post("/stac/search")
    def search_items(request: SearchRequest, registry: Registry = Depends(get_registry)) -> Response:
        """Search every collection at once. Also served at /stac/search for sat-api-browser."""
        return _respond(service.search(registry, request))

    return app
