#!/usr/bin/env python3
"""Build the catalog and run the STAC API server."""

import uvicorn

from raster_catalog.api.catalog_api import create_app
from raster_catalog.connectors.settings import SettingsResource
from raster_catalog.ingest.scanner import build_registry


def main() -> None:
    settings = SettingsResource.create()
    app = create_app(build_registry(settings))
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
