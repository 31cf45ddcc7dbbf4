"""Raster header reading with rasterio."""

from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import urlparse

import rasterio
from dagster import get_dagster_logger
from rasterio.errors import RasterioError
from rasterio.session import AWSSession

from raster_catalog.config.constants import TAG_CLOUD_COVERAGE, TAG_IMAGE_DESCRIPTION, TAG_PRODUCT_START_TIME
from raster_catalog.errors import IngestionSkipError
from raster_catalog.models.models import RasterHeader

logger = get_dagster_logger()


def resource_name(href: str) -> str:
    """Name of a raster resource: the file stem of its path or object key.

    :param href: Local path or URI
    :returns: Resource name
    """
    if "://" in href:
        return PurePosixPath(urlparse(href).path).stem
    return Path(href).stem


def _parse_cloud_coverage(href: str, value: str | None) -> float | None:
    if value is None:
        return None
    try:
        cloud_coverage = float(value)
    except ValueError:
        logger.warning(f"Ignoring unparsable {TAG_CLOUD_COVERAGE}={value!r} in {href}")
        return None
    if not 0 <= cloud_coverage <= 100:
        logger.warning(f"Ignoring out of range {TAG_CLOUD_COVERAGE}={value!r} in {href}")
        return None
    return cloud_coverage


def _parse_timestamp(href: str, value: str | None, scanned_at: datetime) -> datetime:
    """Parse the product start time; falls back to the scan time when missing or invalid."""
    if value is None:
        return scanned_at
    try:
        timestamp = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Ignoring unparsable {TAG_PRODUCT_START_TIME}={value!r} in {href}")
        return scanned_at
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def read_raster_header(
    href: str,
    session_options: dict[str, Any] | None = None,
    env_options: dict[str, Any] | None = None,
    scanned_at: datetime | None = None,
) -> RasterHeader:
    """Open a raster and read the header information needed for cataloging.

    :param href: Local path or URI (``s3://`` URIs need session options)
    :param session_options: Optional keyword arguments for an AWSSession
    :param env_options: Optional GDAL configuration options
    :param scanned_at: Time used when the raster has no product start time
    :returns: RasterHeader instance
    :raises IngestionSkipError: If the raster cannot be opened or is not georeferenced
    """
    scanned_at = scanned_at or datetime.now(timezone.utc)
    session = AWSSession(**session_options) if session_options else None

    try:
        with rasterio.Env(session=session, **(env_options or {})), rasterio.open(href) as src:
            if src.crs is None:
                raise IngestionSkipError(f"{href} has no coordinate reference system")
            tags = src.tags()
            return RasterHeader(
                href=href,
                name=resource_name(href),
                width=src.width,
                height=src.height,
                geotransform=src.transform.to_gdal(),
                crs=src.crs.to_string(),
                band_count=src.count,
                description=tags.get(TAG_IMAGE_DESCRIPTION) or None,
                cloud_coverage=_parse_cloud_coverage(href, tags.get(TAG_CLOUD_COVERAGE)),
                timestamp=_parse_timestamp(href, tags.get(TAG_PRODUCT_START_TIME), scanned_at),
            )
    except RasterioError as e:
        raise IngestionSkipError(f"Could not open {href}: {e}") from e
