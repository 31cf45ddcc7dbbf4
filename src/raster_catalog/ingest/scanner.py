"""Build collections and the registry from a data directory or an S3 bucket.

Each resource is normalized independently. Failures are logged and the
resource is skipped; the batch always continues.
"""

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Any

from dagster import get_dagster_logger
from pydantic import ValidationError

from raster_catalog.catalog.collection import Collection, CollectionBuilder
from raster_catalog.catalog.registry import Registry
from raster_catalog.connectors.s3_client import S3Resource, list_object_keys
from raster_catalog.connectors.settings import SettingsResource
from raster_catalog.errors import IngestionSkipError
from raster_catalog.geospatial.normalizer import CoordinateTransformer, Geotransform, normalize_footprint, reproject_points
from raster_catalog.ingest.reader import read_raster_header
from raster_catalog.models.models import CatalogRecord, RasterHeader

logger = get_dagster_logger()

RasterReader = Callable[[str], RasterHeader]


def record_from_header(header: RasterHeader, transformer: CoordinateTransformer = reproject_points) -> CatalogRecord:
    """Normalize a raster header into a catalog record.

    :param header: Raster header
    :param transformer: Coordinate transform capability
    :returns: CatalogRecord instance
    :raises IngestionSkipError: If the header cannot be normalized
    """
    try:
        geotransform = Geotransform.from_gdal(header.geotransform)
        boundary, resolution = normalize_footprint(
            header.width, header.height, geotransform, header.crs, transformer
        )
        return CatalogRecord(
            id=header.name,
            source_ref=header.href,
            boundary=boundary,
            source_crs=header.crs,
            resolution=resolution,
            band_count=header.band_count,
            description=header.description,
            cloud_coverage=header.cloud_coverage,
            timestamp=header.timestamp,
        )
    except ValidationError as e:
        raise IngestionSkipError(f"Invalid record for {header.href}: {e}") from e


def _ingest_one(href: str, reader: RasterReader, transformer: CoordinateTransformer) -> CatalogRecord | None:
    logger.debug(f"Processing {href}")
    try:
        return record_from_header(reader(href), transformer)
    except IngestionSkipError as e:
        logger.warning(f"Skipping {href}: {e}")
        return None


def build_collection(
    collection_id: str,
    title: str,
    description: str,
    sources: Iterable[str],
    reader: RasterReader = read_raster_header,
    transformer: CoordinateTransformer = reproject_points,
    max_workers: int = 1,
) -> Collection:
    """Catalog raster sources into a collection.

    Sources are normalized in a thread pool when ``max_workers`` > 1; records
    are appended on the calling thread in source order.

    :param collection_id: Collection ID
    :param title: Collection title
    :param description: Collection description
    :param sources: Paths or URIs of candidate rasters
    :param reader: Function reading a raster header
    :param transformer: Coordinate transform capability
    :param max_workers: Number of worker threads
    :returns: Collection instance
    """
    builder = CollectionBuilder(collection_id, title, description)
    ingest = partial(_ingest_one, reader=reader, transformer=transformer)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        for record in pool.map(ingest, sources):
            if record is None:
                continue
            try:
                builder.add(record)
            except IngestionSkipError as e:
                logger.warning(f"Skipping {record.source_ref}: {e}")

    collection = builder.build()
    logger.info(f"Cataloged {len(collection)} raster(s) into collection {collection_id}")
    return collection


def collections_from_subdirs(
    data_dir: str | Path,
    reader: RasterReader = read_raster_header,
    transformer: CoordinateTransformer = reproject_points,
    max_workers: int = 1,
) -> list[Collection]:
    """Create one collection per sub-directory of ``data_dir``.

    e.g. ``./data/imagery`` and ``./data/dem`` create collections "imagery"
    and "dem", populated by the files directly inside them.

    :param data_dir: Directory containing collection directories
    :param reader: Function reading a raster header
    :param transformer: Coordinate transform capability
    :param max_workers: Number of worker threads per collection
    :returns: Collections sorted by ID
    :raises FileNotFoundError: If ``data_dir`` is not a directory
    """
    root = Path(data_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Catalog directory not found: {root}")

    collections = []
    for subdir in sorted(p for p in root.iterdir() if p.is_dir() and not p.name.startswith(".")):
        files = sorted(p for p in subdir.iterdir() if p.is_file() and not p.name.startswith("."))
        collections.append(
            build_collection(
                subdir.name,
                subdir.name,
                subdir.name,
                [str(p) for p in files],
                reader=reader,
                transformer=transformer,
                max_workers=max_workers,
            )
        )
    return collections


def collections_from_s3(
    s3_client: Any,
    bucket: str,
    reader: RasterReader = read_raster_header,
    transformer: CoordinateTransformer = reproject_points,
    max_workers: int = 1,
) -> list[Collection]:
    """Create collections from the first key prefix of each object in a bucket.

    ``mybucket/imagery/img1.tif`` goes into the "imagery" collection. Objects
    without a prefix are skipped.

    :param s3_client: S3 client
    :param bucket: Bucket name
    :param reader: Function reading a raster header from an ``s3://`` URI
    :param transformer: Coordinate transform capability
    :param max_workers: Number of worker threads per collection
    :returns: Collections sorted by ID
    """
    grouped: dict[str, list[str]] = {}
    for key in list_object_keys(s3_client, bucket):
        prefix, sep, rest = key.partition("/")
        if not sep or not rest or key.endswith("/"):
            logger.debug(f"Skipping s3://{bucket}/{key}: not under a collection prefix")
            continue
        grouped.setdefault(prefix, []).append(f"s3://{bucket}/{key}")

    return [
        build_collection(prefix, prefix, prefix, hrefs, reader=reader, transformer=transformer, max_workers=max_workers)
        for prefix, hrefs in sorted(grouped.items())
    ]


def build_registry(
    settings: SettingsResource,
    s3: S3Resource | None = None,
    transformer: CoordinateTransformer = reproject_points,
) -> Registry:
    """Build the service registry from settings.

    Catalogs the S3 bucket when ``use_s3`` is set, the catalog directory otherwise.

    :param settings: Settings resource
    :param s3: Optional S3 resource
    :param transformer: Coordinate transform capability
    :returns: Registry instance
    """
    if settings.use_s3:
        if not settings.aws_s3_bucket_name:
            raise ValueError("Missing mandatory environment variables: AWS_S3_BUCKET_NAME")
        s3 = s3 or S3Resource(settings=settings)
        reader = partial(
            read_raster_header,
            session_options=s3.rasterio_session_options(),
            env_options=s3.rasterio_env_options(),
        )
        collections = collections_from_s3(
            s3.get_client(),
            settings.aws_s3_bucket_name,
            reader=reader,
            transformer=transformer,
            max_workers=settings.ingest_workers,
        )
    else:
        collections = collections_from_subdirs(
            settings.catalog_dir, transformer=transformer, max_workers=settings.ingest_workers
        )

    registry = Registry(
        id=settings.service_id,
        title=settings.service_title,
        description=settings.service_description,
        base_url=settings.base_url,
        collections=collections,
    )
    logger.info(f"Registry {registry.id} serves {len(registry.collections)} collection(s)")
    return registry
