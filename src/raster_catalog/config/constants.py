"""Constants for the catalog protocol, ingestion and configuration defaults."""

STAC_VERSION = "1.0.0"
STAC_CORE_CONFORMANCE = "https://api.stacspec.org/v1.0.0-beta.2/core"
STAC_DEFAULT_LICENSE = "proprietary"

MEDIA_TYPE_JSON = "application/json"
MEDIA_TYPE_GEOJSON = "application/geo+json"
MEDIA_TYPE_OPENAPI = "application/vnd.oai.openapi+json;version=3.0"
MEDIA_TYPE_HTML = "text/html"

GEOGRAPHIC_CRS = "EPSG:4326"
GEOGRAPHIC_TOLERANCE = 1e-6
EARTH_RADIUS_METERS = 6_371_008.8

SORT_FIELD_SPATIAL_RESOLUTION = "spatial_resolution"

TAG_IMAGE_DESCRIPTION = "TIFFTAG_IMAGEDESCRIPTION"
# Sentinel-2 metadata keys; other sources may use different names.
TAG_CLOUD_COVERAGE = "CLOUD_COVERAGE_ASSESSMENT"
TAG_PRODUCT_START_TIME = "PRODUCT_START_TIME"

DEFAULT_CATALOG_DIR = "./data"
DEFAULT_SERVICE_ID = "raster-catalog"
DEFAULT_SERVICE_TITLE = "Raster Catalog"
DEFAULT_SERVICE_DESCRIPTION = "An automatic STAC API over a directory or S3 bucket of rasters"
DEFAULT_BASE_URL = "http://localhost:8000/"
DEFAULT_INGEST_WORKERS = 1
DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_API_PORT = 8000
