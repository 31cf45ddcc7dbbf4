"""Settings resource for managing configuration from environment variables."""

import os
from typing import Any, Optional
from urllib.parse import urlparse

from dagster import ConfigurableResource

from raster_catalog.config.constants import (
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_BASE_URL,
    DEFAULT_CATALOG_DIR,
    DEFAULT_INGEST_WORKERS,
    DEFAULT_SERVICE_DESCRIPTION,
    DEFAULT_SERVICE_ID,
    DEFAULT_SERVICE_TITLE,
)

_TRUE_VALUES = ("true", "1", "yes", "y", "on")

SETTINGS_DEFAULTS: dict[str, Any] = {
    "catalog_dir": DEFAULT_CATALOG_DIR,
    "service_id": DEFAULT_SERVICE_ID,
    "service_title": DEFAULT_SERVICE_TITLE,
    "service_description": DEFAULT_SERVICE_DESCRIPTION,
    "base_url": DEFAULT_BASE_URL,
    "use_s3": False,
    "aws_region": None,
    "aws_s3_endpoint": None,
    "aws_s3_bucket_name": None,
    "aws_s3_use_ssl": False,
    "ingest_workers": DEFAULT_INGEST_WORKERS,
    "api_host": DEFAULT_API_HOST,
    "api_port": DEFAULT_API_PORT,
}


class SettingsResource(ConfigurableResource[Any]):
    """Settings resource for the catalog service, filled from environment variables."""

    catalog_dir: str = DEFAULT_CATALOG_DIR
    service_id: str = DEFAULT_SERVICE_ID
    service_title: str = DEFAULT_SERVICE_TITLE
    service_description: str = DEFAULT_SERVICE_DESCRIPTION
    base_url: str = DEFAULT_BASE_URL
    use_s3: bool = False
    aws_region: Optional[str] = None
    aws_s3_endpoint: Optional[str] = None
    aws_s3_bucket_name: Optional[str] = None
    aws_s3_use_ssl: bool = False
    ingest_workers: int = DEFAULT_INGEST_WORKERS
    api_host: str = DEFAULT_API_HOST
    api_port: int = DEFAULT_API_PORT

    @staticmethod
    def create(swallow_errors: bool = False) -> "SettingsResource":
        """Create SettingsResource from environment variables.

        Each attribute is read from the environment variable of the same name in upper case.

        :param swallow_errors: If True, ignore validation errors
        :returns: SettingsResource instance
        """
        env_values: dict[str, Any] = {}
        for attr_name, default in SETTINGS_DEFAULTS.items():
            raw = os.environ.get(attr_name.upper())
            if raw is None or raw == "":
                env_values[attr_name] = default
            elif isinstance(default, bool):
                env_values[attr_name] = raw.strip().lower() in _TRUE_VALUES
            elif isinstance(default, int):
                env_values[attr_name] = int(raw)
            else:
                env_values[attr_name] = raw

        settings = SettingsResource(**env_values)
        try:
            settings.validate_settings()
        except ValueError:
            if not swallow_errors:
                raise
        return settings

    def validate_settings(self) -> None:
        """Validate settings that depend on each other."""
        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"BASE_URL must be an http(s) URL, got: {self.base_url!r}")
        if self.use_s3 and not self.aws_s3_bucket_name:
            raise ValueError("Missing mandatory environment variables: AWS_S3_BUCKET_NAME")
        if self.ingest_workers < 1:
            raise ValueError(f"INGEST_WORKERS must be at least 1, got: {self.ingest_workers}")
