"""S3 client connector for catalog ingestion from a bucket."""

import os
from collections.abc import Generator
from typing import Any
from urllib.parse import urlparse

import boto3
from dagster import ConfigurableResource

from raster_catalog.connectors.settings import SettingsResource


def _credentials() -> tuple[str | None, str | None]:
    aws_access_key_id = os.environ.get("AWS_ACCESS_KEY_ID") or os.environ.get("MINIO_ROOT_USER")
    aws_secret_access_key = os.environ.get("AWS_SECRET_ACCESS_KEY") or os.environ.get("MINIO_ROOT_PASSWORD")
    return aws_access_key_id, aws_secret_access_key


class S3Resource(ConfigurableResource[Any]):
    """S3 resource for creating boto3 S3 clients."""

    settings: SettingsResource

    def create_client(self) -> Any:
        """Create S3 client.

        :returns: Configured S3 client
        """
        aws_access_key_id, aws_secret_access_key = _credentials()

        return boto3.client(
            "s3",
            endpoint_url=self.settings.aws_s3_endpoint,
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=self.settings.aws_region,
            use_ssl=self.settings.aws_s3_use_ssl,
        )

    def get_client(self) -> Any:
        """Get S3 client instance.

        :returns: Configured S3 client
        """
        return self.create_client()

    def rasterio_session_options(self) -> dict[str, Any]:
        """Options for opening ``s3://`` rasters with rasterio against the same endpoint.

        :returns: Keyword arguments for ``rasterio.session.AWSSession``
        """
        aws_access_key_id, aws_secret_access_key = _credentials()
        options: dict[str, Any] = {
            "aws_access_key_id": aws_access_key_id,
            "aws_secret_access_key": aws_secret_access_key,
            "region_name": self.settings.aws_region,
        }
        if self.settings.aws_s3_endpoint:
            # GDAL expects the endpoint host without a scheme
            endpoint = urlparse(self.settings.aws_s3_endpoint)
            options["endpoint_url"] = endpoint.netloc or endpoint.path
        return options

    def rasterio_env_options(self) -> dict[str, Any]:
        """GDAL configuration options matching the client's endpoint settings.

        :returns: Keyword arguments for ``rasterio.Env``
        """
        options: dict[str, Any] = {"AWS_HTTPS": "YES" if self.settings.aws_s3_use_ssl else "NO"}
        if self.settings.aws_s3_endpoint:
            options["AWS_VIRTUAL_HOSTING"] = False
        return options


def list_object_keys(s3_client: Any, bucket: str, prefix: str = "") -> Generator[str, None, None]:
    """List every object key under a prefix.

    :param s3_client: S3 client
    :param bucket: Bucket name
    :param prefix: Key prefix
    :yields: Object keys
    """
    paginator = s3_client.get_paginator("list_objects_v2")
    page_iterator = paginator.paginate(Bucket=bucket, Prefix=prefix)

    for page in page_iterator:
        for obj in page.get("Contents", []):
            yield obj["Key"]
