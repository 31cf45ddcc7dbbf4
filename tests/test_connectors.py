from types import SimpleNamespace
from typing import Any

import pytest

from raster_catalog.connectors.s3_client import S3Resource, list_object_keys
from raster_catalog.connectors.settings import SETTINGS_DEFAULTS, SettingsResource


def _clear_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in SETTINGS_DEFAULTS:
        monkeypatch.delenv(name.upper(), raising=False)


def test_settings_create_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Test that SettingsResource falls back to defaults for unset or empty variables.
    """
    _clear_settings_env(monkeypatch)
    monkeypatch.setenv("SERVICE_TITLE", "")

    settings = SettingsResource.create()
    assert settings.catalog_dir == "./data"
    assert settings.service_id == "raster-catalog"
    assert settings.service_title == "Raster Catalog"
    assert settings.base_url == "http://localhost:8000/"
    assert settings.use_s3 is False
    assert settings.aws_s3_bucket_name is None
    assert settings.ingest_workers == 1
    assert settings.api_port == 8000


def test_settings_create_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Test that SettingsResource correctly loads from environment variables.

    Verifies booleans and integers are converted.
    """
    _clear_settings_env(monkeypatch)
    monkeypatch.setenv("CATALOG_DIR", "/srv/rasters")
    monkeypatch.setenv("BASE_URL", "https://catalog.example.com/api/")
    monkeypatch.setenv("USE_S3", "Yes")
    monkeypatch.setenv("AWS_REGION", "eu-west-1")
    monkeypatch.setenv("AWS_S3_ENDPOINT", "http://localhost:9000")
    monkeypatch.setenv("AWS_S3_BUCKET_NAME", "rasters")
    monkeypatch.setenv("AWS_S3_USE_SSL", "false")
    monkeypatch.setenv("INGEST_WORKERS", "4")
    monkeypatch.setenv("API_PORT", "9090")

    settings = SettingsResource.create()
    assert settings.catalog_dir == "/srv/rasters"
    assert settings.base_url == "https://catalog.example.com/api/"
    assert settings.use_s3 is True
    assert settings.aws_region == "eu-west-1"
    assert settings.aws_s3_endpoint == "http://localhost:9000"
    assert settings.aws_s3_bucket_name == "rasters"
    assert settings.aws_s3_use_ssl is False
    assert settings.ingest_workers == 4
    assert settings.api_port == 9090


def test_settings_validation(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Test that inconsistent settings are rejected unless errors are swallowed.
    """
    _clear_settings_env(monkeypatch)
    monkeypatch.setenv("USE_S3", "true")
    with pytest.raises(ValueError, match="AWS_S3_BUCKET_NAME"):
        SettingsResource.create()
    assert SettingsResource.create(swallow_errors=True).use_s3 is True

    _clear_settings_env(monkeypatch)
    monkeypatch.setenv("BASE_URL", "localhost:8000")
    with pytest.raises(ValueError, match="BASE_URL"):
        SettingsResource.create()

    _clear_settings_env(monkeypatch)
    monkeypatch.setenv("INGEST_WORKERS", "0")
    with pytest.raises(ValueError, match="INGEST_WORKERS"):
        SettingsResource.create()


def test_s3_resource_creates_client(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Test that S3Resource creates a boto3 S3 client with correct parameters.

    Verifies that the resource passes the endpoint, region, SSL setting and
    MinIO credentials to boto3.
    """
    calls: dict[str, Any] = {}

    def fake_client(service: str, **kwargs: Any) -> Any:
        calls["client"] = (service, kwargs)
        return SimpleNamespace()

    monkeypatch.setattr("boto3.client", fake_client)
    monkeypatch.delenv("AWS_ACCESS_KEY_ID", raising=False)
    monkeypatch.delenv("AWS_SECRET_ACCESS_KEY", raising=False)
    monkeypatch.setenv("MINIO_ROOT_USER", "minio")
    monkeypatch.setenv("MINIO_ROOT_PASSWORD", "secret")

    settings = SettingsResource(
        use_s3=True, aws_region="eu-west-1", aws_s3_endpoint="http://localhost:9000", aws_s3_bucket_name="rasters"
    )
    client = S3Resource(settings=settings).get_client()

    assert client is not None
    service, kwargs = calls["client"]
    assert service == "s3"
    assert kwargs == {
        "endpoint_url": "http://localhost:9000",
        "aws_access_key_id": "minio",
        "aws_secret_access_key": "secret",
        "region_name": "eu-west-1",
        "use_ssl": False,
    }


def test_s3_resource_rasterio_options(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Test that rasterio is pointed at the same endpoint as the boto3 client.
    """
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")

    resource = S3Resource(
        settings=SettingsResource(aws_region="eu-west-1", aws_s3_endpoint="http://localhost:9000", aws_s3_use_ssl=False)
    )
    assert resource.rasterio_session_options() == {
        "aws_access_key_id": "key",
        "aws_secret_access_key": "secret",
        "region_name": "eu-west-1",
        "endpoint_url": "localhost:9000",
    }
    assert resource.rasterio_env_options() == {"AWS_HTTPS": "NO", "AWS_VIRTUAL_HOSTING": False}

    aws = S3Resource(settings=SettingsResource(aws_region="eu-west-1", aws_s3_use_ssl=True))
    assert "endpoint_url" not in aws.rasterio_session_options()
    assert aws.rasterio_env_options() == {"AWS_HTTPS": "YES"}


def test_list_object_keys_follows_pages() -> None:
    """
    Test that keys from every page are listed with the requested prefix.
    """
    requested: dict[str, str] = {}

    class FakePaginator:
        def paginate(self, Bucket: str, Prefix: str) -> list[dict[str, Any]]:
            requested.update(Bucket=Bucket, Prefix=Prefix)
            return [{"Contents": [{"Key": "imagery/a.tif"}]}, {}, {"Contents": [{"Key": "imagery/b.tif"}]}]

    s3_client = SimpleNamespace(get_paginator=lambda name: FakePaginator())

    assert list(list_object_keys(s3_client, "rasters", prefix="imagery/")) == ["imagery/a.tif", "imagery/b.tif"]
    assert requested == {"Bucket": "rasters", "Prefix": "imagery/"}
