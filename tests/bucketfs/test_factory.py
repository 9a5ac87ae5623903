from __future__ import annotations

from unittest.mock import patch

import pytest

from bucketfs.backends.gcs import GcsBucketHandle
from bucketfs.backends.s3 import Boto3BucketHandle
from bucketfs.errors import BucketNotFound, ConfigurationError
from bucketfs.factory import (
    BackendConfig,
    create_adapter,
    create_bucket_handle,
    load_backend_config_from_env,
)
from bucketfs.options import AdapterOptions
from bucketfs.testing.memory_bucket import InMemoryBucketHandle


def test_load_backend_config_defaults_to_gcs() -> None:
    config = load_backend_config_from_env({"BUCKETFS_BUCKET": "assets", "GCP_PROJECT": "proj"})

    assert config.backend == "gcs"
    assert config.bucket == "assets"
    assert config.project == "proj"


def test_load_backend_config_for_s3() -> None:
    env = {
        "BUCKETFS_BACKEND": "S3",
        "BUCKETFS_BUCKET": "lake",
        "S3_ENDPOINT_URL": "http://minio:9000",
        "S3_ACCESS_KEY_ID": "minio",
        "S3_SECRET_ACCESS_KEY": "secret",
        "S3_USE_SSL": "false",
    }

    config = load_backend_config_from_env(env)

    assert config.backend == "s3"
    assert config.endpoint_url == "http://minio:9000"
    assert config.region == "us-east-1"
    assert config.url_style == "path"
    assert config.use_ssl is False


def test_load_backend_config_requires_bucket() -> None:
    with pytest.raises(ConfigurationError, match="BUCKETFS_BUCKET"):
        load_backend_config_from_env({})


def test_load_backend_config_rejects_unknown_backend() -> None:
    with pytest.raises(ConfigurationError, match="Unsupported BUCKETFS_BACKEND"):
        load_backend_config_from_env({"BUCKETFS_BACKEND": "ftp", "BUCKETFS_BUCKET": "b"})


def test_create_bucket_handle_for_s3_builds_boto3_client() -> None:
    config = BackendConfig(
        backend="s3",
        bucket="lake",
        endpoint_url="https://minio.example.local:9000",
        access_key="minio",
        secret_key="secret",
    )

    with patch("boto3.client") as client_factory:
        handle = create_bucket_handle(config)

    assert isinstance(handle, Boto3BucketHandle)
    assert handle.bucket_name == "lake"
    kwargs = client_factory.call_args.kwargs
    assert kwargs["service_name"] == "s3"
    assert kwargs["endpoint_url"] == "https://minio.example.local:9000"
    assert kwargs["use_ssl"] is True


def test_create_bucket_handle_for_gcs_builds_storage_client() -> None:
    config = BackendConfig(backend="gcs", bucket="assets", project="proj")

    with patch("google.cloud.storage.Client") as client_cls:
        handle = create_bucket_handle(config)

    assert isinstance(handle, GcsBucketHandle)
    client_cls.assert_called_once_with(project="proj")
    client_cls.return_value.bucket.assert_called_once_with("assets")


def test_create_bucket_handle_rejects_unknown_backend() -> None:
    with pytest.raises(ConfigurationError):
        create_bucket_handle(BackendConfig(backend="ftp", bucket="b"))


def test_create_adapter_uses_given_handle_and_options() -> None:
    handle = InMemoryBucketHandle()
    config = BackendConfig(backend="gcs", bucket="assets")

    adapter = create_adapter(config, AdapterOptions(directory="root/"), handle=handle)

    adapter.write("k", b"x")
    assert list(handle.objects) == ["root/k"]
    assert adapter.bucket_name == "assets"


def test_create_adapter_reads_options_from_env(monkeypatch) -> None:
    monkeypatch.setenv("BUCKETFS_DIRECTORY", "tenant")
    monkeypatch.delenv("BUCKETFS_ACL", raising=False)
    config = BackendConfig(backend="gcs", bucket="assets")

    adapter = create_adapter(config, handle=InMemoryBucketHandle())

    assert adapter.get_options().directory == "tenant"


def test_create_adapter_missing_bucket_is_fatal() -> None:
    config = BackendConfig(backend="gcs", bucket="assets")

    with pytest.raises(BucketNotFound):
        create_adapter(config, AdapterOptions(), handle=InMemoryBucketHandle(exists=False))
