"""Build bucket handles and adapters from environment configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from bucketfs.adapter import BucketStorageAdapter
from bucketfs.bucket import BucketHandle
from bucketfs.errors import ConfigurationError
from bucketfs.observability import log_event
from bucketfs.options import AdapterOptions, load_options_from_env

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("gcs", "s3")


@dataclass(frozen=True)
class BackendConfig:
    backend: str
    bucket: str
    project: str | None = None
    endpoint_url: str | None = None
    access_key: str | None = None
    secret_key: str | None = None
    region: str = "us-east-1"
    url_style: str = "path"
    use_ssl: bool | None = None
    session_token: str | None = None


def _parse_bool(value: str | None, *, default: bool | None = None) -> bool | None:
    if value is None:
        return default
    text = value.strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return default


def env_default(env: Mapping[str, str], name: str, default: str | None = None) -> str | None:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def load_backend_config_from_env(env: Mapping[str, str] | None = None) -> BackendConfig:
    """Resolve backend settings from ``BUCKETFS_*``, ``GCP_*`` and ``S3_*`` variables."""

    env = env if env is not None else dict(os.environ)
    backend = (env_default(env, "BUCKETFS_BACKEND", "gcs") or "gcs").lower()
    if backend not in SUPPORTED_BACKENDS:
        raise ConfigurationError(f"Unsupported BUCKETFS_BACKEND: {backend}")

    bucket = env_default(env, "BUCKETFS_BUCKET")
    if not bucket:
        raise ConfigurationError("BUCKETFS_BUCKET is required")

    return BackendConfig(
        backend=backend,
        bucket=bucket,
        project=env_default(env, "GCP_PROJECT"),
        endpoint_url=env_default(env, "S3_ENDPOINT_URL"),
        access_key=env_default(env, "S3_ACCESS_KEY_ID"),
        secret_key=env_default(env, "S3_SECRET_ACCESS_KEY"),
        region=env_default(env, "S3_REGION", "us-east-1") or "us-east-1",
        url_style=env_default(env, "S3_URL_STYLE", "path") or "path",
        use_ssl=_parse_bool(env.get("S3_USE_SSL")),
        session_token=env_default(env, "S3_SESSION_TOKEN"),
    )


def _build_gcs_handle(config: BackendConfig) -> BucketHandle:
    from google.cloud import storage

    from bucketfs.backends.gcs import GcsBucketHandle

    client = storage.Client(project=config.project)
    return GcsBucketHandle(client, config.bucket)


def _build_s3_handle(config: BackendConfig) -> BucketHandle:
    import boto3
    from botocore.config import Config

    from bucketfs.backends.s3 import Boto3BucketHandle

    use_ssl = config.use_ssl
    if use_ssl is None:
        use_ssl = bool(config.endpoint_url and config.endpoint_url.startswith("https://"))

    kwargs: dict[str, Any] = dict(
        service_name="s3",
        endpoint_url=config.endpoint_url,
        region_name=config.region,
        use_ssl=use_ssl,
        aws_access_key_id=config.access_key,
        aws_secret_access_key=config.secret_key,
        aws_session_token=config.session_token,
        config=Config(s3={"addressing_style": config.url_style}),
    )
    return Boto3BucketHandle(boto3.client(**kwargs), config.bucket)


def create_bucket_handle(config: BackendConfig) -> BucketHandle:
    if config.backend == "gcs":
        return _build_gcs_handle(config)
    if config.backend == "s3":
        return _build_s3_handle(config)
    raise ConfigurationError(f"Unsupported backend: {config.backend}")


def create_adapter(
    config: BackendConfig | None = None,
    options: AdapterOptions | None = None,
    *,
    handle: BucketHandle | None = None,
) -> BucketStorageAdapter:
    """Create an adapter; missing arguments are resolved from the environment.

    Raises ``BucketNotFound`` when the configured bucket does not exist.
    """

    if config is None:
        config = load_backend_config_from_env()
    if options is None:
        options = load_options_from_env()
    if handle is None:
        handle = create_bucket_handle(config)
    log_event(logger, "bucketfs.factory", backend=config.backend, bucket=config.bucket)
    return BucketStorageAdapter(handle, config.bucket, options)
