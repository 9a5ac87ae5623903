"""Stable public imports for `bucketfs`.

Backend handles live in ``bucketfs.backends.*`` and are imported explicitly so
that only the client library of the backend in use is required.
"""

from bucketfs.adapter import BucketStorageAdapter
from bucketfs.bucket import BucketHandle, ListedObject, ObjectInfo
from bucketfs.errors import (
    BucketfsError,
    BucketNotFound,
    ConfigurationError,
    FileNotFound,
    ObjectNotFound,
    StorageFailure,
)
from bucketfs.factory import BackendConfig, create_adapter, create_bucket_handle
from bucketfs.options import AdapterOptions, load_options_from_env, load_options_from_yaml
from bucketfs.storage import KeyStore, ListKeysAware, MetadataSupporter

__all__ = [
    "AdapterOptions",
    "BackendConfig",
    "BucketHandle",
    "BucketNotFound",
    "BucketStorageAdapter",
    "BucketfsError",
    "ConfigurationError",
    "FileNotFound",
    "KeyStore",
    "ListKeysAware",
    "ListedObject",
    "MetadataSupporter",
    "ObjectInfo",
    "ObjectNotFound",
    "StorageFailure",
    "create_adapter",
    "create_bucket_handle",
    "load_options_from_env",
    "load_options_from_yaml",
]
