from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

# Opaque handle to a stored object (a GCS Blob, an S3 key, ...). Produced by
# upload/copy and handed back to ``object_acl_add``.
ObjectRef = Any


@dataclass(frozen=True)
class ObjectInfo:
    updated: str
    metadata: dict[str, str] = field(default_factory=dict)
    size: int | None = None


@dataclass(frozen=True)
class ListedObject:
    name: str


class BucketHandle(Protocol):
    """Capabilities of one authenticated bucket, as consumed by the adapter.

    Implementations are bound to a single bucket. Operations that address a
    missing object raise ``bucketfs.errors.ObjectNotFound``; every other
    backend exception propagates unchanged.
    """

    def bucket_exists(self) -> bool:
        """Return True when the bound bucket exists."""

    def object_exists(self, path: str) -> bool:
        """Return True when an object exists at path."""

    def object_download(self, path: str) -> bytes:
        """Return the full content of the object at path."""

    def object_upload(self, content: bytes, path: str) -> ObjectRef:
        """Store content at path, overwriting any existing object."""

    def object_info(self, path: str) -> ObjectInfo:
        """Return last-updated time and metadata of the object at path."""

    def object_update_metadata(self, path: str, metadata: Mapping[str, str]) -> None:
        """Replace the metadata of the object at path with ``metadata``."""

    def object_delete(self, path: str) -> None:
        """Delete the object at path."""

    def object_copy(self, path: str, target_path: str) -> ObjectRef:
        """Server-side copy of path to target_path within the same bucket."""

    def object_acl_add(self, ref: ObjectRef, grantee: str, role: str) -> None:
        """Add one access-control entry to the referenced object (additive)."""

    def list_objects(self, prefix: str) -> Iterable[ListedObject]:
        """Yield objects whose path starts with prefix (raw string prefix)."""
