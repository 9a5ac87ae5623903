from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol


class KeyStore(Protocol):
    """Flat key-addressed store: string keys mapped to byte content.

    Backends (object stores, local disk, memory, ...) implement this contract.
    Missing keys raise ``bucketfs.errors.FileNotFound``; other backend errors
    raise ``bucketfs.errors.StorageFailure``.
    """

    def read(self, key: str) -> bytes:
        """Return the content stored under key."""

    def write(self, key: str, content: bytes | str) -> None:
        """Store content under key (overwrite)."""

    def exists(self, key: str) -> bool:
        """Return True when key exists."""

    def keys(self) -> list[str]:
        """Return every key, sorted."""

    def mtime(self, key: str) -> int:
        """Return the last-modified time of key (seconds since epoch)."""

    def delete(self, key: str) -> None:
        """Delete key."""

    def rename(self, source_key: str, target_key: str) -> None:
        """Move source_key to target_key."""

    def is_directory(self, key: str) -> bool:
        """Return True when key denotes a directory."""


class MetadataSupporter(Protocol):
    def get_metadata(self, key: str) -> dict[str, str]:
        """Return the metadata attached to key (empty when none)."""

    def set_metadata(self, key: str, metadata: Mapping[str, str]) -> None:
        """Replace the metadata attached to key."""


class ListKeysAware(Protocol):
    def list_keys(self, prefix: str | None = None) -> list[str]:
        """Return keys starting with prefix, sorted."""
