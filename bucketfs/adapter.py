"""Key-addressed store over a single object-store bucket.

The adapter maps virtual keys onto object paths under an optional directory
prefix, classifies backend errors into ``FileNotFound`` / ``StorageFailure``,
propagates the configured ACL onto every object it creates, and emulates
``rename`` and directories, neither of which object stores provide natively.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from bucketfs.bucket import BucketHandle, ObjectRef
from bucketfs.errors import BucketNotFound, FileNotFound, ObjectNotFound, StorageFailure
from bucketfs.io import paths
from bucketfs.observability import log_event
from bucketfs.options import AdapterOptions
from bucketfs.storage import KeyStore, ListKeysAware, MetadataSupporter

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> int:
    """Parse an RFC 3339 timestamp (``Z`` or offset suffix) into epoch seconds."""

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


class BucketStorageAdapter(KeyStore, MetadataSupporter, ListKeysAware):
    """Expose one bucket through the key-store contract.

    The bucket handle is shared, not owned: callers manage its lifetime and
    it must already be authenticated. The adapter keeps no cache; every
    operation is one or more synchronous round-trips to the handle.

    ``rename`` is copy-then-delete and is NOT atomic: if it fails after the
    copy, both source and target may exist. Nothing is rolled back.
    """

    def __init__(
        self,
        handle: BucketHandle,
        bucket_name: str,
        options: AdapterOptions | Mapping[str, Any] | None = None,
    ) -> None:
        self._handle = handle
        self._bucket_name = bucket_name
        self._init_bucket()

        if isinstance(options, AdapterOptions):
            options = options.as_dict()
        self._options = AdapterOptions.from_mapping(options)

        log_event(
            logger,
            "bucketfs.adapter.init",
            bucket=bucket_name,
            directory=self._options.directory,
            acl_entries=len(self._options.acl) or None,
        )

    @property
    def bucket(self) -> BucketHandle:
        return self._handle

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    def get_options(self) -> AdapterOptions:
        return replace(self._options, acl=dict(self._options.acl))

    def set_options(self, options: Mapping[str, Any]) -> None:
        """Shallow-merge ``options`` over the current ones.

        The directory is not re-normalized here; pass it without a trailing slash.
        """

        self._options = self._options.merged(options)

    def read(self, key: str) -> bytes:
        try:
            return self._handle.object_download(self._path(key))
        except ObjectNotFound as exc:
            raise FileNotFound(key) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failure("read", {"key": key}, exc) from exc

    def write(self, key: str, content: bytes | str) -> None:
        data = content.encode("utf-8") if isinstance(content, str) else content
        try:
            ref = self._handle.object_upload(data, self._path(key))
            self._apply_acl(ref)
        except Exception as exc:  # noqa: BLE001
            raise self._failure("write", {"key": key, "content": data}, exc) from exc

        log_event(logger, "bucketfs.write", key=key, size=len(data))

    def exists(self, key: str) -> bool:
        return self._handle.object_exists(self._path(key))

    def is_directory(self, key: str) -> bool:
        return self._handle.object_exists(
            paths.directory_marker_path(self._options.directory, key)
        )

    def list_keys(self, prefix: str | None = None) -> list[str]:
        directory = self._options.directory
        try:
            names = [obj.name for obj in self._handle.list_objects(self._path(prefix))]
        except Exception as exc:  # noqa: BLE001
            raise self._failure("list_keys", {"prefix": prefix}, exc) from exc
        return sorted(paths.strip_directory(directory, name) for name in names)

    def keys(self) -> list[str]:
        return self.list_keys()

    def mtime(self, key: str) -> int:
        try:
            info = self._handle.object_info(self._path(key))
            return parse_timestamp(info.updated)
        except ObjectNotFound as exc:
            raise FileNotFound(key) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failure("mtime", {"key": key}, exc) from exc

    def delete(self, key: str) -> None:
        try:
            self._handle.object_delete(self._path(key))
        except ObjectNotFound as exc:
            raise FileNotFound(key) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failure("delete", {"key": key}, exc) from exc

        log_event(logger, "bucketfs.delete", key=key)

    def rename(self, source_key: str, target_key: str) -> None:
        """Move ``source_key`` to ``target_key`` keeping metadata and ACL.

        Steps: read source metadata, copy, apply ACL to the copy, re-apply
        the metadata on the target, delete the source. Each step is a single
        backend call that can be retried on its own.
        """

        source_path = self._path(source_key)
        target_path = self._path(target_key)
        if source_path == target_path:
            return
        context = {"source_key": source_key, "target_key": target_key}

        # Key reported if the backend says an object is missing at the current step.
        missing_key = source_key
        try:
            metadata = self._handle.object_info(source_path).metadata or {}
            copy = self._handle.object_copy(source_path, target_path)
            log_event(logger, "bucketfs.rename", stage="copy", **context)

            missing_key = target_key
            self._apply_acl(copy)
            self._handle.object_update_metadata(target_path, metadata)
            log_event(logger, "bucketfs.rename", stage="metadata", **context)

            missing_key = source_key
            self._handle.object_delete(source_path)
        except ObjectNotFound as exc:
            raise FileNotFound(missing_key) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failure("rename", context, exc) from exc

        log_event(logger, "bucketfs.rename", stage="done", **context)

    def get_metadata(self, key: str) -> dict[str, str]:
        try:
            info = self._handle.object_info(self._path(key))
        except ObjectNotFound as exc:
            raise FileNotFound(key) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failure("get_metadata", {"key": key}, exc) from exc
        return dict(info.metadata or {})

    def set_metadata(self, key: str, metadata: Mapping[str, str]) -> None:
        try:
            self._handle.object_update_metadata(self._path(key), dict(metadata))
        except ObjectNotFound as exc:
            raise FileNotFound(key) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failure("set_metadata", {"key": key}, exc) from exc

        log_event(logger, "bucketfs.set_metadata", key=key, fields=len(metadata))

    def _path(self, key: str | None) -> str:
        return paths.compute_path(self._options.directory, key)

    def _init_bucket(self) -> None:
        if not self._handle.bucket_exists():
            raise BucketNotFound(self._bucket_name)

    def _apply_acl(self, ref: ObjectRef) -> None:
        for grantee, role in self._options.acl.items():
            self._handle.object_acl_add(ref, grantee, role)

    def _failure(
        self, operation: str, context: Mapping[str, object], exc: BaseException
    ) -> StorageFailure:
        failure = StorageFailure.unexpected_failure(operation, context, exc)
        log_event(
            logger,
            "bucketfs.failure",
            level=logging.WARNING,
            operation=operation,
            bucket=self._bucket_name,
            error=type(exc).__name__,
        )
        return failure
