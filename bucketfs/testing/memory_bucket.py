from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone

from bucketfs.bucket import BucketHandle, ListedObject, ObjectInfo
from bucketfs.errors import ObjectNotFound


@dataclass
class BucketOp:
    name: str
    args: tuple[object, ...]


@dataclass
class StoredObject:
    content: bytes
    updated: str
    metadata: dict[str, str] = field(default_factory=dict)
    acl: list[tuple[str, str]] = field(default_factory=list)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryBucketHandle(BucketHandle):
    """Dict-backed bucket that records every call in ``ops``.

    ``fail_on(name, exc)`` makes the next calls to the named operation raise
    ``exc``, which lets tests stop multi-step operations half way.
    """

    def __init__(
        self,
        *,
        exists: bool = True,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.objects: dict[str, StoredObject] = {}
        self.ops: list[BucketOp] = []
        self._exists = exists
        self._clock = clock
        self._failures: dict[str, BaseException] = {}

    def fail_on(self, name: str, exc: BaseException) -> None:
        self._failures[name] = exc

    def op_names(self) -> list[str]:
        return [op.name for op in self.ops]

    def _record(self, name: str, *args: object) -> None:
        self.ops.append(BucketOp(name, args))
        failure = self._failures.get(name)
        if failure is not None:
            raise failure

    def _get(self, path: str) -> StoredObject:
        stored = self.objects.get(path)
        if stored is None:
            raise ObjectNotFound(path)
        return stored

    def _timestamp(self) -> str:
        return self._clock().isoformat().replace("+00:00", "Z")

    def bucket_exists(self) -> bool:
        self._record("bucket_exists")
        return self._exists

    def object_exists(self, path: str) -> bool:
        self._record("object_exists", path)
        return path in self.objects

    def object_download(self, path: str) -> bytes:
        self._record("object_download", path)
        return self._get(path).content

    def object_upload(self, content: bytes, path: str) -> str:
        self._record("object_upload", content, path)
        self.objects[path] = StoredObject(content=bytes(content), updated=self._timestamp())
        return path

    def object_info(self, path: str) -> ObjectInfo:
        self._record("object_info", path)
        stored = self._get(path)
        return ObjectInfo(
            updated=stored.updated,
            metadata=dict(stored.metadata),
            size=len(stored.content),
        )

    def object_update_metadata(self, path: str, metadata: Mapping[str, str]) -> None:
        self._record("object_update_metadata", path, dict(metadata))
        stored = self._get(path)
        stored.metadata = dict(metadata)
        stored.updated = self._timestamp()

    def object_delete(self, path: str) -> None:
        self._record("object_delete", path)
        self._get(path)
        del self.objects[path]

    def object_copy(self, path: str, target_path: str) -> str:
        self._record("object_copy", path, target_path)
        source = self._get(path)
        # Like GCS, a copy carries content and metadata but not the ACL.
        self.objects[target_path] = StoredObject(
            content=source.content,
            updated=self._timestamp(),
            metadata=dict(source.metadata),
        )
        return target_path

    def object_acl_add(self, ref: str, grantee: str, role: str) -> None:
        self._record("object_acl_add", ref, grantee, role)
        self._get(ref).acl.append((grantee, role))

    def list_objects(self, prefix: str) -> Iterable[ListedObject]:
        self._record("list_objects", prefix)
        # Dict order is insertion order, so callers cannot rely on sorted output.
        return [ListedObject(name) for name in self.objects if name.startswith(prefix)]
