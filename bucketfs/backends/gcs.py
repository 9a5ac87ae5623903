"""Google Cloud Storage bucket handle (google-cloud-storage).

The client is expected to be authenticated already, typically through
Application Default Credentials (``GOOGLE_APPLICATION_CREDENTIALS``).
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from google.api_core.exceptions import NotFound
from google.cloud import storage

from bucketfs.bucket import BucketHandle, ListedObject, ObjectInfo
from bucketfs.errors import ObjectNotFound


class GcsBucketHandle(BucketHandle):
    """BucketHandle over one ``google.cloud.storage`` bucket.

    ``chunk_size`` switches uploads to resumable, chunked transfers; it must
    be a multiple of 256 KiB. Without it the library picks resumable uploads
    on its own for large payloads.
    """

    def __init__(
        self,
        client: storage.Client,
        bucket_name: str,
        *,
        chunk_size: int | None = None,
    ) -> None:
        self._client = client
        self._bucket = client.bucket(bucket_name)
        self._chunk_size = chunk_size
        self.bucket_name = bucket_name

    def bucket_exists(self) -> bool:
        return bool(self._bucket.exists())

    def object_exists(self, path: str) -> bool:
        return bool(self._bucket.blob(path).exists())

    def object_download(self, path: str) -> bytes:
        try:
            return self._bucket.blob(path).download_as_bytes()
        except NotFound as exc:
            raise ObjectNotFound(path) from exc

    def object_upload(self, content: bytes, path: str) -> storage.Blob:
        blob = self._bucket.blob(path, chunk_size=self._chunk_size)
        blob.upload_from_string(content)
        return blob

    def object_info(self, path: str) -> ObjectInfo:
        blob = self._get_blob(path)
        updated = blob.updated.isoformat() if blob.updated is not None else ""
        return ObjectInfo(updated=updated, metadata=dict(blob.metadata or {}), size=blob.size)

    def object_update_metadata(self, path: str, metadata: Mapping[str, str]) -> None:
        blob = self._get_blob(path)
        # PATCH merges metadata keys; keys set to None are removed.
        replacement: dict[str, str | None] = {name: None for name in blob.metadata or {}}
        replacement.update(metadata)
        blob.metadata = replacement
        try:
            blob.patch()
        except NotFound as exc:
            raise ObjectNotFound(path) from exc

    def object_delete(self, path: str) -> None:
        try:
            self._bucket.blob(path).delete()
        except NotFound as exc:
            raise ObjectNotFound(path) from exc

    def object_copy(self, path: str, target_path: str) -> storage.Blob:
        source = self._bucket.blob(path)
        try:
            return self._bucket.copy_blob(source, self._bucket, target_path)
        except NotFound as exc:
            raise ObjectNotFound(path) from exc

    def object_acl_add(self, ref: storage.Blob, grantee: str, role: str) -> None:
        """Grant ``role`` to ``grantee`` on the blob, keeping existing entries.

        ``grantee`` uses GCS entity syntax: ``allUsers``,
        ``allAuthenticatedUsers``, ``user-<email>``, ``group-<email>``,
        ``domain-<domain>`` or ``project-<team>-<id>``.
        """

        acl = ref.acl
        try:
            acl.entity_from_dict({"entity": grantee, "role": role})
            acl.save()
        except NotFound as exc:
            raise ObjectNotFound(ref.name) from exc

    def list_objects(self, prefix: str) -> Iterator[ListedObject]:
        for blob in self._client.list_blobs(self._bucket, prefix=prefix or None):
            yield ListedObject(blob.name)

    def _get_blob(self, path: str) -> storage.Blob:
        blob = self._bucket.get_blob(path)
        if blob is None:
            raise ObjectNotFound(path)
        return blob
