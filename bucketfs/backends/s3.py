"""S3/MinIO bucket handle (boto3)."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from botocore.exceptions import ClientError

from bucketfs.bucket import BucketHandle, ListedObject, ObjectInfo
from bucketfs.errors import ObjectNotFound

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
_BUCKET_NOT_FOUND_CODES = {"404", "NoSuchBucket", "NotFound"}

# System headers a metadata-replacing self-copy would otherwise reset.
_PRESERVED_HEADERS = (
    "ContentType",
    "CacheControl",
    "ContentEncoding",
    "ContentDisposition",
    "ContentLanguage",
)

_GRANTEE_TYPES = {
    "id": ("CanonicalUser", "ID"),
    "uri": ("Group", "URI"),
    "emailaddress": ("AmazonCustomerByEmail", "EmailAddress"),
}


def _error_code(exc: Exception) -> str:
    response = getattr(exc, "response", None) or {}
    error = response.get("Error") or {}
    return str(error.get("Code") or "")


def _is_not_found(exc: Exception) -> bool:
    return _error_code(exc) in _NOT_FOUND_CODES


def parse_grantee(grantee: str) -> dict[str, str]:
    """Parse S3 grant-header syntax (``id=...``, ``uri=...``, ``emailAddress=...``)."""

    kind, sep, value = grantee.partition("=")
    value = value.strip().strip('"')
    spec = _GRANTEE_TYPES.get(kind.strip().lower())
    if not sep or spec is None or not value:
        raise ValueError(f"Unsupported S3 grantee: {grantee}")
    grantee_type, field_name = spec
    return {"Type": grantee_type, field_name: value}


class Boto3BucketHandle(BucketHandle):
    """BucketHandle over one S3 bucket through a boto3 client.

    S3 has no in-place metadata update: metadata is replaced by copying the
    object onto itself, after which its ACL is restored.
    """

    def __init__(self, client: Any, bucket_name: str) -> None:
        self._client = client
        self.bucket_name = bucket_name

    def bucket_exists(self) -> bool:
        try:
            self._client.head_bucket(Bucket=self.bucket_name)
        except ClientError as exc:
            if _error_code(exc) in _BUCKET_NOT_FOUND_CODES:
                return False
            raise
        return True

    def object_exists(self, path: str) -> bool:
        try:
            self._head(path)
        except ObjectNotFound:
            return False
        return True

    def object_download(self, path: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket_name, Key=path)
        except ClientError as exc:
            if _is_not_found(exc):
                raise ObjectNotFound(path) from exc
            raise
        return response["Body"].read()

    def object_upload(self, content: bytes, path: str) -> str:
        self._client.put_object(Bucket=self.bucket_name, Key=path, Body=content)
        return path

    def object_info(self, path: str) -> ObjectInfo:
        head = self._head(path)
        modified = head.get("LastModified")
        return ObjectInfo(
            updated=modified.isoformat() if modified is not None else "",
            metadata=dict(head.get("Metadata") or {}),
            size=head.get("ContentLength"),
        )

    def object_update_metadata(self, path: str, metadata: Mapping[str, str]) -> None:
        head = self._head(path)
        policy = self._client.get_object_acl(Bucket=self.bucket_name, Key=path)

        kwargs: dict[str, Any] = {
            "Bucket": self.bucket_name,
            "Key": path,
            "CopySource": {"Bucket": self.bucket_name, "Key": path},
            "Metadata": dict(metadata),
            "MetadataDirective": "REPLACE",
        }
        for header in _PRESERVED_HEADERS:
            if head.get(header):
                kwargs[header] = head[header]
        self._copy(path, **kwargs)
        self._put_acl(path, policy)

    def object_delete(self, path: str) -> None:
        # DeleteObject succeeds on missing keys; check first to report absence.
        self._head(path)
        self._client.delete_object(Bucket=self.bucket_name, Key=path)

    def object_copy(self, path: str, target_path: str) -> str:
        self._copy(
            path,
            Bucket=self.bucket_name,
            Key=target_path,
            CopySource={"Bucket": self.bucket_name, "Key": path},
        )
        return target_path

    def object_acl_add(self, ref: str, grantee: str, role: str) -> None:
        try:
            policy = self._client.get_object_acl(Bucket=self.bucket_name, Key=ref)
        except ClientError as exc:
            if _is_not_found(exc):
                raise ObjectNotFound(ref) from exc
            raise
        grants = list(policy.get("Grants") or [])
        grants.append({"Grantee": parse_grantee(grantee), "Permission": role})
        self._put_acl(ref, {**policy, "Grants": grants})

    def list_objects(self, prefix: str) -> Iterator[ListedObject]:
        paginator = self._client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
            for obj in page.get("Contents", []) or []:
                key = obj.get("Key")
                if key:
                    yield ListedObject(key)

    def _head(self, path: str) -> dict[str, Any]:
        try:
            return self._client.head_object(Bucket=self.bucket_name, Key=path)
        except ClientError as exc:
            if _is_not_found(exc):
                raise ObjectNotFound(path) from exc
            raise

    def _copy(self, path: str, **kwargs: Any) -> None:
        try:
            self._client.copy_object(**kwargs)
        except ClientError as exc:
            if _is_not_found(exc):
                raise ObjectNotFound(path) from exc
            raise

    def _put_acl(self, path: str, policy: Mapping[str, Any]) -> None:
        access_policy: dict[str, Any] = {"Grants": list(policy.get("Grants") or [])}
        if policy.get("Owner"):
            access_policy["Owner"] = policy["Owner"]
        self._client.put_object_acl(
            Bucket=self.bucket_name,
            Key=path,
            AccessControlPolicy=access_policy,
        )
