"""Test doubles for bucketfs backends."""

from bucketfs.testing.memory_bucket import BucketOp, InMemoryBucketHandle, StoredObject

__all__ = ["BucketOp", "InMemoryBucketHandle", "StoredObject"]
