from __future__ import annotations

from collections.abc import Mapping


class BucketfsError(Exception):
    """Base error for bucketfs."""


class ConfigurationError(BucketfsError):
    """Raised when the adapter or a backend is misconfigured. Not retryable."""


class BucketNotFound(ConfigurationError):
    """Raised at construction time when the target bucket does not exist."""

    def __init__(self, bucket_name: str):
        super().__init__(f"Bucket {bucket_name} does not exist.")
        self.bucket_name = bucket_name


class FileNotFound(BucketfsError):
    """Raised when a key does not correspond to any existing object."""

    def __init__(self, key: str):
        super().__init__(f"The file {key} was not found.")
        self.key = key


class StorageFailure(BucketfsError):
    """Raised for any backend failure other than a missing object."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        context: Mapping[str, object] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.context = dict(context or {})
        self.cause = cause

    @classmethod
    def unexpected_failure(
        cls,
        operation: str,
        context: Mapping[str, object],
        cause: BaseException,
    ) -> StorageFailure:
        """Build the failure raised when ``operation`` hits an unclassified backend error.

        Callers raise the result ``from cause`` so the traceback keeps the chain.
        """

        rendered = ", ".join(f"{name}={_describe(value)}" for name, value in context.items())
        message = (
            f"An unexpected error occurred during {operation} ({rendered}): "
            f"{type(cause).__name__}: {cause}"
        )
        return cls(message, operation=operation, context=context, cause=cause)


class ObjectNotFound(BucketfsError):
    """Raised by bucket handles when the backend reports an object as absent.

    Handles translate their client library's not-found signal into this error;
    the adapter turns it into ``FileNotFound`` for the key the caller used.
    """

    def __init__(self, path: str):
        super().__init__(f"Object not found: {path}")
        self.path = path


def _describe(value: object) -> str:
    # Content payloads can be large; only their size goes into the message.
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    return repr(value)
