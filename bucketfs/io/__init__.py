"""Backend-agnostic path helpers."""

from bucketfs.io.paths import (
    compute_path,
    directory_marker_path,
    normalize_directory,
    strip_directory,
)

__all__ = [
    "compute_path",
    "directory_marker_path",
    "normalize_directory",
    "strip_directory",
]
