from __future__ import annotations


def normalize_directory(directory: str | None) -> str:
    """Strip trailing slashes so the prefix never ends with ``/``."""

    return (directory or "").rstrip("/")


def compute_path(directory: str, key: str | None = None) -> str:
    """Map a virtual key to its object path inside ``directory``.

    Exactly one ``/`` is inserted between a non-empty directory and the key.
    ``None`` is treated as the empty key (the whole virtual namespace).
    """

    key = key or ""
    if directory:
        return f"{directory}/{key}"
    return key


def strip_directory(directory: str, path: str) -> str:
    """Turn an object path returned by the backend back into a virtual key."""

    if directory:
        return path[len(directory) + 1 :]
    return path


def directory_marker_path(directory: str, key: str) -> str:
    """Path of the pseudo-object that marks ``key`` as a directory."""

    return compute_path(directory, key.rstrip("/")) + "/"
