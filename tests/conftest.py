"""Global pytest configuration.

Tests run from the project root without requiring an editable install, so the
root directory is put on ``sys.path`` before test modules import ``bucketfs``.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest


def pytest_configure() -> None:
    root_dir = Path(__file__).resolve().parents[1]

    raw = str(root_dir)
    if raw not in sys.path:
        sys.path.insert(0, raw)


@pytest.fixture
def fixed_clock():
    """Clock returning 2024-03-01T12:00:00Z, for deterministic mtimes."""

    moment = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
    return lambda: moment
