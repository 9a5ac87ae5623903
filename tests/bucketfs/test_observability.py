from __future__ import annotations

import logging

from bucketfs.observability import log_event


def test_log_event_renders_key_value_pairs(caplog) -> None:
    caplog.set_level(logging.INFO)
    logger = logging.getLogger("bucketfs.test")

    log_event(logger, "bucketfs.write", key="a/b.txt", size=3, directory="", acl=None)

    assert [r.getMessage() for r in caplog.records] == ["bucketfs.write key=a/b.txt size=3"]


def test_log_event_without_fields_and_custom_level(caplog) -> None:
    caplog.set_level(logging.INFO)
    logger = logging.getLogger("bucketfs.test")

    log_event(logger, "bucketfs.failure", level=logging.WARNING)

    record = caplog.records[-1]
    assert record.getMessage() == "bucketfs.failure"
    assert record.levelno == logging.WARNING
