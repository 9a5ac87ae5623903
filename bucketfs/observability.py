from __future__ import annotations

import logging
from collections.abc import Mapping


def _kv_pairs(fields: Mapping[str, object]) -> str:
    parts: list[str] = []
    for key, value in fields.items():
        if value is None:
            continue
        text = str(value).strip()
        if not text:
            continue
        parts.append(f"{key}={text}")
    return " ".join(parts)


def log_event(
    logger: logging.Logger,
    message: str,
    *,
    level: int = logging.INFO,
    **fields: object,
) -> None:
    """Emit a stable structured log line: ``message k=v k=v``.

    ``None`` and blank values are dropped so optional fields do not add noise.
    """

    suffix = _kv_pairs(fields)
    if suffix:
        logger.log(level, "%s %s", message, suffix)
    else:
        logger.log(level, "%s", message)
