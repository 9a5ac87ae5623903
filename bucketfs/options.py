"""Adapter options: defaults, normalization, merging and loading (env-first)."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from bucketfs.errors import ConfigurationError
from bucketfs.io.paths import normalize_directory

logger = logging.getLogger(__name__)

RECOGNIZED_KEYS = ("directory", "acl")


@dataclass(frozen=True)
class AdapterOptions:
    """Configuration of one adapter instance.

    ``directory`` is a virtual prefix prepended to every object path. ``acl``
    maps grantee identifiers to roles and is applied to every object the
    adapter creates or copies.
    """

    directory: str = ""
    acl: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> AdapterOptions:
        """Apply defaults to ``values`` and normalize the directory prefix."""

        options = cls().merged(values or {})
        return replace(options, directory=normalize_directory(options.directory))

    def merged(self, partial: Mapping[str, Any]) -> AdapterOptions:
        """Shallow merge of ``partial`` over these options (no normalization)."""

        unknown = sorted(set(partial) - set(RECOGNIZED_KEYS))
        if unknown:
            logger.warning("Ignoring unknown adapter options: %s", ", ".join(unknown))

        changes: dict[str, Any] = {}
        if "directory" in partial:
            changes["directory"] = str(partial["directory"] or "")
        if "acl" in partial:
            changes["acl"] = ensure_acl(partial["acl"])
        return replace(self, **changes)

    def as_dict(self) -> dict[str, Any]:
        return {"directory": self.directory, "acl": dict(self.acl)}


def ensure_acl(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError("acl must be a mapping of grantee to role")
    return {str(grantee): str(role) for grantee, role in value.items()}


def parse_acl(raw: str | None) -> dict[str, str]:
    """Parse an ACL from a JSON object or comma-separated ``grantee=role`` pairs."""

    text = (raw or "").strip()
    if not text:
        return {}
    if text.startswith("{"):
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError("BUCKETFS_ACL must be valid JSON") from exc
        return ensure_acl(payload)

    acl: dict[str, str] = {}
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        grantee, sep, role = item.rpartition("=")
        if not sep or not grantee.strip() or not role.strip():
            raise ConfigurationError(f"Invalid ACL entry (expected grantee=role): {item}")
        acl[grantee.strip()] = role.strip()
    return acl


def load_options_from_env(env: Mapping[str, str] | None = None) -> AdapterOptions:
    """Read ``BUCKETFS_DIRECTORY`` and ``BUCKETFS_ACL``."""

    env = env if env is not None else dict(os.environ)
    return AdapterOptions.from_mapping(
        {
            "directory": env.get("BUCKETFS_DIRECTORY") or "",
            "acl": parse_acl(env.get("BUCKETFS_ACL")),
        }
    )


def load_options_from_yaml(path: str | Path) -> AdapterOptions:
    """Load options from a YAML mapping with ``directory`` and ``acl`` keys."""

    with open(path, encoding="utf-8") as f:
        payload = yaml.safe_load(f)

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ConfigurationError(f"{path} must contain a YAML mapping")
    return AdapterOptions.from_mapping(payload)
