from __future__ import annotations
"""Sweep settings persistence helpers."""

from dataclasses import dataclass, replace
import json
import logging
import os
from pathlib import Path
from typing import Mapping

from .models import EmptinessPolicy

LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "PYS3SWEEP_"
DEFAULT_RETENTION_DAYS = 90
TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigurationError(ValueError):
    """Raised when the sweep cannot run with the configured values."""


def normalize_root_path(root_path: str, delimiter: str = "/") -> str:
    cleaned = (root_path or "").strip()
    if delimiter:
        while cleaned.startswith(delimiter):
            cleaned = cleaned[len(delimiter):]
        if cleaned and not cleaned.endswith(delimiter):
            cleaned += delimiter
    return cleaned


@dataclass(frozen=True)
class SweepSettings:
    """Values a sweep run is configured with."""

    bucket: str = ""
    root_path: str = ""
    retention_days: int = DEFAULT_RETENTION_DAYS
    policy: str = EmptinessPolicy.PRESENCE.value
    delimiter: str = "/"
    profile: str = ""
    dry_run: bool = False

    @property
    def emptiness_policy(self) -> EmptinessPolicy:
        return EmptinessPolicy(self.policy)

    def validate(self) -> "SweepSettings":
        """Return a normalized copy, or raise :class:`ConfigurationError`."""

        bucket = self.bucket.strip()
        if not bucket:
            raise ConfigurationError("Bucket name is not configured.")
        if not self.delimiter:
            raise ConfigurationError("Delimiter cannot be empty.")
        try:
            EmptinessPolicy(self.policy)
        except ValueError:
            choices = ", ".join(policy.value for policy in EmptinessPolicy)
            raise ConfigurationError(f"Unknown policy '{self.policy}' (expected one of: {choices})") from None
        if self.retention_days <= 0:
            raise ConfigurationError("Retention days must be greater than zero.")
        return replace(
            self,
            bucket=bucket,
            root_path=normalize_root_path(self.root_path, self.delimiter),
            profile=self.profile.strip(),
        )


def _coerce_int(name: str, value: object, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        LOGGER.warning("Ignoring invalid %s %r; using %d", name, value, default)
        return default


def _coerce_bool(value: object, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return default


def _coerce_str(value: object, default: str) -> str:
    return value if isinstance(value, str) else default


class SettingsStorage:
    """JSON-backed settings with environment variable overrides."""

    def __init__(
        self,
        storage_path: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        if storage_path is None:
            storage_path = Path.home() / ".pys3sweep_settings.json"
        self._path = Path(storage_path)
        self._environ = os.environ if environ is None else environ

    def load(self) -> SweepSettings:
        data = self._read_file()
        for field_name in ("bucket", "root_path", "retention_days", "policy", "profile", "dry_run"):
            env_value = self._environ.get(ENV_PREFIX + field_name.upper())
            if env_value is not None:
                data[field_name] = env_value

        defaults = SweepSettings()
        policy = _coerce_str(data.get("policy"), defaults.policy).strip().lower()
        return SweepSettings(
            bucket=_coerce_str(data.get("bucket"), defaults.bucket),
            root_path=_coerce_str(data.get("root_path"), defaults.root_path),
            retention_days=_coerce_int("retention_days", data.get("retention_days"), defaults.retention_days),
            policy=policy or defaults.policy,
            delimiter=_coerce_str(data.get("delimiter"), defaults.delimiter) or defaults.delimiter,
            profile=_coerce_str(data.get("profile"), defaults.profile),
            dry_run=_coerce_bool(data.get("dry_run"), defaults.dry_run),
        )

    def _read_file(self) -> dict[str, object]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return {}
        return data if isinstance(data, dict) else {}
