from __future__ import annotations
"""Connection profiles for the object store, with secrets kept in the OS keychain."""
from dataclasses import dataclass
import json
import logging
from pathlib import Path

import keyring
from keyring.errors import KeyringError

from .settings import ConfigurationError

LOGGER = logging.getLogger(__name__)


@dataclass
class ConnectionProfile:
    """Endpoint and credentials used to reach a bucket."""

    name: str
    endpoint_url: str
    access_key: str
    secret_key: str


class KeychainStore:
    """Read-only access to secrets stored in the OS keychain."""

    def __init__(self, service_name: str = "pys3sweep"):
        self._service_name = service_name

    def get_secret(self, profile_name: str) -> str:
        if not profile_name:
            return ""
        try:
            return keyring.get_password(self._service_name, profile_name) or ""
        except KeyringError:
            LOGGER.warning("Keychain lookup failed for profile '%s'", profile_name)
            return ""


class ProfileStorage:
    """Looks up connection profiles from a JSON file."""

    def __init__(self, storage_path: str | Path | None = None, keychain: KeychainStore | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".pys3sweep_connections.json"
        self._path = Path(storage_path)
        self._keychain = keychain or KeychainStore()

    def get(self, name: str) -> ConnectionProfile:
        """Return the profile called ``name``.

        Raises:
            ConfigurationError: when no usable profile has that name.
        """
        for entry in self._read_entries():
            if entry.get("name") != name:
                continue
            endpoint_url = entry.get("endpoint_url") or ""
            access_key = entry.get("access_key")
            if not isinstance(access_key, str) or not access_key:
                raise ConfigurationError(f"Profile '{name}' has no access key.")
            secret_key = entry.get("secret_key") or self._keychain.get_secret(name)
            if not secret_key:
                raise ConfigurationError(f"No secret key stored for profile '{name}'.")
            return ConnectionProfile(
                name=name,
                endpoint_url=endpoint_url,
                access_key=access_key,
                secret_key=secret_key,
            )
        raise ConfigurationError(f"Profile '{name}' does not exist")

    def _read_entries(self) -> list[dict[str, str]]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return []
        if not isinstance(data, list):
            return []
        return [entry for entry in data if isinstance(entry, dict)]
