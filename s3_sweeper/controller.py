from __future__ import annotations
"""Run boundary: turns configuration into a single sweep pass."""

from datetime import datetime, timedelta, timezone
import logging
from typing import Callable

from botocore.exceptions import BotoCoreError, ClientError

from .models import EmptinessPolicy, PassOptions, PassReport
from .profiles import ProfileStorage
from .services import ObjectStoreService
from .settings import ConfigurationError, SettingsStorage, SweepSettings
from .sweeper import FolderSweeper

LOGGER = logging.getLogger(__name__)

StoreFactory = Callable[..., ObjectStoreService]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_pass_options(settings: SweepSettings, now: datetime) -> PassOptions:
    """Fix the per-run values, including the retention threshold."""

    policy = settings.emptiness_policy
    threshold = None
    if policy is EmptinessPolicy.FRESHNESS:
        threshold = now - timedelta(days=settings.retention_days)
    return PassOptions(
        root=settings.root_path,
        delimiter=settings.delimiter,
        policy=policy,
        threshold=threshold,
        dry_run=settings.dry_run,
    )


class SweepController:
    """Coordinates settings, credentials and the :class:`FolderSweeper`."""

    def __init__(
        self,
        settings_storage: SettingsStorage | None = None,
        profile_storage: ProfileStorage | None = None,
        *,
        store_factory: StoreFactory | None = None,
        clock: Clock | None = None,
    ):
        self._settings_storage = settings_storage or SettingsStorage()
        self._profile_storage = profile_storage or ProfileStorage()
        self._store_factory = store_factory or ObjectStoreService
        self._clock = clock or _utcnow

    def run_pass(self) -> PassReport | None:
        """Run one pass.

        Returns None when the pass was skipped because of a configuration
        problem. Store errors are logged and re-raised.
        """
        started_at = self._clock()
        LOGGER.info("Empty folder cleanup triggered at: %s", started_at.isoformat())
        try:
            settings = self._settings_storage.load().validate()
            store = self._create_store(settings)
        except ConfigurationError as exc:
            LOGGER.error("Skipping empty folder cleanup: %s", exc)
            return None

        options = build_pass_options(settings, started_at)
        LOGGER.info(
            "Sweeping bucket '%s' under '%s' (policy=%s, threshold=%s, dry_run=%s)",
            settings.bucket,
            options.root,
            options.policy.value,
            options.threshold.isoformat() if options.threshold else "-",
            options.dry_run,
        )
        try:
            report = FolderSweeper(store).run_pass(options)
        except (BotoCoreError, ClientError):
            LOGGER.exception("Empty folder cleanup aborted for bucket '%s'", settings.bucket)
            raise

        LOGGER.info(
            "Empty folder cleanup completed: %d folder(s) visited, %d object(s) pruned, %d placeholder(s) deleted",
            report.visited,
            len(report.pruned),
            len(report.deleted_placeholders),
        )
        return report

    def _create_store(self, settings: SweepSettings) -> ObjectStoreService:
        kwargs: dict[str, str | None] = {}
        if settings.profile:
            profile = self._profile_storage.get(settings.profile)
            LOGGER.debug("Using connection profile '%s'", profile.name)
            kwargs = {
                "endpoint_url": profile.endpoint_url or None,
                "access_key": profile.access_key,
                "secret_key": profile.secret_key,
            }
        else:
            LOGGER.debug("No connection profile configured; using default credentials")
        try:
            return self._store_factory(settings.bucket, **kwargs)
        except ConfigurationError:
            raise
        except ValueError as exc:
            # boto3 rejects malformed endpoints and regions with ValueError.
            raise ConfigurationError(f"Cannot create object store client: {exc}") from exc
