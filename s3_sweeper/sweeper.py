from __future__ import annotations
"""Bottom-up removal of placeholder objects left behind by empty folders."""
from dataclasses import dataclass, field
import logging
from typing import Iterable

from .models import (
    EmptinessPolicy,
    ListedObject,
    ListedPrefix,
    ObjectProperties,
    PassOptions,
    PassReport,
    PlaceholderOutcome,
)
from .services import ObjectStoreService

LOGGER = logging.getLogger(__name__)


def strip_delimiter(prefix: str, delimiter: str) -> str:
    if delimiter and prefix.endswith(delimiter):
        return prefix[: -len(delimiter)]
    return prefix


def is_placeholder(obj: ListedObject, prefix: str, delimiter: str) -> bool:
    """Return True when ``obj`` is the zero-length marker for folder ``prefix``.

    Both conventions are accepted: the folder name with its trailing
    delimiter and without it. Size or name alone is not enough.
    """
    if obj.size != 0:
        return False
    return obj.name == prefix or obj.name == strip_delimiter(prefix, delimiter)


@dataclass
class _Frame:
    prefix: str
    expanded: bool = False
    has_content: bool = False
    children: list[str] = field(default_factory=list)


class FolderSweeper:
    """Walks a bucket below a root and removes placeholders of empty folders.

    Every folder is listed once. Its emptiness is decided from that listing
    snapshot (after pruning in freshness mode), its sub-folders are then
    processed completely, and only afterwards is its own placeholder
    resolved.
    """

    def __init__(self, store: ObjectStoreService):
        self._store = store

    def run_pass(self, options: PassOptions) -> PassReport:
        """Sweep every top-level folder under ``options.root``.

        Direct objects at the root are skipped; the root's own placeholder is
        never touched. Store errors propagate and abort the pass.
        """
        report = PassReport(
            root=options.root,
            policy=options.policy,
            threshold=options.threshold,
            dry_run=options.dry_run,
        )
        for entry in self._store.list_hierarchical(options.root, options.delimiter):
            if not isinstance(entry, ListedPrefix):
                LOGGER.debug("Skipping root-level object '%s'", entry.name)
                continue
            self.walk(entry.path, options, report)
        return report

    def walk(self, prefix: str, options: PassOptions, report: PassReport | None = None) -> bool:
        """Process ``prefix`` and everything below it, children first.

        Returns whether ``prefix`` itself still holds real content.
        """
        if report is None:
            report = PassReport(
                root=prefix,
                policy=options.policy,
                threshold=options.threshold,
                dry_run=options.dry_run,
            )
        root = _Frame(prefix=prefix)
        stack = [root]
        while stack:
            frame = stack[-1]
            if not frame.expanded:
                frame.expanded = True
                report.visited += 1
                frame.has_content, frame.children = self._inspect(frame.prefix, options, report)
                stack.extend(_Frame(prefix=child) for child in reversed(frame.children))
                continue

            stack.pop()
            if frame.has_content:
                LOGGER.debug("Folder '%s' still holds content", frame.prefix)
                continue
            outcome = self.resolve_placeholder(frame.prefix, options)
            if outcome is PlaceholderOutcome.DELETED:
                report.deleted_placeholders.append(frame.prefix)
            elif outcome is PlaceholderOutcome.KEPT:
                report.kept_placeholders.append(frame.prefix)
            else:
                report.absent_placeholders.append(frame.prefix)
        return root.has_content

    def _inspect(self, prefix: str, options: PassOptions, report: PassReport) -> tuple[bool, list[str]]:
        children: list[str] = []
        objects: list[ListedObject] = []
        for entry in self._store.list_hierarchical(prefix, options.delimiter):
            if isinstance(entry, ListedPrefix):
                children.append(entry.path)
            else:
                objects.append(entry)

        # A zero-length "name" next to "name/" is the child folder's
        # unslashed placeholder, not content of this folder. It is still
        # subject to pruning here; the child's resolver stops at "name/".
        owned = set(children)
        markers = [obj for obj in objects if obj.size == 0 and obj.name + options.delimiter in owned]
        objects = [obj for obj in objects if obj not in markers]

        if options.policy is EmptinessPolicy.FRESHNESS:
            self.prune(prefix, markers, options, report)
            objects = self.prune(prefix, objects, options, report)
        return self.has_real_content(prefix, objects, options), children

    def prune(
        self,
        prefix: str,
        objects: Iterable[ListedObject],
        options: PassOptions,
        report: PassReport | None = None,
    ) -> list[ListedObject]:
        """Delete non-placeholder objects last modified before the threshold.

        Returns the objects that remain: placeholders and fresh objects.
        """
        if options.threshold is None:
            raise ValueError("Pruning requires a retention threshold")
        remaining: list[ListedObject] = []
        for obj in objects:
            if is_placeholder(obj, prefix, options.delimiter):
                remaining.append(obj)
                continue
            if obj.last_modified is not None and obj.last_modified < options.threshold:
                self._delete(obj.name, options, "expired object")
                if report is not None:
                    report.pruned.append(obj.name)
                continue
            remaining.append(obj)
        return remaining

    def has_real_content(self, prefix: str, objects: Iterable[ListedObject], options: PassOptions) -> bool:
        """Return True if any of ``objects`` is not the folder's placeholder.

        In freshness mode ``objects`` are expected to be the survivors of
        :meth:`prune`.
        """
        candidates = iter(objects)
        found = False
        exhausted = False
        while not found and not exhausted:
            obj = next(candidates, None)
            if obj is None:
                exhausted = True
            elif not is_placeholder(obj, prefix, options.delimiter):
                found = True
        return found

    def resolve_placeholder(self, prefix: str, options: PassOptions) -> PlaceholderOutcome:
        """Delete the zero-length object standing for the empty folder ``prefix``.

        The slashed name is tried first, then the name without the trailing
        delimiter. An object of non-zero size under either name is left alone.
        """
        names = [prefix]
        unslashed = strip_delimiter(prefix, options.delimiter)
        if unslashed and unslashed != prefix:
            names.append(unslashed)
        for name in names:
            properties = self._store.get_properties(name)
            if not isinstance(properties, ObjectProperties):
                continue
            if properties.size != 0:
                LOGGER.info("Keeping non-empty object '%s' for empty folder '%s'", name, prefix)
                return PlaceholderOutcome.KEPT
            self._delete(name, options, "placeholder folder object")
            return PlaceholderOutcome.DELETED
        LOGGER.info("No placeholder object found for empty folder: %s", prefix)
        return PlaceholderOutcome.ABSENT

    def _delete(self, name: str, options: PassOptions, kind: str) -> None:
        if options.dry_run:
            LOGGER.info("Would delete %s: %s", kind, name)
            return
        LOGGER.info("Deleting %s: %s", kind, name)
        self._store.delete_if_exists(name)
