from __future__ import annotations
"""Data models representing hierarchical listings and sweep results."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class ListedPrefix:
    """A deeper virtual folder returned by a hierarchical listing."""

    path: str


@dataclass(frozen=True)
class ListedObject:
    """A direct object returned by a hierarchical listing."""

    name: str
    size: int = 0
    last_modified: Optional[datetime] = None


ListedEntry = Union[ListedPrefix, ListedObject]


@dataclass(frozen=True)
class ObjectProperties:
    """Properties of an object found by a lookup."""

    name: str
    size: int
    last_modified: Optional[datetime] = None


class _NotFound:
    _instance: Optional["_NotFound"] = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()
"""Result of a property lookup for an object that does not exist."""

PropertyLookup = Union[ObjectProperties, _NotFound]


class PlaceholderOutcome(Enum):
    DELETED = "deleted"
    KEPT = "kept"
    ABSENT = "absent"


class EmptinessPolicy(Enum):
    """How a folder's remaining content is judged.

    ``PRESENCE`` keeps a folder as long as any real object exists, whatever
    its age. ``FRESHNESS`` prunes objects older than the retention threshold
    first and only counts the survivors.
    """

    PRESENCE = "presence"
    FRESHNESS = "freshness"


@dataclass(frozen=True)
class PassOptions:
    """Per-run values fixed when a pass starts."""

    root: str = ""
    delimiter: str = "/"
    policy: EmptinessPolicy = EmptinessPolicy.PRESENCE
    threshold: Optional[datetime] = None
    dry_run: bool = False


@dataclass
class PassReport:
    """Summary of what a single pass did."""

    root: str
    policy: EmptinessPolicy
    threshold: Optional[datetime] = None
    dry_run: bool = False
    visited: int = 0
    pruned: list[str] = field(default_factory=list)
    deleted_placeholders: list[str] = field(default_factory=list)
    kept_placeholders: list[str] = field(default_factory=list)
    absent_placeholders: list[str] = field(default_factory=list)

    @property
    def deletions(self) -> int:
        return len(self.pruned) + len(self.deleted_placeholders)
