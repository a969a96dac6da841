"""Core layer for the lol-match-collector service.

Domain entities, enums and the collection error hierarchy.
"""

from .entities import (
    CollectionSummary,
    IngestResult,
    LadderEntry,
    MatchID,
    MatchRecord,
    PlayerIdentity,
)
from .enums import Division, LadderQueue, PageStatus, Platform, Tier
from .exceptions import (
    CollectionError,
    MatchCollectionError,
    PageCollectionError,
    PlayerCollectionError,
)

__all__ = [
    "CollectionSummary",
    "IngestResult",
    "LadderEntry",
    "MatchID",
    "MatchRecord",
    "PlayerIdentity",
    "Division",
    "LadderQueue",
    "PageStatus",
    "Platform",
    "Tier",
    "CollectionError",
    "MatchCollectionError",
    "PageCollectionError",
    "PlayerCollectionError",
]
