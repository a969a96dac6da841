"""Storage adapter package."""

from .match_store import FileMatchStore, MatchStore, StorageError

__all__ = ["FileMatchStore", "MatchStore", "StorageError"]
