"""Errors raised by the collection loop.

Each layer wraps the failure it observed with its own identifying context
(page number, summoner id or puuid, match id) and keeps the original error as
``cause`` and ``__cause__``.
"""

from typing import Optional


class CollectionError(Exception):
    """Base exception for a failed collection run."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(f"{message}: {cause}" if cause is not None else message)

    def root_cause(self) -> BaseException:
        """Follow the wrapped errors down to the one that started the failure."""
        error: BaseException = self
        while isinstance(error, CollectionError) and error.cause is not None:
            error = error.cause
        return error


class PlayerCollectionError(CollectionError):
    """A player-level call (summoner lookup, match listing) failed."""

    def __init__(self, player_id: str, operation: str, cause: BaseException):
        self.player_id = player_id
        self.operation = operation
        super().__init__(f"failed to {operation} for {player_id}", cause)


class MatchCollectionError(CollectionError):
    """Checking, fetching or persisting a single match failed."""

    def __init__(self, match_id: str, operation: str, cause: BaseException):
        self.match_id = match_id
        self.operation = operation
        super().__init__(f"failed to {operation} match {match_id}", cause)


class PageCollectionError(CollectionError):
    """Outermost wrapper; always names the ladder page being processed."""

    def __init__(
        self, page: int, cause: BaseException, summoner_id: Optional[str] = None
    ):
        self.page = page
        self.summoner_id = summoner_id
        message = f"failed to collect page {page}"
        if summoner_id is not None:
            message = f"{message} (summoner {summoner_id})"
        super().__init__(message, cause)
