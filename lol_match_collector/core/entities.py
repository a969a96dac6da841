"""Core entities for the lol-match-collector service."""

from dataclasses import dataclass
from typing import Any, Dict

# Opaque Match-V5 identifier, e.g. "JP1_412345678". Also the stored file stem.
MatchID = str

# Raw match document exactly as returned by the API. Never parsed.
MatchRecord = bytes


@dataclass(frozen=True)
class LadderEntry:
    """One row of a ranked ladder page."""

    league_id: str
    summoner_id: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "LadderEntry":
        """Build an entry from a league-v4 entries payload item.

        Raises:
            KeyError: If a required field is missing
            TypeError: If a required field is not a string
        """
        league_id = data["leagueId"]
        summoner_id = data["summonerId"]
        if not isinstance(league_id, str) or not isinstance(summoner_id, str):
            raise TypeError("leagueId and summonerId must be strings")
        return cls(league_id=league_id, summoner_id=summoner_id)


@dataclass(frozen=True)
class PlayerIdentity:
    """Durable player identifier required by the match endpoints."""

    puuid: str


@dataclass
class IngestResult:
    """Per-player outcome of a match ingestion pass."""

    fetched: int = 0
    skipped: int = 0


@dataclass
class CollectionSummary:
    """Terminal status of a successful collection run.

    ``pages`` counts every listing call, the empty terminal page included.
    """

    pages: int = 0
    entries: int = 0
    matches_fetched: int = 0
    matches_skipped: int = 0

    def add(self, result: IngestResult) -> None:
        """Fold one player's ingestion result into the totals."""
        self.matches_fetched += result.fetched
        self.matches_skipped += result.skipped
