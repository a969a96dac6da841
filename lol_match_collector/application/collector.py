"""Ladder match collection loop.

Pages are crawled strictly in order and every entry is handled to completion
before the next one starts:

    PageCrawler -> EntryResolver -> MatchIngester -> fetch + persist

Any failure aborts the whole run. Each layer wraps what it caught with its own
context (match id, player id, page number) before re-raising.
"""

import logging
from datetime import datetime
from typing import List, Optional

from ..adapters.riot_api.client import RiotAPIClient, RiotAPIError
from ..adapters.storage.match_store import MatchStore, StorageError
from ..config import Config
from ..core.entities import (
    CollectionSummary,
    IngestResult,
    LadderEntry,
    MatchID,
    MatchRecord,
    PlayerIdentity,
)
from ..core.enums import Division, LadderQueue, PageStatus, Tier
from ..core.exceptions import (
    CollectionError,
    MatchCollectionError,
    PageCollectionError,
    PlayerCollectionError,
)


logger = logging.getLogger(__name__)


class EntryResolver:
    """Resolves a ladder entry's summoner ID to the player's PUUID.

    There is no cache: each entry costs exactly one lookup.
    """

    def __init__(self, riot_api: RiotAPIClient):
        self.riot_api = riot_api

    async def resolve(self, summoner_id: str) -> PlayerIdentity:
        try:
            return await self.riot_api.get_summoner(summoner_id)
        except RiotAPIError as e:
            raise PlayerCollectionError(summoner_id, "resolve summoner", e) from e


class MatchIngester:
    """Stores every recent match of a player that is not stored yet."""

    def __init__(
        self,
        riot_api: RiotAPIClient,
        store: MatchStore,
        start_time: datetime,
        count: int = 10,
        queue_type: str = "ranked",
    ):
        """Initialize the ingester.

        Args:
            riot_api: Riot API client for match listing and retrieval
            store: Output store, also used as the deduplication index
            start_time: Only matches played after this instant are listed
            count: Maximum number of match IDs listed per player
            queue_type: Match type filter for the listing
        """
        self.riot_api = riot_api
        self.store = store
        self.start_time = start_time
        self.count = count
        self.queue_type = queue_type

    async def list_matches(self, identity: PlayerIdentity) -> List[MatchID]:
        try:
            return await self.riot_api.list_match_ids(
                identity.puuid,
                self.start_time,
                count=self.count,
                queue_type=self.queue_type,
            )
        except RiotAPIError as e:
            raise PlayerCollectionError(identity.puuid, "list match ids", e) from e

    def exists(self, match_id: MatchID) -> bool:
        try:
            return self.store.exists(match_id)
        except StorageError as e:
            raise MatchCollectionError(match_id, "check", e) from e

    async def fetch(self, match_id: MatchID) -> MatchRecord:
        try:
            return await self.riot_api.get_match(match_id)
        except RiotAPIError as e:
            raise MatchCollectionError(match_id, "fetch", e) from e

    def persist(self, match_id: MatchID, record: MatchRecord) -> None:
        try:
            self.store.put(match_id, record)
        except StorageError as e:
            raise MatchCollectionError(match_id, "persist", e) from e

    async def ingest(self, identity: PlayerIdentity) -> IngestResult:
        """Fetch and persist the player's matches missing from the store.

        Match IDs are handled in the order the API returned them, and each new
        match is persisted before the next ID is checked.
        """
        result = IngestResult()

        for match_id in await self.list_matches(identity):
            if self.exists(match_id):
                logger.debug(f"Match {match_id} already stored, skipping")
                result.skipped += 1
                continue

            record = await self.fetch(match_id)
            self.persist(match_id, record)
            result.fetched += 1
            logger.info(f"Stored match {match_id} ({len(record)} bytes)")

        return result


class PageCrawler:
    """Walks the ladder from page 1 until a page comes back empty."""

    def __init__(
        self,
        riot_api: RiotAPIClient,
        resolver: EntryResolver,
        ingester: MatchIngester,
        queue: LadderQueue = LadderQueue.RANKED_SOLO_5X5,
        tier: Tier = Tier.SILVER,
        division: Division = Division.I,
    ):
        self.riot_api = riot_api
        self.resolver = resolver
        self.ingester = ingester
        self.queue = queue
        self.tier = tier
        self.division = division

    @classmethod
    def from_config(
        cls,
        config: Config,
        riot_api: RiotAPIClient,
        store: MatchStore,
        now: Optional[datetime] = None,
    ) -> "PageCrawler":
        """Wire the crawler and its collaborators from configuration."""
        ingester = MatchIngester(
            riot_api,
            store,
            start_time=config.get_match_start_time(now),
            count=config.match_count,
            queue_type=config.match_queue_type,
        )
        return cls(
            riot_api,
            EntryResolver(riot_api),
            ingester,
            queue=config.ladder_queue,
            tier=config.ladder_tier,
            division=config.ladder_division,
        )

    async def list_entries(self, page: int) -> List[LadderEntry]:
        return await self.riot_api.list_league_entries(
            self.queue, self.tier, self.division, page
        )

    async def process_page(self, page: int, summary: CollectionSummary) -> PageStatus:
        """Collect every entry of one page.

        Returns:
            PageStatus.EXHAUSTED for an empty page, PageStatus.CONTINUE otherwise

        Raises:
            PageCollectionError: If listing the page or processing any entry fails
        """
        try:
            entries = await self.list_entries(page)
        except RiotAPIError as e:
            raise PageCollectionError(page, e) from e

        summary.pages += 1
        logger.info(f"Found {len(entries)} entries on page {page}")

        if not entries:
            return PageStatus.EXHAUSTED

        for entry in entries:
            try:
                identity = await self.resolver.resolve(entry.summoner_id)
                result = await self.ingester.ingest(identity)
            except CollectionError as e:
                raise PageCollectionError(page, e, summoner_id=entry.summoner_id) from e

            summary.entries += 1
            summary.add(result)

        return PageStatus.CONTINUE

    async def run(self) -> CollectionSummary:
        """Crawl pages 1, 2, ... until the ladder is exhausted.

        Returns:
            Totals of the run

        Raises:
            PageCollectionError: On the first failure; nothing after it is attempted
        """
        summary = CollectionSummary()
        page = 1

        logger.info(
            f"Starting collection of {self.queue.value} {self.tier.value} {self.division.value}"
        )

        while (await self.process_page(page, summary)).has_more:
            page += 1

        logger.info(
            f"Collection finished after {summary.pages} pages: "
            f"{summary.entries} entries, {summary.matches_fetched} matches fetched, "
            f"{summary.matches_skipped} already stored"
        )
        return summary
