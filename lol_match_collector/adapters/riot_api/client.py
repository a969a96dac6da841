"""Riot API client for the ladder, summoner and match endpoints."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
import structlog

from lol_match_collector.core.entities import (
    LadderEntry,
    MatchID,
    MatchRecord,
    PlayerIdentity,
)
from lol_match_collector.core.enums import Division, LadderQueue, Platform, Tier

logger = structlog.get_logger()


class RiotAPIError(Exception):
    """Base exception for Riot API errors."""

    pass


class RequestBuildError(RiotAPIError):
    """The request could not be built (malformed URL or parameters)."""

    pass


class RiotTransportError(RiotAPIError):
    """Network or connection failure while talking to the API."""

    pass


class RiotStatusError(RiotAPIError):
    """The API answered with a status code of 400 or above."""

    def __init__(self, operation: str, response: httpx.Response):
        self.operation = operation
        self.status_code = response.status_code
        self.body = response.text
        try:
            self.url: Optional[str] = str(response.request.url)
        except RuntimeError:
            self.url = None
        super().__init__(
            f"API error: {self.status_code} while trying to {operation}\n"
            f"{dump_response(response)}"
        )


class RateLimitError(RiotStatusError):
    """Rate limit exceeded error."""

    def __init__(self, operation: str, response: httpx.Response):
        retry_after = response.headers.get("Retry-After")
        self.retry_after = int(retry_after) if retry_after and retry_after.isdigit() else None
        super().__init__(operation, response)


class NotFoundError(RiotStatusError):
    """The requested resource does not exist."""

    pass


class ResponseDecodeError(RiotAPIError):
    """The response body does not have the expected shape."""

    pass


def dump_response(response: httpx.Response) -> str:
    """Render a response as status line, headers and body for diagnostics."""
    lines = [f"{response.http_version} {response.status_code} {response.reason_phrase}"]
    lines.extend(f"{name}: {value}" for name, value in response.headers.items())
    return "\r\n".join(lines) + "\r\n\r\n" + response.text


class RiotAPIClient:
    """Riot API client used by the collection loop.

    Authentication and retries are not handled here: both live in the
    transport passed to the client (see ``transports``).
    """

    def __init__(
        self,
        platform: Platform = Platform.JP1,
        base_url: Optional[str] = None,
        request_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Riot API client.

        Args:
            platform: Platform whose ladder is crawled; also selects the regional cluster
            base_url: Base URL replacing both platform and regional hosts (mock server)
            request_timeout: Request timeout in seconds
            transport: Transport chain carrying auth and retries
        """
        self.platform = platform
        self.base_url = base_url.rstrip("/") if base_url else None
        self.request_timeout = request_timeout
        self.client = httpx.AsyncClient(timeout=request_timeout, transport=transport)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()

    def _get_base_url(self) -> str:
        """Get the platform host URL."""
        return self.base_url or f"https://{self.platform.value}.api.riotgames.com"

    def _get_regional_url(self) -> str:
        """Get the regional host URL for Match API calls."""
        return self.base_url or f"https://{self.platform.regional_route}.api.riotgames.com"

    async def _make_request(
        self, url: str, operation: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        """Send a GET request and turn every failure into a RiotAPIError.

        Args:
            url: The URL to request
            operation: Human readable name of the call, used in error messages
            params: Query parameters
        """
        try:
            request = self.client.build_request(
                "GET", url, params=params, headers={"Accept": "application/json"}
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise RequestBuildError(f"Invalid request to {operation}: {e}") from e

        try:
            response = await self.client.send(request)
        except httpx.RequestError as e:
            logger.error("HTTP request failed", operation=operation, error=str(e))
            raise RiotTransportError(f"Request failed while trying to {operation}: {e}") from e

        if response.status_code == 429:
            logger.warning(
                "Rate limited by Riot API",
                operation=operation,
                retry_after=response.headers.get("Retry-After"),
            )
            raise RateLimitError(operation, response)

        if response.status_code == 404:
            raise NotFoundError(operation, response)

        if response.status_code >= 400:
            logger.error(
                "Riot API error",
                operation=operation,
                status_code=response.status_code,
                response=response.text,
            )
            raise RiotStatusError(operation, response)

        return response

    @staticmethod
    def _path_segment(value: str, operation: str) -> str:
        """Percent-encode one path segment of a request URL."""
        try:
            return quote(value, safe="")
        except UnicodeError as e:
            raise RequestBuildError(f"Invalid request to {operation}: {e}") from e

    @staticmethod
    def _decode_json(response: httpx.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ResponseDecodeError(f"Invalid JSON while trying to {operation}: {e}") from e

    async def list_league_entries(
        self, queue: LadderQueue, tier: Tier, division: Division, page: int
    ) -> List[LadderEntry]:
        """List one page of ranked ladder entries.

        Args:
            queue: Ranked queue
            tier: Ranked tier
            division: Division within the tier
            page: Page number, starting at 1

        Returns:
            Entries of the page; an empty list once the ladder is exhausted

        Raises:
            RiotStatusError: If the API answers with an error status
            ResponseDecodeError: If the body is not an array of entries
            RiotAPIError: For other API errors
        """
        operation = f"list ladder entries page {page}"
        url = (
            f"{self._get_base_url()}/lol/league/v4/entries/"
            f"{queue.value}/{tier.value}/{division.value}"
        )

        logger.info(
            "Fetching ladder entries",
            queue=queue.value,
            tier=tier.value,
            division=division.value,
            page=page,
        )

        response = await self._make_request(url, operation, params={"page": page})
        data = self._decode_json(response, operation)
        if data is None:
            data = []
        if not isinstance(data, list):
            raise ResponseDecodeError(f"Expected a JSON array while trying to {operation}")

        try:
            return [LadderEntry.from_api(item) for item in data]
        except (KeyError, TypeError) as e:
            raise ResponseDecodeError(f"Malformed ladder entry while trying to {operation}: {e!r}") from e

    async def get_summoner(self, summoner_id: str) -> PlayerIdentity:
        """Resolve an encrypted summoner ID to the player's PUUID.

        Args:
            summoner_id: Encrypted summoner ID from a ladder entry

        Returns:
            PlayerIdentity carrying the PUUID

        Raises:
            NotFoundError: If the summoner does not exist
            ResponseDecodeError: If the body has no PUUID
            RiotAPIError: For other API errors
        """
        operation = f"get summoner {summoner_id}"
        segment = self._path_segment(summoner_id, operation)
        url = f"{self._get_base_url()}/lol/summoner/v4/summoners/{segment}"

        logger.debug("Fetching summoner", summoner_id=summoner_id)

        response = await self._make_request(url, operation)
        data = self._decode_json(response, operation)

        puuid = data.get("puuid") if isinstance(data, dict) else None
        if not isinstance(puuid, str) or not puuid:
            raise ResponseDecodeError(f"Missing puuid while trying to {operation}")

        return PlayerIdentity(puuid=puuid)

    async def list_match_ids(
        self,
        puuid: str,
        start_time: datetime,
        count: int = 10,
        queue_type: str = "ranked",
    ) -> List[MatchID]:
        """Get recent match IDs for a player.

        Args:
            puuid: Player PUUID
            start_time: Only matches played after this instant are listed
            count: Number of matches to retrieve (max 100)
            queue_type: Match type filter

        Returns:
            List of match IDs, in the order the API returned them

        Raises:
            ResponseDecodeError: If the body is not an array of strings
            RiotAPIError: For other API errors
        """
        operation = f"list match ids for {puuid}"
        segment = self._path_segment(puuid, operation)
        url = f"{self._get_regional_url()}/lol/match/v5/matches/by-puuid/{segment}/ids"
        params = {
            "type": queue_type,
            "count": min(count, 100),
            "startTime": int(start_time.timestamp()),
        }

        logger.info("Fetching recent matches", puuid=puuid, count=count)

        try:
            response = await self._make_request(url, operation, params=params)
            match_ids = self._decode_json(response, operation)
            if not isinstance(match_ids, list) or not all(isinstance(m, str) for m in match_ids):
                raise ResponseDecodeError(
                    f"Expected a JSON array of strings while trying to {operation}"
                )

            logger.info(
                "Successfully fetched recent matches",
                puuid=puuid,
                match_count=len(match_ids),
            )

            return match_ids

        except RiotAPIError as e:
            logger.error("Error fetching recent matches", puuid=puuid, error=str(e))
            raise

    async def get_match(self, match_id: MatchID) -> MatchRecord:
        """Get the raw match document.

        Args:
            match_id: Match ID to fetch

        Returns:
            Response body, unparsed

        Raises:
            NotFoundError: If the match does not exist
            RiotAPIError: For other API errors
        """
        operation = f"get match {match_id}"
        segment = self._path_segment(match_id, operation)
        url = f"{self._get_regional_url()}/lol/match/v5/matches/{segment}"

        logger.debug("Fetching match", match_id=match_id)

        response = await self._make_request(url, operation)
        return response.content
