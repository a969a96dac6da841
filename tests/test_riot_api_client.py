"""Tests for Riot API client."""

from datetime import datetime, timezone

import httpx
import pytest

from lol_match_collector.adapters.riot_api import (
    NotFoundError,
    RateLimitError,
    RequestBuildError,
    ResponseDecodeError,
    RiotAPIClient,
    RiotAPIError,
    RiotAuthTransport,
    RiotStatusError,
    RiotTransportError,
    RIOT_TOKEN_HEADER,
)
from lol_match_collector.adapters.storage import FileMatchStore
from lol_match_collector.application.collector import EntryResolver, MatchIngester, PageCrawler
from lol_match_collector.core import (
    Division,
    LadderEntry,
    LadderQueue,
    MatchCollectionError,
    PageCollectionError,
    Platform,
    PlayerCollectionError,
    PlayerIdentity,
    Tier,
)
from tests.riot_api_mocks import (
    ENTRIES_PATH,
    PLATFORM_HOST,
    REGIONAL_HOST,
    RiotAPIMockRouter,
)

LADDER = (LadderQueue.RANKED_SOLO_5X5, Tier.SILVER, Division.I)


@pytest.fixture
def mocks():
    with RiotAPIMockRouter() as router:
        yield router


class TestRiotAPIClient:
    """Test cases for RiotAPIClient."""

    def test_initialization(self):
        """Test client initialization."""
        client = RiotAPIClient()
        assert client.platform == Platform.JP1
        assert client.request_timeout == 10.0
        assert client.base_url is None

    def test_get_base_url(self):
        """Test platform and regional URL generation."""
        client = RiotAPIClient(Platform.EUW1)
        assert client._get_base_url() == "https://euw1.api.riotgames.com"
        assert client._get_regional_url() == "https://europe.api.riotgames.com"

    def test_base_url_override_replaces_both_hosts(self):
        client = RiotAPIClient(base_url="http://localhost:8080/")
        assert client._get_base_url() == "http://localhost:8080"
        assert client._get_regional_url() == "http://localhost:8080"

    @pytest.mark.asyncio
    async def test_list_league_entries_success(self, mocks):
        route = mocks.mock_league_pages({3: ["s1", "s2"]})

        async with RiotAPIClient() as client:
            entries = await client.list_league_entries(*LADDER, page=3)

        assert entries == [
            LadderEntry(league_id="league-1", summoner_id="s1"),
            LadderEntry(league_id="league-1", summoner_id="s2"),
        ]
        assert route.call_count == 1
        assert route.calls.last.request.url.params["page"] == "3"

    @pytest.mark.asyncio
    async def test_list_league_entries_empty_page(self, mocks):
        mocks.mock_league_pages({})

        async with RiotAPIClient() as client:
            assert await client.list_league_entries(*LADDER, page=1) == []

    @pytest.mark.asyncio
    async def test_list_league_entries_rejects_malformed_entry(self, mocks):
        mocks.router.get(host=PLATFORM_HOST, path=ENTRIES_PATH).mock(
            return_value=httpx.Response(200, json=[{"leagueId": "l"}])
        )

        async with RiotAPIClient() as client:
            with pytest.raises(ResponseDecodeError):
                await client.list_league_entries(*LADDER, page=1)

    @pytest.mark.asyncio
    async def test_list_league_entries_rejects_non_array(self, mocks):
        mocks.router.get(host=PLATFORM_HOST, path=ENTRIES_PATH).mock(
            return_value=httpx.Response(200, json={"entries": []})
        )

        async with RiotAPIClient() as client:
            with pytest.raises(ResponseDecodeError):
                await client.list_league_entries(*LADDER, page=1)

    @pytest.mark.asyncio
    async def test_list_league_entries_null_body_is_empty_page(self, mocks):
        mocks.router.get(host=PLATFORM_HOST, path=ENTRIES_PATH).mock(
            return_value=httpx.Response(200, content=b"null")
        )

        async with RiotAPIClient() as client:
            assert await client.list_league_entries(*LADDER, page=4) == []

    @pytest.mark.asyncio
    async def test_get_summoner_success(self, mocks):
        mocks.mock_summoner("enc-summoner", "puuid-123")

        async with RiotAPIClient() as client:
            identity = await client.get_summoner("enc-summoner")

        assert identity == PlayerIdentity(puuid="puuid-123")

    @pytest.mark.asyncio
    async def test_get_summoner_without_puuid(self, mocks):
        mocks.router.get(host=PLATFORM_HOST, path="/lol/summoner/v4/summoners/s1").mock(
            return_value=httpx.Response(200, json={"id": "s1"})
        )

        async with RiotAPIClient() as client:
            with pytest.raises(ResponseDecodeError):
                await client.get_summoner("s1")

    @pytest.mark.asyncio
    async def test_get_summoner_not_found(self, mocks):
        mocks.mock_error(
            PLATFORM_HOST, "/lol/summoner/v4/summoners/missing", 404, "Data not found"
        )

        async with RiotAPIClient() as client:
            with pytest.raises(NotFoundError) as exc_info:
                await client.get_summoner("missing")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_list_match_ids_sends_filters(self, mocks):
        route = mocks.mock_match_ids("puuid-1", ["JP1_3", "JP1_1", "JP1_2"])
        start_time = datetime(2024, 3, 1, tzinfo=timezone.utc)

        async with RiotAPIClient() as client:
            match_ids = await client.list_match_ids("puuid-1", start_time)

        assert match_ids == ["JP1_3", "JP1_1", "JP1_2"]
        params = route.calls.last.request.url.params
        assert params["type"] == "ranked"
        assert params["count"] == "10"
        assert params["startTime"] == str(int(start_time.timestamp()))

    @pytest.mark.asyncio
    async def test_list_match_ids_caps_count(self, mocks):
        route = mocks.mock_match_ids("puuid-1", [])

        async with RiotAPIClient() as client:
            await client.list_match_ids("puuid-1", datetime.now(timezone.utc), count=500)

        assert route.calls.last.request.url.params["count"] == "100"

    @pytest.mark.asyncio
    async def test_list_match_ids_rejects_non_strings(self, mocks):
        mocks.mock_match_ids("puuid-1", [1, 2])

        async with RiotAPIClient() as client:
            with pytest.raises(ResponseDecodeError):
                await client.list_match_ids("puuid-1", datetime.now(timezone.utc))

    @pytest.mark.asyncio
    async def test_get_match_returns_raw_bytes(self, mocks):
        raw = b'{"metadata": {"matchId": "JP1_1"},   "info": {}}'
        mocks.mock_match("JP1_1", raw)

        async with RiotAPIClient() as client:
            assert await client.get_match("JP1_1") == raw

    @pytest.mark.asyncio
    async def test_get_match_does_not_parse_body(self, mocks):
        mocks.mock_match("JP1_1", b"not json at all")

        async with RiotAPIClient() as client:
            assert await client.get_match("JP1_1") == b"not json at all"

    @pytest.mark.asyncio
    async def test_rate_limited(self, mocks):
        mocks.mock_error(
            REGIONAL_HOST,
            "/lol/match/v5/matches/JP1_1",
            429,
            "Rate limit exceeded",
            headers={"Retry-After": "60"},
        )

        async with RiotAPIClient() as client:
            with pytest.raises(RateLimitError) as exc_info:
                await client.get_match("JP1_1")

        error = exc_info.value
        assert error.retry_after == 60
        assert error.status_code == 429
        assert "429" in str(error)
        assert "Rate limit exceeded" in str(error)
        assert "Retry-After: 60" in str(error) or "retry-after: 60" in str(error)

    @pytest.mark.asyncio
    async def test_server_error_message_contains_dump(self, mocks):
        mocks.mock_error(PLATFORM_HOST, ENTRIES_PATH, 500, "Internal server error")

        async with RiotAPIClient() as client:
            with pytest.raises(RiotStatusError) as exc_info:
                await client.list_league_entries(*LADDER, page=1)

        error = exc_info.value
        assert not isinstance(error, (RateLimitError, NotFoundError))
        assert error.status_code == 500
        assert "API error: 500" in str(error)
        assert "list ladder entries page 1" in str(error)
        assert "Internal server error" in error.body
        assert error.url.startswith(f"https://{PLATFORM_HOST}{ENTRIES_PATH}")

    @pytest.mark.asyncio
    async def test_invalid_json(self, mocks):
        mocks.router.get(host=PLATFORM_HOST, path=ENTRIES_PATH).mock(
            return_value=httpx.Response(200, content=b"<html>oops</html>")
        )

        async with RiotAPIClient() as client:
            with pytest.raises(ResponseDecodeError):
                await client.list_league_entries(*LADDER, page=1)

    @pytest.mark.asyncio
    async def test_http_error(self, mocks):
        """Test HTTP request exception handling."""
        mocks.router.get(host=PLATFORM_HOST, path="/lol/summoner/v4/summoners/s1").mock(
            side_effect=httpx.ConnectError("Connection failed")
        )

        async with RiotAPIClient() as client:
            with pytest.raises(RiotTransportError) as exc_info:
                await client.get_summoner("s1")

        assert "Request failed" in str(exc_info.value)
        assert "get summoner s1" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_invalid_base_url(self):
        async with RiotAPIClient(base_url="http://[not-a-host") as client:
            with pytest.raises(RiotAPIError) as exc_info:
                await client.get_summoner("s1")

        assert isinstance(exc_info.value, (RequestBuildError, RiotTransportError))

    @pytest.mark.asyncio
    async def test_auth_transport_sets_token(self, mocks):
        route = mocks.mock_summoner("s1", "p1")
        transport = RiotAuthTransport("secret-key", httpx.AsyncHTTPTransport())

        async with RiotAPIClient(transport=transport) as client:
            await client.get_summoner("s1")

        assert route.calls.last.request.headers[RIOT_TOKEN_HEADER] == "secret-key"

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """Test async context manager functionality."""
        async with RiotAPIClient() as client:
            assert client.client is not None
        assert client.client.is_closed


class TestUnencodableIdentifiers:
    """Ids that decode from JSON but cannot be put into a request URL."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call",
        [
            lambda client: client.get_summoner("\ud800"),
            lambda client: client.get_match("JP1_\udc80"),
            lambda client: client.list_match_ids("\ud800", datetime.now(timezone.utc)),
        ],
        ids=["summoner", "match", "match_ids"],
    )
    async def test_raises_request_build_error(self, mocks, call):
        async with RiotAPIClient() as client:
            with pytest.raises(RequestBuildError):
                await call(client)

        assert mocks.router.calls.call_count == 0

    @pytest.mark.asyncio
    async def test_crawl_names_page_and_summoner(self, mocks, tmp_path):
        mocks.router.get(host=PLATFORM_HOST, path=ENTRIES_PATH).mock(
            return_value=httpx.Response(
                200, content=b'[{"leagueId": "l", "summonerId": "\\ud800"}]'
            )
        )

        async with RiotAPIClient() as client:
            store = FileMatchStore(tmp_path)
            ingester = MatchIngester(client, store, start_time=datetime.now(timezone.utc))
            crawler = PageCrawler(client, EntryResolver(client), ingester)
            with pytest.raises(PageCollectionError) as exc_info:
                await crawler.run()

        error = exc_info.value
        assert error.page == 1
        assert error.summoner_id == "\ud800"
        assert isinstance(error.__cause__, PlayerCollectionError)
        assert isinstance(error.root_cause(), RequestBuildError)

    @pytest.mark.asyncio
    async def test_crawl_names_match(self, mocks, tmp_path):
        mocks.mock_league_pages({1: ["s1"]})
        mocks.mock_summoner("s1", "p1")
        mocks.router.get(
            host=REGIONAL_HOST, path="/lol/match/v5/matches/by-puuid/p1/ids"
        ).mock(return_value=httpx.Response(200, content=b'["\\udc80"]'))

        async with RiotAPIClient() as client:
            store = FileMatchStore(tmp_path)
            ingester = MatchIngester(client, store, start_time=datetime.now(timezone.utc))
            crawler = PageCrawler(client, EntryResolver(client), ingester)
            with pytest.raises(PageCollectionError) as exc_info:
                await crawler.run()

        match_error = exc_info.value.__cause__
        assert isinstance(match_error, MatchCollectionError)
        assert match_error.match_id == "\udc80"
        assert match_error.operation == "fetch"
        assert isinstance(exc_info.value.root_cause(), RequestBuildError)
        assert list(tmp_path.iterdir()) == []
