"""Mock Riot API server for local development and testing.

Serves the ladder, summoner and match endpoints used by the collector from
in-memory data, and exposes a REST control interface to seed that data and
to force error responses.
"""

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from aiohttp import web
import structlog

logger = structlog.get_logger()

ENDPOINTS = ("entries", "summoner", "match_ids", "match")


@dataclass
class MockSummoner:
    """Mock summoner data."""
    summoner_id: str
    puuid: str
    summoner_level: int = 30

    def to_api_response(self) -> Dict[str, Any]:
        """Convert to summoner-v4 response format."""
        return {
            "id": self.summoner_id,
            "puuid": self.puuid,
            "profileIconId": 1,
            "revisionDate": int(time.time() * 1000),
            "summonerLevel": self.summoner_level,
        }


@dataclass
class MockMatch:
    """Mock match data."""
    match_id: str
    participants: List[str]
    game_start_time: int  # unix seconds
    queue_id: int = 420
    document: Optional[Dict[str, Any]] = None

    def to_api_response(self) -> Dict[str, Any]:
        """Convert to match-v5 response format."""
        if self.document is not None:
            return self.document
        return {
            "metadata": {
                "dataVersion": "2",
                "matchId": self.match_id,
                "participants": self.participants,
            },
            "info": {
                "gameCreation": self.game_start_time * 1000,
                "gameStartTimestamp": self.game_start_time * 1000,
                "gameDuration": 1800,
                "gameMode": "CLASSIC",
                "gameType": "MATCHED_GAME",
                "mapId": 11,
                "queueId": self.queue_id,
                "participants": [{"puuid": p} for p in self.participants],
            },
        }


@dataclass
class MockSettings:
    """Knobs for simulating slow or failing endpoints."""
    request_delay: float = 0
    forced_status: Dict[str, int] = field(default_factory=dict)


class MockRiotAPIServer:
    """Mock Riot API server with control endpoints."""

    def __init__(self, port: int = 8080, api_key: Optional[str] = None):
        self.port = port
        self.api_key = api_key
        self.app = web.Application()
        self.ladder_pages: List[List[Dict[str, str]]] = []
        self.summoners: Dict[str, MockSummoner] = {}
        self.matches: Dict[str, MockMatch] = {}
        self.settings = MockSettings()
        self.request_counts: Dict[str, int] = {name: 0 for name in ENDPOINTS}
        self.setup_routes()

    def setup_routes(self):
        """Set up all API routes."""
        # Riot API endpoints
        self.app.router.add_get('/lol/league/v4/entries/{queue}/{tier}/{division}', self.get_league_entries)
        self.app.router.add_get('/lol/summoner/v4/summoners/{summoner_id}', self.get_summoner)
        self.app.router.add_get('/lol/match/v5/matches/by-puuid/{puuid}/ids', self.get_match_ids)
        self.app.router.add_get('/lol/match/v5/matches/{match_id}', self.get_match)

        # Control endpoints
        self.app.router.add_post('/control/ladder', self.add_ladder_page)
        self.app.router.add_post('/control/summoners', self.create_summoner)
        self.app.router.add_post('/control/matches', self.create_match)
        self.app.router.add_put('/control/settings', self.update_settings)
        self.app.router.add_get('/control/stats', self.get_stats)
        self.app.router.add_post('/control/reset', self.reset_server)

    async def before_request(self, endpoint: str, request: web.Request) -> Optional[web.Response]:
        """Count the call, apply delay, check auth and forced failures."""
        self.request_counts[endpoint] += 1

        if self.settings.request_delay > 0:
            await asyncio.sleep(self.settings.request_delay)

        token = request.headers.get("X-Riot-Token")
        if self.api_key is not None:
            if not token:
                return self.error_response(401, "Unauthorized")
            if token != self.api_key:
                return self.error_response(403, "Forbidden")

        status = self.settings.forced_status.get(endpoint)
        if status:
            headers = {"Retry-After": "1"} if status == 429 else None
            return self.error_response(status, "Forced error", headers=headers)
        return None

    @staticmethod
    def error_response(status: int, message: str, headers: Optional[Dict[str, str]] = None) -> web.Response:
        return web.json_response(
            {"status": {"message": message, "status_code": status}},
            status=status,
            headers=headers,
        )

    # Riot API endpoints
    async def get_league_entries(self, request: web.Request) -> web.Response:
        """Mock /lol/league/v4/entries/{queue}/{tier}/{division} endpoint."""
        if error := await self.before_request("entries", request):
            return error

        try:
            page = int(request.query.get("page", "1"))
        except ValueError:
            return self.error_response(400, "Bad request - invalid page")
        if page < 1:
            return self.error_response(400, "Bad request - invalid page")

        if page > len(self.ladder_pages):
            return web.json_response([])

        queue = request.match_info['queue']
        tier = request.match_info['tier']
        division = request.match_info['division']
        entries = [
            {
                "leagueId": entry["leagueId"],
                "summonerId": entry["summonerId"],
                "queueType": queue,
                "tier": tier,
                "rank": division,
                "leaguePoints": 0,
                "wins": 10,
                "losses": 10,
            }
            for entry in self.ladder_pages[page - 1]
        ]
        return web.json_response(entries)

    async def get_summoner(self, request: web.Request) -> web.Response:
        """Mock /lol/summoner/v4/summoners/{summonerId} endpoint."""
        if error := await self.before_request("summoner", request):
            return error

        summoner = self.summoners.get(request.match_info['summoner_id'])
        if summoner is None:
            return self.error_response(404, "Data not found - summoner not found")
        return web.json_response(summoner.to_api_response())

    async def get_match_ids(self, request: web.Request) -> web.Response:
        """Mock /lol/match/v5/matches/by-puuid/{puuid}/ids endpoint."""
        if error := await self.before_request("match_ids", request):
            return error

        puuid = request.match_info['puuid']
        try:
            count = int(request.query.get("count", "20"))
            start_time = int(request.query.get("startTime", "0"))
        except ValueError:
            return self.error_response(400, "Bad request")
        match_type = request.query.get("type")

        player_matches = [
            m for m in self.matches.values()
            if puuid in m.participants
            and m.game_start_time >= start_time
            and (match_type != "ranked" or m.queue_id in (420, 440))
        ]
        # Newest first, like the real API
        player_matches.sort(key=lambda m: m.game_start_time, reverse=True)
        return web.json_response([m.match_id for m in player_matches[:count]])

    async def get_match(self, request: web.Request) -> web.Response:
        """Mock /lol/match/v5/matches/{matchId} endpoint."""
        if error := await self.before_request("match", request):
            return error

        match = self.matches.get(request.match_info['match_id'])
        if match is None:
            return self.error_response(404, "Data not found - match file not found")
        return web.json_response(match.to_api_response())

    # Control endpoints
    async def add_ladder_page(self, request: web.Request) -> web.Response:
        """Append a page of ladder entries."""
        data = await request.json()
        entries = [
            {"leagueId": e.get("leagueId", str(uuid.uuid4())), "summonerId": e["summonerId"]}
            for e in data.get("entries", [])
        ]
        self.ladder_pages.append(entries)

        logger.info("Added ladder page", page=len(self.ladder_pages), entries=len(entries))

        return web.json_response({"page": len(self.ladder_pages), "entries": entries})

    async def create_summoner(self, request: web.Request) -> web.Response:
        """Create a new mock summoner."""
        data = await request.json()
        summoner = MockSummoner(
            summoner_id=data.get("summoner_id") or f"summoner-{uuid.uuid4()}",
            puuid=data.get("puuid") or f"puuid-{uuid.uuid4()}",
        )
        self.summoners[summoner.summoner_id] = summoner

        logger.info("Created mock summoner", summoner_id=summoner.summoner_id, puuid=summoner.puuid)

        return web.json_response({"summoner_id": summoner.summoner_id, "puuid": summoner.puuid})

    async def create_match(self, request: web.Request) -> web.Response:
        """Create a new mock match."""
        data = await request.json()
        match = MockMatch(
            match_id=data.get("match_id") or f"JP1_{uuid.uuid4().int % 10**10}",
            participants=list(data.get("participants", [])),
            game_start_time=int(data.get("game_start_time") or time.time()),
            queue_id=int(data.get("queue_id", 420)),
            document=data.get("document"),
        )
        self.matches[match.match_id] = match

        logger.info("Created mock match", match_id=match.match_id, participants=len(match.participants))

        return web.json_response({"match_id": match.match_id})

    async def update_settings(self, request: web.Request) -> web.Response:
        """Update server settings."""
        data = await request.json()

        if "request_delay" in data:
            self.settings.request_delay = float(data["request_delay"])

        if "forced_status" in data:
            unknown = set(data["forced_status"]) - set(ENDPOINTS)
            if unknown:
                return web.json_response({"error": f"Unknown endpoints: {sorted(unknown)}"}, status=400)
            self.settings.forced_status = {k: int(v) for k, v in data["forced_status"].items() if v}

        logger.info("Updated server settings",
                    request_delay=self.settings.request_delay,
                    forced_status=self.settings.forced_status)

        return web.json_response({
            "request_delay": self.settings.request_delay,
            "forced_status": self.settings.forced_status,
        })

    async def get_stats(self, request: web.Request) -> web.Response:
        """Report how many times each Riot API endpoint was called."""
        return web.json_response({"request_counts": self.request_counts})

    async def reset_server(self, request: web.Request) -> web.Response:
        """Reset server to initial state."""
        self.ladder_pages.clear()
        self.summoners.clear()
        self.matches.clear()
        self.settings = MockSettings()
        self.request_counts = {name: 0 for name in ENDPOINTS}

        logger.info("Reset mock server to initial state")

        return web.json_response({"status": "reset"})

    def run(self):
        """Run the mock server."""
        logger.info("Starting mock Riot API server", port=self.port)
        web.run_app(self.app, host='0.0.0.0', port=self.port)


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description='Mock Riot API Server')
    parser.add_argument('--port', type=int, default=8080, help='Port to run on')
    parser.add_argument('--api-key', help='Require this X-Riot-Token on API calls')
    args = parser.parse_args()

    server = MockRiotAPIServer(port=args.port, api_key=args.api_key)
    server.run()


if __name__ == '__main__':
    main()
