"""Control client for the mock Riot API server.

This module provides a Python client and CLI for seeding the mock server
with ladder pages, summoners and matches, and for forcing error responses.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

import httpx
import structlog
import click

logger = structlog.get_logger()


class MockRiotControlClient:
    """Client for controlling the mock Riot API server."""

    def __init__(self, base_url: str = "http://localhost:8080"):
        self.base_url = base_url
        self.control_url = f"{base_url}/control"

    async def add_ladder_page(self, summoner_ids: List[str]) -> Dict[str, Any]:
        """Append one ladder page listing the given summoners."""
        async with httpx.AsyncClient() as client:
            data = {"entries": [{"summonerId": s} for s in summoner_ids]}
            response = await client.post(f"{self.control_url}/ladder", json=data)
            response.raise_for_status()
            return response.json()

    async def create_summoner(
        self,
        summoner_id: Optional[str] = None,
        puuid: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a new mock summoner."""
        async with httpx.AsyncClient() as client:
            data = {}
            if summoner_id:
                data["summoner_id"] = summoner_id
            if puuid:
                data["puuid"] = puuid

            response = await client.post(f"{self.control_url}/summoners", json=data)
            response.raise_for_status()
            return response.json()

    async def create_match(
        self,
        participants: List[str],
        match_id: Optional[str] = None,
        game_start_time: Optional[int] = None,
        queue_id: int = 420,
        document: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create a new mock match played by the given PUUIDs."""
        async with httpx.AsyncClient() as client:
            data: Dict[str, Any] = {
                "participants": participants,
                "queue_id": queue_id,
            }
            if match_id:
                data["match_id"] = match_id
            if game_start_time is not None:
                data["game_start_time"] = game_start_time
            if document is not None:
                data["document"] = document

            response = await client.post(f"{self.control_url}/matches", json=data)
            response.raise_for_status()
            return response.json()

    async def update_settings(
        self,
        request_delay: Optional[float] = None,
        forced_status: Optional[Dict[str, int]] = None,
    ) -> Dict[str, Any]:
        """Update server settings."""
        async with httpx.AsyncClient() as client:
            data: Dict[str, Any] = {}
            if request_delay is not None:
                data["request_delay"] = request_delay
            if forced_status is not None:
                data["forced_status"] = forced_status

            response = await client.put(f"{self.control_url}/settings", json=data)
            response.raise_for_status()
            return response.json()

    async def get_request_counts(self) -> Dict[str, int]:
        """Get per-endpoint call counts since the last reset."""
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{self.control_url}/stats")
            response.raise_for_status()
            return response.json()["request_counts"]

    async def reset_server(self) -> Dict[str, Any]:
        """Reset server to initial state."""
        async with httpx.AsyncClient() as client:
            response = await client.post(f"{self.control_url}/reset")
            response.raise_for_status()
            return response.json()

    async def seed_ladder(
        self,
        pages: int = 2,
        players_per_page: int = 3,
        matches_per_player: int = 5,
    ) -> List[str]:
        """Seed a small ladder where every player has recent ranked matches.

        Returns:
            IDs of all created matches
        """
        match_ids = []
        now = int(time.time())
        for page in range(1, pages + 1):
            summoner_ids = []
            for i in range(players_per_page):
                summoner = await self.create_summoner(
                    summoner_id=f"summoner-{page}-{i}",
                    puuid=f"puuid-{page}-{i}",
                )
                summoner_ids.append(summoner["summoner_id"])
                for m in range(matches_per_player):
                    match = await self.create_match(
                        participants=[summoner["puuid"]],
                        match_id=f"JP1_{page}{i:02d}{m:03d}",
                        game_start_time=now - 3600 * (m + 1),
                    )
                    match_ids.append(match["match_id"])
            await self.add_ladder_page(summoner_ids)

        logger.info("Seeded mock ladder", pages=pages, matches=len(match_ids))
        return match_ids


# CLI Commands
@click.group()
@click.option('--server-url', default='http://localhost:8080', help='Mock server URL')
@click.pass_context
def cli(ctx, server_url):
    """Mock Riot API Control CLI."""
    ctx.ensure_object(dict)
    ctx.obj['client'] = MockRiotControlClient(server_url)


@cli.command()
@click.option('--summoner-id', help='Specific summoner ID to use')
@click.option('--puuid', help='Specific PUUID to use')
@click.pass_context
def create_summoner(ctx, summoner_id, puuid):
    """Create a new mock summoner."""
    client = ctx.obj['client']
    result = asyncio.run(client.create_summoner(summoner_id, puuid))
    click.echo(f"Created summoner: {result}")


@cli.command()
@click.argument('summoner_ids', nargs=-1, required=True)
@click.pass_context
def add_page(ctx, summoner_ids):
    """Append a ladder page listing SUMMONER_IDS."""
    client = ctx.obj['client']
    result = asyncio.run(client.add_ladder_page(list(summoner_ids)))
    click.echo(f"Added page {result['page']} with {len(result['entries'])} entries")


@cli.command()
@click.argument('participants', nargs=-1, required=True)
@click.option('--match-id', help='Specific match ID to use')
@click.option('--start-time', type=int, help='Game start time in unix seconds')
@click.option('--queue-id', default=420, type=int, help='Queue ID (420=solo, 440=flex)')
@click.pass_context
def create_match(ctx, participants, match_id, start_time, queue_id):
    """Create a match played by the PARTICIPANTS puuids."""
    client = ctx.obj['client']
    result = asyncio.run(client.create_match(
        list(participants), match_id=match_id, game_start_time=start_time, queue_id=queue_id
    ))
    click.echo(f"Created match: {result['match_id']}")


@cli.command()
@click.option('--pages', default=2, type=int)
@click.option('--players', default=3, type=int, help='Players per page')
@click.option('--matches', default=5, type=int, help='Matches per player')
@click.pass_context
def seed(ctx, pages, players, matches):
    """Seed a ladder with players and recent matches."""
    client = ctx.obj['client']
    match_ids = asyncio.run(client.seed_ladder(pages, players, matches))
    click.echo(f"Seeded {pages} pages and {len(match_ids)} matches")


@cli.command()
@click.option('--delay', type=float, help='Request delay in seconds')
@click.option('--fail', 'failures', multiple=True, metavar='ENDPOINT=STATUS',
              help='Force a status on an endpoint (entries, summoner, match_ids, match)')
@click.option('--clear-failures', is_flag=True, help='Stop forcing error statuses')
@click.pass_context
def settings(ctx, delay, failures, clear_failures):
    """Update server settings."""
    client = ctx.obj['client']
    forced_status = None
    if clear_failures:
        forced_status = {}
    elif failures:
        forced_status = {}
        for failure in failures:
            endpoint, _, status = failure.partition('=')
            if not status.isdigit():
                raise click.BadParameter(f"expected ENDPOINT=STATUS, got {failure!r}")
            forced_status[endpoint] = int(status)

    result = asyncio.run(client.update_settings(request_delay=delay, forced_status=forced_status))
    click.echo(f"Settings updated: {result}")


@cli.command()
@click.pass_context
def stats(ctx):
    """Show per-endpoint request counts."""
    client = ctx.obj['client']
    counts = asyncio.run(client.get_request_counts())
    for endpoint, count in counts.items():
        click.echo(f"{endpoint}: {count}")


@cli.command()
@click.pass_context
def reset(ctx):
    """Reset server to initial state."""
    client = ctx.obj['client']
    asyncio.run(client.reset_server())
    click.echo("Server reset")


if __name__ == '__main__':
    cli()
