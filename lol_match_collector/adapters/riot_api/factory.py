"""Factory for creating a configured Riot API client."""

import httpx
import structlog

from .client import RiotAPIClient
from .transports import RetryTransport, RiotAuthTransport
from ...config import Config

logger = structlog.get_logger()


def create_transport(config: Config) -> httpx.AsyncBaseTransport:
    """Compose auth over retry over the network transport."""
    retry = RetryTransport(
        base=httpx.AsyncHTTPTransport(),
        max_attempts=config.retry_max_attempts,
        wait_min=config.retry_wait_min_seconds,
        wait_max=config.retry_wait_max_seconds,
    )
    return RiotAuthTransport(config.riot_api_key, base=retry)


def create_riot_api_client(config: Config) -> RiotAPIClient:
    """Factory function to create the Riot API client.

    Args:
        config: Application configuration

    Returns:
        RiotAPIClient talking to the real API, or to ``riot_api_base_url`` when set
    """
    if config.riot_api_base_url:
        logger.info("Creating Riot API client with base URL override", base_url=config.riot_api_base_url)
    else:
        logger.info("Creating real Riot API client", platform=config.riot_platform.value)

    return RiotAPIClient(
        platform=config.riot_platform,
        base_url=config.riot_api_base_url,
        request_timeout=config.riot_api_timeout_seconds,
        transport=create_transport(config),
    )
