"""Riot API adapter package.

This package contains the Riot API client, the transports it is composed
with, and the factory wiring them from configuration.
"""

from .client import (
    RiotAPIClient,
    RiotAPIError,
    RequestBuildError,
    RiotTransportError,
    RiotStatusError,
    RateLimitError,
    NotFoundError,
    ResponseDecodeError,
    dump_response,
)
from .factory import create_riot_api_client, create_transport
from .transports import RetryTransport, RiotAuthTransport, RIOT_TOKEN_HEADER

__all__ = [
    # Client
    "RiotAPIClient",
    "dump_response",
    # Exceptions
    "RiotAPIError",
    "RequestBuildError",
    "RiotTransportError",
    "RiotStatusError",
    "RateLimitError",
    "NotFoundError",
    "ResponseDecodeError",
    # Transports
    "RetryTransport",
    "RiotAuthTransport",
    "RIOT_TOKEN_HEADER",
    # Factory
    "create_riot_api_client",
    "create_transport",
]
