"""httpx transports composed underneath the Riot API client.

``RiotAuthTransport`` attaches the API key to every outbound request and
``RetryTransport`` retries transient failures. Neither is visible to the
collection loop, which treats any failure that reaches it as fatal.
"""

import asyncio
from typing import Optional

import httpx
import structlog

logger = structlog.get_logger()

RIOT_TOKEN_HEADER = "X-Riot-Token"


class RiotAuthTransport(httpx.AsyncBaseTransport):
    """Sets the Riot API key header, then delegates to the wrapped transport."""

    def __init__(self, api_key: str, base: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.base = base or httpx.AsyncHTTPTransport()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        request.headers[RIOT_TOKEN_HEADER] = self.api_key
        return await self.base.handle_async_request(request)

    async def aclose(self) -> None:
        await self.base.aclose()


class RetryTransport(httpx.AsyncBaseTransport):
    """Retries connection failures, 429 and 5xx responses with exponential backoff.

    Once the retries are used up the last response is returned as is, so the
    caller still sees the status code and body of the final attempt. A
    transport error on the final attempt is re-raised.
    """

    def __init__(
        self,
        base: Optional[httpx.AsyncBaseTransport] = None,
        max_attempts: int = 4,
        wait_min: float = 1.0,
        wait_max: float = 30.0,
    ):
        """Initialize the retry transport.

        Args:
            base: Transport that actually sends the request
            max_attempts: Retries after the first attempt; 0 disables retrying
            wait_min: First backoff delay in seconds
            wait_max: Upper bound for any delay, Retry-After included
        """
        self.base = base or httpx.AsyncHTTPTransport()
        self.max_attempts = max_attempts
        self.wait_min = wait_min
        self.wait_max = wait_max

    @staticmethod
    def should_retry(response: httpx.Response) -> bool:
        """Check if a response status is worth another attempt."""
        status = response.status_code
        return status == 429 or (status >= 500 and status != 501)

    def backoff(self, attempt: int, response: Optional[httpx.Response] = None) -> float:
        """Delay before the retry following ``attempt`` (0-based)."""
        if response is not None and response.status_code in (429, 503):
            retry_after = response.headers.get("Retry-After", "")
            if retry_after.isdigit():
                return min(float(retry_after), self.wait_max)
        return min(self.wait_min * (2 ** attempt), self.wait_max)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            try:
                response = await self.base.handle_async_request(request)
            except httpx.UnsupportedProtocol:
                raise
            except httpx.TransportError as e:
                if attempt >= self.max_attempts:
                    raise
                wait = self.backoff(attempt)
                logger.warning(
                    "Request failed, retrying",
                    url=str(request.url),
                    attempt=attempt + 1,
                    wait=wait,
                    error=str(e),
                )
            else:
                if attempt >= self.max_attempts or not self.should_retry(response):
                    return response
                wait = self.backoff(attempt, response)
                logger.warning(
                    "Retryable status from Riot API",
                    url=str(request.url),
                    status_code=response.status_code,
                    attempt=attempt + 1,
                    wait=wait,
                )
                await response.aclose()

            await asyncio.sleep(wait)
            attempt += 1

    async def aclose(self) -> None:
        await self.base.aclose()
