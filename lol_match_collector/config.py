"""Configuration management for the match collector."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from decouple import Choices
from decouple import config

from .core.enums import Division, LadderQueue, Platform, Tier


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class Config:
    """Configuration for the match collector."""

    # Required fields
    riot_api_key: str

    # Output configuration
    output_dir: str = "out"

    # Riot API configuration
    riot_platform: Platform = Platform.JP1
    riot_api_base_url: Optional[str] = None
    riot_api_timeout_seconds: int = 30

    # Ladder slice to crawl
    ladder_queue: LadderQueue = LadderQueue.RANKED_SOLO_5X5
    ladder_tier: Tier = Tier.SILVER
    ladder_division: Division = Division.I

    # Match listing
    match_queue_type: str = "ranked"
    match_count: int = 10
    match_lookback_days: int = 7
    match_start_time: Optional[datetime] = None

    # Retry transport
    retry_max_attempts: int = 4
    retry_wait_min_seconds: float = 1.0
    retry_wait_max_seconds: float = 30.0

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        # Helper function to simplify config calls
        def get_config(key: str, default=None, cast=None):
            if default is not None:
                if cast is not None:
                    return config(key, default=default, cast=cast)
                else:
                    return config(key, default=default)
            else:
                return config(key)

        platform_value = get_config(
            "RIOT_PLATFORM", "jp1", Choices([p.value for p in Platform])
        )

        tier = Tier(get_config("LADDER_TIER", "SILVER", Choices([t.value for t in Tier])))
        division = Division(
            get_config("LADDER_DIVISION", "I", Choices([d.value for d in Division]))
        )
        if tier.is_apex and division != Division.I:
            raise ValueError(f"{tier.value} only has division I, got {division.value}")

        return cls(
            # Required
            riot_api_key=get_config("RIOT_API_KEY"),
            # Output
            output_dir=get_config("OUTPUT_DIR", "out"),
            # Riot API
            riot_platform=Platform(platform_value),
            riot_api_base_url=config("RIOT_API_BASE_URL", default=None) or None,
            riot_api_timeout_seconds=get_config("RIOT_API_TIMEOUT_SECONDS", 30, int),
            # Ladder
            ladder_queue=LadderQueue(
                get_config("LADDER_QUEUE", "RANKED_SOLO_5x5", Choices([q.value for q in LadderQueue]))
            ),
            ladder_tier=tier,
            ladder_division=division,
            # Match listing
            match_queue_type=get_config("MATCH_QUEUE_TYPE", "ranked"),
            match_count=get_config("MATCH_COUNT", 10, int),
            match_lookback_days=get_config("MATCH_LOOKBACK_DAYS", 7, int),
            # Retry transport
            retry_max_attempts=get_config("RETRY_MAX_ATTEMPTS", 4, int),
            retry_wait_min_seconds=get_config("RETRY_WAIT_MIN_SECONDS", 1.0, float),
            retry_wait_max_seconds=get_config("RETRY_WAIT_MAX_SECONDS", 30.0, float),
            # Logging
            log_level=get_config("LOG_LEVEL", "INFO", Choices(LOG_LEVELS)),
            log_format=get_config("LOG_FORMAT", "text", Choices(["json", "text"])),
        )

    def get_match_start_time(self, now: Optional[datetime] = None) -> datetime:
        """Cutoff for match listing: the explicit start time, else now minus the lookback."""
        if self.match_start_time is not None:
            return self.match_start_time
        now = now or datetime.now(timezone.utc)
        return now - timedelta(days=self.match_lookback_days)
