#!/usr/bin/env python3
"""
Match Collector - Main entry point

Crawls a ranked ladder page by page and stores the raw match history of every
listed player as one JSON file per match. Matches already on disk are never
fetched again, so an interrupted run can simply be started over.
"""
import argparse
import asyncio
import logging
import os
import signal
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import structlog
from decouple import UndefinedValueError

from lol_match_collector.adapters.riot_api.factory import create_riot_api_client
from lol_match_collector.adapters.storage import FileMatchStore
from lol_match_collector.application.collector import PageCrawler
from lol_match_collector.config import Config
from lol_match_collector.core.exceptions import CollectionError


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def configure_logging(config: Config) -> None:
    """Set up stdlib logging and structlog from configuration."""
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Set httpx and httpcore loggers to WARNING to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    if config.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.log_level)
        ),
        cache_logger_on_first_use=True,
    )


def parse_start_time(value: str) -> datetime:
    """Parse ``--start-time`` as unix seconds or an ISO 8601 timestamp (UTC if naive)."""
    if value.isdigit():
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid start time: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Collect ranked ladder match history from the Riot Games API"
    )
    parser.add_argument(
        "token",
        nargs="?",
        help="Riot API key (defaults to RIOT_API_KEY)",
    )
    parser.add_argument(
        "--output-dir",
        help="Directory receiving one <match id>.json file per match (defaults to OUTPUT_DIR)",
    )
    parser.add_argument(
        "--start-time",
        type=parse_start_time,
        help="Only collect matches played after this time (unix seconds or ISO 8601)",
    )
    parser.add_argument(
        "--lookback-days",
        type=int,
        help="Only collect matches from the last N days (defaults to MATCH_LOOKBACK_DAYS)",
    )
    return parser


async def main(config: Config) -> int:
    """Run one collection and return the process exit status.

    SIGINT and SIGTERM cancel the run; the request in flight is abandoned and
    nothing else is attempted.
    """
    try:
        Path(config.output_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Cannot create output directory {config.output_dir}: {e}")
        return EXIT_FAILURE

    store = FileMatchStore(config.output_dir)
    now = datetime.now(timezone.utc)

    logger.info(
        f"Starting match collector (output_dir={config.output_dir}, "
        f"start_time={config.get_match_start_time(now).isoformat()})"
    )

    async with create_riot_api_client(config) as riot_api:
        crawler = PageCrawler.from_config(config, riot_api, store, now=now)
        task = asyncio.create_task(crawler.run())

        loop = asyncio.get_running_loop()
        signals = (signal.SIGINT, signal.SIGTERM)
        for sig in signals:
            loop.add_signal_handler(sig, task.cancel)

        try:
            summary = await task
        except asyncio.CancelledError:
            logger.warning("Collection cancelled by signal")
            return EXIT_CANCELLED
        except CollectionError as e:
            logger.error(f"Collection failed: {e}")
            return EXIT_FAILURE
        finally:
            for sig in signals:
                loop.remove_signal_handler(sig)

    logger.info(
        f"Done: {summary.matches_fetched} matches stored, "
        f"{summary.matches_skipped} skipped, {summary.entries} players, {summary.pages} pages"
    )
    return EXIT_OK


def load_config(args: argparse.Namespace) -> Config:
    """Build the configuration from the environment plus command line overrides."""
    if args.token:
        os.environ["RIOT_API_KEY"] = args.token

    config = Config.from_env()

    if args.output_dir:
        config.output_dir = args.output_dir
    if args.lookback_days is not None:
        config.match_lookback_days = args.lookback_days
    if args.start_time is not None:
        config.match_start_time = args.start_time
    return config


def cli(argv: Optional[List[str]] = None) -> None:
    """Console script entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except UndefinedValueError as e:
        parser.error(f"missing configuration: {e}")
    except ValueError as e:
        parser.error(f"invalid configuration: {e}")

    configure_logging(config)
    sys.exit(asyncio.run(main(config)))


if __name__ == "__main__":
    cli()
