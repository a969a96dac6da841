"""Output store for raw match records.

The store is also the deduplication index: a record that exists was fetched
and written completely, so the collector never fetches it again.
"""

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

import structlog

from lol_match_collector.core.entities import MatchID, MatchRecord

logger = structlog.get_logger()


class StorageError(Exception):
    """Failure to check or write the output store."""

    pass


class MatchStore(ABC):
    """Durable mapping from match ID to raw match record."""

    @abstractmethod
    def exists(self, match_id: MatchID) -> bool:
        """Check whether a complete record is stored for the match.

        Raises:
            StorageError: If the store cannot be probed
        """

    @abstractmethod
    def put(self, match_id: MatchID, record: MatchRecord) -> None:
        """Store a record; it must not be visible before it is complete.

        Raises:
            StorageError: If the record cannot be written
        """


class FileMatchStore(MatchStore):
    """One ``<match_id>.json`` file per match inside ``output_dir``.

    Writes go to a hidden temp file in the same directory which is fsynced and
    then renamed over the final name, so a crash mid-write never leaves a
    ``.json`` file behind.
    """

    SUFFIX = ".json"

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def path_for(self, match_id: MatchID) -> Path:
        """Get the file path of a match, rejecting IDs that would leave the directory."""
        if (
            not match_id
            or match_id in (".", "..")
            or "/" in match_id
            or "\\" in match_id
            or "\x00" in match_id
        ):
            raise StorageError(f"Invalid match id for file storage: {match_id!r}")
        try:
            os.fsencode(match_id)
        except UnicodeError as e:
            raise StorageError(f"Invalid match id for file storage: {match_id!r}") from e
        return self.output_dir / f"{match_id}{self.SUFFIX}"

    def exists(self, match_id: MatchID) -> bool:
        path = self.path_for(match_id)
        try:
            path.stat()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Cannot check {path}: {e}") from e
        return True

    def put(self, match_id: MatchID, record: MatchRecord) -> None:
        path = self.path_for(match_id)
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{match_id}.", suffix=".tmp", dir=self.output_dir
            )
        except OSError as e:
            raise StorageError(f"Cannot create temp file for {path}: {e}") from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(record)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException as e:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            if isinstance(e, OSError):
                raise StorageError(f"Cannot write {path}: {e}") from e
            raise

        logger.debug("Stored match", match_id=match_id, path=str(path), size=len(record))
