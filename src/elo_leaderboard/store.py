"""JSON persistence for the leaderboard.

The store is the only place that touches the leaderboard file. Loading is
forgiving (a missing or corrupt file starts a fresh leaderboard); saving is
strict (a failed write raises, since the update is not durable until it is
on disk).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from .exceptions import StorePersistenceError
from .models import Leaderboard, utcnow

logger = logging.getLogger(__name__)


class LeaderboardStore:
    """Loads and saves a Leaderboard as JSON.

    Example:
        ```python
        store = LeaderboardStore("leaderboard.json")
        leaderboard = store.load()
        ...
        store.save(leaderboard)
        ```
    """

    def __init__(self, path: str | Path):
        """Initialize the store.

        Args:
            path: Location of the leaderboard JSON file.
        """
        self.path = Path(path)

    def load(self) -> Leaderboard:
        """Load the leaderboard, or a fresh one if none can be read.

        Returns:
            The persisted Leaderboard, or an empty Leaderboard when the file
            is missing, unreadable, or does not match the expected schema.
        """
        if not self.path.exists():
            logger.info(f"No leaderboard at {self.path}, creating new leaderboard")
            return Leaderboard()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return Leaderboard.model_validate(data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Could not read leaderboard at {self.path}, creating new leaderboard: {e}")
            return Leaderboard()

    def save(self, leaderboard: Leaderboard, now: datetime | None = None) -> None:
        """Write the leaderboard, stamping its last-updated time.

        The file is written to a temporary sibling and moved into place, so
        readers never see a partial file.

        Args:
            leaderboard: The leaderboard to persist.
            now: Timestamp to record (defaults to the current UTC time).

        Raises:
            StorePersistenceError: If the file cannot be written.
        """
        leaderboard.last_updated = now or utcnow()
        payload = json.dumps(leaderboard.to_json_dict(), indent=2, ensure_ascii=False)

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                f.write(payload)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorePersistenceError(str(e), path=str(self.path)) from e

        logger.debug(f"Saved leaderboard to {self.path}")
