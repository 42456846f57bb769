"""
File-based snapshot storage for the whole database state.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_KEY = "rdbms_database"


class Storage:
    """Keeps one JSON snapshot of the database under a fixed key in a directory."""

    def __init__(self, data_dir: str = "data", key: str = DEFAULT_KEY):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.key = key

    @property
    def path(self) -> Path:
        return self.data_dir / f"{self.key}.json"

    def save(self, snapshot: Dict[str, Any]) -> None:
        """Write the snapshot atomically, replacing any previous one."""
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{self.key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(snapshot, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Read the snapshot.

        Returns None when there is no snapshot, or when it cannot be read or
        decoded (logged as a warning; the caller starts empty).
        """
        if not self.path.exists():
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable snapshot %s: %s", self.path, e)
            return None

        if not isinstance(data, dict):
            logger.warning("Ignoring snapshot %s: expected an object", self.path)
            return None
        return data

    def clear(self) -> None:
        """Remove the snapshot, if any."""
        self.path.unlink(missing_ok=True)
