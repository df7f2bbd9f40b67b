# playback.py
import csv
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .constants import CSV_FIELDS, CSV_TIMESTAMP_COLUMN
from .utils import to_float, utc_now

logger = logging.getLogger(__name__)

EXPECTED_COLUMNS = ", ".join([CSV_TIMESTAMP_COLUMN, *CSV_FIELDS.values()])


@dataclass(frozen=True)
class PlaybackRecord:
    """One recorded row of solar data, replayed in order."""
    id: int
    timestamp: str
    power: float
    current: float
    voltage: float
    irradiance: float
    temperature: float

    @classmethod
    def from_row(cls, index: int, row: Dict[str, str], default_timestamp: str) -> "PlaybackRecord":
        values = {attr: to_float(row.get(column)) for attr, column in CSV_FIELDS.items()}
        return cls(
            id=index + 1,
            timestamp=(row.get(CSV_TIMESTAMP_COLUMN) or "").strip() or default_timestamp,
            **values,
        )

    def to_dict(self):
        # Serialized with the CSV column names the dashboard reads
        out = {"id": self.id, "timestamp": self.timestamp}
        for attr, column in CSV_FIELDS.items():
            out[column] = getattr(self, attr)
        return out


class PlaybackSource:
    """
    A finite, ordered sequence of recorded readings with a wrapping cursor.
    Loaded once; only the cursor moves afterwards.
    """

    def __init__(self, records: Sequence[PlaybackRecord] = ()):
        self._records: List[PlaybackRecord] = list(records)
        self.cursor = 0
        # 1-based position of the last record handed out, 0 before the first
        self.position = 0

    @classmethod
    def load(cls, path: str) -> "PlaybackSource":
        """
        Parse a playback CSV. Never raises: a missing, unreadable or empty
        file gives an empty source so panel simulation keeps running.
        """
        if not os.path.exists(path):
            logger.warning(f"Playback file {path} not found, playback disabled")
            logger.warning(f"Expected columns: {EXPECTED_COLUMNS}")
            return cls()

        loaded_at = utc_now().isoformat()
        try:
            with open(path, newline="", encoding="utf-8-sig") as f:
                records = [
                    PlaybackRecord.from_row(i, row, loaded_at)
                    for i, row in enumerate(csv.DictReader(f))
                ]
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.error(f"Error reading playback file {path}: {e}")
            logger.warning(f"Make sure the CSV has columns: {EXPECTED_COLUMNS}")
            return cls()

        if not records:
            logger.warning(f"Playback file {path} has no data rows")
            return cls()

        logger.info(f"Loaded {len(records)} data points from {path}")
        logger.info(f"Sample data point: {records[0].to_dict()}")
        return cls(records)

    @property
    def has_data(self) -> bool:
        return bool(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def next(self) -> Optional[dict]:
        """
        Return the record under the cursor, annotated with its 1-based
        position (``currentIndex``) and ``totalPoints``, then advance the
        cursor, wrapping at the end. Returns None when there is no data.
        """
        if not self._records:
            return None
        position = self.cursor
        record = self._records[position]
        self.cursor = (position + 1) % len(self._records)
        self.position = position + 1
        if self.cursor == 0:
            logger.info("Reached end of playback data, looping back to start")
        return {
            **record.to_dict(),
            "currentIndex": position + 1,
            "totalPoints": len(self._records),
        }

    def sample(self, n: int = 5) -> List[dict]:
        return [r.to_dict() for r in self._records[:n]]
