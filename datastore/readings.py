from __future__ import annotations
import json
import logging
from collections import deque
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Deque, List, Optional

from pydantic import ValidationError

from app.schemas import ReadingPayload
from models.records import Reading
from settings import get_settings


logger = logging.getLogger(__name__)


def _check_limit(limit: int) -> None:
    if limit <= 0:
        raise ValueError("limit must be a positive integer.")


class ReadingStore:
    """Append-only telemetry log backing both the sink and the source side."""

    def __init__(
        self,
        persistence_path: Optional[Path] = None,
        max_readings: Optional[int] = None,
    ) -> None:
        self._readings: Deque[Reading] = deque(maxlen=max_readings)
        self.persistence_path = persistence_path
        self.max_readings = max_readings
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def append(self, reading: Reading) -> bool:
        with self._lock:
            self._readings.append(reading)
            self._persist()
        return True

    def fetch_recent(self, limit: int) -> List[Reading]:
        """Return up to ``limit`` readings, newest timestamp first."""
        _check_limit(limit)
        with self._lock:
            snapshot = list(self._readings)
        return self._newest_first(snapshot)[:limit]

    def fetch_for_sensor(self, sensor_id: str, limit: int) -> List[Reading]:
        _check_limit(limit)
        with self._lock:
            snapshot = [reading for reading in self._readings if reading.sensor_id == sensor_id]
        return self._newest_first(snapshot)[:limit]

    def __len__(self) -> int:
        with self._lock:
            return len(self._readings)

    @staticmethod
    def _newest_first(readings: List[Reading]) -> List[Reading]:
        return sorted(readings, key=lambda reading: reading.timestamp, reverse=True)

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [
            ReadingPayload.from_reading(reading).model_dump(mode="json", by_alias=True)
            for reading in self._readings
        ]
        self.persistence_path.write_text(json.dumps(payload, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.warning(
                "Ignoring unreadable reading store file %s", self.persistence_path
            )
            data = []

        if not isinstance(data, list):
            logger.warning(
                "Ignoring reading store file %s without a list of readings",
                self.persistence_path,
            )
            return

        for index, payload in enumerate(data):
            try:
                reading = ReadingPayload.model_validate(payload).to_reading()
            except (ValidationError, TypeError) as exc:
                logger.warning(
                    "Skipping malformed stored reading #%d in %s",
                    index,
                    self.persistence_path,
                    extra={"reason": type(exc).__name__},
                )
                continue
            self._readings.append(reading)


@lru_cache
def build_default_store(path: Optional[str] = None) -> ReadingStore:
    settings = get_settings()
    store_path = settings.store_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return ReadingStore(persistence_path=persistence, max_readings=settings.store_max_readings)
