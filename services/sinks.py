"""Destinations the simulation clock hands readings to."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

import httpx

from app.schemas import ReadingPayload
from models.records import Reading


class Sink(Protocol):
    """Accepts one reading per call; ``False`` or an exception means failure."""

    def append(self, reading: Reading) -> Optional[bool]:
        ...


class Source(Protocol):
    def fetch_recent(self, limit: int) -> Sequence[Reading]:
        ...


class HttpSink:
    """Posts readings to the telemetry API ingestion endpoint."""

    def __init__(self, base_url: str, timeout: float = 2.0, client: Optional[httpx.Client] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def append(self, reading: Reading) -> bool:
        payload = ReadingPayload.from_reading(reading).model_dump(mode="json", by_alias=True)
        response = self._client.post("/iot/data", json=payload)
        response.raise_for_status()
        return True

    def close(self) -> None:
        self._client.close()
