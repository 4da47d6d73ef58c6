"""Reductions over windows of telemetry readings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable

from models.records import Reading


class LatestPositionAggregator:
    """Reduce readings to the most recent one per sensor.

    Input order is not assumed. On equal timestamps the reading seen first
    wins, so the result is deterministic for a given input order. Sensor ids
    are taken from the readings alone; no profile lookup happens here.
    """

    def aggregate(self, readings: Iterable[Reading]) -> Dict[str, Reading]:
        latest: Dict[str, Reading] = {}
        for reading in readings:
            current = latest.get(reading.sensor_id)
            if current is None or reading.timestamp > current.timestamp:
                latest[reading.sensor_id] = reading
        return latest


@dataclass
class TelemetrySummary:
    """Computed statistics for a window of readings."""

    reading_count: int = 0
    min_temperature: float | None = None
    max_temperature: float | None = None
    mean_temperature: float | None = None
    motion_events: int = 0
    per_sensor_count: Dict[str, int] = field(default_factory=dict)


class TelemetrySummarizer:
    """Temperature range and mean for a reading window, plus motion and per-tracker counts."""

    def summarize(self, readings: Iterable[Reading]) -> TelemetrySummary:
        summary = TelemetrySummary()
        total = 0.0

        for reading in readings:
            summary.reading_count += 1
            temperature = reading.temperature
            total += temperature

            if summary.min_temperature is None or temperature < summary.min_temperature:
                summary.min_temperature = temperature
            if summary.max_temperature is None or temperature > summary.max_temperature:
                summary.max_temperature = temperature
            if reading.motion_detected:
                summary.motion_events += 1

            summary.per_sensor_count[reading.sensor_id] = (
                summary.per_sensor_count.get(reading.sensor_id, 0) + 1
            )

        if summary.reading_count:
            summary.mean_temperature = total / summary.reading_count

        return summary
