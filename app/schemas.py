"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from models.records import Reading


class ReadingPayload(BaseModel):
    """Wire shape of one telemetry reading."""

    model_config = ConfigDict(populate_by_name=True)

    sensor_id: str = Field(..., alias="sensorId", min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    temperature: float
    motion_detected: bool = Field(
        default=False,
        validation_alias=AliasChoices("motionDetected", "motion", "motion_detected"),
        serialization_alias="motionDetected",
    )
    battery_level: int = Field(default=100, alias="batteryLevel", ge=0, le=100)
    timestamp: datetime

    @field_validator("sensor_id")
    @classmethod
    def _strip_sensor_id(cls, value: str) -> str:
        candidate = value.strip()
        if not candidate:
            raise ValueError("sensorId must not be blank")
        return candidate

    @field_validator("timestamp")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @classmethod
    def from_reading(cls, reading: Reading) -> "ReadingPayload":
        return cls(
            sensor_id=reading.sensor_id,
            latitude=reading.latitude,
            longitude=reading.longitude,
            temperature=reading.temperature,
            motion_detected=reading.motion_detected,
            battery_level=reading.battery_level,
            timestamp=reading.timestamp,
        )

    def to_reading(self) -> Reading:
        return Reading(
            sensor_id=self.sensor_id,
            latitude=round(self.latitude, 6),
            longitude=round(self.longitude, 6),
            temperature=self.temperature,
            motion_detected=self.motion_detected,
            battery_level=self.battery_level,
            timestamp=self.timestamp,
        )


class TelemetrySummaryPayload(BaseModel):
    """Window statistics over the most recent readings."""

    reading_count: int = Field(..., ge=0)
    min_temperature: Optional[float] = None
    max_temperature: Optional[float] = None
    mean_temperature: Optional[float] = None
    motion_events: int = Field(default=0, ge=0)
    per_sensor_count: Dict[str, int] = Field(default_factory=dict)
