"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Tuple


class MovementClass(str, Enum):
    """How far a tracked animal can wander in one tick."""

    slow = "slow"
    medium = "medium"
    fast = "fast"


@dataclass(frozen=True, slots=True)
class SensorProfile:
    """Static identity of a tracked entity, loaded once at startup."""

    id: str
    name: str
    base_location: Tuple[float, float]
    movement_class: MovementClass

    @property
    def base_latitude(self) -> float:
        return self.base_location[0]

    @property
    def base_longitude(self) -> float:
        return self.base_location[1]


@dataclass(slots=True)
class SensorState:
    """Runtime position and battery for one sensor, evolved every tick."""

    latitude: float
    longitude: float
    battery_level: float = 100.0

    @classmethod
    def at_base(cls, profile: SensorProfile) -> "SensorState":
        return cls(latitude=profile.base_latitude, longitude=profile.base_longitude)


@dataclass(frozen=True, slots=True)
class Reading:
    """A single telemetry sample emitted by the simulator."""

    sensor_id: str
    latitude: float
    longitude: float
    temperature: float
    motion_detected: bool
    battery_level: int
    timestamp: datetime
