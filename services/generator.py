"""Synthetic telemetry generation for tracked wildlife sensors."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Dict, Optional

from models.records import MovementClass, Reading, SensorProfile, SensorState
from settings import Settings, get_settings


class ConfigurationError(ValueError):
    """Raised at startup when simulation settings are unusable."""


def _default_steps() -> Dict[MovementClass, float]:
    return {
        MovementClass.slow: 0.001,
        MovementClass.medium: 0.002,
        MovementClass.fast: 0.005,
    }


@dataclass(frozen=True)
class SimulationConfig:
    """Tuning knobs for the generator and clock.

    Step sizes, radius and jitter are in degrees, not meters. ``jitter`` is the
    half-width of the window used when a sensor is reset back to its base.
    """

    tick_seconds: float = 5.0
    steps: Dict[MovementClass, float] = field(default_factory=_default_steps)
    geofence_radius: float = 0.1
    jitter: float = 0.025
    battery_floor: float = 50.0
    battery_decay_max: float = 0.1
    temperature_min: float = 20.0
    temperature_max: float = 35.0
    motion_probability: float = 0.7
    sink_timeout: float = 2.0

    def validate(self) -> "SimulationConfig":
        if self.tick_seconds <= 0:
            raise ConfigurationError("Tick interval must be positive.")
        for movement_class in MovementClass:
            step = self.steps.get(movement_class)
            if step is None or not step > 0:
                raise ConfigurationError(
                    f"Step size for movement class {movement_class.value!r} must be positive."
                )
        if not self.geofence_radius > 0:
            raise ConfigurationError("Geofence radius must be positive.")
        if self.jitter < 0:
            raise ConfigurationError("Reset jitter cannot be negative.")
        if not 0 <= self.battery_floor <= 100:
            raise ConfigurationError("Battery floor must lie between 0 and 100.")
        if self.battery_decay_max < 0:
            raise ConfigurationError("Battery decay cannot be negative.")
        if self.temperature_min > self.temperature_max:
            raise ConfigurationError("Temperature range is empty.")
        if not 0 <= self.motion_probability <= 1:
            raise ConfigurationError("Motion probability must lie between 0 and 1.")
        if not self.sink_timeout > 0:
            raise ConfigurationError("Sink timeout must be positive.")
        return self

    @classmethod
    def from_settings(cls, settings: Settings) -> "SimulationConfig":
        config = cls(
            tick_seconds=settings.tick_seconds,
            steps={
                MovementClass.slow: settings.step_slow,
                MovementClass.medium: settings.step_medium,
                MovementClass.fast: settings.step_fast,
            },
            geofence_radius=settings.geofence_radius,
            jitter=settings.jitter,
            battery_floor=settings.battery_floor,
            battery_decay_max=settings.battery_decay_max,
            temperature_min=settings.temperature_min,
            temperature_max=settings.temperature_max,
            motion_probability=settings.motion_probability,
            sink_timeout=settings.sink_timeout,
        )
        return config.validate()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_reading(
    profile: SensorProfile,
    state: SensorState,
    config: SimulationConfig,
    rng: random.Random,
    now: Callable[[], datetime] = _utcnow,
) -> Reading:
    """Advance ``state`` by one tick and return the resulting reading."""
    half_step = config.steps[profile.movement_class] / 2
    state.latitude += rng.uniform(-half_step, half_step)
    state.longitude += rng.uniform(-half_step, half_step)

    base_latitude, base_longitude = profile.base_location
    distance = math.hypot(state.latitude - base_latitude, state.longitude - base_longitude)
    if distance > config.geofence_radius:
        # Land near the anchor rather than on it.
        state.latitude = base_latitude + rng.uniform(-config.jitter, config.jitter)
        state.longitude = base_longitude + rng.uniform(-config.jitter, config.jitter)

    drained = state.battery_level - rng.uniform(0, config.battery_decay_max)
    state.battery_level = max(config.battery_floor, drained)

    temperature = rng.uniform(config.temperature_min, config.temperature_max)
    motion_detected = rng.random() < config.motion_probability

    return Reading(
        sensor_id=profile.id,
        latitude=round(state.latitude, 6),
        longitude=round(state.longitude, 6),
        temperature=round(temperature, 2),
        motion_detected=motion_detected,
        battery_level=int(round(state.battery_level)),
        timestamp=now(),
    )


class ReadingGenerator:
    """Binds a config, a random source and a clock to ``generate_reading``."""

    def __init__(
        self,
        config: SimulationConfig,
        rng: Optional[random.Random] = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config.validate()
        self.rng = rng if rng is not None else random.Random()
        self._now = now

    def generate(self, profile: SensorProfile, state: SensorState) -> Reading:
        return generate_reading(profile, state, self.config, self.rng, self._now)


@lru_cache
def build_default_generator() -> ReadingGenerator:
    settings = get_settings()
    config = SimulationConfig.from_settings(settings)
    return ReadingGenerator(config=config, rng=random.Random(settings.seed))
