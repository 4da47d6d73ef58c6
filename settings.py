from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_TICK_SECONDS_ENV = "SIMULATION_TICK_SECONDS"
_STEP_SLOW_ENV = "SIMULATION_STEP_SLOW"
_STEP_MEDIUM_ENV = "SIMULATION_STEP_MEDIUM"
_STEP_FAST_ENV = "SIMULATION_STEP_FAST"
_GEOFENCE_RADIUS_ENV = "SIMULATION_GEOFENCE_RADIUS"
_JITTER_ENV = "SIMULATION_JITTER"
_BATTERY_FLOOR_ENV = "SIMULATION_BATTERY_FLOOR"
_BATTERY_DECAY_ENV = "SIMULATION_BATTERY_DECAY_MAX"
_TEMPERATURE_MIN_ENV = "SIMULATION_TEMPERATURE_MIN"
_TEMPERATURE_MAX_ENV = "SIMULATION_TEMPERATURE_MAX"
_MOTION_PROBABILITY_ENV = "SIMULATION_MOTION_PROBABILITY"
_SEED_ENV = "SIMULATION_SEED"
_SINK_TIMEOUT_ENV = "SINK_TIMEOUT_SECONDS"
_PROFILES_PATH_ENV = "SENSOR_PROFILES_PATH"
_STORE_PATH_ENV = "READING_STORE_PATH"
_STORE_MAX_ENV = "READING_STORE_MAX"
_SIMULATOR_ENABLED_ENV = "SIMULATOR_ENABLED"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    tick_seconds: float
    step_slow: float
    step_medium: float
    step_fast: float
    geofence_radius: float
    jitter: float
    battery_floor: float
    battery_decay_max: float
    temperature_min: float
    temperature_max: float
    motion_probability: float
    seed: Optional[int]
    sink_timeout: float
    profiles_path: Optional[str]
    store_path: Optional[str]
    store_max_readings: int
    simulator_enabled: bool
    log_level: str


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return float(candidate)
    except ValueError:
        return default


def _read_positive_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_seed(default: Optional[int]) -> Optional[int]:
    value = os.getenv(_SEED_ENV)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _read_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in {"1", "true", "yes", "on"}:
        return True
    if candidate in {"0", "false", "no", "off"}:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        tick_seconds=_read_float_env(_TICK_SECONDS_ENV, 5.0),
        step_slow=_read_float_env(_STEP_SLOW_ENV, 0.001),
        step_medium=_read_float_env(_STEP_MEDIUM_ENV, 0.002),
        step_fast=_read_float_env(_STEP_FAST_ENV, 0.005),
        geofence_radius=_read_float_env(_GEOFENCE_RADIUS_ENV, 0.1),
        jitter=_read_float_env(_JITTER_ENV, 0.025),
        battery_floor=_read_float_env(_BATTERY_FLOOR_ENV, 50.0),
        battery_decay_max=_read_float_env(_BATTERY_DECAY_ENV, 0.1),
        temperature_min=_read_float_env(_TEMPERATURE_MIN_ENV, 20.0),
        temperature_max=_read_float_env(_TEMPERATURE_MAX_ENV, 35.0),
        motion_probability=_read_float_env(_MOTION_PROBABILITY_ENV, 0.7),
        seed=_read_seed(None),
        sink_timeout=_read_float_env(_SINK_TIMEOUT_ENV, 2.0),
        profiles_path=_read_optional_env(_PROFILES_PATH_ENV, None),
        store_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/readings.json"),
        store_max_readings=_read_positive_int_env(_STORE_MAX_ENV, 10000),
        simulator_enabled=_read_bool_env(_SIMULATOR_ENABLED_ENV, False),
        log_level=_read_log_level("INFO"),
    )
