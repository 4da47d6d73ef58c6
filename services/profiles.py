"""Static sensor profiles and loading them from JSON configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Sequence

from models.records import MovementClass, SensorProfile
from services.generator import ConfigurationError


DEFAULT_PROFILES: tuple[SensorProfile, ...] = (
    SensorProfile("SENSOR-001", "Elephant Tracker Alpha", (-1.2921, 36.8219), MovementClass.slow),
    SensorProfile("SENSOR-002", "Cheetah Tracker Beta", (-1.3521, 36.7819), MovementClass.fast),
    SensorProfile("SENSOR-003", "Rhino Tracker Gamma", (-1.2321, 36.8619), MovementClass.medium),
    SensorProfile("SENSOR-004", "Lion Pride Tracker Delta", (-1.3121, 36.8019), MovementClass.medium),
    SensorProfile("SENSOR-005", "Gorilla Tracker Epsilon", (-1.2721, 36.8419), MovementClass.slow),
)


def _parse_profile(index: int, entry: Any) -> SensorProfile:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Sensor profile #{index} must be an object.")

    sensor_id = str(entry.get("id") or "").strip()
    if not sensor_id:
        raise ConfigurationError(f"Sensor profile #{index} is missing an id.")

    location = entry.get("baseLocation") or {}
    try:
        latitude = float(location["lat"])
        longitude = float(location["lng"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Sensor profile {sensor_id!r} has an invalid baseLocation."
        ) from exc

    raw_class = entry.get("movementClass", MovementClass.medium.value)
    try:
        movement_class = MovementClass(raw_class)
    except ValueError as exc:
        raise ConfigurationError(
            f"Sensor profile {sensor_id!r} has unknown movementClass {raw_class!r}."
        ) from exc

    return SensorProfile(
        id=sensor_id,
        name=str(entry.get("name") or sensor_id),
        base_location=(latitude, longitude),
        movement_class=movement_class,
    )


def parse_profiles(entries: Sequence[Any]) -> List[SensorProfile]:
    profiles = [_parse_profile(index, entry) for index, entry in enumerate(entries, start=1)]
    seen: set[str] = set()
    for profile in profiles:
        if profile.id in seen:
            raise ConfigurationError(f"Duplicate sensor profile id {profile.id!r}.")
        seen.add(profile.id)
    return profiles


def load_profiles(path: str | Path | None = None) -> List[SensorProfile]:
    """Read profiles from a JSON list, falling back to the built-in trackers."""
    if path is None:
        return list(DEFAULT_PROFILES)

    source = Path(path)
    try:
        data = json.loads(source.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Unable to read sensor profiles from {source}: {exc}") from exc

    if not isinstance(data, list) or not data:
        raise ConfigurationError(f"Sensor profiles file {source} must hold a non-empty list.")
    return parse_profiles(data)
