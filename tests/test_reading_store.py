"""Unit tests for the in-memory reading store."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timedelta, timezone

import pytest

from datastore.readings import ReadingStore
from models.records import Reading

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _reading(sensor_id: str, seconds: int) -> Reading:
    return Reading(
        sensor_id=sensor_id,
        latitude=-1.292100,
        longitude=36.821900,
        temperature=27.5,
        motion_detected=True,
        battery_level=88,
        timestamp=T0 + timedelta(seconds=seconds),
    )


def test_fetch_recent_orders_newest_first_and_applies_limit() -> None:
    store = ReadingStore()
    for seconds, sensor_id in [(3, "a"), (1, "b"), (5, "c"), (2, "a")]:
        assert store.append(_reading(sensor_id, seconds)) is True

    recent = store.fetch_recent(3)

    assert [reading.timestamp for reading in recent] == [
        T0 + timedelta(seconds=5),
        T0 + timedelta(seconds=3),
        T0 + timedelta(seconds=2),
    ]


def test_fetch_for_sensor_filters_by_id() -> None:
    store = ReadingStore()
    for seconds in range(5):
        store.append(_reading("SENSOR-001", seconds))
        store.append(_reading("SENSOR-002", seconds))

    history = store.fetch_for_sensor("SENSOR-002", 2)

    assert [reading.sensor_id for reading in history] == ["SENSOR-002", "SENSOR-002"]
    assert history[0].timestamp == T0 + timedelta(seconds=4)
    assert store.fetch_for_sensor("SENSOR-404", 5) == []


@pytest.mark.parametrize("limit", [0, -3])
def test_non_positive_limit_is_rejected(limit: int) -> None:
    store = ReadingStore()

    with pytest.raises(ValueError):
        store.fetch_recent(limit)


def test_retention_cap_drops_oldest_appended() -> None:
    store = ReadingStore(max_readings=3)
    for seconds in range(5):
        store.append(_reading("SENSOR-001", seconds))

    assert len(store) == 3
    assert store.fetch_recent(10)[-1].timestamp == T0 + timedelta(seconds=2)


def test_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "nested" / "readings.json"
    store = ReadingStore(persistence_path=path)
    original = _reading("SENSOR-001", 1)

    store.append(original)

    payload = json.loads(path.read_text())
    assert payload[0]["sensorId"] == "SENSOR-001"
    assert payload[0]["motionDetected"] is True
    assert payload[0]["batteryLevel"] == 88

    reloaded = ReadingStore(persistence_path=path)
    assert reloaded.fetch_recent(1) == [original]


def test_corrupt_file_is_ignored(tmp_path) -> None:
    path = tmp_path / "readings.json"
    path.write_text("{not json")

    store = ReadingStore(persistence_path=path)

    assert len(store) == 0


@pytest.mark.parametrize("content", ['[{"foo": 1}]', "null", '["x"]', '{"sensorId": "a"}'])
def test_wrong_shaped_file_is_ignored(tmp_path, content: str) -> None:
    path = tmp_path / "readings.json"
    path.write_text(content)

    store = ReadingStore(persistence_path=path)

    assert len(store) == 0


def test_malformed_entries_are_skipped_and_valid_ones_kept(tmp_path) -> None:
    path = tmp_path / "readings.json"
    valid = ReadingStore(persistence_path=path)
    valid.append(_reading("SENSOR-001", 1))
    entries = json.loads(path.read_text())
    entries.insert(0, {"latitude": 0.0})
    entries.append(17)
    path.write_text(json.dumps(entries))

    reloaded = ReadingStore(persistence_path=path)

    assert reloaded.fetch_recent(5) == [_reading("SENSOR-001", 1)]


def test_concurrent_appends_are_all_recorded() -> None:
    store = ReadingStore()

    def writer(sensor_id: str) -> None:
        for seconds in range(200):
            store.append(_reading(sensor_id, seconds))

    threads = [threading.Thread(target=writer, args=(f"SENSOR-{index}",)) for index in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(store) == 800
