from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import List

import pytest
from typer.testing import CliRunner

from cli.app import app
from models.records import Reading
from settings import get_settings


def _reading(sensor_id: str, minute: int, latitude: float) -> Reading:
    return Reading(
        sensor_id=sensor_id,
        latitude=latitude,
        longitude=36.8219,
        temperature=24.5,
        motion_detected=minute % 2 == 0,
        battery_level=93,
        timestamp=datetime(2024, 1, 1, 0, minute, tzinfo=timezone.utc),
    )


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.recent: List[Reading] = [
            _reading("SENSOR-001", 1, -1.100000),
            _reading("SENSOR-001", 4, -1.400000),
            _reading("SENSOR-002", 2, -1.200000),
        ]
        self.fetch_calls: List[int] = []
        self.history_calls: List[tuple[str, int]] = []
        self.closed = False

    def fetch_recent(self, limit: int) -> List[Reading]:
        self.fetch_calls.append(limit)
        return self.recent

    def sensor_history(self, sensor_id: str, limit: int) -> List[Reading]:
        self.history_calls.append((sensor_id, limit))
        return [reading for reading in self.recent if reading.sensor_id == sensor_id]

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _install_stub(monkeypatch) -> StubClient:
    stub = StubClient(config=None)

    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return stub


def test_positions_shows_latest_reading_per_sensor(monkeypatch, runner: CliRunner) -> None:
    stub = _install_stub(monkeypatch)

    result = runner.invoke(app, ["positions", "--limit", "25"])

    assert result.exit_code == 0
    assert "Current Positions" in result.stdout
    assert "SENSOR-001: -1.400000" in result.stdout
    assert "-1.100000" not in result.stdout
    assert "SENSOR-002: -1.200000" in result.stdout
    assert stub.fetch_calls == [25]
    assert stub.closed is True


def test_positions_uses_configured_window(monkeypatch, runner: CliRunner) -> None:
    stub = _install_stub(monkeypatch)
    monkeypatch.setenv("CLI_READING_WINDOW", "80")

    result = runner.invoke(app, ["positions"])

    assert result.exit_code == 0
    assert stub.fetch_calls == [80]


def test_history_command(monkeypatch, runner: CliRunner) -> None:
    stub = _install_stub(monkeypatch)

    result = runner.invoke(app, ["history", "SENSOR-002", "-n", "5"])

    assert result.exit_code == 0
    assert "History for SENSOR-002" in result.stdout
    assert "battery=93%" in result.stdout
    assert stub.history_calls == [("SENSOR-002", 5)]


def test_simulate_writes_readings_to_store(monkeypatch, runner: CliRunner, tmp_path) -> None:
    _install_stub(monkeypatch)
    monkeypatch.delenv("SENSOR_PROFILES_PATH", raising=False)
    get_settings.cache_clear()
    store_path = tmp_path / "readings.json"

    try:
        result = runner.invoke(
            app,
            ["simulate", "--store", str(store_path), "--ticks", "2", "--interval", "0.01", "--seed", "3"],
        )
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 0, result.output
    assert "tick 1: delivered=5 dropped=0" in result.stdout
    assert "tick 2: delivered=5 dropped=0" in result.stdout
    payload = json.loads(store_path.read_text())
    assert len(payload) == 10
    assert {item["sensorId"] for item in payload} == {
        "SENSOR-001",
        "SENSOR-002",
        "SENSOR-003",
        "SENSOR-004",
        "SENSOR-005",
    }


def test_simulate_rejects_invalid_interval(monkeypatch, runner: CliRunner, tmp_path) -> None:
    _install_stub(monkeypatch)
    get_settings.cache_clear()

    try:
        result = runner.invoke(
            app,
            ["simulate", "--store", str(tmp_path / "r.json"), "--ticks", "1", "--interval", "0"],
        )
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 2
    assert not (tmp_path / "r.json").exists()


def test_simulate_interrupt_with_tick_limit_stops_cleanly(
    monkeypatch, runner: CliRunner, tmp_path
) -> None:
    _install_stub(monkeypatch)
    monkeypatch.delenv("SENSOR_PROFILES_PATH", raising=False)
    get_settings.cache_clear()
    store_path = tmp_path / "readings.json"

    def interrupt(report) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr("cli.app.render_tick", interrupt)

    try:
        result = runner.invoke(
            app,
            ["simulate", "--store", str(store_path), "--ticks", "3", "--interval", "0.01"],
        )
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 0, result.output
    assert "Stopping simulator." in result.stdout
    assert len(json.loads(store_path.read_text())) == 5
