from __future__ import annotations

import json
import random
from datetime import datetime, timezone

import httpx
import pytest
import typer

from cli.client import ApiClient
from cli.config import CLIConfig
from models.records import MovementClass, Reading, SensorProfile
from services.generator import ReadingGenerator, SimulationConfig
from services.simulation import SimulationClock
from services.sinks import HttpSink


def _reading() -> Reading:
    return Reading(
        sensor_id="SENSOR-001",
        latitude=-1.292101,
        longitude=36.821899,
        temperature=31.25,
        motion_detected=False,
        battery_level=74,
        timestamp=datetime(2024, 1, 1, 6, 30, tzinfo=timezone.utc),
    )


def test_http_sink_posts_wire_payload() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(201, json={})

    client = httpx.Client(base_url="http://telemetry.test", transport=httpx.MockTransport(handler))
    sink = HttpSink("http://telemetry.test/", client=client)

    assert sink.append(_reading()) is True
    sink.close()

    assert captured[0].url.path == "/iot/data"
    body = json.loads(captured[0].content)
    assert body["sensorId"] == "SENSOR-001"
    assert body["motionDetected"] is False
    assert body["batteryLevel"] == 74
    assert body["latitude"] == -1.292101
    assert body["timestamp"].startswith("2024-01-01T06:30:00")


def test_http_sink_failure_is_dropped_by_clock() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"detail": "database offline"})

    client = httpx.Client(base_url="http://telemetry.test", transport=httpx.MockTransport(handler))
    sink = HttpSink("http://telemetry.test", client=client)
    profiles = [SensorProfile("SENSOR-001", "Alpha", (-1.2921, 36.8219), MovementClass.slow)]
    clock = SimulationClock(
        profiles=profiles,
        sink=sink,
        generator=ReadingGenerator(SimulationConfig(), rng=random.Random(1)),
    )

    try:
        report = clock.tick()
    finally:
        clock.shutdown()
        sink.close()

    assert report.delivered == 0
    assert report.dropped == 1


def _api_client(handler) -> ApiClient:
    client = ApiClient(CLIConfig(base_url="http://telemetry.test"))
    client._client = httpx.Client(  # type: ignore[attr-defined]
        base_url="http://telemetry.test", transport=httpx.MockTransport(handler)
    )
    return client


def test_api_client_parses_recent_readings() -> None:
    seen_params: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_params.append(request.url.params["limit"])
        return httpx.Response(
            200,
            json=[
                {
                    "sensorId": "SENSOR-003",
                    "latitude": -1.23,
                    "longitude": 36.86,
                    "temperature": 22.1,
                    "motionDetected": True,
                    "batteryLevel": 81,
                    "timestamp": "2024-01-01T00:00:05Z",
                }
            ],
        )

    client = _api_client(handler)
    try:
        readings = client.fetch_recent(10)
    finally:
        client.close()

    assert seen_params == ["10"]
    assert readings[0].sensor_id == "SENSOR-003"
    assert readings[0].timestamp == datetime(2024, 1, 1, 0, 0, 5, tzinfo=timezone.utc)


def test_api_client_exits_on_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "boom"})

    client = _api_client(handler)
    try:
        with pytest.raises(typer.Exit):
            client.sensor_history("SENSOR-001", 5)
    finally:
        client.close()
