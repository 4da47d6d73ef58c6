from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

import typer

from models.records import Reading
from services.simulation import TickReport


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _reading_line(reading: Reading) -> str:
    motion = "yes" if reading.motion_detected else "no"
    return (
        f"{reading.latitude:.6f}, {reading.longitude:.6f} | "
        f"{reading.temperature}°C | motion={motion} | "
        f"battery={reading.battery_level}% | {reading.timestamp.isoformat()}"
    )


def render_positions(latest: Mapping[str, Reading]) -> None:
    echo_heading("Current Positions")
    if not latest:
        typer.echo("No readings available.")
        return
    for sensor_id in sorted(latest):
        typer.echo(f"  - {sensor_id}: {_reading_line(latest[sensor_id])}")


def render_history(sensor_id: str, readings: Sequence[Reading]) -> None:
    echo_heading(f"History for {sensor_id}")
    if not readings:
        typer.echo("No readings recorded.")
        return
    for reading in readings:
        typer.echo(f"  - {_reading_line(reading)}")


def render_tick(report: TickReport) -> None:
    color = typer.colors.GREEN if not report.dropped else typer.colors.YELLOW
    typer.secho(
        f"tick {report.tick}: delivered={report.delivered} dropped={report.dropped}",
        fg=color,
    )
