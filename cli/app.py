from __future__ import annotations

import random
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_history, render_positions, render_tick
from datastore.readings import ReadingStore
from logging_config import configure_logging
from services.aggregator import LatestPositionAggregator
from services.generator import ConfigurationError, ReadingGenerator, SimulationConfig
from services.profiles import load_profiles
from services.simulation import SimulationClock
from services.sinks import HttpSink, Sink
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for running and inspecting the wildlife telemetry feed.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Telemetry API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds for API queries.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


def _build_simulation_config(interval: Optional[float]) -> SimulationConfig:
    config = SimulationConfig.from_settings(get_settings())
    if interval is not None:
        config = replace(config, tick_seconds=interval).validate()
    return config


@app.command("simulate")
def simulate_command(
    ctx: typer.Context,
    store: Optional[Path] = typer.Option(
        None,
        "--store",
        dir_okay=False,
        help="Append readings to this JSON file instead of posting them to the API.",
    ),
    ticks: Optional[int] = typer.Option(
        None,
        "--ticks",
        min=1,
        help="Stop after this many ticks (runs until interrupted when omitted).",
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Seconds between ticks (defaults to SIMULATION_TICK_SECONDS).",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Seed for a reproducible feed.",
    ),
) -> None:
    """Generate readings for every configured sensor on a fixed cadence."""
    state = _get_state(ctx)
    configure_logging()
    settings = get_settings()
    try:
        config = _build_simulation_config(interval)
        profiles = load_profiles(settings.profiles_path)
    except ConfigurationError as exc:
        typer.secho(f"Invalid simulation configuration: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc

    http_sink: Optional[HttpSink] = None
    sink: Sink
    if store is not None:
        sink = ReadingStore(persistence_path=store, max_readings=settings.store_max_readings)
        target = str(store)
    else:
        http_sink = HttpSink(state.config.base_url, timeout=config.sink_timeout)
        sink = http_sink
        target = state.config.base_url

    rng = random.Random(seed if seed is not None else settings.seed)
    clock = SimulationClock(profiles=profiles, sink=sink, generator=ReadingGenerator(config, rng))
    typer.echo(
        f"Simulating {len(profiles)} sensors every {clock.interval}s -> {target}"
    )
    try:
        clock.run(max_ticks=ticks, on_tick=render_tick)
    except KeyboardInterrupt:
        typer.echo("Stopping simulator.")
    finally:
        clock.shutdown()
        if http_sink is not None:
            http_sink.close()


@app.command("positions")
def positions_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Number of recent readings to aggregate.",
    ),
) -> None:
    """Show the current reading per sensor from the latest window."""
    state = _get_state(ctx)
    window = limit if limit is not None else state.config.window
    readings = state.client.fetch_recent(window)
    render_positions(LatestPositionAggregator().aggregate(readings))


@app.command("history")
def history_command(
    ctx: typer.Context,
    sensor_id: str = typer.Argument(..., help="Sensor identifier, e.g. SENSOR-001."),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Number of readings to show."),
) -> None:
    """List recent readings for a single sensor."""
    state = _get_state(ctx)
    render_history(sensor_id, state.client.sensor_history(sensor_id, limit))
