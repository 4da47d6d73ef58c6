"""Periodic driver that advances every sensor and dispatches its reading."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from models.records import Reading, SensorProfile, SensorState
from services.generator import ConfigurationError, ReadingGenerator, build_default_generator
from services.profiles import load_profiles
from services.sinks import Sink
from settings import get_settings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickReport:
    tick: int
    delivered: int
    dropped: int


class SimulationClock:
    """Owns per-sensor state and drives one tick per interval.

    The first tick runs as soon as :meth:`run` starts. A stop request is
    honoured between ticks; the tick in progress always finishes.
    """

    def __init__(
        self,
        profiles: Iterable[SensorProfile],
        sink: Sink,
        generator: ReadingGenerator,
        interval: Optional[float] = None,
        dispatch_timeout: Optional[float] = None,
        workers: int = 2,
    ) -> None:
        self.profiles = tuple(profiles)
        ids = [profile.id for profile in self.profiles]
        if len(set(ids)) != len(ids):
            raise ConfigurationError("Sensor profile ids must be unique.")

        self.sink = sink
        self.generator = generator
        self.interval = interval if interval is not None else generator.config.tick_seconds
        self.dispatch_timeout = (
            dispatch_timeout if dispatch_timeout is not None else generator.config.sink_timeout
        )
        if self.interval <= 0 or self.dispatch_timeout <= 0:
            raise ConfigurationError("Tick interval and dispatch timeout must be positive.")

        self.states: Dict[str, SensorState] = {
            profile.id: SensorState.at_base(profile) for profile in self.profiles
        }
        self.executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="telemetry-dispatch"
        )
        self.tick_count = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> TickReport:
        """Generate and dispatch one reading for every profile, in order."""
        self.tick_count += 1
        delivered = 0
        dropped = 0
        for profile in self.profiles:
            reading = self.generator.generate(profile, self.states[profile.id])
            if self._dispatch(reading):
                delivered += 1
            else:
                dropped += 1

        report = TickReport(tick=self.tick_count, delivered=delivered, dropped=dropped)
        logger.debug(
            "Tick complete",
            extra={"tick": report.tick, "delivered": delivered, "dropped": dropped},
        )
        return report

    def run(
        self,
        stop_event: Optional[threading.Event] = None,
        max_ticks: Optional[int] = None,
        on_tick: Optional[Callable[[TickReport], None]] = None,
    ) -> None:
        """Tick until ``stop_event`` is set or ``max_ticks`` ticks have run.

        A caller-supplied event replaces the clock's own, so :meth:`stop` and
        :meth:`shutdown` end this loop as well.
        """
        if stop_event is not None:
            self._stop_event = stop_event
        event = self._stop_event
        logger.info(
            "Simulation started",
            extra={"interval": self.interval, "sensor_count": len(self.profiles)},
        )
        completed = 0
        while not event.is_set():
            report = self.tick()
            completed += 1
            if on_tick is not None:
                on_tick(report)
            if max_ticks is not None and completed >= max_ticks:
                break
            if event.wait(self.interval):
                break
        logger.info("Simulation stopped", extra={"tick": self.tick_count})

    def start(self) -> threading.Thread:
        """Run the loop on a background daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run, args=(self._stop_event,), name="simulation-clock", daemon=True
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def shutdown(self) -> None:
        """Stop ticking and release the dispatch pool without waiting on it.

        Queued dispatches are cancelled. A sink call that is already running
        cannot be interrupted, and the interpreter joins pool workers at exit,
        so a sink that never returns delays process exit. Sinks are expected
        to bound their own calls, as ``HttpSink`` does with its client timeout.
        """
        self.stop()
        self.executor.shutdown(wait=False, cancel_futures=True)

    def _dispatch(self, reading: Reading) -> bool:
        future = self.executor.submit(self.sink.append, reading)
        try:
            accepted = future.result(timeout=self.dispatch_timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.warning(
                "Dropping reading after sink timeout",
                extra={"sensor_id": reading.sensor_id, "reason": "timeout"},
            )
            return False
        except Exception as exc:  # noqa: BLE001 - one sensor's failure must not end the tick
            logger.warning(
                "Dropping reading after sink failure",
                extra={"sensor_id": reading.sensor_id, "reason": repr(exc)},
            )
            return False

        if accepted is False:
            logger.warning(
                "Dropping reading rejected by sink",
                extra={"sensor_id": reading.sensor_id, "reason": "rejected"},
            )
            return False
        return True


def build_default_clock(sink: Sink) -> SimulationClock:
    """Factory that wires the clock with configured profiles and generator."""
    settings = get_settings()
    profiles = load_profiles(settings.profiles_path)
    return SimulationClock(profiles=profiles, sink=sink, generator=build_default_generator())
