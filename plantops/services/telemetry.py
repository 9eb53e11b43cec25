"""
Simulated RTU telemetry feed.

Holds one cached ``TelemetrySnapshot`` per device for a fixed set of device
ids. After ``start()``, one background task per device regenerates that
device's snapshot on its own jittered interval. Readers only pull the
cached snapshot; nothing a request does triggers regeneration.

Each refresh builds a brand-new frozen snapshot and swaps it into the
cache in one assignment, so readers always see a complete snapshot.
Devices refresh independently of each other.

``stop()`` sets the shutdown event, cancels every per-device task and
awaits them, leaving no scheduled work behind. It is safe to call twice.

CHANGELOG:
- 2026-10-10: Inject clock and RNG for deterministic tests (STORY-018)
- 2026-10-03: Initial creation (STORY-010)

TODO:
- None
"""

import asyncio
import contextlib
import logging
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from plantops.models.telemetry import TelemetrySnapshot, TelemetryStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeasurementRange:
    """Bounds and display precision for one simulated measurement.

    Attributes:
        low: Inclusive lower bound.
        high: Inclusive upper bound.
        decimals: Digits kept after rounding.
    """

    low: float
    high: float
    decimals: int


MEASUREMENT_CONFIG: dict[str, MeasurementRange] = {
    "temperature": MeasurementRange(low=0.0, high=50.0, decimals=1),
    "humidity": MeasurementRange(low=0.0, high=100.0, decimals=1),
    "power": MeasurementRange(low=0.0, high=1000.0, decimals=2),
    "voltage": MeasurementRange(low=220.0, high=230.0, decimals=1),
    "current": MeasurementRange(low=0.0, high=10.0, decimals=2),
}

STATUS_WEIGHTS: dict[TelemetryStatus, float] = {
    TelemetryStatus.ONLINE: 0.70,
    TelemetryStatus.WARNING: 0.15,
    TelemetryStatus.OFFLINE: 0.10,
    TelemetryStatus.ERROR: 0.05,
}

BATTERY_RANGE = (0, 100)
"""Inclusive battery percent range."""

SIGNAL_RANGE_DBM = (-129, -30)
"""Inclusive signal strength range in dBm."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def generate_snapshot(
    device_id: str,
    rng: random.Random,
    now: datetime,
) -> TelemetrySnapshot:
    """Draw a fresh snapshot for one device.

    Battery and signal are None exactly when the drawn status is offline.

    Args:
        device_id: Device the snapshot belongs to.
        rng: Random source.
        now: Timestamp stamped on the snapshot.

    Returns:
        TelemetrySnapshot: A complete, immutable snapshot.
    """
    status = rng.choices(list(STATUS_WEIGHTS), weights=list(STATUS_WEIGHTS.values()))[0]
    if status is TelemetryStatus.OFFLINE:
        battery = None
        signal = None
    else:
        battery = rng.randint(*BATTERY_RANGE)
        signal = rng.randint(*SIGNAL_RANGE_DBM)
    values = {
        name: round(rng.uniform(cfg.low, cfg.high), cfg.decimals)
        for name, cfg in MEASUREMENT_CONFIG.items()
    }
    return TelemetrySnapshot(
        id=device_id,
        timestamp=now,
        status=status,
        battery_level=battery,
        signal_strength=signal,
        values=values,
    )


class TelemetryFeed:
    """Timer-driven cache of simulated snapshots for a fixed device set.

    Args:
        device_ids: Devices simulated; fixed for the feed's lifetime.
        min_interval_s: Lower bound of each device's refresh interval.
        max_interval_s: Upper bound of each device's refresh interval.
        rng: Random source for intervals and readings.
        clock: Returns the current UTC time for snapshot timestamps.

    Usage::

        feed = TelemetryFeed(["0001", "0002"], 3.0, 8.0)
        await feed.start()
        snapshot = feed.get_snapshot("0001")
        await feed.stop()
    """

    def __init__(
        self,
        device_ids: Iterable[str],
        min_interval_s: float,
        max_interval_s: float,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if min_interval_s <= 0 or max_interval_s < min_interval_s:
            raise ValueError("refresh interval bounds must satisfy 0 < min <= max")
        self._rng = rng or random.Random()
        self._clock = clock
        self._min_interval_s = min_interval_s
        self._max_interval_s = max_interval_s
        now = clock()
        self._snapshots: dict[str, TelemetrySnapshot] = {
            device_id: generate_snapshot(device_id, self._rng, now)
            for device_id in dict.fromkeys(device_ids)
        }
        self._intervals: dict[str, float] = {}
        self._tasks: list[asyncio.Task[None]] = []
        self._shutdown = asyncio.Event()

    @property
    def device_ids(self) -> list[str]:
        return list(self._snapshots)

    @property
    def running(self) -> bool:
        """True while per-device refresh tasks are scheduled."""
        return bool(self._tasks)

    def interval_for(self, device_id: str) -> float | None:
        """Refresh interval drawn for *device_id* at start, or None."""
        return self._intervals.get(device_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_snapshot(self, device_id: str) -> TelemetrySnapshot | None:
        """Current snapshot for *device_id*, or None if the id is unknown."""
        return self._snapshots.get(device_id)

    def get_all_snapshots(self) -> dict[str, TelemetrySnapshot]:
        """Current snapshot of every known device, keyed by id."""
        return dict(self._snapshots)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Schedule one refresh task per device. No-op if already running."""
        if self._tasks:
            return
        self._shutdown = asyncio.Event()
        for device_id in self._snapshots:
            interval = self._rng.uniform(self._min_interval_s, self._max_interval_s)
            self._intervals[device_id] = interval
            self._tasks.append(
                asyncio.create_task(
                    self._refresh_loop(device_id, interval),
                    name=f"telemetry-{device_id}",
                )
            )
        logger.info(
            "Telemetry feed started for %d device(s) (interval=%.1f-%.1fs)",
            len(self._tasks),
            self._min_interval_s,
            self._max_interval_s,
        )

    async def stop(self) -> None:
        """Cancel and await every refresh task. Safe to call repeatedly."""
        if not self._tasks:
            return
        self._shutdown.set()
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Telemetry feed stopped")

    async def _refresh_loop(self, device_id: str, interval_s: float) -> None:
        """Regenerate one device's snapshot every *interval_s* until shutdown."""
        while not self._shutdown.is_set():
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._shutdown.wait(), timeout=interval_s)
            if self._shutdown.is_set():
                break
            self._snapshots[device_id] = generate_snapshot(
                device_id, self._rng, self._clock()
            )
            logger.debug(
                "Telemetry refreshed: device=%s status=%s",
                device_id,
                self._snapshots[device_id].status.value,
            )
