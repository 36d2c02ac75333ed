"""Rate engine: byte counters in, non-negative rates and running totals out.

The per-interface state is an immutable ActiveSelection value. advance()
is a pure step function over it; Sampler owns the current value together
with the counter reader, and serialises ticks against (re)selection.

States:
    UNBOUND    nothing selected, or the adapter stopped answering
    BASELINED  selected, one reading taken, no elapsed time to divide by
    TRACKING   at least two readings, rates computable
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum

from uplinkmon.models import (
    CounterReadFailure,
    CounterReading,
    CounterResult,
    InterfaceDescriptor,
)

logger = logging.getLogger(__name__)

# Totals saturate here instead of wrapping.
MAX_TOTAL = 2**63 - 1

CounterReader = Callable[[InterfaceDescriptor], CounterResult]


class SamplerState(Enum):
    UNBOUND = "unbound"
    BASELINED = "baselined"
    TRACKING = "tracking"


class UnavailableReason(Enum):
    UNBOUND = "no interface selected"
    READ_FAILED = "counter read failed"
    NO_NEW_DATA = "no new data"
    BUSY = "previous tick still running"
    STOPPED = "sampler stopped"


@dataclass(frozen=True)
class Totals:
    received: int = 0
    sent: int = 0

    def add(self, received: int, sent: int) -> Totals:
        return Totals(
            received=min(MAX_TOTAL, self.received + received),
            sent=min(MAX_TOTAL, self.sent + sent),
        )


@dataclass(frozen=True)
class ActiveSelection:
    descriptor: InterfaceDescriptor | None = None
    state: SamplerState = SamplerState.UNBOUND
    baseline_received: int = 0
    baseline_sent: int = 0
    baseline_time: float | None = None      # None = unset
    totals: Totals = field(default_factory=Totals)


UNBOUND = ActiveSelection()


@dataclass(frozen=True)
class Updated:
    rate_down: float        # bytes/s
    rate_up: float
    totals: Totals


@dataclass(frozen=True)
class Unavailable:
    reason: UnavailableReason
    detail: str = ""

    @property
    def needs_reselect(self) -> bool:
        return self.reason in (UnavailableReason.UNBOUND, UnavailableReason.READ_FAILED)


TickResult = Updated | Unavailable


def baseline(descriptor: InterfaceDescriptor, reading: CounterResult,
             now: float) -> ActiveSelection:
    """Fresh selection for ``descriptor``; totals start at zero.

    An unreadable adapter starts from zero counters. New or just-woken
    adapters are often unreadable for a moment.
    """
    if isinstance(reading, CounterReadFailure):
        logger.debug("initial read of %s failed (%s), baselining at zero",
                     descriptor.name, reading.reason)
        reading = CounterReading(0, 0)
    return ActiveSelection(
        descriptor=descriptor,
        state=SamplerState.BASELINED,
        baseline_received=reading.bytes_received,
        baseline_sent=reading.bytes_sent,
        baseline_time=now,
    )


def advance(sel: ActiveSelection, reading: CounterResult | None,
            now: float) -> tuple[ActiveSelection, TickResult]:
    """One tick of the state machine. ``reading`` is ignored when unbound."""
    if sel.state is SamplerState.UNBOUND or sel.descriptor is None:
        return UNBOUND, Unavailable(UnavailableReason.UNBOUND)

    if reading is None or isinstance(reading, CounterReadFailure):
        detail = reading.reason if reading is not None else ""
        return UNBOUND, Unavailable(UnavailableReason.READ_FAILED, detail)

    stored = replace(
        sel,
        state=SamplerState.TRACKING,
        baseline_received=reading.bytes_received,
        baseline_sent=reading.bytes_sent,
        baseline_time=now,
    )

    elapsed = now - sel.baseline_time if sel.baseline_time is not None else 0.0
    if sel.state is SamplerState.BASELINED or elapsed <= 0:
        if sel.state is SamplerState.TRACKING:
            logger.debug("non-positive elapsed time (%.3fs), skipping rate", elapsed)
        return stored, Unavailable(UnavailableReason.NO_NEW_DATA)

    # Negative deltas mean a counter wrap or a driver reset: no data, not
    # negative throughput.
    d_down = max(0, reading.bytes_received - sel.baseline_received)
    d_up = max(0, reading.bytes_sent - sel.baseline_sent)
    totals = sel.totals.add(d_down, d_up)

    return (
        replace(stored, totals=totals),
        Updated(rate_down=d_down / elapsed, rate_up=d_up / elapsed, totals=totals),
    )


class Sampler:
    """Owns the ActiveSelection for one monitored interface."""

    def __init__(self, read_counters: CounterReader) -> None:
        self._read = read_counters
        self._sel = UNBOUND
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    @property
    def selection(self) -> ActiveSelection:
        return self._sel

    @property
    def state(self) -> SamplerState:
        return self._sel.state

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def on_select(self, descriptor: InterfaceDescriptor, now: float) -> ActiveSelection:
        """Bind to ``descriptor``. Waits for any in-flight tick to finish."""
        with self._lock:
            if self.stopped:
                return self._sel
            self._sel = baseline(descriptor, self._read(descriptor), now)
            logger.info("sampling %s", descriptor.name)
            return self._sel

    def deselect(self) -> None:
        with self._lock:
            if self.stopped:
                return
            self._sel = UNBOUND

    def on_tick(self, now: float) -> TickResult:
        if self.stopped:
            return Unavailable(UnavailableReason.STOPPED)
        # Never run two passes over the same baseline; drop the late tick.
        if not self._lock.acquire(blocking=False):
            return Unavailable(UnavailableReason.BUSY)
        try:
            sel = self._sel
            reading = None
            if sel.descriptor is not None and sel.state is not SamplerState.UNBOUND:
                reading = self._read(sel.descriptor)
            if self.stopped:
                return Unavailable(UnavailableReason.STOPPED)
            self._sel, result = advance(sel, reading, now)
        finally:
            self._lock.release()

        if isinstance(result, Unavailable) and result.reason is UnavailableReason.READ_FAILED:
            logger.warning("lost %s: %s", sel.descriptor.name, result.detail or "read failed")
        return result

    def stop(self) -> None:
        """Idempotent. Later ticks return STOPPED and leave state untouched."""
        self._stopped.set()
