"""Monitor: the tick loop that ties enumeration, selection and sampling together.

Lifecycle:
    1. refresh() enumerates, classifies and binds the sampler
    2. run() ticks once a second until stop()
    3. tick() samples; a lost adapter triggers another refresh()
    4. listener hooks receive every outcome

Everything time-dependent takes ``now`` so tests can drive it by hand.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from uplinkmon import classifier, host
from uplinkmon.classifier import CandidateList
from uplinkmon.models import Enumeration, InterfaceDescriptor, Platform
from uplinkmon.sampler import (
    CounterReader,
    Sampler,
    TickResult,
    Unavailable,
    UnavailableReason,
    Updated,
)

logger = logging.getLogger(__name__)

TICK_INTERVAL_S = 1.0

STATUS_STARTED = "monitoring started"
STATUS_OK = "monitoring ok"
STATUS_NO_INTERFACE = "no usable network interface found"


class MonitorListener:
    """Presentation boundary. Override the hooks you care about."""

    def on_candidates(self, candidates: CandidateList) -> None:
        """Called after every refresh with the new ranked list."""

    def on_selection_changed(self, descriptor: InterfaceDescriptor | None) -> None:
        """Called when the monitored interface changes (None = nothing usable)."""

    def on_update(self, update: Updated) -> None:
        """Called each tick that produced rates."""

    def on_unavailable(self, result: Unavailable) -> None:
        """Called each tick that produced no rates."""

    def on_status(self, message: str) -> None:
        """Human-readable status line."""


class Monitor:
    def __init__(
        self,
        *,
        list_interfaces: Callable[[], Enumeration] = host.list_interfaces,
        read_counters: CounterReader = host.read_counters,
        platform: Platform | None = None,
        preferred: str | None = None,
        listener: MonitorListener | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._list_interfaces = list_interfaces
        self.platform = platform or host.detect_platform()
        self.preferred = preferred
        self.listener = listener or MonitorListener()
        self._clock = clock

        self.sampler = Sampler(read_counters)
        self.candidates: CandidateList = ()
        self._stop = threading.Event()
        self._refresh_lock = threading.Lock()
        self._last_status = ""
        # survives an Unbound sampler so a returning adapter is preferred
        self._last_key: tuple[str, str] | None = None
        self._announced: InterfaceDescriptor | None = None

    @property
    def active(self) -> InterfaceDescriptor | None:
        return self.sampler.selection.descriptor

    def _status(self, message: str) -> None:
        if message != self._last_status:
            logger.info("status: %s", message)
        self._last_status = message
        self.listener.on_status(message)

    # ---- selection ----

    def _choose(self, candidates: CandidateList) -> InterfaceDescriptor | None:
        if self.preferred:
            wanted = classifier.find_by_name(candidates, self.preferred)
            if wanted is not None:
                return wanted
            logger.warning("interface %r not among candidates, selecting automatically",
                           self.preferred)
        return classifier.reselect(self._last_key, candidates)

    def refresh(self, now: float | None = None) -> InterfaceDescriptor | None:
        """Re-enumerate and (re)bind. Totals survive if the same adapter wins."""
        if self._stop.is_set():
            return self.active
        with self._refresh_lock:
            now = self._clock() if now is None else now
            enum = self._list_interfaces()
            if not enum.ok:
                self._status(f"interface detection error: {enum.error}")

            self.candidates = classifier.classify(enum.interfaces, self.platform)
            self.listener.on_candidates(self.candidates)

            previous = self.active
            chosen = self._choose(self.candidates)

            if chosen is None:
                self.sampler.deselect()
                if enum.ok:
                    self._status(STATUS_NO_INTERFACE)
                if self._announced is not None:
                    self._announced = None
                    self.listener.on_selection_changed(None)
                return None

            if previous is not None and chosen.key == previous.key:
                return previous

            self.sampler.on_select(chosen, now)
            self._last_key = chosen.key
            self._announced = chosen
            self.listener.on_selection_changed(chosen)
            self._status(STATUS_STARTED)
            return chosen

    # ---- sampling ----

    def tick(self, now: float | None = None) -> TickResult:
        now = self._clock() if now is None else now
        result = self.sampler.on_tick(now)

        if isinstance(result, Updated):
            self.listener.on_update(result)
            self._status(STATUS_OK)
            return result

        if result.reason is UnavailableReason.STOPPED:
            return result

        self.listener.on_unavailable(result)
        if result.reason is UnavailableReason.READ_FAILED:
            self._status(f"update error: {result.detail or 'counter read failed'}")
        if result.needs_reselect:
            self.refresh(now)
        return result

    def run(self, interval: float = TICK_INTERVAL_S) -> None:
        """Blocking deadline-based loop. Late ticks are dropped, not queued."""
        self.refresh()
        next_tick = time.monotonic()
        while not self._stop.is_set():
            next_tick += interval
            self.tick()
            now = time.monotonic()
            if now > next_tick:
                skipped = int((now - next_tick) // interval) + 1
                logger.debug("tick overran, dropping %d tick(s)", skipped)
                next_tick += skipped * interval
            self._stop.wait(max(0.0, next_tick - time.monotonic()))

    def stop(self) -> None:
        """Idempotent. No tick mutates state once this returns."""
        if not self._stop.is_set():
            logger.info("stopping monitor")
        self._stop.set()
        self.sampler.stop()
