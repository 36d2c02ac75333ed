"""Terminal presentation: a plotext download/upload chart, or plain text lines.

Handles: deque history, redraw rate-limiting, SIGWINCH resize, ANSI
cursor-home double-buffering and unit auto-scaling. Both views are
MonitorListener subclasses and only ever see the monitor's events.
"""

from __future__ import annotations

import math
import shutil
import signal
import sys
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import TextIO

import plotext as plt

from uplinkmon.classifier import CandidateList, display_name, priority
from uplinkmon.models import InterfaceDescriptor
from uplinkmon.monitor import TICK_INTERVAL_S, MonitorListener
from uplinkmon.sampler import Totals, Unavailable, Updated
from uplinkmon.units import format_bytes, format_rate, pick_unit


# ---- series definition ----

@dataclass
class Series:
    """One data series on the chart."""
    name: str
    color: str
    label_fmt: str          # e.g. "↓ {}"
    data: deque = field(default=None, repr=False)
    current: float = 0.0

    def formatted_label(self) -> str:
        return self.label_fmt.format(format_rate(self.current))


class _StatusMixin:
    """Header state shared by both views."""

    def _init_status(self) -> None:
        self.interface_label = "-"
        self.status = ""
        self.totals = Totals()
        self.last_update: datetime | None = None

    def on_selection_changed(self, descriptor: InterfaceDescriptor | None) -> None:
        self.interface_label = display_name(descriptor) if descriptor else "-"
        self.totals = Totals()

    def on_status(self, message: str) -> None:
        self.status = message

    def totals_text(self) -> str:
        return f"↓ {format_bytes(self.totals.received)} | ↑ {format_bytes(self.totals.sent)}"


# ---- chart ----

class TerminalGraph(_StatusMixin, MonitorListener):
    """Rolling braille chart of download/upload rates."""

    def __init__(self, *, window: float = 60.0, title: str | None = None,
                 legend: bool = True, frame: bool = False,
                 platform_info: str = "", out: TextIO | None = None) -> None:
        self._init_status()
        self.window_seconds = max(TICK_INTERVAL_S * 4, window)
        self.max_points = max(2, int(self.window_seconds / TICK_INTERVAL_S))
        self.xs = [i * TICK_INTERVAL_S - self.window_seconds for i in range(self.max_points)]
        self.title = title or "Net"
        self.legend = legend
        self.frame = frame
        self.platform_info = platform_info
        self.out = out or sys.stdout
        self._last_draw = 0.0

        self.series = [
            Series("dl", "green", "↓ {}",
                   deque([0.0] * self.max_points, maxlen=self.max_points)),
            Series("ul", "yellow", "↑ {}",
                   deque([0.0] * self.max_points, maxlen=self.max_points)),
        ]

    # ---- listener hooks ----

    def on_update(self, update: Updated) -> None:
        dl, ul = self.series
        for s, val in ((dl, update.rate_down), (ul, update.rate_up)):
            s.current = val
            s.data.append(val)
        self.totals = update.totals
        self.last_update = datetime.now()
        self.draw()

    def on_unavailable(self, result: Unavailable) -> None:
        if result.needs_reselect:
            for s in self.series:
                s.current = 0.0
                s.data.append(0.0)
        self.draw()

    def on_selection_changed(self, descriptor: InterfaceDescriptor | None) -> None:
        super().on_selection_changed(descriptor)
        for s in self.series:
            s.current = 0.0
            s.data.extend([0.0] * self.max_points)

    # ---- rendering ----

    def header(self, unit_label: str) -> str:
        parts = [self.title, self.interface_label]
        if unit_label:
            parts.append(unit_label)
        parts.append(self.totals_text())
        return "  ".join(parts)

    def footer(self) -> str:
        parts = []
        if self.status:
            parts.append(f"status: {self.status}")
        if self.last_update:
            parts.append(f"updated {self.last_update:%H:%M:%S}")
        if self.platform_info:
            parts.append(self.platform_info)
        return "  ".join(parts)

    def draw(self, force: bool = False) -> None:
        now = time.monotonic()
        if not force and now - self._last_draw < 0.05:
            return
        self._last_draw = now

        plt.clf()
        plt.theme("clear")
        # leave one row for the status footer
        plt.plotsize(None, max(5, shutil.get_terminal_size().lines - 1))

        peak = max((max(s.data) for s in self.series), default=1.0)
        unit_label, divisor = pick_unit(max(peak, 1.0))
        for s in self.series:
            scaled = [v / divisor for v in s.data]
            label = s.formatted_label() if self.legend else ""
            plt.plot(self.xs, scaled, label=label, color=s.color, marker="braille")
        all_scaled = [v / divisor for s in self.series for v in s.data]
        y_max = math.ceil(max(max(all_scaled), 0.01) * 1.15)

        plt.frame(self.frame)
        plt.xticks([])
        plt.yticks([])
        plt.ylim(0, y_max)
        plt.xlim(-self.window_seconds, 0)
        plt.grid(False, False)
        plt.text(self.header(unit_label), x=-self.window_seconds / 2, y=y_max * 0.9,
                 color="default", alignment="center")

        self.out.write("\033[H" + plt.build().rstrip() + "\n" + self.footer() + "\033[J")
        self.out.flush()

    def __enter__(self) -> TerminalGraph:
        self.out.write("\033[?25l")  # hide cursor
        self.out.flush()
        if hasattr(signal, "SIGWINCH"):
            signal.signal(signal.SIGWINCH, lambda signum, frame: self.draw(force=True))
        return self

    def __exit__(self, *exc) -> None:
        self.out.write("\033[?25h")  # show cursor
        self.out.flush()


# ---- plain text ----

class TextReport(_StatusMixin, MonitorListener):
    """One line per tick, for pipes, logs and dumb terminals."""

    def __init__(self, out: TextIO | None = None) -> None:
        self._init_status()
        self.out = out or sys.stdout

    def _emit(self, line: str) -> None:
        self.out.write(line + "\n")
        self.out.flush()

    def on_selection_changed(self, descriptor: InterfaceDescriptor | None) -> None:
        super().on_selection_changed(descriptor)
        self._emit(f"interface: {self.interface_label}")

    def on_status(self, message: str) -> None:
        if message != self.status:
            self._emit(f"status: {message}")
        super().on_status(message)

    def on_update(self, update: Updated) -> None:
        self.totals = update.totals
        self.last_update = datetime.now()
        self._emit(
            f"{self.last_update:%H:%M:%S}  ↓ {format_rate(update.rate_down)}  "
            f"↑ {format_rate(update.rate_up)}  total {self.totals_text()}"
        )


def format_candidates(candidates: CandidateList, active: InterfaceDescriptor | None) -> str:
    """Table of candidates for ``--list``."""
    if not candidates:
        return "  (none)"
    lines = []
    for desc in candidates:
        mark = "*" if active is not None and desc.key == active.key else " "
        speed = f"{desc.link_speed_bps // 1_000_000} Mb/s" if desc.link_speed_bps else "?"
        lines.append(f"  {mark} {priority(desc):2d}  {display_name(desc):32s}  {speed:>10s}  {desc.description}")
    return "\n".join(lines)
