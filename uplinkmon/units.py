"""Unit scaling for byte rates and byte totals (powers of 1024)."""

from __future__ import annotations

RATE_UNITS = [("B/s", 1), ("KB/s", 1024), ("MB/s", 1024**2), ("GB/s", 1024**3)]
SIZE_UNITS = [("B", 1), ("KB", 1024), ("MB", 1024**2), ("GB", 1024**3)]


def pick_unit(max_val: float, units: list[tuple[str, int]] | None = None) -> tuple[str, int]:
    """Choose the best unit so the peak value is readable."""
    if units is None:
        units = RATE_UNITS
    for name, divisor in reversed(units):
        if abs(max_val) >= divisor:
            return name, divisor
    return units[0]


def format_rate(bps: float) -> str:
    """``1536.0`` -> ``"1.50 KB/s"``; always two decimals."""
    name, divisor = pick_unit(bps, RATE_UNITS)
    return f"{bps / divisor:.2f} {name}"


def format_bytes(count: int) -> str:
    """``512`` -> ``"512 B"``, ``1536`` -> ``"1.5 KB"``."""
    name, divisor = pick_unit(count, SIZE_UNITS)
    if divisor == 1:
        return f"{count} {name}"
    return f"{count / divisor:.1f} {name}"
