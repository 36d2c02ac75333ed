"""Builders and fakes shared by the test modules."""

from __future__ import annotations

from uplinkmon.models import (
    CounterReadFailure,
    CounterReading,
    InterfaceDescriptor,
    Kind,
    OperStatus,
    Platform,
)


def iface(name: str, kind: Kind = Kind.ETHERNET, *, description: str = "",
          status: OperStatus = OperStatus.UP,
          platform: Platform = Platform.LINUX) -> InterfaceDescriptor:
    return InterfaceDescriptor(name=name, description=description, kind=kind,
                               status=status, platform=platform)


class FakeCounters:
    """Scripted counter reader: set ``values[name]`` or ``fail.add(name)``."""

    def __init__(self) -> None:
        self.values: dict[str, tuple[int, int]] = {}
        self.fail: set[str] = set()
        self.calls = 0

    def __call__(self, desc: InterfaceDescriptor):
        self.calls += 1
        if desc.name in self.fail or desc.name not in self.values:
            return CounterReadFailure(f"{desc.name} unreadable")
        rx, tx = self.values[desc.name]
        return CounterReading(bytes_received=rx, bytes_sent=tx)

