"""Snapshot types shared by the classifier, the sampler and the platform layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Platform(Enum):
    WINDOWS = "Windows"
    MACOS = "macOS"
    LINUX = "Linux"
    OTHER = "Other"


class OperStatus(Enum):
    UP = "up"
    DOWN = "down"
    OTHER = "other"


class Kind(Enum):
    """Interface media type, named after the usual OS media-type table."""
    UNKNOWN = "Unknown"
    ETHERNET = "Ethernet"
    ETHERNET_3MEGABIT = "Ethernet3Megabit"
    FAST_ETHERNET_T = "FastEthernetT"
    FAST_ETHERNET_FX = "FastEthernetFx"
    GIGABIT_ETHERNET = "GigabitEthernet"
    WIRELESS_80211 = "Wireless80211"
    TOKEN_RING = "TokenRing"
    FDDI = "Fddi"
    ATM = "Atm"
    IP_OVER_ATM = "IPOverAtm"
    BASIC_ISDN = "BasicIsdn"
    PRIMARY_ISDN = "PrimaryIsdn"
    ISDN = "Isdn"
    ASYMMETRIC_DSL = "AsymmetricDsl"
    SYMMETRIC_DSL = "SymmetricDsl"
    RATE_ADAPT_DSL = "RateAdaptDsl"
    VERY_HIGH_SPEED_DSL = "VeryHighSpeedDsl"
    MULTI_RATE_SYMMETRIC_DSL = "MultiRateSymmetricDsl"
    GENERIC_MODEM = "GenericModem"
    SLIP = "Slip"
    PPP = "Ppp"
    HIGH_PERFORMANCE_SERIAL_BUS = "HighPerformanceSerialBus"
    WMAN = "Wman"
    WWANPP = "Wwanpp"
    WWANPP2 = "Wwanpp2"
    TUNNEL = "Tunnel"
    LOOPBACK = "Loopback"


@dataclass(frozen=True)
class InterfaceDescriptor:
    """One interface as reported by a single enumeration pass."""
    name: str
    description: str = ""
    kind: Kind = Kind.UNKNOWN
    status: OperStatus = OperStatus.UP
    link_speed_bps: int = 0         # 0 = unknown
    platform: Platform = Platform.OTHER

    @property
    def key(self) -> tuple[str, str]:
        """Stable identity across snapshots (OS handles get re-created)."""
        return (self.name, self.description)

    @property
    def is_up(self) -> bool:
        return self.status is OperStatus.UP


@dataclass(frozen=True)
class Enumeration:
    """Result of listing the interface table.

    ``error`` is set when the OS refused the listing; ``interfaces`` is then
    empty and callers treat it as "no interfaces available".
    """
    interfaces: tuple[InterfaceDescriptor, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CounterReading:
    bytes_received: int
    bytes_sent: int


@dataclass(frozen=True)
class CounterReadFailure:
    reason: str


CounterResult = CounterReading | CounterReadFailure
