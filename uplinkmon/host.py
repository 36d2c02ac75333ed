"""Host side of the monitor: interface enumeration and byte counters via psutil.

psutil gives names, up/down state, link speed and per-NIC counters on every
platform, but no media type. On Linux the type comes from sysfs; elsewhere
it is inferred from the name, which is what the rule tables expect anyway.
"""

from __future__ import annotations

import logging
import platform as _platform
import sys
from pathlib import Path

import psutil

from uplinkmon.models import (
    CounterReadFailure,
    CounterReading,
    CounterResult,
    Enumeration,
    InterfaceDescriptor,
    Kind,
    OperStatus,
    Platform,
)

logger = logging.getLogger(__name__)

SYSFS_NET = Path("/sys/class/net")

# /sys/class/net/<iface>/type values (ARPHRD_*)
_ARPHRD_KIND = {
    1: Kind.ETHERNET,
    512: Kind.PPP,
    768: Kind.TUNNEL,       # ipip
    769: Kind.TUNNEL,       # ip6ip6
    772: Kind.LOOPBACK,
    776: Kind.TUNNEL,       # sit
    778: Kind.TUNNEL,       # gre
    823: Kind.TUNNEL,       # ip6gre
}

_MACOS_TUNNEL_PREFIXES = ("utun", "gif", "stf", "ipsec")


def detect_platform() -> Platform:
    if sys.platform.startswith("win"):
        return Platform.WINDOWS
    if sys.platform == "darwin":
        return Platform.MACOS
    if sys.platform.startswith("linux"):
        return Platform.LINUX
    return Platform.OTHER


def platform_info(plat: Platform | None = None) -> str:
    """e.g. ``Linux | x86_64``"""
    plat = plat or detect_platform()
    return f"{plat.value} | {_platform.machine() or 'unknown'}"


# ---- media type ----

def _read_sysfs(iface: str, attr: str) -> str | None:
    try:
        return (SYSFS_NET / iface / attr).read_text().strip()
    except OSError:
        return None


def _linux_kind(name: str) -> Kind:
    if (SYSFS_NET / name / "wireless").exists() or (SYSFS_NET / name / "phy80211").exists():
        return Kind.WIRELESS_80211
    raw = _read_sysfs(name, "type")
    if raw is None or not raw.isdigit():
        return Kind.UNKNOWN
    return _ARPHRD_KIND.get(int(raw), Kind.UNKNOWN)


def _linux_driver(name: str) -> str:
    driver = SYSFS_NET / name / "device" / "driver"
    try:
        return driver.resolve(strict=True).name
    except OSError:
        return ""


def _flag_set(stats) -> frozenset[str]:
    # psutil >= 5.9.3 exposes comma-separated flags on POSIX
    flags = getattr(stats, "flags", "") or ""
    return frozenset(f.strip() for f in flags.split(",") if f.strip())


def infer_kind(name: str, plat: Platform, flags: frozenset[str] = frozenset()) -> Kind:
    """Media type from name and flags, for hosts without a type table."""
    lower = name.lower()
    if "loopback" in flags or lower in ("lo", "lo0") or "loopback" in lower:
        return Kind.LOOPBACK

    if plat is Platform.WINDOWS:
        if lower.startswith(("wi-fi", "wlan", "wireless")):
            return Kind.WIRELESS_80211
        if lower.startswith(("ethernet", "local area connection")):
            return Kind.ETHERNET
        if lower.startswith(("teredo", "isatap", "6to4")):
            return Kind.TUNNEL
        return Kind.UNKNOWN

    if plat is Platform.MACOS:
        if lower.startswith(_MACOS_TUNNEL_PREFIXES):
            return Kind.TUNNEL
        if lower.startswith("ppp"):
            return Kind.PPP
        return Kind.UNKNOWN

    if "pointopoint" in flags:
        return Kind.PPP if lower.startswith("ppp") else Kind.TUNNEL
    return Kind.UNKNOWN


# ---- Windows adapter descriptions ----

# Network adapter device class
_NET_CLASS_GUID = "{4D36E972-E325-11CE-BFC1-08002BE10318}"
_CLASS_KEY = "SYSTEM\\CurrentControlSet\\Control\\Class\\" + _NET_CLASS_GUID
_NETWORK_KEY = "SYSTEM\\CurrentControlSet\\Control\\Network\\" + _NET_CLASS_GUID


def _windows_descriptions() -> dict[str, str]:
    """Connection name (what psutil reports) -> driver description.

    The friendly name of a TAP or Hyper-V adapter is often just ``Ethernet 2``;
    only the driver description says what it really is.
    """
    import winreg

    descriptions = {}
    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, _CLASS_KEY) as cls:
            index = 0
            while True:
                try:
                    sub = winreg.EnumKey(cls, index)
                except OSError:
                    break
                index += 1
                try:
                    with winreg.OpenKey(cls, sub) as adapter:
                        guid, _ = winreg.QueryValueEx(adapter, "NetCfgInstanceId")
                        driver_desc, _ = winreg.QueryValueEx(adapter, "DriverDesc")
                    with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE,
                                       f"{_NETWORK_KEY}\\{guid}\\Connection") as conn:
                        name, _ = winreg.QueryValueEx(conn, "Name")
                except OSError:
                    # "Properties" and adapters without a connection
                    continue
                descriptions[name] = driver_desc
    except OSError as e:
        logger.warning("adapter descriptions unavailable: %s", e)
    return descriptions


# ---- collaborators ----

def list_interfaces() -> Enumeration:
    """Snapshot the interface table. Failure comes back as an empty Enumeration."""
    plat = detect_platform()
    try:
        all_stats = psutil.net_if_stats()
    except (OSError, psutil.Error) as e:
        logger.warning("interface enumeration failed: %s", e)
        return Enumeration(error=str(e))

    win_descriptions = _windows_descriptions() if plat is Platform.WINDOWS else {}

    result = []
    for name, st in all_stats.items():
        if plat is Platform.LINUX:
            kind = _linux_kind(name)
            description = _linux_driver(name)
        else:
            kind = infer_kind(name, plat, _flag_set(st))
            description = win_descriptions.get(name, "")
        result.append(InterfaceDescriptor(
            name=name,
            description=description,
            kind=kind,
            status=OperStatus.UP if st.isup else OperStatus.DOWN,
            link_speed_bps=max(0, int(st.speed or 0)) * 1_000_000,
            platform=plat,
        ))
    logger.debug("enumerated %d interfaces", len(result))
    return Enumeration(interfaces=tuple(result))


def read_counters(desc: InterfaceDescriptor) -> CounterResult:
    """Cumulative (received, sent) bytes for one interface.

    nowrap is off so that wraps and driver resets reach the sampler as
    backwards steps, which it clamps.
    """
    try:
        counters = psutil.net_io_counters(pernic=True, nowrap=False)
    except (OSError, psutil.Error) as e:
        return CounterReadFailure(str(e))
    io = counters.get(desc.name)
    if io is None:
        return CounterReadFailure(f"{desc.name} is gone")
    return CounterReading(bytes_received=io.bytes_recv, bytes_sent=io.bytes_sent)
