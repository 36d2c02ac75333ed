"""Interface classification and selection.

classify() filters a raw enumeration down to interfaces that look like real
uplinks and ranks them. select_default() and reselect() pick the interface
to monitor from that ranked list.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from uplinkmon.models import InterfaceDescriptor, Kind, OperStatus, Platform
from uplinkmon.rules import (
    ALWAYS_REJECTED_KINDS,
    DEFAULT_PRIORITY,
    ETHERNET_KINDS,
    KIND_PRIORITY,
    PlatformRules,
    rules_for,
)

CandidateList = tuple[InterfaceDescriptor, ...]


def _denylisted(desc: InterfaceDescriptor, rules: PlatformRules) -> bool:
    name = desc.name.lower()
    description = desc.description.lower()
    if name.startswith(rules.denied_prefixes) or description in rules.denied_drivers:
        return True
    return any(tok in name or tok in description for tok in rules.denylist)


def _kind_allowed(desc: InterfaceDescriptor, rules: PlatformRules) -> bool:
    if desc.kind is Kind.WIRELESS_80211 and rules.wireless_names is not None:
        return bool(rules.wireless_names.match(desc.name.strip()))

    if desc.kind is Kind.UNKNOWN:
        if not rules.unknown_prefixes:
            return False
        name = desc.name.lower()
        if any(tok in name for tok in rules.unknown_forbidden):
            return False
        return name.startswith(rules.unknown_prefixes)

    return desc.kind in rules.accepted_kinds


def is_physical(desc: InterfaceDescriptor, platform: Platform) -> bool:
    """True if ``desc`` should be offered as a monitoring candidate."""
    if desc.status is not OperStatus.UP:
        return False
    if desc.kind in ALWAYS_REJECTED_KINDS:
        return False
    rules = rules_for(platform)
    if _denylisted(desc, rules):
        return False
    return _kind_allowed(desc, rules)


def priority(desc: InterfaceDescriptor, platform: Platform | None = None) -> int:
    """Ranking score; higher is more likely to be the real uplink."""
    if desc.kind in KIND_PRIORITY:
        return KIND_PRIORITY[desc.kind]
    rules = rules_for(platform or desc.platform)
    for prefix, override in rules.prefix_priority:
        if desc.name.startswith(prefix):
            return override
    return DEFAULT_PRIORITY


def classify(snapshot: Iterable[InterfaceDescriptor],
             platform: Platform) -> CandidateList:
    """Filter and rank a snapshot. Never raises; empty in, empty out.

    The sort is stable, so equal priorities keep enumeration order and the
    same snapshot always classifies to the same list.
    """
    kept = [d for d in snapshot if is_physical(d, platform)]
    kept.sort(key=lambda d: priority(d, platform), reverse=True)
    return tuple(kept)


def select_default(candidates: Sequence[InterfaceDescriptor]) -> InterfaceDescriptor | None:
    return candidates[0] if candidates else None


def reselect(previous_key: tuple[str, str] | None,
             candidates: Sequence[InterfaceDescriptor]) -> InterfaceDescriptor | None:
    """Keep the previously monitored adapter if it survived the refresh.

    Falls back to the top-ranked candidate, so totals are only reset when
    the adapter actually went away.
    """
    if previous_key is not None:
        for desc in candidates:
            if desc.key == previous_key and desc.is_up:
                return desc
    return select_default(candidates)


def find_by_name(candidates: Sequence[InterfaceDescriptor],
                 name: str) -> InterfaceDescriptor | None:
    """Case-insensitive lookup by interface name or description."""
    wanted = name.strip().lower()
    for desc in candidates:
        if desc.name.lower() == wanted or desc.description.lower() == wanted:
            return desc
    return None


# ---- display labels ----

def friendly_type(desc: InterfaceDescriptor) -> str:
    if desc.kind in ETHERNET_KINDS:
        return "Ethernet"
    if desc.kind is Kind.WIRELESS_80211:
        return "Wireless"
    if desc.kind is Kind.PPP:
        return "Dial-up"

    if desc.platform is Platform.LINUX:
        if desc.name.startswith("wl"):
            return "Wireless (Linux)"
        if desc.name.startswith(("en", "eth")):
            return "Ethernet (Linux)"
    elif desc.platform is Platform.MACOS:
        if desc.name.startswith(("en0", "en1")):
            return "Wi-Fi (macOS)" if "wi-fi" in desc.description.lower() else "Ethernet (macOS)"
    return desc.kind.value


def display_name(desc: InterfaceDescriptor) -> str:
    """e.g. ``wlp2s0 (Wireless)``"""
    return f"{desc.name} ({friendly_type(desc)})"
