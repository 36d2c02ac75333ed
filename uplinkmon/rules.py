"""Per-platform rule tables for telling physical uplinks from pseudo-adapters.

Each platform gets one PlatformRules entry in RULES. The classifier never
branches on the platform itself; it looks the table up and evaluates it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from uplinkmon.models import Kind, Platform

# Checked before any table is consulted.
ALWAYS_REJECTED_KINDS = frozenset({Kind.LOOPBACK, Kind.TUNNEL})

ETHERNET_KINDS = frozenset({
    Kind.ETHERNET,
    Kind.ETHERNET_3MEGABIT,
    Kind.FAST_ETHERNET_T,
    Kind.FAST_ETHERNET_FX,
    Kind.GIGABIT_ETHERNET,
})

# Kinds accepted outright on Unix-like hosts. Everything not listed here
# (DSL, ISDN, modems, SLIP, ATM, token ring, WWAN...) is rejected, and
# Unknown goes through the name-prefix check instead.
UNIX_ACCEPTED_KINDS = ETHERNET_KINDS | {Kind.WIRELESS_80211, Kind.PPP}

# Priority table; anything missing scores DEFAULT_PRIORITY.
KIND_PRIORITY: dict[Kind, int] = {
    Kind.ETHERNET: 10,
    Kind.WIRELESS_80211: 9,
    Kind.GIGABIT_ETHERNET: 8,
    Kind.FAST_ETHERNET_T: 7,
    Kind.PPP: 6,
}
DEFAULT_PRIORITY = 5


@dataclass(frozen=True)
class PlatformRules:
    platform: Platform
    # Case-insensitive substrings matched against name and description.
    denylist: tuple[str, ...]
    # Kinds accepted without further checks (wireless handled separately
    # when wireless_names is set).
    accepted_kinds: frozenset[Kind]
    # Case-insensitive name prefixes rejected outright.
    denied_prefixes: tuple[str, ...] = ()
    # Descriptions rejected when equal to one of these (lowercase).
    denied_drivers: frozenset[str] = frozenset()
    # Name prefixes that let an Unknown-kind interface through. Empty means
    # Unknown is always rejected.
    unknown_prefixes: tuple[str, ...] = ()
    # Unknown-kind names containing any of these are rejected even when the
    # prefix matches.
    unknown_forbidden: tuple[str, ...] = ()
    # When set, Wireless80211 interfaces must have a name matching this.
    wireless_names: re.Pattern[str] | None = None
    # Name prefix -> priority, applied when the kind scores the default.
    prefix_priority: tuple[tuple[str, int], ...] = field(default=())


RULES: dict[Platform, PlatformRules] = {}


def register(rules: PlatformRules) -> PlatformRules:
    """Add a rule table to RULES, replacing any table for the same platform."""
    RULES[rules.platform] = rules
    return rules


def rules_for(platform: Platform) -> PlatformRules:
    return RULES.get(platform, RULES[Platform.OTHER])


# ---- Windows ----

# Windows stacks many filter drivers and miniports on top of real adapters,
# and most of them show up as Up interfaces of an acceptable kind.
WINDOWS_DENYLIST = (
    "virtual",
    "vmware",
    "vbox",
    "hyper-v",
    "vethernet",
    "docker",
    "wsl",
    "vpn",
    "tap",
    "tun",
    "wireguard",
    "openvpn",
    "tailscale",
    "zerotier",
    "hamachi",
    "radmin",
    "fortinet",
    "anyconnect",
    "pangp",
    "juniper",
    "bluetooth",
    "teredo",
    "isatap",
    "6to4",
    "ip-https",
    "loopback",
    "pseudo",
    "filter",
    "lightweight",
    "wfp",
    "qos",
    "packet scheduler",
    "miniport",
    "npcap",
    "winpcap",
    "npf",
    "kernel debug",
    "wi-fi direct",
    "hosted network",
    "-0000",
    "-0001",
)

register(PlatformRules(
    platform=Platform.WINDOWS,
    denylist=WINDOWS_DENYLIST,
    accepted_kinds=frozenset({
        Kind.ETHERNET,
        Kind.GIGABIT_ETHERNET,
        Kind.FAST_ETHERNET_T,
        Kind.FAST_ETHERNET_FX,
    }),
    wireless_names=re.compile(
        r"^(wi-fi|wlan|wireless network connection)( \d+)?$", re.IGNORECASE),
))
# ---- Linux ----

# Kernel-assigned names are short, so container and tunnel devices are
# matched by name prefix rather than substring.
LINUX_DENIED_PREFIXES = (
    "docker",
    "veth",
    "br",
    "virbr",
    "lxc",
    "lxd",
    "podman",
    "flannel",
    "cni",
    "cali",
    "cilium",
    "weave",
    "kube",
    "vxlan",
    "geneve",
    "tun",
    "tap",
    "wg",
    "tailscale",
    "zt",
    "vmnet",
    "vboxnet",
    "dummy",
    "ifb",
    "bnep",
    "ip6tnl",
    "ip6gre",
    "gre",
    "erspan",
    "sit",
    "nlmon",
)

# Whole driver names from /sys/class/net/<iface>/device/driver.
LINUX_DENIED_DRIVERS = frozenset({
    "bridge",
    "veth",
    "tun",
    "vxlan",
    "dummy",
    "wireguard",
    "vboxnetadp",
    "bnep",
})

LINUX_DENYLIST = (
    "virtual",
    "bluetooth",
    "vpn",
)

register(PlatformRules(
    platform=Platform.LINUX,
    denylist=LINUX_DENYLIST,
    denied_prefixes=LINUX_DENIED_PREFIXES,
    denied_drivers=LINUX_DENIED_DRIVERS,
    accepted_kinds=UNIX_ACCEPTED_KINDS,
    unknown_prefixes=("eth", "en", "wlan", "wl"),
    prefix_priority=(("en", 10), ("wl", 9)),
))


# ---- macOS ----

MACOS_DENYLIST = (
    "bridge",
    "utun",
    "awdl",
    "llw",
    "gif",
    "stf",
    "anpi",
    "ap1",
    "ipsec",
    "vmnet",
    "vboxnet",
    "docker",
    "vpn",
    "tun",
    "tap",
    "virtual",
    "bluetooth",
)

register(PlatformRules(
    platform=Platform.MACOS,
    denylist=MACOS_DENYLIST,
    accepted_kinds=UNIX_ACCEPTED_KINDS,
    unknown_prefixes=("en",),
    unknown_forbidden=("bridge",),
))


# ---- anything else ----

register(PlatformRules(
    platform=Platform.OTHER,
    denylist=tuple(dict.fromkeys(LINUX_DENYLIST + MACOS_DENYLIST)),
    denied_prefixes=LINUX_DENIED_PREFIXES,
    denied_drivers=LINUX_DENIED_DRIVERS,
    accepted_kinds=UNIX_ACCEPTED_KINDS,
))
