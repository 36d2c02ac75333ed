import pytest

from uplinkmon.classifier import (
    classify,
    display_name,
    find_by_name,
    friendly_type,
    is_physical,
    priority,
    reselect,
    select_default,
)
from uplinkmon.models import Kind, OperStatus, Platform
from uplinkmon.rules import RULES

from tests.helpers import iface

WIN = Platform.WINDOWS
LINUX = Platform.LINUX
MAC = Platform.MACOS


def names(candidates):
    return [d.name for d in candidates]


# ---- filtering ----

@pytest.mark.parametrize("platform", list(Platform))
@pytest.mark.parametrize("status", [OperStatus.DOWN, OperStatus.OTHER])
def test_not_up_is_always_excluded(platform, status):
    snapshot = [
        iface("eth0", status=status, platform=platform),
        iface("Ethernet", status=status, platform=platform),
        iface("en0", Kind.UNKNOWN, status=status, platform=platform),
    ]
    assert classify(snapshot, platform) == ()


@pytest.mark.parametrize("platform", list(Platform))
@pytest.mark.parametrize("kind", [Kind.LOOPBACK, Kind.TUNNEL])
def test_loopback_and_tunnel_rejected_before_platform_rules(platform, kind):
    # names that would otherwise pass every platform's rules
    for name in ("eth0", "en0", "Ethernet", "Wi-Fi"):
        assert not is_physical(iface(name, kind, platform=platform), platform)


@pytest.mark.parametrize("platform", list(Platform))
def test_denylisted_token_wins_over_kind(platform):
    for token in RULES[platform].denylist:
        desc = iface(f"x{token}1", Kind.ETHERNET, platform=platform)
        assert not is_physical(desc, platform), token


@pytest.mark.parametrize("prefix", RULES[LINUX].denied_prefixes)
def test_linux_denied_prefixes(prefix):
    assert not is_physical(iface(f"{prefix}0", Kind.ETHERNET), LINUX)


@pytest.mark.parametrize("driver", sorted(RULES[LINUX].denied_drivers))
def test_linux_denied_drivers_match_whole_name(driver):
    assert not is_physical(iface("eth5", Kind.ETHERNET, description=driver), LINUX)


@pytest.mark.parametrize("name,driver", [
    ("enp5s0f0", "qlcnic"),
    ("enp6s0", "igb"),
    ("eth0", "sit_nic"),
    ("enp1s0", "tg3"),
])
def test_linux_short_tokens_do_not_hit_real_drivers(name, driver):
    assert is_physical(iface(name, Kind.ETHERNET, description=driver), LINUX)


def test_linux_plain_bridge_rejected():
    assert not is_physical(iface("br0", Kind.ETHERNET, description="bridge"), LINUX)
    assert not is_physical(iface("br0", Kind.ETHERNET), LINUX)


def test_denylist_matches_description_case_insensitively():
    desc = iface("Ethernet 3", Kind.ETHERNET,
                 description="VMware Virtual Ethernet Adapter for VMnet8", platform=WIN)
    assert not is_physical(desc, WIN)


def test_empty_snapshot():
    for platform in Platform:
        assert classify([], platform) == ()


# ---- Windows ----

def test_windows_wifi_filter_driver_excluded():
    assert not is_physical(iface("WLAN-Filter-Driver", Kind.WIRELESS_80211, platform=WIN), WIN)


@pytest.mark.parametrize("name", ["Wi-Fi", "wi-fi", "WLAN", "Wi-Fi 2",
                                  "Wireless Network Connection",
                                  "Wireless Network Connection 3"])
def test_windows_canonical_wifi_names_accepted(name):
    assert is_physical(iface(name, Kind.WIRELESS_80211, platform=WIN), WIN)


@pytest.mark.parametrize("name", ["Wi-Fi Service", "WLAN2", "My Wireless"])
def test_windows_wireless_outside_allowlist_rejected(name):
    assert not is_physical(iface(name, Kind.WIRELESS_80211, platform=WIN), WIN)


@pytest.mark.parametrize("kind,ok", [
    (Kind.ETHERNET, True),
    (Kind.GIGABIT_ETHERNET, True),
    (Kind.FAST_ETHERNET_T, True),
    (Kind.FAST_ETHERNET_FX, True),
    (Kind.PPP, False),
    (Kind.UNKNOWN, False),
    (Kind.ASYMMETRIC_DSL, False),
    (Kind.WWANPP, False),
])
def test_windows_kind_whitelist(kind, ok):
    assert is_physical(iface("Ethernet", kind, platform=WIN), WIN) is ok


# ---- Linux / macOS ----

@pytest.mark.parametrize("name,ok", [
    ("eth0", True),
    ("enp3s0", True),
    ("wlan0", True),
    ("wlp2s0", True),
    ("usb0", False),
    ("ib0", False),
])
def test_linux_unknown_kind_needs_physical_prefix(name, ok):
    assert is_physical(iface(name, Kind.UNKNOWN), LINUX) is ok


@pytest.mark.parametrize("name,ok", [
    ("en0", True),
    ("en7", True),
    ("enbridge0", False),
    ("lo0", False),
    ("p2p0", False),
])
def test_macos_unknown_kind(name, ok):
    assert is_physical(iface(name, Kind.UNKNOWN, platform=MAC), MAC) is ok


@pytest.mark.parametrize("platform", [LINUX, MAC])
@pytest.mark.parametrize("kind", [
    Kind.ASYMMETRIC_DSL, Kind.SYMMETRIC_DSL, Kind.RATE_ADAPT_DSL,
    Kind.VERY_HIGH_SPEED_DSL, Kind.MULTI_RATE_SYMMETRIC_DSL,
    Kind.BASIC_ISDN, Kind.PRIMARY_ISDN, Kind.ISDN,
    Kind.GENERIC_MODEM, Kind.SLIP,
])
def test_unix_legacy_media_rejected(platform, kind):
    assert not is_physical(iface("en0", kind, platform=platform), platform)


@pytest.mark.parametrize("platform", [LINUX, MAC])
@pytest.mark.parametrize("kind", [
    Kind.ETHERNET, Kind.GIGABIT_ETHERNET, Kind.FAST_ETHERNET_T,
    Kind.FAST_ETHERNET_FX, Kind.WIRELESS_80211,
])
def test_unix_ethernet_and_wireless_accepted(platform, kind):
    assert is_physical(iface("en0", kind, platform=platform), platform)


def test_linux_container_and_bridge_noise():
    snapshot = [
        iface("lo", Kind.LOOPBACK),
        iface("docker0"),
        iface("br-5f2c1a"),
        iface("veth12ab"),
        iface("virbr0"),
        iface("tailscale0", Kind.UNKNOWN),
        iface("wg0", Kind.UNKNOWN),
        iface("enp0s31f6", description="e1000e"),
        iface("wlp2s0", Kind.WIRELESS_80211, description="iwlwifi"),
    ]
    assert names(classify(snapshot, LINUX)) == ["enp0s31f6", "wlp2s0"]


def test_other_platform_rejects_unknown():
    assert not is_physical(iface("eth0", Kind.UNKNOWN, platform=Platform.OTHER), Platform.OTHER)
    assert is_physical(iface("eth0", Kind.ETHERNET, platform=Platform.OTHER), Platform.OTHER)


# ---- ranking ----

@pytest.mark.parametrize("kind,score", [
    (Kind.ETHERNET, 10),
    (Kind.WIRELESS_80211, 9),
    (Kind.GIGABIT_ETHERNET, 8),
    (Kind.FAST_ETHERNET_T, 7),
    (Kind.PPP, 6),
    (Kind.FAST_ETHERNET_FX, 5),
    (Kind.UNKNOWN, 5),
])
def test_priority_by_kind(kind, score):
    assert priority(iface("x0", kind, platform=WIN), WIN) == score


def test_linux_name_prefix_overrides_default_priority():
    assert priority(iface("enp3s0", Kind.UNKNOWN), LINUX) == 10
    assert priority(iface("wlp2s0", Kind.UNKNOWN), LINUX) == 9
    assert priority(iface("eth0", Kind.UNKNOWN), LINUX) == 5
    # kind-based scores are not overridden
    assert priority(iface("wlp2s0", Kind.ETHERNET), LINUX) == 10
    assert priority(iface("enp3s0", Kind.PPP), LINUX) == 6


def test_prefix_override_is_linux_only():
    assert priority(iface("en0", Kind.UNKNOWN, platform=MAC), MAC) == 5


def test_ranking_descending():
    snapshot = [
        iface("ppp0", Kind.PPP),
        iface("eth1", Kind.GIGABIT_ETHERNET),
        iface("wlan0", Kind.WIRELESS_80211),
        iface("eth0", Kind.ETHERNET),
    ]
    assert names(classify(snapshot, LINUX)) == ["eth0", "wlan0", "eth1", "ppp0"]


def test_ties_keep_enumeration_order_and_repeat():
    snapshot = [iface(f"eth{i}", Kind.ETHERNET) for i in (3, 1, 2, 0)]
    first = classify(snapshot, LINUX)
    assert names(first) == ["eth3", "eth1", "eth2", "eth0"]
    assert classify(snapshot, LINUX) == first


# ---- selection ----

def test_select_default():
    a, b = iface("eth0"), iface("eth1")
    assert select_default((a, b)) is a
    assert select_default(()) is None


def test_reselect_prefers_previous_key_over_top_ranked():
    top = iface("eth0", Kind.ETHERNET)
    kept = iface("wlan0", Kind.WIRELESS_80211, description="iwlwifi")
    candidates = classify([kept, top], LINUX)
    assert candidates[0] is top
    assert reselect(kept.key, candidates) is kept


def test_reselect_matches_by_key_not_identity():
    old = iface("wlan0", Kind.WIRELESS_80211, description="iwlwifi")
    fresh = iface("wlan0", Kind.WIRELESS_80211, description="iwlwifi")
    candidates = (iface("eth0"), fresh)
    assert reselect(old.key, candidates) is fresh


def test_reselect_ignores_same_name_with_other_description():
    top = iface("eth0")
    other = iface("wlan0", Kind.WIRELESS_80211, description="rtl8xxxu")
    assert reselect(("wlan0", "iwlwifi"), (top, other)) is top


def test_reselect_falls_back():
    top = iface("eth0")
    assert reselect(("gone0", ""), (top,)) is top
    assert reselect(None, (top,)) is top
    assert reselect(("eth0", ""), ()) is None


def test_reselect_skips_previous_if_not_up():
    down = iface("wlan0", Kind.WIRELESS_80211, status=OperStatus.DOWN)
    top = iface("eth0")
    assert reselect(down.key, (top, down)) is top


def test_find_by_name():
    a = iface("Ethernet", platform=WIN)
    b = iface("wlp2s0", Kind.WIRELESS_80211, description="iwlwifi")
    assert find_by_name((a, b), "ethernet") is a
    assert find_by_name((a, b), "IWLWIFI") is b
    assert find_by_name((a, b), "eth9") is None


# ---- labels ----

def test_friendly_type():
    assert friendly_type(iface("eth0", Kind.GIGABIT_ETHERNET)) == "Ethernet"
    assert friendly_type(iface("Wi-Fi", Kind.WIRELESS_80211, platform=WIN)) == "Wireless"
    assert friendly_type(iface("ppp0", Kind.PPP)) == "Dial-up"
    assert friendly_type(iface("wlp2s0", Kind.UNKNOWN)) == "Wireless (Linux)"
    assert friendly_type(iface("eth0", Kind.UNKNOWN)) == "Ethernet (Linux)"
    assert friendly_type(iface("en0", Kind.UNKNOWN, platform=MAC)) == "Ethernet (macOS)"
    assert friendly_type(iface("en1", Kind.UNKNOWN, description="Wi-Fi",
                               platform=MAC)) == "Wi-Fi (macOS)"
    assert friendly_type(iface("usb0", Kind.UNKNOWN)) == "Unknown"


def test_display_name():
    assert display_name(iface("enp3s0")) == "enp3s0 (Ethernet)"
