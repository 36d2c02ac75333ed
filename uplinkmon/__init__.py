"""uplinkmon: throughput monitor for the host's primary physical interface.

classifier picks the uplink out of the interface table, sampler turns its
byte counters into rates and totals, monitor drives both once a second.
"""

from uplinkmon.classifier import classify, priority, reselect, select_default
from uplinkmon.models import InterfaceDescriptor, Kind, OperStatus, Platform
from uplinkmon.sampler import Sampler, SamplerState, Totals, Unavailable, Updated

__version__ = "0.3.0"

__all__ = [
    "InterfaceDescriptor",
    "Kind",
    "OperStatus",
    "Platform",
    "Sampler",
    "SamplerState",
    "Totals",
    "Unavailable",
    "Updated",
    "classify",
    "priority",
    "reselect",
    "select_default",
]
