"""Daemon health probing."""

from .health_types import HealthState, HealthStatus, classify_response, decode_response
from .udp_prober import HealthProber, UdpHealthProber

__all__ = [
    "HealthProber",
    "HealthState",
    "HealthStatus",
    "UdpHealthProber",
    "classify_response",
    "decode_response",
]
