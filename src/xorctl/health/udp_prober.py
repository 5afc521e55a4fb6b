"""
Datagram status probe for the supervised daemon.

Each call to :meth:`UdpHealthProber.check` performs exactly one exchange:
a fresh socket is bound to an ephemeral local address, the status command is
sent to the daemon, and a single response datagram is awaited for at most the
configured timeout. Transport problems never raise; they come back as a
``PROBE_FAILED`` status so the caller can decide what to do.
"""

from __future__ import annotations

import logging
import socket
from typing import Callable, Protocol, Tuple

from .health_types import DISCONNECTED_MARKER, HealthStatus, classify_response, decode_response

logger = logging.getLogger(__name__)

Address = Tuple[str, int]
SocketFactory = Callable[[int, int], socket.socket]

DEFAULT_BIND_ADDRESS: Address = ("0.0.0.0", 0)
DEFAULT_COMMAND = "status"
DEFAULT_BUFFER_SIZE = 1024
DEFAULT_TIMEOUT_SECONDS = 5.0
TIMEOUT_REASON = "timeout"


class HealthProber(Protocol):
    """Anything that can produce a fresh health status on demand."""

    def check(self) -> HealthStatus: ...


class UdpHealthProber:
    """Single-shot status query over UDP."""

    def __init__(
        self,
        server_address: Address,
        *,
        bind_address: Address = DEFAULT_BIND_ADDRESS,
        command: str = DEFAULT_COMMAND,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        marker: str = DISCONNECTED_MARKER,
        socket_factory: SocketFactory = socket.socket,
    ):
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive (got {buffer_size})")
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive (got {timeout_seconds})")
        self.server_address = server_address
        self.bind_address = bind_address
        self.payload = command.encode("ascii")
        self.buffer_size = buffer_size
        self.timeout_seconds = timeout_seconds
        self.marker = marker
        self._socket_factory = socket_factory

    def check(self) -> HealthStatus:
        """Run one status exchange and classify the outcome."""
        try:
            sock = self._socket_factory(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as exc:
            return self._failed(f"socket setup failed: {exc}")

        with sock:
            try:
                sock.bind(self.bind_address)
                sock.settimeout(self.timeout_seconds)
            except OSError as exc:
                return self._failed(f"bind failed: {exc}")

            try:
                sock.sendto(self.payload, self.server_address)
            except OSError as exc:
                return self._failed(f"send failed: {exc}")

            try:
                data, _ = sock.recvfrom(self.buffer_size)
            except socket.timeout:
                return self._failed(TIMEOUT_REASON)
            except OSError as exc:
                return self._failed(f"receive failed: {exc}")

        text = decode_response(data)
        logger.debug("Status response from %s:%s: %r", self.server_address[0], self.server_address[1], text)
        return classify_response(text, self.marker)

    def _failed(self, reason: str) -> HealthStatus:
        logger.debug("Status probe to %s:%s failed: %s", self.server_address[0], self.server_address[1], reason)
        return HealthStatus.probe_failed(reason)


__all__ = ["HealthProber", "UdpHealthProber", "TIMEOUT_REASON"]
