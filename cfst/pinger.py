"""Pinger abstraction and TCP connect pinger for cfst."""

import logging
import socket
import time
from typing import Protocol

logger = logging.getLogger(__name__)


class Pinger(Protocol):
    """Protocol defining one timed connection attempt."""

    def ping(self, address: str, port: int, timeout: float) -> float | None:
        """Return the connect round-trip time in ms, or None if the attempt was lost."""
        ...


class TcpPinger:
    """Pinger that times a bare TCP handshake.

    No application data is sent or read: the socket is closed as soon as the
    connection is established. Refused, unreachable and timed-out attempts
    are reported as lost rather than raised, so one bad address never stops
    a run.
    """

    def ping(self, address: str, port: int, timeout: float) -> float | None:
        """Attempt a single TCP connection to address:port.

        Args:
            address: IPv4 or IPv6 address literal
            port: Target TCP port
            timeout: Seconds to wait for the handshake

        Returns:
            Elapsed milliseconds, or None when the attempt failed
        """
        start = time.perf_counter()
        try:
            with socket.create_connection((address, port), timeout=timeout):
                elapsed = (time.perf_counter() - start) * 1000
        except OSError as e:
            # socket.timeout, ConnectionRefusedError, unreachable network...
            logger.debug("Connect failed: %s port %d: %s", address, port, e)
            return None
        except Exception as e:
            logger.warning("Connect error: %s port %d: %s", address, port, e, exc_info=True)
            return None

        logger.debug("Connected: %s port %d in %.2fms", address, port, elapsed)
        return elapsed
