"""Simulated pinger and downloader for cfst testing and offline runs."""

import random
import threading
from collections import deque
from collections.abc import Iterable, Mapping

from cfst.models import MB


class FakePinger:
    """Generates fake connection attempts without touching the network.

    Addresses listed in ``script`` replay their outcomes in order (a float is
    an RTT in ms, None a lost attempt); other addresses get simulated values.
    """

    def __init__(
        self,
        seed: int | None = None,
        script: Mapping[str, Iterable[float | None]] | None = None,
    ):
        """Initialize with optional random seed and scripted outcomes."""
        # Shared by pool threads
        self._lock = threading.Lock()
        self._random = random.Random(seed)
        self._script = {address: deque(outcomes) for address, outcomes in (script or {}).items()}
        self.calls: list[tuple[str, int]] = []

        # Simulation parameters
        self.base_latency = 150.0  # Base latency in ms
        self.latency_variance = 40.0
        self.loss_probability = 0.05

    def ping(self, address: str, port: int, timeout: float) -> float | None:
        """Return a scripted or simulated RTT in ms, or None for a lost attempt."""
        with self._lock:
            self.calls.append((address, port))
            outcomes = self._script.get(address)
            if outcomes is not None:
                return outcomes.popleft() if outcomes else None

            if self._random.random() < self.loss_probability:
                return None
            latency = self.base_latency + self._random.gauss(0, self.latency_variance)

        latency = max(1.0, latency)
        if latency > timeout * 1000:
            return None
        return round(latency, 2)


class FakeDownloader:
    """Downloader returning scripted or simulated speeds.

    ``speeds`` maps an address to MB/s; an address mapped to 0 transfers
    nothing. Each download reports one second of elapsed time.
    """

    def __init__(self, speeds: Mapping[str, float] | None = None, seed: int | None = None):
        self._random = random.Random(seed)
        self._speeds = dict(speeds or {})
        self.calls: list[str] = []

    def download(self, address: str, url: str, time_budget: float) -> tuple[int, float]:
        """Return (bytes, elapsed) for a fake one-second transfer."""
        self.calls.append(address)
        speed = self._speeds.get(address)
        if speed is None:
            speed = max(0.0, self._random.gauss(8.0, 4.0))
        return int(speed * MB), 1.0
