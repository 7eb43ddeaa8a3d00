"""Data models for cfst probe results."""

import math
from dataclasses import dataclass, field

MB = 1024 * 1024


@dataclass
class ProbeRecord:
    """Latency and throughput results for a single candidate address."""

    address: str
    attempts_sent: int = 0
    attempts_received: int = 0
    rtt_samples: list[float] = field(default_factory=list)  # ms, one per success
    download_speed: float | None = None  # bytes/s; None means not tested

    def __post_init__(self):
        """Reject records whose counters disagree with their samples."""
        if self.attempts_received > self.attempts_sent:
            raise ValueError("attempts_received cannot exceed attempts_sent")
        if len(self.rtt_samples) != self.attempts_received:
            raise ValueError("rtt_samples must hold one sample per received attempt")

    def add_attempt(self, rtt_ms: float | None) -> None:
        """Record one connection attempt; None marks it as lost."""
        self.attempts_sent += 1
        if rtt_ms is not None:
            self.attempts_received += 1
            self.rtt_samples.append(rtt_ms)

    @property
    def average_delay(self) -> float:
        """Mean RTT in ms over successful attempts, inf when none succeeded."""
        if self.attempts_received == 0:
            return math.inf
        return sum(self.rtt_samples) / self.attempts_received

    @property
    def loss_rate(self) -> float:
        if self.attempts_sent == 0:
            return 0.0
        return (self.attempts_sent - self.attempts_received) / self.attempts_sent

    @property
    def download_speed_mb(self) -> float:
        """Throughput in MB/s, 0.0 when untested."""
        if self.download_speed is None:
            return 0.0
        return self.download_speed / MB
