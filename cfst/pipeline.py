"""Probe, filter, speed-test and order a set of candidate addresses."""

import logging
from collections.abc import Callable, Sequence

from cfst.config import SpeedTestConfig
from cfst.downloader import Downloader
from cfst.models import ProbeRecord
from cfst.pinger import Pinger
from cfst.prober import LatencyProber
from cfst.results import filter_by_delay, sort_by_latency, sort_by_throughput
from cfst.speedtest import ThroughputTester

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def probe_latency(
    addresses: Sequence[str],
    config: SpeedTestConfig,
    pinger: Pinger,
    progress: ProgressCallback | None = None,
) -> list[ProbeRecord]:
    """Probe addresses and return the delay-filtered records in latency order."""
    records = LatencyProber(pinger, config, progress=progress).run(addresses)
    records = filter_by_delay(records, config.min_delay_ms, config.max_delay_ms)
    logger.info("%d addresses within the delay window", len(records))
    return sort_by_latency(records)


def measure_download_speed(
    records: Sequence[ProbeRecord],
    config: SpeedTestConfig,
    downloader: Downloader,
    progress: ProgressCallback | None = None,
) -> list[ProbeRecord]:
    """Speed-test latency-ordered records and return them in throughput order."""
    tester = ThroughputTester(downloader, config, progress=progress)
    return sort_by_throughput(tester.run(records))


def run_speed_test(
    addresses: Sequence[str],
    config: SpeedTestConfig,
    pinger: Pinger,
    downloader: Downloader,
    ping_progress: ProgressCallback | None = None,
    download_progress: ProgressCallback | None = None,
) -> list[ProbeRecord]:
    """Run every measurement stage and return the final ordered result set.

    Latency order (loss rate, then delay) is kept when downloads are
    disabled; otherwise the speed-tested set is ordered by speed.
    """
    records = probe_latency(addresses, config, pinger, progress=ping_progress)
    if config.disable_download or not records:
        return records
    return measure_download_speed(records, config, downloader, progress=download_progress)
