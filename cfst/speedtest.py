"""Sequential, early-terminating download speed tester."""

import logging
from collections.abc import Callable, Sequence

from cfst.config import SpeedTestConfig
from cfst.downloader import Downloader
from cfst.models import MB, ProbeRecord

logger = logging.getLogger(__name__)


class ThroughputTester:
    """Measures download speed through candidates one at a time, in input order.

    Downloads never run concurrently: parallel transfers would share the
    local link and distort each other's measurements.

    Stop conditions:
    - min_speed == 0: the first ``test_count`` candidates are tested
    - min_speed > 0: testing continues past slow candidates until
      ``test_count`` candidates reach min_speed or the input is exhausted
    """

    def __init__(
        self,
        downloader: Downloader,
        config: SpeedTestConfig,
        progress: Callable[[int, int], None] | None = None,
    ):
        """Initialize the tester.

        Args:
            downloader: Downloader used for each measurement
            config: Run configuration (url, test_count, download_time, min_speed)
            progress: Optional observer called with (satisfying, target) after
                each tested candidate
        """
        self.downloader = downloader
        self.url = config.url
        self.test_count = config.test_count
        self.time_budget = config.download_time
        self.min_speed = config.min_speed * MB  # bytes/s
        self._progress = progress

    def measure(self, record: ProbeRecord) -> float:
        """Download through one candidate and store its speed in bytes/s."""
        received, elapsed = self.downloader.download(record.address, self.url, self.time_budget)
        if received > 0 and elapsed > 0:
            record.download_speed = received / elapsed
        else:
            record.download_speed = 0.0
        return record.download_speed

    def run(self, records: Sequence[ProbeRecord]) -> list[ProbeRecord]:
        """Test candidates until the stop condition is reached.

        Args:
            records: Delay-filtered records in latency order

        Returns:
            Tested records whose speed reached min_speed, in test order (every
            tested record when min_speed is 0). When none did, every input
            record, with tested ones carrying their speed.
        """
        if not records:
            return []

        if self.min_speed > 0:
            candidates = records
        else:
            candidates = records[: self.test_count]
        target = min(self.test_count, len(records))

        logger.info(
            "Testing download speed: candidates=%d, target=%d, min_speed=%.2fMB/s",
            len(candidates),
            target,
            self.min_speed / MB,
        )

        satisfying = []
        for record in candidates:
            speed = self.measure(record)
            logger.debug("Speed: address=%s, %.2fMB/s", record.address, speed / MB)
            if speed >= self.min_speed:
                satisfying.append(record)
            if self._progress is not None:
                self._progress(len(satisfying), target)
            if len(satisfying) >= self.test_count:
                break

        if not satisfying:
            logger.info("No candidate reached %.2fMB/s, keeping all results", self.min_speed / MB)
            return list(records)
        return satisfying
