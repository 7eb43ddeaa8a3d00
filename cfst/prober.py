"""Latency prober with a bounded pool of worker threads."""

import logging
import queue
from collections.abc import Callable, Sequence

from PySide6.QtCore import QMutex, QMutexLocker, QObject, Qt, QThreadPool

from cfst.config import SpeedTestConfig
from cfst.models import ProbeRecord
from cfst.pinger import Pinger
from cfst.workers import ProbeWorker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class LatencyProber(QObject):
    """Probes every candidate address with a fixed number of connection attempts.

    Key features:
    - Fixed-size pool of ``routines`` worker threads draining one shared queue
    - ``ping_times`` sequential attempts per address, no retries beyond that
    - One ProbeRecord per address, whatever happens to its attempts
    - Blocks the caller until every address has been processed

    Thread-safety: workers only share the address queue and the output list;
    appends to the output list happen under a single mutex.
    """

    def __init__(
        self,
        pinger: Pinger,
        config: SpeedTestConfig,
        progress: ProgressCallback | None = None,
        parent=None,
    ):
        """Initialize the prober.

        Args:
            pinger: Pinger used for every connection attempt
            config: Run configuration (routines, ping_times, tcp_port, ping_timeout)
            progress: Optional observer called with (completed, total) after
                each address; it never influences scheduling
            parent: Qt parent object
        """
        super().__init__(parent)

        self.pinger = pinger
        self.max_workers = config.routines
        self.attempts = config.ping_times
        self.port = config.tcp_port
        self.timeout = config.ping_timeout
        self._progress = progress

        self._mutex = QMutex()
        self._records: list[ProbeRecord] = []
        self._completed = 0
        self._total = 0
        self._finished_workers = 0

    def run(self, addresses: Sequence[str]) -> list[ProbeRecord]:
        """Probe all addresses and return one record per address.

        Completion order across addresses is unspecified; callers sort the
        result.

        Args:
            addresses: Candidate addresses

        Returns:
            List of ProbeRecord, in completion order
        """
        self._records = []
        self._completed = 0
        self._total = len(addresses)
        self._finished_workers = 0
        if not addresses:
            return []

        work = queue.SimpleQueue()
        for address in addresses:
            work.put(address)

        worker_count = min(self.max_workers, self._total)
        thread_pool = QThreadPool()
        thread_pool.setMaxThreadCount(worker_count)

        logger.info(
            "Probing %d addresses: workers=%d, attempts=%d, port=%d",
            self._total,
            worker_count,
            self.attempts,
            self.port,
        )

        # Keep workers alive until the pool is done
        workers = []
        for _ in range(worker_count):
            worker = ProbeWorker(self.pinger, work, self.port, self.attempts, self.timeout)
            # Slots run in the worker thread; the mutex serialises them
            worker.signals.record_ready.connect(
                self._on_record_ready, Qt.ConnectionType.DirectConnection
            )
            worker.signals.error.connect(
                self._on_probe_error, Qt.ConnectionType.DirectConnection
            )
            worker.signals.finished.connect(
                self._on_worker_finished, Qt.ConnectionType.DirectConnection
            )
            worker.setAutoDelete(False)
            workers.append(worker)
            thread_pool.start(worker)

        thread_pool.waitForDone()

        logger.info(
            "Probing finished: %d records from %d workers",
            len(self._records),
            self._finished_workers,
        )
        return list(self._records)

    def _on_record_ready(self, record: ProbeRecord):
        """Append a finished record to the shared output sequence."""
        with QMutexLocker(self._mutex):
            self._records.append(record)
            self._completed += 1
            if self._progress is not None:
                self._progress(self._completed, self._total)

    def _on_probe_error(self, address: str, error_msg: str):
        """Record an address whose worker failed unexpectedly as fully lost."""
        logger.error("Probing error: address=%s, error=%s", address, error_msg)
        self._on_record_ready(ProbeRecord(address=address, attempts_sent=self.attempts))

    def _on_worker_finished(self):
        with QMutexLocker(self._mutex):
            self._finished_workers += 1
            logger.debug("Worker finished: %d done", self._finished_workers)
