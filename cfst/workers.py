"""Worker classes for background probing tasks."""

import logging
import queue

from PySide6.QtCore import QObject, QRunnable, Signal

from cfst.models import ProbeRecord
from cfst.pinger import Pinger

logger = logging.getLogger(__name__)


class WorkerSignals(QObject):
    """Signals for handing results from pool threads back to the prober."""

    record_ready = Signal(object)  # Emits the finished ProbeRecord
    error = Signal(str, str)  # Emits (address, error message)
    finished = Signal()  # Emits when the worker has drained the queue


class ProbeWorker(QRunnable):
    """Worker that drains a shared address queue in a pool thread.

    Every address taken from the queue gets ``attempts`` sequential
    connection attempts. A lost attempt never stops the remaining ones, and
    an unexpected failure for one address never stops the worker.
    """

    def __init__(
        self,
        pinger: Pinger,
        addresses: queue.SimpleQueue,
        port: int,
        attempts: int,
        timeout: float,
    ):
        super().__init__()
        self.pinger = pinger
        self.addresses = addresses
        self.port = port
        self.attempts = attempts
        self.timeout = timeout
        self.signals = WorkerSignals()

    def run(self):
        """Probe addresses until the queue is empty."""
        try:
            while True:
                try:
                    address = self.addresses.get_nowait()
                except queue.Empty:
                    break
                self._probe(address)
        finally:
            # Always signal completion
            self.signals.finished.emit()

    def _probe(self, address: str):
        try:
            record = ProbeRecord(address=address)
            for _ in range(self.attempts):
                record.add_attempt(self.pinger.ping(address, self.port, self.timeout))

            logger.debug(
                "Probe completed: address=%s, received=%d/%d",
                address,
                record.attempts_received,
                record.attempts_sent,
            )
            self.signals.record_ready.emit(record)

        except Exception as e:
            logger.exception("Worker exception: address=%s, error=%s", address, str(e))
            self.signals.error.emit(address, str(e))
