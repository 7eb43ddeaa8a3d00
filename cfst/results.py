"""Delay filtering, result ordering and CSV export."""

import csv
import logging
from collections.abc import Iterable

from cfst.models import MB, ProbeRecord

logger = logging.getLogger(__name__)

CSV_HEADER = ["IP", "发送", "成功", "丢包率", "延迟", "速度(MB/s)"]


def filter_by_delay(
    records: Iterable[ProbeRecord], min_delay_ms: float, max_delay_ms: float
) -> list[ProbeRecord]:
    """Keep reachable records with min_delay_ms < average delay <= max_delay_ms.

    Records with no successful attempt have no delay and are always dropped.
    """
    return [
        record
        for record in records
        if record.attempts_received > 0
        and min_delay_ms < record.average_delay <= max_delay_ms
    ]


def sort_by_latency(records: Iterable[ProbeRecord]) -> list[ProbeRecord]:
    """Stable sort by loss rate, then average delay, both ascending.

    Zero-loss addresses come first, so a reliable but slightly slower address
    is preferred over a faster lossy one.
    """
    return sorted(records, key=lambda r: (r.loss_rate, r.average_delay))


def sort_by_throughput(records: Iterable[ProbeRecord]) -> list[ProbeRecord]:
    """Stable sort by download speed, descending; untested records count as 0."""
    return sorted(records, key=lambda r: r.download_speed or 0.0, reverse=True)


def format_row(record: ProbeRecord) -> list[str]:
    """Format one record as the exported/displayed column values."""
    return [
        record.address,
        str(record.attempts_sent),
        str(record.attempts_received),
        f"{record.loss_rate:.2f}",
        f"{record.average_delay:.2f}",
        f"{record.download_speed_mb:.2f}",
    ]


def export_csv(records: Iterable[ProbeRecord], path: str) -> bool:
    """Write records to a CSV file in their current order.

    The file is UTF-8 with a BOM so spreadsheet software picks up the header.

    Args:
        records: Ordered result set
        path: Output file; an empty path disables export

    Returns:
        True if a file was written
    """
    if not path:
        return False

    count = 0
    with open(path, "w", newline="", encoding="utf-8-sig") as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(CSV_HEADER)
        for record in records:
            writer.writerow(format_row(record))
            count += 1

    logger.info("Exported %d results to %s", count, path)
    return True


def read_csv(path: str) -> list[ProbeRecord]:
    """Load records from a file written by export_csv.

    Per-attempt samples are not exported; each received attempt gets the
    exported average delay, which preserves the average. A speed of 0.00
    reads back as untested.
    """
    records = []
    with open(path, newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.reader(csvfile)
        header = next(reader, None)
        if header != CSV_HEADER:
            raise ValueError(f"Unexpected CSV header in {path}: {header}")

        for row in reader:
            if not row:
                continue
            address, sent, received, _loss, delay, speed = row
            received_count = int(received)
            speed_mb = float(speed)
            records.append(
                ProbeRecord(
                    address=address,
                    attempts_sent=int(sent),
                    attempts_received=received_count,
                    rtt_samples=[float(delay)] * received_count,
                    download_speed=speed_mb * MB if speed_mb > 0 else None,
                )
            )
    return records
