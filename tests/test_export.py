"""Tests for CSV export and re-import."""

import pytest

from cfst.models import MB, ProbeRecord
from cfst.results import CSV_HEADER, export_csv, format_row, read_csv


def make_record(address, outcomes, speed_mb=None):
    record = ProbeRecord(address=address)
    for rtt in outcomes:
        record.add_attempt(rtt)
    if speed_mb is not None:
        record.download_speed = speed_mb * MB
    return record


class TestExportCsv:
    """Test the result file format."""

    def test_header_and_rows(self, tmp_path):
        path = tmp_path / "result.csv"
        records = [
            make_record("104.16.1.1", [10.0, 20.0, 30.0, 40.0], speed_mb=12.25),
            make_record("104.16.1.2", [50.0, None, 70.0, None]),
        ]

        assert export_csv(records, str(path))

        lines = path.read_text(encoding="utf-8-sig").splitlines()
        assert lines[0] == ",".join(CSV_HEADER)
        assert lines[0] == "IP,发送,成功,丢包率,延迟,速度(MB/s)"
        assert lines[1] == "104.16.1.1,4,4,0.00,25.00,12.25"
        assert lines[2] == "104.16.1.2,4,2,0.50,60.00,0.00"

    def test_written_with_bom(self, tmp_path):
        path = tmp_path / "result.csv"
        export_csv([], str(path))

        assert path.read_bytes().startswith(b"\xef\xbb\xbf")

    def test_empty_path_disables_export(self, tmp_path):
        assert export_csv([make_record("1.1.1.1", [1.0])], "") is False
        assert list(tmp_path.iterdir()) == []

    def test_ipv6_row(self):
        row = format_row(make_record("2606:4700::1", [100.0]))
        assert row[0] == "2606:4700::1"


class TestReadCsv:
    """Test re-parsing an exported file."""

    def test_reparse_recovers_values(self, tmp_path):
        path = tmp_path / "result.csv"
        records = [
            make_record("104.16.1.1", [10.0, 20.0, 30.0, 40.0], speed_mb=6.5),
            make_record("104.16.1.2", [12.5, None, 13.25, None], speed_mb=3.0),
            make_record("104.16.1.3", [99.0]),
        ]
        export_csv(records, str(path))

        loaded = read_csv(str(path))

        assert [r.address for r in loaded] == [r.address for r in records]
        for original, parsed in zip(records, loaded):
            assert parsed.attempts_sent == original.attempts_sent
            assert parsed.attempts_received == original.attempts_received
            assert parsed.average_delay == pytest.approx(original.average_delay, abs=0.01)
            assert parsed.download_speed_mb == pytest.approx(original.download_speed_mb, abs=0.01)
        assert loaded[2].download_speed is None

    def test_rejects_foreign_header(self, tmp_path):
        path = tmp_path / "other.csv"
        path.write_text("a,b,c\n1,2,3\n", encoding="utf-8")

        with pytest.raises(ValueError):
            read_csv(str(path))
