"""Tests for the cfst command line interface."""

import logging
from unittest.mock import patch

import pytest

from cfst import __version__
from cfst.cli import build_parser, config_from_args, main
from cfst.results import CSV_HEADER, read_csv


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    """Use simulated collectors and no real update check."""
    monkeypatch.setenv("CFST_COLLECTOR", "fake")
    monkeypatch.delenv("CFST_LOG_LEVEL", raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    with patch("cfst.cli.UpdateChecker") as checker_cls:
        checker_cls.return_value.new_version = None
        checker_cls.return_value.check.return_value = None
        yield checker_cls
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def ip_file(tmp_path):
    path = tmp_path / "ip.txt"
    path.write_text("104.16.0.0/30\n172.64.0.0/30\n", encoding="utf-8")
    return str(path)


class TestParser:
    """Test flag parsing into SpeedTestConfig."""

    def test_defaults(self):
        config = config_from_args(build_parser().parse_args([]))

        assert config.routines == 200
        assert config.ping_times == 4
        assert config.ip_file == "ip.txt"
        assert config.output == "result.csv"

    def test_all_flags(self):
        args = build_parser().parse_args(
            [
                "-n", "500", "-t", "2", "-tp", "2053", "-dn", "10", "-dt", "5",
                "-url", "https://example.com/100mb.bin", "-tl", "200", "-tll", "40",
                "-sl", "5", "-p", "0", "-f", "cf.txt", "-o", "", "-dd", "-allip",
            ]
        )
        config = config_from_args(args)

        assert config.routines == 500
        assert config.ping_times == 2
        assert config.tcp_port == 2053
        assert config.test_count == 10
        assert config.download_time == 5.0
        assert config.url == "https://example.com/100mb.bin"
        assert config.max_delay_ms == 200
        assert config.min_delay_ms == 40
        assert config.min_speed == 5.0
        assert config.print_num == 0
        assert config.ip_file == "cf.txt"
        assert config.output == ""
        assert config.disable_download
        assert config.test_all
        assert not config.ipv6

    def test_ipv6_flag(self):
        assert config_from_args(build_parser().parse_args(["-ipv6"])).ipv6

    def test_routines_capped(self):
        assert config_from_args(build_parser().parse_args(["-n", "5000"])).routines == 1000


class TestMain:
    """Test complete runs with simulated collectors."""

    def test_run_writes_result_file(self, tmp_path, ip_file, capsys):
        output = tmp_path / "result.csv"

        status = main(["-f", ip_file, "-o", str(output), "-allip", "-t", "2", "-dn", "3"])

        assert status == 0
        lines = output.read_text(encoding="utf-8-sig").splitlines()
        assert lines[0] == ",".join(CSV_HEADER)
        assert "result.csv" in capsys.readouterr().out

    def test_run_sorted_by_speed(self, tmp_path, ip_file):
        output = tmp_path / "result.csv"

        main(["-f", ip_file, "-o", str(output), "-allip", "-p", "0"])

        speeds = [r.download_speed_mb for r in read_csv(str(output))]
        assert speeds == sorted(speeds, reverse=True)

    def test_disable_download(self, tmp_path, ip_file):
        output = tmp_path / "result.csv"

        status = main(["-f", ip_file, "-o", str(output), "-allip", "-dd", "-p", "0"])

        assert status == 0
        records = read_csv(str(output))
        assert all(r.download_speed is None for r in records)
        keys = [(r.loss_rate, r.average_delay) for r in records]
        assert keys == sorted(keys)

    def test_no_output_file(self, tmp_path, ip_file, monkeypatch):
        monkeypatch.chdir(tmp_path)

        status = main(["-f", ip_file, "-o", "", "-dd", "-p", "5"])

        assert status == 0
        assert not (tmp_path / "result.csv").exists()

    def test_missing_ip_file_is_fatal(self, tmp_path, capsys):
        output = tmp_path / "result.csv"

        status = main(["-f", str(tmp_path / "missing.txt"), "-o", str(output)])

        assert status == 1
        assert not output.exists()
        assert "[错误]" in capsys.readouterr().err

    def test_empty_ip_file_is_fatal(self, tmp_path):
        path = tmp_path / "ip.txt"
        path.write_text("", encoding="utf-8")

        assert main(["-f", str(path), "-o", str(tmp_path / "r.csv")]) == 1

    def test_version(self, capsys, offline):
        status = main(["-v"])

        assert status == 0
        assert __version__ in capsys.readouterr().out
        offline.return_value.check.assert_called_once()
