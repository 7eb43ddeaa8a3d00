"""Tests for cfst.config.SpeedTestConfig."""

import dataclasses

import pytest

from cfst.config import SpeedTestConfig


class TestSpeedTestConfig:
    """Test defaults, immutability and normalization."""

    def test_defaults(self):
        config = SpeedTestConfig()

        assert config.routines == 200
        assert config.ping_times == 4
        assert config.tcp_port == 443
        assert config.ping_timeout == 1.0
        assert config.max_delay_ms == 9999
        assert config.min_delay_ms == 0
        assert config.download_time == 10
        assert config.test_count == 20
        assert config.min_speed == 0.0
        assert config.output == "result.csv"
        assert not config.disable_download

    def test_frozen(self):
        config = SpeedTestConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.routines = 10

    def test_valid_config_unchanged(self):
        config = SpeedTestConfig(routines=50, ping_times=1, test_count=5)
        assert config.normalized() == config

    def test_routines_capped(self):
        """Concurrency is bounded to protect constrained hosts."""
        assert SpeedTestConfig(routines=5000).normalized().routines == 1000

    def test_invalid_values_repaired(self, caplog):
        config = SpeedTestConfig(
            routines=0,
            ping_times=-1,
            tcp_port=70000,
            test_count=0,
            download_time=0,
            min_speed=-3,
            print_num=-1,
        ).normalized()

        assert config.routines == 200
        assert config.ping_times == 4
        assert config.tcp_port == 443
        assert config.test_count == 20
        assert config.download_time == 10
        assert config.min_speed == 0.0
        assert config.print_num == 0
        assert "routines" in caplog.text

    def test_empty_delay_window_rejected(self):
        with pytest.raises(ValueError):
            SpeedTestConfig(min_delay_ms=200, max_delay_ms=100).normalized()

    def test_empty_ip_file_rejected(self):
        with pytest.raises(ValueError):
            SpeedTestConfig(ip_file=" ").normalized()

    def test_bad_url_rejected(self):
        with pytest.raises(ValueError):
            SpeedTestConfig(url="ftp://example.com/file").normalized()

    def test_bad_url_ignored_when_download_disabled(self):
        config = SpeedTestConfig(url="", disable_download=True).normalized()
        assert config.disable_download
