"""Tests for cfst.models.ProbeRecord invariants."""

import math

import pytest

from cfst.models import MB, ProbeRecord


class TestProbeRecord:
    """Test ProbeRecord derived values and invariants."""

    def test_all_attempts_succeed(self):
        """Four successful attempts average their RTTs with no loss."""
        record = ProbeRecord(address="1.1.1.1")
        for rtt in [10.0, 20.0, 30.0, 40.0]:
            record.add_attempt(rtt)

        assert record.attempts_sent == 4
        assert record.attempts_received == 4
        assert record.average_delay == 25.0
        assert record.loss_rate == 0.0

    def test_mixed_attempts(self):
        """Lost attempts count as sent but contribute no sample."""
        record = ProbeRecord(address="1.0.0.1")
        for rtt in [50.0, None, 70.0, None]:
            record.add_attempt(rtt)

        assert record.attempts_sent == 4
        assert record.attempts_received == 2
        assert record.rtt_samples == [50.0, 70.0]
        assert record.average_delay == 60.0
        assert record.loss_rate == 0.5

    def test_no_successful_attempt_has_infinite_delay(self):
        """An unreachable address has no defined delay."""
        record = ProbeRecord(address="192.0.2.1")
        record.add_attempt(None)

        assert record.average_delay == math.inf
        assert record.loss_rate == 1.0

    def test_received_cannot_exceed_sent(self):
        with pytest.raises(ValueError):
            ProbeRecord(address="1.1.1.1", attempts_sent=1, attempts_received=2, rtt_samples=[1.0, 2.0])

    def test_samples_must_match_received(self):
        with pytest.raises(ValueError):
            ProbeRecord(address="1.1.1.1", attempts_sent=2, attempts_received=2, rtt_samples=[1.0])

    def test_untested_speed(self):
        """download_speed None means not tested and displays as zero."""
        record = ProbeRecord(address="1.1.1.1")

        assert record.download_speed is None
        assert record.download_speed_mb == 0.0

    def test_speed_in_megabytes(self):
        record = ProbeRecord(address="1.1.1.1", download_speed=5 * MB)

        assert record.download_speed_mb == 5.0
