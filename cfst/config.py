"""Run configuration for cfst."""

import dataclasses
import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

DEFAULT_ROUTINES = 200
MAX_ROUTINES = 1000
DEFAULT_PING_TIMES = 4
DEFAULT_TCP_PORT = 443
DEFAULT_PING_TIMEOUT = 1.0  # seconds per connection attempt
DEFAULT_MAX_DELAY_MS = 9999.0
DEFAULT_MIN_DELAY_MS = 0.0
DEFAULT_DOWNLOAD_TIME = 10.0
DEFAULT_TEST_COUNT = 20
DEFAULT_URL = "https://cf.xiu2.xyz/Github/CloudflareSpeedTest.png"
DEFAULT_IP_FILE = "ip.txt"
DEFAULT_OUTPUT = "result.csv"
DEFAULT_PRINT_NUM = 20


@dataclass(frozen=True)
class SpeedTestConfig:
    """Immutable settings shared by every stage of a run.

    Built once by the CLI and handed to each component explicitly, so the
    probing engine can be exercised with synthetic configurations.
    """

    routines: int = DEFAULT_ROUTINES
    ping_times: int = DEFAULT_PING_TIMES
    tcp_port: int = DEFAULT_TCP_PORT
    ping_timeout: float = DEFAULT_PING_TIMEOUT
    max_delay_ms: float = DEFAULT_MAX_DELAY_MS
    min_delay_ms: float = DEFAULT_MIN_DELAY_MS
    download_time: float = DEFAULT_DOWNLOAD_TIME
    test_count: int = DEFAULT_TEST_COUNT
    min_speed: float = 0.0  # MB/s
    url: str = DEFAULT_URL
    disable_download: bool = False
    ipv6: bool = False
    test_all: bool = False
    ip_file: str = DEFAULT_IP_FILE
    output: str = DEFAULT_OUTPUT
    print_num: int = DEFAULT_PRINT_NUM

    def normalized(self) -> "SpeedTestConfig":
        """Return a copy with out-of-range values repaired.

        Each repair is logged as a warning. Values that cannot be repaired
        raise ValueError.

        Raises:
            ValueError: empty ip file path, unusable URL, or an empty delay window
        """
        changes = {}

        def repair(name, value, reason):
            logger.warning(
                "Invalid %s=%r (%s), using %r", name, getattr(self, name), reason, value
            )
            changes[name] = value

        if self.routines <= 0:
            repair("routines", DEFAULT_ROUTINES, "must be positive")
        elif self.routines > MAX_ROUTINES:
            repair("routines", MAX_ROUTINES, f"at most {MAX_ROUTINES}")
        if self.ping_times <= 0:
            repair("ping_times", DEFAULT_PING_TIMES, "must be positive")
        if not 1 <= self.tcp_port <= 65535:
            repair("tcp_port", DEFAULT_TCP_PORT, "must be 1-65535")
        if self.ping_timeout <= 0:
            repair("ping_timeout", DEFAULT_PING_TIMEOUT, "must be positive")
        if self.max_delay_ms < 0:
            repair("max_delay_ms", DEFAULT_MAX_DELAY_MS, "must not be negative")
        if self.min_delay_ms < 0:
            repair("min_delay_ms", DEFAULT_MIN_DELAY_MS, "must not be negative")
        if self.download_time <= 0:
            repair("download_time", DEFAULT_DOWNLOAD_TIME, "must be positive")
        if self.test_count <= 0:
            repair("test_count", DEFAULT_TEST_COUNT, "must be positive")
        if self.min_speed < 0:
            repair("min_speed", 0.0, "must not be negative")
        if self.print_num < 0:
            repair("print_num", 0, "must not be negative")

        config = dataclasses.replace(self, **changes)

        if config.max_delay_ms <= config.min_delay_ms:
            raise ValueError(
                f"max delay ({config.max_delay_ms} ms) must be greater than "
                f"min delay ({config.min_delay_ms} ms)"
            )
        if not config.ip_file.strip():
            raise ValueError("IP range file path cannot be empty")
        if not config.disable_download:
            parts = urlsplit(config.url)
            if parts.scheme not in ("http", "https") or not parts.hostname:
                raise ValueError(f"Download URL must be an http(s) URL: {config.url!r}")

        return config
