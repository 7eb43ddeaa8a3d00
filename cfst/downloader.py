"""Downloader abstraction and HTTP downloader for cfst."""

import ipaddress
import logging
import time
from typing import Protocol
from urllib.parse import urlsplit, urlunsplit

import requests
import urllib3
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
USER_AGENT = "Mozilla/5.0 (compatible; cfst)"


class Downloader(Protocol):
    """Protocol defining one time-bounded download through a candidate address."""

    def download(self, address: str, url: str, time_budget: float) -> tuple[int, float]:
        """Return (bytes received, elapsed seconds)."""
        ...


class HostPinningAdapter(HTTPAdapter):
    """HTTPS adapter that talks to an IP literal but verifies the real host name.

    The request URL carries the candidate address; TLS SNI and certificate
    matching use ``hostname`` instead.
    """

    def __init__(self, hostname: str, **kwargs):
        self.hostname = hostname
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        kwargs["server_hostname"] = self.hostname
        kwargs["assert_hostname"] = self.hostname
        super().init_poolmanager(*args, **kwargs)


def pin_url(url: str, address: str) -> str:
    """Replace the host of url with address, keeping scheme, port, path and query."""
    parts = urlsplit(url)
    host = address
    if ipaddress.ip_address(address).version == 6:
        host = f"[{address}]"
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, host, parts.path or "/", parts.query, ""))


class HttpDownloader:
    """Downloader that streams an HTTP(S) resource from a specific address.

    The transfer stops when the time budget runs out or the body ends,
    whichever comes first. Connection failures, non-200 responses and
    mid-stream errors are absorbed: the bytes received so far are reported
    and nothing is raised.
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        self.chunk_size = chunk_size

    def download(self, address: str, url: str, time_budget: float) -> tuple[int, float]:
        """Download url through address for at most time_budget seconds.

        Args:
            address: Candidate IP address to connect to
            url: Download target; its host name is sent as Host and SNI
            time_budget: Maximum transfer time in seconds

        Returns:
            Tuple of (bytes received, elapsed seconds)
        """
        parts = urlsplit(url)
        headers = {"Host": parts.netloc.rpartition("@")[2], "User-Agent": USER_AGENT}
        received = 0

        with requests.Session() as session:
            session.mount("https://", HostPinningAdapter(parts.hostname))
            start = time.perf_counter()
            try:
                with session.get(
                    pin_url(url, address),
                    headers=headers,
                    stream=True,
                    timeout=(time_budget, time_budget),
                    allow_redirects=False,
                ) as response:
                    if response.status_code != 200:
                        logger.debug(
                            "Download rejected: address=%s, status=%d",
                            address,
                            response.status_code,
                        )
                    else:
                        received = self._read_body(address, response, start + time_budget)
            except requests.RequestException as e:
                logger.debug("Download failed: address=%s, error=%s", address, e)
            elapsed = time.perf_counter() - start

        logger.debug(
            "Download finished: address=%s, bytes=%d, elapsed=%.2fs", address, received, elapsed
        )
        return received, elapsed

    def _read_body(self, address: str, response: requests.Response, deadline: float) -> int:
        """Count body bytes until deadline (a perf_counter value) or end of body.

        Every socket read waits at most for the time left, and returns as
        soon as any data arrives, so a slow peer cannot hold the transfer
        past the deadline.
        """
        received = 0
        sock = getattr(response.raw.connection, "sock", None)
        try:
            while True:
                remaining = deadline - time.perf_counter()
                if remaining <= 0:
                    break
                if sock is not None:
                    sock.settimeout(remaining)
                chunk = response.raw.read1(self.chunk_size)
                if not chunk:
                    break
                received += len(chunk)
        except urllib3.exceptions.ReadTimeoutError:
            logger.debug("Download budget spent waiting for data: address=%s", address)
        except urllib3.exceptions.HTTPError as e:
            logger.debug("Download interrupted: address=%s, error=%s", address, e)
        return received
