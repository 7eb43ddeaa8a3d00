"""Background check for a newer release."""

import logging
import threading

import requests

logger = logging.getLogger(__name__)

UPDATE_URL = "https://api.xiuer.pw/ver/cloudflarespeedtest.txt"
UPDATE_TIMEOUT = 10.0


class UpdateChecker:
    """Fetches the latest version string; any failure is ignored."""

    def __init__(self, current_version: str, url: str = UPDATE_URL, timeout: float = UPDATE_TIMEOUT):
        self.current_version = current_version
        self.url = url
        self.timeout = timeout
        self.new_version: str | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Run the check on a daemon thread so it never delays the run."""
        self._thread = threading.Thread(target=self.check, name="update-check", daemon=True)
        self._thread.start()

    def check(self) -> str | None:
        """Fetch the remote version and remember it when it differs from ours."""
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.debug("Update check failed: %s", e)
            return None

        latest = response.text.strip()
        if latest and latest != self.current_version:
            self.new_version = latest
        return self.new_version
