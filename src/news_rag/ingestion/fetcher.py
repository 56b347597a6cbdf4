"""HTTP fetcher with bounded, constant-delay retries."""

from __future__ import annotations

import logging
import time

import requests

logger = logging.getLogger(__name__)


class Fetcher:
    """Fetch sitemap and article bodies over HTTP.

    Unlike the embedding client, failures here never raise: after
    ``retries`` attempts spaced by a constant ``retry_delay`` the caller
    gets ``None`` and decides whether to skip the item.

    Parameters
    ----------
    user_agent:
        Value of the ``User-Agent`` header sent with every request.
    timeout:
        Per-request timeout in seconds.
    retries:
        Total number of attempts per URL.
    retry_delay:
        Seconds to wait between failed attempts.
    session:
        Optional pre-configured ``requests.Session`` (mainly for tests).
    """

    def __init__(
        self,
        user_agent: str,
        *,
        timeout: float = 20.0,
        retries: int = 3,
        retry_delay: float = 2.0,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        self.retries = max(1, retries)
        self.retry_delay = retry_delay
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    def get(self, url: str) -> str | None:
        """Return the response body for *url*, or ``None`` after all retries fail."""
        for attempt in range(1, self.retries + 1):
            try:
                resp = self._session.get(url, timeout=self.timeout)
                resp.raise_for_status()
                return resp.text
            except requests.RequestException as exc:
                logger.warning("Fetch failed (%d/%d) -> %s: %s", attempt, self.retries, url, exc)
                if attempt < self.retries:
                    time.sleep(self.retry_delay)

        logger.error("Could not fetch %s after %d retries", url, self.retries)
        return None

    def close(self) -> None:
        self._session.close()
