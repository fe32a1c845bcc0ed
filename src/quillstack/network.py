"""Cheap reachability check for the remote classification endpoint."""

import logging
import threading
import time
import urllib.error
import urllib.request
from collections.abc import Callable

logger = logging.getLogger(__name__)


class NetworkProbe:
    """HEAD request against a known URL, with the answer cached for ``ttl_seconds``.

    Any HTTP response, including an error status, counts as reachable.
    """

    def __init__(
        self,
        url: str,
        ttl_seconds: float = 30.0,
        timeout_seconds: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.ttl_seconds = ttl_seconds
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._checked_at: float | None = None
        self._reachable = False

    def _probe(self) -> bool:
        req = urllib.request.Request(self.url, method="HEAD")
        try:
            urllib.request.urlopen(req, timeout=self.timeout_seconds)
            return True
        except urllib.error.HTTPError:
            return True
        except (urllib.error.URLError, OSError, TimeoutError) as e:
            logger.info("Network probe to %s failed (%s)", self.url, e)
            return False

    def is_reachable(self) -> bool:
        with self._lock:
            now = self._clock()
            if self._checked_at is not None and now - self._checked_at < self.ttl_seconds:
                return self._reachable
            self._reachable = self._probe()
            self._checked_at = now
            return self._reachable
