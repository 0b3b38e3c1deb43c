"""HTTP session factory and per-host rate limiting.

All REST-backed collectors and observation clients share the same retry
policy: urllib3 ``Retry`` with exponential backoff on 429 and 5xx responses,
GET/HEAD/OPTIONS only. Other 4xx responses are returned as-is so callers can
raise on them without retrying.
"""

import threading
import time
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from econ_timeline.shared.config import Config

RETRY_STATUS_CODES = [429, 500, 502, 503, 504]


def create_session(
    max_retries: int | None = None,
    backoff_factor: float | None = None,
    user_agent: str | None = None,
) -> requests.Session:
    """Create a requests session with retry logic.

    Args:
        max_retries: Retry ceiling (defaults to Config.MAX_RETRIES).
        backoff_factor: urllib3 backoff factor (defaults to Config.RETRY_BACKOFF).
        user_agent: User-Agent header (defaults to Config.USER_AGENT).

    Returns:
        Configured requests.Session with automatic retries.
    """
    session = requests.Session()

    # Configure retry strategy
    retry_strategy = Retry(
        total=Config.MAX_RETRIES if max_retries is None else max_retries,
        backoff_factor=Config.RETRY_BACKOFF if backoff_factor is None else backoff_factor,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=["HEAD", "GET", "OPTIONS"],
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update(
        {
            "User-Agent": user_agent or Config.USER_AGENT,
            "Accept": "application/json, text/html;q=0.9",
        }
    )
    return session


class TokenBucket:
    """Thread-safe token bucket.

    Tokens refill continuously at ``rate`` per second up to ``capacity``.
    ``acquire()`` blocks until a token is available.
    """

    def __init__(self, rate: float, capacity: float | None = None) -> None:
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        self.rate = rate
        self.capacity = capacity if capacity is not None else max(1.0, rate)
        self._tokens = self.capacity
        self._last_refill = time.monotonic()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._last_refill = now
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)

    def try_acquire(self) -> bool:
        """Take a token if one is available, without blocking."""
        with self._lock:
            self._refill()
            if self._tokens >= 1:
                self._tokens -= 1
                return True
            return False

    def acquire(self) -> None:
        """Block until a token has been taken."""
        while True:
            with self._lock:
                self._refill()
                if self._tokens >= 1:
                    self._tokens -= 1
                    return
                wait = (1 - self._tokens) / self.rate
            time.sleep(wait)


_limiters: dict[str, TokenBucket] = {}
_limiters_lock = threading.Lock()


def get_rate_limiter(url_or_host: str, rate: float) -> TokenBucket:
    """Return the shared token bucket for an upstream host.

    The first caller for a host fixes its rate; later callers share it.

    Example:
        >>> limiter = get_rate_limiter("https://api.stlouisfed.org/fred", 2.0)
        >>> limiter.acquire()
    """
    host = urlparse(url_or_host).netloc or url_or_host
    with _limiters_lock:
        limiter = _limiters.get(host)
        if limiter is None:
            limiter = TokenBucket(rate)
            _limiters[host] = limiter
        return limiter


def reset_rate_limiters() -> None:
    """Forget all shared limiters."""
    with _limiters_lock:
        _limiters.clear()
