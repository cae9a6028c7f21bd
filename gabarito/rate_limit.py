"""
Sliding-window rate limiter for the auth endpoints.

One limiter is created per app in ``create_app`` and kept on
``app.extensions``. Counters live in process memory, so limits are
per worker and best-effort.
"""
import logging
import threading
import time
from collections import defaultdict, deque
from functools import wraps

from flask import current_app, request

from .errors import RateLimited

logger = logging.getLogger(__name__)


class RateLimiter:
    def __init__(self, max_requests, window_seconds, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits = defaultdict(deque)
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _sweep(self, now):
        """Forget clients with no attempt inside the window."""
        stale = [key for key, hits in self._hits.items()
                 if not hits or now - hits[-1] >= self.window_seconds]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now

    def hit(self, key):
        """Record an attempt for ``key``. Returns False once the window is full."""
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            hits = self._hits[key]
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def __len__(self):
        with self._lock:
            return len(self._hits)

    def reset(self, key=None):
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


def client_key():
    """
    Identify the caller by socket address. Behind a reverse proxy set
    TRUSTED_PROXY_HOPS so ProxyFix rewrites remote_addr from X-Forwarded-For.
    """
    return request.remote_addr or 'unknown'


def rate_limited(scope):
    """Reject the view with 429 when the app's limiter refuses the caller."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            limiter = current_app.extensions.get('rate_limiter')
            if limiter is not None:
                key = f"{scope}:{client_key()}"
                if not limiter.hit(key):
                    logger.warning("Rate limit exceeded for %s", key)
                    raise RateLimited()
            return view(*args, **kwargs)
        return wrapped
    return decorator
