"""
Rate limiting interceptor to stop notification floods from a single source
"""

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Optional, Union
import fnmatch
import logging

from .base import NotificationInterceptor
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

TIME_UNITS = {
    'second': 1,
    'minute': 60,
    'hour': 3600,
    'day': 86400,
}


def _prune(timestamps: Deque[float], cutoff: float) -> None:
    while timestamps and timestamps[0] <= cutoff:
        timestamps.popleft()


@dataclass
class RateLimit:
    """Rate limit configuration"""
    max_calls: int
    window_seconds: float

    @classmethod
    def parse(cls, spec: Union[str, Dict[str, Any]]) -> 'RateLimit':
        """
        Parse a limit given as ``{"max_calls": N, "window_seconds": S}``
        or as ``"N/unit"``

        Raises:
            ConfigurationError: if the limit cannot be parsed
        """
        if isinstance(spec, dict):
            return cls(
                max_calls=int(spec.get('max_calls', 60)),
                window_seconds=float(spec.get('window_seconds', 60))
            )

        if isinstance(spec, str):
            parts = spec.split('/')
            if len(parts) == 2 and parts[0].strip().isdigit():
                unit = parts[1].strip().lower().rstrip('s')
                if unit in TIME_UNITS:
                    return cls(max_calls=int(parts[0]), window_seconds=TIME_UNITS[unit])

        raise ConfigurationError(f"Invalid rate limit: {spec!r}")


class RateLimitInterceptor(NotificationInterceptor):
    """
    Sliding-window rate limiter keyed by notification identifier

    Requests over the limit are discarded. Limits can be overridden per
    identifier (fnmatch patterns allowed) under ``limits``.
    """

    name = "rate_limit"

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        super().__init__(config)

        if 'limit' in self.config:
            self.default_limit = RateLimit.parse(self.config['limit'])
        else:
            self.default_limit = RateLimit.parse({
                'max_calls': self.config.get('max_calls', 60),
                'window_seconds': self.config.get('window_seconds', 60),
            })

        self.limits = {
            pattern: RateLimit.parse(spec)
            for pattern, spec in self.config.get('limits', {}).items()
        }

        self._clock = clock
        self._counters: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

        # Idle identifiers are swept once per longest window
        self._sweep_interval = max(
            [self.default_limit.window_seconds]
            + [limit.window_seconds for limit in self.limits.values()]
        )
        self._last_sweep = clock()

    def limit_for(self, identifier: str) -> RateLimit:
        """Find the limit that applies to an identifier"""
        if identifier in self.limits:
            return self.limits[identifier]

        for pattern, limit in self.limits.items():
            if fnmatch.fnmatchcase(identifier, pattern):
                return limit

        return self.default_limit

    def process(self, request: Any, message: Any) -> bool:
        identifier = getattr(request, 'identifier', '') or ''
        limit = self.limit_for(identifier)
        now = self._clock()

        with self._lock:
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            timestamps = self._counters.get(identifier, deque())
            _prune(timestamps, now - limit.window_seconds)

            if len(timestamps) >= limit.max_calls:
                if not timestamps:
                    self._counters.pop(identifier, None)
                return False

            timestamps.append(now)
            self._counters[identifier] = timestamps
            return True

    def _sweep(self, now: float) -> None:
        """Drop counters whose timestamps have all left their window"""
        for identifier in list(self._counters):
            timestamps = self._counters[identifier]
            _prune(timestamps, now - self.limit_for(identifier).window_seconds)
            if not timestamps:
                del self._counters[identifier]
        self._last_sweep = now

    def get_usage_stats(self) -> Dict[str, Dict[str, Any]]:
        """Get rate limit usage per identifier"""
        now = self._clock()
        stats = {}

        with self._lock:
            for identifier, timestamps in self._counters.items():
                limit = self.limit_for(identifier)
                cutoff = now - limit.window_seconds
                current = sum(1 for t in timestamps if t > cutoff)
                stats[identifier] = {
                    'current': current,
                    'limit': limit.max_calls,
                    'window': limit.window_seconds,
                    'usage_percent': (current / limit.max_calls) * 100 if limit.max_calls else 100.0
                }

        return stats

    def reset_limits(self, identifier: Optional[str] = None) -> None:
        """Reset rate limit counters"""
        with self._lock:
            if identifier:
                self._counters.pop(identifier, None)
            else:
                self._counters.clear()
        logger.info(f"Reset rate limit counters for {identifier or 'all identifiers'}")
