"""
Simple in-memory rate limiter for public write endpoints.
Protects the contact form against spam and the admin password check
against brute force.
"""
import threading
import time
from collections import defaultdict
from typing import Dict, List, Tuple

from fastapi import Request

from portfolio_api.core.config import settings
from portfolio_api.core.errors import RateLimited
from portfolio_api.core.logging_config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    In-memory rate limiter using sliding window algorithm.
    State is per process; run a single worker or move this to Redis
    when scaling out.
    """

    def __init__(self):
        # {key: [timestamp, ...]} per scope
        self._requests: Dict[str, List[float]] = defaultdict(list)
        # {ip: lockout_until_timestamp}
        self._lockouts: Dict[str, float] = {}
        # {ip: failed_attempts}
        self._failed_attempts: Dict[str, int] = defaultdict(int)
        self._lock = threading.RLock()

    def _cleanup_old_requests(self, key: str, window_seconds: int, now: float):
        """Remove requests older than the window."""
        cutoff = now - window_seconds
        self._requests[key] = [ts for ts in self._requests[key] if ts > cutoff]

    def is_rate_limited(
        self,
        key: str,
        max_requests: int = 10,
        window_seconds: int = 60,
    ) -> Tuple[bool, int]:
        """
        Check if key is rate limited.
        Returns (is_limited, retry_after_seconds)
        """
        now = time.time()

        with self._lock:
            if key in self._lockouts:
                lockout_until = self._lockouts[key]
                if now < lockout_until:
                    return True, max(1, int(lockout_until - now))
                # Lockout expired
                del self._lockouts[key]
                self._failed_attempts.pop(key, None)

            self._cleanup_old_requests(key, window_seconds, now)
            requests = self._requests[key]

            if len(requests) >= max_requests:
                # Free again once the oldest counted request leaves the window
                retry_after = requests[-max_requests] + window_seconds - now
                return True, max(1, int(retry_after + 0.999))

        return False, 0

    def record_request(self, key: str):
        """Record a request for a key."""
        with self._lock:
            self._requests[key].append(time.time())

    def hit(self, key: str, max_requests: int, window_seconds: int) -> Tuple[bool, int]:
        """Check the limit and, if allowed, record the request in one step."""
        with self._lock:
            is_limited, retry_after = self.is_rate_limited(key, max_requests, window_seconds)
            if not is_limited:
                self.record_request(key)
        return is_limited, retry_after

    def record_failed_login(self, ip: str, lockout_threshold: int = 5, lockout_seconds: int = 300):
        """
        Record a failed admin password attempt.
        After threshold failures, lock out the IP.
        """
        with self._lock:
            self._failed_attempts[ip] += 1

            if self._failed_attempts[ip] >= lockout_threshold:
                self._lockouts[ip] = time.time() + lockout_seconds
                return True, lockout_seconds

            remaining = lockout_threshold - self._failed_attempts[ip]
            return False, remaining

    def record_successful_login(self, ip: str):
        """Reset failed attempts on successful login."""
        with self._lock:
            self._failed_attempts.pop(ip, None)
            self._lockouts.pop(ip, None)

    def clear(self):
        """Drop all tracked state."""
        with self._lock:
            self._requests.clear()
            self._lockouts.clear()
            self._failed_attempts.clear()


# Global rate limiter instance
rate_limiter = RateLimiter()


def get_client_ip(request: Request) -> str:
    """
    Client IP as seen by the socket.

    Forwarded headers are never read here. ProxyHeadersMiddleware rewrites
    request.client for peers listed in FORWARDED_ALLOW_IPS.
    """
    if request.client:
        return request.client.host

    return "unknown"


class RateLimit:
    """
    FastAPI dependency enforcing a sliding-window limit per client IP.

    Every call counts, whether or not the request later passes validation.

    Usage:
        @router.post("", dependencies=[Depends(contact_rate_limit)])
    """

    def __init__(
        self,
        scope: str,
        max_requests: int,
        window_seconds: int,
        error_message: str = "Too many requests. Please try again later.",
    ):
        self.scope = scope
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.error_message = error_message

    def __call__(self, request: Request) -> None:
        ip = get_client_ip(request)
        is_limited, retry_after = rate_limiter.hit(
            f"{self.scope}:{ip}", self.max_requests, self.window_seconds
        )
        if is_limited:
            logger.warning("Rate limit exceeded", scope=self.scope, client_ip=ip, retry_after=retry_after)
            raise RateLimited(retry_after, self.error_message)


class ContactRateLimit(RateLimit):
    """Contact form limit, read from settings on every call so it can be tuned at runtime."""

    def __init__(self):
        super().__init__(
            scope="contact",
            max_requests=settings.CONTACT_RATE_LIMIT_MAX,
            window_seconds=settings.CONTACT_RATE_LIMIT_WINDOW_SECONDS,
        )

    def __call__(self, request: Request) -> None:
        self.max_requests = settings.CONTACT_RATE_LIMIT_MAX
        self.window_seconds = settings.CONTACT_RATE_LIMIT_WINDOW_SECONDS
        minutes = max(1, self.window_seconds // 60)
        self.error_message = f"Too many submissions. Please try again in {minutes} minutes."
        super().__call__(request)


contact_rate_limit = ContactRateLimit()
