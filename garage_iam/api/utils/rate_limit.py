"""
Per-IP request limits for public invite endpoints.

Counters live in process memory, one limiter per application instance.
"""

import logging
import math
import time
from typing import Optional

from fastapi import Request, status
from limits import RateLimitItemPerMinute
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from garage_iam.api.error import ClientError
from garage_iam.libs.result import Error

logger = logging.getLogger(__name__)


class IpRateLimiter:
    """Fixed-window counter keyed by client IP"""

    def __init__(self, max_requests: int, window_minutes: int, namespace: str):
        self.item = RateLimitItemPerMinute(max_requests, window_minutes, namespace=namespace)
        self.strategy = FixedWindowRateLimiter(MemoryStorage())

    def hit(self, key: str) -> bool:
        """Count a request; False once the window's quota is used up"""
        return self.strategy.hit(self.item, key)

    def retry_after_seconds(self, key: str) -> int:
        reset_time, _ = self.strategy.get_window_stats(self.item, key)
        return max(1, math.ceil(reset_time - time.time()))


def client_ip(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy, else the peer address"""
    forwarded: Optional[str] = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


async def limit_invite_accept(request: Request):
    """
    Dependency guarding invite acceptance against verification-token guessing.

    Raises:
        ClientError: 429 RATE_LIMIT_EXCEEDED with a Retry-After header
    """
    limiter: IpRateLimiter = request.app.state.accept_limiter
    ip = client_ip(request)

    if not limiter.hit(ip):
        retry_after = limiter.retry_after_seconds(ip)
        logger.warning(f"Invite accept rate limit exceeded for {ip}")
        raise ClientError(
            Error(
                "RATE_LIMIT_EXCEEDED",
                "Too many attempts. Please try again later.",
                details={"retry_after_seconds": retry_after},
            ),
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            headers={"Retry-After": str(retry_after)},
        )
