# interview_schedule/middleware/rate_limit.py
"""
Rate limiting for public routes.

Used as a route dependency, so each endpoint names its own action:

    @router.post("/book", dependencies=[Depends(rate_limit("publicBooking"))])

Clients are identified by IP (see utils.client_detect). Rejections raise
RateLimitError, rendered as 429 with Retry-After by the handler in main.py.
"""

import logging

from fastapi import Request, Response

from ..errors import RateLimitError
from ..services.rate_limit import get_rate_limit_config, get_rate_limiter
from ..utils.client_detect import get_client_ip

logger = logging.getLogger(__name__)


def rate_limit(action: str):
    config = get_rate_limit_config(action)

    def dependency(request: Request, response: Response) -> None:
        limiter = get_rate_limiter()
        ip = get_client_ip(request)

        result = limiter.check(action, ip, config)

        response.headers["X-RateLimit-Limit"] = str(config.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(result.reset_at_ms)

        if not result.success:
            retry_after = result.retry_after_seconds(limiter.clock())
            logger.warning(f"Rate limit exceeded: action={action}, ip={ip}, retry_after={retry_after}s")
            raise RateLimitError(reset_at_ms=result.reset_at_ms, retry_after=retry_after)

    dependency.__name__ = f"rate_limit_{action}"
    return dependency
