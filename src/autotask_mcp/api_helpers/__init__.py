"""HTTP access to the Autotask REST API."""

from .autotask_client import AutotaskClient
from .rate_limiter import ApiRateLimiter, get_shared_rate_limiter

__all__ = ["ApiRateLimiter", "AutotaskClient", "get_shared_rate_limiter"]
