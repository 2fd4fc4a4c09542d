"""
Root test configuration for all tests.

Isolates every test from the developer's environment, the cached settings,
the shared rate limiter and the process-wide mapping resolver.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio

from autotask_mcp.api_helpers.rate_limiter import get_shared_rate_limiter
from autotask_mcp.config import Settings, get_settings
from autotask_mcp.mapping import reset_mapping_resolver

TEST_API_URL = "https://webservices.example.test/atservicesrest/v1.0"

_SETTINGS_ENV_VARS = (
    "AUTOTASK_USERNAME",
    "AUTOTASK_SECRET",
    "AUTOTASK_INTEGRATION_CODE",
    "AUTOTASK_API_URL",
    "AUTOTASK_ZONE_LOOKUP_URL",
    "REQUEST_TIMEOUT",
    "MAX_RETRIES",
    "RETRY_DELAY",
    "RATE_LIMIT_MIN_INTERVAL",
    "RATE_LIMIT_MAX_PER_MINUTE",
    "MAPPING_CACHE_TTL_SECONDS",
    "COMPANY_CACHE_PAGE_SIZE",
    "RESOURCE_CACHE_PAGE_SIZE",
    "ENHANCE_RESULTS",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear settings env vars, cached settings and the shared rate limiter."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    get_shared_rate_limiter.cache_clear()
    yield
    get_settings.cache_clear()
    get_shared_rate_limiter.cache_clear()


@pytest_asyncio.fixture(autouse=True)
async def shared_resolver_reset() -> AsyncGenerator[None, None]:
    """Tear down the process-wide mapping resolver and its warm-up task."""
    yield
    await reset_mapping_resolver()


@pytest.fixture
def settings() -> Settings:
    """Settings with credentials, a fixed endpoint and no client-side waiting."""
    return Settings(
        _env_file=None,
        autotask_username="api-user@example.test",
        autotask_secret="secret",
        autotask_integration_code="INTEGRATION",
        autotask_api_url=TEST_API_URL,
        max_retries=3,
        retry_delay=0,
        rate_limit_min_interval=0,
    )
