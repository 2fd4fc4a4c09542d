"""Low-level Autotask REST client.

This module provides the HTTP client used by the tool catalog and the name
mapping caches. It is responsible for:
- Resolving the zone-specific REST base URL.
- Applying the shared, pre-request rate limiter.
- Retrying HTTP 429 responses and transient network failures.
- Following query pagination.
- Translating error statuses into ``AutotaskAPIError`` subclasses.

It returns decoded JSON and performs no business mapping.
"""

import asyncio
import json
import logging
from types import TracebackType
from typing import Any

import aiohttp

from autotask_mcp.api_helpers.rate_limiter import (
    ApiRateLimiter,
    get_shared_rate_limiter,
)
from autotask_mcp.api_helpers.retry import retry_with_backoff
from autotask_mcp.config import Settings, get_settings
from autotask_mcp.exceptions import (
    AutotaskAPIError,
    AutotaskConfigurationError,
    AutotaskError,
    AutotaskNetworkError,
    AutotaskNotFoundError,
    AutotaskRateLimitError,
    UnsupportedOperationError,
)

logger = logging.getLogger(__name__)

# Autotask caps a single query page at 500 records.
MAX_PAGE_SIZE = 500

# Queries must carry at least one filter; this one matches every record.
MATCH_ALL_FILTER: dict[str, Any] = {"op": "gte", "field": "id", "value": 0}


def eq(field: str, value: Any) -> dict[str, Any]:
    """Build an equality query filter."""
    return {"op": "eq", "field": field, "value": value}


def contains(field: str, value: str) -> dict[str, Any]:
    """Build a substring query filter."""
    return {"op": "contains", "field": field, "value": value}


def any_of(*filters: dict[str, Any]) -> dict[str, Any]:
    """Combine filters with OR."""
    return {"op": "or", "items": list(filters)}


def _error_message(body: str) -> str:
    """Extract the ``errors`` list from an Autotask error body when present."""
    try:
        data = json.loads(body)
    except ValueError:
        return body.strip()[:500]
    if isinstance(data, dict) and data.get("errors"):
        return "; ".join(str(e) for e in data["errors"])
    return body.strip()[:500]


def _error_for_status(status: int, body: str, url: str) -> AutotaskAPIError:
    message = _error_message(body)
    if status == 404:
        return AutotaskNotFoundError(message, url)
    if status == 405:
        return UnsupportedOperationError(message, url)
    if status == 429:
        return AutotaskRateLimitError(message, url)
    return AutotaskAPIError(status, message, url)


def _retry_after_seconds(headers: Any, default: float) -> float:
    value = headers.get("Retry-After") if headers else None
    if value is None:
        return default
    try:
        return max(0.0, float(value))
    except (TypeError, ValueError):
        return default


class AutotaskClient:
    """HTTP client for the Autotask REST API.

    Args:
        settings: Resolved settings. Defaults to ``get_settings()``.
        session: Optional aiohttp-style session that supports
            ``session.request(...)`` returning an async context manager. When
            omitted, a ``aiohttp.ClientSession`` is created lazily for the
            running event loop and owned by the client.
        limiter: Optional limiter override. Defaults to the process-wide
            shared limiter.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        session: Any | None = None,
        limiter: ApiRateLimiter | Any | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._session = session
        self._owns_session = session is None
        self._session_event_loop: asyncio.AbstractEventLoop | None = None
        self._limiter = limiter or get_shared_rate_limiter()
        self._base_url: str | None = self.settings.autotask_api_url

    # ------------------------------------------------------------------
    # Session and transport
    # ------------------------------------------------------------------

    def _get_session(self) -> Any:
        if not self._owns_session:
            return self._session

        current_loop = asyncio.get_running_loop()
        if self._session is None or self._session_event_loop != current_loop:
            # Sessions are bound to the loop that created them.
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout),
                headers={"Accept": "application/json"},
            )
            self._session_event_loop = current_loop
            logger.debug("Autotask session created for current event loop")
        return self._session

    def _auth_headers(self) -> dict[str, str]:
        missing = self.settings.missing_credentials()
        if missing:
            raise AutotaskConfigurationError(missing)
        return {
            "ApiIntegrationCode": self.settings.autotask_integration_code or "",
            "UserName": self.settings.autotask_username or "",
            "Secret": self.settings.autotask_secret or "",
            "Content-Type": "application/json",
        }

    async def _base(self) -> str:
        """Return the REST base URL, discovering the zone on first use."""
        if self._base_url:
            return self._base_url

        username = self.settings.autotask_username
        if not username:
            raise AutotaskConfigurationError(["AUTOTASK_USERNAME"])

        data = await self._request(
            "GET",
            self.settings.autotask_zone_lookup_url,
            params={"user": username},
            authenticated=False,
        )
        zone_url = data.get("url") if isinstance(data, dict) else None
        if not zone_url:
            raise AutotaskConfigurationError(["AUTOTASK_API_URL"])

        self._base_url = f"{zone_url.rstrip('/')}/v1.0"
        logger.info("Resolved Autotask zone endpoint: %s", self._base_url)
        return self._base_url

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        json_body: Any | None,
        params: dict[str, Any] | None,
    ) -> Any:
        session = self._get_session()
        max_retries = self.settings.max_retries

        attempt = 0
        while True:
            await self._limiter.acquire()
            async with session.request(
                method, url, json=json_body, params=params, headers=headers
            ) as response:
                if response.status == 429 and attempt < max_retries:
                    delay = _retry_after_seconds(
                        response.headers, self.settings.retry_delay * 5
                    )
                    logger.warning(
                        "Autotask rate limit hit (attempt %d/%d), waiting %.1fs",
                        attempt + 1,
                        max_retries + 1,
                        delay,
                    )
                    await asyncio.sleep(delay)
                    attempt += 1
                    continue

                if response.status >= 400:
                    body = await response.text()
                    raise _error_for_status(response.status, body, url)

                if response.status == 204:
                    return None
                return await response.json(content_type=None)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any | None = None,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """Perform one API call and return the decoded JSON body.

        ``path`` is either relative to the REST base URL or absolute (zone
        lookup, pagination links).

        Raises:
            AutotaskConfigurationError: Credentials or endpoint are missing.
            AutotaskAPIError: The API answered with an error status.
            AutotaskNetworkError: Transport failure after retries, or a body
                that is not valid JSON.
        """
        if path.startswith(("http://", "https://")):
            url = path
        else:
            url = f"{await self._base()}/{path.lstrip('/')}"
        headers = self._auth_headers() if authenticated else {}

        try:
            return await retry_with_backoff(
                lambda: self._send(method, url, headers, json_body, params),
                max_retries=self.settings.max_retries,
                retry_delay=self.settings.retry_delay,
                description=f"{method} {url}",
            )
        except AutotaskError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise AutotaskNetworkError(f"{method} {url} failed: {e}") from e

    # ------------------------------------------------------------------
    # Generic entity verbs
    # ------------------------------------------------------------------

    async def query(
        self,
        entity: str,
        filters: list[dict[str, Any]] | None = None,
        *,
        page_size: int | None = None,
    ) -> list[dict[str, Any]]:
        """Run an entity query and follow pagination.

        Args:
            entity: Entity collection name, e.g. ``"Companies"``.
            filters: Autotask filter expressions; defaults to match-all.
            page_size: Maximum number of records to return. ``None`` or a
                non-positive value fetches every page.

        Returns:
            Records in API order.
        """
        limit = page_size if page_size and page_size > 0 else None
        body = {
            "filter": list(filters) if filters else [MATCH_ALL_FILTER],
            "MaxRecords": min(limit or MAX_PAGE_SIZE, MAX_PAGE_SIZE),
        }

        records: list[dict[str, Any]] = []
        data = await self._request("POST", f"{entity}/query", json_body=body)
        while True:
            page = (data or {}).get("items") or []
            records.extend(page)
            if limit is not None and len(records) >= limit:
                return records[:limit]

            next_url = ((data or {}).get("pageDetails") or {}).get("nextPageUrl")
            if not next_url or not page:
                return records
            data = await self._request("GET", next_url)

    async def get(self, entity: str, entity_id: int) -> dict[str, Any] | None:
        """Fetch one record by id, or None if it does not exist."""
        try:
            data = await self._request("GET", f"{entity}/{entity_id}")
        except AutotaskNotFoundError:
            return None
        return (data or {}).get("item")

    async def get_child(
        self, parent: str, parent_id: int, child: str, child_id: int
    ) -> dict[str, Any] | None:
        """Fetch one child record, e.g. a note of a ticket."""
        try:
            data = await self._request(
                "GET", f"{parent}/{parent_id}/{child}/{child_id}"
            )
        except AutotaskNotFoundError:
            return None
        return (data or {}).get("item")

    async def create(self, entity: str, payload: dict[str, Any]) -> int | None:
        """Create a record and return its new id."""
        data = await self._request("POST", entity, json_body=payload)
        return (data or {}).get("itemId")

    async def create_child(
        self, parent: str, parent_id: int, child: str, payload: dict[str, Any]
    ) -> int | None:
        """Create a child record under a parent and return its new id."""
        data = await self._request(
            "POST", f"{parent}/{parent_id}/{child}", json_body=payload
        )
        return (data or {}).get("itemId")

    async def update(self, entity: str, payload: dict[str, Any]) -> int | None:
        """Patch a record; ``payload`` must carry its ``id``."""
        data = await self._request("PATCH", entity, json_body=payload)
        return (data or {}).get("itemId")

    # ------------------------------------------------------------------
    # Operations used by the name mapping caches
    # ------------------------------------------------------------------

    async def search_companies(
        self,
        *,
        search_term: str | None = None,
        is_active: bool | None = None,
        page_size: int | None = None,
    ) -> list[dict[str, Any]]:
        filters = []
        if search_term:
            filters.append(contains("companyName", search_term))
        if is_active is not None:
            filters.append(eq("isActive", is_active))
        return await self.query("Companies", filters, page_size=page_size)

    async def search_resources(
        self,
        *,
        search_term: str | None = None,
        is_active: bool | None = None,
        resource_type: int | None = None,
        page_size: int | None = None,
    ) -> list[dict[str, Any]]:
        filters = []
        if search_term:
            filters.append(
                any_of(
                    contains("firstName", search_term),
                    contains("lastName", search_term),
                    contains("email", search_term),
                )
            )
        if is_active is not None:
            filters.append(eq("isActive", is_active))
        if resource_type is not None:
            filters.append(eq("resourceType", resource_type))
        return await self.query("Resources", filters, page_size=page_size)

    async def get_resource(self, resource_id: int) -> dict[str, Any] | None:
        return await self.get("Resources", resource_id)

    async def test_connection(self) -> bool:
        """Return True if an authenticated query succeeds."""
        try:
            await self.query("Companies", page_size=1)
        except AutotaskError as e:
            logger.warning("Autotask connection test failed: %s", e)
            return False
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the owned HTTP session, if any."""
        if self._owns_session and self._session is not None:
            try:
                await self._session.close()
            except Exception:
                logger.debug("Ignoring error while closing session", exc_info=True)
            finally:
                self._session = None
                self._session_event_loop = None

    async def __aenter__(self) -> "AutotaskClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False
