"""Process-wide resolver of company and resource ids to display names.

The resolver owns one ``IdentifierCache`` per domain. Use
``get_mapping_resolver()`` to obtain the shared instance: the first call
constructs it under a lock and schedules a background warm-up of both caches
without waiting for it, so the instance is usable (and may miss) before the
caches are populated. ``reset_mapping_resolver()`` tears the instance down for
test isolation and shutdown.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any, Protocol

from autotask_mcp.config import Settings, get_settings

from .identifier_cache import DEFAULT_TTL_SECONDS, CacheDomain, IdentifierCache

logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    """The subset of ``AutotaskClient`` used to populate the caches."""

    async def search_companies(
        self, *, page_size: int | None = None
    ) -> list[dict[str, Any]]: ...

    async def search_resources(
        self, *, page_size: int | None = None
    ) -> list[dict[str, Any]]: ...

    async def get_resource(self, resource_id: int) -> dict[str, Any] | None: ...


def resource_display_name(resource: dict[str, Any]) -> str | None:
    """Return ``"<firstName> <lastName>"`` trimmed, or None if both are empty."""
    first = resource.get("firstName") or ""
    last = resource.get("lastName") or ""
    name = f"{first} {last}".strip()
    return name or None


class MappingResolver:
    """Resolve ids to names through per-domain caches.

    Company misses are never looked up individually, to keep the call volume
    against the API's rate limits bounded. Resource misses fall back to one
    direct fetch, unless the resource cache is empty, which means the
    Resources endpoint is unavailable on this instance.

    Args:
        client: Source of company and resource records.
        cache_ttl_seconds: Staleness threshold for both caches.
        company_page_size: Companies loaded per refresh.
        resource_page_size: Resources loaded per refresh.
        clock: Optional clock override passed to the caches.
    """

    def __init__(
        self,
        client: RecordSource,
        *,
        cache_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        company_page_size: int = 2000,
        resource_page_size: int = 2000,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._company_page_size = company_page_size
        self._resource_page_size = resource_page_size
        cache_kwargs: dict[str, Any] = {"ttl_seconds": cache_ttl_seconds}
        if clock is not None:
            cache_kwargs["clock"] = clock

        self._caches: dict[CacheDomain, IdentifierCache] = {
            CacheDomain.COMPANY: IdentifierCache(
                CacheDomain.COMPANY, self._load_companies, **cache_kwargs
            ),
            CacheDomain.RESOURCE: IdentifierCache(
                CacheDomain.RESOURCE,
                self._load_resources,
                empty_on_unsupported=True,
                **cache_kwargs,
            ),
        }
        self._background_tasks: set[asyncio.Task[None]] = set()

    @classmethod
    def from_settings(cls, client: RecordSource, settings: Settings) -> MappingResolver:
        return cls(
            client,
            cache_ttl_seconds=settings.mapping_cache_ttl_seconds,
            company_page_size=settings.company_cache_page_size,
            resource_page_size=settings.resource_cache_page_size,
        )

    def cache(self, domain: CacheDomain | str) -> IdentifierCache:
        return self._caches[CacheDomain(domain)]

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    async def _load_companies(self) -> dict[int, str]:
        companies = await self._client.search_companies(
            page_size=self._company_page_size
        )
        return {
            company["id"]: company["companyName"]
            for company in companies
            if isinstance(company.get("id"), int) and company.get("companyName")
        }

    async def _load_resources(self) -> dict[int, str]:
        resources = await self._client.search_resources(
            page_size=self._resource_page_size
        )
        entries: dict[int, str] = {}
        for resource in resources:
            name = resource_display_name(resource)
            if isinstance(resource.get("id"), int) and name:
                entries[resource["id"]] = name
        return entries

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_name(self, domain: CacheDomain | str, entity_id: int) -> str | None:
        """Return the display name for ``entity_id``, or None.

        Triggers a refresh of the queried domain when it is stale. Never
        raises.
        """
        try:
            domain = CacheDomain(domain)
            cache = self._caches[domain]
            if cache.is_stale():
                await cache.refresh()

            name = cache.lookup(entity_id)
            if name:
                return name

            if domain is CacheDomain.COMPANY:
                logger.debug(
                    "Company %s not in cache, returning None (direct lookup disabled)",
                    entity_id,
                )
                return None

            return await self._lookup_resource(cache, entity_id)
        except Exception:
            logger.warning(
                "Failed to resolve %s id %s", domain, entity_id, exc_info=True
            )
            return None

    async def _lookup_resource(
        self, cache: IdentifierCache, resource_id: int
    ) -> str | None:
        if len(cache) == 0:
            logger.debug(
                "Resource %s not found - Resources endpoint not available", resource_id
            )
            return None

        logger.debug("Resource %s not in cache, attempting direct lookup", resource_id)
        try:
            resource = await self._client.get_resource(resource_id)
        except Exception as e:
            logger.debug("Direct resource lookup failed for %s: %s", resource_id, e)
            return None

        name = resource_display_name(resource) if resource else None
        if name:
            cache.remember(resource_id, name)
        return name

    async def get_company_name(self, company_id: int) -> str | None:
        return await self.get_name(CacheDomain.COMPANY, company_id)

    async def get_resource_name(self, resource_id: int) -> str | None:
        return await self.get_name(CacheDomain.RESOURCE, resource_id)

    async def get_company_names(self, company_ids: Iterable[int]) -> list[str | None]:
        return list(
            await asyncio.gather(*(self.get_company_name(i) for i in company_ids))
        )

    async def get_resource_names(
        self, resource_ids: Iterable[int]
    ) -> list[str | None]:
        return list(
            await asyncio.gather(*(self.get_resource_name(i) for i in resource_ids))
        )

    def remember(self, domain: CacheDomain | str, entity_id: int, name: str) -> None:
        """Record a known name, e.g. after a create or rename."""
        self.cache(domain).remember(entity_id, name)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def preload(self) -> None:
        """Refresh both caches concurrently."""
        logger.info("Preloading mapping caches...")
        await asyncio.gather(*(cache.refresh() for cache in self._caches.values()))
        logger.info(
            "Mapping caches preloaded: %d companies, %d resources",
            len(self._caches[CacheDomain.COMPANY]),
            len(self._caches[CacheDomain.RESOURCE]),
        )

    def start_warm_up(self) -> asyncio.Task[None] | None:
        """Schedule ``preload()`` in the background and return its task.

        Returns None when no event loop is running; the caches then fill on
        first lookup.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, skipping cache warm-up")
            return None

        task = loop.create_task(self.preload(), name="mapping-cache-warm-up")
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task[None]) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Background cache warm-up failed: %s", error)

    def clear_cache(self, domain: CacheDomain | str | None = None) -> None:
        if domain is None:
            for cache in self._caches.values():
                cache.clear()
            return
        self.cache(domain).clear()

    def get_cache_stats(self) -> dict[str, dict[str, Any]]:
        return {
            domain.value: cache.stats().to_dict()
            for domain, cache in self._caches.items()
        }

    async def close(self) -> None:
        """Cancel pending background warm-up tasks."""
        tasks = list(self._background_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._background_tasks.clear()


# --- Process-wide instance ---

_instance_lock = threading.Lock()
_instance: MappingResolver | None = None


def get_mapping_resolver(
    client: RecordSource, settings: Settings | None = None
) -> MappingResolver:
    """Return the process-wide resolver, constructing it on first use.

    Construction happens once under a lock; every caller, including callers
    racing on first use, receives the same instance. The first caller also
    schedules the background warm-up, which is not awaited.

    Args:
        client: Record source used only when the instance is constructed.
        settings: Settings used only when the instance is constructed.
    """
    global _instance
    if _instance is not None:
        return _instance

    created: MappingResolver | None = None
    with _instance_lock:
        if _instance is None:
            created = MappingResolver.from_settings(client, settings or get_settings())
            _instance = created
        resolver = _instance

    if created is not None:
        logger.info("Mapping resolver created")
        created.start_warm_up()
    return resolver


async def reset_mapping_resolver() -> None:
    """Drop the process-wide resolver and cancel its background work."""
    global _instance
    with _instance_lock:
        resolver, _instance = _instance, None
    if resolver is not None:
        await resolver.close()
