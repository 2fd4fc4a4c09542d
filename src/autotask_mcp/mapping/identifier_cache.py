"""Per-domain id-to-name cache with TTL staleness and single-flight refresh."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from autotask_mcp.exceptions import UnsupportedOperationError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60

Loader = Callable[[], Awaitable[dict[int, str]]]


class CacheDomain(str, Enum):
    """Identifier categories with their own cache."""

    COMPANY = "company"
    RESOURCE = "resource"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class CacheStats:
    """Snapshot of one domain cache."""

    count: int
    last_refreshed_at: datetime | None
    is_valid: bool
    refresh_in_flight: bool

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.last_refreshed_at is not None:
            data["last_refreshed_at"] = self.last_refreshed_at.isoformat()
        return data


class IdentifierCache:
    """Mapping from numeric id to display name for one domain.

    ``refresh()`` is single-flight: while one refresh is running, further
    calls return at once without waiting for it and without starting another.
    Readers may therefore see stale or empty entries during a refresh.

    A refresh never raises. Whatever its outcome, the domain is marked as
    refreshed so a failing endpoint is retried only after the TTL elapses.

    Args:
        domain: Domain this cache serves.
        loader: Coroutine function returning the complete id-to-name mapping.
        ttl_seconds: Age after which the entries are stale.
        empty_on_unsupported: When the loader raises
            ``UnsupportedOperationError``, treat the refresh as a success
            with zero entries.
        clock: Returns the current timezone-aware time.
    """

    def __init__(
        self,
        domain: CacheDomain,
        loader: Loader,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        empty_on_unsupported: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.domain = domain
        self._loader = loader
        self._ttl = timedelta(seconds=ttl_seconds)
        self._empty_on_unsupported = empty_on_unsupported
        self._clock = clock
        self._entries: dict[int, str] = {}
        self.last_refreshed_at: datetime | None = None
        self._refresh_in_flight = False
        # Entries remembered before or during a refresh; merged over its result.
        self._pending: dict[int, str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entries

    @property
    def refresh_in_flight(self) -> bool:
        return self._refresh_in_flight

    def lookup(self, entity_id: int) -> str | None:
        return self._entries.get(entity_id)

    def is_stale(self) -> bool:
        if self.last_refreshed_at is None:
            return True
        return self._clock() - self.last_refreshed_at >= self._ttl

    def remember(self, entity_id: int, name: str) -> None:
        """Insert or replace a single entry without a full refresh.

        An entry remembered before the first refresh, or while one is in
        flight, survives that refresh even if the loaded data lacks it.
        """
        if not name:
            return
        self._entries[entity_id] = name
        if self._refresh_in_flight or self.last_refreshed_at is None:
            self._pending[entity_id] = name

    def clear(self) -> None:
        self._entries.clear()
        self._pending.clear()
        self.last_refreshed_at = None
        logger.info("%s cache cleared", self.domain.value.capitalize())

    def stats(self) -> CacheStats:
        return CacheStats(
            count=len(self._entries),
            last_refreshed_at=self.last_refreshed_at,
            is_valid=not self.is_stale(),
            refresh_in_flight=self._refresh_in_flight,
        )

    async def refresh(self) -> None:
        """Replace all entries from a fresh load."""
        if self._refresh_in_flight:
            logger.debug(
                "%s cache refresh already in progress, skipping", self.domain.value
            )
            return

        self._refresh_in_flight = True
        try:
            logger.debug("Refreshing %s cache...", self.domain.value)
            entries = await self._loader()
        except UnsupportedOperationError as e:
            if self._empty_on_unsupported:
                logger.warning(
                    "%s endpoint not available (405 Method Not Allowed); "
                    "%s name mapping disabled until the next refresh window",
                    self.domain.value.capitalize(),
                    self.domain.value,
                )
                self._entries = {}
            else:
                logger.error("Failed to refresh %s cache: %s", self.domain.value, e)
            self.last_refreshed_at = self._clock()
        except Exception:
            logger.exception("Failed to refresh %s cache", self.domain.value)
            self.last_refreshed_at = self._clock()
        else:
            self._entries = {**entries, **self._pending}
            self.last_refreshed_at = self._clock()
            logger.info(
                "%s cache refreshed with %d entries",
                self.domain.value.capitalize(),
                len(self._entries),
            )
        finally:
            self._pending.clear()
            self._refresh_in_flight = False
