"""Result enrichment with company and resource names.

``ResultEnricher.enrich`` takes the result of a tool call, finds the records
inside it, adds an ``_enhanced`` object with resolved names to the first
``MAX_ENHANCE_ITEMS`` of them and returns a payload of the same shape.
Enrichment is best effort: any failure yields the original payload or record,
never an error.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from .identifier_cache import CacheDomain

logger = logging.getLogger(__name__)

# Caps resolution calls per result at MAX_ENHANCE_ITEMS x 2.
MAX_ENHANCE_ITEMS = 10

ENHANCED_KEY = "_enhanced"
ENHANCED_NOTE_KEY = "_enhanced_note"


class NameResolver(Protocol):
    async def get_name(self, domain: CacheDomain | str, entity_id: int) -> str | None: ...


class PayloadShape(Enum):
    """Where the records live inside a payload."""

    LIST = "list"
    ITEMS = "items"
    OBJECT = "object"
    ENVELOPE_LIST = "envelope_list"
    ENVELOPE_ITEMS = "envelope_items"
    ENVELOPE_OBJECT = "envelope_object"

    @property
    def is_envelope(self) -> bool:
        return self.name.startswith("ENVELOPE_")


@dataclass(slots=True)
class NormalizedPayload:
    shape: PayloadShape
    records: list[Any]


def normalize_payload(payload: Any) -> NormalizedPayload | None:
    """Classify ``payload`` and extract its candidate records.

    Returns None for payloads that carry no records: error envelopes,
    envelopes whose ``data`` is a scalar (such as a created id) and scalars.
    """
    if isinstance(payload, list):
        return NormalizedPayload(PayloadShape.LIST, payload)
    if not isinstance(payload, dict):
        return None

    if "error" in payload and "data" not in payload:
        return None

    if "data" in payload and (
        "message" in payload or isinstance(payload["data"], (list, dict))
    ):
        data = payload["data"]
        if isinstance(data, list):
            return NormalizedPayload(PayloadShape.ENVELOPE_LIST, data)
        if isinstance(data, dict):
            items = data.get("items")
            if isinstance(items, list):
                return NormalizedPayload(PayloadShape.ENVELOPE_ITEMS, items)
            return NormalizedPayload(PayloadShape.ENVELOPE_OBJECT, [data])
        return None

    items = payload.get("items")
    if isinstance(items, list):
        return NormalizedPayload(PayloadShape.ITEMS, items)
    return NormalizedPayload(PayloadShape.OBJECT, [payload])


def _is_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ResultEnricher:
    """Add resolved names to the records of a tool result.

    Args:
        resolver: Name resolver, normally the process-wide ``MappingResolver``.
        max_items: Number of leading records eligible for enrichment.
    """

    def __init__(self, resolver: NameResolver, *, max_items: int = MAX_ENHANCE_ITEMS):
        self._resolver = resolver
        self._max_items = max_items

    async def enrich(self, payload: Any) -> Any:
        """Return ``payload`` with ``_enhanced`` annotations added.

        JSON text is decoded first and the result re-encoded as the same type
        (``str`` or UTF-8 ``bytes``); decoded data is enriched directly.
        Payloads that cannot be decoded or classified are returned unchanged.
        """
        try:
            if isinstance(payload, (str, bytes, bytearray)):
                decoded = json.loads(payload)
                result = await self._enrich_decoded(decoded)
                if result is decoded:
                    return payload
                text = json.dumps(result, indent=2, ensure_ascii=False)
                if isinstance(payload, str):
                    return text
                return text.encode("utf-8")
            return await self._enrich_decoded(payload)
        except Exception:
            logger.error("Failed to enhance result", exc_info=True)
            return payload

    async def _enrich_decoded(self, payload: Any) -> Any:
        normalized = normalize_payload(payload)
        if normalized is None or not normalized.records:
            logger.debug("No items found to enhance")
            return payload

        records = normalized.records
        head = records[: self._max_items]
        tail = records[self._max_items :]
        if tail:
            logger.info(
                "Limiting enhancement to first %d of %d items to prevent rate limiting",
                self._max_items,
                len(records),
            )

        outcomes = await asyncio.gather(
            *(self._enrich_record(record) for record in head), return_exceptions=True
        )

        enriched: list[Any] = []
        annotated = 0
        failures = 0
        for original, outcome in zip(head, outcomes):
            if isinstance(outcome, BaseException):
                failures += 1
                logger.debug("Enhancement job failed, keeping record: %s", outcome)
                enriched.append(original)
                continue
            if outcome is not original:
                annotated += 1
            enriched.append(outcome)

        if failures:
            logger.debug(
                "%d items had mapping failures but processing continued", failures
            )

        return self._reassemble(payload, normalized.shape, enriched + tail, annotated)

    async def _enrich_record(self, record: Any) -> Any:
        if not isinstance(record, Mapping):
            return record

        enhanced: dict[str, str | None] = {}

        company_id = record.get("companyID")
        if _is_id(company_id):
            try:
                enhanced["companyName"] = await self._resolver.get_name(
                    CacheDomain.COMPANY, company_id
                )
            except Exception as e:
                logger.debug("Failed to map company ID %s: %s", company_id, e)

        resource_id = record.get("assignedResourceID")
        if _is_id(resource_id):
            try:
                enhanced["assignedResourceName"] = await self._resolver.get_name(
                    CacheDomain.RESOURCE, resource_id
                )
            except Exception as e:
                logger.debug("Failed to map resource ID %s: %s", resource_id, e)

        return {**record, ENHANCED_KEY: enhanced}

    @staticmethod
    def _reassemble(
        payload: Any, shape: PayloadShape, records: list[Any], annotated: int
    ) -> Any:
        if shape is PayloadShape.LIST:
            return records
        if shape is PayloadShape.ITEMS:
            return {**payload, "items": records}
        if shape is PayloadShape.OBJECT:
            return records[0] if records else payload

        if shape is PayloadShape.ENVELOPE_LIST:
            data: Any = records
        elif shape is PayloadShape.ENVELOPE_ITEMS:
            data = {**payload["data"], "items": records}
        else:
            data = records[0] if records else payload["data"]

        return {
            **payload,
            "data": data,
            ENHANCED_NOTE_KEY: (
                f"Added company/resource name mappings to {annotated} items"
            ),
        }
