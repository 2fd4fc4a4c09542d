"""Tests for ResultEnricher shape handling, capping and failure isolation."""

import json

import pytest

from autotask_mcp.mapping.enrichment import (
    MAX_ENHANCE_ITEMS,
    PayloadShape,
    ResultEnricher,
    normalize_payload,
)
from autotask_mcp.mapping.identifier_cache import CacheDomain

COMPANY_NAMES = {1: "Acme Co", 2: "Globex"}
RESOURCE_NAMES = {7: "Jane Doe"}


class StubResolver:
    def __init__(self, fail_ids=()):
        self.calls: list[tuple[CacheDomain, int]] = []
        self.fail_ids = set(fail_ids)

    async def get_name(self, domain, entity_id):
        self.calls.append((CacheDomain(domain), entity_id))
        if entity_id in self.fail_ids:
            raise RuntimeError(f"lookup failed for {entity_id}")
        names = COMPANY_NAMES if domain is CacheDomain.COMPANY else RESOURCE_NAMES
        return names.get(entity_id)


def _ticket(ticket_id, company_id=1, resource_id=7):
    return {
        "id": ticket_id,
        "title": f"Ticket {ticket_id}",
        "companyID": company_id,
        "assignedResourceID": resource_id,
    }


class TestNormalizePayload:
    @pytest.mark.parametrize(
        "payload, shape, count",
        [
            ([{"id": 1}], PayloadShape.LIST, 1),
            ({"items": [{"id": 1}, {"id": 2}]}, PayloadShape.ITEMS, 2),
            ({"id": 1, "companyID": 1}, PayloadShape.OBJECT, 1),
            ({"message": "m", "data": [{"id": 1}], "timestamp": "t"}, PayloadShape.ENVELOPE_LIST, 1),
            ({"message": "m", "data": {"items": []}}, PayloadShape.ENVELOPE_ITEMS, 0),
            ({"message": "m", "data": {"id": 1}}, PayloadShape.ENVELOPE_OBJECT, 1),
        ],
    )
    def test_shapes(self, payload, shape, count):
        normalized = normalize_payload(payload)

        assert normalized.shape is shape
        assert len(normalized.records) == count

    @pytest.mark.parametrize(
        "payload",
        [
            {"error": "boom", "tool": "search_tickets", "arguments": {}},
            {"message": "Successfully created ticket with ID: 5", "data": 5},
            42,
            None,
        ],
    )
    def test_payloads_without_records(self, payload):
        assert normalize_payload(payload) is None


class TestEnrich:
    @pytest.mark.asyncio
    async def test_list_records_gain_names(self):
        enricher = ResultEnricher(StubResolver())

        result = await enricher.enrich([_ticket(10)])

        assert result == [
            {
                **_ticket(10),
                "_enhanced": {"companyName": "Acme Co", "assignedResourceName": "Jane Doe"},
            }
        ]

    @pytest.mark.asyncio
    async def test_enrichment_is_capped(self):
        resolver = StubResolver()
        records = [_ticket(i, resource_id=None) for i in range(15)]

        result = await ResultEnricher(resolver).enrich(records)

        assert len(result) == 15
        assert all("_enhanced" in r for r in result[:MAX_ENHANCE_ITEMS])
        assert result[MAX_ENHANCE_ITEMS:] == records[MAX_ENHANCE_ITEMS:]
        assert len(resolver.calls) == MAX_ENHANCE_ITEMS

    @pytest.mark.asyncio
    async def test_lookup_failure_is_isolated_to_its_field(self):
        resolver = StubResolver(fail_ids={2})
        records = [_ticket(1, company_id=1), _ticket(2, company_id=2), _ticket(3, company_id=1)]

        result = await ResultEnricher(resolver).enrich(records)

        assert [r["id"] for r in result] == [1, 2, 3]
        assert result[0]["_enhanced"]["companyName"] == "Acme Co"
        assert result[1]["_enhanced"] == {"assignedResourceName": "Jane Doe"}
        assert result[2]["_enhanced"]["companyName"] == "Acme Co"

    @pytest.mark.asyncio
    async def test_failed_record_job_keeps_original_record(self, monkeypatch):
        enricher = ResultEnricher(StubResolver())
        original = enricher._enrich_record

        async def flaky(record):
            if record["id"] == 2:
                raise RuntimeError("boom")
            return await original(record)

        monkeypatch.setattr(enricher, "_enrich_record", flaky)
        records = [_ticket(1), _ticket(2)]

        result = await enricher.enrich(records)

        assert len(result) == 2
        assert "_enhanced" in result[0]
        assert result[1] == _ticket(2)

    @pytest.mark.asyncio
    async def test_unknown_names_are_recorded_as_none(self):
        result = await ResultEnricher(StubResolver()).enrich([_ticket(1, company_id=404)])

        assert result[0]["_enhanced"]["companyName"] is None

    @pytest.mark.asyncio
    async def test_non_integer_ids_and_non_mappings_are_skipped(self):
        resolver = StubResolver()
        records = [{"id": 1, "companyID": True}, {"id": 2, "companyID": "1"}, "plain"]

        result = await ResultEnricher(resolver).enrich(records)

        assert result[0]["_enhanced"] == {}
        assert result[1]["_enhanced"] == {}
        assert result[2] == "plain"
        assert resolver.calls == []

    @pytest.mark.asyncio
    async def test_envelope_list_keeps_shape_and_adds_note(self):
        envelope = {
            "message": "Found 2 tickets",
            "data": [_ticket(1), _ticket(2, company_id=2)],
            "timestamp": "2024-01-01T00:00:00+00:00",
        }

        result = await ResultEnricher(StubResolver()).enrich(envelope)

        assert result["message"] == "Found 2 tickets"
        assert result["timestamp"] == envelope["timestamp"]
        assert [r["_enhanced"]["companyName"] for r in result["data"]] == ["Acme Co", "Globex"]
        assert result["_enhanced_note"] == "Added company/resource name mappings to 2 items"

    @pytest.mark.asyncio
    async def test_envelope_object_stays_an_object(self):
        envelope = {"message": "Ticket details retrieved successfully", "data": _ticket(1)}

        result = await ResultEnricher(StubResolver()).enrich(envelope)

        assert isinstance(result["data"], dict)
        assert result["data"]["_enhanced"]["companyName"] == "Acme Co"

    @pytest.mark.asyncio
    async def test_items_wrapper_keeps_other_keys(self):
        payload = {"items": [_ticket(1)], "pageDetails": {"count": 1}}

        result = await ResultEnricher(StubResolver()).enrich(payload)

        assert result["pageDetails"] == {"count": 1}
        assert result["items"][0]["_enhanced"]["companyName"] == "Acme Co"
        assert "_enhanced_note" not in result

    @pytest.mark.asyncio
    async def test_envelope_with_items_wrapper_is_enriched(self):
        envelope = {
            "message": "Found 1 tickets",
            "data": {"items": [_ticket(1)], "pageDetails": {"count": 1}},
            "timestamp": "t",
        }

        result = await ResultEnricher(StubResolver()).enrich(envelope)

        assert isinstance(result["data"]["items"], list)
        assert result["data"]["pageDetails"] == {"count": 1}
        assert result["data"]["items"][0]["_enhanced"] == {
            "companyName": "Acme Co",
            "assignedResourceName": "Jane Doe",
        }
        assert result["message"] == "Found 1 tickets"
        assert result["_enhanced_note"] == "Added company/resource name mappings to 1 items"

    @pytest.mark.asyncio
    async def test_error_envelope_is_returned_unchanged(self):
        error = {"error": "boom", "tool": "search_tickets", "arguments": {}, "timestamp": "t"}
        resolver = StubResolver()

        result = await ResultEnricher(resolver).enrich(error)

        assert result is error
        assert resolver.calls == []

    @pytest.mark.asyncio
    async def test_json_text_is_enriched_and_reencoded(self):
        text = json.dumps({"message": "Found 1 tickets", "data": [_ticket(1)]})

        result = await ResultEnricher(StubResolver()).enrich(text)

        assert isinstance(result, str)
        decoded = json.loads(result)
        assert decoded["data"][0]["_enhanced"]["assignedResourceName"] == "Jane Doe"

    @pytest.mark.asyncio
    async def test_json_bytes_are_reencoded_as_bytes(self):
        raw = json.dumps({"message": "Found 1 tickets", "data": [_ticket(1)]}).encode()

        result = await ResultEnricher(StubResolver()).enrich(raw)

        assert isinstance(result, bytes)
        decoded = json.loads(result.decode("utf-8"))
        assert decoded["data"][0]["_enhanced"]["companyName"] == "Acme Co"

    @pytest.mark.asyncio
    async def test_undecodable_text_is_returned_unchanged(self):
        text = "Connection failed: not JSON"

        assert await ResultEnricher(StubResolver()).enrich(text) == text

    @pytest.mark.asyncio
    async def test_empty_list_is_returned_unchanged(self):
        payload = []

        assert await ResultEnricher(StubResolver()).enrich(payload) is payload
