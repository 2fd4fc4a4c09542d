from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from autotask_mcp.api_helpers.autotask_client import (
    MATCH_ALL_FILTER,
    AutotaskClient,
    contains,
    eq,
)
from autotask_mcp.config import Settings
from autotask_mcp.config.settings import DEFAULT_ZONE_LOOKUP_URL
from autotask_mcp.exceptions import (
    AutotaskAPIError,
    AutotaskConfigurationError,
    AutotaskNetworkError,
    AutotaskRateLimitError,
    UnsupportedOperationError,
)

TEST_API_URL = "https://webservices.example.test/atservicesrest/v1.0"


def _cm(response):
    cm = AsyncMock()
    cm.__aenter__ = AsyncMock(return_value=response)
    cm.__aexit__ = AsyncMock(return_value=None)
    return cm


def _response(status, payload=None, *, text="", headers=None):
    resp = AsyncMock()
    resp.status = status
    resp.headers = headers or {}
    resp.json = AsyncMock(return_value=payload)
    resp.text = AsyncMock(return_value=text)
    return resp


def _session(*responses):
    session = MagicMock()
    session.request = MagicMock(side_effect=[_cm(r) for r in responses])
    return session


def _page(items, next_url=None):
    return {"items": items, "pageDetails": {"count": len(items), "nextPageUrl": next_url}}


@pytest.mark.asyncio
async def test_query_posts_filters_and_acquires_limiter(settings):
    session = _session(_response(200, _page([{"id": 1}])))
    limiter = AsyncMock()
    client = AutotaskClient(settings, session=session, limiter=limiter)

    records = await client.query("Companies", [eq("isActive", True)], page_size=10)

    assert records == [{"id": 1}]
    limiter.acquire.assert_awaited_once()
    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert method == "POST"
    assert url == f"{TEST_API_URL}/Companies/query"
    assert kwargs["json"] == {
        "filter": [{"op": "eq", "field": "isActive", "value": True}],
        "MaxRecords": 10,
    }
    assert kwargs["headers"]["ApiIntegrationCode"] == "INTEGRATION"
    assert kwargs["headers"]["UserName"] == "api-user@example.test"
    assert kwargs["headers"]["Secret"] == "secret"


@pytest.mark.asyncio
async def test_query_without_filters_matches_everything(settings):
    session = _session(_response(200, _page([])))
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    await client.query("Resources")

    body = session.request.call_args.kwargs["json"]
    assert body == {"filter": [MATCH_ALL_FILTER], "MaxRecords": 500}


@pytest.mark.asyncio
async def test_query_follows_next_page_url(settings):
    next_url = f"{TEST_API_URL}/Companies/query/next?paging=abc"
    session = _session(
        _response(200, _page([{"id": 1}, {"id": 2}], next_url)),
        _response(200, _page([{"id": 3}])),
    )
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    records = await client.query("Companies")

    assert [r["id"] for r in records] == [1, 2, 3]
    second = session.request.call_args_list[1]
    assert second.args == ("GET", next_url)


@pytest.mark.asyncio
async def test_query_stops_once_page_size_reached(settings):
    session = _session(
        _response(200, _page([{"id": 1}, {"id": 2}, {"id": 3}], "https://next.test"))
    )
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    records = await client.query("Companies", page_size=2)

    assert [r["id"] for r in records] == [1, 2]
    assert session.request.call_count == 1


@pytest.mark.asyncio
async def test_429_is_retried_after_retry_after(settings):
    session = _session(
        _response(429, headers={"Retry-After": "2"}),
        _response(200, _page([{"id": 1}])),
    )
    limiter = AsyncMock()
    client = AutotaskClient(settings, session=session, limiter=limiter)

    with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
        records = await client.query("Companies")

    assert records == [{"id": 1}]
    sleep.assert_awaited_once_with(2.0)
    assert limiter.acquire.await_count == 2


@pytest.mark.asyncio
async def test_429_exhausted_raises_rate_limit_error(settings):
    settings = settings.model_copy(update={"max_retries": 1})
    session = _session(_response(429), _response(429, text="slow down"))
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    with patch("asyncio.sleep", new_callable=AsyncMock):
        with pytest.raises(AutotaskRateLimitError) as excinfo:
            await client.query("Companies")

    assert excinfo.value.status == 429
    assert session.request.call_count == 2


@pytest.mark.asyncio
async def test_429_without_retries_raises_after_one_request(settings):
    settings = settings.model_copy(update={"max_retries": 0})
    session = _session(_response(429))
    limiter = AsyncMock()
    client = AutotaskClient(settings, session=session, limiter=limiter)

    with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
        with pytest.raises(AutotaskRateLimitError):
            await client.query("Companies")

    sleep.assert_not_awaited()
    assert session.request.call_count == 1
    assert limiter.acquire.await_count == 1


@pytest.mark.asyncio
async def test_405_raises_unsupported_operation(settings):
    session = _session(
        _response(405, text='{"errors": ["Method not allowed for Resources"]}')
    )
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    with pytest.raises(UnsupportedOperationError) as excinfo:
        await client.search_resources()

    assert excinfo.value.status == 405
    assert "Method not allowed for Resources" in str(excinfo.value)


@pytest.mark.asyncio
async def test_other_error_status_raises_api_error(settings):
    session = _session(_response(500, text="Internal Server Error"))
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    with pytest.raises(AutotaskAPIError) as excinfo:
        await client.get("Tickets", 1)

    assert excinfo.value.status == 500


@pytest.mark.asyncio
async def test_get_returns_item(settings):
    session = _session(_response(200, {"item": {"id": 7, "title": "Printer"}}))
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    item = await client.get("Tickets", 7)

    assert item == {"id": 7, "title": "Printer"}
    assert session.request.call_args.args == ("GET", f"{TEST_API_URL}/Tickets/7")


@pytest.mark.asyncio
async def test_get_returns_none_on_404(settings):
    session = _session(_response(404, text="Not Found"))
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    assert await client.get("Tickets", 7) is None


@pytest.mark.asyncio
async def test_get_child_builds_nested_path(settings):
    session = _session(_response(200, {"item": {"id": 3}}))
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    await client.get_child("Tickets", 7, "Notes", 3)

    assert session.request.call_args.args == (
        "GET",
        f"{TEST_API_URL}/Tickets/7/Notes/3",
    )


@pytest.mark.asyncio
async def test_create_and_update_return_item_id(settings):
    session = _session(
        _response(200, {"itemId": 99}),
        _response(200, {"itemId": 5}),
        _response(200, {"itemId": 12}),
    )
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    assert await client.create("Tickets", {"title": "t"}) == 99
    assert await client.update("Companies", {"id": 5, "phone": "1"}) == 5
    assert await client.create_child("Companies", 5, "Contacts", {"firstName": "A"}) == 12

    calls = session.request.call_args_list
    assert calls[0].args == ("POST", f"{TEST_API_URL}/Tickets")
    assert calls[0].kwargs["json"] == {"title": "t"}
    assert calls[1].args == ("PATCH", f"{TEST_API_URL}/Companies")
    assert calls[2].args == ("POST", f"{TEST_API_URL}/Companies/5/Contacts")


@pytest.mark.asyncio
async def test_missing_credentials_raise_before_any_request():
    settings = Settings(_env_file=None, autotask_api_url=TEST_API_URL)
    session = MagicMock()
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    with pytest.raises(AutotaskConfigurationError) as excinfo:
        await client.query("Companies")

    assert "AUTOTASK_SECRET" in excinfo.value.missing
    session.request.assert_not_called()


@pytest.mark.asyncio
async def test_zone_is_discovered_once(settings):
    settings = settings.model_copy(update={"autotask_api_url": None})
    zone_url = "https://webservices5.autotask.net/atservicesrest/"
    session = _session(
        _response(200, {"url": zone_url}),
        _response(200, _page([])),
        _response(200, _page([])),
    )
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    await client.query("Companies")
    await client.query("Tickets")

    calls = session.request.call_args_list
    assert len(calls) == 3
    assert calls[0].args == ("GET", DEFAULT_ZONE_LOOKUP_URL)
    assert calls[0].kwargs["params"] == {"user": "api-user@example.test"}
    assert calls[1].args[1] == (
        "https://webservices5.autotask.net/atservicesrest/v1.0/Companies/query"
    )
    assert calls[2].args[1].endswith("/v1.0/Tickets/query")


@pytest.mark.asyncio
async def test_transient_network_error_is_retried(settings):
    session = MagicMock()
    session.request = MagicMock(
        side_effect=[
            aiohttp.ClientConnectionError("connection reset"),
            _cm(_response(200, _page([{"id": 1}]))),
        ]
    )
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    with patch("asyncio.sleep", new_callable=AsyncMock):
        records = await client.query("Companies")

    assert records == [{"id": 1}]


@pytest.mark.asyncio
async def test_network_error_after_retries_is_wrapped(settings):
    settings = settings.model_copy(update={"max_retries": 0})
    session = MagicMock()
    session.request = MagicMock(side_effect=aiohttp.ClientConnectionError("down"))
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    with pytest.raises(AutotaskNetworkError, match="down"):
        await client.query("Companies")


@pytest.mark.asyncio
async def test_search_resources_builds_filters(settings):
    session = _session(_response(200, _page([])))
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    await client.search_resources(search_term="jane", is_active=True, page_size=25)

    body = session.request.call_args.kwargs["json"]
    assert body["MaxRecords"] == 25
    assert body["filter"] == [
        {
            "op": "or",
            "items": [
                contains("firstName", "jane"),
                contains("lastName", "jane"),
                contains("email", "jane"),
            ],
        },
        eq("isActive", True),
    ]


@pytest.mark.asyncio
async def test_test_connection_reports_success_and_failure(settings):
    session = _session(
        _response(200, _page([{"id": 0}])),
        _response(401, text="Unauthorized"),
    )
    client = AutotaskClient(settings, session=session, limiter=AsyncMock())

    assert await client.test_connection() is True
    assert await client.test_connection() is False


@pytest.mark.asyncio
async def test_client_without_explicit_limiter_uses_shared_limiter(settings):
    session = _session(_response(200, _page([])))

    shared = AsyncMock()
    with patch(
        "autotask_mcp.api_helpers.autotask_client.get_shared_rate_limiter",
        return_value=shared,
    ):
        client = AutotaskClient(settings, session=session)
        await client.query("Companies")

    shared.acquire.assert_awaited()


@pytest.mark.asyncio
async def test_injected_session_is_not_closed(settings):
    session = MagicMock()
    session.close = AsyncMock()

    async with AutotaskClient(settings, session=session, limiter=AsyncMock()):
        pass

    session.close.assert_not_awaited()
