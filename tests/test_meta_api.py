"""
Tests for the Graph API client using httpx.MockTransport.
"""
import json

import httpx
import pytest

from adpulse.models.enums import InsightLevel
from adpulse.services.meta.meta_api import (
    MetaAPI,
    MetaAPIError,
    MetaAuthError,
    MetaPermissionError,
    MetaRateLimitError,
    build_error,
)

BASE_URL = "https://graph.test/v19.0"


def make_api(handler) -> MetaAPI:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return MetaAPI("secret-token", base_url=BASE_URL, client=client)


async def test_follows_pagination_cursor():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if "after" not in request.url.params:
            return httpx.Response(200, json={
                "data": [{"id": "c1"}, {"id": "c2"}],
                "paging": {"next": f"{BASE_URL}/act_1/campaigns?after=abc&access_token=secret-token"},
            })
        return httpx.Response(200, json={"data": [{"id": "c3"}], "paging": {}})

    async with make_api(handler) as api:
        campaigns = await api.fetch_campaigns("1")

    assert [c["id"] for c in campaigns] == ["c1", "c2", "c3"]
    assert len(requests) == 2
    first = requests[0]
    assert first.url.path == "/v19.0/act_1/campaigns"
    assert first.url.params["access_token"] == "secret-token"
    assert json.loads(first.url.params["effective_status"]) == ["ACTIVE", "PAUSED"]
    assert requests[1].url.params["after"] == "abc"


async def test_fetch_insights_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(dict(request.url.params))
        return httpx.Response(200, json={"data": [{"spend": "1"}]})

    api = make_api(handler)
    rows = await api.fetch_insights("act_9", "2024-03-10", InsightLevel.ADSET, action_breakdowns="action_destination")
    await api.close()

    assert rows == [{"spend": "1"}]
    assert json.loads(seen["time_range"]) == {"since": "2024-03-10", "until": "2024-03-10"}
    assert seen["level"] == "adset"
    assert seen["action_breakdowns"] == "action_destination"
    assert seen["limit"] == "50"
    assert "breakdowns" not in seen


async def test_account_insight_none_when_empty():
    api = make_api(lambda request: httpx.Response(200, json={"data": []}))
    assert await api.fetch_account_insight("act_1", "2024-03-10") is None
    await api.close()


@pytest.mark.parametrize("status_code,body,expected", [
    (400, {"error": {"message": "Invalid OAuth access token.", "code": 190}}, MetaAuthError),
    (403, {"error": {"message": "Permissions error", "code": 10}}, MetaPermissionError),
    (400, {"error": {"message": "User request limit reached", "code": 17}}, MetaRateLimitError),
    (200, {"error": {"message": "Application request limit reached", "code": 4}}, MetaRateLimitError),
    (500, {"error": {"message": "Unknown error", "code": 1}}, MetaAPIError),
])
async def test_errors_are_typed(status_code, body, expected):
    api = make_api(lambda request: httpx.Response(status_code, json=body))

    with pytest.raises(expected) as exc_info:
        await api.fetch_ads("act_1")
    await api.close()

    assert exc_info.value.message == body["error"]["message"]
    assert exc_info.value.code == body["error"]["code"]
    assert exc_info.value.status_code == status_code


async def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = make_api(handler)
    with pytest.raises(MetaAPIError):
        await api.fetch_leads("ad_1")
    await api.close()


def test_build_error_without_body():
    error = build_error(None, 401)
    assert isinstance(error, MetaAuthError)
    assert "401" in error.message


def test_normalize_account_id():
    assert MetaAPI.normalize_account_id("123") == "act_123"
    assert MetaAPI.normalize_account_id("act_123") == "act_123"
