import httpx
import pytest

from app.core.errors import UpstreamUnavailable
from app.services.yelp import YelpClient, YelpConfig


def client_for(handler, *, api_key="k"):
    return YelpClient(
        YelpConfig(api_key=api_key, base_url="https://yelp.test/v3", timeout=1.0),
        transport=httpx.MockTransport(handler),
    )


def test_search_sends_auth_and_drops_empty_params():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"businesses": [{"id": "b1"}], "total": 1})

    body = client_for(handler).search(location="Boston", latitude=None, limit=21)
    assert body["total"] == 1
    assert seen["auth"] == "Bearer k"
    assert seen["url"].path == "/v3/businesses/search"
    assert dict(seen["url"].params) == {"location": "Boston", "limit": "21"}


def test_business_quotes_id():
    def handler(request):
        assert request.url.raw_path == b"/v3/businesses/a%2Fb"
        return httpx.Response(200, json={"id": "a/b", "is_closed": False})

    assert client_for(handler).business("a/b")["id"] == "a/b"


def test_error_status_propagates():
    def handler(request):
        return httpx.Response(429, json={"error": {"code": "TOO_MANY_REQUESTS_PER_SECOND"}})

    with pytest.raises(UpstreamUnavailable) as exc:
        client_for(handler).search(location="Boston")
    assert exc.value.status_code == 429


def test_timeout_is_upstream_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(UpstreamUnavailable) as exc:
        client_for(handler).business("b1")
    assert exc.value.status_code == 504


def test_transport_error_is_upstream_unavailable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamUnavailable) as exc:
        client_for(handler).business("b1")
    assert exc.value.status_code == 503


def test_non_json_body():
    def handler(request):
        return httpx.Response(200, content=b"<html>maintenance</html>")

    with pytest.raises(UpstreamUnavailable) as exc:
        client_for(handler).business("b1")
    assert exc.value.status_code == 502


def test_missing_api_key_never_calls_out():
    def handler(request):
        raise AssertionError("should not be called")

    with pytest.raises(UpstreamUnavailable) as exc:
        client_for(handler, api_key="").search(location="Boston")
    assert exc.value.status_code == 503
    assert "YELP_API_KEY" in exc.value.message
