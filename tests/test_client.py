from __future__ import annotations

import asyncio

import httpx
import pytest

from adapters.http_client import HttpxTransport, build_async_client
from core.client import ApiClient
from core.domain.errors import TransportError
from core.domain.models import RequestDescriptor, RequestOutcome
from conftest import FakeTransport, make_settings, noop

ME = {"total_results": 1, "results": [{"login": "jdoe"}]}


async def test_request_returns_body_and_uses_shared_headers():
    transport = FakeTransport(lambda method, url, headers, json: {"url": url, "auth": headers.get("Authorization")})
    async with ApiClient(make_settings(), transport=transport) as client:
        client.headers["Authorization"] = "jwt"
        data = await client.request("GET", "v1", "observations", params={"taxon_id": 3})
        anon = await client.request("GET", "v1", "observations", authenticated=False)

    assert data == {"url": "https://api.example.org/v1/observations?taxon_id=3", "auth": "jwt"}
    assert anon["auth"] is None
    assert transport.closed


async def test_request_raises_transport_error():
    transport = FakeTransport(lambda *a: TransportError("error", "Not Found", status_code=404))
    async with ApiClient(make_settings(), transport=transport) as client:
        with pytest.raises(TransportError) as info:
            await client.request("GET", "v1", "taxa/0")
    assert info.value.status_code == 404


async def test_request_in_flight_is_cancelled_on_close():
    transport = FakeTransport(delay=0.5)
    client = ApiClient(make_settings(), transport=transport)
    pending = asyncio.ensure_future(client.request("GET", "v1", "observations"))
    await asyncio.sleep(0.01)

    await client.aclose()

    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(pending, timeout=0.5)


async def test_request_failure_without_details_still_raises(monkeypatch):
    client = ApiClient(make_settings(), transport=FakeTransport())

    def failed(descriptor):
        future = asyncio.get_running_loop().create_future()
        future.set_result(RequestOutcome(ok=False))
        return future

    monkeypatch.setattr(client, "queue_request", failed)
    with pytest.raises(TransportError) as info:
        await client.request("GET", "v1", "taxa/0")
    assert info.value.status == "error"
    await client.aclose()


async def test_public_entry_points():
    transport = FakeTransport(lambda *a: ME)
    async with ApiClient(make_settings(), transport=transport) as client:
        statuses: list[bool] = []
        auth_results: list = []
        received: list = []

        client.verify_authentication("jwt", lambda ok, info=None: auth_results.append(ok))
        client.queue_request(
            RequestDescriptor(
                method="GET",
                api_version="v2",
                endpoint="observations",
                fields=["id"],
                headers=client.headers,
                on_success=received.append,
                on_error=noop,
            )
        )
        poll = client.check_queue_active(5, statuses.append)
        await poll

        assert auth_results == [True]
        assert received == [ME]
        assert statuses[0] is True and statuses[-1] is False
        assert client.auth.authorized_identity == "jdoe"
        assert transport.calls[1].url.endswith("/v2/observations?fields=(id:!t)")
        assert transport.calls[1].headers["Authorization"] == "jwt"

    assert ApiClient.encode_structured_params("a,b") == "(a:!t,b:!t)"
    assert ApiClient.parse_url_params("?a=1", "a") == "1"


async def test_verify_coroutine():
    async with ApiClient(make_settings(), transport=FakeTransport(lambda *a: ME)) as client:
        assert await client.verify("jwt") == (True, ME)
        assert await client.verify(None) == (False, None)
        assert not client.auth.is_authorized


async def test_end_to_end_over_httpx():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        if request.url.path == "/v2/users/me":
            return httpx.Response(200, json=ME)
        return httpx.Response(200, json={"total_results": 0, "results": []})

    settings = make_settings()
    transport = HttpxTransport(settings, client=build_async_client(settings, transport=httpx.MockTransport(handler)))
    async with ApiClient(settings, transport=transport) as client:
        assert await client.verify("jwt") == (True, ME)
        data = await client.request("GET", "v1", "observations", params={"user_login": "jdoe", "ids": [1, 2]})

    assert data == {"total_results": 0, "results": []}
    assert seen[1] == "https://api.example.org/v1/observations?user_login=jdoe&ids%5B%5D=1&ids%5B%5D=2"
