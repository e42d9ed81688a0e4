import logging

import pytest

from cadence import run
from cadence.transport import HTTPTransport, RequestSpec, TransportError, TransportErrorCode
from tests.fixtures.fake_api import circuits_payload


@pytest.mark.asyncio
class TestHTTPTransport:
    async def test_send_returns_full_response(self, fake_api):
        async with HTTPTransport() as transport:
            response = await transport.send(RequestSpec(
                url=f"{fake_api}/api/f1/{{season}}/circuits.json",
                path_params={"season": "2017"},
            ))

        assert response.status_code == 200
        assert response.reason == "OK"
        assert response.is_json
        assert response.body == circuits_payload()
        assert response.url == f"{fake_api}/api/f1/2017/circuits.json"
        assert response.elapsed_ms is not None

    async def test_error_status_is_a_response(self, fake_api):
        async with HTTPTransport() as transport:
            response = await transport.send(RequestSpec(url=f"{fake_api}/api/f2/2017/circuits.json"))

        assert response.status_code == 404
        assert response.text == "Unable to select a series: f2"

    async def test_session_is_reused(self, fake_api):
        transport = HTTPTransport()
        await transport.connect()
        try:
            first = await transport.send(RequestSpec(url=f"{fake_api}/md5", query_params={"text": "a"}))
            second = await transport.send(RequestSpec(url=f"{fake_api}/md5", query_params={"text": "b"}))
        finally:
            await transport.disconnect()

        assert first.json()["original"] == "a"
        assert second.json()["original"] == "b"
        assert not transport.is_connected

    async def test_send_requires_connect(self, fake_api):
        transport = HTTPTransport()
        with pytest.raises(TransportError) as exc_info:
            await transport.send(RequestSpec(url=f"{fake_api}/echo"))
        assert exc_info.value.code == TransportErrorCode.CONNECTION_ERROR

    async def test_default_and_request_headers(self, fake_api):
        async with HTTPTransport(headers={"X-Suite": "ergast"}) as transport:
            response = await transport.send(RequestSpec(
                url=f"{fake_api}/echo",
                headers={"X-Suite": "override", "Accept": "application/json"},
            ))

        headers = {k.lower(): v for k, v in response.json()["headers"].items()}
        assert headers["user-agent"] == "cadence/0.1.0"
        assert headers["x-suite"] == "override"
        assert headers["accept"] == "application/json"


class TestBlockingRun:
    def test_query_params_reach_the_server(self, fake_api):
        response = run(RequestSpec(
            url=f"{fake_api}/echo",
            query_params={"text": "hello world", "n": 3},
        ))
        assert response.json()["query"] == {"text": "hello world", "n": "3"}

    def test_method_is_sent(self, fake_api):
        response = run(RequestSpec(url=f"{fake_api}/echo", method="head"))
        assert response.status_code == 200
        assert response.body == b""

    def test_unresolved_placeholder_is_sent_literally(self, fake_api, caplog):
        with caplog.at_level(logging.WARNING, logger="cadence.transport.http"):
            response = run(RequestSpec(url=f"{fake_api}/echo/{{missing}}"))

        assert response.status_code == 200
        assert response.json()["path"] == "/echo/{missing}"
        assert "unresolved placeholders: missing" in caplog.text

    def test_headers_are_case_insensitive(self, fake_api):
        response = run(RequestSpec(url=f"{fake_api}/text"))

        assert response.header("x-trace-id") == "abc123"
        assert response.header("X-TRACE-ID") == "abc123"
        assert response.content_type == "text/plain"

    def test_connection_refused(self, unused_url):
        with pytest.raises(TransportError) as exc_info:
            run(RequestSpec(url=unused_url, timeout_ms=2000))

        error = exc_info.value
        assert error.code == TransportErrorCode.CONNECTION_ERROR
        assert error.url == unused_url

    def test_timeout(self, fake_api):
        with pytest.raises(TransportError) as exc_info:
            run(RequestSpec(url=f"{fake_api}/slow", timeout_ms=200))

        assert exc_info.value.code == TransportErrorCode.TIMEOUT_ERROR
        assert "200ms" in exc_info.value.message
