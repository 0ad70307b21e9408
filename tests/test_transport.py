"""
Tests for HttpxTransport against a mocked httpx layer (pytest-httpx).

Test plan:
- Success: JSON body returned as dict, request carries the payload and
  extra headers
- Failure mapping: timeout -> TIMEOUT, connect error -> CONNECTION_FAILED,
  other transport error -> HTTP_ERROR, 5xx -> HTTP_ERROR with status,
  non-JSON body and non-object JSON -> INVALID_JSON
- End to end: JsonRpcClient over HttpxTransport parses a real response
"""

import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from springsui.errors import LedgerRejected
from springsui.ledger.jsonrpc_client import JsonRpcClient
from springsui.ledger.transport import HttpxTransport, JsonRpcTransport

URL = "http://localhost:9000"
PAYLOAD = {"jsonrpc": "2.0", "id": 1, "method": "suix_getCoins", "params": []}


class TestSuccess:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(HttpxTransport(), JsonRpcTransport)

    def test_returns_json_object(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=URL, method="POST", json={"jsonrpc": "2.0", "result": 1})
        assert HttpxTransport().post_json(URL, PAYLOAD) == {"jsonrpc": "2.0", "result": 1}

    def test_sends_payload_and_headers(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=URL, method="POST", json={"result": None})
        HttpxTransport(headers={"X-Api-Key": "k"}).post_json(URL, PAYLOAD)

        request = httpx_mock.get_request()
        assert request is not None
        assert json.loads(request.content) == PAYLOAD
        assert request.headers["X-Api-Key"] == "k"
        assert request.headers["Content-Type"] == "application/json"


class TestFailureMapping:
    def _error(self, transport: HttpxTransport) -> LedgerRejected:
        with pytest.raises(LedgerRejected) as exc_info:
            transport.post_json(URL, PAYLOAD)
        return exc_info.value

    def test_timeout(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("slow"))
        err = self._error(HttpxTransport(timeout_s=1.5))
        assert err.error_code == "TIMEOUT"
        assert err.details["timeout_s"] == 1.5

    def test_connect_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("refused"))
        assert self._error(HttpxTransport()).error_code == "CONNECTION_FAILED"

    def test_other_transport_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.RemoteProtocolError("bad framing"))
        assert self._error(HttpxTransport()).error_code == "HTTP_ERROR"

    def test_http_status(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=URL, method="POST", status_code=503)
        err = self._error(HttpxTransport())
        assert err.error_code == "HTTP_ERROR"
        assert err.details["status_code"] == 503

    def test_non_json_body(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=URL, method="POST", text="<html>oops</html>")
        err = self._error(HttpxTransport())
        assert err.error_code == "INVALID_JSON"
        assert "oops" in err.details["body_preview"]

    def test_non_object_json(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=URL, method="POST", json=[1, 2])
        err = self._error(HttpxTransport())
        assert err.error_code == "INVALID_JSON"
        assert err.details["type"] == "list"


class TestEndToEnd:
    def test_client_over_httpx(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=URL,
            method="POST",
            json={
                "jsonrpc": "2.0",
                "id": 1,
                "result": {
                    "data": [
                        {
                            "coinType": "0x2::sui::SUI",
                            "coinObjectId": "0x0c",
                            "version": "1",
                            "digest": "d",
                            "balance": "17",
                        }
                    ],
                    "nextCursor": None,
                    "hasNextPage": False,
                },
            },
        )
        client = JsonRpcClient(URL, HttpxTransport())
        page = client.get_coins("0x33", "0x2::sui::SUI")
        assert page.data[0].balance == 17
