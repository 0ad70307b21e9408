"""
Transport protocol for ledger JSON-RPC calls.

Defines the seam where a concrete HTTP implementation plugs in. The
JSON-RPC client depends on this protocol, not on httpx directly, so the
transport can be swapped (tests, recording proxies) without editing
client logic.

Concrete implementations:
    - HttpxTransport (default, uses httpx.Client)
    - FakeTransport (tests, returns canned responses)

Failure mapping (HttpxTransport):
    timeout           -> LedgerRejected(TIMEOUT)
    connect failure   -> LedgerRejected(CONNECTION_FAILED)
    other HTTP errors -> LedgerRejected(HTTP_ERROR)
    non-JSON / non-object body -> LedgerRejected(INVALID_JSON)
"""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

import httpx

from springsui.errors import LedgerRejected


@runtime_checkable
class JsonRpcTransport(Protocol):
    """Blocking transport for JSON-RPC POST requests."""

    def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a JSON-RPC request and return the parsed response.

        Args:
            url: The JSON-RPC endpoint URL.
            payload: The JSON-RPC request body (jsonrpc, method, params, id).

        Returns:
            Parsed JSON response as a dict.

        Raises:
            LedgerRejected: On transport-level failures.
        """
        ...


class HttpxTransport:
    """Default transport using httpx.Client.

    Args:
        timeout_s: Request timeout in seconds.
        headers: Additional headers to include in requests.
    """

    def __init__(
        self,
        timeout_s: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._headers = headers or {}

    def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send JSON-RPC request via httpx."""
        try:
            with httpx.Client(timeout=self._timeout_s) as client:
                response = client.post(
                    url,
                    json=payload,
                    headers={
                        "Content-Type": "application/json",
                        "Accept": "application/json",
                        **self._headers,
                    },
                )
        except httpx.TimeoutException as e:
            raise LedgerRejected(
                f"RPC request timed out after {self._timeout_s}s",
                error_code="TIMEOUT",
                details={"url": url, "timeout_s": self._timeout_s},
            ) from e
        except httpx.ConnectError as e:
            raise LedgerRejected(
                f"Failed to connect to {url}",
                error_code="CONNECTION_FAILED",
                details={"url": url},
            ) from e
        except httpx.HTTPError as e:
            raise LedgerRejected(
                f"HTTP error: {e}",
                error_code="HTTP_ERROR",
                details={"url": url, "error": str(e)},
            ) from e

        if response.status_code >= 400:
            raise LedgerRejected(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                error_code="HTTP_ERROR",
                details={
                    "url": url,
                    "status_code": response.status_code,
                    "reason": response.reason_phrase,
                },
            )

        try:
            result = response.json()
        except json.JSONDecodeError as e:
            raise LedgerRejected(
                "Response was not valid JSON",
                error_code="INVALID_JSON",
                details={
                    "url": url,
                    "status_code": response.status_code,
                    "body_preview": response.text[:200] if response.text else "",
                },
            ) from e

        if not isinstance(result, dict):
            raise LedgerRejected(
                "Response JSON was not an object",
                error_code="INVALID_JSON",
                details={"url": url, "type": type(result).__name__},
            )

        return result
