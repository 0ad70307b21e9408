"""
Sui JSON-RPC client: real network implementation of LedgerClient.

Translates JSON-RPC responses into the result types of ``client.py``.
Uses an injectable transport (JsonRpcTransport) so the HTTP layer can be
swapped for test fakes without changing parsing logic.

No retry loops. No secrets. No protocol logic beyond response parsing.

Methods used:
    - sui_getObject
    - suix_getOwnedObjects
    - suix_getCoins
    - sui_executeTransactionBlock

Response conventions:
    - Success: {"jsonrpc": "2.0", "result": {...}, "id": n}
    - RPC error: {"jsonrpc": "2.0", "error": {"code": ..., "message": ...}}
      -> LedgerRejected (classified by message).
    - sui_getObject for a missing object returns a result carrying
      {"error": {"code": "notExists"}} -> ObjectResult(found=False).
"""

from __future__ import annotations

import itertools
from typing import Any, Sequence

from springsui.errors import LedgerRejected, classify_execution_error
from springsui.ledger.client import (
    CoinInfo,
    CoinsPage,
    ExecutionResult,
    ObjectData,
    ObjectResult,
    OwnedObjectsPage,
)
from springsui.ledger.transport import HttpxTransport, JsonRpcTransport
from springsui.log import get_logger
from springsui.types import normalize_address

logger = get_logger(__name__)

_OBJECT_OPTIONS = {"showType": True, "showOwner": True, "showContent": True}

_EXECUTE_OPTIONS = {"showEffects": True, "showEvents": True, "showObjectChanges": True}


class JsonRpcClient:
    """Sui JSON-RPC client implementing the LedgerClient protocol.

    Args:
        url: The fullnode JSON-RPC endpoint (e.g. "https://fullnode.testnet.sui.io").
        transport: Injectable transport for HTTP POST. Defaults to
            HttpxTransport. Pass a FakeTransport for testing.
    """

    def __init__(
        self,
        url: str,
        transport: JsonRpcTransport | None = None,
    ) -> None:
        self._url = url
        self._transport = transport or HttpxTransport()
        self._ids = itertools.count(1)

    @property
    def url(self) -> str:
        """The JSON-RPC endpoint URL."""
        return self._url

    def _call(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        logger.debug("rpc %s -> %s", method, self._url)
        response = self._transport.post_json(self._url, payload)
        return _unwrap_response(method, response)

    # -----------------------------------------------------------------
    # LedgerClient protocol methods
    # -----------------------------------------------------------------

    def get_object(self, object_id: str) -> ObjectResult:
        result = self._call("sui_getObject", [normalize_address(object_id), _OBJECT_OPTIONS])
        return _parse_object_response(result)

    def get_owned_objects(
        self,
        owner: str,
        struct_type: str,
        *,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> OwnedObjectsPage:
        query = {
            "filter": {"StructType": struct_type},
            "options": {"showType": True, "showContent": False},
        }
        result = self._call(
            "suix_getOwnedObjects",
            [normalize_address(owner), query, cursor, limit],
        )
        return _parse_owned_objects_response(result)

    def get_coins(
        self,
        owner: str,
        coin_type: str,
        *,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> CoinsPage:
        result = self._call(
            "suix_getCoins", [normalize_address(owner), coin_type, cursor, limit]
        )
        return _parse_coins_response(result)

    def execute_transaction(
        self, tx_bytes: str, signatures: Sequence[str]
    ) -> ExecutionResult:
        """Execute signed bytes and wait for local execution.

        RPC-level errors (bad signature, malformed bytes) raise
        LedgerRejected. Execution failures come back as
        ExecutionResult(success=False); the adapter decides.
        """
        result = self._call(
            "sui_executeTransactionBlock",
            [tx_bytes, list(signatures), _EXECUTE_OPTIONS, "WaitForLocalExecution"],
        )
        return _parse_execute_response(result)


# =====================================================================
# Response parsing (pure functions, no I/O)
# =====================================================================


def _unwrap_response(method: str, response: dict[str, Any]) -> Any:
    """Return ``result`` or raise LedgerRejected for a JSON-RPC error."""
    error = response.get("error")
    if error is not None:
        message = error.get("message") if isinstance(error, dict) else str(error)
        rpc_code = error.get("code") if isinstance(error, dict) else None
        raise LedgerRejected(
            f"{method} failed: {message}",
            error_code=classify_execution_error(message),
            details={"method": method, "rpc_code": rpc_code, "message": message},
        )
    if "result" not in response:
        raise LedgerRejected(
            f"{method} returned neither result nor error",
            error_code="INVALID_JSON",
            details={"method": method},
        )
    return response["result"]


def unwrap_move_value(value: Any) -> Any:
    """Strip the ``{"type": ..., "fields": {...}}`` envelopes from Move values.

    Nested structs come back from the ledger wrapped this way; callers only
    want the field dicts.
    """
    if isinstance(value, dict):
        if "fields" in value and isinstance(value["fields"], dict):
            return unwrap_move_value(value["fields"])
        return {k: unwrap_move_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [unwrap_move_value(v) for v in value]
    return value


def _parse_object_data(raw: dict[str, Any]) -> ObjectData:
    content = raw.get("content")
    fields = None
    if isinstance(content, dict) and content.get("dataType") == "moveObject":
        fields = unwrap_move_value(content.get("fields", {}))

    return ObjectData(
        object_id=normalize_address(raw["objectId"]),
        version=str(raw["version"]) if raw.get("version") is not None else None,
        digest=raw.get("digest"),
        type=raw.get("type") or (content or {}).get("type"),
        owner=raw.get("owner"),
        content=fields,
    )


def _parse_object_response(result: dict[str, Any]) -> ObjectResult:
    error = result.get("error")
    if error is not None:
        code = error.get("code") if isinstance(error, dict) else str(error)
        return ObjectResult(found=False, error=code)

    data = result.get("data")
    if not isinstance(data, dict):
        return ObjectResult(found=False, error="noData")

    return ObjectResult(found=True, data=_parse_object_data(data))


def _parse_owned_objects_response(result: dict[str, Any]) -> OwnedObjectsPage:
    objects = []
    for entry in result.get("data", []):
        data = entry.get("data") if isinstance(entry, dict) else None
        if isinstance(data, dict):
            objects.append(_parse_object_data(data))

    return OwnedObjectsPage(
        data=tuple(objects),
        next_cursor=result.get("nextCursor"),
        has_next_page=bool(result.get("hasNextPage", False)),
    )


def _parse_coins_response(result: dict[str, Any]) -> CoinsPage:
    coins = tuple(
        CoinInfo(
            coin_object_id=normalize_address(c["coinObjectId"]),
            coin_type=c["coinType"],
            balance=int(c["balance"]),
            version=str(c["version"]) if c.get("version") is not None else None,
            digest=c.get("digest"),
        )
        for c in result.get("data", [])
    )
    return CoinsPage(
        data=coins,
        next_cursor=result.get("nextCursor"),
        has_next_page=bool(result.get("hasNextPage", False)),
    )


def _parse_execute_response(result: dict[str, Any]) -> ExecutionResult:
    effects = result.get("effects") or {}
    status = effects.get("status") or {}

    # No effects at all means the node never reported an outcome.
    success = status.get("status") == "success"
    error = status.get("error")
    if not status:
        error = "no effects in execute response"

    return ExecutionResult(
        digest=result.get("digest"),
        success=success,
        error=error,
        effects=effects,
        events=tuple(result.get("events") or ()),
        object_changes=tuple(result.get("objectChanges") or ()),
    )
