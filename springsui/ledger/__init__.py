"""
Ledger boundary for springsui.

Typed call stubs (``calls``), the client and signer protocols, the
Sui JSON-RPC implementation and the submission adapter.
"""

from springsui.ledger.adapter import ExecutionReceipt, prepare, submit
from springsui.ledger.client import (
    CoinInfo,
    CoinsPage,
    ExecutionResult,
    LedgerClient,
    ObjectData,
    ObjectResult,
    OwnedObjectsPage,
)
from springsui.ledger.jsonrpc_client import JsonRpcClient
from springsui.ledger.signer import SignResult, Signer
from springsui.ledger.transport import HttpxTransport, JsonRpcTransport

__all__ = [
    "CoinInfo",
    "CoinsPage",
    "ExecutionReceipt",
    "ExecutionResult",
    "HttpxTransport",
    "JsonRpcClient",
    "JsonRpcTransport",
    "LedgerClient",
    "ObjectData",
    "ObjectResult",
    "OwnedObjectsPage",
    "SignResult",
    "Signer",
    "prepare",
    "submit",
]
