"""
Ledger client protocol: the network boundary.

Defines the interface that the resolver, the pool reader and the submit
adapter depend on, not a concrete implementation. This keeps them
testable and keeps ``httpx`` out of composition logic.

Concrete implementations:
    - JsonRpcClient (Sui JSON-RPC)
    - FakeClient (tests)

Methods are synchronous: each call is a single blocking request that
either returns a value or raises LedgerRejected. No retries.

Results are boring frozen dataclasses. "Object does not exist" is an
expected outcome and is reported in the result, not raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence, runtime_checkable


# =========================================================================
# Result types
# =========================================================================


@dataclass(frozen=True)
class ObjectData:
    """An on-chain object as returned by the ledger.

    Attributes:
        object_id: Normalized object id.
        version: Object version (sequence number) as a decimal string.
        digest: Object digest.
        type: Fully qualified Move type, if requested.
        owner: Raw owner description from the ledger.
        content: Parsed Move fields (``{"fields": {...}}`` unwrapped), if
            requested and the object is a Move object.
    """

    object_id: str
    version: str | None = None
    digest: str | None = None
    type: str | None = None
    owner: Any = None
    content: dict[str, Any] | None = None


@dataclass(frozen=True)
class ObjectResult:
    """Result of looking up a single object.

    Attributes:
        found: Whether the object exists.
        data: The object when found.
        error: Ledger error tag when not found (e.g. "notExists",
            "deleted"). None when found.
    """

    found: bool
    data: ObjectData | None = None
    error: str | None = None


@dataclass(frozen=True)
class OwnedObjectsPage:
    data: tuple[ObjectData, ...] = ()
    next_cursor: str | None = None
    has_next_page: bool = False


@dataclass(frozen=True)
class CoinInfo:
    coin_object_id: str
    coin_type: str
    balance: int
    version: str | None = None
    digest: str | None = None


@dataclass(frozen=True)
class CoinsPage:
    data: tuple[CoinInfo, ...] = ()
    next_cursor: str | None = None
    has_next_page: bool = False


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of executing a signed transaction.

    Attributes:
        digest: Transaction digest.
        success: Whether the effects report success.
        error: Failure text from the effects status, if any.
        effects: Raw effects dict.
        events: Raw events list.
        object_changes: Raw object changes list.
    """

    digest: str | None
    success: bool
    error: str | None = None
    effects: dict[str, Any] = field(default_factory=dict)
    events: tuple[Any, ...] = ()
    object_changes: tuple[Any, ...] = ()


# =========================================================================
# Protocol
# =========================================================================


@runtime_checkable
class LedgerClient(Protocol):
    """Interface for ledger reads and transaction execution."""

    def get_object(self, object_id: str) -> ObjectResult:
        """Fetch one object with its type, owner and content."""
        ...

    def get_owned_objects(
        self,
        owner: str,
        struct_type: str,
        *,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> OwnedObjectsPage:
        """List objects owned by ``owner`` whose type is ``struct_type``."""
        ...

    def get_coins(
        self,
        owner: str,
        coin_type: str,
        *,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> CoinsPage:
        """List coins of ``coin_type`` owned by ``owner``."""
        ...

    def execute_transaction(
        self, tx_bytes: str, signatures: Sequence[str]
    ) -> ExecutionResult:
        """Execute signed transaction bytes (base64) and wait for effects."""
        ...
