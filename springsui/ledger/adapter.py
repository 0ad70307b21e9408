"""
Submission adapter.

Composes the pure composition layer (unit.py) with the impure boundary
(client.py, signer.py):

    validate graph -> validate document -> close unit -> sign -> execute

The unit is closed before signing, so a unit is handed over at most once
and cannot be extended after the fact. Atomicity of the calls inside the
unit is a ledger property; this module only guarantees the local graph
is complete and ordered before handoff.

Failures are never retried. A failed execution raises LedgerRejected with
a classified code; transport errors propagate unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from springsui.errors import LedgerRejected, UnitGraphError, classify_execution_error
from springsui.integrity import content_digest
from springsui.ledger.client import LedgerClient
from springsui.ledger.signer import Signer
from springsui.log import get_logger
from springsui.schema import validate_unit_document
from springsui.types import normalize_address
from springsui.unit import TransactionUnit

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExecutionReceipt:
    """Record of a successfully executed unit.

    Attributes:
        digest: Ledger transaction digest.
        unit_digest: ``sha256:`` digest of the submitted unit document.
        sender: Address of the signing identity.
        effects: Raw effects dict.
        events: Raw events.
        object_changes: Raw object changes.
    """

    digest: str | None
    unit_digest: str
    sender: str
    effects: dict[str, Any] = field(default_factory=dict)
    events: tuple[Any, ...] = ()
    object_changes: tuple[Any, ...] = ()

    def created_objects(self, type_fragment: str | None = None) -> list[dict[str, Any]]:
        """Object changes of kind "created", optionally filtered by type."""
        created = [
            c
            for c in self.object_changes
            if isinstance(c, dict) and c.get("type") == "created"
        ]
        if type_fragment is not None:
            created = [c for c in created if type_fragment in str(c.get("objectType", ""))]
        return created


def prepare(unit: TransactionUnit, sender: str) -> dict[str, Any]:
    """Validate a unit and return the document to sign.

    Raises:
        UnitGraphError: If the graph is invalid or the unit's sender is
            not ``sender``.
        jsonschema.ValidationError: If the document is malformed.
    """
    unit.validate()

    sender = normalize_address(sender)
    if unit.sender is not None and normalize_address(unit.sender) != sender:
        raise UnitGraphError(
            f"unit sender {unit.sender} is not the signer {sender}",
            error_code="SENDER_MISMATCH",
            details={"unit_sender": unit.sender, "signer": sender},
        )

    document = unit.to_dict()
    document["sender"] = sender
    validate_unit_document(document)

    leftover = unit.unconsumed_results()
    if leftover:
        logger.warning(
            "unit %s leaves %d result(s) unconsumed: %s",
            unit.id,
            len(leftover),
            [r.to_dict() for r in leftover],
        )
    return document


def submit(
    unit: TransactionUnit,
    client: LedgerClient,
    signer: Signer,
) -> ExecutionReceipt:
    """Sign and execute a unit.

    Args:
        unit: An open unit with at least one command.
        client: Ledger client for execution.
        signer: Signing identity; its address becomes the unit's sender.

    Returns:
        ExecutionReceipt for the executed transaction.

    Raises:
        UnitGraphError: If the unit is closed or its graph is invalid.
        LedgerRejected: If signing fails (SIGNING_FAILED), the transport
            fails, or the ledger reports a failed execution.
    """
    document = prepare(unit, signer.address)
    unit_digest = content_digest(document)
    unit.mark_submitted()
    logger.info(
        "submitting unit %s (%d commands, %s)", unit.id, len(unit), unit_digest
    )

    try:
        signed = signer.sign(document)
    except LedgerRejected:
        raise
    except Exception as exc:
        raise LedgerRejected(
            f"signing failed: {exc}",
            error_code="SIGNING_FAILED",
            details={"unit_digest": unit_digest},
        ) from exc

    result = client.execute_transaction(signed.tx_bytes, signed.signatures)

    if not result.success:
        code = classify_execution_error(result.error)
        logger.error("transaction %s failed: %s (%s)", result.digest, result.error, code)
        raise LedgerRejected(
            f"transaction {result.digest} failed: {result.error}",
            error_code=code,
            details={
                "digest": result.digest,
                "unit_digest": unit_digest,
                "error": result.error,
            },
        )

    logger.info("transaction %s executed", result.digest)
    return ExecutionReceipt(
        digest=result.digest,
        unit_digest=unit_digest,
        sender=document["sender"],
        effects=result.effects,
        events=result.events,
        object_changes=result.object_changes,
    )
