"""
Signer protocol: the secrets boundary.

Defines the interface the submit adapter uses to turn a unit document
into signed ledger bytes. The adapter never sees key material: it passes
the unit document and receives base64 transaction bytes plus the
serialized signatures to submit alongside them.

Concrete implementations are supplied by the caller (a wallet, a
keystore, a hardware signer). The CLI loads one from a
``module:callable`` factory.

The signer's ``address`` is the explicit signing identity: it is the
sender of the unit and the owner used for capability and coin lookups.
There is no process-wide keypair.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class SignResult:
    """Result of signing a unit document.

    Attributes:
        tx_bytes: Base64 transaction bytes, ready for execution.
        signatures: Base64 serialized signatures (one per required signer).
    """

    tx_bytes: str
    signatures: tuple[str, ...]


@runtime_checkable
class Signer(Protocol):
    """Interface for transaction signing.

    Properties:
        address: Ledger address of the signing identity.
    """

    @property
    def address(self) -> str:
        """Ledger address of the signing identity (safe for logging)."""
        ...

    def sign(self, unit_document: dict[str, Any]) -> SignResult:
        """Serialize and sign a unit document.

        The signer fills in everything required at signing time (gas
        payment, gas budget, object versions) and produces the bytes.

        Args:
            unit_document: Output of ``TransactionUnit.to_dict()``.

        Returns:
            SignResult with transaction bytes and signatures.

        Raises:
            Exception: If the document cannot be serialized or signed.
        """
        ...
