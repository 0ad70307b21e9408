"""
Tests for the submission adapter: prepare() and submit().

Uses FakeSigner and FakeClient so no network or keys are needed.

Test plan:
- prepare: document carries the signer as sender, schema-valid, empty
  unit rejected, sender mismatch rejected, unconsumed results logged
- submit: signer receives the document, client receives signer output,
  receipt fields, unit closed after submission, resubmission rejected
- Failures: signer exception -> SIGNING_FAILED (unit stays closed),
  failed execution -> LedgerRejected with classified code, transport
  error propagates unchanged, nothing is retried
"""

from typing import Any, Sequence

import pytest

from springsui.composer import TransactionComposer
from springsui.errors import LedgerRejected, UnitGraphError
from springsui.integrity import content_digest
from springsui.ledger.adapter import ExecutionReceipt, prepare, submit
from springsui.ledger.client import ExecutionResult
from springsui.ledger.signer import SignResult, Signer
from springsui.types import PoolDescriptor
from springsui.unit import GAS, TransactionUnit, UnitState

PACKAGE = "0x" + "ab" * 32
POOL = PoolDescriptor(id="0x" + "11" * 32, token_type="0x" + "22" * 32 + "::r::R")
SENDER = "0x" + "33" * 32
OTHER = "0x" + "44" * 32

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeSigner:
    """Minimal Signer implementation for testing."""

    def __init__(
        self,
        *,
        address: str = SENDER,
        should_raise: Exception | None = None,
    ) -> None:
        self._address = address
        self._should_raise = should_raise
        self.sign_calls: list[dict[str, Any]] = []

    @property
    def address(self) -> str:
        return self._address

    def sign(self, unit_document: dict[str, Any]) -> SignResult:
        self.sign_calls.append(unit_document)
        if self._should_raise is not None:
            raise self._should_raise
        return SignResult(tx_bytes="VFhCWVRFUw==", signatures=("U0lH",))


class FakeClient:
    """Minimal LedgerClient for execution only."""

    def __init__(
        self,
        *,
        result: ExecutionResult | None = None,
        should_raise: Exception | None = None,
    ) -> None:
        self._result = result or ExecutionResult(
            digest="TxDigest",
            success=True,
            effects={"status": {"status": "success"}},
            object_changes=(
                {"type": "created", "objectId": "0x0e", "objectType": "0x2::coin::Coin<R>"},
                {"type": "mutated", "objectId": "0x0f", "objectType": "Pool"},
            ),
        )
        self._should_raise = should_raise
        self.execute_calls: list[tuple[str, tuple[str, ...]]] = []

    def execute_transaction(
        self, tx_bytes: str, signatures: Sequence[str]
    ) -> ExecutionResult:
        self.execute_calls.append((tx_bytes, tuple(signatures)))
        if self._should_raise is not None:
            raise self._should_raise
        return self._result


def _mint_unit(sender: str | None = None) -> TransactionUnit:
    unit = TransactionUnit(sender=sender)
    (sui,) = unit.split_coins(GAS, [1_000])
    lst = TransactionComposer(PACKAGE).mint(unit, POOL, sui)
    unit.transfer_objects([lst], SENDER)
    return unit


# ---------------------------------------------------------------------------
# prepare
# ---------------------------------------------------------------------------


class TestPrepare:
    def test_fake_signer_satisfies_protocol(self) -> None:
        assert isinstance(FakeSigner(), Signer)

    def test_sets_sender(self) -> None:
        document = prepare(_mint_unit(), SENDER)
        assert document["sender"] == SENDER

    def test_matching_sender_accepted(self) -> None:
        assert prepare(_mint_unit(SENDER), SENDER)["sender"] == SENDER

    def test_sender_mismatch(self) -> None:
        with pytest.raises(UnitGraphError) as exc_info:
            prepare(_mint_unit(OTHER), SENDER)
        assert exc_info.value.error_code == "SENDER_MISMATCH"

    def test_empty_unit_rejected(self) -> None:
        with pytest.raises(UnitGraphError):
            prepare(TransactionUnit(), SENDER)

    def test_does_not_close_unit(self) -> None:
        unit = _mint_unit()
        prepare(unit, SENDER)
        assert unit.state == UnitState.OPEN

    def test_warns_on_unconsumed_results(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level("WARNING", logger="springsui")
        unit = TransactionUnit()
        (sui,) = unit.split_coins(GAS, [1])
        TransactionComposer(PACKAGE).mint(unit, POOL, sui)
        prepare(unit, SENDER)
        assert "unconsumed" in caplog.text


# ---------------------------------------------------------------------------
# submit
# ---------------------------------------------------------------------------


class TestSubmitSuccess:
    def test_signer_receives_document(self) -> None:
        signer = FakeSigner()
        unit = _mint_unit()
        submit(unit, FakeClient(), signer)
        (document,) = signer.sign_calls
        assert document["sender"] == SENDER
        assert len(document["commands"]) == 3

    def test_client_receives_signed_bytes(self) -> None:
        client = FakeClient()
        submit(_mint_unit(), client, FakeSigner())
        assert client.execute_calls == [("VFhCWVRFUw==", ("U0lH",))]

    def test_receipt(self) -> None:
        signer = FakeSigner()
        receipt = submit(_mint_unit(), FakeClient(), signer)
        assert isinstance(receipt, ExecutionReceipt)
        assert receipt.digest == "TxDigest"
        assert receipt.sender == SENDER
        assert receipt.unit_digest == content_digest(signer.sign_calls[0])

    def test_created_objects(self) -> None:
        receipt = submit(_mint_unit(), FakeClient(), FakeSigner())
        assert [c["objectId"] for c in receipt.created_objects()] == ["0x0e"]
        assert receipt.created_objects("coin::Coin") == receipt.created_objects()
        assert receipt.created_objects("WeightHookAdminCap") == []

    def test_unit_closed(self) -> None:
        unit = _mint_unit()
        submit(unit, FakeClient(), FakeSigner())
        assert unit.state == UnitState.SUBMITTED

    def test_resubmission_rejected(self) -> None:
        unit = _mint_unit()
        client = FakeClient()
        submit(unit, client, FakeSigner())
        with pytest.raises(UnitGraphError):
            submit(unit, client, FakeSigner())
        assert len(client.execute_calls) == 1


class TestSubmitFailures:
    def test_signing_failure(self) -> None:
        unit = _mint_unit()
        client = FakeClient()
        with pytest.raises(LedgerRejected) as exc_info:
            submit(unit, client, FakeSigner(should_raise=RuntimeError("locked")))
        assert exc_info.value.error_code == "SIGNING_FAILED"
        assert "locked" in str(exc_info.value)
        assert client.execute_calls == []
        assert unit.state == UnitState.SUBMITTED

    def test_signer_ledger_rejected_passes_through(self) -> None:
        err = LedgerRejected("gas price", error_code="TIMEOUT")
        with pytest.raises(LedgerRejected) as exc_info:
            submit(_mint_unit(), FakeClient(), FakeSigner(should_raise=err))
        assert exc_info.value is err

    def test_failed_execution(self) -> None:
        client = FakeClient(
            result=ExecutionResult(
                digest="TxBad",
                success=False,
                error="MoveAbort(MoveLocation { module: liquid_staking }, 3) in command 1",
            )
        )
        with pytest.raises(LedgerRejected) as exc_info:
            submit(_mint_unit(), client, FakeSigner())
        err = exc_info.value
        assert err.error_code == "MOVE_ABORT"
        assert err.details["digest"] == "TxBad"
        assert len(client.execute_calls) == 1

    @pytest.mark.parametrize(
        "error,code",
        [
            ("InsufficientGas", "INSUFFICIENT_GAS"),
            ("InsufficientCoinBalance in command 0", "INSUFFICIENT_COIN_BALANCE"),
            ("something new", "UNKNOWN"),
            (None, "UNKNOWN"),
        ],
    )
    def test_error_classification(self, error: str | None, code: str) -> None:
        client = FakeClient(result=ExecutionResult(digest="Tx", success=False, error=error))
        with pytest.raises(LedgerRejected) as exc_info:
            submit(_mint_unit(), client, FakeSigner())
        assert exc_info.value.error_code == code

    def test_transport_error_propagates(self) -> None:
        err = LedgerRejected("down", error_code="CONNECTION_FAILED")
        client = FakeClient(should_raise=err)
        with pytest.raises(LedgerRejected) as exc_info:
            submit(_mint_unit(), client, FakeSigner())
        assert exc_info.value is err
        assert len(client.execute_calls) == 1
