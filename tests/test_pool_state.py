"""
Tests for pool snapshots.

Uses a FakeClient returning canned ObjectResults shaped like the output
of JsonRpcClient (Move ``fields`` envelopes already stripped).

Test plan:
- Parsing: supplies, fee config (Cell/Option wrappers), fees, validators
- Exchange rate: ratio of supplies, 1 when no LST exists
- validator_address: index lookup, IndexError out of range
- Short addresses in the token type match the node's full-length type
- PoolNotFound: missing object, wrong type, wrong package, no content,
  unexpected layout (POOL_LAYOUT)
"""

from decimal import Decimal
from typing import Any

import pytest

from springsui.errors import PoolNotFound
from springsui.fees import FeeConfig
from springsui.ledger.client import ObjectData, ObjectResult
from springsui.pool_state import PoolSnapshot, fetch_pool_state
from springsui.types import PoolDescriptor

PACKAGE = "0x" + "ab" * 32
POOL_ID = "0x" + "11" * 32
TOKEN = "0x" + "22" * 32 + "::ripleys::RIPLEYS"
POOL_TYPE = f"{PACKAGE}::liquid_staking::LiquidStakingInfo<{TOKEN}>"
VALIDATOR_A = "0x" + "aa" * 32
VALIDATOR_B = "0x" + "bb" * 32

POOL = PoolDescriptor(id=POOL_ID, token_type=TOKEN)


def _content(**overrides: Any) -> dict[str, Any]:
    content: dict[str, Any] = {
        "id": {"id": POOL_ID},
        "lst_treasury_cap": {"total_supply": {"value": "1000"}},
        "fee_config": {
            "element": {
                "vec": [
                    {
                        "sui_mint_fee_bps": "10",
                        "redeem_fee_bps": "5",
                        "spread_fee_bps": "100",
                    }
                ]
            }
        },
        "fees": "42",
        "accrued_spread_fees": "7",
        "storage": {
            "total_sui_supply": "1500",
            "validator_infos": [
                {"validator_address": VALIDATOR_A, "total_sui_amount": "900"},
                {"validator_address": VALIDATOR_B, "total_sui_amount": "600"},
            ],
        },
    }
    content.update(overrides)
    return content


def _found(content: dict[str, Any] | None, object_type: str = POOL_TYPE) -> ObjectResult:
    return ObjectResult(
        found=True,
        data=ObjectData(
            object_id=POOL_ID,
            version="12",
            digest="dig",
            type=object_type,
            content=content,
        ),
    )


class FakeClient:
    """Returns one canned ObjectResult for get_object."""

    def __init__(self, result: ObjectResult) -> None:
        self._result = result
        self.get_object_calls: list[str] = []

    def get_object(self, object_id: str) -> ObjectResult:
        self.get_object_calls.append(object_id)
        return self._result


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParsing:
    def test_supplies(self) -> None:
        snapshot = fetch_pool_state(FakeClient(_found(_content())), POOL)
        assert snapshot.total_sui_supply == 1500
        assert snapshot.lst_supply == 1000
        assert snapshot.version == "12"

    def test_fee_config(self) -> None:
        snapshot = fetch_pool_state(FakeClient(_found(_content())), POOL)
        assert snapshot.fee_config == FeeConfig(10, 5, 100)

    def test_fee_config_without_wrappers(self) -> None:
        content = _content(
            fee_config={"mint_fee_bps": 1, "redeem_fee_bps": 2, "spread_fee_bps": 3}
        )
        snapshot = fetch_pool_state(FakeClient(_found(content)), POOL)
        assert snapshot.fee_config == FeeConfig(1, 2, 3)

    def test_fees(self) -> None:
        snapshot = fetch_pool_state(FakeClient(_found(_content())), POOL)
        assert snapshot.collected_fees == 42
        assert snapshot.accrued_spread_fees == 7

    def test_validators(self) -> None:
        snapshot = fetch_pool_state(FakeClient(_found(_content())), POOL)
        assert [v.address for v in snapshot.validators] == [VALIDATOR_A, VALIDATOR_B]
        assert snapshot.validators[1].total_sui_amount == 600

    def test_weight_hook_from_descriptor(self) -> None:
        pool = PoolDescriptor(id=POOL_ID, token_type=TOKEN, weight_hook_id="0x44")
        snapshot = fetch_pool_state(FakeClient(_found(_content())), pool)
        assert snapshot.weight_hook_id == "0x44"

    def test_reads_pool_id(self) -> None:
        client = FakeClient(_found(_content()))
        fetch_pool_state(client, POOL)
        assert client.get_object_calls == [POOL_ID]

    def test_package_check_passes(self) -> None:
        snapshot = fetch_pool_state(FakeClient(_found(_content())), POOL, PACKAGE)
        assert snapshot.id == POOL_ID

    def test_short_token_type_matches_full_length_object(self) -> None:
        node_type = (
            f"{PACKAGE}::liquid_staking::LiquidStakingInfo<"
            "0x0000000000000000000000000000000000000000000000000000000000000022::r::R>"
        )
        pool = PoolDescriptor(id=POOL_ID, token_type="0x22::r::R")
        snapshot = fetch_pool_state(FakeClient(_found(_content(), object_type=node_type)), pool)
        assert snapshot.lst_supply == 1000

    def test_to_dict(self) -> None:
        data = fetch_pool_state(FakeClient(_found(_content())), POOL).to_dict()
        assert data["exchange_rate"] == "1.5"
        assert data["fee_config"] == {
            "mint_fee_bps": 10,
            "redeem_fee_bps": 5,
            "spread_fee_bps": 100,
        }
        assert len(data["validators"]) == 2


class TestSnapshot:
    def _snapshot(self, total: int, lst: int) -> PoolSnapshot:
        return PoolSnapshot(
            id=POOL_ID,
            token_type=TOKEN,
            total_sui_supply=total,
            lst_supply=lst,
            fee_config=FeeConfig(0, 0, 0),
        )

    def test_exchange_rate(self) -> None:
        assert self._snapshot(1500, 1000).exchange_rate == Decimal("1.5")

    def test_exchange_rate_empty_pool(self) -> None:
        assert self._snapshot(0, 0).exchange_rate == Decimal(1)

    def test_validator_address(self) -> None:
        snapshot = fetch_pool_state(FakeClient(_found(_content())), POOL)
        assert snapshot.validator_address(0) == VALIDATOR_A
        assert snapshot.validator_address(1) == VALIDATOR_B

    @pytest.mark.parametrize("index", [-1, 2])
    def test_validator_address_out_of_range(self, index: int) -> None:
        snapshot = fetch_pool_state(FakeClient(_found(_content())), POOL)
        with pytest.raises(IndexError):
            snapshot.validator_address(index)


# ---------------------------------------------------------------------------
# PoolNotFound
# ---------------------------------------------------------------------------


class TestPoolNotFound:
    def test_missing_object(self) -> None:
        client = FakeClient(ObjectResult(found=False, error="notExists"))
        with pytest.raises(PoolNotFound) as exc_info:
            fetch_pool_state(client, POOL)
        assert exc_info.value.details["error"] == "notExists"

    def test_wrong_type(self) -> None:
        client = FakeClient(_found(_content(), object_type=f"{PACKAGE}::coin::Coin<{TOKEN}>"))
        with pytest.raises(PoolNotFound, match="not a pool"):
            fetch_pool_state(client, POOL)

    def test_wrong_token_type(self) -> None:
        other = f"{PACKAGE}::liquid_staking::LiquidStakingInfo<0x2::sui::SUI>"
        with pytest.raises(PoolNotFound):
            fetch_pool_state(FakeClient(_found(_content(), object_type=other)), POOL)

    def test_wrong_package(self) -> None:
        with pytest.raises(PoolNotFound):
            fetch_pool_state(FakeClient(_found(_content())), POOL, "0x" + "cd" * 32)

    def test_no_content(self) -> None:
        with pytest.raises(PoolNotFound, match="no readable content"):
            fetch_pool_state(FakeClient(_found(None)), POOL)

    def test_unexpected_layout(self) -> None:
        content = _content(fee_config=None)
        with pytest.raises(PoolNotFound) as exc_info:
            fetch_pool_state(FakeClient(_found(content)), POOL)
        assert exc_info.value.error_code == "POOL_LAYOUT"
