"""
Read-only pool snapshots.

``fetch_pool_state`` reads the pool object once and returns an immutable
PoolSnapshot for display and for resolving "keep the current value"
fee updates. Nothing here touches a transaction unit.

The exchange rate shown is simply total underlying stake divided by LST
supply as reported by the pool object (1 when no LST exists). The
contract's own pricing logic is not reproduced.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from springsui.errors import PoolNotFound
from springsui.fees import FeeConfig
from springsui.ledger.client import LedgerClient
from springsui.log import get_logger
from springsui.types import PoolDescriptor, normalize_address, normalize_type

logger = get_logger(__name__)

POOL_STRUCT = "liquid_staking::LiquidStakingInfo"


@dataclass(frozen=True)
class ValidatorStake:
    address: str
    total_sui_amount: int
    staking_pool_id: str | None = None


@dataclass(frozen=True)
class PoolSnapshot:
    """Pool attributes as read from the ledger at one point in time."""

    id: str
    token_type: str
    total_sui_supply: int
    lst_supply: int
    fee_config: FeeConfig
    accrued_spread_fees: int = 0
    collected_fees: int = 0
    weight_hook_id: str | None = None
    validators: tuple[ValidatorStake, ...] = ()
    version: str | None = None

    @property
    def exchange_rate(self) -> Decimal:
        """Underlying stake per LST."""
        if self.lst_supply == 0:
            return Decimal(1)
        return Decimal(self.total_sui_supply) / Decimal(self.lst_supply)

    def validator_address(self, index: int) -> str:
        """Address of the validator at ``index`` in the pool's list.

        Raises:
            IndexError: If there is no such validator.
        """
        if not 0 <= index < len(self.validators):
            raise IndexError(
                f"validator index {index} out of range (pool has {len(self.validators)})"
            )
        return self.validators[index].address

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "token_type": self.token_type,
            "exchange_rate": str(self.exchange_rate),
            "total_sui_supply": self.total_sui_supply,
            "lst_supply": self.lst_supply,
            "fee_config": self.fee_config.to_dict(),
            "accrued_spread_fees": self.accrued_spread_fees,
            "collected_fees": self.collected_fees,
            "weight_hook_id": self.weight_hook_id,
            "validators": [
                {"address": v.address, "total_sui_amount": v.total_sui_amount}
                for v in self.validators
            ],
        }


# =========================================================================
# Parsing helpers
# =========================================================================


def _dig(data: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(data, dict) or key not in data:
            return None
        data = data[key]
    return data


def _option(value: Any) -> Any:
    # Move Option<T> appears either as the value itself or as {"vec": [...]}.
    if isinstance(value, dict) and "vec" in value and len(value) == 1:
        vec = value["vec"]
        return vec[0] if vec else None
    return value


def _int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, dict):
        # Balance<T> and Supply<T> wrap their amount in "value".
        return _int(value.get("value"), default)
    return int(value)


def _expected_type(token_type: str) -> str:
    return f"{POOL_STRUCT}<{token_type}>"


def _type_matches(object_type: str | None, pool: PoolDescriptor, package_id: str | None) -> bool:
    if not object_type:
        return False
    package, _, rest = object_type.partition("::")
    if normalize_type(rest) != normalize_type(_expected_type(pool.token_type)):
        return False
    if package_id is None:
        return True
    try:
        return normalize_address(package) == normalize_address(package_id)
    except ValueError:
        return False


def _parse_fee_config(raw: Any) -> FeeConfig:
    cell = _option(raw)
    if isinstance(cell, dict) and "element" in cell:
        # Cell<FeeConfig>
        cell = _option(cell["element"])
    if not isinstance(cell, dict):
        raise ValueError("fee_config is missing")
    mint = cell.get("sui_mint_fee_bps", cell.get("mint_fee_bps"))
    return FeeConfig(
        mint_fee_bps=_int(mint),
        redeem_fee_bps=_int(cell.get("redeem_fee_bps")),
        spread_fee_bps=_int(cell.get("spread_fee_bps")),
    )


def _parse_validators(storage: Any) -> tuple[ValidatorStake, ...]:
    infos = _dig(storage, "validator_infos") or []
    validators = []
    for info in infos:
        address = info.get("validator_address")
        if not address:
            continue
        validators.append(
            ValidatorStake(
                address=normalize_address(address),
                total_sui_amount=_int(info.get("total_sui_amount")),
                staking_pool_id=info.get("staking_pool_id"),
            )
        )
    return tuple(validators)


# =========================================================================
# fetch_pool_state
# =========================================================================


def fetch_pool_state(
    client: LedgerClient,
    pool: PoolDescriptor,
    package_id: str | None = None,
) -> PoolSnapshot:
    """Read a pool snapshot.

    Args:
        client: Ledger client for the single object read.
        pool: The pool to read.
        package_id: If given, the pool's type must come from this package.

    Returns:
        PoolSnapshot of the current on-chain state.

    Raises:
        PoolNotFound: If the id does not resolve to a
            ``LiquidStakingInfo<token_type>`` object with readable content.
        LedgerRejected: If the ledger or transport fails.
    """
    result = client.get_object(pool.id)
    if not result.found or result.data is None:
        raise PoolNotFound(
            f"pool {pool.id} not found ({result.error})",
            details={"pool_id": pool.id, "error": result.error},
        )

    data = result.data
    if not _type_matches(data.type, pool, package_id):
        raise PoolNotFound(
            f"object {pool.id} is {data.type}, not a pool of {pool.token_type}",
            details={"pool_id": pool.id, "object_type": data.type},
        )

    content = data.content
    if not content:
        raise PoolNotFound(
            f"pool {pool.id} has no readable content",
            details={"pool_id": pool.id},
        )

    try:
        snapshot = PoolSnapshot(
            id=data.object_id,
            token_type=pool.token_type,
            total_sui_supply=_int(_dig(content, "storage", "total_sui_supply")),
            lst_supply=_int(_dig(content, "lst_treasury_cap", "total_supply")),
            fee_config=_parse_fee_config(content.get("fee_config")),
            accrued_spread_fees=_int(content.get("accrued_spread_fees")),
            collected_fees=_int(content.get("fees")),
            weight_hook_id=pool.weight_hook_id,
            validators=_parse_validators(content.get("storage")),
            version=data.version,
        )
    except (TypeError, ValueError, AttributeError) as exc:
        raise PoolNotFound(
            f"pool {pool.id} has an unexpected layout: {exc}",
            error_code="POOL_LAYOUT",
            details={"pool_id": pool.id},
        ) from exc

    logger.debug("pool %s: %s", pool.id, snapshot.to_dict())
    return snapshot
