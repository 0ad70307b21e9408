"""
Typed call stubs for the liquid-staking contract.

One function per contract entry point. Each stub knows its parameter
modes and how many values the entry point returns, and appends exactly
one Move call to the unit. No validation beyond the unit's own graph
checks; amounts are validated by the composer before any stub runs.

Modules covered:
    - ``liquid_staking``: mint, redeem, stake adjustments, fees.
    - ``fees``: the on-chain FeeConfigBuilder chain.
    - ``weight``: the weight hook.
"""

from __future__ import annotations

from typing import Sequence

from springsui.unit import Argument, ParamMode, Pure, Result, TransactionUnit

REF = ParamMode.REF
MUT = ParamMode.MUT
VAL = ParamMode.VALUE


def _target(package_id: str, module: str, function: str) -> str:
    return f"{package_id}::{module}::{function}"


def _single(results: list[Result]) -> Result:
    (result,) = results
    return result


# =========================================================================
# liquid_staking
# =========================================================================


def mint(
    unit: TransactionUnit,
    package_id: str,
    type_arg: str,
    *,
    self_: Argument,
    system_state: Argument,
    sui: Argument,
) -> Result:
    """``mint<P>(&mut LiquidStakingInfo<P>, &mut SuiSystemState, Coin<SUI>): Coin<P>``"""
    return _single(
        unit.move_call(
            _target(package_id, "liquid_staking", "mint"),
            [type_arg],
            [self_, system_state, sui],
            [MUT, MUT, VAL],
            result_count=1,
        )
    )


def redeem(
    unit: TransactionUnit,
    package_id: str,
    type_arg: str,
    *,
    self_: Argument,
    lst: Argument,
    system_state: Argument,
) -> Result:
    """``redeem<P>(&mut LiquidStakingInfo<P>, Coin<P>, &mut SuiSystemState): Coin<SUI>``"""
    return _single(
        unit.move_call(
            _target(package_id, "liquid_staking", "redeem"),
            [type_arg],
            [self_, lst, system_state],
            [MUT, VAL, MUT],
            result_count=1,
        )
    )


def increase_validator_stake(
    unit: TransactionUnit,
    package_id: str,
    type_arg: str,
    *,
    self_: Argument,
    admin_cap: Argument,
    system_state: Argument,
    validator_address: str,
    sui_amount: int,
) -> None:
    unit.move_call(
        _target(package_id, "liquid_staking", "increase_validator_stake"),
        [type_arg],
        [self_, admin_cap, system_state, Pure(validator_address, "address"), Pure(sui_amount, "u64")],
        [MUT, REF, MUT, VAL, VAL],
    )


def decrease_validator_stake(
    unit: TransactionUnit,
    package_id: str,
    type_arg: str,
    *,
    self_: Argument,
    admin_cap: Argument,
    system_state: Argument,
    validator_address: str,
    max_sui_amount: int,
) -> None:
    unit.move_call(
        _target(package_id, "liquid_staking", "decrease_validator_stake"),
        [type_arg],
        [self_, admin_cap, system_state, Pure(validator_address, "address"), Pure(max_sui_amount, "u64")],
        [MUT, REF, MUT, VAL, VAL],
    )


def collect_fees(
    unit: TransactionUnit,
    package_id: str,
    type_arg: str,
    *,
    self_: Argument,
    system_state: Argument,
    admin_cap: Argument,
) -> Result:
    return _single(
        unit.move_call(
            _target(package_id, "liquid_staking", "collect_fees"),
            [type_arg],
            [self_, system_state, admin_cap],
            [MUT, MUT, REF],
            result_count=1,
        )
    )


def update_fees(
    unit: TransactionUnit,
    package_id: str,
    type_arg: str,
    *,
    self_: Argument,
    admin_cap: Argument,
    fee_config: Argument,
) -> None:
    unit.move_call(
        _target(package_id, "liquid_staking", "update_fees"),
        [type_arg],
        [self_, admin_cap, fee_config],
        [MUT, REF, VAL],
    )


# =========================================================================
# fees
# =========================================================================


def new_builder(unit: TransactionUnit, package_id: str) -> Result:
    return _single(
        unit.move_call(
            _target(package_id, "fees", "new_builder"), [], [], [], result_count=1
        )
    )


def _set_fee(
    unit: TransactionUnit, package_id: str, function: str, builder: Argument, fee: int
) -> Result:
    # Setters take the builder by value and hand back the updated one.
    return _single(
        unit.move_call(
            _target(package_id, "fees", function),
            [],
            [builder, Pure(fee, "u64")],
            [VAL, VAL],
            result_count=1,
        )
    )


def set_sui_mint_fee_bps(
    unit: TransactionUnit, package_id: str, *, self_: Argument, fee: int
) -> Result:
    return _set_fee(unit, package_id, "set_sui_mint_fee_bps", self_, fee)


def set_redeem_fee_bps(
    unit: TransactionUnit, package_id: str, *, self_: Argument, fee: int
) -> Result:
    return _set_fee(unit, package_id, "set_redeem_fee_bps", self_, fee)


def set_spread_fee_bps(
    unit: TransactionUnit, package_id: str, *, self_: Argument, fee: int
) -> Result:
    return _set_fee(unit, package_id, "set_spread_fee_bps", self_, fee)


def to_fee_config(unit: TransactionUnit, package_id: str, builder: Argument) -> Result:
    return _single(
        unit.move_call(
            _target(package_id, "fees", "to_fee_config"),
            [],
            [builder],
            [VAL],
            result_count=1,
        )
    )


# =========================================================================
# weight
# =========================================================================


def weight_hook_new(
    unit: TransactionUnit,
    package_id: str,
    type_arg: str,
    *,
    self_: Argument,
    admin_cap: Argument,
) -> Result:
    """``weight::new<P>(&LiquidStakingInfo<P>, &AdminCap<P>): WeightHookAdminCap<P>``

    The hook object itself is shared by the contract.
    """
    return _single(
        unit.move_call(
            _target(package_id, "weight", "new"),
            [type_arg],
            [self_, admin_cap],
            [REF, REF],
            result_count=1,
        )
    )


def set_validator_addresses_and_weights(
    unit: TransactionUnit,
    package_id: str,
    type_arg: str,
    *,
    self_: Argument,
    weight_hook_admin_cap: Argument,
    validator_addresses: Sequence[str],
    weights: Sequence[int],
) -> None:
    unit.move_call(
        _target(package_id, "weight", "set_validator_addresses_and_weights"),
        [type_arg],
        [
            self_,
            weight_hook_admin_cap,
            Pure(list(validator_addresses), "vector<address>"),
            Pure(list(weights), "vector<u64>"),
        ],
        [MUT, REF, VAL, VAL],
    )


def rebalance(
    unit: TransactionUnit,
    package_id: str,
    type_arg: str,
    *,
    self_: Argument,
    system_state: Argument,
    liquid_staking_info: Argument,
) -> None:
    unit.move_call(
        _target(package_id, "weight", "rebalance"),
        [type_arg],
        [self_, system_state, liquid_staking_info],
        [MUT, MUT, MUT],
    )
