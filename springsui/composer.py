"""
Transaction composer: one method per protocol action.

Every method takes the unit under construction and the pool descriptor,
validates its own inputs, and appends one or more chained calls. Handles
produced earlier in the unit are passed through verbatim; nothing is
re-fetched and nothing is submitted here.

Validation happens before the first append, and multi-call actions run
inside ``unit.atomic()``, so a failing action leaves the unit as it found
it.

Authorization is explicit: admin actions take the capability (a
CapabilityRef from the resolver, or a handle produced earlier in the same
unit) as an argument. Nothing is inferred from the sender.
"""

from __future__ import annotations

from typing import Any, Mapping, Union

from springsui import fees as fee_builder
from springsui.errors import WeightHookNotConfigured
from springsui.fees import FeeConfig, FeeConfigArgs
from springsui.ledger import calls
from springsui.log import get_logger
from springsui.types import (
    SUI_SYSTEM_STATE_ID,
    CapabilityRef,
    PoolDescriptor,
    normalize_address,
    validate_amount,
)
from springsui.unit import Argument, Handle, Result, TransactionUnit
from springsui.weights import ValidatorWeightMap, build_weight_map

logger = get_logger(__name__)

Capability = Union[CapabilityRef, Handle, str]


def _cap_argument(cap: Capability) -> Argument:
    if isinstance(cap, CapabilityRef):
        return cap.object_id
    return cap


class TransactionComposer:
    """Appends protocol actions to transaction units.

    Args:
        package_id: Id of the liquid-staking package.
        system_state_id: The ledger's staking system state object.
    """

    def __init__(
        self,
        package_id: str,
        system_state_id: str = SUI_SYSTEM_STATE_ID,
    ) -> None:
        self._package_id = normalize_address(package_id)
        self._system_state_id = normalize_address(system_state_id)

    @property
    def package_id(self) -> str:
        return self._package_id

    @property
    def system_state_id(self) -> str:
        return self._system_state_id

    # -----------------------------------------------------------------
    # User actions
    # -----------------------------------------------------------------

    def mint(
        self, unit: TransactionUnit, pool: PoolDescriptor, funds_in: Argument
    ) -> Result:
        """Stake ``funds_in`` (a SUI coin) and return the minted LST handle."""
        return calls.mint(
            unit,
            self._package_id,
            pool.token_type,
            self_=pool.id,
            system_state=self._system_state_id,
            sui=funds_in,
        )

    def redeem(
        self, unit: TransactionUnit, pool: PoolDescriptor, token_in: Argument
    ) -> Result:
        """Burn ``token_in`` (an LST coin) and return the SUI handle."""
        return calls.redeem(
            unit,
            self._package_id,
            pool.token_type,
            self_=pool.id,
            lst=token_in,
            system_state=self._system_state_id,
        )

    # -----------------------------------------------------------------
    # Admin actions
    # -----------------------------------------------------------------

    def increase_validator_stake(
        self,
        unit: TransactionUnit,
        pool: PoolDescriptor,
        admin_cap: Capability,
        validator_address: str,
        amount: int,
    ) -> None:
        amount = validate_amount(amount, "amount")
        validator_address = normalize_address(validator_address)
        logger.info("increase stake of %s by %d", validator_address, amount)
        calls.increase_validator_stake(
            unit,
            self._package_id,
            pool.token_type,
            self_=pool.id,
            admin_cap=_cap_argument(admin_cap),
            system_state=self._system_state_id,
            validator_address=validator_address,
            sui_amount=amount,
        )

    def decrease_validator_stake(
        self,
        unit: TransactionUnit,
        pool: PoolDescriptor,
        admin_cap: Capability,
        validator_address: str,
        max_amount: int,
    ) -> None:
        max_amount = validate_amount(max_amount, "max_amount")
        validator_address = normalize_address(validator_address)
        logger.info("decrease stake of %s by up to %d", validator_address, max_amount)
        calls.decrease_validator_stake(
            unit,
            self._package_id,
            pool.token_type,
            self_=pool.id,
            admin_cap=_cap_argument(admin_cap),
            system_state=self._system_state_id,
            validator_address=validator_address,
            max_sui_amount=max_amount,
        )

    def collect_fees(
        self, unit: TransactionUnit, pool: PoolDescriptor, admin_cap: Capability
    ) -> Result:
        """Withdraw accumulated protocol fees; returns the SUI handle."""
        return calls.collect_fees(
            unit,
            self._package_id,
            pool.token_type,
            self_=pool.id,
            system_state=self._system_state_id,
            admin_cap=_cap_argument(admin_cap),
        )

    def update_fees(
        self,
        unit: TransactionUnit,
        pool: PoolDescriptor,
        admin_cap: Capability,
        fee_args: FeeConfigArgs | Mapping[str, Any],
        current: FeeConfig | None = None,
    ) -> FeeConfig:
        """Replace the pool's fee configuration.

        The requested fields are staged on a FeeConfigBuilder and
        finalized against ``current``: fees not mentioned in ``fee_args``
        keep their current value. The finalized config is then written
        through the on-chain builder, each builder handle feeding the next
        call.

        Args:
            fee_args: Requested changes; None/missing means unchanged.
            current: The pool's present FeeConfig (from fetch_pool_state).
                Required unless all three fees are given.

        Returns:
            The FeeConfig the appended calls will install.

        Raises:
            InvalidRange: A requested fee is outside [0, 10000].
            FeeConfigIncomplete: A fee is left unchanged but current is None.
        """
        if not isinstance(fee_args, FeeConfigArgs):
            fee_args = FeeConfigArgs.from_mapping(fee_args)

        builder = fee_builder.create()
        if fee_args.mint_fee_bps is not None:
            logger.info("Setting mint fee bps to %s", fee_args.mint_fee_bps)
        if fee_args.redeem_fee_bps is not None:
            logger.info("Setting redeem fee bps to %s", fee_args.redeem_fee_bps)
        if fee_args.spread_fee is not None:
            logger.info("Setting spread fee bps to %s", fee_args.spread_fee)
        fee_args.apply_to(builder)
        config = builder.finalize(current)

        with unit.atomic():
            handle = calls.new_builder(unit, self._package_id)
            handle = calls.set_sui_mint_fee_bps(
                unit, self._package_id, self_=handle, fee=config.mint_fee_bps
            )
            handle = calls.set_redeem_fee_bps(
                unit, self._package_id, self_=handle, fee=config.redeem_fee_bps
            )
            handle = calls.set_spread_fee_bps(
                unit, self._package_id, self_=handle, fee=config.spread_fee_bps
            )
            fee_config = calls.to_fee_config(unit, self._package_id, handle)
            calls.update_fees(
                unit,
                self._package_id,
                pool.token_type,
                self_=pool.id,
                admin_cap=_cap_argument(admin_cap),
                fee_config=fee_config,
            )
        return config

    # -----------------------------------------------------------------
    # Weight hook
    # -----------------------------------------------------------------

    def initialize_weight_hook(
        self, unit: TransactionUnit, pool: PoolDescriptor, admin_cap: Capability
    ) -> Result:
        """Create the pool's weight hook; returns the new hook admin cap handle.

        One-time per pool. A repeat is rejected by the contract at execution.
        """
        return calls.weight_hook_new(
            unit,
            self._package_id,
            pool.token_type,
            self_=pool.id,
            admin_cap=_cap_argument(admin_cap),
        )

    def set_validator_addresses_and_weights(
        self,
        unit: TransactionUnit,
        pool: PoolDescriptor,
        weight_hook_admin_cap: Capability,
        weights: ValidatorWeightMap | Mapping[str, int],
        *,
        weight_hook_id: str | None = None,
    ) -> None:
        """Replace the hook's validator weights with ``weights``.

        ``weights`` should come from build_weight_map; a plain mapping is
        run through it first.
        """
        hook_id = self._weight_hook_id(pool, weight_hook_id)
        if not isinstance(weights, ValidatorWeightMap):
            weights = build_weight_map(list(weights.keys()), list(weights.values()))

        calls.set_validator_addresses_and_weights(
            unit,
            self._package_id,
            pool.token_type,
            self_=hook_id,
            weight_hook_admin_cap=_cap_argument(weight_hook_admin_cap),
            validator_addresses=weights.addresses(),
            weights=weights.weights(),
        )

    def rebalance(
        self,
        unit: TransactionUnit,
        pool: PoolDescriptor,
        weight_hook_id: str | None = None,
    ) -> None:
        """Ask the hook to redistribute stake. Anyone may call this."""
        hook_id = self._weight_hook_id(pool, weight_hook_id)
        calls.rebalance(
            unit,
            self._package_id,
            pool.token_type,
            self_=hook_id,
            system_state=self._system_state_id,
            liquid_staking_info=pool.id,
        )

    @staticmethod
    def _weight_hook_id(pool: PoolDescriptor, weight_hook_id: str | None) -> str:
        hook_id = weight_hook_id or pool.weight_hook_id
        if not hook_id:
            raise WeightHookNotConfigured(
                f"pool {pool.id} has no weight hook id configured",
                details={"pool_id": pool.id},
            )
        return normalize_address(hook_id)
