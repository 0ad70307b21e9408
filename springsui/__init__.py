"""
springsui: transaction composition for the SpringSui liquid-staking
protocol.

Build a TransactionUnit with the TransactionComposer, then hand it to
``springsui.ledger.submit`` with a client and a signer. The CLI lives in
``springsui.cli``.
"""

from springsui.capability import (
    find_admin_cap,
    find_capability,
    find_weight_hook_admin_cap,
)
from springsui.composer import TransactionComposer
from springsui.errors import (
    MAX_BPS,
    BuilderConsumed,
    CapabilityNotFound,
    CoinNotFound,
    FeeConfigIncomplete,
    InvalidAddress,
    InvalidAmount,
    InvalidRange,
    LedgerRejected,
    LengthMismatch,
    LiquidStakingError,
    PoolNotFound,
    UnitGraphError,
    WeightHookNotConfigured,
)
from springsui.fees import (
    UNSET,
    FeeConfig,
    FeeConfigArgs,
    FeeConfigBuilder,
    SetTo,
)
from springsui.pool_state import PoolSnapshot, ValidatorStake, fetch_pool_state
from springsui.types import (
    SUI_SYSTEM_STATE_ID,
    CapabilityRef,
    PoolDescriptor,
    normalize_address,
    normalize_type,
    validate_amount,
)
from springsui.unit import GAS, ParamMode, Result, TransactionUnit, UnitState
from springsui.weights import ValidatorWeightMap, build_weight_map

__version__ = "0.1.0"

__all__ = [
    "GAS",
    "MAX_BPS",
    "SUI_SYSTEM_STATE_ID",
    "UNSET",
    "BuilderConsumed",
    "CapabilityNotFound",
    "CapabilityRef",
    "CoinNotFound",
    "FeeConfig",
    "FeeConfigArgs",
    "FeeConfigBuilder",
    "FeeConfigIncomplete",
    "InvalidAddress",
    "InvalidAmount",
    "InvalidRange",
    "LedgerRejected",
    "LengthMismatch",
    "LiquidStakingError",
    "ParamMode",
    "PoolDescriptor",
    "PoolNotFound",
    "PoolSnapshot",
    "Result",
    "SetTo",
    "TransactionComposer",
    "TransactionUnit",
    "UnitGraphError",
    "UnitState",
    "ValidatorStake",
    "ValidatorWeightMap",
    "WeightHookNotConfigured",
    "build_weight_map",
    "fetch_pool_state",
    "find_admin_cap",
    "find_capability",
    "find_weight_hook_admin_cap",
    "normalize_address",
    "normalize_type",
    "validate_amount",
]
