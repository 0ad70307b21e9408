"""
Error taxonomy for springsui.

Every failure raised by this package derives from ``LiquidStakingError``
and carries a machine-readable ``error_code`` plus a ``details`` dict for
diagnostics.

Local validation errors (InvalidRange, InvalidAmount, InvalidAddress,
LengthMismatch, FeeConfigIncomplete) are also ``ValueError`` subclasses and are always
raised before anything is appended to a transaction unit.

Ledger failures are opaque: the ledger or the transport reports a string,
and ``classify_execution_error`` maps it to a coarse code. Unknown strings
map to UNKNOWN rather than guessing.
"""

from __future__ import annotations

from typing import Any

# Fee values are basis points.
MAX_BPS = 10_000


class LiquidStakingError(Exception):
    """Base class for all springsui errors."""

    default_code = "UNKNOWN"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code or self.default_code
        self.details = details or {}


# =========================================================================
# Local validation
# =========================================================================


class InvalidRange(LiquidStakingError, ValueError):
    """Fee value outside [0, MAX_BPS]."""

    default_code = "INVALID_RANGE"


class InvalidAmount(LiquidStakingError, ValueError):
    """Negative or non-integer stake amount."""

    default_code = "INVALID_AMOUNT"


class InvalidAddress(LiquidStakingError, ValueError):
    """Address or object id that is not hex of at most 64 digits."""

    default_code = "INVALID_ADDRESS"


class LengthMismatch(LiquidStakingError, ValueError):
    """Validator address and weight sequences differ in length."""

    default_code = "LENGTH_MISMATCH"


class FeeConfigIncomplete(LiquidStakingError, ValueError):
    """A fee field is unset and there is no current value to keep."""

    default_code = "FEE_CONFIG_INCOMPLETE"


class BuilderConsumed(LiquidStakingError):
    """A FeeConfigBuilder was used after finalize()."""

    default_code = "BUILDER_CONSUMED"


# =========================================================================
# Lookups
# =========================================================================


class CapabilityNotFound(LiquidStakingError):
    """The account owns no object of the requested capability type."""

    default_code = "CAPABILITY_NOT_FOUND"


class PoolNotFound(LiquidStakingError):
    """The identifier does not resolve to a pool of the expected type."""

    default_code = "POOL_NOT_FOUND"


class CoinNotFound(LiquidStakingError):
    """The account owns no coin of the requested type."""

    default_code = "COIN_NOT_FOUND"


class WeightHookNotConfigured(LiquidStakingError):
    """A weight-hook operation was requested but no hook id is known."""

    default_code = "WEIGHT_HOOK_NOT_CONFIGURED"


# =========================================================================
# Transaction unit graph
# =========================================================================


class UnitGraphError(LiquidStakingError):
    """A handle would leave the unit's reference graph invalid."""

    default_code = "UNIT_GRAPH"


# =========================================================================
# Ledger
# =========================================================================


class LedgerRejected(LiquidStakingError):
    """Opaque failure reported by the ledger or the transport.

    Never retried here. Callers decide whether to rebuild and resubmit.
    """

    default_code = "UNKNOWN"


# Substring -> code, checked in order. Start small, add precision when needed.
_EXECUTION_ERROR_MAP: tuple[tuple[str, str], ...] = (
    ("MoveAbort", "MOVE_ABORT"),
    ("InsufficientGas", "INSUFFICIENT_GAS"),
    ("InsufficientCoinBalance", "INSUFFICIENT_COIN_BALANCE"),
    ("InsufficientFunds", "INSUFFICIENT_COIN_BALANCE"),
    ("ObjectNotFound", "OBJECT_NOT_FOUND"),
    ("notExists", "OBJECT_NOT_FOUND"),
)


def classify_execution_error(error: str | None) -> str:
    """Map a ledger failure string to a coarse error code.

    Args:
        error: Failure text from the execution status or an RPC error
            message. None means the ledger gave no reason.

    Returns:
        One of MOVE_ABORT, INSUFFICIENT_GAS, INSUFFICIENT_COIN_BALANCE,
        OBJECT_NOT_FOUND or UNKNOWN.
    """
    if not error:
        return "UNKNOWN"

    for needle, code in _EXECUTION_ERROR_MAP:
        if needle in error:
            return code

    return "UNKNOWN"
