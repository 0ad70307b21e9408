"""
Shared value types: pool descriptors, capability references, addresses
and amounts.

These are plain frozen values supplied by the caller or produced by
lookups. Nothing here performs I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from springsui.errors import InvalidAddress, InvalidAmount

# Well-known shared object holding the ledger's staking system state.
SUI_SYSTEM_STATE_ID = (
    "0x0000000000000000000000000000000000000000000000000000000000000005"
)

SUI_COIN_TYPE = "0x2::sui::SUI"

U64_MAX = 2**64 - 1

_ADDRESS_RE = re.compile(r"^(0x)?[0-9a-fA-F]{1,64}$")
_ADDRESS_HEX_LEN = 64

# Address segments inside a Move type tag, e.g. both ids in
# ``0x2::coin::Coin<0xabc::r::R>``.
_TYPE_ADDRESS_RE = re.compile(r"\b0x[0-9a-fA-F]{1,64}(?=::)")


def normalize_address(value: str) -> str:
    """Normalize an address or object id to ``0x`` + 64 lowercase hex.

    Short forms such as ``0x5`` are left-padded with zeros.

    Raises:
        InvalidAddress: If value is not a hex string of at most 64 digits.
    """
    if not isinstance(value, str) or not _ADDRESS_RE.match(value):
        raise InvalidAddress(
            f"not a valid address: {value!r}", details={"value": repr(value)}
        )
    digits = value[2:] if value.startswith("0x") else value
    return "0x" + digits.lower().rjust(_ADDRESS_HEX_LEN, "0")


def normalize_type(type_tag: str) -> str:
    """Normalize every address inside a Move type tag.

    ``0x2::sui::SUI`` and the full-length form the node reports compare
    equal after normalization.
    """
    return _TYPE_ADDRESS_RE.sub(lambda m: normalize_address(m.group(0)), type_tag)


def validate_amount(value: Any, name: str = "amount") -> int:
    """Return ``value`` if it is an int in [0, 2**64 - 1], else raise InvalidAmount."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(
            f"{name} must be an integer, got: {value!r}",
            details={"field": name, "value": repr(value)},
        )
    if value < 0:
        raise InvalidAmount(
            f"{name} must be non-negative, got: {value}",
            details={"field": name, "value": value},
        )
    if value > U64_MAX:
        raise InvalidAmount(
            f"{name} exceeds u64, got: {value}",
            details={"field": name, "value": value},
        )
    return value


@dataclass(frozen=True)
class PoolDescriptor:
    """Identifies a liquid-staking pool.

    Attributes:
        id: Object id of the pool (``LiquidStakingInfo<T>``).
        token_type: Fully qualified type of the pool's LST, e.g.
            ``0x1e2...::ripleys::RIPLEYS``.
        weight_hook_id: Object id of the pool's weight hook, if any.
    """

    id: str
    token_type: str
    weight_hook_id: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("pool id must be non-empty")
        if not self.token_type:
            raise ValueError("pool token_type must be non-empty")


@dataclass(frozen=True)
class CapabilityRef:
    """An owned capability object located on the ledger.

    Possession of the object is what authorizes the action; the handle is
    passed explicitly into every admin operation.
    """

    object_id: str
    object_type: str
    version: str | None = None
    digest: str | None = None
