"""
Fee configuration: a staged builder that finalizes into an immutable value.

A FeeConfigBuilder holds three tri-state fields. Each field is either
``UNSET`` or ``SetTo(bps)``; there is no nullable integer in between, so
the unset-field policy is explicit:

    Unset means "do not change this fee".

The on-chain builder defaults unset fields to zero, so "unchanged" cannot
be expressed by leaving a field out. ``finalize()`` therefore resolves
each unset field from ``current`` (the pool's present FeeConfig). With no
``current`` an unset field is an error; a value is never invented.

Lifecycle:
    create() -> set_*() in any order -> finalize() (consumes the builder).

All setters validate before mutating: a rejected value leaves the
builder exactly as it was.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from springsui.errors import MAX_BPS, BuilderConsumed, FeeConfigIncomplete, InvalidRange

FEE_FIELDS = ("mint_fee_bps", "redeem_fee_bps", "spread_fee_bps")


# =========================================================================
# Tri-state field
# =========================================================================


class Unset:
    """Marker for a fee field that was never set."""

    _instance: Unset | None = None

    def __new__(cls) -> Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"


UNSET = Unset()


@dataclass(frozen=True)
class SetTo:
    """A fee field explicitly set to ``value`` basis points."""

    value: int


FeeField = Union[Unset, SetTo]


def validate_bps(bps: Any, field_name: str = "fee") -> int:
    """Return ``bps`` if it is an int in [0, MAX_BPS], else raise InvalidRange."""
    if isinstance(bps, bool) or not isinstance(bps, int):
        raise InvalidRange(
            f"{field_name} must be an integer number of bps, got: {bps!r}",
            details={"field": field_name, "value": repr(bps)},
        )
    if not 0 <= bps <= MAX_BPS:
        raise InvalidRange(
            f"{field_name} must be in [0, {MAX_BPS}], got: {bps}",
            details={"field": field_name, "value": bps},
        )
    return bps


# =========================================================================
# FeeConfig
# =========================================================================


@dataclass(frozen=True)
class FeeConfig:
    """Immutable fee configuration, all values in basis points."""

    mint_fee_bps: int
    redeem_fee_bps: int
    spread_fee_bps: int

    def __post_init__(self) -> None:
        for name in FEE_FIELDS:
            validate_bps(getattr(self, name), name)

    def to_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in FEE_FIELDS}


# =========================================================================
# FeeConfigBuilder
# =========================================================================


class FeeConfigBuilder:
    """Mutable staging value for a FeeConfig.

    Setters return the builder so calls can be chained. Once finalized the
    builder is consumed and every further call raises BuilderConsumed.
    """

    def __init__(self) -> None:
        self._fields: dict[str, FeeField] = {name: UNSET for name in FEE_FIELDS}
        self._consumed = False

    @property
    def mint_fee(self) -> FeeField:
        return self._fields["mint_fee_bps"]

    @property
    def redeem_fee(self) -> FeeField:
        return self._fields["redeem_fee_bps"]

    @property
    def spread_fee(self) -> FeeField:
        return self._fields["spread_fee_bps"]

    @property
    def consumed(self) -> bool:
        return self._consumed

    def fields(self) -> dict[str, FeeField]:
        """Snapshot of the three fields."""
        return dict(self._fields)

    def is_set(self, name: str) -> bool:
        return isinstance(self._fields[name], SetTo)

    def _set(self, name: str, bps: Any) -> FeeConfigBuilder:
        self._ensure_usable()
        value = validate_bps(bps, name)
        self._fields[name] = SetTo(value)
        return self

    def set_mint_fee(self, bps: int) -> FeeConfigBuilder:
        return self._set("mint_fee_bps", bps)

    def set_redeem_fee(self, bps: int) -> FeeConfigBuilder:
        return self._set("redeem_fee_bps", bps)

    def set_spread_fee(self, bps: int) -> FeeConfigBuilder:
        return self._set("spread_fee_bps", bps)

    def finalize(self, current: FeeConfig | None = None) -> FeeConfig:
        """Produce the FeeConfig and consume the builder.

        Args:
            current: The pool's present configuration. Unset fields keep
                its values. Required when any field is unset.

        Raises:
            FeeConfigIncomplete: A field is unset and current is None.
            BuilderConsumed: The builder was already finalized.
        """
        self._ensure_usable()
        resolved: dict[str, int] = {}
        for name, value in self._fields.items():
            if isinstance(value, SetTo):
                resolved[name] = value.value
            elif current is not None:
                resolved[name] = getattr(current, name)
            else:
                raise FeeConfigIncomplete(
                    f"{name} is unset and no current fee config was given",
                    details={"field": name},
                )
        self._consumed = True
        return FeeConfig(**resolved)

    def _ensure_usable(self) -> None:
        if self._consumed:
            raise BuilderConsumed("fee config builder was already finalized")

    def __repr__(self) -> str:
        parts = ", ".join(f"{k}={v!r}" for k, v in self._fields.items())
        return f"FeeConfigBuilder({parts})"


# =========================================================================
# Functional API
# =========================================================================


def create() -> FeeConfigBuilder:
    return FeeConfigBuilder()


def set_mint_fee(builder: FeeConfigBuilder, bps: int) -> FeeConfigBuilder:
    return builder.set_mint_fee(bps)


def set_redeem_fee(builder: FeeConfigBuilder, bps: int) -> FeeConfigBuilder:
    return builder.set_redeem_fee(bps)


def set_spread_fee(builder: FeeConfigBuilder, bps: int) -> FeeConfigBuilder:
    return builder.set_spread_fee(bps)


def finalize(builder: FeeConfigBuilder, current: FeeConfig | None = None) -> FeeConfig:
    return builder.finalize(current)


# =========================================================================
# Fee-config input
# =========================================================================


@dataclass(frozen=True)
class FeeConfigArgs:
    """Requested fee changes; None leaves a fee as it is."""

    mint_fee_bps: int | None = None
    redeem_fee_bps: int | None = None
    spread_fee: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FeeConfigArgs:
        """Accept both snake_case and the camelCase CLI/JSON spelling."""
        def pick(*keys: str) -> Any:
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        return cls(
            mint_fee_bps=pick("mint_fee_bps", "mintFeeBps"),
            redeem_fee_bps=pick("redeem_fee_bps", "redeemFeeBps"),
            spread_fee=pick("spread_fee", "spreadFee"),
        )

    def is_empty(self) -> bool:
        return (
            self.mint_fee_bps is None
            and self.redeem_fee_bps is None
            and self.spread_fee is None
        )

    def apply_to(self, builder: FeeConfigBuilder) -> FeeConfigBuilder:
        """Set every requested field on ``builder``."""
        if self.mint_fee_bps is not None:
            builder.set_mint_fee(self.mint_fee_bps)
        if self.redeem_fee_bps is not None:
            builder.set_redeem_fee(self.redeem_fee_bps)
        if self.spread_fee is not None:
            builder.set_spread_fee(self.spread_fee)
        return builder
