"""
Validator weight assignments for the weight hook.

Weights are raw u64 integers; turning them into proportions is the
contract's job. This layer only checks that the inputs pair up and
collapses duplicate validators (last write wins, since the protocol has
no notion of the same validator listed twice).
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Sequence

from springsui.errors import LengthMismatch
from springsui.types import normalize_address, validate_amount


class ValidatorWeightMap(Mapping[str, int]):
    """Immutable, insertion-ordered mapping of validator address to weight.

    Keys are normalized on the way in, so any spelling of an address finds
    the same entry. Two spellings of one validator collapse into a single
    entry that keeps the first position and the last weight.

    Raises:
        InvalidAddress: If a key is not valid hex.
        InvalidAmount: If a weight is not a u64 integer.
    """

    def __init__(self, entries: Mapping[str, int] | None = None) -> None:
        self._entries: dict[str, int] = {}
        for address, weight in (entries or {}).items():
            self._entries[normalize_address(address)] = validate_amount(weight, "weight")

    def __getitem__(self, address: str) -> int:
        return self._entries[normalize_address(address)]

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        try:
            return normalize_address(address) in self._entries
        except ValueError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ValidatorWeightMap({self._entries!r})"

    def addresses(self) -> list[str]:
        return list(self._entries)

    def weights(self) -> list[int]:
        return list(self._entries.values())


def build_weight_map(
    addresses: Sequence[str], weights: Sequence[int]
) -> ValidatorWeightMap:
    """Pair validator addresses with weights.

    Addresses are normalized first, so ``0xA`` and ``0x0a`` are the same
    validator. A repeated address keeps its first position and takes the
    later weight.

    Raises:
        LengthMismatch: If the sequences differ in length.
        InvalidAddress: If an address is not valid hex.
        InvalidAmount: If a weight is not a u64 integer.
    """
    if len(addresses) != len(weights):
        raise LengthMismatch(
            f"got {len(addresses)} validator addresses but {len(weights)} weights",
            details={"addresses": len(addresses), "weights": len(weights)},
        )

    entries: dict[str, int] = {}
    for address, weight in zip(addresses, weights):
        entries[normalize_address(address)] = weight

    return ValidatorWeightMap(entries)
