"""
Transaction unit: an atomic batch of chained ledger calls.

A TransactionUnit is an ordered, append-only list of commands plus an
input table. Commands can produce handles (``Result``) that later
commands consume, which makes the unit a DAG of producer/consumer edges:

    - A handle may only be used after the command that produced it.
    - A handle passed by value is consumed; it cannot be used again.
      Owned objects referenced by id follow the same rule: once moved,
      the object is gone for the rest of the unit.
    - Handles from a different unit are rejected.

Every append validates all of its arguments first and only then mutates
the unit, so a failed append leaves the unit exactly as it was.

The unit is pure data. It never talks to the network; ``to_dict()``
produces the document a signer turns into ledger bytes.

Lifecycle:
    OPEN -> SUBMITTED (handed to the transport) or DISCARDED.
    Closed units reject further appends.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Iterator, Sequence, Union

from springsui.errors import UnitGraphError
from springsui.integrity import content_digest
from springsui.log import get_logger
from springsui.types import normalize_address, validate_amount

logger = get_logger(__name__)

UNIT_DOCUMENT_VERSION = 1


class UnitState(StrEnum):
    OPEN = "OPEN"
    SUBMITTED = "SUBMITTED"
    DISCARDED = "DISCARDED"


class ParamMode(StrEnum):
    """How a Move parameter receives its argument."""

    REF = "&"
    MUT = "&mut"
    VALUE = "val"


# =========================================================================
# Handles and argument values
# =========================================================================


@dataclass(frozen=True)
class GasCoin:
    """The coin paying for gas. Shared by every unit; never tracked."""

    def to_dict(self) -> str:
        return "GasCoin"


GAS = GasCoin()


@dataclass(frozen=True)
class Input:
    """An entry of a unit's input table (object or pure value)."""

    unit_id: str
    index: int

    def to_dict(self) -> dict[str, int]:
        return {"Input": self.index}


@dataclass(frozen=True)
class Result:
    """A value produced by an earlier command of the same unit.

    ``index`` is None for the single result of a command, or the position
    within a multi-result command.
    """

    unit_id: str
    command: int
    index: int | None = None

    @property
    def key(self) -> tuple[int, int]:
        return (self.command, self.index or 0)

    def to_dict(self) -> dict[str, Any]:
        if self.index is None:
            return {"Result": self.command}
        return {"NestedResult": [self.command, self.index]}


@dataclass(frozen=True)
class Pure:
    """A plain value argument, materialized as an input when appended."""

    value: Any
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {"Pure": {"type": self.type, "value": _encode_pure(self.value)}}


Handle = Union[GasCoin, Input, Result]

# Object ids are passed as plain strings.
Argument = Union[Handle, Pure, str]

# What a by-value use consumes: ("result", command, index) or ("object", id).
Slot = tuple[Any, ...]


def _encode_pure(value: Any) -> Any:
    # u64 values travel as decimal strings, like the ledger's JSON encoding.
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_encode_pure(v) for v in value]
    return value


# =========================================================================
# Commands
# =========================================================================


@dataclass(frozen=True)
class MoveCall:
    target: str
    type_arguments: tuple[str, ...]
    arguments: tuple[Handle, ...]
    modes: tuple[ParamMode, ...]
    result_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "MoveCall": {
                "target": self.target,
                "typeArguments": list(self.type_arguments),
                "arguments": [a.to_dict() for a in self.arguments],
            }
        }


@dataclass(frozen=True)
class SplitCoins:
    coin: Handle
    amounts: tuple[Handle, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "SplitCoins": {
                "coin": self.coin.to_dict(),
                "amounts": [a.to_dict() for a in self.amounts],
            }
        }


@dataclass(frozen=True)
class MergeCoins:
    destination: Handle
    sources: tuple[Handle, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "MergeCoins": {
                "destination": self.destination.to_dict(),
                "sources": [s.to_dict() for s in self.sources],
            }
        }


@dataclass(frozen=True)
class TransferObjects:
    objects: tuple[Handle, ...]
    address: Handle

    def to_dict(self) -> dict[str, Any]:
        return {
            "TransferObjects": {
                "objects": [o.to_dict() for o in self.objects],
                "address": self.address.to_dict(),
            }
        }


Command = Union[MoveCall, SplitCoins, MergeCoins, TransferObjects]


def _command_edges(command: Command) -> list[tuple[Handle, ParamMode]]:
    """Every argument of a command paired with how it is used."""
    if isinstance(command, MoveCall):
        return list(zip(command.arguments, command.modes))
    if isinstance(command, SplitCoins):
        return [(command.coin, ParamMode.MUT)] + [
            (a, ParamMode.VALUE) for a in command.amounts
        ]
    if isinstance(command, MergeCoins):
        return [(command.destination, ParamMode.MUT)] + [
            (s, ParamMode.VALUE) for s in command.sources
        ]
    return [(o, ParamMode.VALUE) for o in command.objects] + [
        (command.address, ParamMode.VALUE)
    ]


def _result_count(command: Command) -> int:
    if isinstance(command, MoveCall):
        return command.result_count
    if isinstance(command, SplitCoins):
        return len(command.amounts)
    return 0


# =========================================================================
# TransactionUnit
# =========================================================================


@dataclass(eq=False)
class TransactionUnit:
    """An atomic, all-or-nothing batch of chained ledger calls.

    Not thread-safe: callers serialize appends against one instance.

    Attributes:
        sender: Address of the signing identity, if known at build time.
            Recorded in the unit document; the signer has the final word.
    """

    sender: str | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    _inputs: list[dict[str, Any]] = field(default_factory=list, init=False, repr=False)
    _object_inputs: dict[str, int] = field(default_factory=dict, init=False, repr=False)
    _commands: list[Command] = field(default_factory=list, init=False, repr=False)
    _consumed: dict[Slot, int] = field(default_factory=dict, init=False, repr=False)
    _state: UnitState = field(default=UnitState.OPEN, init=False)

    # -----------------------------------------------------------------
    # Introspection
    # -----------------------------------------------------------------

    @property
    def state(self) -> UnitState:
        return self._state

    @property
    def commands(self) -> tuple[Command, ...]:
        return tuple(self._commands)

    @property
    def inputs(self) -> tuple[dict[str, Any], ...]:
        return tuple(self._inputs)

    @property
    def gas(self) -> GasCoin:
        return GAS

    def __len__(self) -> int:
        return len(self._commands)

    def is_empty(self) -> bool:
        return not self._commands

    # -----------------------------------------------------------------
    # Inputs
    # -----------------------------------------------------------------

    def object(self, object_id: str) -> Input:
        """Reference an on-chain object by id (deduplicated per unit)."""
        self._ensure_open()
        return self._add_object_input(normalize_address(object_id))

    def pure(self, value: Any, type_tag: str) -> Input:
        """Add a plain value to the input table."""
        self._ensure_open()
        return self._add_pure_input(Pure(value, type_tag))

    def _add_object_input(self, object_id: str) -> Input:
        existing = self._object_inputs.get(object_id)
        if existing is not None:
            return Input(self.id, existing)
        self._inputs.append({"Object": object_id})
        index = len(self._inputs) - 1
        self._object_inputs[object_id] = index
        return Input(self.id, index)

    def _add_pure_input(self, pure: Pure) -> Input:
        self._inputs.append(pure.to_dict())
        return Input(self.id, len(self._inputs) - 1)

    # -----------------------------------------------------------------
    # Commands
    # -----------------------------------------------------------------

    def move_call(
        self,
        target: str,
        type_arguments: Sequence[str],
        arguments: Sequence[Argument],
        modes: Sequence[ParamMode],
        *,
        result_count: int = 0,
    ) -> list[Result]:
        """Append a single Move call.

        Args:
            target: ``<package>::<module>::<function>``.
            type_arguments: Type arguments of the call.
            arguments: One argument per parameter. Strings are object ids.
            modes: One ParamMode per parameter.
            result_count: Number of values the function returns.

        Returns:
            One Result handle per returned value.

        Raises:
            UnitGraphError: If an argument is dangling, foreign or already
                consumed, or the unit is closed.
        """
        if len(arguments) != len(modes):
            raise UnitGraphError(
                f"{target}: {len(arguments)} arguments for {len(modes)} parameters",
                details={"target": target},
            )
        self._ensure_open()
        self._check_edges(list(zip(arguments, modes)), target)

        handles = tuple(self._materialize(a) for a in arguments)
        command = MoveCall(
            target=target,
            type_arguments=tuple(type_arguments),
            arguments=handles,
            modes=tuple(modes),
            result_count=result_count,
        )
        return self._append(command)

    def split_coins(self, coin: Argument, amounts: Sequence[int]) -> list[Result]:
        """Split ``amounts`` off ``coin``; returns one coin handle per amount.

        Raises:
            InvalidAmount: If an amount is not an integer in u64 range.
            UnitGraphError: If ``coin`` is dangling, foreign or consumed.
        """
        if not amounts:
            raise UnitGraphError("split_coins needs at least one amount")
        pures = [Pure(validate_amount(a, "amount"), "u64") for a in amounts]
        edges: list[tuple[Argument, ParamMode]] = [(coin, ParamMode.MUT)]
        edges += [(p, ParamMode.VALUE) for p in pures]
        self._ensure_open()
        self._check_edges(edges, "split_coins")

        command = SplitCoins(
            coin=self._materialize(coin),
            amounts=tuple(self._materialize(p) for p in pures),
        )
        return self._append(command)

    def merge_coins(self, destination: Argument, sources: Sequence[Argument]) -> None:
        """Merge ``sources`` into ``destination``; sources are consumed."""
        if not sources:
            raise UnitGraphError("merge_coins needs at least one source")
        edges: list[tuple[Argument, ParamMode]] = [(destination, ParamMode.MUT)]
        edges += [(s, ParamMode.VALUE) for s in sources]
        self._ensure_open()
        self._check_edges(edges, "merge_coins")

        self._append(
            MergeCoins(
                destination=self._materialize(destination),
                sources=tuple(self._materialize(s) for s in sources),
            )
        )

    def transfer_objects(self, objects: Sequence[Argument], recipient: str) -> None:
        """Send ``objects`` to ``recipient``; the objects are consumed."""
        if not objects:
            raise UnitGraphError("transfer_objects needs at least one object")
        address = Pure(normalize_address(recipient), "address")
        edges: list[tuple[Argument, ParamMode]] = [
            (o, ParamMode.VALUE) for o in objects
        ]
        self._ensure_open()
        self._check_edges(edges + [(address, ParamMode.VALUE)], "transfer_objects")

        self._append(
            TransferObjects(
                objects=tuple(self._materialize(o) for o in objects),
                address=self._materialize(address),
            )
        )

    # -----------------------------------------------------------------
    # Graph checks
    # -----------------------------------------------------------------

    def _check_edges(
        self, edges: list[tuple[Argument, ParamMode]], where: str
    ) -> None:
        """Validate every edge of a prospective command without mutating."""
        consuming: set[Slot] = set()
        borrowing: set[Slot] = set()

        for arg, mode in edges:
            if isinstance(arg, (Pure, GasCoin)):
                continue
            if isinstance(arg, Input):
                self._check_input(arg, where)
            elif isinstance(arg, Result):
                self._check_result(arg, len(self._commands), where)
            elif not isinstance(arg, str):
                raise UnitGraphError(
                    f"{where}: unsupported argument {arg!r}",
                    details={"where": where},
                )

            slot = self._slot(arg)
            if slot is not None:
                self._check_use(slot, mode, self._consumed, consuming, borrowing, where)

    def _slot(self, arg: Handle | str) -> Slot | None:
        """What a by-value use of ``arg`` would consume; None for plain values."""
        if isinstance(arg, Result):
            return ("result",) + arg.key
        if isinstance(arg, str):
            return ("object", normalize_address(arg))
        if isinstance(arg, Input):
            object_id = self._inputs[arg.index].get("Object")
            if object_id is not None:
                return ("object", object_id)
        return None

    @staticmethod
    def _check_use(
        slot: Slot,
        mode: ParamMode,
        consumed: dict[Slot, int],
        consuming: set[Slot],
        borrowing: set[Slot],
        where: str,
    ) -> None:
        label = _describe(slot)
        if slot in consumed:
            raise UnitGraphError(
                f"{where}: {label} already consumed by command {consumed[slot]}",
                details={"where": where, "slot": list(slot)},
            )
        if slot in consuming or (mode == ParamMode.VALUE and slot in borrowing):
            raise UnitGraphError(
                f"{where}: {label} moved while also in use",
                details={"where": where, "slot": list(slot)},
            )
        if mode == ParamMode.VALUE:
            consuming.add(slot)
        else:
            borrowing.add(slot)

    def _check_input(self, arg: Input, where: str) -> None:
        if arg.unit_id != self.id:
            raise UnitGraphError(
                f"{where}: input handle belongs to another unit",
                details={"where": where},
            )
        if not 0 <= arg.index < len(self._inputs):
            raise UnitGraphError(
                f"{where}: input {arg.index} does not exist",
                details={"where": where},
            )

    def _check_result(self, arg: Result, produced_before: int, where: str) -> None:
        if arg.unit_id != self.id:
            raise UnitGraphError(
                f"{where}: result handle belongs to another unit",
                details={"where": where},
            )
        if not 0 <= arg.command < produced_before:
            raise UnitGraphError(
                f"{where}: result of command {arg.command} is not produced yet",
                details={"where": where, "command": arg.command},
            )
        count = _result_count(self._commands[arg.command])
        if arg.index is None:
            if count != 1:
                raise UnitGraphError(
                    f"{where}: command {arg.command} returns {count} values; "
                    "use a nested result",
                    details={"where": where, "command": arg.command},
                )
        elif not 0 <= arg.index < count:
            raise UnitGraphError(
                f"{where}: command {arg.command} has no result {arg.index}",
                details={"where": where, "command": arg.command},
            )

    def _materialize(self, arg: Argument) -> Handle:
        if isinstance(arg, Pure):
            return self._add_pure_input(arg)
        if isinstance(arg, str):
            return self._add_object_input(normalize_address(arg))
        return arg

    def _append(self, command: Command) -> list[Result]:
        index = len(self._commands)
        self._commands.append(command)
        for arg, mode in _command_edges(command):
            if mode != ParamMode.VALUE:
                continue
            slot = self._slot(arg)
            if slot is not None:
                self._consumed[slot] = index

        count = _result_count(command)
        logger.debug("unit %s: appended command %d (%s)", self.id, index, _label(command))
        if count == 1 and not isinstance(command, SplitCoins):
            return [Result(self.id, index)]
        return [Result(self.id, index, i) for i in range(count)]

    @contextmanager
    def atomic(self) -> Iterator[TransactionUnit]:
        """Group several appends so they land together or not at all.

        If the block raises, every input and command added inside it is
        removed again and the exception propagates.
        """
        self._ensure_open()
        inputs = len(self._inputs)
        object_inputs = dict(self._object_inputs)
        commands = len(self._commands)
        consumed = dict(self._consumed)
        try:
            yield self
        except BaseException:
            del self._inputs[inputs:]
            del self._commands[commands:]
            self._object_inputs = object_inputs
            self._consumed = consumed
            raise

    # -----------------------------------------------------------------
    # Whole-unit validation
    # -----------------------------------------------------------------

    def validate(self) -> None:
        """Re-check the full reference graph before handoff.

        Every Result must point at an earlier command of this unit (so the
        graph is acyclic and every edge is satisfied), and no result or
        owned object may be used after it was moved.

        Raises:
            UnitGraphError: On the first violation found.
        """
        if self.is_empty():
            raise UnitGraphError("unit has no commands")

        moved: dict[Slot, int] = {}
        for position, command in enumerate(self._commands):
            where = f"command {position}"
            consuming: set[Slot] = set()
            borrowing: set[Slot] = set()
            for arg, mode in _command_edges(command):
                if isinstance(arg, Input):
                    self._check_input(arg, where)
                elif isinstance(arg, Result):
                    self._check_result(arg, position, where)
                slot = self._slot(arg)
                if slot is not None:
                    self._check_use(slot, mode, moved, consuming, borrowing, where)
            for slot in consuming:
                moved[slot] = position

    def unconsumed_results(self) -> list[Result]:
        """Results never moved by a later command.

        Owned values left here will make the ledger reject the unit unless
        their type can be dropped, so callers usually transfer them.
        """
        leftover: list[Result] = []
        for index, command in enumerate(self._commands):
            count = _result_count(command)
            for i in range(count):
                if ("result", index, i) not in self._consumed:
                    if count == 1 and not isinstance(command, SplitCoins):
                        leftover.append(Result(self.id, index))
                    else:
                        leftover.append(Result(self.id, index, i))
        return leftover

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._state != UnitState.OPEN:
            raise UnitGraphError(
                f"unit {self.id} is {self._state.lower()}",
                details={"state": str(self._state)},
            )

    def mark_submitted(self) -> None:
        """Close the unit after handing it to the transport."""
        self._ensure_open()
        self._state = UnitState.SUBMITTED

    def discard(self) -> None:
        """Drop an unsubmitted unit. Nothing was sent, nothing happens."""
        self._ensure_open()
        self._state = UnitState.DISCARDED
        logger.debug("unit %s discarded with %d commands", self.id, len(self))

    # -----------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """The unit document handed to a signer.

        The local unit id is not part of the document, so identical
        compositions produce identical documents.
        """
        doc: dict[str, Any] = {
            "version": UNIT_DOCUMENT_VERSION,
            "inputs": [dict(i) for i in self._inputs],
            "commands": [c.to_dict() for c in self._commands],
        }
        if self.sender is not None:
            doc["sender"] = normalize_address(self.sender)
        return doc

    def digest(self) -> str:
        """``sha256:`` digest of the canonical unit document."""
        return content_digest(self.to_dict())


def _label(command: Command) -> str:
    if isinstance(command, MoveCall):
        return command.target
    return type(command).__name__


def _describe(slot: Slot) -> str:
    if slot[0] == "result":
        return f"result {tuple(slot[1:])}"
    return f"object {slot[1]}"
