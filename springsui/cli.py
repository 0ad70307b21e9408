"""
springsui command-line interface.

Each command builds one transaction unit with the composer and either
prints the unit document (``--dry-run``) or signs and submits it.

The signing identity is explicit: a signer factory (``--signer
module:callable`` or SPRINGSUI_SIGNER) provides the address and the
signatures. Without a signer, ``--address`` (or SUI_ADDRESS) is enough
for reads and dry runs.

Examples:
  # Show pool state
  springsui fetch-state

  # Build a mint of 1 SUI without submitting it
  springsui --address 0xabc... mint --amount 1000000000 --dry-run

  # Change only the redeem fee; the other fees keep their values
  springsui --signer mywallet:load_signer update-fees --redeem-fee-bps 25
"""

from __future__ import annotations

import argparse
import importlib
import json
import sys
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from springsui import __version__
from springsui import fees as fee_builder
from springsui.capability import find_admin_cap, find_weight_hook_admin_cap
from springsui.composer import TransactionComposer
from springsui.config import Settings
from springsui.errors import CoinNotFound, LiquidStakingError
from springsui.fees import FeeConfigArgs
from springsui.ledger.adapter import prepare, submit
from springsui.ledger.client import CoinInfo, LedgerClient
from springsui.ledger.jsonrpc_client import JsonRpcClient
from springsui.ledger.signer import Signer
from springsui.ledger.transport import HttpxTransport
from springsui.log import configure_logging, get_logger
from springsui.pool_state import fetch_pool_state
from springsui.types import PoolDescriptor, normalize_address, validate_amount
from springsui.unit import TransactionUnit
from springsui.weights import build_weight_map

logger = get_logger(__name__)

COINS_PAGE_SIZE = 1000


@dataclass
class ShellContext:
    settings: Settings
    client: LedgerClient
    signer: Signer | None
    dry_run: bool

    @property
    def pool(self) -> PoolDescriptor:
        return self.settings.pool()

    @property
    def package_id(self) -> str:
        if not self.settings.package_id:
            raise LiquidStakingError(
                "no package id: pass --package-id or set SPRINGSUI_PACKAGE_ID",
                error_code="CONFIG",
            )
        return self.settings.package_id

    @property
    def composer(self) -> TransactionComposer:
        return TransactionComposer(self.package_id)

    @property
    def identity(self) -> str:
        if self.signer is not None:
            return self.signer.address
        if self.settings.address:
            return self.settings.address
        raise LiquidStakingError(
            "no signing identity: pass --signer or --address",
            error_code="CONFIG",
        )

    def new_unit(self) -> TransactionUnit:
        return TransactionUnit(sender=self.identity)


# =========================================================================
# Shell helpers
# =========================================================================


def load_signer(target: str) -> Signer:
    """Load a signer from a ``module:callable`` factory."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise LiquidStakingError(
            f"signer must be 'module:callable', got: {target!r}", error_code="CONFIG"
        )
    factory = getattr(importlib.import_module(module_name), attr)
    signer = factory()
    if not isinstance(signer, Signer):
        raise LiquidStakingError(
            f"{target} did not return a Signer", error_code="CONFIG"
        )
    return signer


def _emit(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _owned_coins(client: LedgerClient, owner: str, coin_type: str) -> list[CoinInfo]:
    coins: list[CoinInfo] = []
    cursor: str | None = None
    while True:
        page = client.get_coins(owner, coin_type, cursor=cursor, limit=COINS_PAGE_SIZE)
        coins.extend(page.data)
        if not page.has_next_page or page.next_cursor is None:
            return coins
        cursor = page.next_cursor


def _finish(ctx: ShellContext, unit: TransactionUnit) -> int:
    if ctx.dry_run:
        document = prepare(unit, ctx.identity)
        _emit({"unit": document, "commands": len(unit)})
        unit.discard()
        return 0

    if ctx.signer is None:
        raise LiquidStakingError(
            "no signer configured: pass --signer or use --dry-run",
            error_code="CONFIG",
        )
    receipt = submit(unit, ctx.client, ctx.signer)
    _emit(
        {
            "digest": receipt.digest,
            "unit_digest": receipt.unit_digest,
            "sender": receipt.sender,
            "created": receipt.created_objects(),
            "events": list(receipt.events),
        }
    )
    return 0


# =========================================================================
# Commands
# =========================================================================


def cmd_fetch_state(ctx: ShellContext, args: argparse.Namespace) -> int:
    snapshot = fetch_pool_state(ctx.client, ctx.pool, ctx.settings.package_id)
    _emit(snapshot.to_dict())
    return 0


def cmd_mint(ctx: ShellContext, args: argparse.Namespace) -> int:
    amount = validate_amount(args.amount)
    unit = ctx.new_unit()
    (sui,) = unit.split_coins(unit.gas, [amount])
    lst = ctx.composer.mint(unit, ctx.pool, sui)
    unit.transfer_objects([lst], ctx.identity)
    return _finish(ctx, unit)


def cmd_redeem(ctx: ShellContext, args: argparse.Namespace) -> int:
    amount = validate_amount(args.amount)
    pool = ctx.pool
    coins = _owned_coins(ctx.client, ctx.identity, pool.token_type)
    if not coins:
        raise CoinNotFound(
            f"{ctx.identity} owns no {pool.token_type}",
            details={"owner": ctx.identity, "coin_type": pool.token_type},
        )

    unit = ctx.new_unit()
    primary = coins[0].coin_object_id
    if len(coins) > 1:
        unit.merge_coins(primary, [c.coin_object_id for c in coins[1:]])
    (lst,) = unit.split_coins(primary, [amount])
    sui = ctx.composer.redeem(unit, pool, lst)
    unit.transfer_objects([sui], ctx.identity)
    return _finish(ctx, unit)


def cmd_increase_validator_stake(ctx: ShellContext, args: argparse.Namespace) -> int:
    amount = validate_amount(args.amount)
    validator_address = normalize_address(args.validator_address)
    admin_cap = find_admin_cap(ctx.client, ctx.identity, ctx.package_id, ctx.pool)
    unit = ctx.new_unit()
    ctx.composer.increase_validator_stake(
        unit, ctx.pool, admin_cap, validator_address, amount
    )
    return _finish(ctx, unit)


def cmd_decrease_validator_stake(ctx: ShellContext, args: argparse.Namespace) -> int:
    amount = validate_amount(args.amount)
    if args.validator_address is not None:
        validator_address = normalize_address(args.validator_address)
    else:
        snapshot = fetch_pool_state(ctx.client, ctx.pool, ctx.package_id)
        validator_address = snapshot.validator_address(args.validator_index)

    admin_cap = find_admin_cap(ctx.client, ctx.identity, ctx.package_id, ctx.pool)
    unit = ctx.new_unit()
    ctx.composer.decrease_validator_stake(
        unit, ctx.pool, admin_cap, validator_address, amount
    )
    return _finish(ctx, unit)


def cmd_update_fees(ctx: ShellContext, args: argparse.Namespace) -> int:
    fee_args = FeeConfigArgs(
        mint_fee_bps=args.mint_fee_bps,
        redeem_fee_bps=args.redeem_fee_bps,
        spread_fee=args.spread_fee,
    )
    if fee_args.is_empty():
        raise LiquidStakingError("no fee given; nothing to update", error_code="CONFIG")
    # Range-check before touching the network.
    fee_args.apply_to(fee_builder.create())

    current = None
    if None in (fee_args.mint_fee_bps, fee_args.redeem_fee_bps, fee_args.spread_fee):
        current = fetch_pool_state(ctx.client, ctx.pool, ctx.package_id).fee_config

    admin_cap = find_admin_cap(ctx.client, ctx.identity, ctx.package_id, ctx.pool)
    unit = ctx.new_unit()
    config = ctx.composer.update_fees(unit, ctx.pool, admin_cap, fee_args, current)
    logger.info("new fee config: %s", config.to_dict())
    return _finish(ctx, unit)


def cmd_collect_fees(ctx: ShellContext, args: argparse.Namespace) -> int:
    admin_cap = find_admin_cap(ctx.client, ctx.identity, ctx.package_id, ctx.pool)
    unit = ctx.new_unit()
    sui = ctx.composer.collect_fees(unit, ctx.pool, admin_cap)
    unit.transfer_objects([sui], ctx.identity)
    return _finish(ctx, unit)


def cmd_initialize_weight_hook(ctx: ShellContext, args: argparse.Namespace) -> int:
    admin_cap = find_admin_cap(ctx.client, ctx.identity, ctx.package_id, ctx.pool)
    unit = ctx.new_unit()
    hook_cap = ctx.composer.initialize_weight_hook(unit, ctx.pool, admin_cap)
    unit.transfer_objects([hook_cap], ctx.identity)
    return _finish(ctx, unit)


def cmd_set_validator_addresses_and_weights(
    ctx: ShellContext, args: argparse.Namespace
) -> int:
    weights = build_weight_map(args.validators, args.weights)
    hook_cap = find_weight_hook_admin_cap(
        ctx.client, ctx.identity, ctx.package_id, ctx.pool
    )
    unit = ctx.new_unit()
    ctx.composer.set_validator_addresses_and_weights(unit, ctx.pool, hook_cap, weights)
    return _finish(ctx, unit)


def cmd_rebalance(ctx: ShellContext, args: argparse.Namespace) -> int:
    unit = ctx.new_unit()
    ctx.composer.rebalance(unit, ctx.pool)
    return _finish(ctx, unit)


# =========================================================================
# Parser
# =========================================================================


def _add_submit_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the unit document instead of submitting it",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="springsui",
        description="SpringSui liquid staking CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument("--version", action="version", version=f"springsui {__version__}")
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint (SUI_RPC_URL)")
    parser.add_argument("--package-id", help="Liquid staking package (SPRINGSUI_PACKAGE_ID)")
    parser.add_argument("--pool-id", help="Pool object id (SPRINGSUI_POOL_ID)")
    parser.add_argument("--pool-type", help="Pool LST type (SPRINGSUI_POOL_TYPE)")
    parser.add_argument("--weight-hook-id", help="Weight hook id (SPRINGSUI_WEIGHT_HOOK_ID)")
    parser.add_argument("--signer", help="Signer factory module:callable (SPRINGSUI_SIGNER)")
    parser.add_argument("--address", help="Signing identity without a signer (SUI_ADDRESS)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR (SPRINGSUI_LOG_LEVEL)")

    sub = parser.add_subparsers(dest="command", required=True)

    def command(
        name: str, help_text: str, handler: Callable[..., int], submits: bool = True
    ) -> argparse.ArgumentParser:
        p = sub.add_parser(name, help=help_text, description=help_text)
        p.set_defaults(handler=handler)
        if submits:
            _add_submit_flags(p)
        return p

    p = command("mint", "mint some LST", cmd_mint)
    p.add_argument("--amount", type=int, required=True, help="Amount of SUI in MIST")

    p = command("redeem", "redeem some SUI", cmd_redeem)
    p.add_argument("--amount", type=int, required=True, help="Amount of LST to redeem")

    p = command("increase-validator-stake", "increase validator stake", cmd_increase_validator_stake)
    p.add_argument("--validator-address", required=True, help="Validator address")
    p.add_argument("--amount", type=int, required=True, help="Amount of SUI to delegate to validator")

    p = command("decrease-validator-stake", "decrease validator stake", cmd_decrease_validator_stake)
    target = p.add_mutually_exclusive_group(required=True)
    target.add_argument("--validator-index", type=int, help="Validator index in the pool")
    target.add_argument("--validator-address", help="Validator address")
    p.add_argument("--amount", type=int, required=True, help="Amount of SUI to undelegate from validator")

    p = command("update-fees", "update fees; omitted fees keep their value", cmd_update_fees)
    p.add_argument("--mint-fee-bps", type=int, help="Mint fee bps")
    p.add_argument("--redeem-fee-bps", type=int, help="Redeem fee bps")
    p.add_argument("--spread-fee", type=int, help="Spread fee bps")

    command("collect-fees", "collect protocol fees", cmd_collect_fees)
    command("fetch-state", "show pool state", cmd_fetch_state, submits=False)
    command("initialize-weight-hook", "create the pool's weight hook", cmd_initialize_weight_hook)

    p = command(
        "set-validator-addresses-and-weights",
        "set weight hook validators and weights",
        cmd_set_validator_addresses_and_weights,
    )
    p.add_argument("-v", "--validators", nargs="+", required=True, help="Validator addresses")
    p.add_argument("-w", "--weights", nargs="+", type=int, required=True, help="Weights, same order")

    command("rebalance", "rebalance stake across weighted validators", cmd_rebalance)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env().override(
        rpc_url=args.rpc_url,
        package_id=args.package_id,
        pool_id=args.pool_id,
        pool_type=args.pool_type,
        weight_hook_id=args.weight_hook_id,
        signer=args.signer,
        address=args.address,
        log_level=args.log_level,
    )
    configure_logging(settings.log_level, settings.log_color)

    try:
        signer = load_signer(settings.signer) if settings.signer else None
        ctx = ShellContext(
            settings=settings,
            client=JsonRpcClient(settings.rpc_url, HttpxTransport(settings.timeout_s)),
            signer=signer,
            dry_run=getattr(args, "dry_run", False),
        )
        return int(args.handler(ctx, args))
    except LiquidStakingError as exc:
        logger.error("%s: %s", exc.error_code, exc)
        _emit({"error": exc.error_code, "message": str(exc), "details": exc.details})
        return 1
    except (ValueError, IndexError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
