"""
CLI configuration from environment variables.

Every setting has an environment variable; command-line flags override
them. Defaults point at the testnet deployment the CLI was first written
against.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

from springsui.types import PoolDescriptor

DEFAULT_RPC_URL = "https://fullnode.testnet.sui.io"

DEFAULT_POOL_ID = "0x4b7b661cb29e49557cd8118d34357b2d09e2e959c37188143feac31a9f2f3e79"
DEFAULT_POOL_TYPE = (
    "0x1e20267bbc14a1c19399473165685a409f36f161583650e09981ef936560ee44"
    "::ripleys::RIPLEYS"
)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Resolved CLI settings.

    Attributes:
        rpc_url: JSON-RPC endpoint.
        package_id: Liquid-staking package id (required for any unit).
        pool_id: Pool object id.
        pool_type: LST type of the pool.
        weight_hook_id: Weight hook object id, if the pool has one.
        signer: ``module:callable`` factory returning a Signer.
        address: Signing identity used when no signer is loaded
            (dry runs and reads).
        log_level: Logging level name.
        log_color: Colored log output.
        timeout_s: RPC timeout in seconds.
    """

    rpc_url: str = DEFAULT_RPC_URL
    package_id: str | None = None
    pool_id: str = DEFAULT_POOL_ID
    pool_type: str = DEFAULT_POOL_TYPE
    weight_hook_id: str | None = None
    signer: str | None = None
    address: str | None = None
    log_level: str = "INFO"
    log_color: bool = False
    timeout_s: float = 30.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            rpc_url=env.get("SUI_RPC_URL", defaults.rpc_url),
            package_id=env.get("SPRINGSUI_PACKAGE_ID") or None,
            pool_id=env.get("SPRINGSUI_POOL_ID", defaults.pool_id),
            pool_type=env.get("SPRINGSUI_POOL_TYPE", defaults.pool_type),
            weight_hook_id=env.get("SPRINGSUI_WEIGHT_HOOK_ID") or None,
            signer=env.get("SPRINGSUI_SIGNER") or None,
            address=env.get("SUI_ADDRESS") or None,
            log_level=env.get("SPRINGSUI_LOG_LEVEL", defaults.log_level),
            log_color=env.get("SPRINGSUI_LOG_COLOR", "").lower() in _TRUTHY,
            timeout_s=float(env.get("SPRINGSUI_RPC_TIMEOUT", defaults.timeout_s)),
        )

    def override(self, **values: Any) -> Settings:
        """Return a copy with every non-None value applied."""
        return replace(self, **{k: v for k, v in values.items() if v is not None})

    def pool(self) -> PoolDescriptor:
        return PoolDescriptor(
            id=self.pool_id,
            token_type=self.pool_type,
            weight_hook_id=self.weight_hook_id,
        )
