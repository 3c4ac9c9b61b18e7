"""Default exchange wiring: one ledger, one registry."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from cpamm.config import PoolConfig
from cpamm.ledger import InMemoryAssetLedger
from cpamm.pool import PoolRegistry

DEFAULT_BASE_ASSET = "WETH"


@dataclass
class Exchange:
    """A ledger and the registry of pools kept in it."""

    ledger: InMemoryAssetLedger
    registry: PoolRegistry
    config: PoolConfig = field(default_factory=PoolConfig)

    @classmethod
    def create(
        cls,
        base_asset: str = DEFAULT_BASE_ASSET,
        config: PoolConfig | None = None,
    ) -> Exchange:
        config = config or PoolConfig()
        ledger = InMemoryAssetLedger()
        return cls(ledger=ledger, registry=PoolRegistry(base_asset, ledger, config), config=config)


_default_exchange: Exchange | None = None


def get_default_exchange() -> Exchange:
    """Process-wide exchange configured from CPAMM_* environment variables."""
    global _default_exchange
    if _default_exchange is None:
        _default_exchange = Exchange.create(
            base_asset=os.environ.get("CPAMM_BASE_ASSET", DEFAULT_BASE_ASSET),
            config=PoolConfig.from_env(),
        )
    return _default_exchange
