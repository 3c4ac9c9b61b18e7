"""Pool registry.

Maps an asset to the single pool pairing it against the registry's base
asset. The one-pool-per-asset guarantee lives here, not in Pool.
"""

from __future__ import annotations

import structlog

from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.errors import InvalidAssetPair, PoolAlreadyExists
from cpamm.ledger.base import AssetLedger
from cpamm.pool.engine import Clock, Pool

logger = structlog.get_logger()


class PoolRegistry:
    """Registry of pools keyed by quote asset.

    Args:
        base_asset: Asset every pool is paired against
        ledger: Custody backend shared by all pools
        config: Configuration handed to every created pool
        clock: Clock handed to every created pool
    """

    def __init__(
        self,
        base_asset: str,
        ledger: AssetLedger,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        clock: Clock | None = None,
    ) -> None:
        self.base_asset = base_asset
        self._ledger = ledger
        self._config = config
        self._clock = clock
        self._pools: dict[str, Pool] = {}
        # Reverse index: pool address -> asset
        self._assets: dict[str, str] = {}

    def create_pool(self, asset: str) -> Pool:
        """Create the pool for asset.

        Raises:
            PoolAlreadyExists: If asset already has a pool
            InvalidAssetPair: If asset is the registry's base asset
        """
        if asset in self._pools:
            raise PoolAlreadyExists(asset)
        if asset == self.base_asset:
            raise InvalidAssetPair(self.base_asset, asset, reason="identical assets")

        pool = Pool(
            self.base_asset,
            asset,
            self._ledger,
            config=self._config,
            clock=self._clock,
        )
        self._pools[asset] = pool
        self._assets[pool.address] = asset
        logger.info("pool_created", pool=pool.address, base=self.base_asset, quote=asset)
        return pool

    def get_pool(self, asset: str) -> Pool | None:
        return self._pools.get(asset)

    def get_asset(self, pool: Pool | str) -> str | None:
        """Asset a pool (or pool address) was created for."""
        address = pool.address if isinstance(pool, Pool) else pool
        return self._assets.get(address)

    def pools(self) -> list[Pool]:
        return list(self._pools.values())

    @property
    def pool_count(self) -> int:
        """Return the number of pools in the registry."""
        return len(self._pools)
