"""Constant product AMM pool engine."""

from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.ledger import AssetLedger, InMemoryAssetLedger
from cpamm.pool import Pool, PoolRegistry, PoolStatus

__version__ = "0.1.0"
__all__ = [
    "Pool",
    "PoolStatus",
    "PoolRegistry",
    "PoolConfig",
    "DEFAULT_POOL_CONFIG",
    "AssetLedger",
    "InMemoryAssetLedger",
    "__version__",
]
