"""Liquidity pool engine."""

from .counter import SwapCounter
from .engine import Pool, PoolStatus, system_clock
from .events import LiquidityAdded, LiquidityRemoved, PoolEvent, Swapped
from .registry import PoolRegistry
from .shares import LiquidityShares

__all__ = [
    "Pool",
    "PoolStatus",
    "PoolRegistry",
    "LiquidityShares",
    "SwapCounter",
    "LiquidityAdded",
    "LiquidityRemoved",
    "Swapped",
    "PoolEvent",
    "system_clock",
]
