"""Asset custody collaborators."""

from .base import AssetLedger, InsufficientAllowance, InsufficientBalance, LedgerError
from .memory import UNLIMITED_ALLOWANCE, InMemoryAssetLedger

__all__ = [
    "AssetLedger",
    "LedgerError",
    "InsufficientBalance",
    "InsufficientAllowance",
    "InMemoryAssetLedger",
    "UNLIMITED_ALLOWANCE",
]
