"""Test helpers module for shared test utilities.

- constants: Assets, holders and timestamps
- factories: Funding and bootstrap helpers
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    DAI,
    DEADLINE,
    EXPIRED,
    FAR_FUTURE,
    NOW,
    USDC,
    WETH,
)
from tests.helpers.factories import balances, bootstrap, fund

__all__ = [
    # Constants
    "WETH",
    "DAI",
    "USDC",
    "ALICE",
    "BOB",
    "CAROL",
    "NOW",
    "DEADLINE",
    "EXPIRED",
    "FAR_FUTURE",
    # Factories
    "fund",
    "bootstrap",
    "balances",
]
