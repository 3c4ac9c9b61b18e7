"""Pytest configuration and fixtures."""

from collections.abc import Callable

import pytest

from cpamm.config import PoolConfig
from cpamm.ledger import InMemoryAssetLedger
from cpamm.pool import Pool
from tests.helpers import DAI, NOW, WETH, bootstrap

# =============================================================================
# Fake collaborators
# =============================================================================


class FixedClock:
    """Clock returning a settable time.

    Usage:
        clock = FixedClock(NOW)
        clock.now += 60  # advance one minute
    """

    def __init__(self, now: int = NOW) -> None:
        self.now = now
        self.calls = 0  # Track reads for assertions

    def __call__(self) -> int:
        self.calls += 1
        return self.now


class ReentrantLedger(InMemoryAssetLedger):
    """In-memory ledger that calls back into caller code on every push.

    The hook runs after the balance has moved but before push() returns,
    which is where a token with receive callbacks would hand control to the
    recipient.

    Usage:
        ledger.on_push = lambda asset, recipient, amount: pool.withdraw(...)
    """

    def __init__(self) -> None:
        super().__init__()
        self.on_push: Callable[[str, str, int], None] | None = None
        self.pushes: list[tuple[str, str, str, int]] = []  # Track calls for assertions

    def push(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        super().push(asset, sender, recipient, amount)
        self.pushes.append((asset, sender, recipient, amount))
        hook = self.on_push
        if hook is not None:
            # One-shot: a hook that re-enters must not recurse forever
            self.on_push = None
            hook(asset, recipient, amount)


# =============================================================================
# Pytest fixtures
# =============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def small_config() -> PoolConfig:
    """Config sized for hand-checkable integer scenarios.

    No deposit floor beyond 1, one-unit bonus and price unit.
    """
    return PoolConfig(min_base_liquidity=1, swap_bonus_amount=1, price_unit=1)


@pytest.fixture
def ledger() -> InMemoryAssetLedger:
    return InMemoryAssetLedger()


@pytest.fixture
def pool(ledger: InMemoryAssetLedger, small_config: PoolConfig, clock: FixedClock) -> Pool:
    """An empty WETH/DAI pool."""
    return Pool(WETH, DAI, ledger, config=small_config, clock=clock)


@pytest.fixture
def funded_pool(pool: Pool, ledger: InMemoryAssetLedger) -> Pool:
    """The WETH/DAI pool bootstrapped by alice with 100 base / 100 quote."""
    bootstrap(pool, ledger, base=100, quote=100)
    return pool


@pytest.fixture
def reentrant_ledger() -> ReentrantLedger:
    return ReentrantLedger()


@pytest.fixture
def reentrant_pool(
    reentrant_ledger: ReentrantLedger, small_config: PoolConfig, clock: FixedClock
) -> Pool:
    """A WETH/DAI pool whose ledger calls back on push."""
    return Pool(WETH, DAI, reentrant_ledger, config=small_config, clock=clock)
