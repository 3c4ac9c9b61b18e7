"""Pool configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

# Default unit scale of an 18-decimal asset
ONE_UNIT = 10**18


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for a pool.

    Holding the pricing constants, the anti-dust floor and the loyalty bonus
    in one frozen object keeps every pool independently configurable in tests
    while production pools share DEFAULT_POOL_CONFIG.

    Attributes:
        fee_numerator: Share of the input that counts toward pricing (997 = 0.3% fee)
        fee_denominator: Scale of the forward (exact input) formula
        inverse_fee_scale: Scale of the inverse (exact output) formula. Note this
            is 10000, not fee_denominator; both values are kept as deployed.
        min_base_liquidity: Smallest base amount accepted by deposit
        swap_bonus_interval: Every Nth completed swap pays the bonus
        swap_bonus_amount: Flat quantity of the output asset paid as bonus
        price_unit: Amount treated as "one unit" by the price views
        event_log_size: Most recent events each pool keeps in memory
    """

    fee_numerator: int = 997
    fee_denominator: int = 1000
    inverse_fee_scale: int = 10_000

    min_base_liquidity: int = 1_000_000_000

    swap_bonus_interval: int = 10
    swap_bonus_amount: int = ONE_UNIT

    price_unit: int = ONE_UNIT

    event_log_size: int = 1024

    def __post_init__(self) -> None:
        if not 0 < self.fee_numerator <= self.fee_denominator:
            raise ValueError(
                f"fee_numerator must be in (0, {self.fee_denominator}], got {self.fee_numerator}"
            )
        if self.inverse_fee_scale <= 0:
            raise ValueError(f"inverse_fee_scale must be positive, got {self.inverse_fee_scale}")
        if self.min_base_liquidity < 0:
            raise ValueError(f"min_base_liquidity cannot be negative: {self.min_base_liquidity}")
        if self.swap_bonus_interval <= 0:
            raise ValueError(
                f"swap_bonus_interval must be positive, got {self.swap_bonus_interval}"
            )
        if self.swap_bonus_amount < 0:
            raise ValueError(f"swap_bonus_amount cannot be negative: {self.swap_bonus_amount}")
        if self.price_unit <= 0:
            raise ValueError(f"price_unit must be positive, got {self.price_unit}")
        if self.event_log_size <= 0:
            raise ValueError(f"event_log_size must be positive, got {self.event_log_size}")

    @classmethod
    def from_env(cls, prefix: str = "CPAMM_") -> PoolConfig:
        """Build a config from environment variables, falling back to defaults.

        Recognized variables (with the default prefix):
        - CPAMM_MIN_BASE_LIQUIDITY
        - CPAMM_SWAP_BONUS_INTERVAL
        - CPAMM_SWAP_BONUS_AMOUNT
        - CPAMM_PRICE_UNIT
        - CPAMM_EVENT_LOG_SIZE

        Raises:
            ValueError: If a variable is set but is not a decimal integer
        """
        overrides: dict[str, int] = {}
        for field_name in (
            "min_base_liquidity",
            "swap_bonus_interval",
            "swap_bonus_amount",
            "price_unit",
            "event_log_size",
        ):
            raw = os.environ.get(prefix + field_name.upper())
            if raw is None:
                continue
            try:
                overrides[field_name] = int(raw)
            except ValueError as err:
                raise ValueError(f"{prefix}{field_name.upper()} must be an integer: {raw!r}") from err
        return cls(**overrides)


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
