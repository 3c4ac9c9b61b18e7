"""Loyalty bonus swap counter."""

from __future__ import annotations

from dataclasses import dataclass

from cpamm.config import DEFAULT_POOL_CONFIG


@dataclass
class SwapCounter:
    """Counts completed swaps in [0, interval).

    tick() is called once per swap and returns True on the swap that brings
    the count to interval, at which point the count wraps to 0.
    """

    interval: int = DEFAULT_POOL_CONFIG.swap_bonus_interval
    value: int = 0

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")
        if not 0 <= self.value < self.interval:
            raise ValueError(f"value must be in [0, {self.interval}), got {self.value}")

    def tick(self) -> bool:
        self.value += 1
        if self.value >= self.interval:
            self.value = 0
            return True
        return False

    def reset(self) -> None:
        self.value = 0
