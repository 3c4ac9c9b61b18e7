"""Pool error taxonomy.

Every failure raised by a pool operation derives from PoolError and aborts
the whole operation. Each error carries a stable ``code`` and a ``context``
dict holding the threshold and the actual value that tripped it, so callers
(and the HTTP layer) can reconstruct the failing condition.
"""

from __future__ import annotations

from typing import Any


class PoolError(Exception):
    """Base error for pool operations."""

    code: str = "pool_error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = context

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used by the API error handler."""
        return {"error": self.code, "detail": str(self), "context": self.context}


class DeadlineExpired(PoolError):
    """The caller's deadline is earlier than the current time."""

    code = "deadline_expired"

    def __init__(self, deadline: int, now: int) -> None:
        super().__init__(f"Deadline {deadline} has passed (now={now})", deadline=deadline, now=now)


class ZeroAmount(PoolError):
    """An amount argument that must be positive was zero or negative."""

    code = "zero_amount"

    def __init__(self, name: str, value: int = 0) -> None:
        super().__init__(f"{name} must be greater than zero, got {value}", name=name, value=value)


class BelowMinimumLiquidityThreshold(PoolError):
    """Deposit is below the anti-dust floor for the base asset."""

    code = "below_minimum_liquidity"

    def __init__(self, minimum: int, actual: int) -> None:
        super().__init__(
            f"Base deposit {actual} is below the minimum of {minimum}",
            minimum=minimum,
            actual=actual,
        )


class SlippageExceeded(PoolError):
    """An executed amount fell outside a caller-supplied bound."""

    code = "slippage_exceeded"


class MaxQuoteExceeded(SlippageExceeded):
    """Deposit would cost more quote than the caller allowed."""

    code = "max_quote_exceeded"

    def __init__(self, maximum: int, required: int) -> None:
        super().__init__(
            f"Deposit requires {required} quote, above the maximum of {maximum}",
            maximum=maximum,
            required=required,
        )


class MinSharesNotMet(SlippageExceeded):
    """Deposit would mint fewer shares than the caller required."""

    code = "min_shares_not_met"

    def __init__(self, minimum: int, actual: int) -> None:
        super().__init__(
            f"Deposit mints {actual} shares, below the minimum of {minimum}",
            minimum=minimum,
            actual=actual,
        )


class OutputTooLow(SlippageExceeded):
    """Withdraw or swap output is below the caller's minimum."""

    code = "output_too_low"

    def __init__(self, minimum: int, actual: int, asset: str | None = None) -> None:
        super().__init__(
            f"Output {actual} is below the minimum of {minimum}",
            minimum=minimum,
            actual=actual,
            asset=asset,
        )


class InvalidAssetPair(PoolError):
    """Asset outside the pool's pair, or input asset equal to output asset."""

    code = "invalid_asset_pair"

    def __init__(self, input_asset: str, output_asset: str, reason: str = "not in pool") -> None:
        super().__init__(
            f"Invalid asset pair {input_asset} -> {output_asset}: {reason}",
            input_asset=input_asset,
            output_asset=output_asset,
            reason=reason,
        )


class ArithmeticFault(PoolError, ArithmeticError):
    """Arithmetic precondition violated (e.g. non-positive divisor)."""

    code = "arithmetic_fault"


class EmptyPool(ArithmeticFault):
    """Swap or quote against a pool with no shares outstanding.

    Balances sent straight to an empty pool's address are not tradable.
    """

    code = "empty_pool"

    def __init__(self, pool: str) -> None:
        super().__init__(f"Pool {pool} has no liquidity", pool=pool)


class InsufficientShares(PoolError):
    """Holder tried to burn more claim shares than it holds."""

    code = "insufficient_shares"

    def __init__(self, holder: str, held: int, requested: int) -> None:
        super().__init__(
            f"{holder} holds {held} shares, cannot burn {requested}",
            holder=holder,
            held=held,
            requested=requested,
        )


class PoolAlreadyExists(PoolError):
    """The registry already holds a pool for this asset."""

    code = "pool_already_exists"

    def __init__(self, asset: str) -> None:
        super().__init__(f"Pool for {asset} already exists", asset=asset)


__all__ = [
    "PoolError",
    "DeadlineExpired",
    "ZeroAmount",
    "BelowMinimumLiquidityThreshold",
    "SlippageExceeded",
    "MaxQuoteExceeded",
    "MinSharesNotMet",
    "OutputTooLow",
    "InvalidAssetPair",
    "ArithmeticFault",
    "EmptyPool",
    "InsufficientShares",
    "PoolAlreadyExists",
]
