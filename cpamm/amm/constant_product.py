"""Constant product pricing and liquidity math.

The pool keeps x * y = k, charging a 0.3% fee on the input amount. The fee
stays in the pool, so k grows with every swap and accrues to share holders.

All functions floor their results. Flooring always rounds against the
caller: a swapper receives at most the exact output, a depositor is minted
at most the exact share count, and a withdrawer receives at most the exact
pro-rata amount.
"""

from __future__ import annotations

from cpamm.amm.base import AMM
from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.errors import ArithmeticFault, ZeroAmount
from cpamm.safe_int import S


class ConstantProduct(AMM):
    """Constant product math parameterized by a PoolConfig.

    Forward:  out = (R_out * in * 997) / (R_in * 1000 + in * 997)
    Inverse:  in  = (R_in * out * 10000) / ((R_out - out) * 997)

    The inverse formula scales by 10000 rather than 1000, so exact output
    swaps charge roughly ten times the input an exact input swap of the same
    size would.
    """

    def __init__(self, config: PoolConfig = DEFAULT_POOL_CONFIG) -> None:
        self.config = config

    def quote_output_given_input(
        self,
        input_amount: int,
        input_reserve: int,
        output_reserve: int,
    ) -> int:
        """Calculate output amount using the constant product formula.

        Raises:
            ZeroAmount: If input_amount is not positive
            ArithmeticFault: If output_reserve is not positive or input_reserve is negative
        """
        if input_amount <= 0:
            raise ZeroAmount("input_amount", input_amount)
        if output_reserve <= 0:
            raise ArithmeticFault(
                f"Output reserve must be positive, got {output_reserve}",
                output_reserve=output_reserve,
            )
        if input_reserve < 0:
            raise ArithmeticFault(
                f"Input reserve cannot be negative, got {input_reserve}",
                input_reserve=input_reserve,
            )

        effective_input = S(input_amount) * S(self.config.fee_numerator)
        numerator = S(output_reserve) * effective_input
        denominator = S(input_reserve) * S(self.config.fee_denominator) + effective_input

        return (numerator // denominator).value

    def quote_input_given_output(
        self,
        output_amount: int,
        input_reserve: int,
        output_reserve: int,
    ) -> int:
        """Calculate the input required to receive output_amount.

        Raises:
            ZeroAmount: If output_amount is not positive
            ArithmeticFault: If output_reserve is not positive, or output_amount
                would drain the whole output reserve
        """
        if output_amount <= 0:
            raise ZeroAmount("output_amount", output_amount)
        if output_reserve <= 0:
            raise ArithmeticFault(
                f"Output reserve must be positive, got {output_reserve}",
                output_reserve=output_reserve,
            )
        if output_amount >= output_reserve:
            raise ArithmeticFault(
                f"Output {output_amount} must be below the output reserve {output_reserve}",
                output_amount=output_amount,
                output_reserve=output_reserve,
            )

        numerator = S(input_reserve) * S(output_amount) * S(self.config.inverse_fee_scale)
        denominator = (S(output_reserve) - S(output_amount)) * S(self.config.fee_numerator)

        return (numerator // denominator).value

    def required_quote_for_deposit(
        self,
        base_amount: int,
        reserve_base: int,
        reserve_quote: int,
    ) -> int:
        """Quote amount that keeps the reserve ratio for a base deposit.

        Formula: floor(reserve_quote * base_amount / reserve_base)
        """
        return ((S(reserve_quote) * S(base_amount)) // S(reserve_base)).value

    def shares_for_deposit(
        self,
        base_amount: int,
        total_shares: int,
        reserve_base: int,
    ) -> int:
        """Shares minted for a base deposit into a funded pool.

        Formula: floor(base_amount * total_shares / reserve_base)
        """
        return ((S(base_amount) * S(total_shares)) // S(reserve_base)).value

    def amounts_for_shares(
        self,
        shares: int,
        total_shares: int,
        reserve_base: int,
        reserve_quote: int,
    ) -> tuple[int, int]:
        """Pro-rata (base, quote) owed for burning shares.

        Raises:
            ArithmeticFault: If total_shares is zero
        """
        s_shares, s_total = S(shares), S(total_shares)
        base_out = (s_shares * S(reserve_base)) // s_total
        quote_out = (s_shares * S(reserve_quote)) // s_total
        return base_out.value, quote_out.value


# Singleton instance
constant_product = ConstantProduct()


__all__ = [
    "ConstantProduct",
    "constant_product",
]
