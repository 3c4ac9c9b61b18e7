"""Claim share accounting.

Shares are a standalone mint/burn ledger owned by the pool. They carry no
transfer or approval machinery: the only mutations are mint on deposit and
burn on withdraw.
"""

from __future__ import annotations

from cpamm.errors import InsufficientShares, ZeroAmount
from cpamm.safe_int import S


class LiquidityShares:
    """Fungible claim units representing proportional ownership of a pool."""

    def __init__(self, name: str, symbol: str) -> None:
        self.name = name
        self.symbol = symbol
        self._balances: dict[str, int] = {}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def holders(self) -> dict[str, int]:
        """Copy of all non-zero balances."""
        return dict(self._balances)

    def mint(self, holder: str, amount: int) -> None:
        if amount <= 0:
            raise ZeroAmount("shares_to_mint", amount)
        self._balances[holder] = (S(self.balance_of(holder)) + S(amount)).value
        self._total_supply = (S(self._total_supply) + S(amount)).value

    def burn(self, holder: str, amount: int) -> None:
        """Destroy amount of holder's shares.

        Raises:
            ZeroAmount: If amount is not positive
            InsufficientShares: If holder holds fewer than amount shares
        """
        if amount <= 0:
            raise ZeroAmount("shares_to_burn", amount)
        held = self.balance_of(holder)
        if held < amount:
            raise InsufficientShares(holder, held, amount)
        remaining = held - amount
        if remaining:
            self._balances[holder] = remaining
        else:
            del self._balances[holder]
        self._total_supply = (S(self._total_supply) - S(amount)).value

