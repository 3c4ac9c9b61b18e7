"""Asset ledger capability interface.

The pool never moves balances itself. Every custody-affecting call goes
through an AssetLedger, which keeps the channel that can change reserves
narrow and lets the engine run against a fake ledger in tests.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable


class LedgerError(Exception):
    """Base error for ledger transfers."""

    code: str = "ledger_error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = context

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "detail": str(self), "context": self.context}


class InsufficientBalance(LedgerError):
    """Holder does not have enough of the asset."""

    code = "insufficient_balance"


class InsufficientAllowance(LedgerError):
    """Spender was not approved for enough of the owner's asset."""

    code = "insufficient_allowance"


@runtime_checkable
class AssetLedger(Protocol):
    """Protocol for asset custody backends."""

    def balance_of(self, asset: str, holder: str) -> int:
        """Current balance of asset held by holder."""
        ...

    def pull(self, asset: str, owner: str, recipient: str, amount: int) -> None:
        """Move amount from owner to recipient on recipient's allowance.

        Raises:
            InsufficientAllowance: If owner approved recipient for less than amount
            InsufficientBalance: If owner holds less than amount
        """
        ...

    def push(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        """Move amount from sender to recipient.

        Raises:
            InsufficientBalance: If sender holds less than amount
        """
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Scope whose transfers are rolled back if it exits with an exception."""
        ...
