"""In-memory asset ledger."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from cpamm.ledger.base import InsufficientAllowance, InsufficientBalance

logger = structlog.get_logger()

# Allowance value that is never decremented
UNLIMITED_ALLOWANCE = 2**256 - 1

BalanceKey = tuple[str, str]
AllowanceKey = tuple[str, str, str]


class _Journal:
    """Prior values of the keys written inside one atomic() scope.

    None marks a key that did not exist before the scope first wrote it.
    """

    __slots__ = ("balances", "allowances")

    def __init__(self) -> None:
        self.balances: dict[BalanceKey, int | None] = {}
        self.allowances: dict[AllowanceKey, int | None] = {}

    def merge_into(self, outer: _Journal) -> None:
        # The enclosing scope keeps its own (older) prior value
        for key, value in self.balances.items():
            outer.balances.setdefault(key, value)
        for allowance_key, value in self.allowances.items():
            outer.allowances.setdefault(allowance_key, value)


class InMemoryAssetLedger:
    """Dict-backed ledger implementing the AssetLedger protocol.

    Balances are keyed by (asset, holder); allowances by (asset, owner, spender).
    atomic() scopes nest. Each scope journals the prior value of every key it
    writes, so a rollback costs only the keys the scope touched.
    """

    def __init__(self) -> None:
        self._balances: dict[BalanceKey, int] = {}
        self._allowances: dict[AllowanceKey, int] = {}
        self._journals: list[_Journal] = []

    def balance_of(self, asset: str, holder: str) -> int:
        return self._balances.get((asset, holder), 0)

    def allowance(self, asset: str, owner: str, spender: str) -> int:
        return self._allowances.get((asset, owner, spender), 0)

    def credit(self, asset: str, holder: str, amount: int) -> None:
        """Create amount of asset out of thin air for holder."""
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount: {amount}")
        self._set_balance((asset, holder), self.balance_of(asset, holder) + amount)
        logger.debug("ledger_credit", asset=asset, holder=holder, amount=amount)

    def approve(self, asset: str, owner: str, spender: str, amount: int) -> None:
        """Let spender pull up to amount of owner's asset."""
        if amount < 0:
            raise ValueError(f"Cannot approve a negative amount: {amount}")
        self._set_allowance((asset, owner, spender), amount)

    def pull(self, asset: str, owner: str, recipient: str, amount: int) -> None:
        key = (asset, owner, recipient)
        allowed = self._allowances.get(key, 0)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{recipient} may pull {allowed} {asset} from {owner}, not {amount}",
                asset=asset,
                owner=owner,
                spender=recipient,
                allowance=allowed,
                requested=amount,
            )
        self._move(asset, owner, recipient, amount)
        if allowed != UNLIMITED_ALLOWANCE:
            self._set_allowance(key, allowed - amount)

    def push(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        self._move(asset, sender, recipient, amount)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        journal = _Journal()
        self._journals.append(journal)
        try:
            yield
        except Exception:
            self._journals.pop()
            self._rollback(journal)
            raise
        else:
            self._journals.pop()
            if self._journals:
                journal.merge_into(self._journals[-1])

    def _move(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot transfer a negative amount: {amount}")
        held = self.balance_of(asset, sender)
        if held < amount:
            raise InsufficientBalance(
                f"{sender} holds {held} {asset}, cannot send {amount}",
                asset=asset,
                holder=sender,
                balance=held,
                requested=amount,
            )
        self._set_balance((asset, sender), held - amount)
        self._set_balance((asset, recipient), self.balance_of(asset, recipient) + amount)

    def _set_balance(self, key: BalanceKey, value: int) -> None:
        if self._journals:
            self._journals[-1].balances.setdefault(key, self._balances.get(key))
        self._balances[key] = value

    def _set_allowance(self, key: AllowanceKey, value: int) -> None:
        if self._journals:
            self._journals[-1].allowances.setdefault(key, self._allowances.get(key))
        self._allowances[key] = value

    def _rollback(self, journal: _Journal) -> None:
        for key, value in journal.balances.items():
            if value is None:
                self._balances.pop(key, None)
            else:
                self._balances[key] = value
        for allowance_key, previous in journal.allowances.items():
            if previous is None:
                self._allowances.pop(allowance_key, None)
            else:
                self._allowances[allowance_key] = previous
