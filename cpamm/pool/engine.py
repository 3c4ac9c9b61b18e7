"""Constant product pool engine.

A Pool holds two assets in custody of an AssetLedger under its own address
and never caches reserves: every operation reads them from the ledger once
at entry and passes the snapshot to the pure pricing math.

Operations are ordered so that all internal accounting (share mint/burn,
swap counter, event log) is finalized before the first ledger transfer. A
ledger that calls back into the pool mid-transfer therefore sees
post-mutation state. Each operation also runs in an atomic scope: share
mints and burns and event records are journaled as they happen, and on any
exception the journal is replayed backwards, the counter is reset and the
ledger undoes its own transfers before the exception propagates.
"""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any

import structlog

from cpamm.amm.base import SwapResult
from cpamm.amm.constant_product import ConstantProduct
from cpamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from cpamm.errors import (
    BelowMinimumLiquidityThreshold,
    DeadlineExpired,
    EmptyPool,
    InsufficientShares,
    InvalidAssetPair,
    MaxQuoteExceeded,
    MinSharesNotMet,
    OutputTooLow,
    PoolError,
    ZeroAmount,
)
from cpamm.ledger.base import AssetLedger, LedgerError
from cpamm.pool.counter import SwapCounter
from cpamm.pool.events import LiquidityAdded, LiquidityRemoved, PoolEvent, Swapped
from cpamm.pool.shares import LiquidityShares

logger = structlog.get_logger()

Clock = Callable[[], int]


def system_clock() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


class PoolStatus(str, Enum):
    """Lifecycle state of a pool."""

    EMPTY = "empty"  # No shares outstanding
    FUNDED = "funded"  # At least one share outstanding


class Pool:
    """Two-asset constant product liquidity pool.

    Args:
        base_asset: Asset deposits are denominated in (fixed at creation)
        quote_asset: The paired asset (fixed at creation)
        ledger: Custody backend holding the pool's reserves
        address: Holder identifier the ledger keeps reserves under.
            Defaults to "pool:<base>/<quote>".
        config: Pricing constants, deposit floor and bonus parameters
        amm: Pricing curve. Defaults to ConstantProduct(config).
        clock: Returns the current time in seconds, compared against deadlines

    Raises:
        InvalidAssetPair: If base_asset equals quote_asset
    """

    def __init__(
        self,
        base_asset: str,
        quote_asset: str,
        ledger: AssetLedger,
        *,
        address: str | None = None,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        amm: ConstantProduct | None = None,
        clock: Clock | None = None,
    ) -> None:
        if base_asset == quote_asset:
            raise InvalidAssetPair(base_asset, quote_asset, reason="identical assets")

        self._base_asset = base_asset
        self._quote_asset = quote_asset
        self._ledger = ledger
        self.address = address or f"pool:{base_asset}/{quote_asset}"
        self.config = config
        self._amm = amm or ConstantProduct(config)
        self._clock = clock or system_clock

        self._shares = LiquidityShares(name=f"CP-AMM {quote_asset}", symbol=f"cp{quote_asset}")
        self._counter = SwapCounter(interval=config.swap_bonus_interval)
        # Most recent events only; older ones survive in the structlog records
        self._events: deque[PoolEvent] = deque(maxlen=config.event_log_size)
        # Undo actions of the innermost open atomic scope
        self._undo: list[Callable[[], None]] | None = None

    def __repr__(self) -> str:
        return (
            f"Pool(address={self.address!r}, base={self._base_asset!r}, "
            f"quote={self._quote_asset!r}, total_shares={self.total_shares})"
        )

    # --- Views ---

    @property
    def base_asset(self) -> str:
        return self._base_asset

    @property
    def quote_asset(self) -> str:
        return self._quote_asset

    @property
    def assets(self) -> tuple[str, str]:
        """The registered (base, quote) pair."""
        return self._base_asset, self._quote_asset

    @property
    def minimum_base_liquidity(self) -> int:
        return self.config.min_base_liquidity

    @property
    def total_shares(self) -> int:
        return self._shares.total_supply

    @property
    def shares(self) -> LiquidityShares:
        return self._shares

    def shares_of(self, holder: str) -> int:
        return self._shares.balance_of(holder)

    @property
    def swap_count(self) -> int:
        """Swaps completed since the last bonus payout."""
        return self._counter.value

    @property
    def status(self) -> PoolStatus:
        return PoolStatus.FUNDED if self._shares.total_supply > 0 else PoolStatus.EMPTY

    @property
    def is_funded(self) -> bool:
        return self.status is PoolStatus.FUNDED

    @property
    def events(self) -> tuple[PoolEvent, ...]:
        """The most recent config.event_log_size events, oldest first."""
        return tuple(self._events)

    def reserves(self) -> tuple[int, int]:
        """Current (base, quote) balances held by the pool."""
        return (
            self._ledger.balance_of(self._base_asset, self.address),
            self._ledger.balance_of(self._quote_asset, self.address),
        )

    def price_of_one_base_in_quote(self) -> int:
        """Quote received for selling price_unit of base at current reserves."""
        reserve_base, reserve_quote = self.reserves()
        return self._amm.quote_output_given_input(
            self.config.price_unit, reserve_base, reserve_quote
        )

    def price_of_one_quote_in_base(self) -> int:
        """Base received for selling price_unit of quote at current reserves."""
        reserve_base, reserve_quote = self.reserves()
        return self._amm.quote_output_given_input(
            self.config.price_unit, reserve_quote, reserve_base
        )

    def quote_output_given_input(self, input_asset: str, output_asset: str, input_amount: int) -> int:
        """Output an exact input swap would pay at current reserves."""
        self._validate_pair(input_asset, output_asset)
        self._require_funded()
        reserve_in, reserve_out = self._reserves_for(input_asset)
        return self._amm.quote_output_given_input(input_amount, reserve_in, reserve_out)

    def quote_input_given_output(self, input_asset: str, output_asset: str, output_amount: int) -> int:
        """Input an exact output swap would charge at current reserves."""
        self._validate_pair(input_asset, output_asset)
        self._require_funded()
        reserve_in, reserve_out = self._reserves_for(input_asset)
        return self._amm.quote_input_given_output(output_amount, reserve_in, reserve_out)

    # --- Liquidity ---

    def deposit(
        self,
        provider: str,
        base_amount: int,
        min_shares_to_mint: int,
        max_quote_to_deposit: int,
        deadline: int,
    ) -> int:
        """Add liquidity and mint claim shares to provider.

        On an empty pool this is the bootstrap deposit: provider receives
        base_amount shares and sets the initial price by supplying exactly
        max_quote_to_deposit of quote. On a funded pool the quote amount is
        derived from the current reserve ratio.

        Args:
            provider: Holder depositing and receiving shares
            base_amount: Base asset to deposit
            min_shares_to_mint: Fail unless at least this many shares are minted
            max_quote_to_deposit: Fail if more quote than this is required
                (on bootstrap, the exact quote deposited)
            deadline: Latest acceptable time (seconds)

        Returns:
            Number of shares minted

        Raises:
            DeadlineExpired, ZeroAmount, BelowMinimumLiquidityThreshold,
            MaxQuoteExceeded, MinSharesNotMet, LedgerError
        """
        with self._atomic("deposit", provider=provider, base_amount=base_amount):
            self._check_deadline(deadline)
            if base_amount <= 0:
                raise ZeroAmount("base_amount", base_amount)
            if base_amount < self.config.min_base_liquidity:
                raise BelowMinimumLiquidityThreshold(self.config.min_base_liquidity, base_amount)

            total_shares = self._shares.total_supply
            if total_shares == 0:
                if max_quote_to_deposit <= 0:
                    raise ZeroAmount("max_quote_to_deposit", max_quote_to_deposit)
                shares_minted = base_amount
                quote_amount = max_quote_to_deposit
            else:
                reserve_base, reserve_quote = self.reserves()
                quote_amount = self._amm.required_quote_for_deposit(
                    base_amount, reserve_base, reserve_quote
                )
                if quote_amount > max_quote_to_deposit:
                    raise MaxQuoteExceeded(max_quote_to_deposit, quote_amount)
                shares_minted = self._amm.shares_for_deposit(
                    base_amount, total_shares, reserve_base
                )
                if shares_minted < min_shares_to_mint:
                    raise MinSharesNotMet(min_shares_to_mint, shares_minted)

            self._mint(provider, shares_minted)
            self._record(
                LiquidityAdded(
                    provider=provider,
                    base_amount=base_amount,
                    quote_amount=quote_amount,
                    shares_minted=shares_minted,
                )
            )
            self._ledger.pull(self._base_asset, provider, self.address, base_amount)
            self._ledger.pull(self._quote_asset, provider, self.address, quote_amount)

        logger.info(
            "liquidity_added",
            pool=self.address,
            provider=provider,
            base_amount=base_amount,
            quote_amount=quote_amount,
            shares_minted=shares_minted,
            bootstrap=total_shares == 0,
        )
        return shares_minted

    def withdraw(
        self,
        provider: str,
        shares_to_burn: int,
        min_base_out: int,
        min_quote_out: int,
        deadline: int,
    ) -> tuple[int, int]:
        """Burn claim shares and pay out the pro-rata share of both reserves.

        Shares are burned before any transfer, so a reentrant caller cannot
        redeem the same shares twice.

        Returns:
            (base_out, quote_out)

        Raises:
            DeadlineExpired, ZeroAmount, InsufficientShares, OutputTooLow, LedgerError
        """
        with self._atomic("withdraw", provider=provider, shares_to_burn=shares_to_burn):
            self._check_deadline(deadline)
            if shares_to_burn <= 0:
                raise ZeroAmount("shares_to_burn", shares_to_burn)
            if min_base_out <= 0:
                raise ZeroAmount("min_base_out", min_base_out)
            if min_quote_out <= 0:
                raise ZeroAmount("min_quote_out", min_quote_out)

            held = self._shares.balance_of(provider)
            if held < shares_to_burn:
                raise InsufficientShares(provider, held, shares_to_burn)

            reserve_base, reserve_quote = self.reserves()
            base_out, quote_out = self._amm.amounts_for_shares(
                shares_to_burn, self._shares.total_supply, reserve_base, reserve_quote
            )
            if base_out < min_base_out:
                raise OutputTooLow(min_base_out, base_out, asset=self._base_asset)
            if quote_out < min_quote_out:
                raise OutputTooLow(min_quote_out, quote_out, asset=self._quote_asset)

            self._burn(provider, shares_to_burn)
            self._record(
                LiquidityRemoved(
                    provider=provider,
                    base_amount=base_out,
                    quote_amount=quote_out,
                    shares_burned=shares_to_burn,
                )
            )
            self._ledger.push(self._base_asset, self.address, provider, base_out)
            self._ledger.push(self._quote_asset, self.address, provider, quote_out)

        logger.info(
            "liquidity_removed",
            pool=self.address,
            provider=provider,
            shares_burned=shares_to_burn,
            base_amount=base_out,
            quote_amount=quote_out,
            remaining_shares=self._shares.total_supply,
        )
        return base_out, quote_out

    # --- Swaps ---

    def swap_exact_input(
        self,
        swapper: str,
        input_asset: str,
        input_amount: int,
        output_asset: str,
        min_output: int,
        deadline: int,
    ) -> int:
        """Sell exactly input_amount of input_asset for at least min_output.

        Returns:
            Output amount paid to swapper (excluding any loyalty bonus)

        Raises:
            DeadlineExpired, InvalidAssetPair, EmptyPool, ZeroAmount,
            OutputTooLow, ArithmeticFault, LedgerError
        """
        return self.execute_exact_input(
            swapper, input_asset, input_amount, output_asset, min_output, deadline
        ).output_amount

    def swap_exact_output(
        self,
        swapper: str,
        input_asset: str,
        output_asset: str,
        exact_output: int,
        deadline: int,
    ) -> int:
        """Buy exactly exact_output of output_asset.

        There is no maximum-input bound on this path.

        Returns:
            Input amount pulled from swapper

        Raises:
            DeadlineExpired, InvalidAssetPair, EmptyPool, ZeroAmount,
            ArithmeticFault, LedgerError
        """
        return self.execute_exact_output(
            swapper, input_asset, output_asset, exact_output, deadline
        ).input_amount

    def execute_exact_input(
        self,
        swapper: str,
        input_asset: str,
        input_amount: int,
        output_asset: str,
        min_output: int,
        deadline: int,
    ) -> SwapResult:
        """swap_exact_input, returning the full SwapResult including the bonus."""
        with self._atomic("swap_exact_input", swapper=swapper, input_asset=input_asset):
            self._check_deadline(deadline)
            self._validate_pair(input_asset, output_asset)
            self._require_funded()
            reserve_in, reserve_out = self._reserves_for(input_asset)
            output_amount = self._amm.quote_output_given_input(input_amount, reserve_in, reserve_out)
            if output_amount < min_output:
                raise OutputTooLow(min_output, output_amount, asset=output_asset)
            return self._swap(swapper, input_asset, input_amount, output_asset, output_amount)

    def execute_exact_output(
        self,
        swapper: str,
        input_asset: str,
        output_asset: str,
        exact_output: int,
        deadline: int,
    ) -> SwapResult:
        """swap_exact_output, returning the full SwapResult including the bonus."""
        with self._atomic("swap_exact_output", swapper=swapper, input_asset=input_asset):
            self._check_deadline(deadline)
            self._validate_pair(input_asset, output_asset)
            self._require_funded()
            reserve_in, reserve_out = self._reserves_for(input_asset)
            input_amount = self._amm.quote_input_given_output(exact_output, reserve_in, reserve_out)
            return self._swap(swapper, input_asset, input_amount, output_asset, exact_output)

    def sell_quote(self, swapper: str, quote_amount: int, min_base_out: int, deadline: int) -> int:
        """Sell exactly quote_amount of the quote asset for base."""
        return self.swap_exact_input(
            swapper, self._quote_asset, quote_amount, self._base_asset, min_base_out, deadline
        )

    def _swap(
        self,
        swapper: str,
        input_asset: str,
        input_amount: int,
        output_asset: str,
        output_amount: int,
    ) -> SwapResult:
        """Apply a priced swap: counter, bonus, record, then transfers."""
        self._validate_pair(input_asset, output_asset)

        bonus = self.config.swap_bonus_amount if self._counter.tick() else 0
        result = SwapResult(
            input_asset=input_asset,
            input_amount=input_amount,
            output_asset=output_asset,
            output_amount=output_amount,
            bonus=bonus,
        )
        self._record(
            Swapped(
                swapper=swapper,
                input_asset=input_asset,
                input_amount=input_amount,
                output_asset=output_asset,
                output_amount=output_amount,
                bonus=bonus,
            )
        )

        if bonus:
            self._ledger.push(output_asset, self.address, swapper, bonus)
        self._ledger.pull(input_asset, swapper, self.address, input_amount)
        self._ledger.push(output_asset, self.address, swapper, output_amount)

        logger.info(
            "swap_executed",
            pool=self.address,
            swapper=swapper,
            input_asset=input_asset,
            amount_in=input_amount,
            output_asset=output_asset,
            amount_out=output_amount,
            bonus=bonus,
            swap_count=self._counter.value,
        )
        return result

    # --- Internals ---

    def _check_deadline(self, deadline: int) -> None:
        now = self._clock()
        if now > deadline:
            raise DeadlineExpired(deadline, now)

    def _validate_pair(self, input_asset: str, output_asset: str) -> None:
        if input_asset == output_asset:
            raise InvalidAssetPair(input_asset, output_asset, reason="identical assets")
        pair = (self._base_asset, self._quote_asset)
        if input_asset not in pair or output_asset not in pair:
            raise InvalidAssetPair(input_asset, output_asset)

    def _require_funded(self) -> None:
        if self._shares.total_supply == 0:
            raise EmptyPool(self.address)

    def _reserves_for(self, input_asset: str) -> tuple[int, int]:
        """Reserves ordered as (reserve_in, reserve_out)."""
        reserve_base, reserve_quote = self.reserves()
        if input_asset == self._base_asset:
            return reserve_base, reserve_quote
        return reserve_quote, reserve_base

    def _mint(self, holder: str, amount: int) -> None:
        self._shares.mint(holder, amount)
        self._journal(lambda: self._shares.burn(holder, amount))

    def _burn(self, holder: str, amount: int) -> None:
        self._shares.burn(holder, amount)
        self._journal(lambda: self._shares.mint(holder, amount))

    def _record(self, event: PoolEvent) -> None:
        events = self._events
        evicted = events[0] if len(events) == events.maxlen else None
        events.append(event)

        def undo() -> None:
            events.pop()
            if evicted is not None:
                events.appendleft(evicted)

        self._journal(undo)

    def _journal(self, undo: Callable[[], None]) -> None:
        if self._undo is not None:
            self._undo.append(undo)

    @contextmanager
    def _atomic(self, operation: str, **context: Any) -> Iterator[None]:
        """Run an operation all-or-nothing across pool state and the ledger.

        Scopes nest (a ledger callback may re-enter the pool). A committed
        inner scope hands its undo actions to the enclosing scope, so a later
        failure of the outer operation still reverts them.
        """
        outer = self._undo
        undo: list[Callable[[], None]] = []
        counter = self._counter.value
        self._undo = undo
        try:
            with self._ledger.atomic():
                yield
        except Exception as err:
            for action in reversed(undo):
                action()
            self._counter.value = counter
            if isinstance(err, (PoolError, LedgerError)):
                logger.debug(
                    "pool_operation_rejected",
                    pool=self.address,
                    operation=operation,
                    error=type(err).__name__,
                    context=err.context,
                    **context,
                )
            raise
        else:
            if outer is not None:
                outer.extend(undo)
        finally:
            self._undo = outer


__all__ = [
    "Clock",
    "Pool",
    "PoolStatus",
    "system_clock",
]
