"""API endpoints for the pool engine.

Handlers are async and never await, so every pool operation runs to
completion on the event loop before the next request is handled. That
serializes all mutations against the shared ledger and registry, which is
the execution model the engine assumes.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from cpamm.api.models import (
    ApproveRequest,
    BalanceResponse,
    CreatePoolRequest,
    CreditRequest,
    DepositRequest,
    DepositResponse,
    PoolView,
    QuoteResponse,
    SwapExactInputRequest,
    SwapExactOutputRequest,
    SwapResponse,
    WithdrawRequest,
    WithdrawResponse,
    parse_uint256,
)
from cpamm.errors import InvalidAssetPair
from cpamm.pool import Pool
from cpamm.service import Exchange, get_default_exchange

logger = structlog.get_logger()

router = APIRouter()


def get_exchange() -> Exchange:
    """Dependency provider for the exchange.

    Override this in tests to inject a fresh exchange:
        app.dependency_overrides[get_exchange] = lambda: exchange
    """
    return get_default_exchange()


def _get_pool(exchange: Exchange, asset: str) -> Pool:
    pool = exchange.registry.get_pool(asset)
    if pool is None:
        raise HTTPException(status_code=404, detail=f"No pool for asset {asset}")
    return pool


def _view(pool: Pool) -> PoolView:
    reserve_base, reserve_quote = pool.reserves()
    base_price: int | None = None
    quote_price: int | None = None
    # Prices are only defined for a funded pool with both reserves non-empty
    if pool.is_funded and reserve_base > 0 and reserve_quote > 0:
        base_price = pool.price_of_one_base_in_quote()
        quote_price = pool.price_of_one_quote_in_base()
    return PoolView(
        address=pool.address,
        base_asset=pool.base_asset,
        quote_asset=pool.quote_asset,
        status=pool.status.value,
        reserve_base=reserve_base,
        reserve_quote=reserve_quote,
        total_shares=pool.total_shares,
        swap_count=pool.swap_count,
        minimum_base_liquidity=pool.minimum_base_liquidity,
        price_of_one_base_in_quote=base_price,
        price_of_one_quote_in_base=quote_price,
    )


@router.get("/pools")
async def list_pools(exchange: Exchange = Depends(get_exchange)) -> list[PoolView]:
    return [_view(pool) for pool in exchange.registry.pools()]


@router.post("/pools", status_code=201)
async def create_pool(
    request: CreatePoolRequest,
    exchange: Exchange = Depends(get_exchange),
) -> PoolView:
    pool = exchange.registry.create_pool(request.asset)
    return _view(pool)


@router.get("/pools/{asset}")
async def get_pool(asset: str, exchange: Exchange = Depends(get_exchange)) -> PoolView:
    return _view(_get_pool(exchange, asset))


@router.get("/pools/{asset}/quote/exact-input")
async def quote_exact_input(
    asset: str,
    input_asset: str,
    amount: str = Query(description="Input amount as decimal string"),
    exchange: Exchange = Depends(get_exchange),
) -> QuoteResponse:
    """Output a swap of exactly `amount` of input_asset would pay now."""
    pool = _get_pool(exchange, asset)
    input_amount = _parse_amount(amount)
    output_asset = _other_asset(pool, input_asset)
    output_amount = pool.quote_output_given_input(input_asset, output_asset, input_amount)
    return QuoteResponse(
        input_asset=input_asset,
        input_amount=input_amount,
        output_asset=output_asset,
        output_amount=output_amount,
    )


@router.get("/pools/{asset}/quote/exact-output")
async def quote_exact_output(
    asset: str,
    input_asset: str,
    amount: str = Query(description="Desired output amount as decimal string"),
    exchange: Exchange = Depends(get_exchange),
) -> QuoteResponse:
    """Input a swap for exactly `amount` of the other asset would charge now."""
    pool = _get_pool(exchange, asset)
    output_amount = _parse_amount(amount)
    output_asset = _other_asset(pool, input_asset)
    input_amount = pool.quote_input_given_output(input_asset, output_asset, output_amount)
    return QuoteResponse(
        input_asset=input_asset,
        input_amount=input_amount,
        output_asset=output_asset,
        output_amount=output_amount,
    )


@router.post("/pools/{asset}/deposit")
async def deposit(
    asset: str,
    request: DepositRequest,
    exchange: Exchange = Depends(get_exchange),
) -> DepositResponse:
    pool = _get_pool(exchange, asset)
    shares = pool.deposit(
        request.provider,
        request.base_amount,
        request.min_shares_to_mint,
        request.max_quote_to_deposit,
        request.deadline,
    )
    return DepositResponse(shares_minted=shares)


@router.post("/pools/{asset}/withdraw")
async def withdraw(
    asset: str,
    request: WithdrawRequest,
    exchange: Exchange = Depends(get_exchange),
) -> WithdrawResponse:
    pool = _get_pool(exchange, asset)
    base_out, quote_out = pool.withdraw(
        request.provider,
        request.shares_to_burn,
        request.min_base_out,
        request.min_quote_out,
        request.deadline,
    )
    return WithdrawResponse(base_amount=base_out, quote_amount=quote_out)


@router.post("/pools/{asset}/swap/exact-input")
async def swap_exact_input(
    asset: str,
    request: SwapExactInputRequest,
    exchange: Exchange = Depends(get_exchange),
) -> SwapResponse:
    pool = _get_pool(exchange, asset)
    result = pool.execute_exact_input(
        request.swapper,
        request.input_asset,
        request.input_amount,
        request.output_asset,
        request.min_output,
        request.deadline,
    )
    return SwapResponse.from_result(result)


@router.post("/pools/{asset}/swap/exact-output")
async def swap_exact_output(
    asset: str,
    request: SwapExactOutputRequest,
    exchange: Exchange = Depends(get_exchange),
) -> SwapResponse:
    pool = _get_pool(exchange, asset)
    result = pool.execute_exact_output(
        request.swapper,
        request.input_asset,
        request.output_asset,
        request.output_amount,
        request.deadline,
    )
    return SwapResponse.from_result(result)


@router.post("/ledger/{asset}/credit")
async def credit(
    asset: str,
    request: CreditRequest,
    exchange: Exchange = Depends(get_exchange),
) -> BalanceResponse:
    """Seed a holder's balance in the in-memory ledger."""
    exchange.ledger.credit(asset, request.holder, request.amount)
    logger.info("ledger_credited", asset=asset, holder=request.holder, amount=request.amount)
    return BalanceResponse(
        asset=asset,
        holder=request.holder,
        balance=exchange.ledger.balance_of(asset, request.holder),
    )


@router.post("/ledger/{asset}/approve", status_code=204)
async def approve(
    asset: str,
    request: ApproveRequest,
    exchange: Exchange = Depends(get_exchange),
) -> None:
    exchange.ledger.approve(asset, request.owner, request.spender, request.amount)


@router.get("/ledger/{asset}/{holder}")
async def balance(asset: str, holder: str, exchange: Exchange = Depends(get_exchange)) -> BalanceResponse:
    return BalanceResponse(asset=asset, holder=holder, balance=exchange.ledger.balance_of(asset, holder))


def _parse_amount(raw: str) -> int:
    try:
        return parse_uint256(raw)
    except ValueError as err:
        raise HTTPException(status_code=422, detail=str(err)) from err


def _other_asset(pool: Pool, input_asset: str) -> str:
    base, quote = pool.assets
    if input_asset == base:
        return quote
    if input_asset == quote:
        return base
    raise InvalidAssetPair(input_asset, "", reason=f"not in pool {pool.address}")
