"""Pydantic request/response models for the pool API.

Amounts travel as decimal strings so that values above 2^53 survive JSON
clients; they are parsed into ints and validated as uint256.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer

from cpamm.amm.base import SwapResult

# Maximum uint256 value
UINT256_MAX = 2**256 - 1


def parse_uint256(value: Any) -> int:
    """Parse a uint256 given as int or decimal string.

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return int_value


Amount = Annotated[
    int,
    BeforeValidator(parse_uint256),
    PlainSerializer(str, return_type=str),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Asset or holder identifier
Identifier = Annotated[str, Field(min_length=1, max_length=128)]

# Unix timestamp in seconds
Deadline = Annotated[int, Field(ge=0, description="Latest acceptable Unix time (seconds)")]


class CreatePoolRequest(BaseModel):
    asset: Identifier


class PoolView(BaseModel):
    """Read-only snapshot of a pool."""

    address: str
    base_asset: str
    quote_asset: str
    status: str
    reserve_base: Amount
    reserve_quote: Amount
    total_shares: Amount
    swap_count: int
    minimum_base_liquidity: Amount
    price_of_one_base_in_quote: Amount | None = None
    price_of_one_quote_in_base: Amount | None = None


class DepositRequest(BaseModel):
    provider: Identifier
    base_amount: Amount
    min_shares_to_mint: Amount = 0
    max_quote_to_deposit: Amount
    deadline: Deadline


class DepositResponse(BaseModel):
    shares_minted: Amount


class WithdrawRequest(BaseModel):
    provider: Identifier
    shares_to_burn: Amount
    min_base_out: Amount
    min_quote_out: Amount
    deadline: Deadline


class WithdrawResponse(BaseModel):
    base_amount: Amount
    quote_amount: Amount


class SwapExactInputRequest(BaseModel):
    swapper: Identifier
    input_asset: Identifier
    input_amount: Amount
    output_asset: Identifier
    min_output: Amount = 0
    deadline: Deadline


class SwapExactOutputRequest(BaseModel):
    swapper: Identifier
    input_asset: Identifier
    output_asset: Identifier
    output_amount: Amount
    deadline: Deadline


class SwapResponse(BaseModel):
    input_asset: str
    input_amount: Amount
    output_asset: str
    output_amount: Amount
    bonus: Amount = Field(default=0, description="Loyalty bonus paid in output_asset")

    @classmethod
    def from_result(cls, result: SwapResult) -> "SwapResponse":
        return cls(
            input_asset=result.input_asset,
            input_amount=result.input_amount,
            output_asset=result.output_asset,
            output_amount=result.output_amount,
            bonus=result.bonus,
        )


class QuoteResponse(BaseModel):
    input_asset: str
    input_amount: Amount
    output_asset: str
    output_amount: Amount


class CreditRequest(BaseModel):
    holder: Identifier
    amount: Amount


class ApproveRequest(BaseModel):
    owner: Identifier
    spender: Identifier
    amount: Amount


class BalanceResponse(BaseModel):
    asset: str
    holder: str
    balance: Amount


class ErrorResponse(BaseModel):
    error: str
    detail: str
    context: dict[str, Any] = Field(default_factory=dict)
