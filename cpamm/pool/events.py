"""Event records emitted by pool operations."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

NonNegative = Annotated[int, Field(ge=0)]


class LiquidityAdded(BaseModel):
    """A deposit minted shares to provider."""

    kind: Literal["liquidity_added"] = "liquidity_added"
    provider: str
    base_amount: NonNegative
    quote_amount: NonNegative
    shares_minted: NonNegative

    model_config = {"frozen": True}


class LiquidityRemoved(BaseModel):
    """A withdraw burned shares from provider."""

    kind: Literal["liquidity_removed"] = "liquidity_removed"
    provider: str
    base_amount: NonNegative
    quote_amount: NonNegative
    shares_burned: NonNegative

    model_config = {"frozen": True}


class Swapped(BaseModel):
    """A swap exchanged input_asset for output_asset."""

    kind: Literal["swapped"] = "swapped"
    swapper: str
    input_asset: str
    input_amount: NonNegative
    output_asset: str
    output_amount: NonNegative
    bonus: NonNegative = Field(default=0, description="Loyalty bonus paid in output_asset")

    model_config = {"frozen": True}


PoolEvent = LiquidityAdded | LiquidityRemoved | Swapped
