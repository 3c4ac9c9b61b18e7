"""Base classes for pricing curves."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SwapResult:
    """Outcome of a completed swap against a pool."""

    input_asset: str
    input_amount: int
    output_asset: str
    output_amount: int
    # Loyalty bonus paid in the output asset on top of output_amount (0 if none)
    bonus: int = 0


class AMM(ABC):
    """Abstract base class for two-asset pricing curves.

    Implementations are pure: reserves are passed in explicitly as a snapshot,
    so the math can be tested without a pool or a ledger.
    """

    @abstractmethod
    def quote_output_given_input(
        self,
        input_amount: int,
        input_reserve: int,
        output_reserve: int,
    ) -> int:
        """Calculate output amount for a given input.

        Args:
            input_amount: Amount of the input asset sent to the pool
            input_reserve: Pool reserve of the input asset
            output_reserve: Pool reserve of the output asset

        Returns:
            Output asset amount paid by the pool
        """
        ...

    @abstractmethod
    def quote_input_given_output(
        self,
        output_amount: int,
        input_reserve: int,
        output_reserve: int,
    ) -> int:
        """Calculate required input for a desired output.

        Args:
            output_amount: Desired output asset amount
            input_reserve: Pool reserve of the input asset
            output_reserve: Pool reserve of the output asset

        Returns:
            Input asset amount the caller must send
        """
        ...
