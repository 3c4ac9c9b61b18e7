"""Pricing curves."""

from cpamm.amm.base import AMM, SwapResult
from cpamm.amm.constant_product import ConstantProduct, constant_product

__all__ = [
    "AMM",
    "SwapResult",
    "ConstantProduct",
    "constant_product",
]
