"""
Core math modules

Целочисленные примитивы и формулы constant-product AMM.
"""

# Integer Math
from src.core.math.integer_math import (
    BPS_DENOMINATOR,
    apply_bps,
    checked_add,
    checked_mul,
    checked_sub,
    is_u256,
    isqrt,
    mul_div_down,
    require_u256,
    subtract_bps,
    validate_bps,
)

# CPMM
from src.core.math.cpmm import (
    DEFAULT_SWAP_FEE_BPS,
    MINIMUM_LIQUIDITY,
    burn_amounts,
    get_amount_out,
    initial_liquidity,
    min_return_for_slippage,
    proportional_liquidity,
    quote,
    satisfies_k,
    spot_price,
)

__all__ = [
    # Integer Math — Constants
    "BPS_DENOMINATOR",
    # Integer Math — Range checks
    "is_u256",
    "require_u256",
    # Integer Math — Checked arithmetic
    "checked_add",
    "checked_sub",
    "checked_mul",
    "mul_div_down",
    "isqrt",
    # Integer Math — Basis points
    "validate_bps",
    "apply_bps",
    "subtract_bps",
    # CPMM — Constants
    "DEFAULT_SWAP_FEE_BPS",
    "MINIMUM_LIQUIDITY",
    # CPMM — Pricing
    "quote",
    "get_amount_out",
    "satisfies_k",
    "spot_price",
    "min_return_for_slippage",
    # CPMM — LP credits
    "initial_liquidity",
    "proportional_liquidity",
    "burn_amounts",
]
