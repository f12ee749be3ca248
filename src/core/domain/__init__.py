"""
Domain models and value objects.

Contains fundamental domain entities: base units, error taxonomy,
state snapshots of the token, pool and ICO contracts.
"""

from src.core.domain.errors import (
    AccessControlError,
    ArithmeticDomainError,
    AuthorizationError,
    ExceedsMaxContribution,
    IcoActive,
    IncorrectPhase,
    InputValidationError,
    InsufficientAllowance,
    InsufficientAmount,
    InsufficientAvailability,
    InsufficientBalance,
    InsufficientDeposit,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InvalidK,
    InvariantViolation,
    LedgerError,
    NoTokens,
    OnlyOwner,
    OnlyTreasury,
    PausedCampaign,
    Slippage,
    StateError,
    Unmintable,
    Whitelist,
)
from src.core.domain.ico_state import IcoSnapshot, Phase
from src.core.domain.pool_state import U256, PoolSnapshot, TokenSnapshot
from src.core.domain.units import (
    DECIMALS,
    U256_MAX,
    WAD,
    ZERO_ADDRESS,
    Address,
    Amount,
    format_amount,
    from_base_units,
    to_base_units,
)

__all__ = [
    # Units module
    "DECIMALS",
    "WAD",
    "U256_MAX",
    "ZERO_ADDRESS",
    "Address",
    "Amount",
    "to_base_units",
    "from_base_units",
    "format_amount",
    # Errors — categories
    "LedgerError",
    "AuthorizationError",
    "InputValidationError",
    "InvariantViolation",
    "StateError",
    "AccessControlError",
    "ArithmeticDomainError",
    # Errors — named failures
    "OnlyOwner",
    "OnlyTreasury",
    "InsufficientAmount",
    "InsufficientInputAmount",
    "InvalidK",
    "InsufficientLiquidity",
    "Unmintable",
    "InsufficientDeposit",
    "Slippage",
    "InsufficientBalance",
    "InsufficientAllowance",
    "ExceedsMaxContribution",
    "InsufficientAvailability",
    "PausedCampaign",
    "IncorrectPhase",
    "IcoActive",
    "NoTokens",
    "Whitelist",
    # Snapshots
    "U256",
    "TokenSnapshot",
    "PoolSnapshot",
    "IcoSnapshot",
    "Phase",
]
