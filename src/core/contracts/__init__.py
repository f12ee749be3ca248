"""
Contract Validation Module

Валидация JSON снапшотов состояния токена, пула и ICO.
"""

from .validators import (
    ContractValidator,
    IcoStateValidator,
    PoolStateValidator,
    SchemaLoader,
    TokenStateValidator,
    export_snapshot,
    validate_ico_state,
    validate_pool_state,
    validate_token_state,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "TokenStateValidator",
    "PoolStateValidator",
    "IcoStateValidator",
    # Functions
    "validate_token_state",
    "validate_pool_state",
    "validate_ico_state",
    "export_snapshot",
]
