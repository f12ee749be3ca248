"""
PoolState — Снапшоты состояния токена и пула ликвидности

Immutable Pydantic модели, представляющие снапшот хранилища контракта.
Полная совместимость с JSON Schema (contracts/schema/pool_state.json,
contracts/schema/token_state.json).

Суммы u256 не помещаются в JSON number, поэтому в JSON-режиме
сериализуются десятичными строками.
"""

from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer, model_validator

from .units import U256_MAX


# Сумма в base units: int в Python, десятичная строка в JSON
U256 = Annotated[
    int,
    Field(ge=0, le=U256_MAX),
    PlainSerializer(lambda v: str(v), return_type=str, when_used="json"),
]

AddressStr = Annotated[str, Field(min_length=1)]


# =============================================================================
# TOKEN
# =============================================================================


class TokenSnapshot(BaseModel):
    """
    Снапшот fungible token ledger.

    Инвариант: sum(balances) == total_supply.
    """

    address: AddressStr = Field(..., description="Адрес контракта токена")
    name: str = Field(..., min_length=1)
    symbol: str = Field(..., min_length=1)
    decimals: int = Field(..., ge=0, le=77)
    owner: AddressStr = Field(..., description="Owner (переключает налог)")
    treasury: AddressStr = Field(..., description="Получатель налога")
    total_supply: U256
    tax_enabled: bool = Field(..., description="Налог 2% на переводы включён")
    tax_bps: int = Field(..., ge=0, le=10_000)
    balances: dict[AddressStr, U256] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_supply_conservation(self) -> "TokenSnapshot":
        held = sum(self.balances.values())
        if held != self.total_supply:
            raise ValueError(f"sum(balances) {held} != total_supply {self.total_supply}")
        return self


# =============================================================================
# LIQUIDITY POOL
# =============================================================================


class PoolSnapshot(BaseModel):
    """
    Снапшот пула ликвидности.

    reserve_* — кэш фактических балансов на конец последнего мутирующего вызова.
    credit_balances — LP кредиты, включая заблокированный MINIMUM_LIQUIDITY
    на burn sink.
    """

    address: AddressStr
    owner: AddressStr
    token: AddressStr = Field(..., description="Адрес токена пары")
    reserve_base: U256
    reserve_token: U256
    total_supply: U256 = Field(..., description="Суммарные LP кредиты")
    fee_bps: int = Field(..., ge=0, le=10_000)
    minimum_liquidity: int = Field(..., ge=0)
    credit_balances: dict[AddressStr, U256] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_credit_conservation(self) -> "PoolSnapshot":
        held = sum(self.credit_balances.values())
        if held != self.total_supply:
            raise ValueError(f"sum(credit_balances) {held} != total_supply {self.total_supply}")
        return self

    @property
    def k(self) -> int:
        """Constant product reserve_base * reserve_token."""
        return self.reserve_base * self.reserve_token
