"""
IcoState — Фазы ICO и снапшот его состояния

Immutable Pydantic модель, представляющая снапшот хранилища ICO.
Полная совместимость с JSON Schema (contracts/schema/ico_state.json).
"""

from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .pool_state import U256, AddressStr


# =============================================================================
# ENUMS
# =============================================================================


class Phase(IntEnum):
    """
    Фаза ICO. Переходы только вперёд: SEED → GENERAL → OPEN.

    Значения совпадают с внешним интерфейсом (advance_phase(expected: uint8)).
    """

    SEED = 0
    GENERAL = 1
    OPEN = 2

    def next(self) -> Optional["Phase"]:
        """Следующая фаза или None для OPEN."""
        if self is Phase.OPEN:
            return None
        return Phase(self + 1)


# =============================================================================
# ICO SNAPSHOT
# =============================================================================


class IcoSnapshot(BaseModel):
    """
    Снапшот ICO.

    Инварианты:
    - total_raised <= goal
    - goal_reached == (total_raised == goal)
    """

    address: AddressStr
    owner: AddressStr = Field(..., description="Treasury (owner ICO)")
    token: AddressStr = Field(..., description="Адрес токена, выплачиваемого в OPEN")
    current_phase: Phase
    phase_name: str = Field(..., pattern="^(SEED|GENERAL|OPEN)$")
    is_paused: bool
    total_raised: U256
    goal: U256
    goal_reached: bool
    token_rate: int = Field(..., gt=0, description="Токенов за единицу base актива")
    contributions: dict[AddressStr, U256] = Field(default_factory=dict)
    whitelist: list[AddressStr] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_raise_bounds(self) -> "IcoSnapshot":
        if self.total_raised > self.goal:
            raise ValueError(f"total_raised {self.total_raised} exceeds goal {self.goal}")
        if self.goal_reached != (self.total_raised == self.goal):
            raise ValueError("goal_reached is inconsistent with total_raised")
        if self.phase_name != self.current_phase.name:
            raise ValueError("phase_name does not match current_phase")
        return self
