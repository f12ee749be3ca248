"""
ICO — фазовый сбор средств и его правила.
"""

from src.ico.ico import ICO
from src.ico.phase_machine import (
    DEFAULT_TOKEN_RATE,
    ContributionResult,
    IcoConfig,
    PhaseRules,
    PhaseStateMachine,
)

__all__ = [
    "DEFAULT_TOKEN_RATE",
    "PhaseRules",
    "IcoConfig",
    "ContributionResult",
    "PhaseStateMachine",
    "ICO",
]
