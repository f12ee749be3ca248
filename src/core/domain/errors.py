"""
Errors — Таксономия отказов контрактов

Каждый отказ — именованное синхронное исключение, которое прерывает операцию
целиком. Хост (src.ledger) откатывает все изменения состояния при любом
исключении, поэтому частичного применения не бывает.

Категории:
- Authorization: OnlyOwner, OnlyTreasury
- Input validation: InsufficientAmount, InsufficientInputAmount
- Invariant violation: InvalidK
- State / capacity: InsufficientLiquidity, Unmintable, InsufficientDeposit,
  ExceedsMaxContribution, InsufficientAvailability, PausedCampaign,
  IncorrectPhase, IcoActive, NoTokens, Slippage, InsufficientBalance,
  InsufficientAllowance
- Access control: Whitelist
- Arithmetic: ArithmeticDomainError (u256 range, деление на ноль)

У каждого класса стабильный `code` — короткий тег для логов и сравнения.
"""

from typing import ClassVar


class LedgerError(Exception):
    """Базовый класс всех отказов, откатывающих транзакцию."""

    code: ClassVar[str] = "LEDGER_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code

    def __str__(self) -> str:
        if self.message == self.code:
            return self.code
        return f"{self.code}: {self.message}"


# =============================================================================
# КАТЕГОРИИ
# =============================================================================


class AuthorizationError(LedgerError):
    code = "UNAUTHORIZED"


class InputValidationError(LedgerError):
    code = "INVALID_INPUT"


class InvariantViolation(LedgerError):
    code = "INVARIANT_VIOLATION"


class StateError(LedgerError):
    code = "INVALID_STATE"


class AccessControlError(LedgerError):
    code = "ACCESS_DENIED"


class ArithmeticDomainError(LedgerError):
    """Операнд вне u256 или деление на ноль в integer-примитивах."""

    code = "ARITHMETIC"


# =============================================================================
# AUTHORIZATION
# =============================================================================


class OnlyOwner(AuthorizationError):
    code = "ONLY_OWNER"


class OnlyTreasury(AuthorizationError):
    code = "ONLY_TREASURY"


# =============================================================================
# INPUT VALIDATION
# =============================================================================


class InsufficientAmount(InputValidationError):
    code = "INSUFFICIENT_AMOUNT"


class InsufficientInputAmount(InputValidationError):
    code = "INSUFFICIENT_INPUT_AMOUNT"


# =============================================================================
# INVARIANT
# =============================================================================


class InvalidK(InvariantViolation):
    """Пост-трейдовый constant product (с учётом fee) меньше исходного."""

    code = "INVALID_K"


# =============================================================================
# STATE / CAPACITY
# =============================================================================


class InsufficientLiquidity(StateError):
    code = "INSUFFICIENT_LIQUIDITY"


class Unmintable(StateError):
    code = "UNMINTABLE"


class InsufficientDeposit(StateError):
    code = "INSUFFICIENT_DEPOSIT"


class Slippage(StateError):
    code = "SLIPPAGE"


class InsufficientBalance(StateError):
    code = "INSUFFICIENT_BALANCE"


class InsufficientAllowance(StateError):
    code = "INSUFFICIENT_ALLOWANCE"


class ExceedsMaxContribution(StateError):
    code = "EXCEEDS_MAX_CONTRIBUTION"


class InsufficientAvailability(StateError):
    code = "INSUFFICIENT_AVAILABILITY"


class PausedCampaign(StateError):
    code = "PAUSED_CAMPAIGN"


class IncorrectPhase(StateError):
    code = "INCORRECT_PHASE"


class IcoActive(StateError):
    code = "ICO_ACTIVE"


class NoTokens(StateError):
    code = "NO_TOKENS"


# =============================================================================
# ACCESS CONTROL
# =============================================================================


class Whitelist(AccessControlError):
    code = "WHITELIST"
