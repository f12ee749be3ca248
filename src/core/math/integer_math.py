"""
Integer Math — Checked Integer Primitives

Модуль обеспечивает детерминированную целочисленную арифметику для
бухгалтерии пула и ICO:
- Проверка u256-диапазона операндов и результатов
- Floor mul-div с широким промежуточным произведением
- Целочисленный квадратный корень
- Basis points без float

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Float не используется нигде
2. Деление на ноль никогда не происходит (ArithmeticDomainError)
3. Результат вне [0, U256_MAX] — ошибка, а не wraparound
4. Все операции детерминированы и воспроизводимы

Python int не ограничен по ширине, поэтому a * b в mul_div_down не
переполняется; сужение до u256 проверяется уже после деления.
"""

import math
from typing import Final

from src.core.domain.errors import ArithmeticDomainError
from src.core.domain.units import U256_MAX

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Знаменатель basis points
BPS_DENOMINATOR: Final[int] = 10_000


# =============================================================================
# ПРОВЕРКИ ДИАПАЗОНА
# =============================================================================


def is_u256(value: int) -> bool:
    """True если value — int (не bool) в [0, U256_MAX]."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= U256_MAX


def require_u256(value: int, name: str = "value") -> int:
    """
    Валидация, что значение помещается в u256.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Returns:
        То же значение (для inline-использования)

    Raises:
        ArithmeticDomainError: Если value не int или вне [0, U256_MAX]
    """
    if not is_u256(value):
        raise ArithmeticDomainError(f"{name} must be a u256 integer, got {value!r}")
    return value


# =============================================================================
# CHECKED ARITHMETIC
# =============================================================================


def checked_add(a: int, b: int) -> int:
    """a + b с проверкой переполнения u256."""
    return require_u256(require_u256(a, "a") + require_u256(b, "b"), "a + b")


def checked_sub(a: int, b: int) -> int:
    """a - b; отрицательный результат — ошибка (underflow)."""
    require_u256(a, "a")
    require_u256(b, "b")
    if b > a:
        raise ArithmeticDomainError(f"Subtraction underflow: {a} - {b}")
    return a - b


def checked_mul(a: int, b: int) -> int:
    """a * b с проверкой переполнения u256."""
    return require_u256(require_u256(a, "a") * require_u256(b, "b"), "a * b")


def mul_div_down(a: int, b: int, denominator: int) -> int:
    """
    floor(a * b / denominator) с широким промежуточным произведением.

    Промежуточное произведение может превышать u256 (int в Python не
    ограничен); проверяется только сужённый результат.

    Args:
        a: Первый множитель (u256)
        b: Второй множитель (u256)
        denominator: Делитель (u256, > 0)

    Returns:
        Результат floor-деления (u256)

    Raises:
        ArithmeticDomainError: Если denominator == 0 или операнды/результат вне u256

    Examples:
        >>> mul_div_down(10, 3, 4)
        7
    """
    require_u256(a, "a")
    require_u256(b, "b")
    require_u256(denominator, "denominator")
    if denominator == 0:
        raise ArithmeticDomainError("Division by zero in mul_div_down")

    return require_u256((a * b) // denominator, "mul_div_down result")


def isqrt(value: int) -> int:
    """
    Целочисленный квадратный корень: floor(sqrt(value)).

    Вход может быть шире u256 (произведение двух u256), поэтому проверяется
    только неотрицательность.
    """
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ArithmeticDomainError(f"isqrt requires a non-negative integer, got {value!r}")
    return math.isqrt(value)


# =============================================================================
# BASIS POINTS
# =============================================================================


def validate_bps(bps: int, name: str = "bps") -> int:
    """Валидация bps в [0, BPS_DENOMINATOR]."""
    if not isinstance(bps, int) or isinstance(bps, bool) or not 0 <= bps <= BPS_DENOMINATOR:
        raise ValueError(f"{name} must be an integer in [0, {BPS_DENOMINATOR}], got {bps!r}")
    return bps


def apply_bps(amount: int, bps: int) -> int:
    """
    Доля amount в basis points с округлением вниз.

    Examples:
        >>> apply_bps(50, 200)   # 2% от 50
        1
    """
    validate_bps(bps)
    return mul_div_down(amount, bps, BPS_DENOMINATOR)


def subtract_bps(amount: int, bps: int) -> int:
    """amount за вычетом доли bps: amount - floor(amount * bps / 10000)."""
    return checked_sub(amount, apply_bps(amount, bps))
