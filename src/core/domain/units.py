"""
Units — Конверсия base units

Все денежные величины ядра — целые числа в base units (фиксированная точка,
масштаб 10^18). Float запрещён: человекочитаемые суммы конвертируются только
через Decimal из строк или int.

Единственный допустимый способ преобразований между:
- человекочитаемой суммой ("1.5", 30000)
- base units (int, 0 <= x <= U256_MAX)
"""

from decimal import Decimal, InvalidOperation
from typing import Final, Union


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Количество десятичных знаков base unit
DECIMALS: Final[int] = 18

# Масштаб фиксированной точки (1.0 == WAD)
WAD: Final[int] = 10**DECIMALS

# Верхняя граница u256
U256_MAX: Final[int] = (1 << 256) - 1

# Тип суммы в base units
Amount = int

# Адрес аккаунта или контракта
Address = str

# Burn sink: кредиты на этом адресе заблокированы навсегда
ZERO_ADDRESS: Final[Address] = "0x" + "0" * 40


# =============================================================================
# КОНВЕРТЕРЫ
# =============================================================================


def to_base_units(value: Union[str, int, Decimal], decimals: int = DECIMALS) -> Amount:
    """
    Конверсия: человекочитаемая сумма → base units

    Args:
        value: Сумма строкой ("1.5"), int или Decimal. Float не принимается.
        decimals: Количество десятичных знаков (default: 18)

    Returns:
        Сумма в base units

    Raises:
        TypeError: Если передан float или bool
        ValueError: Если сумма отрицательная, не число или дробная часть
            длиннее `decimals`

    Examples:
        >>> to_base_units("1.5")
        1500000000000000000
        >>> to_base_units(30000)
        30000000000000000000000
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Amount must be str, int or Decimal, got {type(value).__name__}")

    try:
        dec = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Not a decimal amount: {value!r}")

    if not dec.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    if dec < 0:
        raise ValueError(f"Amount cannot be negative: {value!r}")

    scaled = dec.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {value!r} has more than {decimals} decimal places")

    result = int(scaled)
    if result > U256_MAX:
        raise ValueError(f"Amount {value!r} exceeds u256")
    return result


def from_base_units(amount: Amount, decimals: int = DECIMALS) -> Decimal:
    """
    Конверсия: base units → Decimal (для логов и отображения)

    Args:
        amount: Сумма в base units
        decimals: Количество десятичных знаков

    Returns:
        Точное Decimal-представление без потери точности
    """
    if amount < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")
    return Decimal(amount).scaleb(-decimals)


def format_amount(amount: Amount, decimals: int = DECIMALS) -> str:
    """Строка для логов: '1.5' вместо 1500000000000000000."""
    text = format(from_base_units(amount, decimals), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
