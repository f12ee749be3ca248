"""
CPMM — Constant Product Market Maker Formulas

Чистые функции без мутаций состояния. Используются и движком пула
(src.exchange.pool), и роутером (src.exchange.router), поэтому оценка
роутера и проверка инварианта пула считаются по одним и тем же формулам.

Fee удерживается с входной стороны:
    amount_in_with_fee = amount_in * (10000 - fee_bps)
    amount_out = reserve_out * amount_in_with_fee / (reserve_in * 10000 + amount_in_with_fee)

Инвариант после свапа (fee остаётся в резервах):
    (reserve_in * 10000 + delta_in * (10000 - fee_bps)) * (reserve_out - amount_out)
        >= reserve_in * reserve_out * 10000

Для любого amount_out, посчитанного get_amount_out, инвариант выполняется
(floor-деление только уменьшает выход).
"""

from fractions import Fraction
from typing import Final, Tuple

from src.core.domain.errors import InsufficientLiquidity, Unmintable
from src.core.math.integer_math import (
    BPS_DENOMINATOR,
    isqrt,
    mul_div_down,
    require_u256,
    subtract_bps,
    validate_bps,
)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Fee свапа по умолчанию: 1%
DEFAULT_SWAP_FEE_BPS: Final[int] = 100

# Кредиты, навсегда заблокированные на burn sink при первом mint
MINIMUM_LIQUIDITY: Final[int] = 1000


# =============================================================================
# ЦЕНООБРАЗОВАНИЕ
# =============================================================================


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """
    Эквивалент amount_a в токене B по текущему соотношению резервов.

    amount_b = floor(amount_a * reserve_b / reserve_a)

    Raises:
        InsufficientLiquidity: Если reserve_a == 0
    """
    if reserve_a == 0:
        raise InsufficientLiquidity("Cannot quote against an empty reserve")
    return mul_div_down(amount_a, reserve_b, reserve_a)


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_bps: int = DEFAULT_SWAP_FEE_BPS,
) -> int:
    """
    Максимальный выход для точного входа с учётом fee.

    Args:
        amount_in: Входная сумма (base units)
        reserve_in: Резерв входного актива
        reserve_out: Резерв выходного актива
        fee_bps: Fee в basis points

    Returns:
        Выходная сумма (floor)

    Raises:
        InsufficientLiquidity: Если любой из резервов нулевой
    """
    require_u256(amount_in, "amount_in")
    require_u256(reserve_in, "reserve_in")
    require_u256(reserve_out, "reserve_out")
    validate_bps(fee_bps, "fee_bps")

    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity("Pool has no reserves")

    amount_in_with_fee = amount_in * (BPS_DENOMINATOR - fee_bps)
    numerator = reserve_out * amount_in_with_fee
    denominator = reserve_in * BPS_DENOMINATOR + amount_in_with_fee
    return numerator // denominator


def satisfies_k(
    reserve_in: int,
    reserve_out: int,
    delta_in: int,
    amount_out: int,
    fee_bps: int = DEFAULT_SWAP_FEE_BPS,
) -> bool:
    """
    Проверка constant-product инварианта после свапа.

    В инвариант засчитывается только delta_in за вычетом fee.

    Returns:
        True если (R_in*10000 + d_in*(10000-fee)) * (R_out - out) >= R_in*R_out*10000
    """
    validate_bps(fee_bps, "fee_bps")
    if amount_out > reserve_out:
        return False

    adjusted_in = reserve_in * BPS_DENOMINATOR + delta_in * (BPS_DENOMINATOR - fee_bps)
    k_after = adjusted_in * (reserve_out - amount_out)
    k_before = reserve_in * reserve_out * BPS_DENOMINATOR
    return k_after >= k_before


def spot_price(reserve_base: int, reserve_token: int) -> Fraction:
    """
    Текущая цена: токенов за единицу base актива (точная дробь, без float).

    Raises:
        InsufficientLiquidity: Если любой из резервов нулевой
    """
    if reserve_base == 0 or reserve_token == 0:
        raise InsufficientLiquidity("Pool has no reserves")
    return Fraction(reserve_token, reserve_base)


def min_return_for_slippage(estimate: int, slippage_bps: int) -> int:
    """
    Slippage floor для передачи в роутер.

    Args:
        estimate: Оценка выхода (get_amount_out)
        slippage_bps: Допустимое проскальзывание в bps (50 = 0.5%)

    Returns:
        estimate - floor(estimate * slippage_bps / 10000)
    """
    return subtract_bps(estimate, slippage_bps)


# =============================================================================
# LP КРЕДИТЫ
# =============================================================================


def initial_liquidity(
    delta_base: int,
    delta_token: int,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> int:
    """
    Кредиты для первого mint (total_supply == 0).

    credits = isqrt(delta_base * delta_token) - minimum_liquidity

    Returns:
        Кредиты получателю (без заблокированной minimum_liquidity)

    Raises:
        Unmintable: Если одна из сторон депозита нулевая
        InsufficientLiquidity: Если isqrt(...) <= minimum_liquidity
    """
    if delta_base == 0 or delta_token == 0:
        raise Unmintable("Initial deposit must include both assets")

    root = isqrt(delta_base * delta_token)
    if root <= minimum_liquidity:
        raise InsufficientLiquidity(
            f"Initial liquidity {root} does not exceed the locked minimum {minimum_liquidity}"
        )
    return root - minimum_liquidity


def proportional_liquidity(
    delta_base: int,
    delta_token: int,
    reserve_base: int,
    reserve_token: int,
    total_supply: int,
) -> int:
    """
    Кредиты для последующих mint: меньшая из двух пропорций.

    credits = min(d_base * supply / R_base, d_token * supply / R_token)

    Raises:
        InsufficientLiquidity: Если резервы нулевые при ненулевом supply
    """
    if reserve_base == 0 or reserve_token == 0:
        raise InsufficientLiquidity("Pool has supply but empty reserves")

    return min(
        mul_div_down(delta_base, total_supply, reserve_base),
        mul_div_down(delta_token, total_supply, reserve_token),
    )


def burn_amounts(
    liquidity: int,
    reserve_base: int,
    reserve_token: int,
    total_supply: int,
) -> Tuple[int, int]:
    """
    Доли резервов для сжигаемых кредитов (floor — пыль остаётся в пуле).

    Returns:
        (base_out, token_out)

    Raises:
        InsufficientLiquidity: Если total_supply == 0
    """
    if total_supply == 0:
        raise InsufficientLiquidity("No liquidity has been issued")

    return (
        mul_div_down(liquidity, reserve_base, total_supply),
        mul_div_down(liquidity, reserve_token, total_supply),
    )
