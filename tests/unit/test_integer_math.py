"""
Тесты для Integer Math и Units

Проверяемые инварианты:
1. u256 диапазон: значения вне [0, 2**256-1] — ArithmeticDomainError
2. mul_div_down: широкое промежуточное произведение, floor, деление на ноль
3. isqrt: floor корня для произвольно больших неотрицательных int
4. Basis points без float
5. Конверсия base units через Decimal, float запрещён
6. Коды ошибок стабильны
"""

from decimal import Decimal

import pytest

from src.core.domain import (
    U256_MAX,
    WAD,
    ArithmeticDomainError,
    InsufficientLiquidity,
    InvalidK,
    InvariantViolation,
    LedgerError,
    OnlyTreasury,
    AuthorizationError,
    StateError,
    format_amount,
    from_base_units,
    to_base_units,
)
from src.core.math import (
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


# =============================================================================
# ТЕСТЫ: u256 диапазон
# =============================================================================


class TestU256Range:
    """Тесты require_u256 / is_u256."""

    def test_bounds_accepted(self):
        assert require_u256(0) == 0
        assert require_u256(U256_MAX) == U256_MAX

    @pytest.mark.parametrize("value", [-1, U256_MAX + 1, True, 1.5, "1"])
    def test_out_of_range_rejected(self, value):
        assert not is_u256(value)
        with pytest.raises(ArithmeticDomainError):
            require_u256(value, "value")

    def test_error_message_names_parameter(self):
        with pytest.raises(ArithmeticDomainError, match="reserve_base"):
            require_u256(-5, "reserve_base")


# =============================================================================
# ТЕСТЫ: Checked arithmetic
# =============================================================================


class TestCheckedArithmetic:
    """Переполнение и underflow — ошибка, а не wraparound."""

    def test_add(self):
        assert checked_add(2, 3) == 5
        with pytest.raises(ArithmeticDomainError):
            checked_add(U256_MAX, 1)

    def test_sub(self):
        assert checked_sub(5, 3) == 2
        assert checked_sub(5, 5) == 0
        with pytest.raises(ArithmeticDomainError):
            checked_sub(3, 5)

    def test_mul(self):
        assert checked_mul(WAD, 5) == 5 * WAD
        with pytest.raises(ArithmeticDomainError):
            checked_mul(2**128, 2**128)


class TestMulDivDown:
    """Тесты floor mul-div."""

    def test_floor(self):
        assert mul_div_down(10, 3, 4) == 7
        assert mul_div_down(1, 1, 2) == 0

    def test_wide_intermediate(self):
        """a * b шире u256, результат — нет."""
        assert mul_div_down(U256_MAX, U256_MAX, U256_MAX) == U256_MAX
        assert mul_div_down(2**255, 4, 8) == 2**254

    def test_division_by_zero(self):
        with pytest.raises(ArithmeticDomainError):
            mul_div_down(1, 1, 0)

    def test_result_overflow(self):
        with pytest.raises(ArithmeticDomainError):
            mul_div_down(U256_MAX, 2, 1)


class TestIsqrt:
    """Тесты целочисленного корня."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, 0), (1, 1), (15, 3), (16, 4), (17, 4), (10**36, 10**18)],
    )
    def test_floor_root(self, value, expected):
        assert isqrt(value) == expected

    def test_wider_than_u256(self):
        """Произведение двух u256 тоже корректно."""
        assert isqrt(U256_MAX * U256_MAX) == U256_MAX

    def test_negative_rejected(self):
        with pytest.raises(ArithmeticDomainError):
            isqrt(-1)


class TestBasisPoints:
    """Тесты bps."""

    def test_validate(self):
        assert validate_bps(0) == 0
        assert validate_bps(BPS_DENOMINATOR) == BPS_DENOMINATOR
        with pytest.raises(ValueError):
            validate_bps(BPS_DENOMINATOR + 1)
        with pytest.raises(ValueError):
            validate_bps(-1)

    def test_apply(self):
        # 2% от 50 SPC == 1 SPC
        assert apply_bps(to_base_units(50), 200) == to_base_units(1)
        assert apply_bps(49, 200) == 0

    def test_subtract(self):
        assert subtract_bps(1000, 50) == 995
        assert subtract_bps(1000, 0) == 1000
        assert subtract_bps(1000, BPS_DENOMINATOR) == 0


# =============================================================================
# ТЕСТЫ: Units
# =============================================================================


class TestUnits:
    """Конверсия человекочитаемых сумм."""

    def test_to_base_units(self):
        assert to_base_units("1.5") == 1_500_000_000_000_000_000
        assert to_base_units(30000) == 30000 * WAD
        assert to_base_units(Decimal("0.000000000000000001")) == 1

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            to_base_units(1.5)
        with pytest.raises(TypeError):
            to_base_units(True)

    @pytest.mark.parametrize("value", ["-1", "abc", "NaN", "0.0000000000000000001"])
    def test_invalid_values(self, value):
        with pytest.raises(ValueError):
            to_base_units(value)

    def test_from_base_units(self):
        assert from_base_units(1_500_000_000_000_000_000) == Decimal("1.5")
        with pytest.raises(ValueError):
            from_base_units(-1)

    def test_format_amount(self):
        assert format_amount(to_base_units("1.5")) == "1.5"
        assert format_amount(to_base_units(30000)) == "30000"
        assert format_amount(0) == "0"
        assert format_amount(1) == "0.000000000000000001"


# =============================================================================
# ТЕСТЫ: Errors
# =============================================================================


class TestErrorTaxonomy:
    """Коды и иерархия ошибок."""

    def test_codes(self):
        assert InvalidK.code == "INVALID_K"
        assert OnlyTreasury.code == "ONLY_TREASURY"
        assert InsufficientLiquidity.code == "INSUFFICIENT_LIQUIDITY"

    def test_str_includes_code(self):
        assert str(InvalidK("curve violated")) == "INVALID_K: curve violated"
        assert str(InvalidK()) == "INVALID_K"

    def test_hierarchy(self):
        assert issubclass(InvalidK, InvariantViolation)
        assert issubclass(OnlyTreasury, AuthorizationError)
        assert issubclass(InsufficientLiquidity, StateError)
        assert issubclass(ArithmeticDomainError, LedgerError)
