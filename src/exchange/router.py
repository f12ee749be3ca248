"""
Router — оркестрация депозитов, выводов и свапов поверх LiquidityPool

Роутер не хранит собственного состояния, кроме ссылок на пул и токен.
Он добавляет удобства для вызывающего:
- оценка свапа (та же формула, что проверяет пул)
- slippage floor, заданный вызывающим
- оптимальное соотношение депозита и возврат лишнего base актива
- перевод активов на пул перед вызовом движка

Роутер никогда не является единственным местом проверки инвариантов:
пул перепроверяет всё сам.
"""

import logging
from fractions import Fraction
from typing import Tuple

from src.core.domain.errors import (
    InsufficientAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    Slippage,
)
from src.core.domain.units import Amount, format_amount
from src.core.math.cpmm import get_amount_out, min_return_for_slippage, quote, spot_price
from src.core.math.integer_math import require_u256
from src.exchange.pool import LiquidityPool
from src.exchange.token import SpaceToken
from src.ledger.access import Ownable
from src.ledger.context import Context
from src.ledger.host import Contract

logger = logging.getLogger(__name__)


class Router(Contract, Ownable):
    """Stateless фасад LiquidityPool."""

    def initialize(self, ctx: Context, pool: LiquidityPool, token: SpaceToken) -> None:
        if pool.token is not token:
            raise ValueError("Router token must be the pool's token")
        self._init_owner(ctx.caller)
        self.pool = pool
        self.token = token

    # =========================================================================
    # VIEWS
    # =========================================================================

    def get_reserve_base(self) -> Amount:
        return self.pool.get_reserves()[0]

    def get_reserve_token(self) -> Amount:
        return self.pool.get_reserves()[1]

    def spot_price(self) -> Fraction:
        """Токенов за единицу base актива по текущим резервам."""
        reserve_base, reserve_token = self.pool.get_reserves()
        return spot_price(reserve_base, reserve_token)

    def get_swap_estimate(self, amount_in: Amount, input_is_base: bool) -> Amount:
        """
        Оценка выхода свапа без изменения состояния.

        Args:
            amount_in: Входная сумма
            input_is_base: True — вход в base активе, False — в токене

        Returns:
            Выход с учётом fee

        Raises:
            InsufficientLiquidity: Если любой из резервов нулевой
        """
        reserve_base, reserve_token = self.pool.get_reserves()
        if input_is_base:
            return get_amount_out(amount_in, reserve_base, reserve_token, self.pool.fee_bps())
        return get_amount_out(amount_in, reserve_token, reserve_base, self.pool.fee_bps())

    @staticmethod
    def min_return_for_slippage(estimate: Amount, slippage_bps: int) -> Amount:
        """Slippage floor для оценки при допустимом проскальзывании в bps."""
        return min_return_for_slippage(estimate, slippage_bps)

    # =========================================================================
    # LIQUIDITY
    # =========================================================================

    def add_liquidity(self, ctx: Context, token_amount: Amount) -> Amount:
        """
        Депозит ликвидности (payable: ctx.value — отправленный base актив).

        Первый депозит принимается как есть. Далее используется оптимальная
        пара по текущему соотношению резервов; неиспользованный base актив
        возвращается вызывающему.

        Returns:
            Выпущенные LP кредиты

        Raises:
            InsufficientAmount: Если token_amount или ctx.value нулевые
        """
        require_u256(token_amount, "token_amount")
        base_sent = ctx.value
        if token_amount == 0 or base_sent == 0:
            raise InsufficientAmount("Both assets are required to add liquidity")

        base_used, token_used = self._optimal_deposit(base_sent, token_amount)
        if base_used == 0 or token_used == 0:
            raise InsufficientAmount("Deposit rounds to zero at the current reserve ratio")

        self._call(self.token.transfer_from, ctx.caller, self.pool.address, token_used)
        self._send_native(self.pool.address, base_used)
        credits = self._call(self.pool.mint, ctx.caller)

        refund = base_sent - base_used
        if refund:
            self._send_native(ctx.caller, refund)

        logger.info(
            "Liquidity added by %s: base=%s token=%s credits=%s refund=%s",
            ctx.caller, format_amount(base_used), format_amount(token_used), credits, format_amount(refund),
        )
        return credits

    def remove_liquidity(self, ctx: Context, credits: Amount) -> Tuple[Amount, Amount]:
        """
        Вывод ликвидности: кредиты вызывающего переводятся на пул и сжигаются.

        Returns:
            (base_out, token_out)

        Raises:
            InsufficientLiquidity: Если credits == 0 или у вызывающего нет
                достаточного баланса/allowance для роутера
        """
        require_u256(credits, "credits")
        if credits == 0:
            raise InsufficientLiquidity("Nothing to remove")
        if self.pool.balance_of(ctx.caller) < credits or self.pool.allowance(ctx.caller, self.address) < credits:
            raise InsufficientLiquidity("Caller holds or approved fewer credits than requested")

        self._call(self.pool.transfer_from, ctx.caller, self.pool.address, credits)
        base_out, token_out = self._call(self.pool.burn, ctx.caller)

        logger.info(
            "Liquidity removed by %s: credits=%s base=%s token=%s",
            ctx.caller, credits, format_amount(base_out), format_amount(token_out),
        )
        return base_out, token_out

    # =========================================================================
    # SWAPS
    # =========================================================================

    def swap_base_for_token(self, ctx: Context, min_token_out: Amount) -> Amount:
        """
        Свап base актива (ctx.value) на токен.

        Returns:
            Полученные токены

        Raises:
            InsufficientInputAmount: Если ctx.value == 0
            InsufficientLiquidity: Если пул пуст
            Slippage: Если оценка ниже min_token_out
        """
        amount_in = ctx.value
        if amount_in == 0:
            raise InsufficientInputAmount("No base asset sent")
        self._require_reserves()

        estimate = self.get_swap_estimate(amount_in, input_is_base=True)
        self._check_slippage(estimate, min_token_out)

        self._send_native(self.pool.address, amount_in)
        self._call(self.pool.swap_base_for_token, ctx.caller, estimate)

        logger.info("Swap by %s: base %s -> token %s", ctx.caller, format_amount(amount_in), format_amount(estimate))
        return estimate

    def swap_token_for_base(self, ctx: Context, amount_in: Amount, min_base_out: Amount) -> Amount:
        """
        Свап amount_in токенов (через allowance) на base актив.

        Оценка пересчитывается по фактически поступившей на пул сумме:
        при включённом налоге пул получает меньше номинала.

        Returns:
            Полученный base актив

        Raises:
            InsufficientInputAmount: Если amount_in == 0
            InsufficientLiquidity: Если пул пуст
            Slippage: Если оценка ниже min_base_out
        """
        require_u256(amount_in, "amount_in")
        if amount_in == 0:
            raise InsufficientInputAmount("No token sent")
        self._require_reserves()

        estimate = self.get_swap_estimate(amount_in, input_is_base=False)
        self._check_slippage(estimate, min_base_out)

        pool_balance_before = self.token.balance_of(self.pool.address)
        self._call(self.token.transfer_from, ctx.caller, self.pool.address, amount_in)
        received = self.token.balance_of(self.pool.address) - pool_balance_before
        if received != amount_in:
            estimate = self.get_swap_estimate(received, input_is_base=False)
            self._check_slippage(estimate, min_base_out)

        self._call(self.pool.swap_token_for_base, ctx.caller, estimate)

        logger.info("Swap by %s: token %s -> base %s", ctx.caller, format_amount(received), format_amount(estimate))
        return estimate

    # =========================================================================
    # ВНУТРЕННИЕ
    # =========================================================================

    def _optimal_deposit(self, base_sent: Amount, token_amount: Amount) -> Tuple[Amount, Amount]:
        reserve_base, reserve_token = self.pool.get_reserves()
        if reserve_base == 0 and reserve_token == 0:
            return base_sent, token_amount

        token_optimal = quote(base_sent, reserve_base, reserve_token)
        if token_optimal <= token_amount:
            return base_sent, token_optimal

        base_optimal = quote(token_amount, reserve_token, reserve_base)
        return base_optimal, token_amount

    def _require_reserves(self) -> None:
        reserve_base, reserve_token = self.pool.get_reserves()
        if reserve_base == 0 or reserve_token == 0:
            raise InsufficientLiquidity("Pool has no reserves")

    @staticmethod
    def _check_slippage(estimate: Amount, minimum: Amount) -> None:
        if estimate < minimum:
            raise Slippage(f"Estimated output {estimate} is below the minimum {minimum}")
