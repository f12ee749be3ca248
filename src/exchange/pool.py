"""
LiquidityPool — constant-product движок пула base актив / токен

Пул хранит резервы нативного base актива и токена, выпускает и сжигает LP
кредиты и проверяет constant-product инвариант на каждой операции,
меняющей резервы. Пул сам является ledger LP кредитов (balance_of,
transfer, approve, transfer_from).

Поток средств: вызывающий сначала переводит активы на адрес пула, затем
вызывает mint / swap_*. Пул доверяет только дельтам фактических балансов
относительно кэшированных резервов.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. После любого мутирующего вызова reserve_base/reserve_token == фактические балансы
2. sum(credit_balances) == total_supply
3. Свап: (R_in*10000 + d_in*9900) * (R_out - out) >= R_in*R_out*10000, иначе InvalidK
4. MINIMUM_LIQUIDITY навсегда заблокирован на ZERO_ADDRESS после первого mint

Порядок внутри операций: проверки → обновление собственного состояния и
резервов → переводы активов (checks-effects-interactions).

Свапы принимают точный выход, посчитанный вызывающим (роутером), и только
перепроверяют инвариант, не пересчитывая цену.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Tuple

from src.core.domain.errors import (
    InsufficientAllowance,
    InsufficientAmount,
    InsufficientBalance,
    InsufficientDeposit,
    InsufficientLiquidity,
    InvalidK,
    Unmintable,
)
from src.core.domain.pool_state import PoolSnapshot
from src.core.domain.units import ZERO_ADDRESS, Address, Amount, format_amount
from src.core.math.cpmm import (
    DEFAULT_SWAP_FEE_BPS,
    MINIMUM_LIQUIDITY,
    burn_amounts,
    initial_liquidity,
    proportional_liquidity,
    satisfies_k,
)
from src.core.math.integer_math import require_u256, validate_bps
from src.exchange.token import SpaceToken
from src.ledger.access import Ownable
from src.ledger.context import Context
from src.ledger.host import Contract, validate_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolConfig:
    """Параметры пула."""

    fee_bps: int = DEFAULT_SWAP_FEE_BPS
    minimum_liquidity: int = MINIMUM_LIQUIDITY

    def __post_init__(self) -> None:
        validate_bps(self.fee_bps, "fee_bps")
        require_u256(self.minimum_liquidity, "minimum_liquidity")


class LiquidityPool(Contract, Ownable):
    """Пул base актив / токен в стиле Uniswap v2 с fee 1% на входе."""

    def initialize(self, ctx: Context, token: SpaceToken, config: PoolConfig = PoolConfig()) -> None:
        self._init_owner(ctx.caller)
        self.token = token
        self.config = config

        self.reserve_base: Amount = 0
        self.reserve_token: Amount = 0

        # LP credit ledger
        self.supply: Amount = 0
        self.credit_balances: Dict[Address, Amount] = {}
        self.credit_allowances: Dict[Address, Dict[Address, Amount]] = {}

    # =========================================================================
    # VIEWS
    # =========================================================================

    def get_reserves(self) -> Tuple[Amount, Amount]:
        """(reserve_base, reserve_token)."""
        return self.reserve_base, self.reserve_token

    def fee_bps(self) -> int:
        return self.config.fee_bps

    def total_supply(self) -> Amount:
        return self.supply

    def balance_of(self, account: Address) -> Amount:
        return self.credit_balances.get(account, 0)

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self.credit_allowances.get(owner, {}).get(spender, 0)

    def snapshot(self) -> PoolSnapshot:
        return PoolSnapshot(
            address=self.address,
            owner=self.owner,
            token=self.token.address,
            reserve_base=self.reserve_base,
            reserve_token=self.reserve_token,
            total_supply=self.supply,
            fee_bps=self.config.fee_bps,
            minimum_liquidity=self.config.minimum_liquidity,
            credit_balances={k: v for k, v in self.credit_balances.items() if v},
        )

    # =========================================================================
    # LIQUIDITY
    # =========================================================================

    def mint(self, ctx: Context, to: Address) -> Amount:
        """
        Выпуск LP кредитов за активы, уже переведённые на пул.

        Первый mint: isqrt(d_base * d_token) - MINIMUM_LIQUIDITY (минимум
        блокируется на ZERO_ADDRESS). Далее: min пропорций к total_supply.

        Args:
            to: Получатель кредитов

        Returns:
            Выпущенные кредиты

        Raises:
            Unmintable: Если новых активов нет или депозит даёт ноль кредитов
        """
        validate_address(to)
        actual_base, actual_token = self._actual_balances()
        delta_base = actual_base - self.reserve_base
        delta_token = actual_token - self.reserve_token

        if delta_base == 0 and delta_token == 0:
            raise Unmintable("No new assets deposited")

        if self.supply == 0:
            credits = initial_liquidity(delta_base, delta_token, self.config.minimum_liquidity)
            self._mint_credits(ZERO_ADDRESS, self.config.minimum_liquidity)
        else:
            credits = proportional_liquidity(
                delta_base, delta_token, self.reserve_base, self.reserve_token, self.supply
            )
            if credits == 0:
                raise Unmintable("Deposit is one-sided or too small to mint credits")

        self._mint_credits(to, credits)
        self._set_reserves(actual_base, actual_token)

        logger.debug(
            "Minted %s credits to %s (deposit base=%s token=%s)",
            credits, to, format_amount(delta_base), format_amount(delta_token),
        )
        return credits

    def burn(self, ctx: Context, to: Address) -> Tuple[Amount, Amount]:
        """
        Сжигание кредитов, переведённых на адрес пула, и выплата долей резервов.

        Returns:
            (base_out, token_out)

        Raises:
            InsufficientLiquidity: Если пул не держит собственных кредитов или
                доля округляется до нуля
        """
        validate_address(to)
        liquidity = self.balance_of(self.address)
        if liquidity == 0:
            raise InsufficientLiquidity("Pool holds no credits to burn")

        base_out, token_out = burn_amounts(liquidity, self.reserve_base, self.reserve_token, self.supply)
        if base_out == 0 or token_out == 0:
            raise InsufficientLiquidity("Burned credits are worth nothing")

        actual_base, actual_token = self._actual_balances()
        self.credit_balances[self.address] = 0
        self.supply -= liquidity
        self._set_reserves(actual_base - base_out, actual_token - token_out)

        self._send_native(to, base_out)
        self._call(self.token.transfer, to, token_out)

        logger.debug(
            "Burned %s credits for %s: base=%s token=%s",
            liquidity, to, format_amount(base_out), format_amount(token_out),
        )
        return base_out, token_out

    # =========================================================================
    # SWAPS
    # =========================================================================

    def swap_base_for_token(self, ctx: Context, to: Address, token_out: Amount) -> None:
        """
        Выдача ровно token_out токенов за base актив, уже переведённый на пул.

        Raises:
            InsufficientDeposit: Если base депозита нет
            InsufficientAmount: Если token_out == 0
            InsufficientLiquidity: Если token_out >= reserve_token
            InvalidK: Если инвариант после свапа нарушен
        """
        validate_address(to)
        actual_base, actual_token = self._actual_balances()
        delta_base = actual_base - self.reserve_base
        if delta_base <= 0:
            raise InsufficientDeposit("No base asset deposited")

        self._check_swap(self.reserve_base, self.reserve_token, delta_base, token_out)

        self._set_reserves(actual_base, actual_token - token_out)
        self._call(self.token.transfer, to, token_out)

        logger.debug("Swap base %s -> token %s for %s", format_amount(delta_base), format_amount(token_out), to)

    def swap_token_for_base(self, ctx: Context, to: Address, base_out: Amount) -> None:
        """
        Выдача ровно base_out base актива за токены, уже переведённые на пул.

        Raises:
            InsufficientDeposit: Если токенового депозита нет
            InsufficientAmount: Если base_out == 0
            InsufficientLiquidity: Если base_out >= reserve_base
            InvalidK: Если инвариант после свапа нарушен
        """
        validate_address(to)
        actual_base, actual_token = self._actual_balances()
        delta_token = actual_token - self.reserve_token
        if delta_token <= 0:
            raise InsufficientDeposit("No token deposited")

        self._check_swap(self.reserve_token, self.reserve_base, delta_token, base_out)

        self._set_reserves(actual_base - base_out, actual_token)
        self._send_native(to, base_out)

        logger.debug("Swap token %s -> base %s for %s", format_amount(delta_token), format_amount(base_out), to)

    # =========================================================================
    # LP CREDIT LEDGER
    # =========================================================================

    def transfer(self, ctx: Context, to: Address, amount: Amount) -> bool:
        self._move_credits(ctx.caller, to, amount)
        return True

    def approve(self, ctx: Context, spender: Address, amount: Amount) -> bool:
        validate_address(spender)
        require_u256(amount, "amount")
        self.credit_allowances.setdefault(ctx.caller, {})[spender] = amount
        return True

    def transfer_from(self, ctx: Context, owner: Address, to: Address, amount: Amount) -> bool:
        require_u256(amount, "amount")
        allowed = self.allowance(owner, ctx.caller)
        if allowed < amount:
            raise InsufficientAllowance(f"{ctx.caller} may move {allowed} credits of {owner}, needs {amount}")
        self.credit_allowances.setdefault(owner, {})[ctx.caller] = allowed - amount
        self._move_credits(owner, to, amount)
        return True

    # =========================================================================
    # ВНУТРЕННИЕ
    # =========================================================================

    def _actual_balances(self) -> Tuple[Amount, Amount]:
        return self.native_balance(), self.token.balance_of(self.address)

    def _set_reserves(self, reserve_base: Amount, reserve_token: Amount) -> None:
        self.reserve_base = require_u256(reserve_base, "reserve_base")
        self.reserve_token = require_u256(reserve_token, "reserve_token")

    def _check_swap(self, reserve_in: Amount, reserve_out: Amount, delta_in: Amount, amount_out: Amount) -> None:
        require_u256(amount_out, "amount_out")
        if amount_out == 0:
            raise InsufficientAmount("Swap output must be positive")
        if amount_out >= reserve_out:
            raise InsufficientLiquidity("Swap output would drain the reserve")
        if not satisfies_k(reserve_in, reserve_out, delta_in, amount_out, self.config.fee_bps):
            raise InvalidK(f"Requested {amount_out} exceeds what the curve allows for deposit {delta_in}")

    def _mint_credits(self, to: Address, amount: Amount) -> None:
        self.credit_balances[to] = self.balance_of(to) + amount
        self.supply += amount

    def _move_credits(self, sender: Address, to: Address, amount: Amount) -> None:
        validate_address(to)
        require_u256(amount, "amount")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(f"{sender} holds {balance} credits, needs {amount}")
        self.credit_balances[sender] = balance - amount
        self.credit_balances[to] = self.balance_of(to) + amount
