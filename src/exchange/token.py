"""
SpaceToken — fungible token ledger

Стандартная семантика fungible-токена (балансы, transfer, approve/allowance)
плюс налог на переводы, переключаемый owner:
- налог включён: tax_bps (2%) от суммы зачисляется treasury, остаток получателю
- налог выключен: перевод на полную сумму

Отправитель всегда списывает полную номинальную сумму; получатель может
получить меньше. Поэтому пул сверяет резервы с фактическими балансами, а не
с заявленными суммами.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Final, Mapping, Optional

from src.core.domain.errors import InsufficientAllowance, InsufficientBalance
from src.core.domain.pool_state import TokenSnapshot
from src.core.domain.units import Address, Amount, format_amount, to_base_units
from src.core.math.integer_math import apply_bps, require_u256, validate_bps
from src.ledger.access import Ownable
from src.ledger.context import Context
from src.ledger.host import Contract, validate_address

logger = logging.getLogger(__name__)

# Фиксированный выпуск: 500 000 токенов
MAX_SUPPLY: Final[Amount] = to_base_units(500_000)

# Налог на переводы: 2%
TRANSFER_TAX_BPS: Final[int] = 200


@dataclass(frozen=True)
class TokenConfig:
    """Параметры токена."""

    name: str = "SpaceToken"
    symbol: str = "SPC"
    decimals: int = 18
    max_supply: Amount = MAX_SUPPLY
    tax_bps: int = TRANSFER_TAX_BPS

    def __post_init__(self) -> None:
        require_u256(self.max_supply, "max_supply")
        validate_bps(self.tax_bps, "tax_bps")


class SpaceToken(Contract, Ownable):
    """Fungible token с опциональным налогом на переводы."""

    def initialize(
        self,
        ctx: Context,
        treasury: Optional[Address] = None,
        allocations: Optional[Mapping[Address, Amount]] = None,
        owner: Optional[Address] = None,
        config: TokenConfig = TokenConfig(),
    ) -> None:
        """
        Выпуск всего supply при деплое.

        Args:
            treasury: Получатель налога и нераспределённого остатка (default: owner)
            allocations: Начальное распределение; остаток уходит treasury
            owner: Owner токена (default: deployer)
            config: Параметры токена

        Raises:
            ValueError: Если allocations превышают max_supply
        """
        self._init_owner(owner or ctx.caller)
        self.config = config
        self.treasury = validate_address(treasury or self.owner)
        self.tax_enabled = False
        self.supply = config.max_supply
        self.balances: Dict[Address, Amount] = {}
        self.allowances: Dict[Address, Dict[Address, Amount]] = {}

        remaining = config.max_supply
        for account, amount in (allocations or {}).items():
            validate_address(account)
            require_u256(amount, "allocation")
            if amount > remaining:
                raise ValueError("Allocations exceed max supply")
            remaining -= amount
            self._credit(account, amount)
        self._credit(self.treasury, remaining)

    # =========================================================================
    # VIEWS
    # =========================================================================

    def balance_of(self, account: Address) -> Amount:
        return self.balances.get(account, 0)

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self.allowances.get(owner, {}).get(spender, 0)

    def total_supply(self) -> Amount:
        return self.supply

    def collect_taxes(self) -> bool:
        return self.tax_enabled

    def snapshot(self) -> TokenSnapshot:
        return TokenSnapshot(
            address=self.address,
            name=self.config.name,
            symbol=self.config.symbol,
            decimals=self.config.decimals,
            owner=self.owner,
            treasury=self.treasury,
            total_supply=self.supply,
            tax_enabled=self.tax_enabled,
            tax_bps=self.config.tax_bps,
            balances={k: v for k, v in self.balances.items() if v},
        )

    # =========================================================================
    # ОПЕРАЦИИ
    # =========================================================================

    def transfer(self, ctx: Context, to: Address, amount: Amount) -> bool:
        self._transfer(ctx.caller, to, amount)
        return True

    def approve(self, ctx: Context, spender: Address, amount: Amount) -> bool:
        validate_address(spender)
        require_u256(amount, "amount")
        self.allowances.setdefault(ctx.caller, {})[spender] = amount
        return True

    def transfer_from(self, ctx: Context, owner: Address, to: Address, amount: Amount) -> bool:
        """
        Перевод со счёта owner силами spender (ctx.caller) в пределах allowance.

        Raises:
            InsufficientAllowance: Если allowance < amount
            InsufficientBalance: Если баланс owner < amount
        """
        require_u256(amount, "amount")
        allowed = self.allowance(owner, ctx.caller)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{ctx.caller} may spend {format_amount(allowed)} of {owner}, needs {format_amount(amount)}"
            )
        self.allowances.setdefault(owner, {})[ctx.caller] = allowed - amount
        self._transfer(owner, to, amount)
        return True

    def toggle_tax(self, ctx: Context, flag: bool) -> None:
        self._only_owner(ctx)
        self.tax_enabled = bool(flag)
        logger.info("%s transfer tax %s", self.config.symbol, "enabled" if self.tax_enabled else "disabled")

    # =========================================================================
    # ВНУТРЕННИЕ
    # =========================================================================

    def _transfer(self, sender: Address, to: Address, amount: Amount) -> None:
        validate_address(to)
        require_u256(amount, "amount")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(
                f"{sender} holds {format_amount(balance)} {self.config.symbol}, needs {format_amount(amount)}"
            )

        tax = apply_bps(amount, self.config.tax_bps) if self.tax_enabled else 0
        self.balances[sender] = balance - amount
        self._credit(to, amount - tax)
        if tax:
            self._credit(self.treasury, tax)

        logger.debug(
            "%s transfer %s -> %s: %s (tax %s)",
            self.config.symbol, sender, to, format_amount(amount), format_amount(tax),
        )

    def _credit(self, account: Address, amount: Amount) -> None:
        self.balances[account] = self.balance_of(account) + amount
