"""
ICO — фазовый сбор base актива с выдачей SpaceToken в фазе OPEN

Контракт хранит вклады, whitelist и текущую фазу; правила фаз живут в
PhaseStateMachine. При деплое ICO разворачивает собственный SpaceToken:
goal * token_rate токенов зачисляется самому ICO, остаток — treasury.

Treasury (owner ICO) может:
- продвигать фазу (advance_phase)
- управлять whitelist
- ставить сбор на паузу
- выводить собранное после достижения goal
Любой другой вызов привилегированной операции — OnlyTreasury.
"""

import logging
from typing import Any, Dict, Iterable, Set

from src.core.contracts import export_snapshot
from src.core.domain.errors import IcoActive, OnlyTreasury
from src.core.domain.ico_state import IcoSnapshot, Phase
from src.core.domain.units import Address, Amount, format_amount
from src.exchange.token import SpaceToken
from src.ico.phase_machine import IcoConfig, PhaseStateMachine
from src.ledger.access import Pausable
from src.ledger.context import Context
from src.ledger.host import Contract, validate_address

logger = logging.getLogger(__name__)


class ICO(Contract, Pausable):
    """Трёхфазный ICO: SEED → GENERAL → OPEN."""

    unauthorized_error = OnlyTreasury

    def initialize(self, ctx: Context, whitelist: Iterable[Address] = (), config: IcoConfig = IcoConfig()) -> None:
        """
        Args:
            whitelist: Начальный whitelist фазы SEED
            config: Правила фаз и курс токена
        """
        self._init_owner(ctx.caller)
        self.machine = PhaseStateMachine(config)
        self.phase = Phase.SEED
        self.paused = False
        self.total_raised: Amount = 0
        self.contributions: Dict[Address, Amount] = {}
        self.whitelisted: Set[Address] = {validate_address(account) for account in whitelist}

        self.token = self._deploy(
            SpaceToken,
            treasury=ctx.caller,
            owner=ctx.caller,
            allocations={self.address: config.token_allocation},
        )

    # =========================================================================
    # VIEWS
    # =========================================================================

    @property
    def config(self) -> IcoConfig:
        return self.machine.config

    def current_phase(self) -> Phase:
        return self.phase

    def total_amount_raised(self) -> Amount:
        return self.total_raised

    def user_contributions(self, account: Address) -> Amount:
        return self.contributions.get(account, 0)

    def whitelist(self, account: Address) -> bool:
        return account in self.whitelisted

    def goal_reached(self) -> bool:
        return self.total_raised == self.config.goal

    def tokens_claimable(self, account: Address) -> Amount:
        """Токенов к выдаче аккаунту прямо сейчас (0 вне фазы OPEN)."""
        if not self.machine.can_claim(self.phase):
            return 0
        return self.machine.tokens_for(self.user_contributions(account))

    def snapshot(self) -> IcoSnapshot:
        return IcoSnapshot(
            address=self.address,
            owner=self.owner,
            token=self.token.address,
            current_phase=self.phase,
            phase_name=self.phase.name,
            is_paused=self.paused,
            total_raised=self.total_raised,
            goal=self.config.goal,
            goal_reached=self.goal_reached(),
            token_rate=self.config.token_rate,
            contributions={k: v for k, v in self.contributions.items() if v},
            whitelist=sorted(self.whitelisted),
        )

    def export_state(self) -> Dict[str, Any]:
        return export_snapshot(self.snapshot())

    # =========================================================================
    # ОПЕРАЦИИ ИНВЕСТОРА
    # =========================================================================

    def buy(self, ctx: Context) -> None:
        """
        Вклад ctx.value base актива (payable).

        Raises:
            PausedCampaign: Сбор на паузе
            InsufficientAmount: ctx.value == 0
            Whitelist: Аккаунт не в whitelist в фазе SEED
            ExceedsMaxContribution: Накопленный вклад превышает лимит фазы
            InsufficientAvailability: Превышен aggregate cap фазы
        """
        result = self.machine.evaluate_contribution(
            phase=self.phase,
            paused=self.paused,
            whitelisted=self.whitelist(ctx.caller),
            contributed=self.user_contributions(ctx.caller),
            total_raised=self.total_raised,
            amount=ctx.value,
        )

        self.contributions[ctx.caller] = result.account_contribution
        self.total_raised = result.total_raised
        logger.debug(
            "Contribution from %s: %s (total %s)",
            ctx.caller, format_amount(ctx.value), format_amount(self.total_raised),
        )

        if result.phase_advanced:
            previous, self.phase = self.phase, result.new_phase
            logger.info("ICO phase advanced automatically: %s -> %s", previous.name, self.phase.name)

    def collect_tokens(self, ctx: Context) -> Amount:
        """
        Обмен всего вклада на токены (только OPEN).

        Returns:
            Отправленные токены (до налога, если он включён)

        Raises:
            IncorrectPhase: Фаза не OPEN
            NoTokens: Вклада нет или он уже обменян
        """
        amount = self.machine.evaluate_claim(self.phase, self.user_contributions(ctx.caller))
        self.contributions[ctx.caller] = 0
        self._call(self.token.transfer, ctx.caller, amount)

        logger.info("Tokens collected by %s: %s", ctx.caller, format_amount(amount))
        return amount

    # =========================================================================
    # ОПЕРАЦИИ TREASURY
    # =========================================================================

    def advance_phase(self, ctx: Context, expected: int) -> Phase:
        """
        Ручной переход на следующую фазу.

        Args:
            expected: Фаза, в которой treasury ожидает находиться (защита от гонок)

        Raises:
            OnlyTreasury: Вызывает не treasury
            IncorrectPhase: expected != текущей фазы или фаза уже OPEN
        """
        self._only_owner(ctx)
        previous = self.phase
        self.phase = self.machine.evaluate_advance(self.phase, expected)
        logger.info("ICO phase advanced: %s -> %s", previous.name, self.phase.name)
        return self.phase

    def whitelist_address(self, ctx: Context, account: Address, allowed: bool) -> None:
        self._only_owner(ctx)
        validate_address(account)
        if allowed:
            self.whitelisted.add(account)
        else:
            self.whitelisted.discard(account)
        logger.debug("Whitelist %s: %s", account, allowed)

    def withdraw_contributions(self, ctx: Context) -> Amount:
        """
        Вывод всего собранного base актива на treasury.

        Raises:
            OnlyTreasury: Вызывает не treasury
            IcoActive: Goal ещё не достигнут
        """
        self._only_owner(ctx)
        if not self.goal_reached():
            raise IcoActive(
                f"Raised {format_amount(self.total_raised)} of {format_amount(self.config.goal)}"
            )

        amount = self.native_balance()
        self._send_native(self.owner, amount)
        logger.info("Contributions withdrawn to %s: %s", self.owner, format_amount(amount))
        return amount
