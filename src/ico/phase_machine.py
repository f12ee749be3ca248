"""ICO Phase State Machine — правила фаз и переходы SEED → GENERAL → OPEN.

Чистая логика без хранилища: контракт ICO передаёт текущее состояние,
машина возвращает результат или поднимает именованную ошибку.

Правила по умолчанию (суммы в base units):
- SEED: только whitelist, 1 500 на аккаунт, 15 000 всего
- GENERAL: все, 1 000 на аккаунт, 30 000 всего
- OPEN: все, без лимита на аккаунт, 30 000 всего, выдача токенов разрешена

Переходы только вперёд, по одному шагу:
- вручную: advance_phase(expected) при expected == current
- автоматически: когда total_raised достигает aggregate cap текущей фазы
"""

from dataclasses import dataclass
from typing import Final, Optional

from src.core.domain.errors import (
    ExceedsMaxContribution,
    IncorrectPhase,
    InsufficientAmount,
    InsufficientAvailability,
    NoTokens,
    PausedCampaign,
    Whitelist,
)
from src.core.domain.ico_state import Phase
from src.core.domain.units import Amount, to_base_units
from src.core.math.integer_math import checked_mul, require_u256

# Токенов за единицу base актива
DEFAULT_TOKEN_RATE: Final[int] = 5


@dataclass(frozen=True)
class PhaseRules:
    """Правила одной фазы.

    per_account_cap=None означает отсутствие лимита на аккаунт.
    """
    whitelist_only: bool
    per_account_cap: Optional[Amount]
    aggregate_cap: Amount
    claim_allowed: bool = False

    def __post_init__(self) -> None:
        require_u256(self.aggregate_cap, "aggregate_cap")
        if self.per_account_cap is not None:
            require_u256(self.per_account_cap, "per_account_cap")
            if self.per_account_cap == 0:
                raise ValueError("per_account_cap must be positive or None")
        if self.aggregate_cap == 0:
            raise ValueError("aggregate_cap must be positive")


@dataclass(frozen=True)
class IcoConfig:
    """Конфигурация ICO: правила трёх фаз и курс выдачи токенов.

    Aggregate caps не убывают от фазы к фазе; cap OPEN и есть цель сбора.
    """
    seed: PhaseRules = PhaseRules(
        whitelist_only=True,
        per_account_cap=to_base_units(1_500),
        aggregate_cap=to_base_units(15_000),
    )
    general: PhaseRules = PhaseRules(
        whitelist_only=False,
        per_account_cap=to_base_units(1_000),
        aggregate_cap=to_base_units(30_000),
    )
    open: PhaseRules = PhaseRules(
        whitelist_only=False,
        per_account_cap=None,
        aggregate_cap=to_base_units(30_000),
        claim_allowed=True,
    )
    token_rate: int = DEFAULT_TOKEN_RATE

    def __post_init__(self) -> None:
        if self.token_rate <= 0:
            raise ValueError(f"token_rate must be positive, got {self.token_rate}")
        if not (self.seed.aggregate_cap <= self.general.aggregate_cap <= self.open.aggregate_cap):
            raise ValueError("Aggregate caps must not decrease across phases")
        if not self.open.claim_allowed:
            raise ValueError("Tokens must be claimable in the OPEN phase")

    @property
    def goal(self) -> Amount:
        return self.open.aggregate_cap

    @property
    def token_allocation(self) -> Amount:
        """Токенов, необходимых для выдачи всего goal."""
        return self.goal * self.token_rate

    def rules_for(self, phase: Phase) -> PhaseRules:
        if phase is Phase.SEED:
            return self.seed
        if phase is Phase.GENERAL:
            return self.general
        return self.open


@dataclass(frozen=True)
class ContributionResult:
    """Результат принятого вклада."""

    account_contribution: Amount
    total_raised: Amount
    new_phase: Phase

    # Диагностика
    phase_advanced: bool
    remaining_capacity: Amount


class PhaseStateMachine:
    """Правила фаз ICO.

    Все evaluate_* методы чистые: они не меняют состояние и поднимают
    именованную ошибку, если операция недопустима.
    """

    def __init__(self, config: Optional[IcoConfig] = None):
        self.config = config or IcoConfig()

    def evaluate_contribution(
        self,
        phase: Phase,
        paused: bool,
        whitelisted: bool,
        contributed: Amount,
        total_raised: Amount,
        amount: Amount,
    ) -> ContributionResult:
        """Проверка вклада и вычисление нового состояния.

        Порядок проверок: пауза, нулевая сумма, whitelist, лимит на аккаунт
        (накопительно), aggregate cap фазы. Частичное исполнение не
        допускается.

        Args:
            phase: Текущая фаза
            paused: Флаг паузы кампании
            whitelisted: Находится ли аккаунт в whitelist
            contributed: Уже внесено аккаунтом
            total_raised: Уже собрано всего
            amount: Новый вклад

        Returns:
            ContributionResult с новыми суммами и фазой

        Raises:
            PausedCampaign, InsufficientAmount, Whitelist,
            ExceedsMaxContribution, InsufficientAvailability
        """
        rules = self.config.rules_for(phase)

        if paused:
            raise PausedCampaign("Contributions are paused")
        if amount == 0:
            raise InsufficientAmount("Contribution must be positive")
        require_u256(amount, "amount")
        if rules.whitelist_only and not whitelisted:
            raise Whitelist(f"Phase {phase.name} is limited to whitelisted accounts")

        new_contribution = contributed + amount
        if rules.per_account_cap is not None and new_contribution > rules.per_account_cap:
            raise ExceedsMaxContribution(
                f"Contribution {new_contribution} exceeds the {phase.name} cap {rules.per_account_cap}"
            )

        new_total = total_raised + amount
        if new_total > rules.aggregate_cap:
            raise InsufficientAvailability(
                f"Only {rules.aggregate_cap - total_raised} left in phase {phase.name}"
            )

        new_phase = phase
        if new_total == rules.aggregate_cap:
            new_phase = phase.next() or phase

        return ContributionResult(
            account_contribution=new_contribution,
            total_raised=new_total,
            new_phase=new_phase,
            phase_advanced=new_phase is not phase,
            remaining_capacity=self.config.rules_for(new_phase).aggregate_cap - new_total,
        )

    def evaluate_advance(self, current: Phase, expected: int) -> Phase:
        """Ручной переход на одну фазу вперёд.

        Raises:
            IncorrectPhase: Если expected != current или текущая фаза OPEN
        """
        if expected != current:
            raise IncorrectPhase(f"Expected phase {expected}, current is {current.name}")
        next_phase = current.next()
        if next_phase is None:
            raise IncorrectPhase("OPEN is the final phase")
        return next_phase

    def evaluate_claim(self, phase: Phase, contributed: Amount) -> Amount:
        """Сколько токенов выдаётся за вклад.

        Raises:
            IncorrectPhase: Если в фазе выдача запрещена
            NoTokens: Если вклада нет (или он уже обменян)
        """
        if not self.can_claim(phase):
            raise IncorrectPhase(f"Tokens are not claimable in phase {phase.name}")
        if contributed == 0:
            raise NoTokens("Nothing to collect")
        return self.tokens_for(contributed)

    def can_claim(self, phase: Phase) -> bool:
        return self.config.rules_for(phase).claim_allowed

    def tokens_for(self, contribution: Amount) -> Amount:
        return checked_mul(contribution, self.config.token_rate)
