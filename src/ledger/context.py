"""Context — неизменяемый контекст вызова контракта."""

from dataclasses import dataclass

from src.core.domain.units import Address, Amount


@dataclass(frozen=True)
class Context:
    """Контекст одной операции.

    caller — кто вызывает (внешний аккаунт или контракт при вложенном вызове).
    value — нативный актив, уже зачисленный на contract до выполнения тела.
    """

    caller: Address
    contract: Address
    value: Amount = 0
