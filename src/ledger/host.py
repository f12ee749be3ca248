"""
Ledger Host — среда исполнения контрактов

Минимальная in-memory среда, дающая контрактам ровно те гарантии, на
которые они рассчитывают:
- Атомарное, сериализованное исполнение каждой внешней операции
- Полный откат состояния (storage контрактов + нативные балансы) при любом исключении
- Нативный base актив: балансы, payable-вызовы, прямые переводы
- Детерминированный caller в Context; вложенный вызов видит вызывающий контракт
- Детерминированные адреса контрактов (sha256 от deployer и nonce)

Storage контракта — атрибуты экземпляра. Snapshot снимается только внешним
(самым верхним) вызовом; вложенные вызовы исполняются внутри него.
"""

import copy
import hashlib
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Type, TypeVar

from src.core.domain.errors import InsufficientBalance, LedgerError
from src.core.domain.units import Address, Amount, format_amount
from src.core.math.integer_math import require_u256
from src.ledger.context import Context

logger = logging.getLogger(__name__)

C = TypeVar("C", bound="Contract")


def validate_address(address: Address) -> Address:
    """Адрес — непустая строка."""
    if not isinstance(address, str) or not address:
        raise ValueError(f"Invalid address: {address!r}")
    return address


class Contract:
    """Базовый класс контракта, исполняемого в Ledger.

    Конструктор контракта — `initialize(ctx, ...)`, вызывается хостом при
    deploy. Публичные операции принимают `ctx` первым аргументом и
    вызываются через `Ledger.call`; view-методы вызываются напрямую.
    """

    def __init__(self, ledger: "Ledger", address: Address):
        self.ledger = ledger
        self.address = address

    def initialize(self, ctx: Context) -> None:
        pass

    # -------------------------------------------------------------------------
    # Взаимодействия с хостом (только внутри транзакции)
    # -------------------------------------------------------------------------

    def _call(self, method: Callable[..., Any], *args: Any, value: Amount = 0, **kwargs: Any) -> Any:
        """Вложенный вызов другого контракта от имени этого контракта."""
        return self.ledger.call(self.address, method, *args, value=value, **kwargs)

    def _deploy(self, contract_cls: Type[C], *args: Any, **kwargs: Any) -> C:
        return self.ledger.deploy(contract_cls, self.address, *args, **kwargs)

    def _send_native(self, to: Address, amount: Amount) -> None:
        self.ledger.transfer_native(self.address, to, amount)

    def native_balance(self) -> Amount:
        return self.ledger.balance_of(self.address)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"


class Ledger:
    """In-memory хост: аккаунты, нативный актив, контракты, транзакции."""

    def __init__(self) -> None:
        self._native: Dict[Address, Amount] = {}
        self._contracts: Dict[Address, Contract] = {}
        self._nonces: Dict[Address, int] = {}
        self._depth = 0

    # =========================================================================
    # НАТИВНЫЙ АКТИВ
    # =========================================================================

    def balance_of(self, address: Address) -> Amount:
        return self._native.get(address, 0)

    def fund(self, account: Address, amount: Amount) -> None:
        """Зачисление нативного актива вне транзакции (genesis, тестовый setup)."""
        validate_address(account)
        require_u256(amount, "amount")
        self._native[account] = self.balance_of(account) + amount

    def transfer_native(self, sender: Address, to: Address, amount: Amount) -> None:
        """Перевод нативного актива. Вызывается только изнутри транзакции."""
        validate_address(to)
        require_u256(amount, "amount")
        if amount == 0:
            return
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(
                f"{sender} holds {format_amount(balance)}, needs {format_amount(amount)}"
            )
        self._native[sender] = balance - amount
        self._native[to] = self.balance_of(to) + amount

    def send_native(self, sender: Address, to: Address, amount: Amount) -> None:
        """Прямой перевод нативного актива как отдельная атомарная операция."""
        with self._transaction(f"send_native {sender} -> {to}"):
            self.transfer_native(sender, to, amount)

    # =========================================================================
    # КОНТРАКТЫ
    # =========================================================================

    def get_contract(self, address: Address) -> Contract:
        try:
            return self._contracts[address]
        except KeyError:
            raise ValueError(f"No contract deployed at {address}")

    def is_contract(self, address: Address) -> bool:
        return address in self._contracts

    def deploy(
        self,
        contract_cls: Type[C],
        deployer: Address,
        *args: Any,
        value: Amount = 0,
        **kwargs: Any,
    ) -> C:
        """
        Деплой контракта: адрес, регистрация и `initialize(ctx, ...)`.

        Args:
            contract_cls: Класс контракта (наследник Contract)
            deployer: Аккаунт или контракт, выполняющий деплой (становится ctx.caller)
            value: Нативный актив, передаваемый в initialize

        Returns:
            Экземпляр развёрнутого контракта
        """
        validate_address(deployer)
        with self._transaction(f"deploy {contract_cls.__name__}"):
            address = self._next_address(deployer)
            contract = contract_cls(self, address)
            self._contracts[address] = contract
            self.transfer_native(deployer, address, value)
            contract.initialize(Context(caller=deployer, contract=address, value=value), *args, **kwargs)

        logger.info("Deployed %s at %s (deployer=%s)", contract_cls.__name__, address, deployer)
        return contract

    def call(
        self,
        caller: Address,
        method: Callable[..., Any],
        *args: Any,
        value: Amount = 0,
        **kwargs: Any,
    ) -> Any:
        """
        Вызов публичной операции контракта.

        Args:
            caller: Кто вызывает (становится ctx.caller)
            method: Bound-метод контракта, принимающий ctx первым аргументом
            value: Нативный актив, зачисляемый контракту до исполнения

        Returns:
            Результат операции

        Raises:
            LedgerError: Любой отказ контракта; состояние откатывается целиком
        """
        validate_address(caller)
        contract = getattr(method, "__self__", None)
        if not isinstance(contract, Contract) or contract.ledger is not self:
            raise ValueError(f"{method!r} is not an operation of a contract on this ledger")

        with self._transaction(method.__qualname__):
            self.transfer_native(caller, contract.address, value)
            ctx = Context(caller=caller, contract=contract.address, value=value)
            return method(ctx, *args, **kwargs)

    # =========================================================================
    # ТРАНЗАКЦИИ
    # =========================================================================

    @contextmanager
    def _transaction(self, label: str) -> Iterator[None]:
        snapshot: Optional[Tuple[Any, ...]] = None
        if self._depth == 0:
            snapshot = self._take_snapshot()

        self._depth += 1
        try:
            yield
        except Exception as exc:
            if snapshot is not None:
                self._restore_snapshot(snapshot)
                code = exc.code if isinstance(exc, LedgerError) else type(exc).__name__
                logger.warning("Transaction reverted: %s (%s)", label, code)
            raise
        finally:
            self._depth -= 1

    def _take_snapshot(self) -> Tuple[Any, ...]:
        # Ссылки на хост и контракты сохраняются как есть, копируется только storage
        memo: Dict[int, Any] = {id(self): self}
        for contract in self._contracts.values():
            memo[id(contract)] = contract
        storage = {
            address: copy.deepcopy(contract.__dict__, memo)
            for address, contract in self._contracts.items()
        }
        return dict(self._native), dict(self._contracts), dict(self._nonces), storage

    def _restore_snapshot(self, snapshot: Tuple[Any, ...]) -> None:
        native, contracts, nonces, storage = snapshot
        self._native = native
        self._contracts = contracts
        self._nonces = nonces
        for address, state in storage.items():
            contract = contracts[address]
            contract.__dict__.clear()
            contract.__dict__.update(state)

    def _next_address(self, deployer: Address) -> Address:
        nonce = self._nonces.get(deployer, 0)
        self._nonces[deployer] = nonce + 1
        digest = hashlib.sha256(f"{deployer}:{nonce}".encode("utf-8")).hexdigest()
        return "0x" + digest[:40]
