"""
Access — Ownable / Pausable capabilities

Общие для всех контрактов утилиты авторизации:
- Ownable: один привилегированный owner, проверка в начале каждой
  привилегированной операции, передача владения только текущим owner
- Pausable: флаг паузы, переключаемый owner

Миксины не хранят ничего, кроме своих полей; контракт вызывает
`_init_owner` в своём initialize.
"""

import logging
from typing import ClassVar, Type

from src.core.domain.errors import AuthorizationError, OnlyOwner
from src.core.domain.units import Address
from src.ledger.context import Context
from src.ledger.host import validate_address

logger = logging.getLogger(__name__)


class Ownable:
    """Единственный owner на контракт."""

    owner: Address

    # Ошибка при вызове не-owner (ICO использует OnlyTreasury)
    unauthorized_error: ClassVar[Type[AuthorizationError]] = OnlyOwner

    def _init_owner(self, owner: Address) -> None:
        self.owner = validate_address(owner)

    def _only_owner(self, ctx: Context) -> None:
        if ctx.caller != self.owner:
            raise self.unauthorized_error(f"{ctx.caller} is not the owner")

    def transfer_ownership(self, ctx: Context, new_owner: Address) -> None:
        """
        Передача владения.

        Raises:
            AuthorizationError: Если вызывает не текущий owner
            ValueError: Если new_owner — невалидный адрес
        """
        self._only_owner(ctx)
        validate_address(new_owner)
        previous, self.owner = self.owner, new_owner
        logger.info("%s ownership transferred: %s -> %s", type(self).__name__, previous, new_owner)


class Pausable(Ownable):
    """Флаг паузы поверх Ownable."""

    paused: bool = False

    def is_paused(self) -> bool:
        return self.paused

    def toggle_is_paused(self, ctx: Context, flag: bool) -> None:
        self._only_owner(ctx)
        self.paused = bool(flag)
        logger.info("%s paused=%s", type(self).__name__, self.paused)
