"""
Deployment helper — токен, пул и роутер одной командой

Повторяет сценарий начального деплоя биржи: SpaceToken (или уже
развёрнутый, например ICO-токен), LiquidityPool и Router, затем опциональный
посев ликвидности через роутер от имени deployer.
"""

import logging
from typing import Any, Dict, NamedTuple, Optional

from src.core.contracts import export_snapshot
from src.core.domain.units import Address, Amount, format_amount
from src.exchange.pool import LiquidityPool, PoolConfig
from src.exchange.router import Router
from src.exchange.token import SpaceToken
from src.ledger.host import Ledger

logger = logging.getLogger(__name__)


class Exchange(NamedTuple):
    token: SpaceToken
    pool: LiquidityPool
    router: Router

    def export_state(self) -> Dict[str, Dict[str, Any]]:
        """JSON состояние токена и пула, проверенное по token_state / pool_state."""
        return {
            "token": export_snapshot(self.token.snapshot()),
            "pool": export_snapshot(self.pool.snapshot()),
        }


def deploy_exchange(
    ledger: Ledger,
    deployer: Address,
    token: Optional[SpaceToken] = None,
    seed_token: Amount = 0,
    seed_base: Amount = 0,
    pool_config: PoolConfig = PoolConfig(),
) -> Exchange:
    """
    Деплой биржи и опциональный посев ликвидности.

    Args:
        ledger: Хост
        deployer: Аккаунт, выполняющий деплой (owner пула и роутера)
        token: Существующий токен; None — деплой нового SpaceToken (всё deployer)
        seed_token: Токенов для первого депозита (0 — без посева)
        seed_base: Base актива для первого депозита
        pool_config: Параметры пула

    Returns:
        Exchange(token, pool, router)

    Raises:
        ValueError: Если задана только одна сторона посева
    """
    if bool(seed_token) != bool(seed_base):
        raise ValueError("Seeding requires both seed_token and seed_base")

    if token is None:
        token = ledger.deploy(SpaceToken, deployer)
    pool = ledger.deploy(LiquidityPool, deployer, token, config=pool_config)
    router = ledger.deploy(Router, deployer, pool, token)

    if seed_token:
        ledger.call(deployer, token.approve, router.address, seed_token)
        ledger.call(deployer, router.add_liquidity, seed_token, value=seed_base)
        logger.info(
            "Seeded pool %s with base=%s token=%s",
            pool.address, format_amount(seed_base), format_amount(seed_token),
        )

    return Exchange(token=token, pool=pool, router=router)
