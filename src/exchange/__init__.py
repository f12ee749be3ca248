"""
Exchange — constant-product пул, роутер и токен SpaceToken.
"""

from src.exchange.deployment import Exchange, deploy_exchange
from src.exchange.pool import LiquidityPool, PoolConfig
from src.exchange.router import Router
from src.exchange.token import MAX_SUPPLY, TRANSFER_TAX_BPS, SpaceToken, TokenConfig

__all__ = [
    "MAX_SUPPLY",
    "TRANSFER_TAX_BPS",
    "TokenConfig",
    "SpaceToken",
    "PoolConfig",
    "LiquidityPool",
    "Router",
    "Exchange",
    "deploy_exchange",
]
