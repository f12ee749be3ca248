"""Ledger — in-memory среда исполнения контрактов.

- Атомарные операции с полным откатом
- Нативный base актив
- Ownable / Pausable
"""

from .context import Context
from .host import Contract, Ledger, validate_address
from .access import Ownable, Pausable

__all__ = [
    "Context",
    "Contract",
    "Ledger",
    "validate_address",
    "Ownable",
    "Pausable",
]
