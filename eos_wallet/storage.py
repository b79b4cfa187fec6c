"""
Host-owned key/value slots.

The host application owns persistence; the wallet only reads and writes
a couple of string slots through the ``Storage`` protocol and asks the
host to flush them with ``save()``.

Slots written by the wallet:

    accountName   bound account name
    balance       balance in atomic units, decimal text
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

logger = logging.getLogger("eos_wallet.storage")

ACCOUNT_NAME_KEY = "accountName"
BALANCE_KEY = "balance"


class Storage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    async def save(self) -> None: ...


class MemoryStorage:
    """Dict-backed ``Storage`` for tests and the command line."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})
        self.save_count = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def save(self) -> None:
        self.save_count += 1
        logger.debug("Saved %d storage slot(s)", len(self.data))
