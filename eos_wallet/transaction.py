"""
Transaction models.

``TransferAction`` is the single ``eosio.token::transfer`` action a send
is made of; its wire serialization is produced by the node, not here.
``EOSTransaction`` is one entry of the account's transfer history.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

logger = logging.getLogger("eos_wallet.transaction")

TOKEN_CONTRACT = "eosio.token"
TRANSFER_ACTION = "transfer"
ACTIVE_PERMISSION = "active"

MAINNET_EXPLORER = "https://bloks.io/transaction/"
TESTNET_EXPLORER = "https://testnet.protonscan.io/transaction/"


@dataclass
class TransferAction:
    sender: str
    receiver: str
    quantity: str
    memo: str = ""

    def to_actions(self) -> list[dict[str, Any]]:
        """Action list in the shape ``tx/serialize`` expects."""
        return [{
            "account": TOKEN_CONTRACT,
            "name": TRANSFER_ACTION,
            "authorization": [{
                "actor": self.sender,
                "permission": ACTIVE_PERMISSION,
            }],
            "data": {
                "from": self.sender,
                "to": self.receiver,
                "quantity": self.quantity,
                "memo": self.memo,
            },
        }]


# fromisoformat before 3.11 only takes 3 or 6 fractional digits
_FRACTION_RE = re.compile(r"\.(\d+)")


def _parse_iso(text: str) -> datetime:
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def _from_epoch_millis(value: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.debug("Epoch timestamp out of range: %r", value)
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Node timestamps arrive as ISO-8601 text, RFC 2822 text or epoch milliseconds.

    Unparseable values give ``None``.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _from_epoch_millis(value)
    text = str(value).strip()
    if text.isdigit():
        return _from_epoch_millis(int(text))
    try:
        parsed = _parse_iso(text)
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            logger.debug("Unparseable history timestamp %r", value)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class EOSTransaction:
    """A confirmed transfer touching the wallet's account."""

    id: str
    from_account: str
    to: str
    amount: int
    incoming: bool
    fee: int = 0
    timestamp: Optional[datetime] = None
    memo: str = ""
    development: bool = field(default=False, repr=False)

    @property
    def url(self) -> str:
        base = TESTNET_EXPLORER if self.development else MAINNET_EXPLORER
        return f"{base}{self.id}"
