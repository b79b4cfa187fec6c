"""
Error taxonomy for the EOS wallet adapter.

Local validation errors are raised before any network call.  Errors
reported by the node are carried by ``NodeError``; the handful of known
domain failures (unknown destination, expired transaction, exhausted
CPU / NET resources) are recognised by the prefix of the node's response
text and re-raised as their own types via ``translate_node_error``.
"""

from __future__ import annotations

from typing import Optional


class WalletError(Exception):
    """Base class for every error raised by this package."""


# ── Key material ─────────────────────────────────────────────────────

class InvalidSeedError(WalletError, TypeError):
    def __init__(self, message: str = "Seed must be a non-empty byte sequence"):
        super().__init__(message)


class InvalidPublicKeyError(WalletError, ValueError):
    pass


class ChecksumMismatchError(WalletError, ValueError):
    """Encoded key or signature text failed checksum verification."""


# ── Account setup ────────────────────────────────────────────────────

class InvalidAccountNameError(WalletError, TypeError):
    def __init__(self, account_name: str):
        super().__init__(f'Invalid account name "{account_name}"')
        self.account_name = account_name


class AccountNameUnavailableError(WalletError, TypeError):
    def __init__(self, account_name: str):
        super().__init__(f'Account name "{account_name}" is already taken')
        self.account_name = account_name


# ── Transfer validation ──────────────────────────────────────────────

class InvalidAddressError(WalletError, ValueError):
    def __init__(self, address: str, message: Optional[str] = None):
        super().__init__(message or f'Invalid address "{address}"')
        self.address = address


class DestinationEqualsSourceError(InvalidAddressError):
    def __init__(self, address: str = ""):
        super().__init__(address, "Destination address equal source address")


class InvalidMemoError(WalletError, ValueError):
    meta = "memo"

    def __init__(self, memo):
        super().__init__(f'Invalid Memo: "{memo}"')
        self.memo = memo


class SmallAmountError(WalletError, ValueError):
    """Amount is below the dust threshold (carried in atomic units)."""

    def __init__(self, amount: int):
        super().__init__(f"Amount must be at least {amount} atomic units")
        self.amount = amount


class BigAmountError(WalletError, ValueError):
    """Amount exceeds the sendable balance (carried in atomic units)."""

    def __init__(self, amount: int):
        super().__init__(f"Amount exceeds available balance of {amount} atomic units")
        self.amount = amount


# ── Node errors ──────────────────────────────────────────────────────

class NodeError(WalletError):
    """Non-success response from the remote node."""

    def __init__(self, status: int, text: str):
        super().__init__(f"Node responded {status}: {text}")
        self.status = status
        self.text = text


class DestinationAccountError(WalletError):
    pass


class ExpiredTransactionError(WalletError):
    pass


class CPUExceededError(WalletError):
    pass


class NETExceededError(WalletError):
    pass


# Checked in order; the first matching prefix wins.
NODE_ERROR_PREFIXES: tuple[tuple[str, type[WalletError]], ...] = (
    ("Account does not exist", DestinationAccountError),
    ("Expired transaction", ExpiredTransactionError),
    ("CPU usage exceeded", CPUExceededError),
    ("NET usage exceeded", NETExceededError),
)


def translate_node_error(err: NodeError) -> WalletError:
    """Map a node error onto its domain type, or return *err* unchanged."""
    text = err.text or ""
    for prefix, error_cls in NODE_ERROR_PREFIXES:
        if text.startswith(prefix):
            return error_cls(text)
    return err
