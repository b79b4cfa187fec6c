"""Signing digest for a serialized transaction.

``sha256(chain_id || serialized_tx || sha256(context_free_data) or 32 zero bytes)``

Mixing the chain id in binds a signature to one chain, so it cannot be
replayed on another chain that shares the transaction format.
"""

from __future__ import annotations

from typing import Optional

from eos_wallet.crypto_utils import hex_to_bytes, sha256

CHAIN_ID_SIZE = 32
_EMPTY_CONTEXT_FREE = bytes(32)


def transaction_digest(
    chain_id: str,
    serialized_transaction: str,
    serialized_context_free_data: Optional[str] = None,
) -> bytes:
    """Return the 32-byte digest to sign.  All inputs are hex text."""
    chain = hex_to_bytes(chain_id)
    if len(chain) != CHAIN_ID_SIZE:
        raise ValueError(f"Chain id must be {CHAIN_ID_SIZE} bytes, got {len(chain)}")
    if serialized_context_free_data is not None:
        context_free = sha256(hex_to_bytes(serialized_context_free_data))
    else:
        context_free = _EMPTY_CONTEXT_FREE
    return sha256(chain + hex_to_bytes(serialized_transaction) + context_free)
