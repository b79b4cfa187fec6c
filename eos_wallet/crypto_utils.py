"""
Low-level cryptographic helpers for the EOS wallet adapter.

Provides:
  - SHA-256 / double-SHA-256 / RIPEMD-160 hashing
  - Checksum4 (first four bytes of a digest)
  - Base58 encode / decode (Bitcoin alphabet)
  - Fixed-width big-endian integer <-> bytes conversion
  - Scalar reduction modulo a curve group order
"""

from __future__ import annotations

import hashlib

import base58
from Crypto.Hash import RIPEMD160

SCALAR_SIZE = 32
CHECKSUM_SIZE = 4


# ===================================================================
#  Hashing
# ===================================================================

def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def sha256d(data: bytes) -> bytes:
    """SHA-256 applied twice (used by the legacy WIF checksum)."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def ripemd160(data: bytes) -> bytes:
    # hashlib only exposes ripemd160 when OpenSSL ships the legacy provider
    return RIPEMD160.new(data).digest()


def checksum4(digest: bytes) -> bytes:
    """First four bytes of *digest*."""
    return digest[:CHECKSUM_SIZE]


# ===================================================================
#  Base58
# ===================================================================

def base58_encode(data: bytes) -> str:
    """Encode *data* with the Bitcoin base-58 alphabet.

    Each leading zero byte becomes a leading ``'1'``.
    """
    return base58.b58encode(bytes(data)).decode("ascii")


def base58_decode(text: str) -> bytes:
    """Decode base-58 *text*. Raises ``ValueError`` on foreign characters."""
    try:
        return base58.b58decode(text.encode("ascii"))
    except UnicodeEncodeError as exc:
        raise ValueError(f"Non-ASCII character in base58 text: {exc}") from exc


# ===================================================================
#  Integers
# ===================================================================

def bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, "big")


def int_to_bytes32(value: int) -> bytes:
    """Big-endian, zero-padded to 32 bytes."""
    if value < 0 or value.bit_length() > SCALAR_SIZE * 8:
        raise ValueError("Integer does not fit in 32 bytes")
    return value.to_bytes(SCALAR_SIZE, "big")


def reduce_scalar(data: bytes, order: int) -> bytes:
    """Reduce a big-endian scalar modulo *order* and re-encode as 32 bytes."""
    return int_to_bytes32(bytes_to_int(data) % order)


def hex_to_bytes(text: str) -> bytes:
    """Decode hex *text*; ``ValueError`` on odd length or non-hex digits."""
    if not isinstance(text, str):
        raise ValueError(f"Expected hex string, got {type(text).__name__}")
    return bytes.fromhex(text)
