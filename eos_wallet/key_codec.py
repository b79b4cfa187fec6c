"""
Checksum-protected text encodings for keys and signatures.

Formats
-------
Public key (legacy)   ``EOS`` + base58(pub || ripemd160(pub)[:4])
Public key            ``PUB_K1_`` + base58(pub || ripemd160(pub || "K1")[:4])
Signature             ``SIG_K1_`` + base58(sig || ripemd160(sig || "K1")[:4])
Private key           ``PVT_K1_`` + base58(priv || ripemd160(priv || "K1")[:4])
Private key (WIF)     base58(0x80 || priv || sha256d(0x80 || priv)[:4])

The ``"K1"`` suffix names the curve and is mixed into the checksum so a
payload encoded for one curve never verifies as another.
"""

from __future__ import annotations

from ecdsa import SECP256k1, VerifyingKey
from ecdsa.errors import MalformedPointError

from eos_wallet.crypto_utils import (
    CHECKSUM_SIZE,
    SCALAR_SIZE,
    base58_decode,
    base58_encode,
    checksum4,
    ripemd160,
    sha256d,
)
from eos_wallet.errors import ChecksumMismatchError, InvalidPublicKeyError

LEGACY_PUBLIC_PREFIX = "EOS"
PUBLIC_PREFIX = "PUB_K1_"
SIGNATURE_PREFIX = "SIG_K1_"
PRIVATE_PREFIX = "PVT_K1_"

CURVE_SUFFIX = b"K1"
WIF_VERSION = 0x80

PUBLIC_KEY_SIZE = 33
SIGNATURE_SIZE = 65


# ── checksummed payloads ─────────────────────────────────────────────

def _ripemd_checksum(payload: bytes, suffix: bytes = b"") -> bytes:
    return checksum4(ripemd160(payload + suffix))


def _encode_checked(payload: bytes, suffix: bytes = b"") -> str:
    return base58_encode(payload + _ripemd_checksum(payload, suffix))


def _require_text(text: object) -> None:
    if not isinstance(text, str):
        raise TypeError(f"Expected text, got {type(text).__name__}")


def _split_checked(text: str) -> tuple[bytes, bytes]:
    try:
        raw = base58_decode(text)
    except ValueError as exc:
        raise ChecksumMismatchError(f"Undecodable key text: {exc}") from exc
    if len(raw) <= CHECKSUM_SIZE:
        raise ChecksumMismatchError("Encoded payload too short for a checksum")
    return raw[:-CHECKSUM_SIZE], raw[-CHECKSUM_SIZE:]


def _decode_checked(text: str, suffix: bytes = b"") -> bytes:
    payload, checksum = _split_checked(text)
    if _ripemd_checksum(payload, suffix) != checksum:
        raise ChecksumMismatchError("Checksum mismatch")
    return payload


# ── public keys ──────────────────────────────────────────────────────

def _check_public_key(payload: bytes) -> bytes:
    if len(payload) != PUBLIC_KEY_SIZE:
        raise InvalidPublicKeyError(
            f"Public key must be {PUBLIC_KEY_SIZE} bytes, got {len(payload)}"
        )
    try:
        VerifyingKey.from_string(payload, curve=SECP256k1)
    except MalformedPointError as exc:
        raise InvalidPublicKeyError(f"Not a point on secp256k1: {exc}") from exc
    return payload


def encode_public_key(public_key: bytes, legacy: bool = True) -> str:
    """Encode a compressed public key as ``EOS...`` (or ``PUB_K1_...``)."""
    _check_public_key(bytes(public_key))
    if legacy:
        return LEGACY_PUBLIC_PREFIX + _encode_checked(bytes(public_key))
    return PUBLIC_PREFIX + _encode_checked(bytes(public_key), CURVE_SUFFIX)


def decode_public_key(text: str) -> bytes:
    """Decode either public key form, validating the curve point."""
    if not isinstance(text, str):
        raise InvalidPublicKeyError(f"Public key must be text, got {type(text).__name__}")
    if text.startswith(PUBLIC_PREFIX):
        payload = _decode_checked(text[len(PUBLIC_PREFIX):], CURVE_SUFFIX)
    elif text.startswith(LEGACY_PUBLIC_PREFIX):
        payload = _decode_checked(text[len(LEGACY_PUBLIC_PREFIX):])
    else:
        raise InvalidPublicKeyError(f'Unrecognised public key prefix in "{text}"')
    return _check_public_key(payload)


def is_public_key(text: str) -> bool:
    try:
        decode_public_key(text)
    except (InvalidPublicKeyError, ChecksumMismatchError):
        return False
    return True


# ── signatures ───────────────────────────────────────────────────────

def encode_signature(signature: bytes) -> str:
    if len(signature) != SIGNATURE_SIZE:
        raise ValueError(f"Signature must be {SIGNATURE_SIZE} bytes, got {len(signature)}")
    return SIGNATURE_PREFIX + _encode_checked(bytes(signature), CURVE_SUFFIX)


def decode_signature(text: str) -> bytes:
    _require_text(text)
    if not text.startswith(SIGNATURE_PREFIX):
        raise ValueError(f'Signature must start with "{SIGNATURE_PREFIX}"')
    payload = _decode_checked(text[len(SIGNATURE_PREFIX):], CURVE_SUFFIX)
    if len(payload) != SIGNATURE_SIZE:
        raise ValueError(f"Signature must be {SIGNATURE_SIZE} bytes, got {len(payload)}")
    return payload


# ── private keys ─────────────────────────────────────────────────────

def encode_private_key_wif(private_key: bytes) -> str:
    """Legacy wallet-import-format export of a 32-byte scalar."""
    if len(private_key) != SCALAR_SIZE:
        raise ValueError(f"Private key must be {SCALAR_SIZE} bytes")
    payload = bytes([WIF_VERSION]) + bytes(private_key)
    return base58_encode(payload + checksum4(sha256d(payload)))


def decode_private_key_wif(text: str) -> bytes:
    _require_text(text)
    payload, checksum = _split_checked(text)
    if checksum4(sha256d(payload)) != checksum:
        raise ChecksumMismatchError("Checksum mismatch")
    if len(payload) != SCALAR_SIZE + 1 or payload[0] != WIF_VERSION:
        raise ValueError("Not a WIF private key")
    return payload[1:]


def encode_private_key(private_key: bytes) -> str:
    if len(private_key) != SCALAR_SIZE:
        raise ValueError(f"Private key must be {SCALAR_SIZE} bytes")
    return PRIVATE_PREFIX + _encode_checked(bytes(private_key), CURVE_SUFFIX)


def decode_private_key(text: str) -> bytes:
    """Decode ``PVT_K1_`` or WIF private key text."""
    _require_text(text)
    if text.startswith(PRIVATE_PREFIX):
        payload = _decode_checked(text[len(PRIVATE_PREFIX):], CURVE_SUFFIX)
        if len(payload) != SCALAR_SIZE:
            raise ValueError(f"Private key must be {SCALAR_SIZE} bytes")
        return payload
    return decode_private_key_wif(text)


# ── generic entry point ──────────────────────────────────────────────

def decode(text: str) -> bytes:
    """Decode any supported key or signature text to its raw payload.

    The format is selected by prefix; text without a known prefix is
    treated as a legacy WIF private key.
    """
    _require_text(text)
    if text.startswith(SIGNATURE_PREFIX):
        return decode_signature(text)
    if text.startswith((PUBLIC_PREFIX, LEGACY_PUBLIC_PREFIX)):
        return decode_public_key(text)
    return decode_private_key(text)
