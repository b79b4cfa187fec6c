"""
Deterministic secp256k1 key derivation from a host-supplied seed.

The seed is rendered as lowercase hex text and that text is hashed with
SHA-256.  The digest is reduced modulo the secp256k1 group order to give
the private scalar; the public key is the compressed encoding of
``scalar * G``.

Reduction is used instead of rejection sampling: a digest at or above
the group order (probability ~2**-128) simply wraps around.  The result
is very slightly non-uniform, which is accepted.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ecdsa import SECP256k1, SigningKey
from ecdsa.errors import MalformedPointError

from eos_wallet.crypto_utils import bytes_to_int, reduce_scalar, sha256
from eos_wallet.errors import InvalidSeedError
from eos_wallet.key_codec import decode_private_key, encode_private_key_wif, encode_public_key

CURVE = SECP256k1
CURVE_ORDER: int = SECP256k1.order


@dataclass(frozen=True)
class KeyPair:
    """A private scalar and its compressed public point."""

    private_key: bytes = field(repr=False)
    public_key: bytes

    @property
    def wif(self) -> str:
        return encode_private_key_wif(self.private_key)

    @property
    def public_key_text(self) -> str:
        return encode_public_key(self.public_key)


def _signing_key(private_key: bytes) -> SigningKey:
    return SigningKey.from_string(private_key, curve=CURVE)


def keypair_from_private_key(private_key: bytes) -> KeyPair:
    """Build a key pair from a 32-byte scalar (reduced mod the group order)."""
    scalar = reduce_scalar(bytes(private_key), CURVE_ORDER)
    if bytes_to_int(scalar) == 0:
        raise InvalidSeedError("Private scalar reduces to zero")
    try:
        sk = _signing_key(scalar)
    except MalformedPointError as exc:
        raise InvalidSeedError(f"Unusable private scalar: {exc}") from exc
    public_key = sk.get_verifying_key().to_string("compressed")
    return KeyPair(private_key=scalar, public_key=public_key)


def derive_keypair_from_seed_string(seed_hex: str) -> KeyPair:
    """Derive the key pair for a seed already rendered as hex text."""
    if not isinstance(seed_hex, str):
        raise InvalidSeedError(f"Seed text must be str, got {type(seed_hex).__name__}")
    return keypair_from_private_key(sha256(seed_hex.encode("utf-8")))


def derive_keypair(seed: bytes, *, allow_empty: bool = True) -> KeyPair:
    """Derive the key pair for *seed*.

    Pure and deterministic.  Raises ``InvalidSeedError`` when *seed* is
    not a byte sequence, or is empty and *allow_empty* is False.
    """
    if not isinstance(seed, (bytes, bytearray, memoryview)):
        raise InvalidSeedError(
            f"Seed must be bytes, bytearray or memoryview, got {type(seed).__name__}"
        )
    seed = bytes(seed)
    if not seed and not allow_empty:
        raise InvalidSeedError("Seed must not be empty")
    return derive_keypair_from_seed_string(seed.hex())


def keypair_from_wif(text: str) -> KeyPair:
    """Rebuild a key pair from exported private key text (WIF or ``PVT_K1_``)."""
    return keypair_from_private_key(decode_private_key(text))
