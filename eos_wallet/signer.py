"""
Canonical secp256k1 transaction signing.

A signature is the 65-byte structure ``header || r || s`` where
``header = recovery_id + 27 + 4`` (the ``+ 4`` flags a compressed public
key).  The network only accepts *canonical* signatures: neither ``r`` nor
``s`` may carry a set top bit in its leading byte, nor a zero leading
byte followed by a byte whose top bit is clear.

Raw signatures come from RFC 6979 deterministic nonces.  Each attempt
feeds an incrementing counter in as extra entropy, so a rejected
signature is never produced twice.  ``s`` is normalised to the low half
of the group order, so roughly half of all attempts are canonical.

The retry loop has no iteration cap: a broken curve or hash backend
that never yields a canonical signature spins here indefinitely.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Optional

from ecdsa import BadSignatureError, SECP256k1, SigningKey, VerifyingKey
from ecdsa.util import sigdecode_string

from eos_wallet.crypto_utils import SCALAR_SIZE, int_to_bytes32, reduce_scalar
from eos_wallet.digest import transaction_digest
from eos_wallet.key_codec import (
    decode_public_key,
    decode_signature,
    encode_signature,
)
from eos_wallet.keys import CURVE_ORDER, derive_keypair

logger = logging.getLogger("eos_wallet.signer")

RECOVERY_HEADER_OFFSET = 27 + 4


def is_canonical(signature: bytes) -> bool:
    """True when ``r`` and ``s`` have no sign-ambiguous leading bytes."""
    return (
        not (signature[1] & 0x80)
        and not (signature[1] == 0 and not (signature[2] & 0x80))
        and not (signature[33] & 0x80)
        and not (signature[33] == 0 and not (signature[34] & 0x80))
    )


def _sigencode_low_s(r: int, s: int, order: int) -> tuple[int, int]:
    if s > order // 2:
        s = order - s
    return r, s


def _recover_candidates(rs: bytes, digest: bytes) -> list[VerifyingKey]:
    return VerifyingKey.from_public_key_recovery_with_digest(
        rs, digest, SECP256k1, hashfunc=hashlib.sha256, sigdecode=sigdecode_string,
    )


def _recovery_id(rs: bytes, digest: bytes, public_key: bytes) -> int:
    for recid, candidate in enumerate(_recover_candidates(rs, digest)):
        if candidate.to_string("compressed") == public_key:
            return recid
    raise RuntimeError("Signature does not recover to the signing key")


def sign_digest(digest: bytes, private_key: bytes) -> bytes:
    """Sign a 32-byte *digest*, returning a canonical 65-byte signature."""
    if len(digest) != 32:
        raise ValueError(f"Digest must be 32 bytes, got {len(digest)}")
    # keys exported by older non-reducing code paths may exceed the order
    scalar = reduce_scalar(bytes(private_key), CURVE_ORDER)
    sk = SigningKey.from_string(scalar, curve=SECP256k1, hashfunc=hashlib.sha256)
    public_key = sk.get_verifying_key().to_string("compressed")

    attempt = 0
    while True:
        attempt += 1
        r, s = sk.sign_digest_deterministic(
            digest,
            hashfunc=hashlib.sha256,
            sigencode=_sigencode_low_s,
            extra_entropy=attempt.to_bytes(SCALAR_SIZE, "big"),
        )
        rs = int_to_bytes32(r) + int_to_bytes32(s)
        header = _recovery_id(rs, digest, public_key) + RECOVERY_HEADER_OFFSET
        signature = bytes([header]) + rs
        if is_canonical(signature):
            return signature
        logger.debug("Non-canonical signature on attempt %d, retrying", attempt)


def sign(
    chain_id: str,
    serialized_transaction: str,
    seed: bytes,
    serialized_context_free_data: Optional[str] = None,
) -> str:
    """Sign a serialized transaction with the key derived from *seed*.

    Returns ``SIG_K1_...`` text.
    """
    keypair = derive_keypair(seed)
    digest = transaction_digest(chain_id, serialized_transaction, serialized_context_free_data)
    return encode_signature(sign_digest(digest, keypair.private_key))


def recover_public_key(signature_text: str, digest: bytes) -> bytes:
    """Compressed public key that produced *signature_text* over *digest*."""
    signature = decode_signature(signature_text)
    recid = signature[0] - RECOVERY_HEADER_OFFSET
    if recid not in (0, 1, 2, 3):
        raise ValueError(f"Unsupported signature header byte {signature[0]}")
    candidates = _recover_candidates(signature[1:], digest)
    if recid >= len(candidates):
        raise ValueError("Recovery id out of range for this signature")
    return candidates[recid].to_string("compressed")


def verify(signature_text: str, digest: bytes, public_key_text: str) -> bool:
    """Check *signature_text* over *digest* against a public key."""
    public_key = decode_public_key(public_key_text)
    signature = decode_signature(signature_text)
    vk = VerifyingKey.from_string(public_key, curve=SECP256k1, hashfunc=hashlib.sha256)
    try:
        return vk.verify_digest(signature[1:], digest, sigdecode=sigdecode_string)
    except BadSignatureError:
        return False
