"""
EOS wallet adapter - key derivation, signing and account tracking for a
single EOS-style asset.

Key features:
- Deterministic secp256k1 keys from a host-supplied seed
- Checksummed base-58 key and signature text (``EOS...``, ``SIG_K1_...``, WIF)
- Chain-bound transaction digests and canonical signatures
- Async account adapter over the wallet node's REST API (aiohttp)
"""

__version__ = "1.0.0"
__all__ = [
    "crypto_utils",
    "key_codec",
    "keys",
    "digest",
    "signer",
    "errors",
    "validator",
    "amounts",
    "transaction",
    "node_api",
    "storage",
    "wallet",
    "config",
    "logging_config",
]
