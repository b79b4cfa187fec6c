"""
Command-line tools for the EOS wallet adapter.

Usage:
    eos-wallet keys --seed-hex 2b48a48a...
    eos-wallet decode EOS7tJKsK8frEPribVBiQXByLkADnDUr3DUUr4LBzuThFPYk8EPSj
    eos-wallet digest --chain-id aca376f2... --tx 0a1b2c...
    eos-wallet sign --chain-id aca376f2... --tx 0a1b2c... --seed-hex 2b48...
    eos-wallet account --public-key EOS7tJKs... --config eos_wallet.toml

``--seed-hex`` falls back to the EOS_WALLET_SEED environment variable.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Optional, Sequence

from eos_wallet.config import load_config
from eos_wallet.crypto_utils import hex_to_bytes
from eos_wallet.digest import transaction_digest
from eos_wallet.errors import WalletError
from eos_wallet.key_codec import decode
from eos_wallet.keys import derive_keypair
from eos_wallet.logging_config import setup_logging
from eos_wallet.signer import sign
from eos_wallet.storage import MemoryStorage
from eos_wallet.wallet import EOSWallet

logger = logging.getLogger("eos_wallet.cli")


def _seed(args: argparse.Namespace) -> bytes:
    seed_hex = args.seed_hex if args.seed_hex is not None else os.environ.get("EOS_WALLET_SEED")
    if seed_hex is None:
        raise SystemExit("error: --seed-hex or EOS_WALLET_SEED is required")
    try:
        return hex_to_bytes(seed_hex)
    except ValueError as exc:
        raise SystemExit(f"error: seed is not hex: {exc}") from exc


def cmd_keys(args: argparse.Namespace) -> int:
    keypair = derive_keypair(_seed(args))
    print(json.dumps({
        "privateKey": keypair.wif,
        "publicKey": keypair.public_key_text,
    }, indent=2))
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    print(decode(args.text).hex())
    return 0


def cmd_digest(args: argparse.Namespace) -> int:
    print(transaction_digest(args.chain_id, args.tx, args.cfd).hex())
    return 0


def cmd_sign(args: argparse.Namespace) -> int:
    print(sign(args.chain_id, args.tx, _seed(args), args.cfd))
    return 0


async def _show_account(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    wallet = EOSWallet.from_config(cfg, MemoryStorage())
    try:
        await wallet.open(args.public_key)
        await wallet.load()
        print(json.dumps({
            "state": wallet.state.value,
            "account": wallet.address,
            "balance": wallet.balance,
            "isActive": wallet.is_active,
        }, indent=2))
    finally:
        await wallet.close()
    return 0


def cmd_account(args: argparse.Namespace) -> int:
    return asyncio.run(_show_account(args))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="eos-wallet", description="EOS wallet key and account tools")
    p.add_argument("--config", default=None, help="Path to eos_wallet.toml config file")
    p.add_argument("--log-level", default=None, help="Override configured log level")
    sub = p.add_subparsers(dest="command", required=True)

    keys = sub.add_parser("keys", help="Derive the key pair for a seed")
    keys.add_argument("--seed-hex", default=None, help="Seed bytes as hex")
    keys.set_defaults(func=cmd_keys)

    dec = sub.add_parser("decode", help="Decode key or signature text to hex")
    dec.add_argument("text")
    dec.set_defaults(func=cmd_decode)

    dig = sub.add_parser("digest", help="Compute the signing digest of a transaction")
    dig.add_argument("--chain-id", required=True)
    dig.add_argument("--tx", required=True, help="Serialized transaction hex")
    dig.add_argument("--cfd", default=None, help="Serialized context-free data hex")
    dig.set_defaults(func=cmd_digest)

    sig = sub.add_parser("sign", help="Sign a serialized transaction")
    sig.add_argument("--chain-id", required=True)
    sig.add_argument("--tx", required=True, help="Serialized transaction hex")
    sig.add_argument("--cfd", default=None, help="Serialized context-free data hex")
    sig.add_argument("--seed-hex", default=None, help="Seed bytes as hex")
    sig.set_defaults(func=cmd_sign)

    acc = sub.add_parser("account", help="Load an account from the node")
    acc.add_argument("--public-key", required=True)
    acc.set_defaults(func=cmd_account)
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config)
    setup_logging(
        level=args.log_level or cfg.logging.level,
        fmt=cfg.logging.format,
        log_file=cfg.logging.file,
    )
    try:
        return args.func(args)
    except (WalletError, ValueError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
