"""
TOML-based configuration for the EOS wallet adapter.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values.

Usage:
    from eos_wallet.config import load_config
    cfg = load_config("eos_wallet.toml")

Example file:

    [node]
    url = "https://node.example.com/"
    timeout_seconds = 15

    [chain]
    development = false
    decimals = 4

    [logging]
    level = "DEBUG"
    format = "json"
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

MAINNET_CHAIN_ID = "aca376f206b8fc25a6ed44dbdc66547c36c6c33e3a119ffbeaef943642f0e906"
TESTNET_CHAIN_ID = "71ee83bcf52142d61019d95f9cc5427ba6a0d7ff8accd9e2088ae2abeaf3d3dd"
MAINNET_SYMBOL = "EOS"
TESTNET_SYMBOL = "XPR"


@dataclass
class NodeConfig:
    """Remote node endpoint."""
    url: str = "http://127.0.0.1:8080/"
    timeout_seconds: float = 30.0


@dataclass
class ChainConfig:
    """Chain identity.  Empty ``chain_id`` / ``symbol`` follow ``development``."""
    chain_id: str = ""
    symbol: str = ""
    decimals: int = 4
    development: bool = False

    @property
    def effective_chain_id(self) -> str:
        if self.chain_id:
            return self.chain_id
        return TESTNET_CHAIN_ID if self.development else MAINNET_CHAIN_ID

    @property
    def effective_symbol(self) -> str:
        if self.symbol:
            return self.symbol
        return TESTNET_SYMBOL if self.development else MAINNET_SYMBOL


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: str | None = None


@dataclass
class WalletConfig:
    """Top-level configuration container."""
    node: NodeConfig = field(default_factory=NodeConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _merge(dc: Any, raw: dict[str, Any]) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if hasattr(dc, key_under):
            setattr(dc, key_under, value)


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(path: str | None = None) -> WalletConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    Env-var mapping:
        EOS_WALLET_NODE_URL     -> node.url
        EOS_WALLET_TIMEOUT      -> node.timeout_seconds
        EOS_WALLET_CHAIN_ID     -> chain.chain_id
        EOS_WALLET_DEVELOPMENT  -> chain.development
        EOS_WALLET_LOG_LEVEL    -> logging.level
        EOS_WALLET_LOG_FMT      -> logging.format
    """
    cfg = WalletConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            for section_name, section_dc in [
                ("node", cfg.node),
                ("chain", cfg.chain),
                ("logging", cfg.logging),
            ]:
                if section_name in data:
                    _merge(section_dc, data[section_name])

    # ── Environment variable overrides ───────────────────────────
    if v := os.environ.get("EOS_WALLET_NODE_URL"):
        cfg.node.url = v
    if v := os.environ.get("EOS_WALLET_TIMEOUT"):
        cfg.node.timeout_seconds = float(v)
    if v := os.environ.get("EOS_WALLET_CHAIN_ID"):
        cfg.chain.chain_id = v
    if v := os.environ.get("EOS_WALLET_DEVELOPMENT"):
        cfg.chain.development = _env_bool(v)
    if v := os.environ.get("EOS_WALLET_LOG_LEVEL"):
        cfg.logging.level = v.upper()
    if v := os.environ.get("EOS_WALLET_LOG_FMT"):
        cfg.logging.format = v

    return cfg
