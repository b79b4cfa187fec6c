"""
EOS account adapter.

An ``EOSWallet`` tracks one key's account on chain: whether the key is
bound to an account, the account's activation flag and balance, its
transfer history, and the construction of signed transfers.

Lifecycle::

    CREATED --create()/open()--> INITIALIZING --> INITIALIZED
    INITIALIZED --load()--> LOADING --> NEED_ACTIVATION | LOADED
    any --failed load()--> ERROR

The adapter never retains the seed or private key: operations that sign
take the seed as an argument and drop the derived key when they return.
The host runs at most one high-level operation per instance at a time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from eos_wallet.amounts import DEFAULT_DECIMALS, format_quantity, unit_to_atom
from eos_wallet.config import (
    MAINNET_CHAIN_ID,
    MAINNET_SYMBOL,
    TESTNET_CHAIN_ID,
    TESTNET_SYMBOL,
    WalletConfig,
)
from eos_wallet.errors import (
    AccountNameUnavailableError,
    BigAmountError,
    DestinationEqualsSourceError,
    InvalidAccountNameError,
    InvalidAddressError,
    InvalidMemoError,
    InvalidPublicKeyError,
    NodeError,
    SmallAmountError,
    translate_node_error,
)
from eos_wallet.key_codec import decode_public_key
from eos_wallet.keys import derive_keypair
from eos_wallet.node_api import NodeAPI
from eos_wallet.signer import sign
from eos_wallet.storage import ACCOUNT_NAME_KEY, BALANCE_KEY, Storage
from eos_wallet.transaction import EOSTransaction, TransferAction, parse_timestamp
from eos_wallet.validator import validate_account_name, validate_memo

logger = logging.getLogger("eos_wallet.wallet")

DUST_THRESHOLD = 1
ZERO_FEE = 0
DUMMY_EXCHANGE_DEPOSIT_ADDRESS = "coinappfee55"


class WalletState(Enum):
    CREATED = "created"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    LOADING = "loading"
    NEED_ACTIVATION = "need_activation"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class AccountSetup:
    """Outcome of ``setup_account``.

    When ``need_to_create_account`` is set, the host collects ``price``
    and sends it with ``memo`` so the account gets created for this key.
    """
    need_to_create_account: bool
    price: Any = None
    memo: Optional[str] = None


@dataclass
class TransactionsPage:
    transactions: list[EOSTransaction]
    has_more: bool
    cursor: int


class EOSWallet:
    """Single-asset adapter bound to one public key."""

    def __init__(
        self,
        api: NodeAPI,
        storage: Storage,
        *,
        decimals: int = DEFAULT_DECIMALS,
        chain_id: Optional[str] = None,
        symbol: Optional[str] = None,
        development: bool = False,
    ):
        self.api = api
        self.storage = storage
        self.decimals = decimals
        self.development = development
        if development:
            self.chain_id = chain_id or TESTNET_CHAIN_ID
            self.symbol = symbol or TESTNET_SYMBOL
        else:
            self.chain_id = chain_id or MAINNET_CHAIN_ID
            self.symbol = symbol or MAINNET_SYMBOL

        self._state = WalletState.CREATED
        self._public_key: Optional[str] = None
        self._account_name: Optional[str] = None
        self._balance = 0
        self._is_active = False
        self._transactions: dict[str, EOSTransaction] = {}

    @classmethod
    def from_config(cls, cfg: WalletConfig, storage: Storage,
                    api: Optional[NodeAPI] = None) -> EOSWallet:
        if api is None:
            api = NodeAPI.from_url(cfg.node.url, timeout=cfg.node.timeout_seconds)
        return cls(
            api,
            storage,
            decimals=cfg.chain.decimals,
            chain_id=cfg.chain.effective_chain_id,
            symbol=cfg.chain.effective_symbol,
            development=cfg.chain.development,
        )

    # ---- properties ----

    @property
    def state(self) -> WalletState:
        return self._state

    @state.setter
    def state(self, value: WalletState) -> None:
        if value is not self._state:
            logger.info("Wallet state %s -> %s", self._state.value, value.value)
        self._state = value

    @property
    def address(self) -> str:
        return self._account_name or ""

    @property
    def balance(self) -> int:
        """Balance in atomic units."""
        return self._balance

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def meta_names(self) -> list[str]:
        return ["memo"]

    @property
    def dummy_exchange_deposit_address(self) -> str:
        return DUMMY_EXCHANGE_DEPOSIT_ADDRESS

    # ---- lifecycle ----

    async def create(self, seed: bytes) -> None:
        """Initialise from a seed; only the public key is kept."""
        self.state = WalletState.INITIALIZING
        self._public_key = derive_keypair(seed, allow_empty=False).public_key_text
        await self._init()
        self.state = WalletState.INITIALIZED

    async def open(self, public_key: str) -> None:
        """Initialise from a public key (``EOS...`` or ``PUB_K1_...``)."""
        if not isinstance(public_key, str):
            raise InvalidPublicKeyError("Public key must be text")
        decode_public_key(public_key)
        self.state = WalletState.INITIALIZING
        self._public_key = public_key
        await self._init()
        self.state = WalletState.INITIALIZED

    async def _init(self) -> None:
        self._balance = int(self.storage.get(BALANCE_KEY) or 0)

    async def close(self) -> None:
        await self.api.close()

    def _require_public_key(self) -> str:
        if self._public_key is None:
            raise RuntimeError("Wallet has no key: call create() or open() first")
        return self._public_key

    async def _store_balance(self) -> None:
        self.storage.set(BALANCE_KEY, str(self._balance))
        await self.storage.save()

    async def load(self) -> None:
        """Resolve the bound account and refresh balance and activation flag.

        A failure leaves the wallet in ``ERROR`` and re-raises.
        """
        public_key = self._require_public_key()
        self.state = WalletState.LOADING
        try:
            account_name = self.storage.get(ACCOUNT_NAME_KEY)
            if not account_name:
                account_name = await self.api.accounts.account_name_by_key(public_key)
                if account_name:
                    self.storage.set(ACCOUNT_NAME_KEY, account_name)
            self._account_name = account_name

            if await self.api.accounts.validate(account_name, public_key):
                info = await self.api.accounts.info(account_name)
                self._balance = unit_to_atom(info.balance, self.decimals)
                self._is_active = info.is_active
                logger.debug("Account %s balance %d active=%s",
                             account_name, self._balance, self._is_active)
                await self._store_balance()
                self.state = WalletState.LOADED
            else:
                self.state = WalletState.NEED_ACTIVATION
        except Exception:
            self.state = WalletState.ERROR
            raise

    async def setup_account(self, account_name: str) -> AccountSetup:
        """Bind an existing account to this key, or quote its creation."""
        public_key = self._require_public_key()
        if await self.api.accounts.validate(account_name, public_key):
            self._account_name = account_name
            self.storage.set(ACCOUNT_NAME_KEY, account_name)
            await self.storage.save()
            return AccountSetup(need_to_create_account=False)
        if not validate_account_name(account_name):
            raise InvalidAccountNameError(account_name)
        info = await self.api.accounts.info(account_name)
        if info.is_active:
            raise AccountNameUnavailableError(account_name)
        price = await self.api.common.account_setup_price()
        return AccountSetup(
            need_to_create_account=True,
            price=price,
            memo=f"{account_name}-{public_key}",
        )

    # ---- history ----

    async def load_transactions(self, cursor: Optional[int] = None) -> TransactionsPage:
        if not cursor:
            self._transactions.clear()
        if not self._is_active:
            return TransactionsPage(transactions=[], has_more=False, cursor=0)
        page = await self.api.accounts.txs(self._account_name, cursor or 0)
        transactions = [self._to_transaction(raw) for raw in page.transactions]
        for tx in transactions:
            self._transactions[tx.id] = tx
        return TransactionsPage(transactions=transactions, has_more=page.has_more,
                                cursor=page.cursor)

    def _to_transaction(self, raw: dict[str, Any]) -> EOSTransaction:
        sender = raw.get("from", "")
        receiver = raw.get("to", "")
        return EOSTransaction(
            id=raw["id"],
            from_account=sender,
            to=receiver,
            amount=unit_to_atom(raw.get("amount", 0), self.decimals),
            incoming=receiver == self._account_name and sender != receiver,
            fee=ZERO_FEE,
            timestamp=parse_timestamp(raw.get("timestamp")),
            memo=raw.get("memo") or "",
            development=self.development,
        )

    async def load_transaction(self, tx_id: str) -> Optional[EOSTransaction]:
        return self._transactions.get(tx_id)

    # ---- keys ----

    def get_public_key(self) -> str:
        return self._require_public_key()

    def get_private_key(self, seed: bytes) -> list[dict[str, str]]:
        keypair = derive_keypair(seed, allow_empty=False)
        return [{
            "owner_private_key": keypair.wif,
            "owner_public_key": keypair.public_key_text,
            "active_private_key": keypair.wif,
            "active_public_key": keypair.public_key_text,
        }]

    def export_private_keys(self, seed: bytes) -> str:
        """CSV export of the owner and active key pairs."""
        keys = self.get_private_key(seed)[0]
        header = "ownerPrivateKey,ownerPublicKey,activePrivateKey,activePublicKey"
        row = ",".join((
            keys["owner_private_key"], keys["owner_public_key"],
            keys["active_private_key"], keys["active_public_key"],
        ))
        return f"{header}\n{row}"

    # ---- validation ----

    def validate_account_name(self, account_name: str) -> bool:
        return validate_account_name(account_name)

    async def validate_address(self, address: str) -> bool:
        if not validate_account_name(address):
            raise InvalidAddressError(address)
        if address == self._account_name:
            raise DestinationEqualsSourceError(address)
        return True

    async def validate_meta(self, memo: Optional[str] = None) -> bool:
        if memo is not None and not validate_memo(memo):
            raise InvalidMemoError(memo)
        return True

    async def validate_amount(self, amount: int) -> bool:
        """Check *amount* (atomic units) against dust floor and balance."""
        if not self._is_active or amount < DUST_THRESHOLD:
            raise SmallAmountError(DUST_THRESHOLD)
        if amount > self._balance:
            raise BigAmountError(self._balance)
        return True

    async def estimate_max_amount(self) -> int:
        return self._balance

    async def estimate_transaction_fee(self) -> int:
        return ZERO_FEE

    # ---- sending ----

    async def create_transaction(
        self,
        address: str,
        amount: int,
        seed: bytes,
        memo: Optional[str] = None,
    ) -> str:
        """Validate, sign and submit a transfer; returns the transaction id."""
        await self.validate_address(address)
        await self.validate_meta(memo)
        await self.validate_amount(amount)

        action = TransferAction(
            sender=self._account_name,
            receiver=address,
            quantity=format_quantity(amount, self.decimals, self.symbol),
            memo=memo or "",
        )
        serialized = await self.api.transactions.serialize(action.to_actions())
        signature = sign(self.chain_id, serialized, seed)
        try:
            tx_id = await self.api.transactions.propagate(serialized, [signature])
        except NodeError as err:
            translated = translate_node_error(err)
            if translated is err:
                raise
            raise translated from err

        self._balance -= amount
        await self._store_balance()
        logger.info("Sent %s to %s (tx %s)", action.quantity, address, tx_id)
        return tx_id
