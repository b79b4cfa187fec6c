"""
Shared fixtures and fakes for the eos_wallet test suite.
"""

from __future__ import annotations

from typing import Any, Optional

import pytest

from eos_wallet.errors import NodeError
from eos_wallet.node_api import AccountInfo, TxPage
from eos_wallet.storage import MemoryStorage
from eos_wallet.validator import validate_account_name
from eos_wallet.wallet import EOSWallet

RANDOM_SEED = bytes.fromhex(
    "2b48a48a752f6c49772bf97205660411cd2163fe6ce2de19537e9c94d3648c85"
    "c0d7f405660c20253115aaf1799b1c41cdd62b4cfbb6845bc9475495fc64b874"
)
PUBLIC_KEY = "EOS7tJKsK8frEPribVBiQXByLkADnDUr3DUUr4LBzuThFPYk8EPSj"
PRIVATE_KEY = "5J31TthDctkYwYVrDTcg8JmjmbK58UFzyPHBy9bzd5XFz2JKswJ"

EMPTY_SEED_PRIVATE_KEY = "5KYZdUEo39z3FPrtuX2QbbwGnNP5zTd7yyr2SC1j299sBCnWjss"
EMPTY_SEED_PUBLIC_KEY = "EOS859gxfnXyUriMgUeThh1fWv3oqcpLFyHa3TfFYC4PK2HqhToVM"

ACCOUNT_NAME = "zxczxczxczxc"
SECOND_ACCOUNT_NAME = "ssssssssssss"
SERIALIZED_TX = "a1b2c3d4e5f60718293a4b5c6d7e8f90"


class FakeAccounts:
    """In-memory stand-in for ``node_api.Accounts``."""

    def __init__(self):
        self.bindings: dict[str, str] = {}
        self.infos: dict[str, AccountInfo] = {}
        self.by_key: dict[str, str] = {}
        self.pages: dict[int, TxPage] = {}
        self.fail_with: Optional[Exception] = None
        self.calls: list[tuple] = []

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def validate(self, account_name, public_key) -> bool:
        self.calls.append(("validate", account_name, public_key))
        if not validate_account_name(account_name):
            return False
        self._maybe_fail()
        return self.bindings.get(account_name) == public_key

    async def info(self, account_name) -> AccountInfo:
        self.calls.append(("info", account_name))
        self._maybe_fail()
        return self.infos.get(account_name, AccountInfo(balance=0, is_active=False))

    async def txs(self, account_name, cursor=0) -> TxPage:
        self.calls.append(("txs", account_name, cursor))
        self._maybe_fail()
        return self.pages.get(cursor, TxPage())

    async def account_name_by_key(self, public_key) -> Optional[str]:
        self.calls.append(("account_name_by_key", public_key))
        self._maybe_fail()
        return self.by_key.get(public_key)


class FakeCommon:
    def __init__(self, price: Any = 123):
        self.price = price

    async def account_setup_price(self):
        return self.price


class FakeTransactions:
    def __init__(self):
        self.serialized: list[list[dict]] = []
        self.propagated: list[tuple[str, list[str]]] = []
        self.propagate_error: Optional[NodeError] = None

    async def serialize(self, actions):
        self.serialized.append(actions)
        return SERIALIZED_TX

    async def propagate(self, serialized_transaction, signatures):
        if self.propagate_error is not None:
            raise self.propagate_error
        self.propagated.append((serialized_transaction, signatures))
        return "f00dfeed"


class FakeNodeAPI:
    def __init__(self):
        self.accounts = FakeAccounts()
        self.common = FakeCommon()
        self.transactions = FakeTransactions()
        self.closed = False

    async def close(self):
        self.closed = True


@pytest.fixture
def node_api():
    return FakeNodeAPI()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def wallet(node_api, storage):
    return EOSWallet(node_api, storage)


@pytest.fixture
def active_node_api(node_api):
    """Node that knows ACCOUNT_NAME bound to PUBLIC_KEY with 12.345 EOS."""
    node_api.accounts.bindings[ACCOUNT_NAME] = PUBLIC_KEY
    node_api.accounts.infos[ACCOUNT_NAME] = AccountInfo(balance=12.345, is_active=True)
    node_api.accounts.by_key[PUBLIC_KEY] = ACCOUNT_NAME
    return node_api
