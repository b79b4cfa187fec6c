"""
Tests for the node REST client against an in-process aiohttp node.

Covers:
  - Every endpoint's request shape and response mapping
  - NodeError on 4xx / 5xx and on undecodable bodies
  - Local short-circuit of validate() for malformed names
  - History paging and transfer filtering
  - A full load / send round-trip through EOSWallet
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from eos_wallet.config import MAINNET_CHAIN_ID
from eos_wallet.digest import transaction_digest
from eos_wallet.errors import CPUExceededError, NodeError
from eos_wallet.node_api import NodeAPI, NodeClient
from eos_wallet.signer import sign, verify
from eos_wallet.storage import MemoryStorage
from eos_wallet.wallet import EOSWallet, WalletState

from tests.conftest import (
    ACCOUNT_NAME,
    PUBLIC_KEY,
    RANDOM_SEED,
    SECOND_ACCOUNT_NAME,
    SERIALIZED_TX,
)

PAGE_LIMIT = 2


def _history() -> list[dict[str, Any]]:
    return [
        {"id": "t1", "from": SECOND_ACCOUNT_NAME, "to": ACCOUNT_NAME, "amount": "1.5000",
         "memo": "hi", "timestamp": "2024-03-01T12:00:00Z", "isEosTransfer": True},
        {"id": "t2", "from": "eosio", "to": ACCOUNT_NAME, "amount": "0.0000",
         "isEosTransfer": False},
        {"id": "t3", "from": ACCOUNT_NAME, "to": SECOND_ACCOUNT_NAME, "amount": "0.2500",
         "isEosTransfer": True},
    ]


def _make_node_app(state: dict[str, Any]) -> web.Application:
    """Minimal node exposing the wallet endpoints over ``state``."""

    @web.middleware
    async def override(request, handler):
        state["requests"].append((request.method, request.path, dict(request.query)))
        if state.get("override") is not None:
            status, text = state["override"]
            return web.Response(status=status, text=text)
        return await handler(request)

    async def by_key(request):
        pk = request.match_info["public_key"]
        for name, acc in state["accounts"].items():
            if acc["key"] == pk:
                return web.json_response({"accountName": name})
        return web.json_response({})

    async def validate(request):
        acc = state["accounts"].get(request.match_info["name"], {})
        return web.json_response({"isValid": acc.get("key") == request.match_info["public_key"]})

    async def account(request):
        acc = state["accounts"].get(request.match_info["name"])
        if acc is None:
            return web.json_response({"balance": 0, "isActive": False})
        return web.json_response({"balance": acc["balance"], "isActive": acc["active"]})

    async def txs(request):
        cursor = int(request.query.get("cursor", "0"))
        items = state["history"][cursor:cursor + PAGE_LIMIT]
        return web.json_response({"txs": items, "limit": PAGE_LIMIT})

    async def setup_price(request):
        return web.json_response({"price": "2.5000"})

    async def serialize(request):
        body = await request.json()
        state["serialize_bodies"].append(body)
        return web.json_response({"serializedTransaction": SERIALIZED_TX})

    async def send(request):
        body = await request.json()
        if state.get("send_error"):
            return web.Response(status=500, text=state["send_error"])
        digest = transaction_digest(MAINNET_CHAIN_ID, body["serializedTransaction"])
        if not all(verify(sig, digest, PUBLIC_KEY) for sig in body["signatures"]):
            return web.Response(status=401, text="Signature does not match key")
        state["sent"].append(body)
        return web.json_response({"txId": "cafebabe"})

    app = web.Application(middlewares=[override])
    app.router.add_get("/api/v1/account/key/{public_key}", by_key)
    app.router.add_get("/api/v1/account/{name}/validate/{public_key}", validate)
    app.router.add_get("/api/v1/account/{name}/txs", txs)
    app.router.add_get("/api/v1/account/{name}", account)
    app.router.add_get("/api/v1/accountSetupPrice", setup_price)
    app.router.add_post("/api/v1/tx/serialize", serialize)
    app.router.add_post("/api/v1/tx/send", send)
    return app


def _new_state() -> dict[str, Any]:
    return {
        "accounts": {ACCOUNT_NAME: {"key": PUBLIC_KEY, "balance": "12.3450", "active": True}},
        "history": _history(),
        "requests": [],
        "serialize_bodies": [],
        "sent": [],
        "override": None,
        "send_error": None,
    }


@asynccontextmanager
async def _running_node(state=None):
    state = state or _new_state()
    async with TestServer(_make_node_app(state)) as server:
        api = NodeAPI.from_url(str(server.make_url("/")))
        try:
            yield api, state
        finally:
            await api.close()


# ═══════════════════════════════════════════════════════════════════
#  Accounts
# ═══════════════════════════════════════════════════════════════════

class TestAccounts:
    @pytest.mark.asyncio
    async def test_validate_bound_key(self):
        async with _running_node() as (api, _):
            assert await api.accounts.validate(ACCOUNT_NAME, PUBLIC_KEY) is True

    @pytest.mark.asyncio
    async def test_validate_other_account(self):
        async with _running_node() as (api, _):
            assert await api.accounts.validate(SECOND_ACCOUNT_NAME, PUBLIC_KEY) is False

    @pytest.mark.asyncio
    async def test_validate_bad_name_makes_no_request(self):
        async with _running_node() as (api, state):
            assert await api.accounts.validate("Bad.Name", PUBLIC_KEY) is False
            assert await api.accounts.validate(None, PUBLIC_KEY) is False
            assert state["requests"] == []

    @pytest.mark.asyncio
    async def test_info(self):
        async with _running_node() as (api, _):
            info = await api.accounts.info(ACCOUNT_NAME)
            assert info.balance == "12.3450"
            assert info.is_active is True

    @pytest.mark.asyncio
    async def test_info_unknown_account(self):
        async with _running_node() as (api, _):
            info = await api.accounts.info(SECOND_ACCOUNT_NAME)
            assert info.is_active is False

    @pytest.mark.asyncio
    async def test_account_name_by_key(self):
        async with _running_node() as (api, _):
            assert await api.accounts.account_name_by_key(PUBLIC_KEY) == ACCOUNT_NAME

    @pytest.mark.asyncio
    async def test_account_name_by_unknown_key(self):
        async with _running_node() as (api, _):
            assert await api.accounts.account_name_by_key("EOSunknown") is None

    @pytest.mark.asyncio
    async def test_txs_first_page(self):
        async with _running_node() as (api, state):
            page = await api.accounts.txs(ACCOUNT_NAME)
            assert [tx["id"] for tx in page.transactions] == ["t1"]
            assert page.has_more is True
            assert page.cursor == PAGE_LIMIT
            assert state["requests"][-1][2] == {"cursor": "0"}

    @pytest.mark.asyncio
    async def test_txs_last_page(self):
        async with _running_node() as (api, _):
            page = await api.accounts.txs(ACCOUNT_NAME, cursor=PAGE_LIMIT)
            assert [tx["id"] for tx in page.transactions] == ["t3"]
            assert page.has_more is False
            assert page.cursor == PAGE_LIMIT


# ═══════════════════════════════════════════════════════════════════
#  Common / Transactions
# ═══════════════════════════════════════════════════════════════════

class TestCommonAndTransactions:
    @pytest.mark.asyncio
    async def test_setup_price(self):
        async with _running_node() as (api, _):
            assert await api.common.account_setup_price() == "2.5000"

    @pytest.mark.asyncio
    async def test_serialize_posts_actions(self):
        actions = [{"account": "eosio.token", "name": "transfer"}]
        async with _running_node() as (api, state):
            assert await api.transactions.serialize(actions) == SERIALIZED_TX
            assert state["serialize_bodies"] == [{"tx": actions}]

    @pytest.mark.asyncio
    async def test_propagate_rejected_signature(self):
        async with _running_node() as (api, _):
            foreign = sign(MAINNET_CHAIN_ID, SERIALIZED_TX, b"someone else")
            with pytest.raises(NodeError) as exc:
                await api.transactions.propagate(SERIALIZED_TX, [foreign])
            assert exc.value.status == 401


# ═══════════════════════════════════════════════════════════════════
#  Transport errors
# ═══════════════════════════════════════════════════════════════════

class TestTransport:
    @pytest.mark.asyncio
    async def test_error_status_raises_node_error(self):
        state = _new_state()
        state["override"] = (503, "node is syncing")
        async with _running_node(state) as (api, _):
            with pytest.raises(NodeError) as exc:
                await api.accounts.info(ACCOUNT_NAME)
            assert exc.value.status == 503
            assert exc.value.text == "node is syncing"

    @pytest.mark.asyncio
    async def test_invalid_json_raises_node_error(self):
        state = _new_state()
        state["override"] = (200, "<html>oops</html>")
        async with _running_node(state) as (api, _):
            with pytest.raises(NodeError):
                await api.accounts.info(ACCOUNT_NAME)

    @pytest.mark.asyncio
    async def test_empty_body_is_empty_object(self):
        state = _new_state()
        state["override"] = (200, "")
        async with _running_node(state) as (api, _):
            assert await api.accounts.validate(ACCOUNT_NAME, PUBLIC_KEY) is False

    @pytest.mark.asyncio
    async def test_borrowed_session_left_open(self):
        async with TestServer(_make_node_app(_new_state())) as server:
            async with aiohttp.ClientSession() as session:
                client = NodeClient(str(server.make_url("/")), session=session)
                async with client:
                    info = await NodeAPI(client).accounts.info(ACCOUNT_NAME)
                    assert info.is_active
                assert not session.closed

    def test_base_url_normalised(self):
        assert NodeClient("http://node:8080").base_url == "http://node:8080/"
        assert NodeClient("http://node:8080/").base_url == "http://node:8080/"


# ═══════════════════════════════════════════════════════════════════
#  Wallet over HTTP
# ═══════════════════════════════════════════════════════════════════

class TestWalletOverHTTP:
    @pytest.mark.asyncio
    async def test_load_and_send(self):
        async with _running_node() as (api, state):
            storage = MemoryStorage()
            wallet = EOSWallet(api, storage)
            await wallet.create(RANDOM_SEED)
            await wallet.load()
            assert wallet.state is WalletState.LOADED
            assert wallet.address == ACCOUNT_NAME
            assert wallet.balance == 123450
            assert storage.data == {"accountName": ACCOUNT_NAME, "balance": "123450"}

            tx_id = await wallet.create_transaction(SECOND_ACCOUNT_NAME, 10000, RANDOM_SEED, "x")
            assert tx_id == "cafebabe"
            assert wallet.balance == 113450
            data = state["serialize_bodies"][0]["tx"][0]["data"]
            assert data == {"from": ACCOUNT_NAME, "to": SECOND_ACCOUNT_NAME,
                            "quantity": "1.0000 EOS", "memo": "x"}
            assert len(state["sent"]) == 1

    @pytest.mark.asyncio
    async def test_send_resource_error_translated(self):
        state = _new_state()
        state["send_error"] = "CPU usage exceeded (billed 900us)"
        async with _running_node(state) as (api, _):
            wallet = EOSWallet(api, MemoryStorage())
            await wallet.create(RANDOM_SEED)
            await wallet.load()
            with pytest.raises(CPUExceededError):
                await wallet.create_transaction(SECOND_ACCOUNT_NAME, 10000, RANDOM_SEED)
            assert wallet.balance == 123450

    @pytest.mark.asyncio
    async def test_history_paging(self):
        async with _running_node() as (api, _):
            wallet = EOSWallet(api, MemoryStorage())
            await wallet.create(RANDOM_SEED)
            await wallet.load()
            first = await wallet.load_transactions()
            assert [tx.id for tx in first.transactions] == ["t1"]
            assert first.transactions[0].incoming is True
            assert first.transactions[0].amount == 15000
            second = await wallet.load_transactions(first.cursor)
            assert [tx.id for tx in second.transactions] == ["t3"]
            assert second.transactions[0].incoming is False
            assert second.has_more is False
            assert (await wallet.load_transaction("t1")).memo == "hi"
