"""
Async REST client for the wallet node.

Built on ``aiohttp``.  Every call is a single request/response; calls are
issued one at a time by the wallet and nothing here retries, caches or
polls.  Transport failures (``aiohttp.ClientError``, timeouts) propagate
unchanged; any response with status >= 400 raises ``NodeError`` carrying
the response text so callers can match on it.

Endpoints (relative to the node root):

    GET  api/v1/account/{name}/validate/{publicKey}
    GET  api/v1/account/{name}
    GET  api/v1/account/{name}/txs?cursor=
    GET  api/v1/account/key/{publicKey}
    GET  api/v1/accountSetupPrice
    POST api/v1/tx/serialize
    POST api/v1/tx/send
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import aiohttp

from eos_wallet.errors import NodeError
from eos_wallet.validator import validate_account_name

logger = logging.getLogger("eos_wallet.node_api")

API_PREFIX = "api/v1/"
DEFAULT_TIMEOUT = 30.0


# ─── Response models ─────────────────────────────────────────────────────


@dataclass
class AccountInfo:
    balance: Any = 0
    is_active: bool = False


@dataclass
class TxPage:
    """One page of account history plus the cursor for the next page."""
    transactions: list[dict[str, Any]] = field(default_factory=list)
    has_more: bool = False
    cursor: int = 0


# ─── Transport ───────────────────────────────────────────────────────────


class NodeClient:
    """Thin JSON-over-HTTP wrapper around an ``aiohttp.ClientSession``.

    A session passed in is used as-is and left open on ``close()``; when
    none is given the client creates one lazily and owns it.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        payload: Any = None,
    ) -> Any:
        url = self.base_url + path.lstrip("/")
        if params:
            params = {k: str(v) for k, v in params.items()}
        logger.debug("%s %s params=%s", method, url, params)
        session = self._get_session()
        async with session.request(
            method, url, params=params, json=payload, timeout=self._timeout,
        ) as resp:
            text = await resp.text()
            if resp.status >= 400:
                logger.debug("%s %s -> %d %s", method, url, resp.status, text[:200])
                raise NodeError(resp.status, text)
        if not text:
            return {}
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise NodeError(resp.status, f"Invalid JSON from node: {text[:200]}") from exc

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> NodeClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


# ─── Endpoint groups ─────────────────────────────────────────────────────


class Accounts:
    def __init__(self, client: NodeClient):
        self._client = client

    async def validate(self, account_name: Optional[str], public_key: str) -> bool:
        """Whether *account_name* is bound to *public_key*.

        A missing or malformed name is never bound, so no request is made.
        """
        if not validate_account_name(account_name):
            return False
        data = await self._client.request(
            "GET", f"{API_PREFIX}account/{account_name}/validate/{public_key}",
        )
        return bool(data.get("isValid", False))

    async def info(self, account_name: str) -> AccountInfo:
        data = await self._client.request("GET", f"{API_PREFIX}account/{account_name}")
        return AccountInfo(
            balance=data.get("balance", 0),
            is_active=bool(data.get("isActive", False)),
        )

    async def txs(self, account_name: str, cursor: int = 0) -> TxPage:
        data = await self._client.request(
            "GET", f"{API_PREFIX}account/{account_name}/txs", params={"cursor": cursor},
        )
        raw = data.get("txs", [])
        has_more = len(raw) == data.get("limit")
        if has_more:
            cursor += len(raw)
        return TxPage(
            transactions=[tx for tx in raw if tx.get("isEosTransfer")],
            has_more=has_more,
            cursor=cursor,
        )

    async def account_name_by_key(self, public_key: str) -> Optional[str]:
        data = await self._client.request("GET", f"{API_PREFIX}account/key/{public_key}")
        return data.get("accountName") or None


class Common:
    def __init__(self, client: NodeClient):
        self._client = client

    async def account_setup_price(self) -> Any:
        data = await self._client.request("GET", f"{API_PREFIX}accountSetupPrice")
        return data.get("price")


class Transactions:
    def __init__(self, client: NodeClient):
        self._client = client

    async def serialize(self, actions: list[dict[str, Any]]) -> str:
        data = await self._client.request(
            "POST", f"{API_PREFIX}tx/serialize", payload={"tx": actions},
        )
        return data["serializedTransaction"]

    async def propagate(self, serialized_transaction: str, signatures: list[str]) -> str:
        data = await self._client.request(
            "POST",
            f"{API_PREFIX}tx/send",
            payload={
                "serializedTransaction": serialized_transaction,
                "signatures": signatures,
            },
        )
        return data["txId"]


class NodeAPI:
    """Endpoint groups sharing one ``NodeClient``."""

    def __init__(self, client: NodeClient):
        self.client = client
        self.accounts = Accounts(client)
        self.common = Common(client)
        self.transactions = Transactions(client)

    @classmethod
    def from_url(cls, base_url: str, *, timeout: float = DEFAULT_TIMEOUT) -> NodeAPI:
        return cls(NodeClient(base_url, timeout=timeout))

    async def close(self) -> None:
        await self.client.close()
