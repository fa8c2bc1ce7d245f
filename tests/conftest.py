"""Shared fakes: HTTP sessions and a web3-shaped wallet."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
import requests

WALLET_ADDRESS = "0x52908400098527886e0f7030069857d2e4169ee7"
CONTRACT_ADDRESS = "0xde709f2102306220921060314715629080e2fb77"
TX_HASH_BYTES = bytes.fromhex("ab" * 32)


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        *,
        content: bytes = b"",
        json_error: bool = False,
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self._json_error = json_error

    def json(self) -> Any:
        if self._json_error:
            raise ValueError("not json")
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


Responder = FakeResponse | Exception | Callable[[str, dict], Any]


class FakeSession:
    """Queue-driven stand-in for `requests.Session`.

    Each call consumes the next responder; a responder may be a response, an
    exception to raise, or a callable `(url, kwargs) -> FakeResponse`.
    """

    def __init__(self, *responders: Responder, log: list | None = None) -> None:
        self._queue = list(responders)
        self.calls: list[tuple[str, str, dict]] = []
        self.log = log

    def _next(self, method: str, url: str, kwargs: dict) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        if self.log is not None:
            self.log.append(f"http:{method}")
        if not self._queue:
            raise AssertionError(f"unexpected {method} {url}")
        responder = self._queue.pop(0)
        if isinstance(responder, Exception):
            raise responder
        if callable(responder):
            return responder(url, kwargs)
        return responder

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("GET", url, kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("POST", url, kwargs)


# ───────────────────────────── wallet fakes ─────────────────────────────


def rpc_error(code: int, message: str = "error") -> dict:
    return {"error": {"code": code, "message": message}}


class FakeProvider:
    """`make_request` driven by per-method handlers.

    A handler is a result value, an `rpc_error(...)` dict, an exception, or a
    list of those consumed one per call.
    """

    def __init__(self, handlers: dict[str, Any], log: list) -> None:
        self.handlers = handlers
        self.log = log

    def make_request(self, method: str, params: Any) -> dict:
        self.log.append((str(method), params))
        if method not in self.handlers:
            raise AssertionError(f"unexpected RPC {method}")
        handler = self.handlers[method]
        if isinstance(handler, list) and handler and isinstance(handler[0], _Step):
            handler = handler.pop(0).value
        if isinstance(handler, Exception):
            raise handler
        if isinstance(handler, dict) and "error" in handler:
            return {"jsonrpc": "2.0", "id": 1, **handler}
        return {"jsonrpc": "2.0", "id": 1, "result": handler}


class _Step:
    def __init__(self, value: Any) -> None:
        self.value = value


def steps(*values: Any) -> list:
    """Handler that answers successive calls with successive values."""
    return [_Step(v) for v in values]


class _FakeFunctions:
    def __init__(self, eth: "FakeEth") -> None:
        self._eth = eth

    def safeMint(self, uri: str) -> "_FakeCall":
        return _FakeCall(self._eth, uri)


class _FakeCall:
    def __init__(self, eth: "FakeEth", uri: str) -> None:
        self._eth = eth
        self._uri = uri

    def transact(self, tx: dict) -> bytes:
        self._eth.log.append(("safeMint", self._uri, tx.get("from")))
        if self._eth.transact_error is not None:
            raise self._eth.transact_error
        return self._eth.tx_hash


class _FakeContract:
    def __init__(self, eth: "FakeEth", address: str) -> None:
        self.address = address
        self.functions = _FakeFunctions(eth)


class FakeEth:
    def __init__(self, log: list) -> None:
        self.log = log
        self.tx_hash = TX_HASH_BYTES
        self.receipt: Any = {"status": 1, "blockNumber": 1}
        self.transact_error: Exception | None = None
        self.receipt_error: Exception | None = None

    def contract(self, address: str, abi: list) -> _FakeContract:
        self.log.append(("contract", address))
        return _FakeContract(self, address)

    def wait_for_transaction_receipt(self, tx_hash: str, timeout: float) -> Any:
        self.log.append(("wait", tx_hash))
        if self.receipt_error is not None:
            raise self.receipt_error
        return self.receipt


class FakeW3:
    def __init__(self, handlers: dict[str, Any]) -> None:
        self.log: list = []
        self.provider = FakeProvider(handlers, self.log)
        self.eth = FakeEth(self.log)

    def methods(self) -> list[str]:
        return [entry[0] for entry in self.log]


@pytest.fixture
def base_wallet() -> dict[str, Any]:
    """Handlers for a browser wallet already on Base."""
    return {
        "eth_requestAccounts": [WALLET_ADDRESS],
        "eth_accounts": [WALLET_ADDRESS],
        "eth_chainId": "0x2105",
    }
