# frontend/streamlit_app/services/wallet.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Wallet / chain connector (EIP-1193 over JSON-RPC, via web3.py).

The wallet holds the keys; this process only asks. Every method here is one
blocking JSON-RPC round trip to the wallet endpoint, and every prompt the user
can decline surfaces as `UserRejectedError`.

Host environments
-----------------
- **Mini-app host**: the page was opened by an embedding client (`miniApp=1`)
  that exposes its own wallet bridge (`MINIAPP_WALLET_URL`). The bridge is
  usually pre-authorized, so `eth_accounts` is tried before prompting.
- **Browser**: a desktop/browser wallet's JSON-RPC endpoint
  (`WALLET_RPC_URL`). Always prompts with `eth_requestAccounts`.

Chain handling
--------------
`ensure_chain` compares `eth_chainId` with the target and issues
`wallet_switchEthereumChain`; on 4902 (unknown chain) it falls back to
`wallet_addEthereumChain` with the full chain parameters. No retries.
"""

import logging
from collections.abc import Mapping
from typing import Any

import requests
from web3 import Web3
from web3.exceptions import (
    ContractLogicError,
    ProviderConnectionError,
    TimeExhausted,
    Web3RPCError,
)
from web3.types import RPCEndpoint

from core.constants import SAFE_MINT_ABI, UNRECOGNIZED_CHAIN, USER_REJECTED
from core.errors import (
    ChainSwitchError,
    MintError,
    UserRejectedError,
    WalletRpcError,
    WalletUnavailableError,
)
from core.models import ChainParams, HostEnvironment, WalletSession

logger = logging.getLogger(__name__)

NO_WALLET_MESSAGE = "No wallet available. Please install or unlock a wallet."
REJECTED_MESSAGE = "Request rejected in wallet."
SWITCH_MESSAGE = "Failed to switch to Base network."
ADD_MESSAGE = "Failed to add Base network to wallet."
INVALID_CHAIN_MESSAGE = "Wallet returned an invalid chain id."

_TRUTHY = {"1", "true", "yes"}


def detect_environment(
    query_params: Mapping[str, Any], miniapp_wallet_url: str
) -> HostEnvironment:
    """Decide the host environment from the launch URL and configuration."""
    flag = query_params.get("miniApp", "")
    if isinstance(flag, list):
        flag = flag[-1] if flag else ""
    if str(flag).strip().lower() in _TRUTHY and miniapp_wallet_url:
        return HostEnvironment.MINIAPP
    return HostEnvironment.BROWSER


def _parse_chain_id(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not isinstance(value, str):
        raise WalletRpcError(None, INVALID_CHAIN_MESSAGE)
    try:
        return int(value, 16) if value.lower().startswith("0x") else int(value)
    except ValueError as e:
        raise WalletRpcError(None, INVALID_CHAIN_MESSAGE) from e


class WalletConnector:
    """Speaks to one wallet endpoint through `w3.provider`."""

    def __init__(self, w3: Web3, environment: HostEnvironment) -> None:
        self._w3 = w3
        self.environment = environment

    # -- raw RPC ------------------------------------------------------------------

    def _request(self, method: str, params: list[Any] | None = None) -> Any:
        try:
            response = self._w3.provider.make_request(RPCEndpoint(method), params or [])
        except (requests.RequestException, ProviderConnectionError, OSError) as e:
            logger.warning("Wallet endpoint unreachable on %s: %s", method, e)
            raise WalletUnavailableError(NO_WALLET_MESSAGE) from e
        except ValueError as e:
            # Non-JSON body, e.g. a proxy error page.
            logger.warning("Wallet endpoint sent a malformed reply to %s: %s", method, e)
            raise WalletUnavailableError(NO_WALLET_MESSAGE) from e
        if not isinstance(response, Mapping):
            logger.warning("Wallet endpoint sent a non-object reply to %s", method)
            raise WalletUnavailableError(NO_WALLET_MESSAGE)

        error = response.get("error")
        if error:
            code = error.get("code") if isinstance(error, Mapping) else None
            message = (
                error.get("message") if isinstance(error, Mapping) else str(error)
            ) or f"{method} failed"
            logger.info("Wallet returned error %s on %s: %s", code, method, message)
            if code == USER_REJECTED:
                raise UserRejectedError(REJECTED_MESSAGE)
            raise WalletRpcError(code, message)
        return response.get("result")

    # -- accounts -------------------------------------------------------------------

    def connect(self) -> WalletSession:
        """Return the active account, prompting the user when needed."""
        accounts: list[str] = []
        if self.environment == HostEnvironment.MINIAPP:
            accounts = self._request("eth_accounts") or []
        if not accounts:
            accounts = self._request("eth_requestAccounts") or []
        if not accounts:
            raise WalletUnavailableError(NO_WALLET_MESSAGE)

        session = WalletSession(
            address=Web3.to_checksum_address(accounts[0]),
            chain_id=self.chain_id(),
            environment=self.environment,
        )
        logger.info(
            "Wallet connected (%s) on chain %s", session.environment.value, session.chain_id
        )
        return session

    def chain_id(self) -> int:
        return _parse_chain_id(self._request("eth_chainId"))

    # -- chain ----------------------------------------------------------------------

    def ensure_chain(self, chain: ChainParams) -> bool:
        """Make `chain` the wallet's active chain.

        Returns:
          True if a switch (or add) was requested, False if already on `chain`.

        Raises:
          UserRejectedError: the user declined the switch or add prompt.
          ChainSwitchError: the wallet refused for any other reason.
        """
        if self.chain_id() == chain.chain_id:
            return False

        logger.info("Requesting switch to chain %s (%s)", chain.chain_id, chain.hex_id)
        try:
            self._request("wallet_switchEthereumChain", [{"chainId": chain.hex_id}])
        except WalletRpcError as e:
            if e.code != UNRECOGNIZED_CHAIN:
                raise ChainSwitchError(SWITCH_MESSAGE) from e
            logger.info("Chain %s unknown to wallet; requesting add", chain.chain_id)
            try:
                self._request("wallet_addEthereumChain", [chain.add_chain_params()])
            except WalletRpcError as add_err:
                raise ChainSwitchError(ADD_MESSAGE) from add_err
        return True

    # -- contract -------------------------------------------------------------------

    def send_safe_mint(
        self, session: WalletSession, contract_address: str, token_uri: str
    ) -> str:
        """Submit `safeMint(token_uri)` from the session account; return tx hash."""
        if not contract_address:
            raise MintError("Contract address is not configured.")
        try:
            contract = self._w3.eth.contract(
                address=Web3.to_checksum_address(contract_address), abi=SAFE_MINT_ABI
            )
            tx_hash = contract.functions.safeMint(token_uri).transact(
                {"from": session.address}
            )
        except Web3RPCError as e:
            error = (e.rpc_response or {}).get("error")
            code = error.get("code") if isinstance(error, Mapping) else None
            if code == USER_REJECTED:
                raise UserRejectedError(REJECTED_MESSAGE) from e
            raise MintError(f"Mint transaction failed: {e.message}") from e
        except ContractLogicError as e:
            raise MintError(f"Mint transaction would revert: {e}") from e
        except (requests.RequestException, ProviderConnectionError) as e:
            raise WalletUnavailableError(NO_WALLET_MESSAGE) from e
        except ValueError as e:
            raise MintError(f"Invalid contract address: {contract_address}") from e

        return tx_hash if isinstance(tx_hash, str) else Web3.to_hex(tx_hash)

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> Mapping[str, Any]:
        """Block until `tx_hash` is mined or `timeout` seconds pass."""
        try:
            return self._w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        except TimeExhausted as e:
            raise MintError(
                f"Transaction {tx_hash} was not mined within {int(timeout)}s."
            ) from e
        except (requests.RequestException, ProviderConnectionError) as e:
            raise WalletUnavailableError(NO_WALLET_MESSAGE) from e
