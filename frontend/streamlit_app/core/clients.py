# frontend/streamlit_app/core/clients.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Client factories for the network services used by the Receiptify pages.

This module exposes two cached constructors:

- `get_http()`          → `requests.Session` shared for music APIs, images
                          and the upload backend
- `get_web3(endpoint)`  → `web3.Web3` bound to one wallet JSON-RPC endpoint

Both are wrapped with `@st.cache_resource` so that:
  * A single client instance is created per Streamlit process, avoiding
    repeated socket creation and TLS handshakes.
  * The cached instance persists across reruns triggered by UI interaction.
  * Objects are stored as resources (not pickled), which is appropriate for
    network clients.

Nothing user-specific is cached here: bearer tokens travel per request and the
connected account lives in `st.session_state["WALLET_SESSION"]`.

Failure behavior:
  * Neither factory performs a health check. An unreachable wallet surfaces as
    `WalletUnavailableError` from the connector on first use.
"""

import requests
import streamlit as st
from web3 import Web3

from .config import settings

_USER_AGENT = "Receiptify/1.0 (+streamlit)"


@st.cache_resource(show_spinner=False)
def get_http() -> requests.Session:
    """Construct (once) and return a shared HTTP session."""
    session = requests.Session()
    session.headers.update({"User-Agent": _USER_AGENT})
    return session


@st.cache_resource(show_spinner=False)
def get_web3(endpoint: str) -> Web3:
    """
    Construct (once per endpoint) a Web3 instance for a wallet JSON-RPC URL.

    Args:
        endpoint: HTTP(S) URL of the browser/desktop wallet or the mini-app
            host bridge.

    Notes:
        The wallet, not this process, holds keys: `eth_sendTransaction` is
        forwarded to it and the user approves in the wallet's own dialog.
    """
    return Web3(
        Web3.HTTPProvider(
            endpoint,
            request_kwargs={"timeout": settings.WALLET_PROMPT_TIMEOUT},
            # Wallet prompts must not be re-sent behind the user's back.
            exception_retry_configuration=None,
        )
    )
