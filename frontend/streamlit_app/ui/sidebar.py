# frontend/streamlit_app/ui/sidebar.py
# SPDX-License-Identifier: Apache-2.0
"""Sidebar: host environment, wallet connection and layout preference.

Behavior
--------
- The host environment (mini-app vs browser) is decided once per session from
  the launch URL's `miniApp` flag and `MINIAPP_WALLET_URL`.
- "Connect wallet" asks the wallet for an account and stores the resulting
  `WalletSession` in session state. It is never persisted; a page reload
  forgets it. "Disconnect" only forgets it locally.
- A chain badge shows whether the wallet is on Base. Minting switches the
  chain itself, so a mismatch here is informational.

Returns
-------
`render_sidebar()` returns the context dictionary passed to page renderers:
- `settings`: the loaded settings instance.
- `HOST_ENV`: `HostEnvironment`.
- `WALLET_SESSION`: `WalletSession | None`.
- `SIDE_BY_SIDE`: bool layout preference.
"""

from __future__ import annotations

import logging
from typing import Any

import streamlit as st

from core.config import settings
from core.constants import BASE_MAINNET
from core.errors import ReceiptifyError
from core.models import HostEnvironment
from core.state import ensure_defaults
from services.wallet import detect_environment
from ui.components import connector_for, short_addr

logger = logging.getLogger(__name__)

_ENV_LABELS = {
    HostEnvironment.MINIAPP: "Mini-app host wallet",
    HostEnvironment.BROWSER: "Browser wallet",
}


def _wallet_block(env: HostEnvironment) -> None:
    ss = st.session_state
    session = ss["WALLET_SESSION"]

    if session is None:
        if st.sidebar.button("Connect wallet"):
            try:
                ss["WALLET_SESSION"] = connector_for(env).connect()
            except ReceiptifyError as e:
                st.sidebar.error(str(e))
            else:
                st.rerun()
        return

    on_base = session.chain_id == BASE_MAINNET.chain_id
    badge = "✅ Base" if on_base else f"⚠️ chain {session.chain_id}"
    st.sidebar.write(f"**Connected**  `{short_addr(session.address)}`  {badge}")
    if not on_base:
        st.sidebar.caption("You will be asked to switch to Base when minting.")
    if st.sidebar.button("Disconnect"):
        ss["WALLET_SESSION"] = None
        st.rerun()


def render_sidebar() -> dict[str, Any]:
    """Render the sidebar and return the page context."""
    ensure_defaults()
    ss = st.session_state

    if ss["HOST_ENV"] is None:
        ss["HOST_ENV"] = detect_environment(st.query_params, settings.MINIAPP_WALLET_URL)
        logger.info("Host environment: %s", ss["HOST_ENV"].value)
    env: HostEnvironment = ss["HOST_ENV"]

    st.sidebar.header("Wallet")
    st.sidebar.caption(_ENV_LABELS[env])
    _wallet_block(env)

    st.sidebar.markdown("---")
    side_by_side = st.sidebar.toggle("Side-by-side layout", value=True)
    if settings.CONTRACT_ADDRESS:
        st.sidebar.caption(f"Contract `{short_addr(settings.CONTRACT_ADDRESS)}` on Base")

    return dict(
        settings=settings,
        HOST_ENV=env,
        WALLET_SESSION=ss["WALLET_SESSION"],
        SIDE_BY_SIDE=side_by_side,
    )
