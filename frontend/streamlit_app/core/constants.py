# frontend/streamlit_app/core/constants.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Chain parameters, wallet error codes and music-service lookup tables.

This module centralizes:
  1) **Base mainnet** parameters used for chain checks and the
     `wallet_addEthereumChain` fallback.
  2) **EIP-1193 provider error codes** the wallet connector branches on.
  3) **Time-range labels** printed on receipts for Spotify and Last.fm.
  4) The minimal `safeMint(string)` ABI of the receipt NFT contract.

Design notes
------------
- Constants are typed `Final` to communicate immutability and to help
  static analyzers catch accidental reassignment.
- Label tables keep a stable insertion order; the UI renders buttons in
  that order.
"""

from typing import Any, Final

from core.models import ChainParams

# ---------------------------------------------------------------------------
# Base mainnet
# ---------------------------------------------------------------------------

#: Target chain for minting. 8453 == 0x2105.
BASE_MAINNET: Final[ChainParams] = ChainParams(
    chain_id=8453,
    name="Base Mainnet",
    currency_name="Ethereum",
    currency_symbol="ETH",
    currency_decimals=18,
    rpc_urls=("https://mainnet.base.org",),
    explorer_urls=("https://basescan.org",),
)

# ---------------------------------------------------------------------------
# EIP-1193 / wallet JSON-RPC error codes
# ---------------------------------------------------------------------------

#: The user rejected the request in the wallet dialog.
USER_REJECTED: Final[int] = 4001

#: The wallet does not know the requested chain (MetaMask convention, also
#: honoured by most injected and desktop wallets).
UNRECOGNIZED_CHAIN: Final[int] = 4902

# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------

#: Only the function this app calls.
SAFE_MINT_ABI: Final[list[dict[str, Any]]] = [
    {
        "name": "safeMint",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "uri", "type": "string"}],
        "outputs": [],
    }
]

# ---------------------------------------------------------------------------
# Time ranges
# ---------------------------------------------------------------------------

#: Spotify `time_range` → receipt subtitle.
SPOTIFY_TIME_RANGES: Final[dict[str, str]] = {
    "short_term": "LAST MONTH",
    "medium_term": "LAST 6 MONTHS",
    "long_term": "ALL TIME",
}

#: Spotify `time_range` → short button label.
SPOTIFY_RANGE_BUTTONS: Final[dict[str, str]] = {
    "short_term": "Month",
    "medium_term": "6 Months",
    "long_term": "All Time",
}

#: Last.fm `period` → receipt subtitle.
LASTFM_PERIODS: Final[dict[str, str]] = {
    "7day": "LAST 7 DAYS",
    "1month": "LAST MONTH",
    "6month": "LAST 6 MONTHS",
    "12month": "LAST YEAR",
    "overall": "ALL TIME",
}

#: Genre receipts are always computed from all-time top artists.
GENRE_SOURCE_RANGE: Final[str] = "long_term"
GENRE_SOURCE_LIMIT: Final[int] = 50
GENRE_SUBTITLE: Final[str] = "BASED ON ALL-TIME LISTENING"

#: Spotify caps `limit` at 50 for top items.
MAX_ITEMS: Final[int] = 50

#: Quick-pick item counts in the customization panel.
ITEM_LIMIT_PRESETS: Final[tuple[int, ...]] = (10, 15, 25)
