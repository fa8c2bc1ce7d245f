# frontend/streamlit_app/core/state.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Session-scoped UI state helpers for the Receiptify pages.

This module centralizes the **default values** we expect to exist in
`st.session_state`, provides a single entry point to initialize them, and
owns the small "fetch once per query" helper pages use for listening items.

Why this exists
---------------
- Streamlit reruns the script on every widget interaction. Without a per-query
  memo each click on a color picker would re-hit the Spotify API.
- Keeping keys in one place prevents "magic strings" scattered across pages.

Design notes
------------
- Nothing here is persisted. Session state dies with the browser tab, which is
  exactly the lifetime a wallet session and fetched items should have.
- Initialization is **idempotent**: existing values are preserved.
"""

from collections.abc import Callable, Mapping
from typing import Any, Final, TypeVar

import streamlit as st

T = TypeVar("T")

DEFAULTS: Final[Mapping[str, Any]] = {
    # Bearer token consumed from the Spotify redirect URL.
    "SPOTIFY_TOKEN": None,
    # "tracks" | "artists" | "genres"
    "RECEIPT_TYPE": "tracks",
    # Spotify time range for tracks/artists.
    "TIME_RANGE": "short_term",
    # Last.fm username (as submitted) and period.
    "LASTFM_USER": "",
    "LASTFM_PERIOD": "1month",
    # Connected WalletSession, or None. Never persisted.
    "WALLET_SESSION": None,
    # Host environment, decided once per session.
    "HOST_ENV": None,
    # Last fetched listening items and the query key they belong to.
    "ITEMS_KEY": None,
    "ITEMS": None,
}

__all__ = ["DEFAULTS", "ensure_defaults", "items_for", "drop_items"]


def ensure_defaults() -> None:
    """Ensure all expected session keys exist with sane defaults."""
    for key, default_value in DEFAULTS.items():
        st.session_state.setdefault(key, default_value)


def items_for(key: tuple, loader: Callable[[], T]) -> T:
    """Return items for `key`, calling `loader` only when the query changed.

    A new key (different source, type, time range or limit) replaces the
    previous items wholesale. Exceptions from `loader` propagate and leave the
    previous entry cleared, so a failed fetch is never shown as stale data.
    """
    ss = st.session_state
    if ss.get("ITEMS_KEY") != key:
        ss["ITEMS_KEY"], ss["ITEMS"] = None, None
        ss["ITEMS"] = loader()
        ss["ITEMS_KEY"] = key
    return ss["ITEMS"]


def drop_items() -> None:
    """Forget fetched items (navigation away, logout)."""
    st.session_state["ITEMS_KEY"] = None
    st.session_state["ITEMS"] = None
