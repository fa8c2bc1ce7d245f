# frontend/streamlit_app/pages/home.py
# SPDX-License-Identifier: Apache-2.0
"""Landing page: pick a listening source."""

from __future__ import annotations

import streamlit as st

from services.auth import login_url


def render(ctx: dict) -> None:
    st.title("🧾 Receiptify")
    st.write(
        "Your top tracks, artists and genres printed as a receipt. "
        "Download it, print it, or mint it as an NFT on Base."
    )

    left, right = st.columns(2)
    with left:
        st.subheader("Spotify")
        st.caption("Top tracks, artists and genres for the last month, 6 months or all time.")
        st.link_button(
            "Log in with Spotify",
            login_url(ctx["settings"].BACKEND_URL),
            type="primary",
        )
    with right:
        st.subheader("Last.fm")
        st.caption("Top tracks with play counts for any public Last.fm profile.")
        st.page_link(ctx["PAGES"]["lastfm"], label="Use a Last.fm username", icon="🎵")
