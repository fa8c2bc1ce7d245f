# frontend/streamlit_app/pages/lastfm.py
# SPDX-License-Identifier: Apache-2.0
"""Streamlit page: Last.fm receipt.

No login: any public profile works with the app's API key. Rows lead with the
play count for the chosen period.
"""

from __future__ import annotations

from urllib.parse import quote

import streamlit as st

from core.clients import get_http
from core.config import settings
from core.constants import LASTFM_PERIODS
from core.errors import ListeningApiError, RenderError
from core.models import MintPayload
from core.state import drop_items, items_for
from services.listening import LastFmClient
from services.receipt import capture_png, lastfm_document
from ui.components import (
    customization_panel,
    download_buttons,
    listening_error,
    mint_panel,
    receipt_preview,
    time_range_picker,
)
from ui.keys import k
from ui.layout import stack_or_columns_spec

PAGE = "lastfm"

_PERIOD_BUTTONS = {period: label.title() for period, label in LASTFM_PERIODS.items()}


def render(ctx: dict) -> None:
    ss = st.session_state
    st.header("Last.fm receipt")

    if not settings.LASTFM_API_KEY:
        st.warning("Last.fm is not configured: set LASTFM_API_KEY.")
        return

    with st.form(k(PAGE, "form")):
        username = st.text_input(
            "Last.fm username", value=ss["LASTFM_USER"], key=k(PAGE, "username")
        )
        submitted = st.form_submit_button("Print receipt", type="primary")
    if submitted and username.strip() != ss["LASTFM_USER"]:
        ss["LASTFM_USER"] = username.strip()
        drop_items()

    user = ss["LASTFM_USER"]
    if not user:
        st.info("Enter a Last.fm username to get started.")
        return

    period = time_range_picker(PAGE, _PERIOD_BUTTONS, ss["LASTFM_PERIOD"])
    ss["LASTFM_PERIOD"] = period

    preview_col, controls_col = stack_or_columns_spec(
        [3, 2], stacked=not ctx["SIDE_BY_SIDE"]
    )
    with controls_col:
        style = customization_panel(PAGE)

    client = LastFmClient(
        settings.LASTFM_API_KEY,
        session=get_http(),
        api_root=settings.LASTFM_API_ROOT,
        timeout=settings.HTTP_TIMEOUT,
    )
    try:
        with st.spinner("Loading scrobbles..."):
            tracks = items_for(
                (PAGE, user.lower(), period, style.item_limit),
                lambda: client.top_tracks(user, period, style.item_limit),
            )
    except ListeningApiError as e:
        listening_error(e)
        return

    document = lastfm_document(
        tracks,
        user_name=user.upper(),
        period_label=LASTFM_PERIODS[period],
        style=style,
        profile_url=f"https://www.last.fm/user/{quote(user)}",
    )

    def capture() -> bytes:
        return capture_png(document, style, {}, font_path=settings.RECEIPT_FONT_PATH)

    try:
        png = capture()
    except RenderError as e:
        st.error(str(e))
        return

    with preview_col:
        if not tracks:
            st.info("No scrobbles for this period yet.")
        receipt_preview(png, style)
        download_buttons(PAGE, png, f"{user} top tracks", subtitle=LASTFM_PERIODS[period])

    with controls_col:
        mint_panel(
            PAGE,
            ctx=ctx,
            capture=capture,
            payload=MintPayload(
                user_name=user.upper(),
                time_range=period,
                receipt_type="tracks",
                items=tuple(tracks),
                customization=style.as_customization(),
            ),
        )
