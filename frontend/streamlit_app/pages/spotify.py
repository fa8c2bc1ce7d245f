# frontend/streamlit_app/pages/spotify.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Spotify receipt

Flow
----
1) The OAuth backend redirects here with `?access_token=...`. The token is
   consumed once, kept in session state, and removed from the URL.
2) Receipt type (tracks / artists / genres) and time range pick the query;
   items are fetched when the query (or item count) changes.
3) The receipt is rendered with the current customization, offered as PNG and
   PDF, and can be minted on Base.

Genres are always computed from all-time top artists, so the time-range
selector is hidden for them.
"""

from collections.abc import Sequence

import requests
import streamlit as st

from core.clients import get_http
from core.config import settings
from core.constants import (
    GENRE_SOURCE_RANGE,
    GENRE_SUBTITLE,
    MAX_ITEMS,
    SPOTIFY_RANGE_BUTTONS,
    SPOTIFY_TIME_RANGES,
)
from core.errors import ListeningApiError, RenderError, TokenExpiredError
from core.models import ListeningProfile, MintPayload, ReceiptStyle
from core.state import drop_items, items_for
from services.auth import consume_access_token, login_url
from services.listening import SpotifyClient
from services.receipt import (
    ReceiptDocument,
    artists_document,
    capture_png,
    genres_document,
    load_images,
    tracks_document,
)
from ui.components import (
    RECEIPT_TYPES,
    customization_panel,
    download_buttons,
    listening_error,
    mint_panel,
    receipt_preview,
    receipt_type_picker,
    time_range_picker,
)
from ui.keys import k
from ui.layout import stack_or_columns_spec

PAGE = "spotify"


def _load(
    client: SpotifyClient,
    http: requests.Session,
    receipt_type: str,
    time_range: str,
    limit: int,
) -> tuple[ListeningProfile, list, dict[str, bytes | None]]:
    """Profile, items and (for artists) their images for one query."""
    profile = client.profile()
    images: dict[str, bytes | None] = {}
    if receipt_type == "tracks":
        items: list = client.top_tracks(time_range, limit)
    elif receipt_type == "artists":
        items = client.top_artists(time_range, limit)
        everything = artists_document(
            items,
            user_name=profile.display_name,
            time_range_label="",
            style=ReceiptStyle(item_limit=MAX_ITEMS),
        )
        images = load_images(everything, http, timeout=settings.HTTP_TIMEOUT)
    else:
        items = client.top_genres()
    return profile, items, images


def _document(
    receipt_type: str,
    items: Sequence,
    profile: ListeningProfile,
    time_range: str,
    style: ReceiptStyle,
) -> ReceiptDocument:
    common = dict(
        user_name=profile.display_name, style=style, profile_url=profile.profile_url
    )
    if receipt_type == "tracks":
        return tracks_document(
            items, time_range_label=SPOTIFY_TIME_RANGES[time_range], **common
        )
    if receipt_type == "artists":
        return artists_document(
            items, time_range_label=SPOTIFY_TIME_RANGES[time_range], **common
        )
    return genres_document(items, **common)


def render(ctx: dict) -> None:
    ss = st.session_state
    login = login_url(settings.BACKEND_URL)

    token = consume_access_token(st.query_params)
    if token:
        ss["SPOTIFY_TOKEN"] = token
        drop_items()

    st.header("Spotify receipt")
    if not ss["SPOTIFY_TOKEN"]:
        st.info("Log in with Spotify to print your receipt.")
        st.link_button("Log in with Spotify", login, type="primary")
        return

    receipt_type = receipt_type_picker(PAGE)
    if receipt_type != ss["RECEIPT_TYPE"]:
        drop_items()
        ss["RECEIPT_TYPE"] = receipt_type

    if receipt_type == "genres":
        time_range = GENRE_SOURCE_RANGE
        st.caption(GENRE_SUBTITLE.capitalize())
    else:
        time_range = time_range_picker(PAGE, SPOTIFY_RANGE_BUTTONS, ss["TIME_RANGE"])
        ss["TIME_RANGE"] = time_range

    preview_col, controls_col = stack_or_columns_spec(
        [3, 2], stacked=not ctx["SIDE_BY_SIDE"]
    )
    with controls_col:
        style = customization_panel(PAGE)

    limit = style.item_limit if receipt_type != "genres" else 0
    http = get_http()
    client = SpotifyClient(
        ss["SPOTIFY_TOKEN"],
        session=http,
        api_base=settings.SPOTIFY_API_BASE,
        timeout=settings.HTTP_TIMEOUT,
    )
    try:
        with st.spinner("Loading your listening history..."):
            profile, items, images = items_for(
                (PAGE, receipt_type, time_range, limit),
                lambda: _load(client, http, receipt_type, time_range, limit),
            )
    except TokenExpiredError as e:
        ss["SPOTIFY_TOKEN"] = None
        listening_error(e, login)
        return
    except ListeningApiError as e:
        listening_error(e, login)
        return

    document = _document(receipt_type, items, profile, time_range, style)

    def capture() -> bytes:
        return capture_png(document, style, images, font_path=settings.RECEIPT_FONT_PATH)

    try:
        png = capture()
    except RenderError as e:
        st.error(str(e))
        return

    with preview_col:
        receipt_preview(png, style)
        download_buttons(
            PAGE,
            png,
            f"{profile.display_name} {RECEIPT_TYPES[receipt_type]}",
            subtitle=document.lines[0],
        )

    with controls_col:
        mint_panel(
            PAGE,
            ctx=ctx,
            capture=capture,
            payload=MintPayload(
                user_name=profile.display_name,
                time_range=time_range,
                receipt_type=receipt_type,
                items=tuple(items[: style.item_limit]),
                customization=style.as_customization(),
            ),
        )
        st.markdown("---")
        if st.button("Log out of Spotify", key=k(PAGE, "logout")):
            ss["SPOTIFY_TOKEN"] = None
            drop_items()
            st.rerun()
