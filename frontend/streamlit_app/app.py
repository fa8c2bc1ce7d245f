# frontend/streamlit_app/app.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

__doc__ = """Receiptify (Streamlit).

Streamlit entrypoint. Wires up logging, page chrome, the wallet sidebar and
the three routes:

  /          Home     choose Spotify or Last.fm
  /spotify   Spotify  OAuth redirect target; tracks / artists / genres
  /lastfm    Last.fm  username + period; tracks with play counts

Design notes:
* Sibling packages (ui/, pages/, core/, services/) are imported by adding this
  directory to sys.path, so `streamlit run app.py` works from any cwd.
* Page modules expose `render(ctx)` and are side-effect free on import. The
  sidebar builds `ctx` once per run and every page receives it.
* Keep this file thin: fetching, rendering and minting live in services/.
"""

# ────────────────────── sys.path bootstrap for local packages ─────────────────
import pathlib
import sys

APP_DIR = pathlib.Path(__file__).resolve().parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))
# ──────────────────────────────────────────────────────────────────────────────

import logging

import streamlit as st

from core.config import settings
from pages import home, lastfm, spotify
from ui.layout import configure_page
from ui.sidebar import render_sidebar

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(levelname)s: %(name)s: %(message)s",
)

configure_page(title="Receiptify")

ctx: dict = render_sidebar()


def home_page() -> None:
    home.render(ctx)


def spotify_page() -> None:
    spotify.render(ctx)


def lastfm_page() -> None:
    lastfm.render(ctx)


PAGES = {
    "home": st.Page(home_page, title="Home", icon="🧾", default=True),
    "spotify": st.Page(spotify_page, title="Spotify", icon="🎧", url_path="spotify"),
    "lastfm": st.Page(lastfm_page, title="Last.fm", icon="🎵", url_path="lastfm"),
}
ctx["PAGES"] = PAGES

st.navigation(list(PAGES.values())).run()
