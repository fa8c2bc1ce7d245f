"""Spotify page flow driven through Streamlit's AppTest harness."""

from __future__ import annotations

import pytest
from streamlit.testing.v1 import AppTest

from conftest import FakeResponse, FakeSession
from core.config import settings
from services.auth import login_url
from services.listening import TOKEN_MESSAGE

PROFILE = {
    "id": "alice",
    "display_name": "alice",
    "external_urls": {"spotify": "https://open.spotify.com/user/alice"},
}
TRACKS = {
    "items": [
        {
            "id": "t1",
            "name": "Song",
            "artists": [{"name": "Band"}],
            "duration_ms": 201000,
        }
    ]
}


def _spotify_script() -> None:
    from core.state import ensure_defaults
    from pages import spotify

    ensure_defaults()
    spotify.render({"SIDE_BY_SIDE": True, "HOST_ENV": None, "WALLET_SESSION": None})


def _spotify_api(url: str, kwargs: dict) -> FakeResponse:
    if url.endswith("/me"):
        return FakeResponse(200, PROFILE)
    if url.endswith("/me/top/tracks"):
        return FakeResponse(200, TRACKS)
    raise AssertionError(f"unexpected GET {url}")


@pytest.fixture
def page(monkeypatch):
    def install(*responders) -> FakeSession:
        from pages import spotify

        http = FakeSession(*responders)
        monkeypatch.setattr(spotify, "get_http", lambda: http)
        return http

    return install


def test_without_token_offers_login(page) -> None:
    http = page()
    at = AppTest.from_function(_spotify_script).run(timeout=30)

    assert not at.exception
    assert at.info[0].value == "Log in with Spotify to print your receipt."
    assert http.calls == []


def test_redirect_token_moves_into_session(page) -> None:
    http = page(_spotify_api, _spotify_api)
    at = AppTest.from_function(_spotify_script)
    at.query_params["access_token"] = "tok"
    at.run(timeout=30)

    assert not at.exception
    assert not at.error
    assert at.session_state["SPOTIFY_TOKEN"] == "tok"
    assert len(http.calls) == 2
    assert http.calls[0][1].endswith("/me")
    assert http.calls[1][1].endswith("/me/top/tracks")
    assert http.calls[0][2]["headers"]["Authorization"] == "Bearer tok"


def test_rejected_token_is_cleared_with_relogin_link(page) -> None:
    page(FakeResponse(401, {"error": {"status": 401}}))
    at = AppTest.from_function(_spotify_script)
    at.query_params["access_token"] = "stale"
    at.run(timeout=30)

    assert not at.exception
    assert at.session_state["SPOTIFY_TOKEN"] is None
    assert [e.value for e in at.error] == [TOKEN_MESSAGE]
    links = at.get("link_button")
    assert [b.proto.url for b in links] == [login_url(settings.BACKEND_URL)]
