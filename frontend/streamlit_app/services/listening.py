# frontend/streamlit_app/services/listening.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Listening-history clients for Spotify and Last.fm.

This module provides:
  • `SpotifyClient`   : bearer-authenticated profile + top tracks/artists
  • `LastFmClient`    : API-key authenticated top tracks for a username
  • `aggregate_genres`: genre frequency table from a list of artists
  • The `m:ss` duration formatter used by receipt rows

Design principles
-----------------
- One request per lookup; no retries. A rejected or expired token is terminal
  and the user has to log in again.
- Payloads are unwrapped into frozen `core.models` records right here so pages
  and the renderer never touch raw JSON.
- Every failure (HTTP error, timeout, malformed body) becomes a single
  `ListeningApiError` with a user-facing message. The underlying cause is
  chained and logged for developers.
"""

import logging
from collections.abc import Iterable
from typing import Any

import requests

from core.constants import (
    GENRE_SOURCE_LIMIT,
    GENRE_SOURCE_RANGE,
    LASTFM_PERIODS,
    MAX_ITEMS,
    SPOTIFY_TIME_RANGES,
)
from core.errors import ListeningApiError, TokenExpiredError
from core.models import Artist, Genre, ListeningProfile, Track

logger = logging.getLogger(__name__)

SPOTIFY_API_BASE = "https://api.spotify.com/v1"
LASTFM_API_ROOT = "https://ws.audioscrobbler.com/2.0/"

TOKEN_MESSAGE = (
    "Failed to load your listening history. "
    "The Spotify token may have expired. Please log in again."
)
LASTFM_MESSAGE = "Failed to fetch data. Please check the username and try again."


# =============================================================================
# Genre aggregation & formatting
# =============================================================================


def aggregate_genres(artists: Iterable[Artist]) -> list[Genre]:
    """Tally genre tags across `artists`, most frequent first.

    Ties keep first-seen order: counts accumulate in a dict (insertion ordered)
    and `sorted` is stable.

    >>> a = Artist("1", "A", genres=("pop", "rock"))
    >>> b = Artist("2", "B", genres=("pop",))
    >>> [(g.name, g.count) for g in aggregate_genres([a, b])]
    [('pop', 2), ('rock', 1)]
    """
    counts: dict[str, int] = {}
    for artist in artists:
        for name in artist.genres:
            counts[name] = counts.get(name, 0) + 1
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [Genre(name=name, count=count) for name, count in ranked]


def format_duration_ms(ms: int | None) -> str:
    """Format milliseconds as `m:ss` (rounded to the nearest second)."""
    if ms is None or ms < 0:
        return "N/A"
    total = int(round(ms / 1000))
    return f"{total // 60}:{total % 60:02d}"


def _check_limit(limit: int) -> int:
    if not 1 <= int(limit) <= MAX_ITEMS:
        raise ValueError(f"limit must be between 1 and {MAX_ITEMS}, got {limit}")
    return int(limit)


# =============================================================================
# Spotify
# =============================================================================


class SpotifyClient:
    """Thin wrapper over the Spotify Web API endpoints a receipt needs."""

    def __init__(
        self,
        token: str,
        *,
        session: requests.Session | None = None,
        api_base: str = SPOTIFY_API_BASE,
        timeout: float = 15.0,
    ) -> None:
        if not token:
            raise TokenExpiredError(TOKEN_MESSAGE)
        self._token = token
        self._http = session or requests.Session()
        self._base = api_base.rstrip("/")
        self._timeout = timeout

    def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base}{path}"
        try:
            resp = self._http.get(
                url,
                headers={"Authorization": f"Bearer {self._token}"},
                params=params,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("Spotify request %s failed: %s", path, e)
            raise ListeningApiError(TOKEN_MESSAGE) from e

        if resp.status_code == 401:
            logger.info("Spotify rejected the bearer token on %s", path)
            raise TokenExpiredError(TOKEN_MESSAGE)
        try:
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Spotify %s returned HTTP %s: %s", path, resp.status_code, e)
            raise ListeningApiError(TOKEN_MESSAGE) from e
        if not isinstance(data, dict):
            raise ListeningApiError(TOKEN_MESSAGE)
        return data

    def _items(self, path: str, time_range: str, limit: int) -> list[dict[str, Any]]:
        if time_range not in SPOTIFY_TIME_RANGES:
            raise ValueError(f"Unknown Spotify time range: {time_range!r}")
        data = self._get(
            path, params={"time_range": time_range, "limit": _check_limit(limit)}
        )
        items = data.get("items")
        if not isinstance(items, list):
            logger.warning("Spotify %s response has no 'items' list", path)
            raise ListeningApiError(TOKEN_MESSAGE)
        return items

    def profile(self) -> ListeningProfile:
        data = self._get("/me")
        name = data.get("display_name") or data.get("id") or "YOUR"
        url = (data.get("external_urls") or {}).get("spotify")
        return ListeningProfile(display_name=str(name).upper(), profile_url=url)

    def top_tracks(self, time_range: str = "short_term", limit: int = 10) -> list[Track]:
        try:
            return [
                Track(
                    id=str(t["id"]),
                    name=str(t["name"]),
                    artists=tuple(a["name"] for a in t.get("artists") or []),
                    duration_ms=int(t["duration_ms"]),
                    url=(t.get("external_urls") or {}).get("spotify"),
                )
                for t in self._items("/me/top/tracks", time_range, limit)
            ]
        except (KeyError, TypeError) as e:
            logger.warning("Malformed Spotify track payload: %s", e)
            raise ListeningApiError(TOKEN_MESSAGE) from e

    def top_artists(
        self, time_range: str = "short_term", limit: int = 10
    ) -> list[Artist]:
        try:
            return [
                Artist(
                    id=str(a["id"]),
                    name=str(a["name"]),
                    image_url=(a.get("images") or [{}])[0].get("url"),
                    genres=tuple(a.get("genres") or ()),
                    url=(a.get("external_urls") or {}).get("spotify"),
                )
                for a in self._items("/me/top/artists", time_range, limit)
            ]
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning("Malformed Spotify artist payload: %s", e)
            raise ListeningApiError(TOKEN_MESSAGE) from e

    def top_genres(self) -> list[Genre]:
        """Genres from the all-time top 50 artists (the most stable sample)."""
        return aggregate_genres(
            self.top_artists(GENRE_SOURCE_RANGE, GENRE_SOURCE_LIMIT)
        )


# =============================================================================
# Last.fm
# =============================================================================


class LastFmClient:
    """Read-only Last.fm client for `user.gettoptracks`."""

    def __init__(
        self,
        api_key: str,
        *,
        session: requests.Session | None = None,
        api_root: str = LASTFM_API_ROOT,
        timeout: float = 15.0,
    ) -> None:
        self._key = api_key
        self._http = session or requests.Session()
        self._root = api_root
        self._timeout = timeout

    def _call(self, method: str, **params: Any) -> dict[str, Any]:
        params |= {"method": method, "api_key": self._key, "format": "json"}
        try:
            resp = self._http.get(self._root, params=params, timeout=self._timeout)
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Last.fm %s failed: %s", method, e)
            raise ListeningApiError(LASTFM_MESSAGE) from e
        if not isinstance(data, dict):
            raise ListeningApiError(LASTFM_MESSAGE)
        # Last.fm reports API errors in the body, often with HTTP 200.
        if "error" in data:
            raise ListeningApiError(str(data.get("message") or LASTFM_MESSAGE))
        if resp.status_code >= 400:
            raise ListeningApiError(LASTFM_MESSAGE)
        return data

    def top_tracks(
        self, username: str, period: str = "1month", limit: int = 10
    ) -> list[Track]:
        if not username.strip():
            raise ValueError("username is required")
        if period not in LASTFM_PERIODS:
            raise ValueError(f"Unknown Last.fm period: {period!r}")
        data = self._call(
            "user.gettoptracks",
            user=username.strip(),
            period=period,
            limit=_check_limit(limit),
        )
        raw = (data.get("toptracks") or {}).get("track", [])
        if isinstance(raw, dict):  # a single track comes back as an object
            raw = [raw]
        try:
            return [
                Track(
                    id=str(t.get("mbid") or f"{t['name']}#{i}"),
                    name=str(t["name"]),
                    artists=(str((t.get("artist") or {}).get("name", "")),),
                    duration_ms=_seconds_to_ms(t.get("duration")),
                    playcount=int(t.get("playcount") or 0),
                    url=t.get("url"),
                )
                for i, t in enumerate(raw)
            ]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Malformed Last.fm track payload: %s", e)
            raise ListeningApiError(LASTFM_MESSAGE) from e


def _seconds_to_ms(value: Any) -> int | None:
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return None
    return seconds * 1000 if seconds > 0 else None
