from __future__ import annotations

import io

import pytest
import requests
from PIL import Image

from conftest import FakeResponse, FakeSession
from core.constants import GENRE_SUBTITLE
from core.errors import RenderError
from core.models import Artist, Genre, PaperEffect, ReceiptSize, ReceiptStyle, Track
from services.receipt import (
    artists_document,
    capture_png,
    genres_document,
    lastfm_document,
    load_images,
    tracks_document,
)

TRACKS = [
    Track(f"t{i}", f"Song {i}", ("Band", "Guest"), duration_ms=180_000 + i * 1000)
    for i in range(1, 16)
]
ARTISTS = [
    Artist("a1", "Band", image_url="https://img/1.jpg", genres=("indie pop", "rock", "jazz")),
    Artist("a2", "Solo", image_url="https://img/2.jpg"),
    Artist("a3", "Same Pic", image_url="https://img/1.jpg", genres=("folk",)),
]


def _png(color: str = "red") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color).save(buf, format="PNG")
    return buf.getvalue()


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


# ───────────────────────────── documents ─────────────────────────────


def test_tracks_document() -> None:
    doc = tracks_document(
        TRACKS, user_name="ALICE", time_range_label="LAST MONTH", style=ReceiptStyle()
    )
    assert len(doc.rows) == 10
    assert doc.title == "RECEIPTIFY"
    assert doc.lines == ("LAST MONTH", "ORDER FOR ALICE")
    assert doc.footer == "THANK YOU FOR VISITING!"
    first = doc.rows[0]
    assert (first.rank, first.title, first.subtitle, first.value) == (
        "1.",
        "SONG 1",
        "BAND, GUEST",
        "3:01",
    )
    assert doc.image_urls == ()


def test_item_limit_truncates() -> None:
    doc = tracks_document(
        TRACKS, user_name="A", time_range_label="ALL TIME", style=ReceiptStyle(item_limit=3)
    )
    assert [r.rank for r in doc.rows] == ["1.", "2.", "3."]


def test_artists_document() -> None:
    doc = artists_document(
        ARTISTS, user_name="A", time_range_label="ALL TIME", style=ReceiptStyle()
    )
    assert doc.rows[0].subtitle == "Indie Pop, Rock"
    assert doc.rows[1].subtitle is None
    assert doc.image_urls == ("https://img/1.jpg", "https://img/2.jpg")

    hidden = artists_document(
        ARTISTS,
        user_name="A",
        time_range_label="ALL TIME",
        style=ReceiptStyle(show_images=False),
    )
    assert hidden.image_urls == ()


def test_genres_document() -> None:
    doc = genres_document(
        [Genre("pop", 12), Genre("rock", 3)], user_name="A", style=ReceiptStyle()
    )
    assert doc.lines[0] == GENRE_SUBTITLE
    assert doc.chip_values is True
    assert [(r.title, r.value) for r in doc.rows] == [("POP", "12 pts"), ("ROCK", "3 pts")]


def test_lastfm_document_ranks_by_playcount() -> None:
    tracks = [Track("x", "Song", ("Band",), playcount=42, duration_ms=None)]
    doc = lastfm_document(
        tracks, user_name="BOB", period_label="LAST 7 DAYS", style=ReceiptStyle()
    )
    assert doc.lines == ("LAST 7 DAYS", "FOR BOB")
    assert (doc.rows[0].rank, doc.rows[0].value) == ("42x", "N/A")


def test_qr_only_when_enabled() -> None:
    kwargs = dict(user_name="A", time_range_label="ALL TIME", profile_url="https://u")
    assert tracks_document(TRACKS, style=ReceiptStyle(), **kwargs).qr_url is None
    assert tracks_document(TRACKS, style=ReceiptStyle(show_qr=True), **kwargs).qr_url == "https://u"


# ───────────────────────────── images ─────────────────────────────


def test_load_images_records_failures() -> None:
    doc = artists_document(
        ARTISTS, user_name="A", time_range_label="ALL TIME", style=ReceiptStyle()
    )
    http = FakeSession(
        FakeResponse(200, content=b"img-1"),
        requests.ConnectionError("offline"),
    )
    images = load_images(doc, http, timeout=2)
    assert images == {"https://img/1.jpg": b"img-1", "https://img/2.jpg": None}
    assert [c[1] for c in http.calls] == ["https://img/1.jpg", "https://img/2.jpg"]


def test_capture_requires_loaded_images() -> None:
    doc = artists_document(
        ARTISTS, user_name="A", time_range_label="ALL TIME", style=ReceiptStyle()
    )
    with pytest.raises(RenderError):
        capture_png(doc, ReceiptStyle(), {"https://img/1.jpg": _png()})


# ───────────────────────────── capture ─────────────────────────────


@pytest.mark.parametrize(
    ("size", "width"),
    [(ReceiptSize.COMPACT, 320), (ReceiptSize.STANDARD, 384), (ReceiptSize.LARGE, 448)],
)
def test_capture_width_is_double_scale(size, width) -> None:
    style = ReceiptStyle(size=size)
    doc = tracks_document(TRACKS, user_name="A", time_range_label="LAST MONTH", style=style)
    img = _open(capture_png(doc, style))
    assert img.format == "PNG"
    assert img.width == width * 2


def test_capture_with_images_and_placeholders() -> None:
    style = ReceiptStyle()
    doc = artists_document(ARTISTS, user_name="A", time_range_label="ALL TIME", style=style)
    images = {"https://img/1.jpg": _png(), "https://img/2.jpg": None}
    img = _open(capture_png(doc, style, images, scale=1))
    assert img.width == 384


def test_undecodable_image_is_placeholder() -> None:
    style = ReceiptStyle()
    doc = artists_document(ARTISTS, user_name="A", time_range_label="ALL TIME", style=style)
    images = {"https://img/1.jpg": b"not an image", "https://img/2.jpg": _png()}
    assert capture_png(doc, style, images, scale=1).startswith(b"\x89PNG")


def test_clean_paper_is_opaque_background() -> None:
    style = ReceiptStyle(background_color="#102030")
    doc = genres_document([Genre("pop", 1)], user_name="A", style=style)
    img = _open(capture_png(doc, style)).convert("RGBA")
    assert img.getpixel((1, 1)) == (16, 32, 48, 255)


def test_torn_paper_has_transparent_teeth() -> None:
    style = ReceiptStyle(paper_effect=PaperEffect.TORN)
    doc = tracks_document(TRACKS, user_name="A", time_range_label="LAST MONTH", style=style)
    img = _open(capture_png(doc, style)).convert("RGBA")
    tooth = 16
    assert img.getpixel((tooth, 2))[3] == 0
    assert img.getpixel((img.width // 2, img.height // 2))[3] == 255


def test_stacked_paper_is_wider() -> None:
    style = ReceiptStyle(paper_effect=PaperEffect.STACKED)
    doc = tracks_document(TRACKS, user_name="A", time_range_label="LAST MONTH", style=style)
    img = _open(capture_png(doc, style)).convert("RGBA")
    assert img.width > 384 * 2
    assert img.getpixel((0, 0))[3] == 0


def test_qr_footer_adds_height() -> None:
    kwargs = dict(user_name="A", time_range_label="ALL TIME", profile_url="https://u")
    plain = ReceiptStyle()
    with_qr = ReceiptStyle(show_qr=True)
    short = _open(capture_png(tracks_document(TRACKS, style=plain, **kwargs), plain))
    tall = _open(capture_png(tracks_document(TRACKS, style=with_qr, **kwargs), with_qr))
    assert tall.height > short.height


def test_bad_color_is_render_error() -> None:
    style = ReceiptStyle(text_color="not-a-color")
    doc = genres_document([], user_name="A", style=style)
    with pytest.raises(RenderError, match="not-a-color"):
        capture_png(doc, style)
