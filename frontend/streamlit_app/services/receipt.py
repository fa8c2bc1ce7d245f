# frontend/streamlit_app/services/receipt.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Receipt documents and rasterization.

Rendering happens in two steps:

  1) **Document** (pure): `tracks_document`, `artists_document`,
     `genres_document` and `lastfm_document` turn listening items plus a
     `ReceiptStyle` into a `ReceiptDocument` (header lines, ranked rows,
     footer). No I/O.
  2) **Capture** (side effects): `load_images` downloads every image the
     document references, then `capture_png` paints the receipt with Pillow at
     2× scale and returns PNG bytes.

Invariant
---------
`capture_png` refuses to run while any image referenced by the document is
missing from the `images` mapping. A fetch that failed is recorded as `None`
and painted as a placeholder circle, so a capture is never half-loaded.

Geometry
--------
Logical widths follow the three receipt sizes (320 / 384 / 448 px); every
measurement is multiplied by `scale`. Paper effects:
  • clean    opaque background
  • torn     zig-zag top and bottom edges on a transparent canvas
  • stacked  two slightly rotated sheets behind the receipt
"""

import functools
import io
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import requests
from PIL import Image, ImageColor, ImageDraw, ImageFont, ImageOps

from core.constants import GENRE_SUBTITLE
from core.errors import RenderError
from core.models import (
    Artist,
    Genre,
    PaperEffect,
    ReceiptSize,
    ReceiptStyle,
    Track,
)
from services.listening import format_duration_ms
from services.printing import make_qr_png

logger = logging.getLogger(__name__)

SIZE_WIDTHS: dict[ReceiptSize, int] = {
    ReceiptSize.COMPACT: 320,
    ReceiptSize.STANDARD: 384,
    ReceiptSize.LARGE: 448,
}

CAPTURE_SCALE = 2

_PAD = 24
_AVATAR = 40
_QR_SIDE = 96
_TOOTH = 8

RGB = tuple[int, int, int]


# =============================================================================
# Documents
# =============================================================================


@dataclass(frozen=True)
class ReceiptRow:
    rank: str
    title: str
    subtitle: str | None = None
    value: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class ReceiptDocument:
    title: str
    lines: tuple[str, ...]
    rows: tuple[ReceiptRow, ...]
    footer: str
    qr_url: str | None = None
    # Genre receipts print their value in a tinted pill.
    chip_values: bool = False

    @property
    def image_urls(self) -> tuple[str, ...]:
        """Distinct image URLs in row order."""
        return tuple(dict.fromkeys(r.image_url for r in self.rows if r.image_url))


def _limit(items: Sequence, style: ReceiptStyle) -> Sequence:
    return items[: max(0, int(style.item_limit))]


def _qr(style: ReceiptStyle, profile_url: str | None) -> str | None:
    return profile_url if style.show_qr and profile_url else None


def tracks_document(
    tracks: Sequence[Track],
    *,
    user_name: str,
    time_range_label: str,
    style: ReceiptStyle,
    profile_url: str | None = None,
) -> ReceiptDocument:
    rows = tuple(
        ReceiptRow(
            rank=f"{i}.",
            title=t.name.upper(),
            subtitle=", ".join(t.artists).upper(),
            value=format_duration_ms(t.duration_ms),
        )
        for i, t in enumerate(_limit(tracks, style), start=1)
    )
    return ReceiptDocument(
        title=style.title.upper(),
        lines=(time_range_label, f"ORDER FOR {user_name}"),
        rows=rows,
        footer=style.footer.upper(),
        qr_url=_qr(style, profile_url),
    )


def artists_document(
    artists: Sequence[Artist],
    *,
    user_name: str,
    time_range_label: str,
    style: ReceiptStyle,
    profile_url: str | None = None,
) -> ReceiptDocument:
    rows = tuple(
        ReceiptRow(
            rank=f"{i}.",
            title=a.name.upper(),
            subtitle=", ".join(a.genres[:2]).title() or None,
            image_url=a.image_url if style.show_images else None,
        )
        for i, a in enumerate(_limit(artists, style), start=1)
    )
    return ReceiptDocument(
        title=style.title.upper(),
        lines=(time_range_label, f"ORDER FOR {user_name}"),
        rows=rows,
        footer=style.footer.upper(),
        qr_url=_qr(style, profile_url),
    )


def genres_document(
    genres: Sequence[Genre],
    *,
    user_name: str,
    style: ReceiptStyle,
    profile_url: str | None = None,
) -> ReceiptDocument:
    rows = tuple(
        ReceiptRow(rank=f"{i}.", title=g.name.upper(), value=f"{g.count} pts")
        for i, g in enumerate(_limit(genres, style), start=1)
    )
    return ReceiptDocument(
        title=style.title.upper(),
        lines=(GENRE_SUBTITLE, f"ORDER FOR {user_name}"),
        rows=rows,
        footer=style.footer.upper(),
        qr_url=_qr(style, profile_url),
        chip_values=True,
    )


def lastfm_document(
    tracks: Sequence[Track],
    *,
    user_name: str,
    period_label: str,
    style: ReceiptStyle,
    profile_url: str | None = None,
) -> ReceiptDocument:
    """Last.fm rows lead with the play count instead of a rank."""
    rows = tuple(
        ReceiptRow(
            rank=f"{t.playcount or 0}x",
            title=t.name.upper(),
            subtitle=", ".join(t.artists).upper(),
            value=format_duration_ms(t.duration_ms),
        )
        for t in _limit(tracks, style)
    )
    return ReceiptDocument(
        title=style.title.upper(),
        lines=(period_label, f"FOR {user_name}"),
        rows=rows,
        footer=style.footer.upper(),
        qr_url=_qr(style, profile_url),
    )


# =============================================================================
# Image loading
# =============================================================================


def load_images(
    document: ReceiptDocument,
    session: requests.Session | None = None,
    *,
    timeout: float = 15.0,
) -> dict[str, bytes | None]:
    """Fetch every image the document references.

    Returns a mapping url → bytes, or url → None for fetches that failed
    (logged; painted as placeholders).
    """
    http = session or requests.Session()
    images: dict[str, bytes | None] = {}
    for url in document.image_urls:
        try:
            resp = http.get(url, timeout=timeout)
            resp.raise_for_status()
            images[url] = resp.content
        except requests.RequestException as e:
            logger.warning("Receipt image %s could not be loaded: %s", url, e)
            images[url] = None
    return images


# =============================================================================
# Capture
# =============================================================================


def capture_png(
    document: ReceiptDocument,
    style: ReceiptStyle,
    images: Mapping[str, bytes | None] | None = None,
    *,
    scale: int = CAPTURE_SCALE,
    font_path: str = "",
) -> bytes:
    """Rasterize `document` to PNG bytes.

    Raises:
      RenderError: an image referenced by the document has not been loaded,
        or a style color cannot be parsed.
    """
    images = images or {}
    missing = [url for url in document.image_urls if url not in images]
    if missing:
        raise RenderError(
            f"Receipt capture started before {len(missing)} image(s) finished loading."
        )
    if scale < 1:
        raise ValueError("scale must be >= 1")

    painter = _Painter(document, style, images, scale, font_path)
    paper = painter.render()
    img = _apply_effect(paper, style.paper_effect, painter.bg, scale)

    buf = io.BytesIO()
    img.save(buf, format="PNG", optimize=True)
    return buf.getvalue()


def _rgb(value: str) -> RGB:
    try:
        return ImageColor.getrgb(value)[:3]  # type: ignore[return-value]
    except ValueError as e:
        raise RenderError(f"Invalid color: {value!r}") from e


def _mix(fg: RGB, bg: RGB, alpha: float) -> RGB:
    """Color of `fg` at `alpha` opacity over `bg`."""
    return tuple(round(f * alpha + b * (1 - alpha)) for f, b in zip(fg, bg))  # type: ignore[return-value]


def _hex(rgb: RGB) -> str:
    return "#%02x%02x%02x" % rgb


@functools.lru_cache(maxsize=32)
def _font(size: int, bold: bool, path: str = "") -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    candidates = [path] if path else []
    candidates.append("DejaVuSansMono-Bold.ttf" if bold else "DejaVuSansMono.ttf")
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _line_height(font) -> int:
    return int(getattr(font, "size", 11) * 1.4)


def _wrap(text: str | None, font, max_width: float) -> list[str]:
    """Greedy word wrap; words wider than the box are hard-split."""
    if not text:
        return []
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if font.getlength(candidate) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        while len(word) > 1 and font.getlength(word) > max_width:
            cut = len(word) - 1
            while cut > 1 and font.getlength(word[:cut]) > max_width:
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    if current:
        lines.append(current)
    return lines


class _Painter:
    """Lays out a document twice: once to measure, once to draw."""

    def __init__(
        self,
        doc: ReceiptDocument,
        style: ReceiptStyle,
        images: Mapping[str, bytes | None],
        scale: int,
        font_path: str,
    ) -> None:
        self.doc = doc
        self.images = images
        self.s = scale
        self.width = SIZE_WIDTHS[style.size] * scale
        self.pad = _PAD * scale
        self.inner = self.width - 2 * self.pad

        self.fg = _rgb(style.text_color)
        self.bg = _rgb(style.background_color)
        self.muted = _mix(self.fg, self.bg, 0.7)
        self.rule = _mix(self.fg, self.bg, 0.5)
        self.chip = _mix(self.fg, self.bg, 0.1)

        self.f_title = _font(24 * scale, True, font_path)
        self.f_body = _font(14 * scale, False, font_path)
        self.f_bold = _font(14 * scale, True, font_path)
        self.f_small = _font(12 * scale, False, font_path)

        ranks = [r.rank for r in doc.rows] or ["0."]
        self.rank_w = max(self.f_bold.getlength(r) for r in ranks) + 8 * scale

    # -- public ---------------------------------------------------------------

    def render(self) -> Image.Image:
        height = self._layout(None)
        img = Image.new("RGBA", (self.width, height), self.bg + (255,))
        self._layout(img)
        return img

    # -- layout -----------------------------------------------------------------

    def _layout(self, canvas: Image.Image | None) -> int:
        draw = ImageDraw.Draw(canvas) if canvas is not None else None
        s = self.s
        y = self.pad

        for line in _wrap(self.doc.title, self.f_title, self.inner):
            y = self._centered(draw, line, self.f_title, self.fg, y)
        y += 4 * s
        for text in self.doc.lines:
            for line in _wrap(text, self.f_body, self.inner):
                y = self._centered(draw, line, self.f_body, self.fg, y)

        y += 16 * s
        y = self._dashed_rule(draw, y)
        y += 8 * s
        if not self.doc.rows:
            y = self._centered(draw, "NOTHING TO SHOW YET", self.f_body, self.rule, y + 8 * s)
            y += 8 * s
        for row in self.doc.rows:
            y = self._row(canvas, draw, row, y)
        y += 8 * s
        y = self._dashed_rule(draw, y)

        y += 24 * s
        for line in _wrap(self.doc.footer, self.f_small, self.inner):
            y = self._centered(draw, line, self.f_small, self.fg, y)

        if self.doc.qr_url:
            y += 12 * s
            side = _QR_SIDE * s
            if canvas is not None:
                qr = Image.open(
                    io.BytesIO(
                        make_qr_png(
                            self.doc.qr_url,
                            fill_color=_hex(self.fg),
                            back_color=_hex(self.bg),
                        )
                    )
                ).convert("RGBA")
                qr = qr.resize((side, side), Image.Resampling.NEAREST)
                canvas.paste(qr, ((self.width - side) // 2, y))
            y += side

        return y + self.pad

    def _centered(self, draw, text: str, font, fill: RGB, y: int) -> int:
        if draw is not None:
            x = (self.width - font.getlength(text)) / 2
            draw.text((x, y), text, font=font, fill=fill)
        return y + _line_height(font)

    def _dashed_rule(self, draw, y: int) -> int:
        s = self.s
        if draw is not None:
            dash, gap = 6 * s, 4 * s
            end = self.pad + self.inner
            for x in range(self.pad, end, dash + gap):
                draw.line([(x, y), (min(x + dash, end), y)], fill=self.rule, width=s)
        return y + s

    def _row(self, canvas, draw, row: ReceiptRow, y: int) -> int:
        s = self.s
        top = y + 4 * s
        x = self.pad + self.rank_w

        has_image = row.image_url is not None
        avatar = _AVATAR * s
        if has_image:
            img_x = int(x)
            x += avatar + 12 * s

        value_w = 0.0
        if row.value:
            value_font = self.f_small if self.doc.chip_values else self.f_bold
            value_w = value_font.getlength(row.value)
            if self.doc.chip_values:
                value_w += 16 * s
        text_w = self.pad + self.inner - x - (value_w + 8 * s if row.value else 0)

        titles = _wrap(row.title, self.f_bold, text_w)
        subs = _wrap(row.subtitle, self.f_small, text_w)
        block_h = len(titles) * _line_height(self.f_bold) + len(subs) * _line_height(self.f_small)
        row_h = max(block_h, avatar if has_image else 0, _line_height(self.f_bold))

        if draw is not None:
            draw.text((self.pad, top), row.rank, font=self.f_bold, fill=self.fg)
            if has_image:
                face = _avatar(self.images.get(row.image_url), avatar, self.chip)
                canvas.paste(face, (img_x, int(top + (row_h - avatar) / 2)), face)
            ty = top
            for line in titles:
                draw.text((x, ty), line, font=self.f_bold, fill=self.fg)
                ty += _line_height(self.f_bold)
            for line in subs:
                draw.text((x, ty), line, font=self.f_small, fill=self.muted)
                ty += _line_height(self.f_small)
            if row.value:
                vx = self.pad + self.inner - value_w
                if self.doc.chip_values:
                    box = (int(vx), top, int(vx + value_w), top + _line_height(self.f_small) + 4 * s)
                    draw.rounded_rectangle(box, radius=4 * s, fill=self.chip)
                    draw.text((vx + 8 * s, top + 2 * s), row.value, font=self.f_small, fill=self.muted)
                else:
                    draw.text((vx, top), row.value, font=self.f_bold, fill=self.fg)

        return top + row_h + 4 * s


def _avatar(data: bytes | None, side: int, placeholder: RGB) -> Image.Image:
    face = None
    if data:
        try:
            face = ImageOps.fit(Image.open(io.BytesIO(data)).convert("RGBA"), (side, side))
        except (OSError, ValueError) as e:
            logger.warning("Receipt image is not decodable: %s", e)
    if face is None:
        face = Image.new("RGBA", (side, side), placeholder + (255,))
    mask = Image.new("L", (side, side), 0)
    ImageDraw.Draw(mask).ellipse((0, 0, side - 1, side - 1), fill=255)
    face.putalpha(mask)
    return face


# =============================================================================
# Paper effects
# =============================================================================


def _apply_effect(paper: Image.Image, effect: PaperEffect, bg: RGB, scale: int) -> Image.Image:
    if effect == PaperEffect.TORN:
        return _torn(paper, _TOOTH * scale)
    if effect == PaperEffect.STACKED:
        return _stacked(paper, bg, scale)
    return paper


def _torn(paper: Image.Image, tooth: int) -> Image.Image:
    w, h = paper.size
    mask = Image.new("L", (w, h), 255)
    d = ImageDraw.Draw(mask)
    top = [(0, 0)]
    bottom = [(0, h)]
    for k, x in enumerate(range(0, w + tooth, tooth)):
        x = min(x, w)
        top.append((x, tooth if k % 2 else 0))
        bottom.append((x, h - 1 - (tooth if k % 2 else 0)))
    top.append((w, 0))
    bottom.append((w, h))
    d.polygon(top, fill=0)
    d.polygon(bottom, fill=0)
    out = paper.copy()
    out.putalpha(mask)
    return out


def _stacked(paper: Image.Image, bg: RGB, scale: int) -> Image.Image:
    w, h = paper.size
    # Rotated sheets grow by roughly max(w, h) * sin(angle) on each axis.
    margin = int(max(w, h) * math.sin(math.radians(1.5)) / 2) + 8 * scale
    out = Image.new("RGBA", (w + 2 * margin, h + 2 * margin), (0, 0, 0, 0))
    sheet_color = _mix(bg, (0, 0, 0), 0.94) + (255,)
    for angle, nudge in ((-1.5, 4 * scale), (1.0, 0)):
        sheet = Image.new("RGBA", (w, h), sheet_color).rotate(
            angle, resample=Image.Resampling.BICUBIC, expand=True
        )
        x = (out.width - sheet.width) // 2 + nudge
        y = (out.height - sheet.height) // 2 + nudge
        out.paste(sheet, (x, y), sheet)
    out.paste(paper, (margin, margin), paper)
    return out
