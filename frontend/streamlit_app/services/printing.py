# frontend/streamlit_app/services/printing.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
QR and print helpers for receipts.

This module provides:
  • High-quality PNG QR generation (via qrcode[pil]) for the optional
    "scan to open profile" footer
  • A printable one-page PDF of a rendered receipt (via ReportLab)
  • Filename sanitizing for downloads

All bytes are in-memory; the caller decides whether to show, download or
upload them.
"""

import io
import re

import qrcode
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as _pdf_canvas


def sanitize_name(s: str) -> str:
    """Convert a label to a filesystem-safe base name.

    - Collapse whitespace to underscores.
    - Keep only alnum, underscore, and hyphen.
    - Fallback to "receipt" if the result is empty.
    """
    s = re.sub(r"\s+", "_", (s or "").strip())
    s = re.sub(r"[^A-Za-z0-9_\-]", "", s)
    return s.lower() or "receipt"


def make_qr_png(
    data: str,
    box_size: int = 8,
    border: int = 2,
    fill_color: str = "black",
    back_color: str = "white",
) -> bytes:
    """Generate a PNG QR code for `data`.

    Uses medium error correction (M) to balance density and scannability.
    Colors follow the receipt's text/background so the code blends in.

    Returns:
      PNG bytes.
    """
    qr = qrcode.QRCode(
        version=None,  # Let the library choose minimal fitting version.
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color=fill_color, back_color=back_color).convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="PNG", optimize=True)
    return buf.getvalue()


def receipt_pdf(png: bytes, title: str, subtitle: str = "") -> bytes:
    """Place a rendered receipt centered on a US Letter page.

    The receipt keeps its aspect ratio and is scaled to fit inside 1" margins
    under the title. Transparent areas (torn/stacked paper) stay white.

    Args:
      png: Receipt PNG as produced by `services.receipt.capture_png`.
      title: Heading printed at the top of the page.
      subtitle: Optional second line.

    Returns:
      PDF bytes.
    """
    img = Image.open(io.BytesIO(png))
    img.load()

    bio = io.BytesIO()
    cpdf = _pdf_canvas.Canvas(bio, pagesize=letter)
    width, height = letter

    cpdf.setFillColorRGB(0, 0, 0)
    cpdf.setFont("Helvetica-Bold", 20)
    cpdf.drawCentredString(width / 2, height - 60, title[:64])
    if subtitle:
        cpdf.setFont("Helvetica", 11)
        cpdf.drawCentredString(width / 2, height - 80, subtitle[:95])

    box_w = width - 2 * inch
    box_h = height - 2 * inch - 40
    ratio = min(box_w / img.width, box_h / img.height)
    draw_w, draw_h = img.width * ratio, img.height * ratio
    x = (width - draw_w) / 2
    y = inch + (box_h - draw_h) / 2
    cpdf.drawImage(ImageReader(img), x, y, draw_w, draw_h, mask="auto")

    cpdf.showPage()
    cpdf.save()
    return bio.getvalue()
