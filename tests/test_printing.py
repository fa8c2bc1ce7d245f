from __future__ import annotations

import io

from PIL import Image

from services.printing import make_qr_png, receipt_pdf, sanitize_name


def test_sanitize_name() -> None:
    assert sanitize_name("Receiptify ALICE Top Tracks!") == "receiptify_alice_top_tracks"
    assert sanitize_name("  ") == "receipt"
    assert sanitize_name("ÄÖ") == "receipt"


def test_make_qr_png_uses_colors() -> None:
    img = Image.open(io.BytesIO(make_qr_png("https://u", back_color="#ff0000")))
    assert img.format == "PNG"
    assert img.convert("RGB").getpixel((0, 0)) == (255, 0, 0)


def test_receipt_pdf() -> None:
    buf = io.BytesIO()
    Image.new("RGBA", (200, 600), (255, 255, 255, 0)).save(buf, format="PNG")
    pdf = receipt_pdf(buf.getvalue(), "ALICE TOP TRACKS", "LAST MONTH")
    assert pdf.startswith(b"%PDF")
    assert pdf.rstrip().endswith(b"%%EOF")
