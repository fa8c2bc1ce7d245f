from __future__ import annotations

from core.constants import BASE_MAINNET
from core.models import Genre, MintPayload, PaperEffect, ReceiptSize, ReceiptStyle


def test_base_chain_params() -> None:
    assert BASE_MAINNET.chain_id == 8453
    assert BASE_MAINNET.hex_id == "0x2105"
    assert BASE_MAINNET.tx_url("0xabc") == "https://basescan.org/tx/0xabc"


def test_style_customization_is_camel_case() -> None:
    style = ReceiptStyle(
        text_color="#111111",
        item_limit=15,
        size=ReceiptSize.LARGE,
        paper_effect=PaperEffect.TORN,
    )
    assert style.as_customization() == {
        "title": "RECEIPTIFY",
        "footer": "THANK YOU FOR VISITING!",
        "textColor": "#111111",
        "backgroundColor": "#ffffff",
        "itemLimit": 15,
        "showImages": True,
        "receiptSize": "large",
        "paperEffect": "torn",
    }


def test_payload_lists_items_under_receipt_type() -> None:
    payload = MintPayload("ALICE", "long_term", "genres", items=(Genre("pop", 2),))
    body = payload.as_json("aGk=")
    assert body["genres"] == [{"name": "pop", "count": 2}]
    assert body["imageData"] == "aGk="
    assert "tracks" not in body
