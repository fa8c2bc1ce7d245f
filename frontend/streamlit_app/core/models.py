# frontend/streamlit_app/core/models.py
# SPDX-License-Identifier: Apache-2.0
"""Data records shared by services and pages.

Listening items are frozen: a re-fetch replaces the whole list rather than
mutating entries. `ReceiptStyle` is the one record the user edits freely.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


# ─────────────────────────────── Listening items ──────────────────────────────


@dataclass(frozen=True)
class Track:
    id: str
    name: str
    artists: tuple[str, ...]
    duration_ms: int | None = None
    playcount: int | None = None  # Last.fm only
    url: str | None = None


@dataclass(frozen=True)
class Artist:
    id: str
    name: str
    image_url: str | None = None
    genres: tuple[str, ...] = ()
    url: str | None = None


@dataclass(frozen=True)
class Genre:
    """A genre tag and how many top artists carry it."""

    name: str
    count: int


@dataclass(frozen=True)
class ListeningProfile:
    display_name: str
    profile_url: str | None = None


# ─────────────────────────────── Receipt style ────────────────────────────────


class ReceiptSize(str, Enum):
    COMPACT = "compact"
    STANDARD = "standard"
    LARGE = "large"


class PaperEffect(str, Enum):
    CLEAN = "clean"
    TORN = "torn"
    STACKED = "stacked"


@dataclass
class ReceiptStyle:
    """User-editable look of a receipt.

    Passed by value to the renderer and, via `as_customization()`, to the
    upload payload.
    """

    title: str = "RECEIPTIFY"
    footer: str = "THANK YOU FOR VISITING!"
    text_color: str = "#000000"
    background_color: str = "#ffffff"
    item_limit: int = 10
    size: ReceiptSize = ReceiptSize.STANDARD
    paper_effect: PaperEffect = PaperEffect.CLEAN
    show_images: bool = True
    show_qr: bool = False

    def as_customization(self) -> dict[str, Any]:
        """Return the camelCase dict the upload backend expects."""
        return {
            "title": self.title,
            "footer": self.footer,
            "textColor": self.text_color,
            "backgroundColor": self.background_color,
            "itemLimit": int(self.item_limit),
            "showImages": bool(self.show_images),
            "receiptSize": self.size.value,
            "paperEffect": self.paper_effect.value,
        }


# ─────────────────────────────── Wallet & mint ────────────────────────────────


class HostEnvironment(str, Enum):
    """Where the app is running; decides which wallet endpoint is used."""

    MINIAPP = "miniapp"
    BROWSER = "browser"


@dataclass(frozen=True)
class ChainParams:
    """EVM chain description in the shape `wallet_addEthereumChain` takes."""

    chain_id: int
    name: str
    currency_name: str
    currency_symbol: str
    currency_decimals: int
    rpc_urls: tuple[str, ...]
    explorer_urls: tuple[str, ...] = ()

    @property
    def hex_id(self) -> str:
        return hex(self.chain_id)

    def add_chain_params(self) -> dict[str, Any]:
        return {
            "chainId": self.hex_id,
            "chainName": self.name,
            "nativeCurrency": {
                "name": self.currency_name,
                "symbol": self.currency_symbol,
                "decimals": self.currency_decimals,
            },
            "rpcUrls": list(self.rpc_urls),
            "blockExplorerUrls": list(self.explorer_urls),
        }

    def tx_url(self, tx_hash: str) -> str | None:
        if not self.explorer_urls:
            return None
        return f"{self.explorer_urls[0].rstrip('/')}/tx/{tx_hash}"


@dataclass
class WalletSession:
    """Connected account; lives in session state until the page reloads."""

    address: str
    chain_id: int
    environment: HostEnvironment


@dataclass(frozen=True)
class MintPayload:
    """Everything the upload backend needs besides the image itself."""

    user_name: str
    time_range: str
    receipt_type: str  # "tracks" | "artists" | "genres"
    items: tuple[Any, ...] = ()
    customization: dict[str, Any] = field(default_factory=dict)

    def as_json(self, image_b64: str) -> dict[str, Any]:
        return {
            "imageData": image_b64,
            "userName": self.user_name,
            "timeRange": self.time_range,
            "receiptType": self.receipt_type,
            self.receipt_type: [asdict(item) for item in self.items],
            "customization": dict(self.customization),
        }


@dataclass(frozen=True)
class MintRecord:
    """Result of one successful mint attempt. Never persisted."""

    image_png: bytes
    token_uri: str
    tx_hash: str
