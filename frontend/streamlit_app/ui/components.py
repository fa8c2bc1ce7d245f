# frontend/streamlit_app/ui/components.py
# SPDX-License-Identifier: Apache-2.0
"""Reusable Streamlit widgets for the receipt pages.

Currently provided:
  • short_addr(): elided wallet address for display.
  • receipt_type_picker() / time_range_picker(): query selectors.
  • customization_panel(): title/footer/colors/size/paper → `ReceiptStyle`.
  • receipt_preview() / download_buttons(): show and export a rendered PNG.
  • listening_error(): failure card with a re-login link.
  • mint_panel(): runs a `MintOrchestrator` inside `st.status`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

import streamlit as st

from core.clients import get_http, get_web3
from core.config import settings
from core.constants import BASE_MAINNET, ITEM_LIMIT_PRESETS, MAX_ITEMS
from core.errors import ReceiptifyError
from core.models import (
    HostEnvironment,
    MintPayload,
    PaperEffect,
    ReceiptSize,
    ReceiptStyle,
)
from services.mint import PROGRESS_STEPS, IpfsUploader, MintOrchestrator, MintStep
from services.printing import receipt_pdf, sanitize_name
from services.receipt import SIZE_WIDTHS
from services.wallet import WalletConnector
from ui.keys import k

_ADDR_PREFIX = 6
_ADDR_SUFFIX = 4

RECEIPT_TYPES: dict[str, str] = {
    "tracks": "Top Tracks",
    "artists": "Top Artists",
    "genres": "Top Genres",
}


def short_addr(
    addr: str | None, *, prefix: int = _ADDR_PREFIX, suffix: int = _ADDR_SUFFIX
) -> str:
    """Return `0x1234…abcd` for a full address; short inputs are unchanged."""
    if not addr:
        return "not connected"
    if len(addr) <= prefix + suffix + 1:
        return addr
    return f"{addr[:prefix]}…{addr[-suffix:]}"


def connector_for(environment: HostEnvironment) -> WalletConnector:
    """Wallet connector bound to the endpoint for `environment`."""
    endpoint = (
        settings.MINIAPP_WALLET_URL
        if environment == HostEnvironment.MINIAPP
        else settings.WALLET_RPC_URL
    )
    return WalletConnector(get_web3(endpoint), environment)


# ───────────────────────────── selectors ─────────────────────────────


def receipt_type_picker(page: str) -> str:
    return st.radio(
        "Receipt",
        list(RECEIPT_TYPES),
        format_func=RECEIPT_TYPES.get,
        horizontal=True,
        key=k(page, "receipt_type"),
    )


def time_range_picker(page: str, options: Mapping[str, str], default: str) -> str:
    keys = list(options)
    return st.radio(
        "Time range",
        keys,
        index=keys.index(default) if default in keys else 0,
        format_func=options.get,
        horizontal=True,
        key=k(page, "time_range"),
    )


def customization_panel(page: str) -> ReceiptStyle:
    """Render the customization controls and return the resulting style."""
    defaults = ReceiptStyle()
    with st.expander("Customize receipt", expanded=False):
        title = st.text_input(
            "Title", defaults.title, max_chars=40, key=k(page, "title")
        )
        footer = st.text_input(
            "Footer", defaults.footer, max_chars=60, key=k(page, "footer")
        )

        c1, c2 = st.columns(2)
        text_color = c1.color_picker(
            "Text color", defaults.text_color, key=k(page, "text_color")
        )
        background_color = c2.color_picker(
            "Background", defaults.background_color, key=k(page, "background_color")
        )

        preset = st.radio(
            "Items",
            [*ITEM_LIMIT_PRESETS, "Custom"],
            horizontal=True,
            key=k(page, "item_preset"),
        )
        if preset == "Custom":
            item_limit = int(
                st.number_input(
                    "Custom count",
                    min_value=1,
                    max_value=MAX_ITEMS,
                    value=20,
                    step=1,
                    key=k(page, "item_custom"),
                )
            )
        else:
            item_limit = int(preset)

        size = st.radio(
            "Size",
            list(ReceiptSize),
            index=list(ReceiptSize).index(defaults.size),
            format_func=lambda s: s.value.title(),
            horizontal=True,
            key=k(page, "size"),
        )
        paper_effect = st.radio(
            "Paper",
            list(PaperEffect),
            format_func=lambda p: p.value.title(),
            horizontal=True,
            key=k(page, "paper"),
        )
        show_images = st.checkbox(
            "Artist images", value=defaults.show_images, key=k(page, "show_images")
        )
        show_qr = st.checkbox(
            "Profile QR code in footer",
            value=defaults.show_qr,
            key=k(page, "show_qr"),
        )

    return ReceiptStyle(
        title=title or defaults.title,
        footer=footer,
        text_color=text_color,
        background_color=background_color,
        item_limit=item_limit,
        size=size,
        paper_effect=paper_effect,
        show_images=show_images,
        show_qr=show_qr,
    )


# ───────────────────────────── output ─────────────────────────────


def receipt_preview(png: bytes, style: ReceiptStyle) -> None:
    st.image(png, width=SIZE_WIDTHS[style.size])


def download_buttons(page: str, png: bytes, label: str, subtitle: str = "") -> None:
    """PNG and printable PDF downloads for a rendered receipt."""
    base = sanitize_name(f"receiptify {label}")
    c1, c2 = st.columns(2)
    c1.download_button(
        "Download PNG",
        data=png,
        file_name=f"{base}.png",
        mime="image/png",
        key=k(page, "download_png"),
    )
    c2.download_button(
        "Download PDF",
        data=receipt_pdf(png, title=label, subtitle=subtitle),
        file_name=f"{base}.pdf",
        mime="application/pdf",
        key=k(page, "download_pdf"),
    )


def listening_error(exc: Exception, login: str | None = None) -> None:
    st.error(str(exc))
    if login:
        st.link_button("Log in again", login)


# ───────────────────────────── mint ─────────────────────────────


def mint_panel(
    page: str,
    *,
    ctx: dict,
    capture: Callable[[], bytes],
    payload: MintPayload,
) -> None:
    """Mint button plus live step reporting.

    Each click runs a fresh `MintOrchestrator`; failures end the attempt and
    are shown inline.
    """
    st.subheader("Mint as NFT")
    if not settings.CONTRACT_ADDRESS:
        st.info("Minting is disabled: set CONTRACT_ADDRESS to the receipt contract on Base.")
        return

    st.caption(
        f"Mints on {BASE_MAINNET.name} via `safeMint`. "
        f"Wallet: {short_addr(getattr(ctx.get('WALLET_SESSION'), 'address', None))}"
    )
    if not st.button("Mint receipt", type="primary", key=k(page, "mint")):
        return

    total = len(PROGRESS_STEPS)
    with st.status("Starting mint...", expanded=True) as status:
        bar = st.progress(0.0)

        def on_step(step: MintStep) -> None:
            if step.number:
                status.update(label=f"Step {step.number}/{total}: {step.label}")
                bar.progress(step.number / total)
                st.write(step.label)

        orchestrator = MintOrchestrator(
            connector_for(ctx["HOST_ENV"]),
            IpfsUploader(settings.BACKEND_URL, get_http(), settings.HTTP_TIMEOUT),
            settings.CONTRACT_ADDRESS,
            BASE_MAINNET,
            on_step=on_step,
            receipt_timeout=settings.TX_RECEIPT_TIMEOUT,
        )
        try:
            record = orchestrator.mint(capture, payload)
        except ReceiptifyError as e:
            status.update(label=f"Mint failed: {e}", state="error")
            st.error(str(e))
            return
        status.update(label=MintStep.DONE.label, state="complete")

    st.session_state["WALLET_SESSION"] = orchestrator.session
    st.success("✅ Receipt minted!")
    tx_url = BASE_MAINNET.tx_url(record.tx_hash)
    if tx_url:
        st.markdown(f"[View transaction]({tx_url})")
    st.caption(f"tokenURI: `{record.token_uri}`")
