# frontend/streamlit_app/core/config.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Centralized, immutable application configuration for the Receiptify app.

This module defines a frozen `Settings` dataclass whose fields are populated
from environment variables (loaded via python-dotenv if a `.env` file is
present). The resulting singleton `settings` is imported by other modules to
avoid scattering `os.getenv` calls throughout the codebase.

Design goals
------------
- **Single source of truth**: backend URL, API keys, wallet endpoints and the
  mint contract address live here; services receive them as arguments.
- **Immutability**: `@dataclass(frozen=True)` prevents accidental mutation at
  runtime. Changes require process restart (or re-instantiation in tests).
- **Fast import**: only the dotenv load and dataclass construction happen at
  import time. No network calls.

Security notes
--------------
- `LASTFM_API_KEY` is read here and never logged.
- Spotify bearer tokens are *not* configuration; they arrive on the redirect
  URL and live in the Streamlit session only.

Testing
-------
Services never read `settings` directly, so unit tests pass explicit values
instead of reloading this module.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# `override=False` by default, so pre-set env vars take precedence.
load_dotenv()


@dataclass(frozen=True)
class Settings:
    """
    Immutable application settings.

    Each attribute is populated from the corresponding environment variable;
    when unset, a documented default is used. See `.env.example`.
    """

    # --- External backend (OAuth token exchange + IPFS pinning) --------------
    BACKEND_URL: str = os.getenv("BACKEND_URL", "http://localhost:8888")

    # --- Music services -------------------------------------------------------
    SPOTIFY_API_BASE: str = os.getenv("SPOTIFY_API_BASE", "https://api.spotify.com/v1")
    LASTFM_API_ROOT: str = os.getenv(
        "LASTFM_API_ROOT", "https://ws.audioscrobbler.com/2.0/"
    )
    LASTFM_API_KEY: str = os.getenv("LASTFM_API_KEY", "")

    # --- Wallets --------------------------------------------------------------
    # JSON-RPC endpoint of the user's wallet (Frame listens on 1248 by default).
    WALLET_RPC_URL: str = os.getenv("WALLET_RPC_URL", "http://127.0.0.1:1248")
    # Wallet bridge exposed by an embedding mini-app host. Blank disables it.
    MINIAPP_WALLET_URL: str = os.getenv("MINIAPP_WALLET_URL", "")

    # --- Receipt NFT contract on Base ----------------------------------------
    CONTRACT_ADDRESS: str = os.getenv("CONTRACT_ADDRESS", "")

    # --- Timeouts (seconds) ---------------------------------------------------
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "15"))
    TX_RECEIPT_TIMEOUT: float = float(os.getenv("TX_RECEIPT_TIMEOUT", "180"))
    # Wallet requests block until the user answers the wallet dialog.
    WALLET_PROMPT_TIMEOUT: float = float(os.getenv("WALLET_PROMPT_TIMEOUT", "120"))

    # --- Rendering --------------------------------------------------------------
    # Optional monospace TrueType font; falls back to DejaVu Sans Mono / Pillow.
    RECEIPT_FONT_PATH: str = os.getenv("RECEIPT_FONT_PATH", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


# Singleton settings object imported by consumers.
settings = Settings()
