# frontend/streamlit_app/core/errors.py
# SPDX-License-Identifier: Apache-2.0
"""Exception taxonomy.

Every failure is terminal for the current attempt. Pages catch these at the
action boundary and surface `str(exc)` with `st.error`; messages are written
for the end user.

  ListeningApiError / TokenExpiredError  → re-login
  Wallet* / UserRejectedError / ChainSwitchError / MintError → inline alert
  UploadError                              → inline alert
  RenderError                              → inline alert
"""

from __future__ import annotations


class ReceiptifyError(RuntimeError):
    """Base class for user-facing failures."""


# --- (a) authentication / music service --------------------------------------


class ListeningApiError(ReceiptifyError):
    """Music-service request failed or returned an unexpected body."""


class TokenExpiredError(ListeningApiError):
    """The bearer token was rejected (HTTP 401)."""


# --- (b) wallet / chain --------------------------------------------------------


class WalletError(ReceiptifyError):
    pass


class WalletUnavailableError(WalletError):
    """No wallet endpoint reachable, or it exposes no account."""


class WalletRpcError(WalletError):
    """A JSON-RPC error object returned by the wallet."""

    def __init__(self, code: int | None, message: str) -> None:
        super().__init__(message)
        self.code = code


class UserRejectedError(WalletError):
    """The user declined a wallet prompt (EIP-1193 code 4001)."""


class ChainSwitchError(WalletError):
    pass


class MintError(WalletError):
    """Contract call failed or the transaction reverted."""


# --- (c) backend ---------------------------------------------------------------


class UploadError(ReceiptifyError):
    """Pinning backend failed or returned no tokenURI."""


class RenderError(ReceiptifyError):
    pass
