# frontend/streamlit_app/services/auth.py
# SPDX-License-Identifier: Apache-2.0
"""Bearer-token hand-off from the OAuth backend.

The backend performs the code exchange and redirects to `/spotify` with
`?access_token=...`. The token is read exactly once and removed from the
query string so it does not linger in the address bar or browser history.
"""

from __future__ import annotations

from collections.abc import MutableMapping

TOKEN_PARAM = "access_token"


def consume_access_token(params: MutableMapping[str, str]) -> str | None:
    """Pop the access token from `params` (e.g. `st.query_params`).

    Returns the token, or None when absent or blank. The parameter is removed
    in both cases.
    """
    token = params.pop(TOKEN_PARAM, None)
    if isinstance(token, list):  # some proxies hand back every value
        token = token[-1] if token else None
    token = (token or "").strip()
    return token or None


def login_url(backend_url: str) -> str:
    """URL that starts the Spotify OAuth flow on the backend."""
    return f"{backend_url.rstrip('/')}/login"
