# frontend/streamlit_app/ui/keys.py
# SPDX-License-Identifier: Apache-2.0
"""Widget key helper.

The Spotify and Last.fm pages render the same customization and mint widgets;
every key is prefixed with its page so the two never share state.

    st.color_picker("Text", key=k("spotify", "text_color"))
    st.radio("Range", ..., key=k("spotify", "range", receipt_type))
"""

from __future__ import annotations


def k(page: str, *parts: object) -> str:
    """Return `"<page>:<part>:<part>..."`."""
    return ":".join([page, *(str(p) for p in parts)])
