# frontend/streamlit_app/ui/layout.py
# SPDX-License-Identifier: Apache-2.0
"""Page chrome and the preview/controls split.

- `configure_page`: browser title, icon and layout; call once from `app.py`
  before anything else is drawn.
- `stack_or_columns_spec`: the receipt pages put the preview next to the
  customization panel on wide screens, or one above the other when the
  sidebar's "Side-by-side" toggle is off.
"""

from __future__ import annotations

from collections.abc import Sequence

import streamlit as st
from streamlit.delta_generator import DeltaGenerator


def configure_page(title: str, icon: str = "🧾") -> None:
    st.set_page_config(page_title=title, page_icon=icon, layout="wide")


def stack_or_columns_spec(
    spec: int | Sequence[float] | Sequence[int],
    stacked: bool,
) -> list[DeltaGenerator]:
    """Return one container per slot in `spec`.

    Args:
      spec: Column count or relative widths, as accepted by `st.columns`.
      stacked: If True, return vertically stacked containers (widths are
        ignored); otherwise real columns.
    """
    if stacked:
        count = spec if isinstance(spec, int) else len(spec)
        return [st.container() for _ in range(count)]
    return st.columns(spec)
