from __future__ import annotations

import logging

import streamlit as st

from src.config import APP_NAME, APP_VERSION
from src.schemas.state import AppState

logger = logging.getLogger(__name__)

_ICONS = {"success": "✅", "error": "⚠️", "info": "ℹ️"}


def h2(title: str, caption: str | None = None):
    st.subheader(title)
    if caption:
        st.caption(caption)


NOTICES_KEY = "_pending_notices"


def notify(kind: str, message: str) -> None:
    """Queue a toast; shown by `flush_notices` on the next run (actions end with st.rerun).

    Display problems never break the calling action.
    """
    try:
        st.session_state.setdefault(NOTICES_KEY, []).append((kind, message))
    except Exception:
        logger.debug("notice dropped: %s", message, exc_info=True)


def flush_notices() -> None:
    try:
        pending = st.session_state.pop(NOTICES_KEY, [])
        for kind, message in pending:
            st.toast(message, icon=_ICONS.get(kind, "ℹ️"))
    except Exception:
        logger.debug("toast failed", exc_info=True)


def plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def sidebar_status(doc: AppState) -> None:
    with st.sidebar:
        st.markdown(f"**{APP_NAME}** v{APP_VERSION}")
        st.caption(f"Findings: {len(doc.findings)} • CAPAs: {len(doc.capas)}")
        st.caption(f"Last saved: {doc.last_saved}")
