from __future__ import annotations

import streamlit as st

from src.schemas.state import parse_iso
from src.services.dashboard import dashboard_counts, recent_activity
from src.services.state_store import get_store
from src.ui.components import flush_notices, h2, sidebar_status


def _fmt_when(value: str) -> str:
    try:
        return parse_iso(value).strftime("%Y-%m-%d %H:%M")
    except (TypeError, ValueError):
        return str(value or "")


def dashboard_page() -> None:
    flush_notices()
    doc = get_store().load_document()
    sidebar_status(doc)

    st.title("Dashboard")

    counts = dashboard_counts(doc)
    c1, c2, c3 = st.columns(3)
    c1.metric("Open Findings", counts.open_findings)
    c2.metric("Open CAPAs", counts.open_capas)
    c3.metric("Evidence Documents", counts.evidence)

    st.divider()
    h2("Recent Activity")

    recent = recent_activity(doc)
    if not recent:
        st.info("Nothing yet. Go to Upload to add findings.")
        return

    for r in recent:
        with st.container(border=True):
            left, right = st.columns([4, 1])
            left.markdown(f"**{r['title']}**")
            left.caption(r["kind"])
            right.caption(_fmt_when(r["when"]))
