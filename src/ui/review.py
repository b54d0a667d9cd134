from __future__ import annotations

import pandas as pd
import streamlit as st

from src.schemas.state import Category, Finding, FindingStatus, Severity
from src.services.dashboard import findings_frame, review_summary
from src.services.errors import TrackerError
from src.services.findings import delete_finding, edit_finding, toggle_finding_status
from src.services.state_store import get_store
from src.ui.components import flush_notices, h2, notify, sidebar_status

SEVERITIES = [s.value for s in Severity]
CATEGORIES = [c.value for c in Category]


def _run(action, ok_message: str) -> None:
    try:
        action()
    except TrackerError as e:
        st.error(str(e))
        return
    notify("success", ok_message)
    st.rerun()


def _finding_editor(f: Finding) -> None:
    with st.form(f"edit_finding_{f.id}"):
        c1, c2 = st.columns(2)
        with c1:
            title = st.text_input("Title", value=f.title, key=f"title_{f.id}")
            severity = st.selectbox("Severity", SEVERITIES, index=SEVERITIES.index(f.severity.value), key=f"sev_{f.id}")
            page_ref = st.text_input("Page ref", value=f.page_ref, key=f"page_{f.id}")
        with c2:
            comar_ref = st.text_input("COMAR ref", value=f.comar_ref, key=f"comar_{f.id}")
            category = st.selectbox("Category", CATEGORIES, index=CATEGORIES.index(f.category.value), key=f"cat_{f.id}")
            notes = st.text_area("Notes", value=f.notes, height=80, key=f"notes_{f.id}")
        saved = st.form_submit_button("Save")

    if saved:
        _run(
            lambda: edit_finding(
                f.id,
                title=title,
                comar_ref=comar_ref,
                severity=severity,
                category=category,
                notes=notes,
                page_ref=page_ref,
            ),
            "Finding updated.",
        )

    b1, b2, _ = st.columns([1, 1, 3])
    label = "Mark Resolved" if f.status == FindingStatus.OPEN else "Reopen"
    if b1.button(label, key=f"toggle_{f.id}"):
        _run(lambda: toggle_finding_status(f.id), "Status updated.")
    if b2.button("Delete", key=f"delete_{f.id}", type="secondary"):
        _run(lambda: delete_finding(f.id), "Finding deleted.")
    if f.linked_capa_id:
        st.caption("Linked CAPA exists. Deleting this finding leaves the CAPA in place.")


def review_page() -> None:
    flush_notices()
    doc = get_store().load_document()
    sidebar_status(doc)

    st.title("Review")

    summary = review_summary(doc)
    c1, c2, c3 = st.columns(3)
    c1.metric("Findings", summary["findings"])
    c2.metric("CAPAs", summary["capas"])
    c3.metric("Evidence", summary["evidence"])

    if not doc.findings:
        st.info("No findings yet. Go to Upload to add findings.")
        return

    with st.expander("Breakdown", expanded=False):
        b1, b2, b3 = st.columns(3)
        b1.dataframe(pd.Series(summary["by_severity"], name="count"), use_container_width=True)
        b2.dataframe(pd.Series(summary["by_category"], name="count"), use_container_width=True)
        b3.dataframe(pd.Series(summary["by_status"], name="count"), use_container_width=True)

    st.dataframe(findings_frame(doc), use_container_width=True, hide_index=True)

    st.divider()
    h2("Edit Findings")

    status_filter = st.selectbox("Show", ["All", FindingStatus.OPEN.value, FindingStatus.RESOLVED.value], index=0)
    for f in doc.findings:
        if status_filter != "All" and f.status.value != status_filter:
            continue
        with st.expander(f"{f.title} • {f.severity.value} • {f.status.value}", expanded=False):
            _finding_editor(f)
