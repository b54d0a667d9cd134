from __future__ import annotations

import streamlit as st

from src.data.templates import BULK_PASTE_PLACEHOLDER, FINDINGS_DEMO_CSV, FINDINGS_TEMPLATE_CSV
from src.schemas.state import Category, Severity
from src.services.errors import TrackerError
from src.services.findings import add_finding, import_csv, import_text_lines
from src.services.ingestion import FINDING_CSV_COLUMNS
from src.services.state_store import get_store
from src.ui.components import flush_notices, h2, notify, plural, sidebar_status

SEVERITIES = [s.value for s in Severity]
CATEGORIES = [c.value for c in Category]


def _quick_add() -> None:
    h2("Quick Add (single finding)")
    with st.form("quick_add_form", clear_on_submit=True):
        c1, c2 = st.columns(2)
        with c1:
            title = st.text_input("Finding title (required)")
            severity = st.selectbox("Severity", SEVERITIES, index=SEVERITIES.index(Severity.MINOR.value))
            page_ref = st.text_input("Page ref (optional)")
        with c2:
            comar_ref = st.text_input("COMAR ref (label only)")
            category = st.selectbox("Category", CATEGORIES, index=CATEGORIES.index(Category.OTHER.value))
            notes = st.text_area("Notes (optional)", height=80)
        ok = st.form_submit_button("Add Finding", type="primary")

    if ok:
        try:
            add_finding(title, comar_ref=comar_ref, severity=severity, category=category, notes=notes, page_ref=page_ref)
        except TrackerError as e:
            st.error(str(e))
            return
        notify("success", "Added 1 finding.")
        st.rerun()


def _bulk_paste() -> None:
    h2("Bulk Paste (one finding per line)")
    with st.form("bulk_paste_form", clear_on_submit=True):
        text = st.text_area("Findings", placeholder=BULK_PASTE_PLACEHOLDER, height=160, label_visibility="collapsed")
        st.caption("Defaults for pasted lines:")
        c1, c2, c3 = st.columns([2, 2, 1])
        severity = c1.selectbox("Severity", SEVERITIES, index=SEVERITIES.index(Severity.MINOR.value), key="bulk_sev")
        category = c2.selectbox("Category", CATEGORIES, index=CATEGORIES.index(Category.OTHER.value), key="bulk_cat")
        with c3:
            ok = st.form_submit_button("Add Lines")

    if ok:
        try:
            res = import_text_lines(text, severity=severity, category=category)
        except TrackerError as e:
            st.error(str(e))
            return
        notify("success", f"Added {plural(res.count, 'finding')}.")
        st.rerun()


def _csv_import() -> None:
    h2("Import CSV", "Expected headers: " + ", ".join(FINDING_CSV_COLUMNS))

    c1, c2 = st.columns(2)
    c1.download_button("⬇️ CSV template", data=FINDINGS_TEMPLATE_CSV.encode("utf-8"), file_name="findings_template.csv", mime="text/csv")
    c2.download_button("⬇️ Demo CSV", data=FINDINGS_DEMO_CSV.encode("utf-8"), file_name="findings_demo.csv", mime="text/csv")

    uploaded = st.file_uploader("findings.csv", type=["csv"], key="findings_csv")
    if uploaded is None:
        return
    if st.button("Import file", type="primary"):
        try:
            res = import_csv(uploaded.getvalue())
        except TrackerError as e:
            st.error(str(e))
            return
        msg = f"Added {plural(res.count, 'finding')}."
        if res.skipped:
            msg += f" Skipped {plural(res.skipped, 'row')} without a title."
        notify("success", msg)
        st.rerun()


def upload_page() -> None:
    flush_notices()
    doc = get_store().load_document()
    sidebar_status(doc)

    st.title("Upload")
    st.caption(f"Current findings: {len(doc.findings)}")

    _quick_add()
    st.divider()
    _bulk_paste()
    st.divider()
    _csv_import()
