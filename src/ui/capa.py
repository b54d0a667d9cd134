from __future__ import annotations

import streamlit as st

from src.schemas.state import AppState, Capa, CapaStatus, parse_iso
from src.services.capa import available_findings, create_capa, delete_capa, edit_capa, finding_title_for
from src.services.errors import TrackerError
from src.services.state_store import get_store
from src.ui.components import flush_notices, h2, notify, sidebar_status

STATUSES = [s.value for s in CapaStatus]


def _due_value(c: Capa):
    if not c.due_date:
        return None
    try:
        return parse_iso(c.due_date).date()
    except ValueError:
        return None


def _create_form(doc: AppState) -> None:
    h2("Create Corrective Action Plan (CAPA)")

    choices = available_findings(doc)
    labels = {f.id: f.title for f in choices}

    with st.form("create_capa_form", clear_on_submit=True):
        c1, c2, c3 = st.columns(3)
        with c1:
            finding_id = st.selectbox(
                "Link to Finding",
                options=list(labels.keys()),
                format_func=lambda fid: labels.get(fid, fid),
                index=None,
                placeholder="Select a finding" if labels else "No unlinked findings",
            )
        with c2:
            responsible = st.text_input("Responsible Person", placeholder="e.g., Director of Nursing")
        with c3:
            due = st.date_input("Due Date", value=None)

        summary = st.text_input("Deficiency Summary", placeholder="Short summary of deficiency")
        root_cause = st.text_area("Root Cause", placeholder="Why did this happen?", height=90)
        action = st.text_area("Corrective Action", placeholder="What will we do to fix/avoid recurrence?", height=90)
        ok = st.form_submit_button("Create CAPA", type="primary", disabled=not labels)

    if ok:
        try:
            create_capa(
                finding_id or "",
                summary,
                action,
                root_cause=root_cause,
                responsible_person=responsible,
                due_date=due,
            )
        except TrackerError as e:
            st.error(str(e))
            return
        notify("success", "CAPA created and linked.")
        st.rerun()


def _capa_row(doc: AppState, c: Capa) -> None:
    finding_title = finding_title_for(doc, c) or "(finding removed)"
    with st.expander(f"{c.deficiency_summary} • {c.status.value}", expanded=False):
        st.caption(f"Finding: {finding_title}")
        with st.form(f"edit_capa_{c.id}"):
            c1, c2 = st.columns(2)
            with c1:
                root_cause = st.text_area("Root Cause", value=c.root_cause, height=90, key=f"rc_{c.id}")
                action = st.text_area("Corrective Action", value=c.corrective_action, height=90, key=f"ca_{c.id}")
            with c2:
                status = st.selectbox("Status", STATUSES, index=STATUSES.index(c.status.value), key=f"st_{c.id}")
                responsible = st.text_input("Responsible Person", value=c.responsible_person or "", key=f"rp_{c.id}")
                due = st.date_input("Due Date", value=_due_value(c), key=f"due_{c.id}")
                notes = st.text_input(
                    "Verification Notes",
                    value=c.verification_notes,
                    placeholder="How verified / by whom / when",
                    key=f"vn_{c.id}",
                )
            saved = st.form_submit_button("Save")

        if saved:
            try:
                edit_capa(
                    c.id,
                    root_cause=root_cause,
                    corrective_action=action,
                    status=status,
                    responsible_person=responsible.strip() or None,
                    due_date=due,
                    verification_notes=notes,
                )
            except TrackerError as e:
                st.error(str(e))
                return
            notify("success", "CAPA updated.")
            st.rerun()

        if st.button("Delete", key=f"del_capa_{c.id}", type="secondary"):
            try:
                delete_capa(c.id)
            except TrackerError as e:
                st.error(str(e))
                return
            notify("success", "CAPA deleted.")
            st.rerun()


def capa_page() -> None:
    flush_notices()
    doc = get_store().load_document()
    sidebar_status(doc)

    st.title("CAPA")
    _create_form(doc)

    st.divider()
    h2("Existing CAPAs")
    if not doc.capas:
        st.info("No CAPAs yet.")
        return
    for c in doc.capas:
        _capa_row(doc, c)
