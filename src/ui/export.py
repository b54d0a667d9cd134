from __future__ import annotations

import streamlit as st

from src.services.exports import capas_csv, document_json, findings_csv
from src.services.state_store import get_store
from src.ui.components import flush_notices, h2, sidebar_status


def export_page() -> None:
    flush_notices()
    doc = get_store().load_document()
    sidebar_status(doc)

    st.title("Export")
    st.caption(f"Last saved: {doc.last_saved}")

    h2("Full document", "Findings, CAPAs and evidence metadata as JSON.")
    st.download_button("⬇️ comar_audit_state.json", data=document_json(doc), file_name="comar_audit_state.json", mime="application/json")

    h2("Tables", "Findings CSV uses the import headers and can be imported again.")
    c1, c2 = st.columns(2)
    c1.download_button("⬇️ findings.csv", data=findings_csv(doc), file_name="findings.csv", mime="text/csv")
    c2.download_button("⬇️ capas.csv", data=capas_csv(doc), file_name="capas.csv", mime="text/csv")
