from datetime import date

import pytest

from src.schemas.state import CapaStatus
from src.services.capa import (
    available_findings,
    create_capa,
    delete_capa,
    due_date_iso,
    edit_capa,
    finding_title_for,
)
from src.services.errors import NotFound, ValidationFailed
from src.services.findings import add_finding


@pytest.fixture
def finding_id(store):
    return add_finding("Emergency drill not documented", store=store).findings[0].id


def test_create_capa_links_both_ways(store, finding_id):
    doc = create_capa(
        finding_id,
        " Drill log missing ",
        "Run and log quarterly drills",
        root_cause="No owner",
        responsible_person="Administrator",
        due_date=date(2025, 6, 30),
        store=store,
    )
    capas = [c for c in doc.capas if c.finding_id == finding_id]
    assert len(capas) == 1
    capa = capas[0]
    assert doc.get_finding(finding_id).linked_capa_id == capa.id
    assert capa.status == CapaStatus.OPEN
    assert capa.verification_notes == ""
    assert capa.evidence_doc_ids == []
    assert capa.deficiency_summary == "Drill log missing"
    assert capa.due_date == "2025-06-30T00:00:00.000Z"
    assert doc.get_finding(finding_id).updated_at == capa.created_at
    assert finding_title_for(doc, capa) == "Emergency drill not documented"


@pytest.mark.parametrize(
    "fid, summary, action",
    [("", "s", "a"), ("FID", "  ", "a"), ("FID", "s", "")],
)
def test_create_capa_validation(backend, store, finding_id, fid, summary, action):
    raw_before = backend.get_text("test-state")
    with pytest.raises(ValidationFailed):
        create_capa(finding_id if fid == "FID" else fid, summary, action, store=store)
    assert backend.get_text("test-state") == raw_before


def test_create_capa_on_linked_finding_is_rejected(backend, store, finding_id):
    create_capa(finding_id, "s", "a", store=store)
    raw_before = backend.get_text("test-state")
    with pytest.raises(ValidationFailed):
        create_capa(finding_id, "s2", "a2", store=store)
    assert backend.get_text("test-state") == raw_before


def test_create_capa_unknown_finding(store):
    with pytest.raises(NotFound):
        create_capa("missing", "s", "a", store=store)


def test_available_findings_excludes_linked(store, finding_id):
    other = add_finding("Other", store=store).findings[-1].id
    doc = create_capa(finding_id, "s", "a", store=store)
    assert [f.id for f in available_findings(doc)] == [other]


def test_edit_capa_fields(store, finding_id):
    doc = create_capa(finding_id, "s", "a", store=store)
    capa = doc.capas[0]

    doc = edit_capa(capa.id, status="In Progress", verification_notes="checked by DON", due_date="2025-07-01", store=store)
    edited = doc.capas[0]
    assert edited.status == CapaStatus.IN_PROGRESS
    assert edited.verification_notes == "checked by DON"
    assert edited.due_date == "2025-07-01T00:00:00.000Z"
    assert edited.finding_id == capa.finding_id
    assert edited.created_at == capa.created_at


def test_edit_capa_refuses_locked_and_blank_required(store, finding_id):
    capa_id = create_capa(finding_id, "s", "a", store=store).capas[0].id
    with pytest.raises(ValidationFailed):
        edit_capa(capa_id, finding_id="other", store=store)
    with pytest.raises(ValidationFailed):
        edit_capa(capa_id, corrective_action=" ", store=store)
    with pytest.raises(ValidationFailed):
        edit_capa(capa_id, status="Cancelled", store=store)
    assert store.load_document().capas[0].corrective_action == "a"


def test_delete_capa_clears_link(store, finding_id):
    capa_id = create_capa(finding_id, "s", "a", store=store).capas[0].id
    doc = delete_capa(capa_id, store=store)
    assert doc.get_capa(capa_id) is None
    assert doc.get_finding(finding_id).linked_capa_id is None
    assert finding_id in [f.id for f in available_findings(doc)]


def test_delete_missing_capa(store):
    with pytest.raises(NotFound):
        delete_capa("nope", store=store)


def test_due_date_iso():
    assert due_date_iso(None) is None
    assert due_date_iso("") is None
    assert due_date_iso("2025-01-31") == "2025-01-31T00:00:00.000Z"
    assert due_date_iso("2025-01-31T08:30:00Z") == "2025-01-31T08:30:00.000Z"
    with pytest.raises(ValidationFailed):
        due_date_iso("31/01/2025")
