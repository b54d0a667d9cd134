import json

from src.schemas.state import AppState, Capa, CapaStatus, FindingStatus
from src.services.capa import create_capa, edit_capa
from src.services.dashboard import dashboard_counts, findings_frame, recent_activity, review_summary
from src.services.exports import capas_csv, document_json, findings_csv
from src.services.findings import add_finding, import_csv, new_finding, toggle_finding_status


def test_dashboard_counts(store):
    a = add_finding("A", store=store).findings[-1].id
    b = add_finding("B", store=store).findings[-1].id
    add_finding("C", store=store)
    toggle_finding_status(a, store=store)
    create_capa(a, "s1", "a1", store=store)
    doc = create_capa(b, "s2", "a2", store=store)
    doc = edit_capa(doc.capas[0].id, status="Done", store=store)

    counts = dashboard_counts(doc)
    assert counts.open_findings == 2
    assert counts.open_capas == 1
    assert counts.evidence == 0


def test_open_capas_include_in_progress(store):
    fid = add_finding("A", store=store).findings[0].id
    doc = create_capa(fid, "s", "a", store=store)
    doc = edit_capa(doc.capas[0].id, status=CapaStatus.IN_PROGRESS, store=store)
    assert dashboard_counts(doc).open_capas == 1


def test_recent_activity_newest_first():
    f_old = new_finding("old", now="2025-01-01T00:00:00.000Z")
    f_new = new_finding("new", now="2025-03-01T00:00:00.000Z")
    capa = Capa(
        id="c1",
        finding_id=f_old.id,
        deficiency_summary="capa summary",
        corrective_action="x",
        created_at="2025-02-01T00:00:00.000Z",
        updated_at="2025-02-01T00:00:00.000Z",
    )
    doc = AppState(findings=[f_old, f_new], capas=[capa], evidence=[])

    recent = recent_activity(doc, limit=5)
    assert [r["title"] for r in recent] == ["new", "capa summary", "old"]
    assert recent[1]["kind"] == "CAPA"
    assert recent[1]["id"] == "capa:c1"
    assert len(recent_activity(doc, limit=2)) == 2


def test_recent_activity_limit_defaults_to_five():
    findings = [new_finding(f"f{i}", now=f"2025-01-0{i + 1}T00:00:00.000Z") for i in range(7)]
    doc = AppState(findings=findings, capas=[], evidence=[])
    recent = recent_activity(doc)
    assert [r["title"] for r in recent] == ["f6", "f5", "f4", "f3", "f2"]


def test_review_summary_and_frame(store):
    import_csv("title,severity,category\nA,Critical,Safety\nB,Critical,Other\nC,Minor,Safety\n", store=store)
    doc = store.load_document()
    s = review_summary(doc)
    assert s["findings"] == 3
    assert s["by_severity"] == {"Critical": 2, "Major": 0, "Minor": 1}
    assert s["by_category"]["Safety"] == 2
    assert s["by_status"] == {FindingStatus.OPEN.value: 3, FindingStatus.RESOLVED.value: 0}

    frame = findings_frame(doc)
    assert list(frame["title"]) == ["A", "B", "C"]
    assert not frame["hasCapa"].any()
    assert len(findings_frame(AppState.empty())) == 0


def test_document_json_matches_stored_shape(store):
    doc = add_finding("A", comar_ref="10.07.14.15", store=store)
    payload = json.loads(document_json(doc))
    assert set(payload) == {"findings", "capas", "evidence", "lastSaved"}
    assert payload["findings"][0]["comarRef"] == "10.07.14.15"
    assert AppState.model_validate(payload) == doc


def test_findings_csv_can_be_imported_again(store, backend):
    from src.services.state_store import StateStore

    import_csv("title,severity,category,comarRef\nA,Major,Safety,1.2\nB,Critical,Personnel,\n", store=store)
    data = findings_csv(store.load_document())

    other = StateStore(backend, key="copy")
    res = import_csv(data, store=other)
    assert [(f.title, f.severity.value, f.category.value, f.comar_ref) for f in res.created] == [
        ("A", "Major", "Safety", "1.2"),
        ("B", "Critical", "Personnel", ""),
    ]


def test_capas_csv_includes_finding_title(store):
    fid = add_finding("Drill", store=store).findings[0].id
    doc = create_capa(fid, "Drill log missing", "Run drills", due_date="2025-06-30", store=store)
    text = capas_csv(doc).decode("utf-8")
    header, row = text.strip().splitlines()
    assert header.startswith("id,findingId,findingTitle,deficiencySummary")
    assert "Drill,Drill log missing" in row
    assert "2025-06-30T00:00:00.000Z" in row


def test_empty_exports_have_headers():
    doc = AppState.empty()
    assert findings_csv(doc).decode("utf-8").startswith("title,comarRef,severity,notes,pageRef,category")
    assert capas_csv(doc).decode("utf-8").startswith("id,findingId")
