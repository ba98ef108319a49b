"""
Calculator API acceptance tests.

Tests:
1-2.   Health + schema endpoints
3-4.   Session start + form view
5-7.   Select / toggle / reset through the API
8.     Line items endpoint
9-11.  Export (PDF download, saved file, empty-export rejection)
12-14. Error paths (unknown session, unknown field, discarded session)
15-16. Degraded mode without a calculator
"""

from quotecalc.main import app
from quotecalc.schema_loader import get_schema
from quotecalc.schemas import SchemaNotFound


def _select(client, session_id, field_id, value):
    return client.post(f"/api/calculator/sessions/{session_id}/select",
                       json={"field_id": field_id, "value": value})


def _toggle(client, session_id, field_id, option_text, checked=True):
    return client.post(f"/api/calculator/sessions/{session_id}/toggle",
                       json={"field_id": field_id, "option_text": option_text, "checked": checked})


# ============================================================
# 1-2. Health + schema
# ============================================================

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "app": "quotecalc", "calculator_loaded": True}


def test_get_calculator_schema(client):
    resp = client.get("/api/calculator")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Trip Planner"
    assert len(data["fields"]) == 4


# ============================================================
# 3-4. Session start + form view
# ============================================================

def test_start_session_returns_blank_form(client):
    resp = client.post("/api/calculator/sessions")
    assert resp.status_code == 200
    data = resp.json()
    assert data["session_id"]
    assert data["form"]["total_display"] == "$0.00"
    assert [c["kind"] for c in data["form"]["controls"]] == [
        "select", "divider", "checkbox_group", "checkbox_group",
    ]


def test_get_form_view(client, session_id):
    resp = client.get(f"/api/calculator/sessions/{session_id}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Trip Planner"


# ============================================================
# 5-7. Events
# ============================================================

def test_travel_scenario_via_api(client, session_id):
    assert _select(client, session_id, 1, "500").json()["total"] == 500.0
    assert _toggle(client, session_id, 3, "Insurance").json()["total_display"] == "$575.00"
    assert _toggle(client, session_id, 3, "Insurance", False).json()["total"] == 500.0
    resp = _select(client, session_id, 1, "0")
    assert resp.json()["total"] == 0.0

    items = client.get(f"/api/calculator/sessions/{session_id}/line-items").json()
    assert items["items"] == []
    assert items["exportable"] is False

    resp = client.post(f"/api/calculator/sessions/{session_id}/export")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please make a selection first."


def test_select_updates_selected_value(client, session_id):
    form = _select(client, session_id, 1, "500").json()
    assert form["controls"][0]["selected"] == "500"


def test_reset_clears_selections(client, session_id):
    _select(client, session_id, 1, "500")
    _toggle(client, session_id, 3, "Insurance")
    resp = client.post(f"/api/calculator/sessions/{session_id}/reset")
    assert resp.status_code == 200
    assert resp.json()["total"] == 0.0
    assert resp.json()["controls"][2]["options"][0]["checked"] is False


# ============================================================
# 8. Line items
# ============================================================

def test_line_items(client, session_id):
    _select(client, session_id, 1, "500")
    _toggle(client, session_id, 3, "Insurance")
    data = client.get(f"/api/calculator/sessions/{session_id}/line-items").json()
    assert data["items"] == [
        {"section": "Travel Class", "item": "Business", "price": 500.0},
        {"section": "Extras", "item": "Insurance", "price": 75.0},
    ]
    assert data["total_display"] == "$575.00"
    assert data["exportable"] is True


# ============================================================
# 9-11. Export
# ============================================================

def test_export_downloads_pdf(client, session_id, export_dir):
    _select(client, session_id, 1, "500")
    resp = client.post(f"/api/calculator/sessions/{session_id}/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content[:5] == b"%PDF-"
    disposition = resp.headers["content-disposition"]
    assert "Trip_Quote_" in disposition and ".pdf" in disposition


def test_export_saves_file(client, session_id, export_dir):
    _toggle(client, session_id, 3, "Insurance")
    client.post(f"/api/calculator/sessions/{session_id}/export")
    saved = list(export_dir.glob("Trip_Quote_*.pdf"))
    assert len(saved) == 1


def test_empty_export_writes_nothing(client, session_id, export_dir):
    resp = client.post(f"/api/calculator/sessions/{session_id}/export")
    assert resp.status_code == 400
    assert not export_dir.exists()


# ============================================================
# 12-14. Error paths
# ============================================================

def test_unknown_session_404(client):
    resp = client.get("/api/calculator/sessions/does-not-exist")
    assert resp.status_code == 404
    assert _select(client, "does-not-exist", 1, "500").status_code == 404


def test_unknown_field_404(client, session_id):
    assert _select(client, session_id, 99, "500").status_code == 404
    assert _toggle(client, session_id, 3, "Lounge").status_code == 404
    assert _select(client, session_id, 3, "75").status_code == 404


def test_discarded_session_gone(client, session_id):
    resp = client.delete(f"/api/calculator/sessions/{session_id}")
    assert resp.status_code == 200
    assert client.get(f"/api/calculator/sessions/{session_id}").status_code == 404
    assert client.delete(f"/api/calculator/sessions/{session_id}").status_code == 404


# ============================================================
# 15-16. Degraded mode
# ============================================================

def test_degraded_form_view(client):
    app.dependency_overrides[get_schema] = lambda: SchemaNotFound(reason="No calculators defined")
    resp = client.get("/api/calculator/form")
    assert resp.status_code == 200
    data = resp.json()
    assert data["available"] is False
    assert data["name"] == "No calculator found"
    assert data["controls"] == []
    assert client.get("/health").json()["calculator_loaded"] is False


def test_degraded_blocks_sessions_and_export(client, session_id):
    app.dependency_overrides[get_schema] = lambda: SchemaNotFound(reason="No calculators defined")
    assert client.get("/api/calculator").status_code == 404
    assert client.post("/api/calculator/sessions").status_code == 404
    resp = client.post(f"/api/calculator/sessions/{session_id}/export")
    assert resp.status_code == 404
    assert "No calculator found" in resp.json()["detail"]
