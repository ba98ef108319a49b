"""
Shared test fixtures — sample calculator, fresh session store, test client.
"""

import pytest
from fastapi.testclient import TestClient

from quotecalc.config import settings
from quotecalc.main import app
from quotecalc.schema_loader import get_schema, load_schema
from quotecalc.selection import SessionStore, get_store


def sample_document():
    """Travel calculator: one dropdown, one checkbox group, a divider, a discount toggle."""
    return {
        "calculators": [
            {
                "ccb_name": "Trip Planner",
                "ccb_fields": [
                    {
                        "_id": 1,
                        "type": "Drop Down",
                        "label": "Travel Class",
                        "description": "Seat class for the whole trip.",
                        "alias": "travel",
                        "options": [
                            {"optionText": "Economy", "optionValue": "0"},
                            {"optionText": "Business", "optionValue": "500"},
                        ],
                    },
                    {"_id": 2, "type": "Line", "label": ""},
                    {
                        "_id": 3,
                        "type": "Checkbox",
                        "label": "Extras",
                        "alias": "insurance",
                        "options": [
                            {"optionText": "Insurance", "optionValue": "75"},
                        ],
                    },
                    {
                        "_id": 4,
                        "type": "Toggle",
                        "label": "Discounts",
                        "options": [
                            {"optionText": "Loyalty", "optionValue": "-50"},
                            {"optionText": "Broken", "optionValue": "abc"},
                        ],
                    },
                ],
            }
        ]
    }


@pytest.fixture
def schema():
    return load_schema(sample_document())


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def export_dir(tmp_path, monkeypatch):
    out = tmp_path / "quotes"
    monkeypatch.setattr(settings, "EXPORT_DIR", str(out))
    monkeypatch.setattr(settings, "QUOTE_PREFIX", "Trip")
    return out


@pytest.fixture
def client(schema, store, export_dir):
    """FastAPI test client wired to the sample calculator."""
    app.dependency_overrides[get_schema] = lambda: schema
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def session_id(client):
    resp = client.post("/api/calculator/sessions")
    assert resp.status_code == 200
    return resp.json()["session_id"]
