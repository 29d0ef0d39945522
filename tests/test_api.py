"""Tests for the REST API.

Uses FastAPI TestClient and swaps the module-level catalog connector for a
stub so no catalog files or network calls are needed.
"""

import pytest
from fastapi.testclient import TestClient

from risk_scoring.errors import CatalogUnavailableError, Stage


class _StubConnector:
    def __init__(self, snapshot=None, error=None):
        self.snapshot = snapshot
        self.error = error

    def load_snapshot(self):
        if self.error is not None:
            raise self.error
        return self.snapshot


@pytest.fixture()
def main_module():
    import api.main as main_module

    return main_module


@pytest.fixture()
def client(monkeypatch, main_module, snapshot, settings):
    monkeypatch.setattr(main_module, "catalog_connector", _StubConnector(snapshot))
    monkeypatch.setattr(main_module, "settings", settings)
    return TestClient(main_module.app)


def test_root_lists_endpoints(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json()["endpoints"]["risk_assessment"] == "/api/v1/risk/assess"


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.json()["thresholds"]["force_preselect_score"] == 7.0


def test_assess_coastal_hurricane(client):
    resp = client.post(
        "/api/v1/risk/assess",
        json={"business_type_id": "restaurant", "location_id": "harbour", "as_of": "2024-01-15"},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["risks"][0]["hazard_id"] == "hurricane"
    assert data["risks"][0]["final_score"] == 10.0
    assert data["risks"][0]["disposition"] == "force_selected"
    assert "hurricane" in data["active_hazards"]
    assert data["as_of"] == "2024-01-15"


def test_assess_with_characteristics(client):
    resp = client.post(
        "/api/v1/risk/assess",
        json={
            "business_type_id": "it_services",
            "location_id": "inland_village",
            "as_of": "2024-01-15",
            "characteristics": {"digital_dependency": 95, "floor_count": 3},
        },
    )

    risks = {risk["hazard_id"]: risk for risk in resp.json()["risks"]}
    assert risks["cyber_attack"]["final_score"] == 7.0
    assert risks["cyber_attack"]["applied_multipliers"][0]["name"] == "Digital dependent"


def test_assess_unknown_business_type_is_404(client):
    resp = client.post("/api/v1/risk/assess", json={"business_type_id": "submarine_base"})

    assert resp.status_code == 404
    assert resp.json()["error_code"] == "NotFoundError"
    assert resp.json()["entity_id"] == "submarine_base"


def test_assess_unknown_location_is_404(client):
    resp = client.post("/api/v1/risk/assess", json={"business_type_id": "restaurant", "location_id": "atlantis"})

    assert resp.status_code == 404


def test_assess_with_mistyped_characteristic_still_scores(client):
    resp = client.post(
        "/api/v1/risk/assess",
        json={
            "business_type_id": "it_services",
            "location_id": "inland_village",
            "as_of": "2024-01-15",
            "characteristics": {"digital_dependency": "high"},
        },
    )

    assert resp.status_code == 200
    risks = {risk["hazard_id"]: risk for risk in resp.json()["risks"]}
    assert risks["cyber_attack"]["final_score"] == 5.0
    assert risks["cyber_attack"]["applied_multipliers"] == []


def test_assess_invalid_characteristics_is_422(client):
    resp = client.post(
        "/api/v1/risk/assess",
        json={"business_type_id": "restaurant", "characteristics": {"staff_count": -4}},
    )

    assert resp.status_code == 422


def test_catalog_unavailable_is_503(monkeypatch, main_module):
    error = CatalogUnavailableError("Catalog table 'hazards' could not be read", stage=Stage.CATALOG)
    monkeypatch.setattr(main_module, "catalog_connector", _StubConnector(error=error))
    client = TestClient(main_module.app)

    resp = client.post("/api/v1/risk/assess", json={"business_type_id": "restaurant"})

    assert resp.status_code == 503
    assert resp.json()["error_code"] == "CatalogUnavailableError"


def test_recommend_strategies(client):
    resp = client.post(
        "/api/v1/strategies/recommend",
        json={"business_type_id": "restaurant", "active_hazards": ["hurricane"]},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["error"] is None
    assert data["recommendations"][0]["strategy_id"] == "backup_generator"
    recs = {rec["strategy_id"]: rec for rec in data["recommendations"]}
    assert recs["evacuation_procedures"]["conflicts"] == ["shelter_reinforcement"]


@pytest.mark.parametrize("hazard_id", ["", "volcano"])
def test_recommend_strategies_unknown_hazard_is_404(client, hazard_id):
    resp = client.post(
        "/api/v1/strategies/recommend",
        json={"business_type_id": "restaurant", "active_hazards": ["hurricane", hazard_id]},
    )

    assert resp.status_code == 404
    assert resp.json()["entity_id"] == hazard_id


def test_recommend_strategies_with_unavailable_catalog(client, main_module, make_snapshot, monkeypatch):
    monkeypatch.setattr(main_module, "catalog_connector", _StubConnector(make_snapshot(strategies=None)))

    resp = client.post(
        "/api/v1/strategies/recommend",
        json={"business_type_id": "restaurant", "active_hazards": ["hurricane"]},
    )

    assert resp.status_code == 200
    assert resp.json()["count"] == 0
    assert resp.json()["error"] == "catalog_unavailable"


def test_full_assessment_document(client):
    resp = client.post(
        "/api/v1/assessment",
        json={"business_type_id": "restaurant", "location_id": "coastal_town", "as_of": "2024-09-01"},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["metadata"]["as_of"] == "2024-09-01"
    assert data["metadata"]["data_quality"] == "fair"
    assert data["strategies"]
    assert data["strategy_error"] is None


def test_list_hazards(client):
    resp = client.get("/api/v1/catalog/hazards")

    assert resp.status_code == 200
    assert resp.json()["count"] == 7
    assert "hurricane" in {hazard["hazard_id"] for hazard in resp.json()["hazards"]}
