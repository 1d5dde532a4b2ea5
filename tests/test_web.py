"""Tests for the analytics API endpoints."""

import pytest
from fastapi.testclient import TestClient

from streetpaws.api.app import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def records():
    """Three abuse reports close together and two scattered ones; no timestamps."""
    return [
        {"id": "r1", "latitude": 14.0583, "longitude": 121.1656, "condition": "abuse"},
        {"id": "r2", "latitude": 14.0593, "longitude": 121.1666, "condition": "abuse"},
        {"id": "r3", "latitude": 14.0603, "longitude": 121.1676, "condition": "abuse"},
        {"id": "r4", "latitude": 15.5, "longitude": 120.5, "condition": "normal"},
        {"id": "r5", "latitude": 16.5, "longitude": 122.5, "condition": "injured"},
    ]


@pytest.fixture
def hotspot():
    return {
        "id": "hotspot_1",
        "center": {"latitude": 14.0593, "longitude": 121.1666},
        "size": 3,
        "severity": 1.0,
        "risk": 1.6,
        "recency": 1.0,
        "priority": 0.745,
        "markers": [],
    }


class TestSystem:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "timestamp" in data

    def test_openapi_docs(self, client):
        resp = client.get("/openapi.json")
        assert resp.status_code == 200
        assert "/api/analytics/hotspots" in resp.json()["paths"]


class TestPredictiveEndpoints:
    def test_hotspots(self, client, records):
        resp = client.post("/api/analytics/hotspots", json={"records": records})
        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 1
        assert data[0]["id"] == "hotspot_1"
        assert data[0]["size"] == 3
        assert data[0]["recency"] == 1.0
        assert {m["id"] for m in data[0]["markers"]} == {"r1", "r2", "r3"}

    def test_hotspots_from_collections(self, client, records):
        payload = {"collections": {"reports": {r["id"]: r for r in records[:2]},
                                   "approvedReports": [records[2]]}}
        resp = client.post("/api/analytics/hotspots", json=payload)
        assert resp.status_code == 200
        assert resp.json()[0]["size"] == 3

    def test_hotspots_min_points(self, client, records):
        resp = client.post("/api/analytics/hotspots", json={"records": records, "min_points": 4})
        assert resp.status_code == 200
        assert resp.json() == []

    def test_hotspots_rejects_bad_eps(self, client, records):
        resp = client.post("/api/analytics/hotspots", json={"records": records, "eps": 0})
        assert resp.status_code == 422

    def test_hotspots_empty(self, client):
        resp = client.post("/api/analytics/hotspots", json={})
        assert resp.status_code == 200
        assert resp.json() == []

    def test_monthly(self, client):
        payload = {
            "records": [
                {"id": "a", "createdAt": "2024-01-15T10:00:00Z"},
                {"id": "b", "createdAt": "2024-04-02T10:00:00Z"},
            ],
            "year": 2024,
        }
        resp = client.post("/api/analytics/monthly", json=payload)
        assert resp.status_code == 200
        series = resp.json()["series"]
        assert len(series) == 12
        assert series[0] == {"month": 0, "value": 1}
        assert series[3] == {"month": 3, "value": 1}

    def test_forecast(self, client):
        series = [{"value": v} for v in [4, 6, 8, 10]]
        resp = client.post("/api/analytics/forecast", json={"series": series})
        assert resp.status_code == 200
        points = resp.json()
        assert len(points) == 6
        assert [p["predicted"] for p in points] == [12, 14, 16, 18, 20, 22]
        assert all(p["trend"] == "increasing" for p in points)

    def test_forecast_insufficient(self, client):
        resp = client.post("/api/analytics/forecast", json={"series": [{"value": 3}]})
        assert resp.status_code == 200
        assert resp.json() == []

    def test_trend(self, client):
        series = [{"value": v} for v in [20, 15, 10, 5]]
        resp = client.post("/api/analytics/trend", json={"series": series})
        assert resp.status_code == 200
        data = resp.json()
        assert data["trend"] == "decreasing"
        assert data["direction"] == "down"
        assert data["confidence"] == 100


class TestPrescriptiveEndpoints:
    def test_allocations(self, client, hotspot):
        resp = client.post("/api/analytics/allocations", json={"hotspots": [hotspot]})
        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 1
        assert data[0]["hotspot_id"] == "hotspot_1"
        assert data[0]["priority_level"] == "High"
        assert data[0]["note"] is None

    def test_allocations_limited_pool(self, client, hotspot):
        payload = {
            "hotspots": [hotspot],
            "resources": {"volunteers": 1, "budget": 100, "vehicles": 0, "equipment": 0},
        }
        resp = client.post("/api/analytics/allocations", json=payload)
        assert resp.status_code == 200
        plan = resp.json()[0]
        assert plan["note"] == "Limited resources available"
        assert plan["resource_allocation"]["budget"] == 100

    def test_allocations_rejects_negative_pool(self, client, hotspot):
        payload = {"hotspots": [hotspot], "resources": {"volunteers": -5}}
        resp = client.post("/api/analytics/allocations", json=payload)
        assert resp.status_code == 422

    def test_strategy(self, client, hotspot):
        hotspots = [dict(hotspot, id=f"hotspot_{i}") for i in range(12)]
        resp = client.post("/api/analytics/strategy", json={"hotspots": hotspots})
        assert resp.status_code == 200
        data = resp.json()
        assert data["summary"]["total_hotspots"] == 12
        texts = [r["recommendation"] for r in data["recommendations"]]
        assert "Establish zone-based management system" in texts
        assert "Implement emergency response protocol" in texts

    def test_strategy_empty(self, client):
        resp = client.post("/api/analytics/strategy", json={"hotspots": []})
        assert resp.status_code == 200
        assert resp.json()["recommendations"] == []


class TestReportEndpoint:
    def test_report(self, client, records):
        resp = client.post("/api/analytics/report", json={"records": records, "year": 2024})
        assert resp.status_code == 200
        data = resp.json()
        assert data["report_type"] == "ANALYTICS"
        assert data["record_count"] == 5
        hotspots = data["predictive"]["hotspots"]
        assert len(hotspots) == 1
        assert "markers" not in hotspots[0]
        assert sorted(hotspots[0]["marker_ids"]) == ["r1", "r2", "r3"]
        assert len(data["prescriptive"]["allocations"]) == 1
