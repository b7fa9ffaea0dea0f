"""Tests for the Flask API."""

import pytest

from main import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


class TestFlaskApi:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json() == {"status": "healthy"}

    def test_api_info(self, client):
        body = client.get("/api").get_json()

        assert body["status"] == "ok"
        assert body["endpoints"]["approval_level"] == "/approval_level [POST]"

    def test_process_deal(self, client):
        response = client.post("/process_deal", json={
            "deal_name": "Flask Deal",
            "tiers": [{"tier_number": 1, "annual_revenue": 40000, "annual_gross_margin": 0.4}],
        })

        assert response.status_code == 200
        body = response.get_json()
        assert body["approval"]["level"] == "Manager"
        assert body["approval"]["severity"] == "info"

    def test_tier_metrics(self, client):
        response = client.post("/tier_metrics", json={
            "tiers": [{"tier_number": 1, "annual_revenue": 850000, "annual_gross_margin": 0.35,
                       "incentive_value": 50000}],
        })

        assert response.status_code == 200
        assert response.get_json()["tier_metrics"][0]["gross_profit"] == 297500.0

    def test_approval_status(self, client):
        response = client.post("/approval_status", json={"requirements": [
            {"id": "D-1-RegionalDirector", "deal_id": "D-1", "approver": "RegionalDirector",
             "status": "approved"},
            {"id": "D-1-Finance", "deal_id": "D-1", "approver": "Finance",
             "dependencies": ["D-1-RegionalDirector"]},
        ]})

        body = response.get_json()
        assert body["overall_status"] == "in_progress"
        assert body["progress"] == 50

    def test_chat(self, client):
        response = client.post("/chat", json={"message": "How do I submit a new deal?"})

        assert response.get_json()["answer"].startswith("Open the Submit Deal page")

    def test_no_body(self, client):
        response = client.post("/process_deal")

        assert response.status_code == 400
        assert response.get_json()["status"] == "failed"

    def test_non_object_body(self, client):
        response = client.post("/approval_level", json=[1, 2])

        assert response.status_code == 400
        assert response.get_json()["error"] == "Request body must be a JSON object"

    def test_very_large_revenue(self, client):
        response = client.post("/tier_metrics", json={
            "tiers": [{"tier_number": 1, "annual_revenue": 1e30, "annual_gross_margin": 0.35}],
        })

        assert response.status_code == 200
        body = response.get_json()
        assert body["tier_metrics"][0]["annual_revenue"] == 1e30
        assert body["calculations"]["total_revenue"]["value"] == 1e30

    def test_validation_failed(self, client):
        response = client.post("/approval_level", json={"total_value": 100, "discount_percentage": 150})

        assert response.status_code == 400
        assert response.get_json()["status"] == "validation_failed"
