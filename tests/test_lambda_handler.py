"""Tests for AWS Lambda handler."""

import base64
import json

from lambda_handler import lambda_handler


def _post(path, payload):
    return {"httpMethod": "POST", "path": path, "body": json.dumps(payload)}


class TestLambdaHandler:
    """Test the Lambda handler routes and responses."""

    def test_health_check(self):
        """GET /health returns healthy status."""
        event = {"httpMethod": "GET", "path": "/health"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["status"] == "healthy"
        assert "environment" in body

    def test_api_info(self):
        """GET /api returns API information."""
        event = {"httpMethod": "GET", "path": "/api"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["status"] == "ok"
        assert "/process_deal" in body["endpoints"]

    def test_cors_preflight(self):
        """OPTIONS requests return CORS headers."""
        event = {"httpMethod": "OPTIONS", "path": "/process_deal"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        assert "Access-Control-Allow-Origin" in response["headers"]
        assert "Access-Control-Allow-Methods" in response["headers"]

    def test_not_found(self):
        """Unknown paths return 404."""
        event = {"httpMethod": "GET", "path": "/unknown"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 404

    def test_process_deal_success(self):
        """POST /process_deal evaluates a valid deal."""
        payload = {
            "deal_id": "D-1",
            "deal_name": "Lambda Test Deal",
            "tiers": [
                {"tier_number": 1, "annual_revenue": 850000, "annual_gross_margin": 0.35,
                 "incentive_value": 50000}
            ],
            "approval": {"total_value": 600000, "deal_type": "grow",
                         "sales_channel": "independent_agency"},
        }

        response = lambda_handler(_post("/process_deal", payload), None)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["deal_summary"]["deal_name"] == "Lambda Test Deal"
        assert body["approval"]["level"] == "SVP"
        assert body["tier_metrics"][0]["adjusted_gross_profit"] == 247500.0

    def test_http_api_v2_format(self):
        """HTTP API events carry method and path in different fields."""
        event = {
            "rawPath": "/approval_level",
            "requestContext": {"http": {"method": "POST"}},
            "body": json.dumps({"total_value": 40000}),
        }

        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        assert json.loads(response["body"])["level"] == "Manager"

    def test_base64_body(self):
        body = base64.b64encode(json.dumps({"total_value": 600000}).encode("utf-8")).decode("utf-8")
        event = {"httpMethod": "POST", "path": "/approval_level", "body": body, "isBase64Encoded": True}

        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        assert json.loads(response["body"])["level"] == "SVP"

    def test_approval_sequence(self):
        response = lambda_handler(_post("/approval_sequence", {
            "total_value": 200000, "deal_type": "grow", "sales_channel": "client_direct"
        }), None)

        assert json.loads(response["body"]) == {"approvers": ["RegionalDirector", "Finance", "MD"]}

    def test_chat(self):
        response = lambda_handler(_post("/chat", {"message": "What documents are required?"}), None)

        assert response["statusCode"] == 200
        assert "Deal Submission Form" in json.loads(response["body"])["answer"]

    def test_invalid_json(self):
        event = {"httpMethod": "POST", "path": "/process_deal", "body": "{not json"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 400
        assert "Invalid JSON" in json.loads(response["body"])["error"]

    def test_empty_body(self):
        event = {"httpMethod": "POST", "path": "/process_deal", "body": ""}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 400

    def test_validation_error(self):
        response = lambda_handler(_post("/process_deal", {"deal_name": "No tiers", "tiers": []}), None)

        assert response["statusCode"] == 400
        body = json.loads(response["body"])
        assert body["status"] == "validation_failed"
        assert "At least one tier is required" in body["error"]
