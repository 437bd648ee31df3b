"""
Integration tests for the Advice API.

Tests the full request flow including:
- Service banner
- Validation, credential and rate-limit ordering
- AI path and fallback path responses
- Quick advice
"""
from fastapi.testclient import TestClient

from health_advisor.config import settings
from health_advisor.services.advice_schemas import REQUIRED_ADVICE_KEYS
from health_advisor.services.ai_gateway import GenerationTimeoutError
from tests.fixtures.mocks import MockModelGateway, sample_ai_advice

HEALTH_ADVICE = "/api/health-advice"
QUICK_ADVICE = "/api/quick-advice"


class TestServiceBanner:
    """Tests for GET /."""

    def test_banner_before_first_request(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == settings.api_version
        assert data["currentModel"] == "not initialized"
        assert isinstance(data["features"], list)
        assert "timestamp" in data

    def test_banner_reports_cached_model(
        self, client: TestClient, mock_gateway: MockModelGateway
    ):
        client.post(HEALTH_ADVICE, json={"bristolType": 4})

        response = client.get("/")

        assert response.json()["currentModel"] == mock_gateway.model_name


class TestHealthAdviceValidation:
    """Tests for request checks before any AI call."""

    def test_invalid_bristol_type(self, client: TestClient, mock_gateway: MockModelGateway):
        response = client.post(HEALTH_ADVICE, json={"bristolType": 0})

        assert response.status_code == 400
        assert response.json() == {
            "error": "Please provide valid Bristol type (1-7)",
            "success": False,
        }
        assert mock_gateway.calls == {}

    def test_missing_bristol_type(self, client: TestClient):
        response = client.post(HEALTH_ADVICE, json={"colorAnalysis": {}})
        assert response.status_code == 400

    def test_missing_api_key(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(settings, "anthropic_api_key", "")

        response = client.post(HEALTH_ADVICE, json={"bristolType": 4})

        assert response.status_code == 500
        assert response.json() == {"error": "API Key not configured", "success": False}

    def test_validation_checked_before_api_key(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(settings, "anthropic_api_key", "")

        response = client.post(HEALTH_ADVICE, json={"bristolType": 9})

        assert response.status_code == 400

    def test_rate_limit(self, client: TestClient):
        for _ in range(10):
            assert client.post(HEALTH_ADVICE, json={"bristolType": 4}).status_code == 200

        response = client.post(HEALTH_ADVICE, json={"bristolType": 4})

        assert response.status_code == 429
        data = response.json()
        assert data["success"] is False
        assert data["retryAfter"] == 60
        assert "Too many requests" in data["error"]

    def test_rejected_requests_do_not_count(self, client: TestClient, request_counter):
        for _ in range(3):
            client.post(HEALTH_ADVICE, json={"bristolType": 0})

        assert request_counter.count == 0


class TestHealthAdviceResponses:
    """Tests for the AI and fallback response shapes."""

    def test_ai_response(self, client: TestClient, mock_gateway: MockModelGateway):
        response = client.post(
            HEALTH_ADVICE,
            json={
                "bristolType": 2,
                "colorAnalysis": {"summary": {"brown": {"status": "Normal", "percentage": 95}}},
                "volumeAnalysis": {"overall_volume_class": "normal", "volume_score": 55},
                "userProfile": {"age": "29", "diet": "vegetarian"},
                "previousRecords": [{"type": 3}, {"type": 2}],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["model"] == mock_gateway.model_name
        assert data["confidence"] == 1.0
        assert isinstance(data["responseTime"], int)
        assert "note" not in data

        advice = data["advice"]
        for key in REQUIRED_ADVICE_KEYS:
            assert key in advice
        assert advice["healthStatus"]["score"] == 75
        assert advice["urgencyLevel"] == "medium"
        assert advice["metadata"]["source"] == "ai"

        prompt = mock_gateway.calls["generate"][0]["kwargs"]["prompt"]
        assert "- Age: 29" in prompt
        assert "Trend Analysis" in prompt

    def test_fallback_on_unparseable_output(
        self, client: TestClient, mock_gateway: MockModelGateway
    ):
        mock_gateway.set_response("The model is overloaded, please retry.")

        response = client.post(HEALTH_ADVICE, json={"bristolType": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["model"] == "fallback"
        assert data["confidence"] == 0.7
        assert data["note"] == "Using fallback advice due to AI service issue"
        assert data["advice"]["healthStatus"]["score"] == 60
        assert data["advice"]["urgencyLevel"] == "high"
        assert data["advice"]["metadata"]["source"] == "fallback"

    def test_fallback_on_timeout(self, client: TestClient, mock_gateway: MockModelGateway):
        mock_gateway.set_error(GenerationTimeoutError("AI response timeout"))

        response = client.post(
            HEALTH_ADVICE,
            json={
                "bristolType": 4,
                "colorAnalysis": {"summary": {"red": {"health_status": "Alert", "percentage": 40}}},
            },
        )

        assert response.status_code == 200
        advice = response.json()["advice"]
        assert advice["healthStatus"]["level"] == "critical"
        assert advice["doctorConsultation"]["needed"] is True

    def test_ai_and_fallback_share_shape(
        self, client: TestClient, mock_gateway: MockModelGateway
    ):
        ai_advice = client.post(HEALTH_ADVICE, json={"bristolType": 5}).json()["advice"]

        mock_gateway.set_unavailable()
        fallback_advice = client.post(HEALTH_ADVICE, json={"bristolType": 5}).json()["advice"]

        assert set(ai_advice) == set(fallback_advice)
        for key in ("healthStatus", "dietaryAdvice", "lifestyleAdvice", "followUp"):
            assert set(ai_advice[key]) == set(fallback_advice[key])

    def test_ai_claims_overridden(self, client: TestClient, mock_gateway: MockModelGateway):
        claimed = sample_ai_advice()
        claimed["healthStatus"]["score"] = 100
        mock_gateway.set_response(claimed)

        response = client.post(HEALTH_ADVICE, json={"bristolType": 7})

        advice = response.json()["advice"]
        assert advice["healthStatus"]["score"] == 60
        assert advice["urgencyLevel"] == "high"
        assert advice["doctorConsultation"]["needed"] is True


class TestQuickAdvice:
    """Tests for POST /api/quick-advice."""

    def test_quick_advice(self, client: TestClient, mock_gateway: MockModelGateway):
        response = client.post(QUICK_ADVICE, json={"bristolType": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["type"] == "quick"
        assert data["advice"]["urgency"] == "high"
        assert set(data["advice"]) == {"quickTip", "urgency", "action"}
        assert mock_gateway.calls == {}

    def test_quick_advice_string_type(self, client: TestClient):
        response = client.post(QUICK_ADVICE, json={"bristolType": "4"})
        assert response.json()["advice"]["urgency"] == "low"

    def test_quick_advice_missing_type(self, client: TestClient):
        response = client.post(QUICK_ADVICE, json={})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_quick_advice_out_of_range(self, client: TestClient):
        assert client.post(QUICK_ADVICE, json={"bristolType": 8}).status_code == 400

    def test_quick_advice_not_rate_limited(self, client: TestClient, request_counter):
        for _ in range(10):
            request_counter.try_acquire()

        response = client.post(QUICK_ADVICE, json={"bristolType": 3})

        assert response.status_code == 200
