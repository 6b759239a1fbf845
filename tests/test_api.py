"""Tests for API endpoints."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from supportsignal.api.v1.endpoints.ai import get_ai_monitoring_service
from supportsignal.api.v1.endpoints.auth import get_auth_service
from supportsignal.api.v1.endpoints.incidents import get_incident_service
from supportsignal.api.v1.endpoints.participants import get_participant_service
from supportsignal.api.v1.endpoints.prompts import get_prompt_service
from supportsignal.core.auth import get_current_user
from supportsignal.core.database import get_async_session
from supportsignal.core.exceptions import InvalidCredentialsError, NotFoundError
from supportsignal.main import app
from supportsignal.schemas.ai import ConnectivityTestResult
from supportsignal.schemas.auth import LoginResponse
from supportsignal.schemas.participants import ParticipantResponse


async def _no_session():
    yield MagicMock()


@pytest.fixture(autouse=True)
def no_database():
    app.dependency_overrides[get_async_session] = _no_session


class TestPublicEndpoints:
    """Tests for endpoints that need no authentication."""

    def test_root(self, test_client: TestClient) -> None:
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Server is running"
        assert data["health"] == "/health"

    def test_health_reports_database_status(self, test_client: TestClient) -> None:
        with patch(
            "supportsignal.api.v1.endpoints.health.db_client.health_check",
            new_callable=AsyncMock,
            return_value={"status": "unhealthy", "connected": False, "error": "refused"},
        ):
            response = test_client.get("/health/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["database"] == "unhealthy"
        assert data["service"] == "SupportSignal"

    def test_correlation_id_is_echoed(self, test_client: TestClient) -> None:
        response = test_client.get("/", headers={"X-Correlation-ID": "req-123"})

        assert response.headers["X-Correlation-ID"] == "req-123"


class TestAuthEndpoints:
    """Tests for login and bearer token handling."""

    def test_missing_token_is_rejected(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/participants/")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_garbage_token_is_rejected(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid authentication token"

    def test_login_success(self, test_client: TestClient, frontline_user) -> None:
        mock_service = AsyncMock()
        mock_service.login.return_value = LoginResponse(
            access_token="signed-token",
            expires=datetime.now(timezone.utc) + timedelta(hours=24),
            user=frontline_user,
        )
        app.dependency_overrides[get_auth_service] = lambda: mock_service

        response = test_client.post(
            "/api/v1/auth/login",
            json={"email": "worker@example.com", "password": "secret-password"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] is True
        assert body["data"]["access_token"] == "signed-token"
        assert body["data"]["token_type"] == "bearer"
        mock_service.login.assert_awaited_once_with("worker@example.com", "secret-password", False)

    def test_login_invalid_credentials(self, test_client: TestClient) -> None:
        mock_service = AsyncMock()
        mock_service.login.side_effect = InvalidCredentialsError("Invalid email or password")
        app.dependency_overrides[get_auth_service] = lambda: mock_service

        response = test_client.post(
            "/api/v1/auth/login",
            json={"email": "worker@example.com", "password": "wrong"},
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["detail"]["detail"] == "Invalid email or password"

    def test_me_hides_session_token(self, test_client: TestClient, frontline_user) -> None:
        app.dependency_overrides[get_current_user] = lambda: frontline_user

        response = test_client.get("/api/v1/auth/me")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == str(frontline_user.id)
        assert "session_token" not in data


class TestParticipantEndpoints:
    """Tests for participant endpoints."""

    def test_list_participants(self, test_client: TestClient, frontline_user, participant_record) -> None:
        mock_service = AsyncMock()
        mock_service.list_participants.return_value = [ParticipantResponse.model_validate(participant_record)]
        app.dependency_overrides[get_current_user] = lambda: frontline_user
        app.dependency_overrides[get_participant_service] = lambda: mock_service

        response = test_client.get("/api/v1/participants/", params={"status": "all", "search": "emma"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Found 1 participants"
        assert body["data"]["items"][0]["ndis_number"] == "123456789"
        kwargs = mock_service.list_participants.await_args.kwargs
        assert kwargs["status"] == "all"
        assert kwargs["search"] == "emma"

    def test_frontline_worker_creates_participant(
        self, test_client: TestClient, frontline_user, participant_record
    ) -> None:
        mock_service = AsyncMock()
        mock_service.create_participant.return_value = ParticipantResponse.model_validate(participant_record)
        app.dependency_overrides[get_current_user] = lambda: frontline_user
        app.dependency_overrides[get_participant_service] = lambda: mock_service

        response = test_client.post(
            "/api/v1/participants/",
            json={
                "first_name": "Emma",
                "last_name": "Johnson",
                "date_of_birth": "1990-05-14",
                "ndis_number": "123456789",
                "support_level": "medium",
            },
        )

        assert response.status_code == 201
        assert response.json()["data"]["first_name"] == "Emma"
        payload = mock_service.create_participant.await_args.args[0]
        assert payload.status == "active"


class TestIncidentEndpoints:
    """Tests for incident endpoints."""

    def test_missing_incident_returns_404(self, test_client: TestClient, frontline_user) -> None:
        mock_service = AsyncMock()
        mock_service.get_incident.side_effect = NotFoundError("Incident not found")
        app.dependency_overrides[get_current_user] = lambda: frontline_user
        app.dependency_overrides[get_incident_service] = lambda: mock_service

        response = test_client.get(f"/api/v1/incidents/{uuid4()}")

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["title"] == "Not Found"
        assert detail["detail"] == "Incident not found"


class TestPromptEndpoints:
    """Tests for prompt administration endpoints."""

    def test_create_requires_system_configuration(self, test_client: TestClient, company_admin) -> None:
        mock_service = AsyncMock()
        app.dependency_overrides[get_current_user] = lambda: company_admin
        app.dependency_overrides[get_prompt_service] = lambda: mock_service

        response = test_client.post(
            "/api/v1/prompts/",
            json={"prompt_name": "enhance_narrative", "prompt_template": "Enhance {{narrative_phase}}"},
        )

        assert response.status_code == 403
        mock_service.create_prompt.assert_not_awaited()


class TestAIEndpoints:
    """Tests for AI monitoring endpoints."""

    def test_failed_connectivity_check_sets_status_false(self, test_client: TestClient, system_admin) -> None:
        mock_service = MagicMock()
        mock_service.test_connectivity = AsyncMock(
            return_value=ConnectivityTestResult(
                success=False,
                model="openai/gpt-4.1-nano",
                error="All AI providers failed",
                correlation_id="ai-1-abcdefghi",
            )
        )
        app.dependency_overrides[get_current_user] = lambda: system_admin
        app.dependency_overrides[get_ai_monitoring_service] = lambda: mock_service

        response = test_client.post("/api/v1/ai/test", json={})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] is False
        assert body["message"] == "Connectivity test failed: All AI providers failed"
        assert body["data"]["correlation_id"] == "ai-1-abcdefghi"
