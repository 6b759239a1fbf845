"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")
os.environ.setdefault("OPENROUTER_API_KEY", "")
os.environ.setdefault("ANTHROPIC_API_KEY", "")

from datetime import date, datetime, timezone
from types import SimpleNamespace
from typing import Callable, Optional
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from supportsignal.core.permissions import Roles
from supportsignal.main import app
from supportsignal.schemas.auth import CurrentUser


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client.

    Returns:
        TestClient: FastAPI test client instance
    """
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def company_id() -> UUID:
    return uuid4()


@pytest.fixture
def make_user(company_id: UUID) -> Callable[..., CurrentUser]:
    """Factory for authenticated users.

    Returns:
        Callable building a CurrentUser with the given role
    """
    def _make(role: str = Roles.FRONTLINE_WORKER, company: Optional[UUID] = company_id) -> CurrentUser:
        return CurrentUser(
            id=uuid4(),
            name="Test User",
            email="worker@example.com",
            role=role,
            company_id=company,
            session_token="session-token",
        )

    return _make


@pytest.fixture
def frontline_user(make_user) -> CurrentUser:
    return make_user(Roles.FRONTLINE_WORKER)


@pytest.fixture
def company_admin(make_user) -> CurrentUser:
    return make_user(Roles.COMPANY_ADMIN)


@pytest.fixture
def system_admin(make_user) -> CurrentUser:
    return make_user(Roles.SYSTEM_ADMIN)


@pytest.fixture
def participant_record(company_id: UUID) -> SimpleNamespace:
    """Participant row as loaded from the database."""
    return SimpleNamespace(
        id=uuid4(),
        company_id=company_id,
        first_name="Emma",
        last_name="Johnson",
        date_of_birth=date(1990, 5, 14),
        ndis_number="123456789",
        contact_phone="0400 123 456",
        emergency_contact=None,
        support_level="medium",
        care_notes=None,
        status="active",
        created_by=uuid4(),
        updated_by=None,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def incident_record(company_id: UUID) -> SimpleNamespace:
    """Incident row as loaded from the database."""
    return SimpleNamespace(
        id=uuid4(),
        company_id=company_id,
        reporter_name="Sarah Thompson",
        participant_id=None,
        participant_name="Emma Johnson",
        event_date_time="2025-01-15T14:30",
        location="Community centre kitchen",
        capture_status="draft",
        analysis_status="not_started",
        overall_status="capture_pending",
        questions_generated=False,
        narrative_enhanced=False,
        analysis_generated=False,
        created_by=uuid4(),
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def narrative_record(incident_record: SimpleNamespace) -> SimpleNamespace:
    """Narrative row for ``incident_record``."""
    return SimpleNamespace(
        id=uuid4(),
        incident_id=incident_record.id,
        before_event="Emma was preparing lunch with a support worker.",
        during_event="She slipped on a wet floor near the sink.",
        end_event="Staff helped her up and applied ice.",
        post_event="",
        before_event_extra=None,
        during_event_extra=None,
        end_event_extra=None,
        post_event_extra=None,
        consolidated_narrative=None,
        enhanced_at=None,
        version=1,
    )
