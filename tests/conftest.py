"""
Shared fixtures.

Tests run against the in-memory backend; nothing here talks to Supabase.
"""

import pytest

from src.core.clients.models import ClientDraft, IntakeData
from src.infrastructure.supabase.client import MockBackend, MockDataService

COACH_EMAIL = "coach@rippedcity.test"
CLIENT_EMAIL = "client@example.com"


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> MockBackend:
    backend = MockBackend()
    backend.add_user(COACH_EMAIL, "coach-pass")
    backend.add_user(CLIENT_EMAIL, "client-pass")
    return backend


@pytest.fixture
def service(backend) -> MockDataService:
    return MockDataService(backend)


def _client_row(row_id: str, created_at: str, email: str, name: str = "Test Client", goal: str = "Get lean") -> dict:
    draft = ClientDraft(name=name, email=email, goal=goal, intake_data=IntakeData(phone="555-0100"))
    return {"id": row_id, "created_at": created_at, **draft.to_record()}


@pytest.fixture
def client_row():
    """Factory for stored `clients` rows in table shape."""
    return _client_row
