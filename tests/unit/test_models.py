"""
Unit tests for the client domain models.

These tests verify the core business logic without touching
external services (no API calls, no database, no file system).

Testing philosophy:
- Test behavior, not implementation
- Each test should have a clear "given/when/then" structure
- Use descriptive names that explain what we're testing
- Prefer real objects over mocks where practical
"""

import pytest

from src.core.clients.models import (
    Client,
    ClientDraft,
    ClientStatus,
    EnhancementStatus,
    ExperienceLevel,
    PaymentStatus,
    Role,
    Session,
    derive_role,
)

COACH_EMAIL = "coach@rippedcity.test"


# ---------------------------------------------------------------------------
# Role Derivation Tests
# ---------------------------------------------------------------------------

class TestDeriveRole:
    """Tests for coach/client classification."""

    def test_coach_email_is_coach(self):
        """The configured coach email gets the coach role."""
        session = Session(user_id="u1", email=COACH_EMAIL)
        assert derive_role(session, COACH_EMAIL) is Role.COACH

    @pytest.mark.parametrize("email", [
        "someone@example.com",
        "Coach@rippedcity.test",
        "coach@rippedcity.test ",
    ])
    def test_any_other_email_is_client(self, email):
        """Comparison is exact; case or whitespace differences mean client."""
        session = Session(user_id="u2", email=email)
        assert derive_role(session, COACH_EMAIL) is Role.CLIENT

    def test_no_session_has_no_role(self):
        assert derive_role(None, COACH_EMAIL) is None

    def test_unset_coach_email_never_matches(self):
        """An empty coach identity must not turn an empty email into the coach."""
        session = Session(user_id="u3", email="")
        assert derive_role(session, "") is Role.CLIENT


# ---------------------------------------------------------------------------
# Client Record Tests
# ---------------------------------------------------------------------------

class TestClientDraft:
    """Tests for new-client payloads."""

    def test_new_draft_is_unpaid_prospect_with_empty_collections(self):
        draft = ClientDraft(name="Alex", email="alex@example.com")

        record = draft.to_record()

        assert record["status"] == "prospect"
        assert record["paymentStatus"] == "unpaid"
        assert record["checkins"] == []
        assert record["generatedPlans"] == {"mealPlans": [], "workoutPlans": []}
        assert record["communication"] == {"messages": []}
        assert record["bloodDonationStatus"]["status"] == "Unknown"
        assert "id" not in record
        assert "created_at" not in record

    def test_profile_uses_table_column_names(self):
        draft = ClientDraft(name="Alex", email="alex@example.com")

        profile = draft.to_record()["profile"]

        assert profile["activityLevel"] == "moderately_active"
        assert profile["bloodType"] == "Unknown"
        assert profile["notificationPreferences"] == {"email": True, "sms": False, "inApp": True}


class TestClient:
    """Tests for stored client records."""

    @pytest.fixture
    def row(self) -> dict:
        return {
            "id": "abc-123",
            "created_at": "2024-05-01T10:00:00+00:00",
            "name": "Taylor",
            "email": "taylor@example.com",
            "goal": "Compete",
            "status": "active",
            "paymentStatus": "paid",
            "profile": {"age": 31, "experience": "advanced", "status": "enhanced", "bloodType": "B+"},
            "intakeData": {"phone": "555-0199", "currentPharma": "TRT"},
            "checkins": [{"date": "2024-05-10", "weight": "88"}],
        }

    def test_from_record_reads_nested_sections(self, row):
        client = Client.from_record(row)

        assert client.id == "abc-123"
        assert client.status is ClientStatus.ACTIVE
        assert client.payment_status is PaymentStatus.PAID
        assert client.profile.age == "31"
        assert client.profile.experience is ExperienceLevel.ADVANCED
        assert client.profile.status is EnhancementStatus.ENHANCED
        assert client.intake_data.current_pharma == "TRT"
        assert client.checkins == [{"date": "2024-05-10", "weight": "88"}]

    def test_missing_collections_get_defaults(self, row):
        client = Client.from_record(row)

        assert client.posing_logs == []
        assert client.holistic_health["sleepQuality"] == ""

    def test_to_record_strips_identity(self, row):
        """The update body never carries id or created_at."""
        record = Client.from_record(row).to_record()

        assert "id" not in record
        assert "created_at" not in record
        assert record["name"] == "Taylor"

    def test_identity_cannot_be_reassigned(self, row):
        client = Client.from_record(row)

        with pytest.raises(AttributeError, match="cannot change"):
            client.id = "other"
        with pytest.raises(AttributeError, match="cannot change"):
            client.created_at = "2030-01-01T00:00:00+00:00"

    def test_other_fields_are_editable(self, row):
        client = Client.from_record(row)

        client.goal = "Maintain"

        assert client.goal == "Maintain"

    def test_null_columns_read_as_empty_text(self, row):
        """A stored null must not come back (or be written back) as "None"."""
        row["goal"] = None
        row["profile"].update({"age": None, "weight": None, "gender": None, "bloodType": None})
        row["intakeData"] = {"phone": None, "injuries": None, "commitmentLevel": None}

        client = Client.from_record(row)
        record = client.to_record()

        assert client.profile.age == ""
        assert client.profile.weight == ""
        assert client.profile.gender == "male"
        assert client.profile.blood_type == "Unknown"
        assert client.intake_data.phone == ""
        assert record["goal"] == ""
        assert record["intakeData"]["injuries"] == ""
        assert record["intakeData"]["commitmentLevel"] == ""

    def test_unknown_status_is_rejected(self, row):
        row["status"] = "archived"

        with pytest.raises(ValueError):
            Client.from_record(row)
