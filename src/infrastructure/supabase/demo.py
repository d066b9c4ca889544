"""
Sample clients for the demo entry path and for mock-mode development.
"""

from src.core.clients.models import (
    ClientDraft,
    ClientProfile,
    ClientStatus,
    EnhancementStatus,
    ExperienceLevel,
    IntakeData,
    PaymentStatus,
)

from .client import MockBackend, MockDataService


def demo_client_rows() -> list[dict]:
    drafts = [
        (
            "2024-03-02T09:15:00+00:00",
            ClientDraft(
                name="Jordan Miles",
                email="jordan.miles@example.com",
                goal="Step on stage at the spring classic",
                status=ClientStatus.ACTIVE,
                payment_status=PaymentStatus.PAID,
                profile=ClientProfile(
                    age="29", weight="92", height="183",
                    experience=ExperienceLevel.ADVANCED,
                    status=EnhancementStatus.ENHANCED,
                    blood_type="O+",
                ),
                intake_data=IntakeData(
                    phone="555-0101",
                    current_supplements="Creatine, whey, vitamin D",
                    current_pharma="TRT 150mg/wk",
                    commitment_level="10",
                ),
            ),
        ),
        (
            "2024-02-18T17:40:00+00:00",
            ClientDraft(
                name="Priya Shah",
                email="priya.shah@example.com",
                goal="Lose 10kg of fat before summer",
                status=ClientStatus.ACTIVE,
                payment_status=PaymentStatus.OVERDUE,
                profile=ClientProfile(
                    age="34", weight="74", height="165",
                    experience=ExperienceLevel.INTERMEDIATE,
                    blood_type="A-",
                ),
                intake_data=IntakeData(injuries="Left shoulder impingement", commitment_level="8"),
            ),
        ),
        (
            "2024-01-05T12:00:00+00:00",
            ClientDraft(
                name="Sam Ortega",
                email="sam.ortega@example.com",
                goal="Build consistency with meals",
                profile=ClientProfile(age="22", weight="70", height="178"),
                intake_data=IntakeData(biggest_struggle="Skipping breakfast", commitment_level="7"),
            ),
        ),
    ]
    return [
        {"id": f"demo-{index}", "created_at": created_at, **draft.to_record()}
        for index, (created_at, draft) in enumerate(drafts, start=1)
    ]


def create_demo_service(table: str = "clients") -> MockDataService:
    """A throwaway backend with sample clients. Nothing persists."""
    backend = MockBackend()
    backend.seed(table, demo_client_rows())
    return MockDataService(backend)
