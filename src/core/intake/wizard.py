"""
Five-step client intake wizard.

Prospects fill in identity, biometrics, training history, current
protocols and health details, then submit. The wizard is a small
finite-state machine:

    IDENTITY -> BIOMETRICS -> HISTORY -> PROTOCOLS -> HEALTH -> submit
                                                           |-> SUBMITTED (confirmation, then reset)
                                                           |-> FAILED (data kept, retry allowed)

Forward moves are guarded by required fields; backward moves are always
allowed and never lose what was typed.
"""

import logging
import time
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Callable, Optional

from ..clients.models import (
    BLOOD_TYPES,
    ClientDraft,
    ClientProfile,
    ClientStatus,
    EnhancementStatus,
    ExperienceLevel,
    IntakeData,
    PaymentStatus,
)
from ..clients.service import DataService, DataServiceError

logger = logging.getLogger(__name__)


class IntakeStep(Enum):
    IDENTITY = 1
    BIOMETRICS = 2
    HISTORY = 3
    PROTOCOLS = 4
    HEALTH = 5


TOTAL_STEPS = len(IntakeStep)

STEP_TITLES = {
    IntakeStep.IDENTITY: "The Basics",
    IntakeStep.BIOMETRICS: "Biological Metrics",
    IntakeStep.HISTORY: "Performance History",
    IntakeStep.PROTOCOLS: "Protocol Audit",
    IntakeStep.HEALTH: "Health & Confirmation",
}

# Fields that must be filled before leaving a step
REQUIRED_FIELDS = {
    IntakeStep.IDENTITY: ("name", "email"),
    IntakeStep.BIOMETRICS: ("age", "weight"),
    IntakeStep.HISTORY: ("goal",),
}

SUBMISSION_FAILED_MESSAGE = "Submission failed. Please email us directly."


class WizardState(Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"


class IntakeStepError(Exception):
    """Raised for a transition the wizard doesn't allow from its current state."""
    pass


@dataclass(frozen=True)
class IntakeDraft:
    """Everything typed into the wizard so far. Replaced on every edit."""
    name: str = ""
    email: str = ""
    phone: str = ""
    instagram: str = ""
    age: str = ""
    weight: str = ""
    height: str = ""
    blood_type: str = "Unknown"
    goal: str = ""
    experience: str = ExperienceLevel.BEGINNER.value
    struggle: str = ""
    current_supplements: str = ""
    current_pharma: str = ""
    health_conditions: str = ""
    injuries: str = ""
    commitment: str = "10"

    def __post_init__(self) -> None:
        if self.blood_type not in BLOOD_TYPES:
            raise ValueError(f"Unknown blood type: {self.blood_type}")
        ExperienceLevel(self.experience)
        if not self.commitment.isdigit() or not 1 <= int(self.commitment) <= 10:
            raise ValueError("Commitment must be a whole number from 1 to 10")

    @property
    def enhancement_status(self) -> EnhancementStatus:
        """Any pharmacological protocol at all makes the client enhanced."""
        if self.current_pharma.strip():
            return EnhancementStatus.ENHANCED
        return EnhancementStatus.NATURAL

    def missing_fields(self, step: IntakeStep) -> list[str]:
        return [name for name in REQUIRED_FIELDS.get(step, ()) if not getattr(self, name).strip()]

    def to_client_draft(self) -> ClientDraft:
        """
        Assemble the record to insert.

        New applicants are always unpaid prospects with empty history.
        """
        return ClientDraft(
            name=self.name,
            email=self.email,
            goal=self.goal,
            status=ClientStatus.PROSPECT,
            payment_status=PaymentStatus.UNPAID,
            profile=ClientProfile(
                age=self.age,
                weight=self.weight,
                height=self.height,
                experience=ExperienceLevel(self.experience),
                status=self.enhancement_status,
                blood_type=self.blood_type,
            ),
            intake_data=IntakeData(
                injuries=self.injuries,
                meds=self.health_conditions,
                health_conditions=self.health_conditions,
                phone=self.phone,
                current_supplements=self.current_supplements,
                current_pharma=self.current_pharma,
                instagram=self.instagram,
                biggest_struggle=self.struggle,
                commitment_level=self.commitment,
            ),
        )


DRAFT_FIELDS = frozenset(f.name for f in fields(IntakeDraft))


class IntakeWizard:
    """
    State machine behind the "Apply Now" modal.

    The clock is injectable so the confirmation timeout can be tested
    without sleeping.
    """

    def __init__(
        self,
        confirmation_seconds: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._confirmation_seconds = confirmation_seconds
        self._clock = clock
        self._confirmation_expires_at: Optional[float] = None
        self.is_open = False
        self.step = IntakeStep.IDENTITY
        self.state = WizardState.EDITING
        self.draft = IntakeDraft()
        self.error: Optional[str] = None

    @property
    def progress(self) -> float:
        return self.step.value / TOTAL_STEPS

    @property
    def title(self) -> str:
        return STEP_TITLES[self.step]

    @property
    def can_advance(self) -> bool:
        return (
            self.state is WizardState.EDITING
            and self.step is not IntakeStep.HEALTH
            and not self.draft.missing_fields(self.step)
        )

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        """Cancel: close the modal and throw the draft away."""
        if self.state is WizardState.SUBMITTING:
            raise IntakeStepError("Cannot close while the application is being submitted")
        self._reset()

    def _reset(self) -> None:
        self.is_open = False
        self.step = IntakeStep.IDENTITY
        self.state = WizardState.EDITING
        self.draft = IntakeDraft()
        self.error = None
        self._confirmation_expires_at = None

    def update(self, **values: str) -> IntakeDraft:
        """Change draft fields. Unknown names and invalid choices raise ValueError."""
        unknown = set(values) - DRAFT_FIELDS
        if unknown:
            raise ValueError(f"Unknown intake fields: {', '.join(sorted(unknown))}")
        if self.state in (WizardState.SUBMITTING, WizardState.SUBMITTED):
            raise IntakeStepError("Application already sent")
        self.draft = replace(self.draft, **values)
        return self.draft

    def next(self) -> IntakeStep:
        if self.state is not WizardState.EDITING:
            raise IntakeStepError(f"Cannot advance while {self.state.value}")
        if self.step is IntakeStep.HEALTH:
            raise IntakeStepError("Already on the last step; submit instead")
        missing = self.draft.missing_fields(self.step)
        if missing:
            raise IntakeStepError(f"Required: {', '.join(missing)}")
        self.step = IntakeStep(self.step.value + 1)
        return self.step

    def back(self) -> IntakeStep:
        if self.state in (WizardState.SUBMITTING, WizardState.SUBMITTED):
            raise IntakeStepError(f"Cannot go back while {self.state.value}")
        # Going back from a failed submit returns to editing with data intact
        self.state = WizardState.EDITING
        self.error = None
        if self.step is not IntakeStep.IDENTITY:
            self.step = IntakeStep(self.step.value - 1)
        return self.step

    async def submit(self, service: Optional[DataService], table: str = "clients") -> bool:
        """
        Send the application. One insert, no dedupe beyond refusing a second
        submit while the first is in flight.

        Without a configured backend the application is not stored but the
        applicant still sees the confirmation.
        """
        if self.state is WizardState.SUBMITTING:
            raise IntakeStepError("Application is already being submitted")
        if self.state is WizardState.SUBMITTED:
            raise IntakeStepError("Application already sent")
        if self.step is not IntakeStep.HEALTH:
            raise IntakeStepError("Finish every step before submitting")
        for step in REQUIRED_FIELDS:
            missing = self.draft.missing_fields(step)
            if missing:
                raise IntakeStepError(f"Required: {', '.join(missing)}")

        self.state = WizardState.SUBMITTING
        self.error = None
        record = self.draft.to_client_draft().to_record()

        try:
            if service is not None:
                await service.insert(table, record)
            else:
                logger.warning("Backend not configured; intake application not stored")
        except DataServiceError as e:
            logger.error(
                "Intake submission failed",
                extra={"email": self.draft.email, "error": e.message}
            )
            self.state = WizardState.FAILED
            self.error = SUBMISSION_FAILED_MESSAGE
            return False

        logger.info("Intake application submitted", extra={"email": self.draft.email})
        self.state = WizardState.SUBMITTED
        self._confirmation_expires_at = self._clock() + self._confirmation_seconds
        return True

    def poll(self) -> None:
        """Close and reset once the confirmation has been shown long enough."""
        if (
            self.state is WizardState.SUBMITTED
            and self._confirmation_expires_at is not None
            and self._clock() >= self._confirmation_expires_at
        ):
            self._reset()
