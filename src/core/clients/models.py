"""
Domain models for coaching clients.

These models represent the core business concepts. They have no dependencies
on external frameworks, databases, or APIs. The `clients` table stores each
record as a single row with camelCase JSON columns; `from_record` and
`to_record` are the only places that know that shape.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Role(Enum):
    """Who is looking at the portal. Derived from the session, never stored."""
    COACH = "coach"
    CLIENT = "client"


class ClientStatus(Enum):
    """Where a client sits in the coaching pipeline."""
    PROSPECT = "prospect"  # Submitted intake, not onboarded yet
    ACTIVE = "active"
    PAUSED = "paused"
    INACTIVE = "inactive"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"


class EnhancementStatus(Enum):
    """Whether the client reports any pharmacological protocol."""
    NATURAL = "natural"
    ENHANCED = "enhanced"


class ExperienceLevel(Enum):
    BEGINNER = "beginner"          # 0-1 years
    INTERMEDIATE = "intermediate"  # 2-5 years
    ADVANCED = "advanced"          # 5+ years / competitor


BLOOD_TYPES = ("Unknown", "O+", "O-", "A+", "A-", "B+", "B-", "AB+", "AB-")


@dataclass(frozen=True)
class Session:
    """
    An authenticated identity.

    Frozen because a session is replaced, never edited. The controller
    swaps in a new one on every auth notification.
    """
    user_id: str
    email: str
    access_token: Optional[str] = None
    is_demo: bool = False


def derive_role(session: Optional[Session], coach_email: str) -> Optional[Role]:
    """
    Classify a session as coach or client.

    Exact, case-sensitive comparison. An empty coach email never matches,
    so an unconfigured coach identity means nobody gets the dashboard.
    """
    if session is None:
        return None
    if coach_email and session.email == coach_email:
        return Role.COACH
    return Role.CLIENT


def _text(value: Any, default: str = "") -> str:
    """Column value as text. A stored null reads as the default, never "None"."""
    if value is None:
        return default
    return str(value)


@dataclass
class NotificationPreferences:
    email: bool = True
    sms: bool = False
    in_app: bool = True

    @classmethod
    def from_record(cls, data: Optional[dict[str, Any]]) -> "NotificationPreferences":
        data = data or {}
        return cls(
            email=bool(data.get("email", True)),
            sms=bool(data.get("sms", False)),
            in_app=bool(data.get("inApp", True)),
        )

    def to_record(self) -> dict[str, Any]:
        return {"email": self.email, "sms": self.sms, "inApp": self.in_app}


@dataclass
class ClientProfile:
    """
    Biometrics and training background.

    Numeric measurements stay as the strings the client typed; the coach
    reads them, nothing computes with them.
    """
    age: str = ""
    gender: str = "male"
    weight: str = ""
    height: str = ""
    experience: ExperienceLevel = ExperienceLevel.BEGINNER
    activity_level: str = "moderately_active"
    status: EnhancementStatus = EnhancementStatus.NATURAL
    blood_type: str = "Unknown"
    notification_preferences: NotificationPreferences = field(default_factory=NotificationPreferences)

    @classmethod
    def from_record(cls, data: Optional[dict[str, Any]]) -> "ClientProfile":
        data = data or {}
        return cls(
            age=_text(data.get("age")),
            gender=_text(data.get("gender"), "male"),
            weight=_text(data.get("weight")),
            height=_text(data.get("height")),
            experience=ExperienceLevel(data.get("experience", "beginner")),
            activity_level=_text(data.get("activityLevel"), "moderately_active"),
            status=EnhancementStatus(data.get("status", "natural")),
            blood_type=_text(data.get("bloodType"), "Unknown"),
            notification_preferences=NotificationPreferences.from_record(
                data.get("notificationPreferences")
            ),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "age": self.age,
            "gender": self.gender,
            "weight": self.weight,
            "height": self.height,
            "experience": self.experience.value,
            "activityLevel": self.activity_level,
            "status": self.status.value,
            "bloodType": self.blood_type,
            "notificationPreferences": self.notification_preferences.to_record(),
        }


# Intake fields in (attribute, column) order
_INTAKE_COLUMNS = (
    ("injuries", "injuries"),
    ("meds", "meds"),
    ("diet", "diet"),
    ("work_schedule", "workSchedule"),
    ("health_conditions", "healthConditions"),
    ("allergies", "allergies"),
    ("phone", "phone"),
    ("current_supplements", "currentSupplements"),
    ("current_pharma", "currentPharma"),
    ("instagram", "instagram"),
    ("biggest_struggle", "biggestStruggle"),
    ("commitment_level", "commitmentLevel"),
)


@dataclass
class IntakeData:
    """Answers collected by the intake wizard (or entered by the coach)."""
    injuries: str = ""
    meds: str = ""
    diet: str = ""
    work_schedule: str = ""
    health_conditions: str = ""
    allergies: str = ""
    phone: str = ""
    current_supplements: str = ""
    current_pharma: str = ""
    instagram: str = ""
    biggest_struggle: str = ""
    commitment_level: str = ""

    @classmethod
    def from_record(cls, data: Optional[dict[str, Any]]) -> "IntakeData":
        data = data or {}
        return cls(**{attr: _text(data.get(column)) for attr, column in _INTAKE_COLUMNS})

    def to_record(self) -> dict[str, Any]:
        return {column: getattr(self, attr) for attr, column in _INTAKE_COLUMNS}


def _empty_generated_plans() -> dict[str, list]:
    return {"mealPlans": [], "workoutPlans": []}


def _empty_communication() -> dict[str, list]:
    return {"messages": []}


def _unknown_blood_donation() -> dict[str, str]:
    return {"status": "Unknown", "lastChecked": "", "notes": ""}


def _empty_holistic_health() -> dict[str, str]:
    return {"sleepQuality": "", "stressLevel": "", "energyLevel": "", "herbalLog": ""}


# Collection fields are owned by the dashboard and portal views; this layer
# only carries them through. (attribute, column, default factory)
_COLLECTION_COLUMNS = (
    ("checkins", "checkins", list),
    ("generated_plans", "generatedPlans", _empty_generated_plans),
    ("payments", "payments", list),
    ("communication", "communication", _empty_communication),
    ("bloodwork_history", "bloodworkHistory", list),
    ("client_testimonials", "clientTestimonials", list),
    ("blood_donation_status", "bloodDonationStatus", _unknown_blood_donation),
    ("holistic_health", "holisticHealth", _empty_holistic_health),
    ("cardio_logs", "cardioLogs", list),
    ("posing_logs", "posingLogs", list),
)


@dataclass
class ClientDraft:
    """
    A client record that has not been stored yet.

    Everything except the identifier and creation timestamp, which the
    data service assigns on insert.
    """
    name: str
    email: str
    goal: str = ""
    status: ClientStatus = ClientStatus.PROSPECT
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    profile: ClientProfile = field(default_factory=ClientProfile)
    intake_data: IntakeData = field(default_factory=IntakeData)
    checkins: list[dict[str, Any]] = field(default_factory=list)
    generated_plans: dict[str, list] = field(default_factory=_empty_generated_plans)
    payments: list[dict[str, Any]] = field(default_factory=list)
    communication: dict[str, list] = field(default_factory=_empty_communication)
    bloodwork_history: list[dict[str, Any]] = field(default_factory=list)
    client_testimonials: list[dict[str, Any]] = field(default_factory=list)
    blood_donation_status: dict[str, str] = field(default_factory=_unknown_blood_donation)
    holistic_health: dict[str, str] = field(default_factory=_empty_holistic_health)
    cardio_logs: list[dict[str, Any]] = field(default_factory=list)
    posing_logs: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "ClientDraft":
        return cls(**_fields_from_record(data))

    def to_record(self) -> dict[str, Any]:
        """Row payload without id/created_at. Also used as the update body."""
        record: dict[str, Any] = {
            "name": self.name,
            "email": self.email,
            "goal": self.goal,
            "status": self.status.value,
            "paymentStatus": self.payment_status.value,
            "profile": self.profile.to_record(),
            "intakeData": self.intake_data.to_record(),
        }
        for attr, column, _ in _COLLECTION_COLUMNS:
            record[column] = getattr(self, attr)
        return record


@dataclass(kw_only=True)
class Client(ClientDraft):
    """
    A stored client record.

    `id` and `created_at` are assigned by the data service and cannot be
    reassigned afterwards; every other field is editable.
    """
    id: str
    created_at: str

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("id", "created_at") and name in self.__dict__:
            raise AttributeError(f"{name} is assigned by the data service and cannot change")
        super().__setattr__(name, value)

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "Client":
        return cls(
            id=str(data["id"]),
            created_at=str(data["created_at"]),
            **_fields_from_record(data),
        )

    def to_full_record(self) -> dict[str, Any]:
        return {"id": self.id, "created_at": self.created_at, **self.to_record()}


def _fields_from_record(data: dict[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "name": _text(data.get("name")),
        "email": _text(data.get("email")),
        "goal": _text(data.get("goal")),
        "status": ClientStatus(data.get("status", "prospect")),
        "payment_status": PaymentStatus(data.get("paymentStatus", "unpaid")),
        "profile": ClientProfile.from_record(data.get("profile")),
        "intake_data": IntakeData.from_record(data.get("intakeData")),
    }
    for attr, column, default in _COLLECTION_COLUMNS:
        value = data.get(column)
        fields[attr] = value if value is not None else default()
    return fields
