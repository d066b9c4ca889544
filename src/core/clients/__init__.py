"""
Client records and the backend contract used to load and store them.
"""

from .models import (
    BLOOD_TYPES,
    Client,
    ClientDraft,
    ClientProfile,
    ClientStatus,
    EnhancementStatus,
    ExperienceLevel,
    IntakeData,
    NotificationPreferences,
    PaymentStatus,
    Role,
    Session,
    derive_role,
)
from .service import (
    AuthenticationError,
    BackendNotConfiguredError,
    DataService,
    DataServiceError,
    OrderBy,
    SessionListener,
    Subscription,
)

__all__ = [
    "BLOOD_TYPES",
    "Client",
    "ClientDraft",
    "ClientProfile",
    "ClientStatus",
    "EnhancementStatus",
    "ExperienceLevel",
    "IntakeData",
    "NotificationPreferences",
    "PaymentStatus",
    "Role",
    "Session",
    "derive_role",
    "AuthenticationError",
    "BackendNotConfiguredError",
    "DataService",
    "DataServiceError",
    "OrderBy",
    "SessionListener",
    "Subscription",
]
