"""
Prospect intake wizard.
"""

from .wizard import (
    STEP_TITLES,
    SUBMISSION_FAILED_MESSAGE,
    TOTAL_STEPS,
    IntakeDraft,
    IntakeStep,
    IntakeStepError,
    IntakeWizard,
    WizardState,
)

__all__ = [
    "STEP_TITLES",
    "SUBMISSION_FAILED_MESSAGE",
    "TOTAL_STEPS",
    "IntakeDraft",
    "IntakeStep",
    "IntakeStepError",
    "IntakeWizard",
    "WizardState",
]
