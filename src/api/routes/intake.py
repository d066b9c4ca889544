"""
Intake wizard endpoints.

Drives the "Apply Now" modal. Every endpoint returns the full wizard
state so the shell can redraw the current step without extra calls.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from ...core.intake.wizard import TOTAL_STEPS, IntakeStepError, IntakeWizard
from ..dependencies import IntakeWizardDep, SettingsDep, VisitorDep

logger = logging.getLogger(__name__)

router = APIRouter()


class IntakeStateResponse(BaseModel):
    is_open: bool
    step: int = Field(description="Current step, 1-based")
    total_steps: int = TOTAL_STEPS
    title: str
    progress: float = Field(description="step / total_steps")
    state: str = Field(description="editing, submitting, submitted or failed")
    can_advance: bool
    missing_fields: list[str]
    draft: dict[str, str]
    error: Optional[str] = None


def _state_response(wizard: IntakeWizard) -> IntakeStateResponse:
    return IntakeStateResponse(
        is_open=wizard.is_open,
        step=wizard.step.value,
        title=wizard.title,
        progress=wizard.progress,
        state=wizard.state.value,
        can_advance=wizard.can_advance,
        missing_fields=wizard.draft.missing_fields(wizard.step),
        draft=vars(wizard.draft).copy(),
        error=wizard.error,
    )


def _conflict(e: IntakeStepError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=IntakeStateResponse, summary="Current wizard state")
async def get_intake(wizard: IntakeWizardDep) -> IntakeStateResponse:
    wizard.poll()
    return _state_response(wizard)


@router.post("/open", response_model=IntakeStateResponse, summary="Open the intake modal")
async def open_intake(wizard: IntakeWizardDep) -> IntakeStateResponse:
    wizard.poll()
    wizard.open()
    return _state_response(wizard)


@router.post("/close", response_model=IntakeStateResponse, summary="Cancel and discard the draft")
async def close_intake(wizard: IntakeWizardDep) -> IntakeStateResponse:
    try:
        wizard.close()
    except IntakeStepError as e:
        raise _conflict(e)
    return _state_response(wizard)


@router.patch("/fields", response_model=IntakeStateResponse, summary="Edit draft fields")
async def update_fields(values: dict[str, str], wizard: IntakeWizardDep) -> IntakeStateResponse:
    try:
        wizard.update(**values)
    except IntakeStepError as e:
        raise _conflict(e)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return _state_response(wizard)


@router.post("/next", response_model=IntakeStateResponse, summary="Go to the next step")
async def next_step(wizard: IntakeWizardDep) -> IntakeStateResponse:
    try:
        wizard.next()
    except IntakeStepError as e:
        raise _conflict(e)
    return _state_response(wizard)


@router.post("/back", response_model=IntakeStateResponse, summary="Go to the previous step")
async def previous_step(wizard: IntakeWizardDep) -> IntakeStateResponse:
    try:
        wizard.back()
    except IntakeStepError as e:
        raise _conflict(e)
    return _state_response(wizard)


@router.post(
    "/submit",
    response_model=IntakeStateResponse,
    summary="Submit the application",
    description="Creates a prospect record. On failure the draft is kept and state is 'failed'.",
)
async def submit_intake(
    visitor: VisitorDep,
    wizard: IntakeWizardDep,
    settings: SettingsDep,
) -> IntakeStateResponse:
    try:
        await wizard.submit(visitor.controller.service, settings.clients_table)
    except IntakeStepError as e:
        raise _conflict(e)
    return _state_response(wizard)
