"""
Authentication endpoints for the landing page.

Sign-in goes straight to the backend; the portal picks up the new
session from the backend's auth notification, so a successful sign-in
is followed by `GET /api/v1/view` to find out where to go.
"""

import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from ...core.clients.service import DataServiceError
from ...core.landing.signin import NOT_CONFIGURED_MESSAGE, SignInOutcome
from ...infrastructure.supabase.demo import create_demo_service
from ..dependencies import (
    ControllerDep,
    LogoGestureDep,
    SettingsDep,
    SignInFormDep,
    VisitorDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class SignInRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1)


class SignInResponse(BaseModel):
    outcome: str = Field(description="signed_in or demo")


class PasswordResetRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)


class PasswordResetResponse(BaseModel):
    reset_email_sent: bool


class LogoTapResponse(BaseModel):
    count: int = Field(description="Taps in the current run")
    demo_entered: bool = Field(description="Whether this tap opened the demo entry path")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/sign-in",
    response_model=SignInResponse,
    status_code=status.HTTP_200_OK,
    summary="Sign in with email and password",
    responses={401: {"description": "Credentials rejected; detail is the backend's message"}},
)
async def sign_in(
    request: SignInRequest,
    visitor: VisitorDep,
    form: SignInFormDep,
    settings: SettingsDep,
) -> SignInResponse:
    outcome = await form.submit(visitor.controller.service, request.email, request.password)

    if outcome is SignInOutcome.DEMO:
        await visitor.controller.enter_demo(create_demo_service(settings.clients_table))
        return SignInResponse(outcome=outcome.value)

    if outcome is SignInOutcome.FAILED:
        if form.error == NOT_CONFIGURED_MESSAGE:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=form.error,
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=form.error,
        )

    logger.info("Signed in", extra={"email": request.email.strip()})
    return SignInResponse(outcome=outcome.value)


@router.post(
    "/sign-out",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Sign out",
)
async def sign_out(controller: ControllerDep) -> None:
    try:
        await controller.logout()
    except DataServiceError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        )


@router.post(
    "/password-reset",
    response_model=PasswordResetResponse,
    status_code=status.HTTP_200_OK,
    summary="Email a password reset link",
)
async def password_reset(
    request: PasswordResetRequest,
    visitor: VisitorDep,
    form: SignInFormDep,
) -> PasswordResetResponse:
    sent = await form.request_password_reset(visitor.controller.service, request.email)
    if not sent:
        code = (
            status.HTTP_503_SERVICE_UNAVAILABLE
            if form.error == NOT_CONFIGURED_MESSAGE
            else status.HTTP_502_BAD_GATEWAY
        )
        raise HTTPException(status_code=code, detail=form.error)
    return PasswordResetResponse(reset_email_sent=True)


@router.post(
    "/logo",
    response_model=LogoTapResponse,
    status_code=status.HTTP_200_OK,
    summary="Register a logo tap",
    description="Five quick taps open the demo entry path when demo access is enabled.",
)
async def tap_logo(
    visitor: VisitorDep,
    gesture: LogoGestureDep,
    settings: SettingsDep,
) -> LogoTapResponse:
    triggered = gesture.tap()
    demo_entered = False

    if triggered:
        if settings.demo_access_enabled:
            await visitor.controller.enter_demo(create_demo_service(settings.clients_table))
            demo_entered = True
        else:
            logger.info("Logo gesture completed but demo access is disabled")

    return LogoTapResponse(count=gesture.count, demo_entered=demo_entered)
