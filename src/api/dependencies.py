"""
FastAPI dependency injection.

Route handlers never build controllers or data services themselves; they
ask for the calling visitor and get its PortalController, intake wizard,
sign-in form and logo gesture. In mock mode every visitor talks to one
shared in-memory backend, which is what the tests run against.

Each browser is tied to its own PortalController through the
`portal_id` cookie.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, Response, status

from ..config.settings import Settings, get_settings
from ..core.clients.models import Role
from ..core.intake.wizard import IntakeWizard
from ..core.landing.gesture import LogoGesture
from ..core.landing.signin import SignInForm
from ..core.portal.controller import PortalController
from ..core.portal.registry import Visitor, VisitorFactory, VisitorRegistry
from ..infrastructure.supabase.client import (
    MockBackend,
    SupabaseConfig,
    create_data_service,
)
from ..infrastructure.supabase.demo import demo_client_rows

logger = logging.getLogger(__name__)

VISITOR_COOKIE = "portal_id"

# Global instances (shared across requests)
_mock_backend: Optional[MockBackend] = None
_registry: Optional[VisitorRegistry] = None


# ---------------------------------------------------------------------------
# Backend and visitor construction
# ---------------------------------------------------------------------------

def get_mock_backend(settings: Settings) -> MockBackend:
    """
    Shared in-memory backend for mock mode.

    Created once so that rows written by one visitor are visible to the
    others, like a real project.
    """
    global _mock_backend

    if _mock_backend is None:
        _mock_backend = MockBackend()
        for email, password in settings.mock_users_list:
            _mock_backend.add_user(email, password)
        if settings.mock_seed_clients:
            _mock_backend.seed(settings.clients_table, demo_client_rows())
        logger.info(
            "Created shared mock backend",
            extra={"users": len(_mock_backend.users)}
        )
    return _mock_backend


def build_visitor_factory(settings: Settings) -> VisitorFactory:
    """
    Return a function that assembles fresh state for a new visitor.

    Without backend credentials the controller gets no data service and
    can only show the configuration error view.
    """

    def factory() -> Visitor:
        service = None
        if settings.supabase_mock_mode:
            service = create_data_service(mock_mode=True, backend=get_mock_backend(settings))
        elif settings.is_backend_configured:
            service = create_data_service(
                config=SupabaseConfig(
                    url=settings.supabase_url,
                    anon_key=settings.supabase_anon_key,
                    password_reset_redirect_url=settings.password_reset_redirect_url,
                )
            )

        return Visitor(
            controller=PortalController(
                service=service,
                coach_email=settings.coach_email,
                table=settings.clients_table,
            ),
            wizard=IntakeWizard(confirmation_seconds=settings.intake_confirmation_seconds),
            sign_in=SignInForm(
                demo_email=settings.demo_email,
                demo_enabled=settings.demo_access_enabled,
            ),
            logo=LogoGesture(
                threshold=settings.logo_tap_threshold,
                window_seconds=settings.logo_tap_window_seconds,
            ),
        )

    return factory


def get_registry(
    settings: Annotated[Settings, Depends(get_settings)],
) -> VisitorRegistry:
    global _registry

    if _registry is None:
        _registry = VisitorRegistry(build_visitor_factory(settings))
        logger.info("Created visitor registry")
    return _registry


def reset_state() -> None:
    """Drop every visitor and the mock backend. Used at shutdown and in tests."""
    global _mock_backend, _registry

    if _registry is not None:
        _registry.close_all()
    _registry = None
    _mock_backend = None


# ---------------------------------------------------------------------------
# Per-request dependencies
# ---------------------------------------------------------------------------

async def get_visitor(
    request: Request,
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
    registry: Annotated[VisitorRegistry, Depends(get_registry)],
) -> Visitor:
    """
    Look up (or create) the state for the calling browser.

    A new visitor id is sent back as an HttpOnly cookie.
    """
    cookie_id = request.cookies.get(VISITOR_COOKIE)
    visitor_id, visitor = await registry.get(cookie_id)

    if visitor_id != cookie_id:
        response.set_cookie(
            VISITOR_COOKIE,
            visitor_id,
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure,
        )
    return visitor


def get_intake_wizard(visitor: Annotated[Visitor, Depends(get_visitor)]) -> IntakeWizard:
    return visitor.wizard


def get_sign_in_form(visitor: Annotated[Visitor, Depends(get_visitor)]) -> SignInForm:
    return visitor.sign_in


def get_logo_gesture(visitor: Annotated[Visitor, Depends(get_visitor)]) -> LogoGesture:
    return visitor.logo


def require_configured(
    visitor: Annotated[Visitor, Depends(get_visitor)],
) -> PortalController:
    """503 unless this visitor has a backend to talk to."""
    if not visitor.controller.is_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Backend services not configured.",
        )
    return visitor.controller


def require_signed_in(
    controller: Annotated[PortalController, Depends(require_configured)],
) -> PortalController:
    if controller.session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in required",
        )
    return controller


def require_coach(
    controller: Annotated[PortalController, Depends(require_signed_in)],
) -> PortalController:
    if controller.role is not Role.COACH:
        logger.warning(
            "Coach-only endpoint called by client",
            extra={"email": controller.session.email if controller.session else None}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Coach access required",
        )
    return controller


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_settings)]
VisitorDep = Annotated[Visitor, Depends(get_visitor)]
ControllerDep = Annotated[PortalController, Depends(require_configured)]
SignedInDep = Annotated[PortalController, Depends(require_signed_in)]
CoachDep = Annotated[PortalController, Depends(require_coach)]
IntakeWizardDep = Annotated[IntakeWizard, Depends(get_intake_wizard)]
SignInFormDep = Annotated[SignInForm, Depends(get_sign_in_form)]
LogoGestureDep = Annotated[LogoGesture, Depends(get_logo_gesture)]
