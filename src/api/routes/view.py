"""
Current-view endpoint.

The browser shell polls this to learn which screen to render: the
config error notice, a spinner, the landing page, the coach dashboard,
the client portal, or the "loading your portal" fallback.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.portal.controller import ViewKind
from ..dependencies import VisitorDep
from .clients import serialize_client

logger = logging.getLogger(__name__)

router = APIRouter()

CONFIG_ERROR_MESSAGE = (
    "This application requires a connection to a Supabase backend, but the necessary "
    "environment variables (SUPABASE_URL and SUPABASE_ANON_KEY) are not set."
)
PORTAL_PENDING_MESSAGE = "Loading your portal..."


class SessionInfo(BaseModel):
    email: str
    role: str
    is_demo: bool = False


class ViewResponse(BaseModel):
    """Everything the shell needs to draw the current screen."""
    view: str = Field(description="One of: " + ", ".join(kind.value for kind in ViewKind))
    session: Optional[SessionInfo] = None
    clients: list[dict[str, Any]] = Field(default_factory=list, description="Dashboard records")
    client: Optional[dict[str, Any]] = Field(None, description="Portal record")
    message: Optional[str] = None
    can_logout: bool = False


@router.get(
    "",
    response_model=ViewResponse,
    status_code=status.HTTP_200_OK,
    summary="Which view to render",
    description="Resolves session, role and records into a single view",
)
async def get_view(visitor: VisitorDep) -> ViewResponse:
    controller = visitor.controller
    current = await controller.current_view()

    session_info = None
    if current.session is not None and controller.role is not None:
        session_info = SessionInfo(
            email=current.session.email,
            role=controller.role.value,
            is_demo=current.session.is_demo,
        )

    message = None
    if current.kind is ViewKind.CONFIG_ERROR:
        message = CONFIG_ERROR_MESSAGE
    elif current.kind is ViewKind.PORTAL_PENDING:
        message = PORTAL_PENDING_MESSAGE

    return ViewResponse(
        view=current.kind.value,
        session=session_info,
        clients=[serialize_client(c) for c in current.clients],
        client=serialize_client(current.client) if current.client else None,
        message=message,
        can_logout=current.kind in (ViewKind.DASHBOARD, ViewKind.PORTAL, ViewKind.PORTAL_PENDING),
    )
