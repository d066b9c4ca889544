"""
Client record endpoints.

These are the add/update hooks the dashboard and client portal call.
Records travel in the same camelCase shape as the `clients` table.

- Coach: list, add, and update any client
- Client: update their own record only
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from ...core.clients.models import Client, ClientDraft, Role
from ...core.portal.controller import ClientMutationError
from ..dependencies import CoachDep, SignedInDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class ClientPayload(BaseModel):
    """
    A client record as sent by the dashboard or portal.

    Only name and email are checked here; nested sections are passed
    through to the domain model, which validates the enum values.
    id and created_at are ignored if present.
    """
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1, description="Client's full name")
    email: str = Field(min_length=3, description="Client's email; links the record to their login")

    def to_record(self) -> dict[str, Any]:
        record = self.model_dump()
        record.pop("id", None)
        record.pop("created_at", None)
        return record


class ClientListResponse(BaseModel):
    clients: list[dict[str, Any]] = Field(description="Client records, newest first")
    total: int = Field(description="Number of records")


def serialize_client(client: Client) -> dict[str, Any]:
    return client.to_full_record()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=ClientListResponse,
    status_code=status.HTTP_200_OK,
    summary="List all clients",
    description="Every client record, newest first. Coach only.",
)
async def list_clients(controller: CoachDep) -> ClientListResponse:
    await controller.ensure_records()
    clients = [serialize_client(c) for c in controller.clients]
    return ClientListResponse(clients=clients, total=len(clients))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Add a client",
    description="Create a client record. Coach only.",
)
async def add_client(payload: ClientPayload, controller: CoachDep) -> dict[str, Any]:
    try:
        draft = ClientDraft.from_record(payload.to_record())
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    try:
        client = await controller.add_client(draft)
    except ClientMutationError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        )

    return serialize_client(client)


@router.put(
    "/{client_id}",
    status_code=status.HTTP_200_OK,
    summary="Update a client",
    description="Replace every editable field of a client record",
)
async def update_client(
    client_id: str,
    payload: ClientPayload,
    controller: SignedInDep,
) -> dict[str, Any]:
    """
    Save changes to one client.

    The coach may edit anyone. A client may edit only the record that
    carries their own email, and may not move it to another email.
    """
    await controller.ensure_records()
    existing = next((c for c in controller.clients if c.id == client_id), None)
    if existing is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found",
        )

    if controller.role is not Role.COACH:
        own_email = controller.session.email if controller.session else None
        if existing.email != own_email or payload.email != own_email:
            logger.warning(
                "Client tried to edit another record",
                extra={"client_id": client_id, "email": own_email}
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only update your own record",
            )

    try:
        client = Client.from_record({
            **payload.to_record(),
            "id": existing.id,
            "created_at": existing.created_at,
        })
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    try:
        updated = await controller.update_client(client)
    except ClientMutationError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        )

    return serialize_client(updated)
