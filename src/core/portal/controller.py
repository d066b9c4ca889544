"""
Session and role controller for the portal.

This is the single source of truth for "who is logged in and what can
they see". It owns the current session, derives the coach/client role,
loads the client records that role may see, and decides which view the
shell should render.

It is a plain object with an async API so the routing rules can be tested
without a browser, an HTTP server, or a real backend.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..clients.models import Client, ClientDraft, Role, Session, derive_role
from ..clients.service import (
    BackendNotConfiguredError,
    DataService,
    DataServiceError,
    OrderBy,
    Subscription,
)

logger = logging.getLogger(__name__)


class ViewKind(Enum):
    """The screens the shell can show, in routing priority order."""
    CONFIG_ERROR = "config_error"
    LOADING = "loading"
    LANDING = "landing"
    DASHBOARD = "dashboard"
    PORTAL = "portal"
    PORTAL_PENDING = "portal_pending"  # Client signed in, record not found (yet)


@dataclass(frozen=True)
class PortalView:
    """What to render, plus the data that view needs."""
    kind: ViewKind
    session: Optional[Session] = None
    clients: list[Client] = field(default_factory=list)
    client: Optional[Client] = None


class ClientMutationError(Exception):
    """
    Raised when adding or updating a client fails.

    The message is meant to be shown to the user as-is.
    """
    pass


class PortalController:
    """
    Holds session, role and client records for one visitor.

    Mutations go to the backend first; local state is only touched after
    the backend confirms, so a failed call leaves everything as it was.
    """

    def __init__(
        self,
        service: Optional[DataService],
        coach_email: str,
        table: str = "clients",
    ) -> None:
        # None means the backend isn't configured: no auth, no data
        self._service = service
        self._primary_service = service
        self._coach_email = coach_email
        self._table = table

        self._session: Optional[Session] = None
        self._role: Optional[Role] = None
        self._clients: list[Client] = []
        self._loading = service is not None
        self._records_stale = False
        # Bumped on every session change so late fetches can be discarded
        self._generation = 0
        self._subscription: Optional[Subscription] = None
        self._closed = False

    # -----------------------------------------------------------------------
    # Read-only state
    # -----------------------------------------------------------------------

    @property
    def is_configured(self) -> bool:
        return self._service is not None

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def role(self) -> Optional[Role]:
        return self._role

    @property
    def clients(self) -> list[Client]:
        return list(self._clients)

    @property
    def service(self) -> Optional[DataService]:
        return self._service

    @property
    def logged_in_client(self) -> Optional[Client]:
        """The record belonging to a signed-in client, if it has been loaded."""
        if self._session is None or self._role is not Role.CLIENT:
            return None
        for client in self._clients:
            if client.email == self._session.email:
                return client
        return None

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Restore any persisted session and start listening for auth changes.

        The subscription stays registered until close(). Whichever of the
        initial fetch and a notification lands last decides the session.
        """
        if self._service is None:
            logger.warning("Backend not configured; portal limited to config error view")
            self._loading = False
            return

        self._subscription = self._service.on_session_change(self._handle_session_change)

        try:
            session = await self._service.get_current_session()
        except DataServiceError as e:
            logger.error("Failed to restore session", extra={"error": e.message})
            session = None

        if self._closed:
            return

        self._apply_session(session)
        self._loading = False
        await self.refresh_records()

    def close(self) -> None:
        """Release the auth subscription. Results arriving later are ignored."""
        self._closed = True
        self._release_subscription()

    def _release_subscription(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _handle_session_change(self, event: str, session: Optional[Session]) -> None:
        if self._closed:
            return
        logger.info(
            "Session changed",
            extra={"event": event, "signed_in": session is not None}
        )
        self._apply_session(session)

    def _apply_session(self, session: Optional[Session]) -> None:
        self._session = session
        if session is not None and session.is_demo:
            self._role = Role.COACH
        else:
            self._role = derive_role(session, self._coach_email)
        self._generation += 1
        self._records_stale = True

    # -----------------------------------------------------------------------
    # Record loading
    # -----------------------------------------------------------------------

    async def refresh_records(self) -> None:
        """
        Load the records the current role may see.

        Coach: every client, newest first. Client: at most their own record.
        No session: nothing. Fetch errors are logged and leave the list empty;
        a row that doesn't decode is logged and left out.
        """
        generation = self._generation
        session, role = self._session, self._role
        self._records_stale = False

        if session is None or self._service is None:
            self._clients = []
            return

        try:
            if role is Role.COACH:
                rows = await self._service.query(
                    self._table,
                    order_by=OrderBy("created_at", descending=True),
                )
            else:
                rows = await self._service.query(
                    self._table,
                    filters={"email": session.email},
                    limit=1,
                )
        except DataServiceError as e:
            logger.error(
                "Error fetching clients",
                extra={"role": role.value if role else None, "error": e.message}
            )
            rows = []

        if self._closed or generation != self._generation:
            logger.debug("Discarding client fetch for a previous session")
            return

        # One unreadable row is skipped; the rest still load
        clients = []
        for row in rows:
            try:
                clients.append(Client.from_record(row))
            except (KeyError, ValueError) as e:
                logger.error(
                    "Skipping unreadable client row",
                    extra={"client_id": row.get("id"), "error": str(e)}
                )

        self._clients = clients
        logger.debug("Loaded clients", extra={"count": len(clients)})

    async def ensure_records(self) -> None:
        """Refetch if the session changed since the last load."""
        if self._records_stale:
            await self.refresh_records()

    # -----------------------------------------------------------------------
    # View routing
    # -----------------------------------------------------------------------

    def view(self) -> PortalView:
        """
        Pick the view from current state. First match wins:
        config error, loading, landing, dashboard, portal, portal pending.
        """
        if self._service is None:
            return PortalView(kind=ViewKind.CONFIG_ERROR)
        if self._loading:
            return PortalView(kind=ViewKind.LOADING)
        if self._session is None:
            return PortalView(kind=ViewKind.LANDING)
        if self._role is Role.COACH:
            return PortalView(
                kind=ViewKind.DASHBOARD,
                session=self._session,
                clients=list(self._clients),
            )
        client = self.logged_in_client
        if client is not None:
            return PortalView(kind=ViewKind.PORTAL, session=self._session, client=client)
        return PortalView(kind=ViewKind.PORTAL_PENDING, session=self._session)

    async def current_view(self) -> PortalView:
        """Like view(), but loads records first if the session has moved on."""
        await self.ensure_records()
        return self.view()

    # -----------------------------------------------------------------------
    # Mutations exposed to the dashboard and client portal
    # -----------------------------------------------------------------------

    def _require_service(self) -> DataService:
        if self._service is None:
            raise BackendNotConfiguredError("Backend services not configured.")
        return self._service

    async def add_client(self, draft: ClientDraft) -> Client:
        """Insert a new client and put it at the top of the list."""
        service = self._require_service()

        try:
            row = await service.insert(self._table, draft.to_record())
            client = Client.from_record(row)
        except DataServiceError as e:
            logger.error(
                "Error adding client",
                extra={"email": draft.email, "error": e.message}
            )
            raise ClientMutationError(f"Error: {e.message}") from e

        self._clients = [client, *self._clients]
        logger.info("Client added", extra={"client_id": client.id})
        return client

    async def update_client(self, client: Client) -> Client:
        """
        Save every editable field of `client` and swap it into the list.

        id and created_at never leave this process; the update is keyed by id.
        """
        service = self._require_service()

        try:
            row = await service.update(self._table, client.id, client.to_record())
            updated = Client.from_record(row)
        except DataServiceError as e:
            logger.error(
                "Error updating client",
                extra={"client_id": client.id, "error": e.message}
            )
            raise ClientMutationError(f"Error: {e.message}") from e

        self._clients = [updated if c.id == updated.id else c for c in self._clients]
        logger.info("Client updated", extra={"client_id": updated.id})
        return updated

    async def logout(self) -> None:
        """
        Ask the backend to sign out.

        Local state is left alone; the auth notification clears it. A demo
        session has no backend behind it, so it is cleared here.
        """
        if self._session is not None and self._session.is_demo:
            await self._leave_demo()
            return

        service = self._require_service()
        await service.sign_out()

    # -----------------------------------------------------------------------
    # Demo access (debug only)
    # -----------------------------------------------------------------------

    async def enter_demo(self, demo_service: DataService) -> None:
        """
        Act as the coach against a throwaway backend, skipping authentication.

        Only reachable when demo access is switched on in settings.
        """
        logger.warning("Demo access used; authentication bypassed")
        self._release_subscription()
        self._service = demo_service
        self._loading = False
        self._apply_session(Session(user_id="demo", email=self._coach_email or "demo@localhost", is_demo=True))
        await self.refresh_records()

    async def _leave_demo(self) -> None:
        """
        Go back to the real backend and pick up whatever session it still
        holds, so a visitor who was signed in before the demo stays signed in.
        """
        self._service = self._primary_service
        self._apply_session(None)
        self._clients = []
        self._records_stale = False
        if self._service is None or self._closed:
            return

        self._subscription = self._service.on_session_change(self._handle_session_change)
        try:
            session = await self._service.get_current_session()
        except DataServiceError as e:
            logger.error("Failed to restore session after demo", extra={"error": e.message})
            return

        if self._closed:
            return
        self._apply_session(session)
        await self.refresh_records()
