"""
Supabase client for auth and client records.

Supabase provides both halves of what the portal needs: password auth
with session-change notifications, and a Postgres table (`clients`)
behind a PostgREST query API.

Mock mode keeps users and rows in memory, enabling local development
and API tests without a Supabase project.
"""

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from supabase import AuthError, PostgrestAPIError, create_client

from src.core.clients.models import Session
from src.core.clients.service import (
    AuthenticationError,
    DataService,
    DataServiceError,
    OrderBy,
    SessionListener,
)

logger = logging.getLogger(__name__)


@dataclass
class SupabaseConfig:
    """Configuration for a Supabase project."""
    url: str
    anon_key: str
    password_reset_redirect_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("Supabase URL is required")
        if not self.anon_key:
            raise ValueError("Supabase anon key is required")


def _to_session(auth_session: Any) -> Optional[Session]:
    """Translate a supabase-auth session into our Session."""
    if auth_session is None or auth_session.user is None:
        return None
    return Session(
        user_id=str(auth_session.user.id),
        email=auth_session.user.email or "",
        access_token=auth_session.access_token,
    )


class SupabaseDataService:
    """
    DataService backed by the Supabase Python client.

    One instance per visitor: the underlying client holds that visitor's
    auth session and sends its token with every table query.

    All methods are async to match the Protocol even though the client
    used here is synchronous.
    """

    def __init__(self, config: SupabaseConfig) -> None:
        self._config = config
        self._client = create_client(config.url, config.anon_key)

        logger.info(
            "Initialized Supabase client",
            extra={"url": config.url}
        )

    async def get_current_session(self) -> Optional[Session]:
        try:
            return _to_session(self._client.auth.get_session())
        except AuthError as e:
            logger.error("Failed to read session", extra={"error": str(e)})
            raise DataServiceError(str(e))

    def on_session_change(self, listener: SessionListener):
        def _callback(event, auth_session) -> None:
            listener(str(event), _to_session(auth_session))

        return self._client.auth.on_auth_state_change(_callback)

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        try:
            response = self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as e:
            # Message is shown to the user as-is (e.g. "Invalid login credentials")
            raise AuthenticationError(e.message)

        session = _to_session(response.session)
        if session is None:
            raise AuthenticationError("Sign-in did not return a session")
        return session

    async def sign_out(self) -> None:
        try:
            self._client.auth.sign_out()
        except AuthError as e:
            logger.error("Sign-out failed", extra={"error": e.message})
            raise DataServiceError(e.message)

    async def reset_password_for_email(self, email: str) -> None:
        options = {}
        if self._config.password_reset_redirect_url:
            options["redirect_to"] = self._config.password_reset_redirect_url
        try:
            self._client.auth.reset_password_for_email(email, options)
        except AuthError as e:
            raise DataServiceError(e.message)

    async def query(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        request = self._client.table(table).select("*")
        for column, value in (filters or {}).items():
            request = request.eq(column, value)
        if order_by is not None:
            request = request.order(order_by.column, desc=order_by.descending)
        if limit is not None:
            request = request.limit(limit)

        try:
            response = request.execute()
        except PostgrestAPIError as e:
            logger.error("Query failed", extra={"table": table, "error": e.message})
            raise DataServiceError(e.message or str(e))

        return list(response.data or [])

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.table(table).insert(record).execute()
        except PostgrestAPIError as e:
            logger.error("Insert failed", extra={"table": table, "error": e.message})
            raise DataServiceError(e.message or str(e))

        if not response.data:
            raise DataServiceError("Insert returned no row")
        return response.data[0]

    async def update(self, table: str, row_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.table(table).update(changes).eq("id", row_id).execute()
        except PostgrestAPIError as e:
            logger.error(
                "Update failed",
                extra={"table": table, "row_id": row_id, "error": e.message}
            )
            raise DataServiceError(e.message or str(e))

        # Row-level security hides rows instead of erroring
        if not response.data:
            raise DataServiceError(f"No row with id {row_id} in {table}")
        return response.data[0]


# ---------------------------------------------------------------------------
# Mock Backend for Local Development
# ---------------------------------------------------------------------------

@dataclass
class MockUser:
    id: str
    email: str
    password: str


@dataclass
class MockBackend:
    """
    In-memory users and tables shared by every MockDataService.

    Each visitor gets its own MockDataService (its own auth session), but
    they all read and write the same rows, like a real project.
    """
    users: dict[str, MockUser] = field(default_factory=dict)
    tables: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    password_resets: list[str] = field(default_factory=list)

    def add_user(self, email: str, password: str) -> MockUser:
        user = MockUser(id=str(uuid4()), email=email, password=password)
        self.users[email] = user
        return user

    def seed(self, table: str, rows: list[dict[str, Any]]) -> None:
        """Store rows as-is, filling in id/created_at where missing."""
        for row in rows:
            stored = copy.deepcopy(row)
            stored.setdefault("id", str(uuid4()))
            stored.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            self.tables.setdefault(table, []).append(stored)

    def reset(self) -> None:
        self.users.clear()
        self.tables.clear()
        self.password_resets.clear()


class _MockSubscription:
    def __init__(self, listeners: list[SessionListener], listener: SessionListener) -> None:
        self._listeners = listeners
        self._listener = listener

    def unsubscribe(self) -> None:
        if self._listener in self._listeners:
            self._listeners.remove(self._listener)


class MockDataService:
    """
    DataService over a MockBackend.

    Set `failures[operation] = message` to make the next calls of that
    operation ("query", "insert", "update", "sign_out", ...) fail with
    that message.
    """

    def __init__(self, backend: Optional[MockBackend] = None) -> None:
        self.backend = backend if backend is not None else MockBackend()
        self.failures: dict[str, str] = {}
        self._session: Optional[Session] = None
        self._listeners: list[SessionListener] = []
        logger.debug("Initialized mock data service (in-memory)")

    def _check_failure(self, operation: str) -> None:
        if operation in self.failures:
            raise DataServiceError(self.failures[operation])

    def _set_session(self, event: str, session: Optional[Session]) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(event, session)

    async def get_current_session(self) -> Optional[Session]:
        self._check_failure("get_current_session")
        return self._session

    def on_session_change(self, listener: SessionListener) -> _MockSubscription:
        self._listeners.append(listener)
        return _MockSubscription(self._listeners, listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        if "sign_in" in self.failures:
            raise AuthenticationError(self.failures["sign_in"])
        user = self.backend.users.get(email)
        if user is None or user.password != password:
            raise AuthenticationError("Invalid login credentials")

        session = Session(user_id=user.id, email=user.email, access_token=f"mock-token-{uuid4().hex}")
        self._set_session("SIGNED_IN", session)
        return session

    async def sign_out(self) -> None:
        self._check_failure("sign_out")
        self._set_session("SIGNED_OUT", None)

    async def reset_password_for_email(self, email: str) -> None:
        self._check_failure("reset_password_for_email")
        # Unknown emails are accepted silently, as Supabase does
        self.backend.password_resets.append(email)

    async def query(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        self._check_failure("query")
        rows = [
            row for row in self.backend.tables.get(table, [])
            if all(row.get(column) == value for column, value in (filters or {}).items())
        ]
        if order_by is not None:
            rows.sort(key=lambda row: row.get(order_by.column) or "", reverse=order_by.descending)
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        self._check_failure("insert")
        stored = copy.deepcopy(record)
        stored["id"] = str(uuid4())
        stored["created_at"] = datetime.now(timezone.utc).isoformat()
        self.backend.tables.setdefault(table, []).append(stored)
        return copy.deepcopy(stored)

    async def update(self, table: str, row_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        self._check_failure("update")
        for row in self.backend.tables.get(table, []):
            if row.get("id") == row_id:
                row.update({
                    key: copy.deepcopy(value)
                    for key, value in changes.items()
                    if key not in ("id", "created_at")
                })
                return copy.deepcopy(row)
        raise DataServiceError(f"No row with id {row_id} in {table}")


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_data_service(
    config: Optional[SupabaseConfig] = None,
    mock_mode: bool = False,
    backend: Optional[MockBackend] = None,
) -> DataService:
    """
    Create a data service based on configuration.

    Args:
        config: Supabase configuration (required if not mock_mode)
        mock_mode: If True, return an in-memory service
        backend: Shared mock backend, so visitors see each other's rows

    Returns:
        DataService implementation (Supabase or Mock)
    """
    if mock_mode:
        return MockDataService(backend)

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return SupabaseDataService(config)
