"""
The contract this application needs from its backend.

Authentication and row storage both live in a hosted service. Using a
Protocol here means the portal controller doesn't know or care whether
it's talking to Supabase or to the in-memory mock used in tests.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from .models import Session


class DataServiceError(Exception):
    """Raised when a query or mutation against the backend fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(DataServiceError):
    """Raised when sign-in is rejected. The message is shown to the user verbatim."""
    pass


class BackendNotConfiguredError(Exception):
    """Raised when auth or data calls are attempted without backend credentials."""
    pass


# Callback signature for auth notifications: (event name, new session or None)
SessionListener = Callable[[str, Optional[Session]], None]


@dataclass(frozen=True)
class OrderBy:
    column: str
    descending: bool = False


class Subscription(Protocol):
    def unsubscribe(self) -> None: ...


class DataService(Protocol):
    """
    Auth + row store operations.

    Every call is async so a slow backend suspends only the caller.
    Failures surface as DataServiceError (AuthenticationError for sign-in).
    """

    async def get_current_session(self) -> Optional[Session]:
        """Session restored from persisted auth state, if any."""
        ...

    def on_session_change(self, listener: SessionListener) -> Subscription:
        """Register for sign-in, sign-out and token-refresh notifications."""
        ...

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        ...

    async def sign_out(self) -> None:
        ...

    async def reset_password_for_email(self, email: str) -> None:
        ...

    async def query(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Rows whose columns equal every value in `filters`."""
        ...

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored (with id and created_at)."""
        ...

    async def update(self, table: str, row_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Apply a partial update to one row and return the stored row."""
        ...
