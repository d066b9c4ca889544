"""
Sign-in and password reset forms on the landing page.
"""

import logging
from enum import Enum
from typing import Optional

from ..clients.service import AuthenticationError, DataService, DataServiceError

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Backend services not configured."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class SignInOutcome(Enum):
    SIGNED_IN = "signed_in"
    DEMO = "demo"
    FAILED = "failed"


class SignInForm:
    """
    Email/password sign-in.

    Errors from the backend are shown verbatim and the user can retry
    straight away; nothing is retried automatically. A successful
    sign-in doesn't touch portal state here: the backend's auth
    notification does that.
    """

    def __init__(self, demo_email: str = "", demo_enabled: bool = False) -> None:
        self._demo_email = demo_email
        self._demo_enabled = demo_enabled
        self.busy = False
        self.error: Optional[str] = None
        self.reset_email_sent = False

    def _is_demo_email(self, email: str) -> bool:
        return bool(
            self._demo_enabled
            and self._demo_email
            and email.strip().lower() == self._demo_email.lower()
        )

    async def submit(
        self,
        service: Optional[DataService],
        email: str,
        password: str,
    ) -> SignInOutcome:
        self.error = None
        self.busy = True
        try:
            if service is None:
                if self._is_demo_email(email):
                    return SignInOutcome.DEMO
                self.error = NOT_CONFIGURED_MESSAGE
                return SignInOutcome.FAILED

            try:
                await service.sign_in_with_password(email.strip(), password)
            except AuthenticationError as e:
                logger.info("Sign-in rejected", extra={"error": e.message})
                self.error = e.message
                return SignInOutcome.FAILED
            except DataServiceError as e:
                logger.error("Sign-in failed", extra={"error": e.message})
                self.error = e.message or UNEXPECTED_ERROR_MESSAGE
                return SignInOutcome.FAILED

            return SignInOutcome.SIGNED_IN
        finally:
            self.busy = False

    async def request_password_reset(self, service: Optional[DataService], email: str) -> bool:
        """Send a reset link. Returns whether the backend accepted the request."""
        self.error = None
        self.reset_email_sent = False
        if service is None:
            self.error = NOT_CONFIGURED_MESSAGE
            return False

        try:
            await service.reset_password_for_email(email.strip())
        except DataServiceError as e:
            logger.error("Password reset request failed", extra={"error": e.message})
            self.error = e.message or UNEXPECTED_ERROR_MESSAGE
            return False

        self.reset_email_sent = True
        return True
