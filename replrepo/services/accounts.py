"""
Account service.

Turns auth service outcomes into the messages shown in the page header.
"""

from typing import Optional

from loguru import logger

from replrepo.auth.base import AuthError, AuthProvider
from replrepo.models import AuthSession, User
from replrepo.services.results import ActionResult


CONFIRM_EMAIL_FIRST = "Please check your email and click the confirmation link before signing in."
UNEXPECTED_ERROR = "An unexpected error occurred. Please try again."
SIGNED_UP = (
    "Signed up successfully. Please check your email for a confirmation link. "
    "Click the link to confirm your email and sign in automatically."
)
SIGNED_UP_AND_IN = "Signed up successfully. You are now signed in."
CONFIRMATION_RESENT = "Confirmation email resent. Please check your inbox."
CREDENTIALS_REQUIRED = "Email and password are required."


class AccountService:
    """Sign-in, sign-up, sign-out and confirmation resend."""

    def __init__(self, auth: AuthProvider):
        self.auth = auth

    def sign_in(self, email: str, password: str) -> ActionResult:
        """Sign in with a password; the session is returned as ``data``."""
        email = (email or "").strip()
        if not email or not password:
            return ActionResult.fail(CREDENTIALS_REQUIRED)

        try:
            session = self.auth.sign_in(email, password)
        except AuthError as e:
            logger.error(f"Error signing in: {e}")
            if e.is_email_not_confirmed:
                return ActionResult.fail(CONFIRM_EMAIL_FIRST)
            if e.status is None:
                return ActionResult.fail(UNEXPECTED_ERROR)
            return ActionResult.fail(f"Failed to sign in: {e}")

        return ActionResult.ok(data=session)

    def sign_up(self, email: str, password: str) -> ActionResult:
        """
        Register a new account.

        ``data`` holds a session only when the project signs users in
        without email confirmation.
        """
        email = (email or "").strip()
        if not email or not password:
            return ActionResult.fail(CREDENTIALS_REQUIRED)

        try:
            session = self.auth.sign_up(email, password)
        except AuthError as e:
            logger.error(f"Error signing up: {e}")
            if e.status is None:
                return ActionResult.fail(UNEXPECTED_ERROR)
            return ActionResult.fail(f"Failed to sign up: {e}")

        logger.info(f"Signed up {email}")
        if session is not None:
            return ActionResult.ok(SIGNED_UP_AND_IN, data=session)
        return ActionResult.ok(SIGNED_UP)

    def refresh_session(self, session: AuthSession) -> Optional[AuthSession]:
        """
        Trade the session's refresh token for a fresh session.

        Returns None when the session cannot be renewed; the caller should
        then treat the user as signed out.
        """
        if not session.refresh_token:
            return None
        try:
            return self.auth.refresh_session(session.refresh_token)
        except AuthError as e:
            logger.warning(f"Could not refresh session: {e}")
            return None

    def sign_out(self, session: Optional[AuthSession]) -> ActionResult:
        """Revoke the session; the caller forgets it either way."""
        if session is None:
            return ActionResult.ok()
        try:
            self.auth.sign_out(session)
        except AuthError as e:
            logger.error(f"Error signing out: {e}")
            return ActionResult.fail(UNEXPECTED_ERROR)
        logger.info("Signed out successfully")
        return ActionResult.ok()

    def resend_confirmation(self, email: str) -> ActionResult:
        email = (email or "").strip()
        if not email:
            return ActionResult.fail(CREDENTIALS_REQUIRED)
        try:
            self.auth.resend_confirmation(email)
        except AuthError as e:
            logger.error(f"Error resending confirmation email: {e}")
            if e.status is None:
                return ActionResult.fail(UNEXPECTED_ERROR)
            return ActionResult.fail(f"Failed to resend confirmation email: {e}")
        return ActionResult.ok(CONFIRMATION_RESENT)

    def current_user(self, session: Optional[AuthSession]) -> Optional[User]:
        """
        Resolve the signed-in user for a stored session.

        Expired tokens and auth service failures both count as signed out.
        """
        if session is None:
            return None
        try:
            return self.auth.get_user(session.access_token)
        except AuthError as e:
            logger.warning(f"Could not verify session: {e}")
            return None
