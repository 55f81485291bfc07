"""
Base authentication abstraction for ReplRepo.

Defines the interface to the hosted auth service: password sign-in and
sign-up, token refresh, sign-out, confirmation email resend, and token lookup.
"""

from abc import ABC, abstractmethod
from typing import Optional

from replrepo.models import AuthSession, User


# Message the auth service returns for sign-ins before email confirmation
EMAIL_NOT_CONFIRMED = "Email not confirmed"


class AuthError(Exception):
    """
    Raised when the auth service rejects or fails a request.

    Attributes:
        code: Service error code when supplied (e.g. "email_not_confirmed").
        status: HTTP status code, if a response was received.
    """

    def __init__(self, message: str, code: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.status = status

    @property
    def is_email_not_confirmed(self) -> bool:
        return self.code == "email_not_confirmed" or EMAIL_NOT_CONFIRMED in str(self)


class AuthProvider(ABC):
    """Abstract base class for auth backends. Methods raise AuthError on failure."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange an email and password for a session."""
        pass

    @abstractmethod
    def sign_up(self, email: str, password: str) -> Optional[AuthSession]:
        """
        Register a new account.

        Returns:
            A session when the account is usable immediately, or None when
            the user must first confirm their email address.
        """
        pass

    @abstractmethod
    def refresh_session(self, refresh_token: str) -> AuthSession:
        """Exchange a refresh token for a new session."""
        pass

    @abstractmethod
    def sign_out(self, session: AuthSession) -> None:
        """Revoke the session's tokens."""
        pass

    @abstractmethod
    def resend_confirmation(self, email: str) -> None:
        """Send the sign-up confirmation email again."""
        pass

    @abstractmethod
    def get_user(self, access_token: str) -> Optional[User]:
        """Look up the user for an access token, or None if the token is no longer valid."""
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
