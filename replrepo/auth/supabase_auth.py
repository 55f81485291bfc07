"""
Supabase auth backend for ReplRepo.

Talks to the GoTrue REST API that every Supabase project exposes under
``/auth/v1``.
"""

import time
import uuid
from typing import Dict, Optional, Any

import requests
from loguru import logger

from replrepo.auth.base import AuthError, AuthProvider, EMAIL_NOT_CONFIRMED
from replrepo.config import SUPABASE_URL, SUPABASE_KEY, REQUEST_TIMEOUT
from replrepo.models import AuthSession, User


def _error_from_response(response: requests.Response) -> AuthError:
    """
    Build an AuthError from a GoTrue error body.

    Newer servers send ``{"error_code", "msg"}``, older ones
    ``{"error", "error_description"}``.
    """
    message = f"HTTP {response.status_code}"
    code = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = (
            body.get("msg")
            or body.get("error_description")
            or body.get("message")
            or body.get("error")
            or message
        )
        code = body.get("error_code") or body.get("error")
    return AuthError(message, code=code, status=response.status_code)


class SupabaseAuth(AuthProvider):
    """GoTrue-backed authentication."""

    def __init__(self, url: str = None, api_key: str = None):
        self.url = (url if url is not None else SUPABASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else SUPABASE_KEY

    @property
    def name(self) -> str:
        return "supabase"

    @property
    def _auth_url(self) -> str:
        return f"{self.url}/auth/v1"

    def _headers(self, access_token: str = None) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
            "Content-Type": "application/json",
        }

    def _post(
        self,
        path: str,
        payload: Dict[str, Any] = None,
        params: Dict[str, str] = None,
        access_token: str = None,
    ) -> Optional[Dict[str, Any]]:
        """POST to an auth endpoint; raise AuthError on failure."""
        try:
            response = requests.post(
                f"{self._auth_url}/{path}",
                headers=self._headers(access_token),
                params=params,
                json=payload or {},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise AuthError(f"Auth request failed: {e}") from e

        if response.status_code >= 400:
            raise _error_from_response(response)
        if not response.content:
            return None
        return response.json()

    def sign_in(self, email: str, password: str) -> AuthSession:
        data = self._post(
            "token",
            {"email": email, "password": password},
            params={"grant_type": "password"},
        )
        session = AuthSession.from_dict(data)
        if session is None:
            raise AuthError("Sign-in response did not contain a session")
        logger.info(f"Signed in {session.user.email}")
        return session

    def refresh_session(self, refresh_token: str) -> AuthSession:
        data = self._post(
            "token",
            {"refresh_token": refresh_token},
            params={"grant_type": "refresh_token"},
        )
        session = AuthSession.from_dict(data)
        if session is None:
            raise AuthError("Refresh response did not contain a session")
        logger.debug(f"Refreshed session for {session.user.email}")
        return session

    def sign_up(self, email: str, password: str) -> Optional[AuthSession]:
        data = self._post("signup", {"email": email, "password": password})
        # Projects with email confirmation on return only the user
        return AuthSession.from_dict(data)

    def sign_out(self, session: AuthSession) -> None:
        self._post("logout", access_token=session.access_token)

    def resend_confirmation(self, email: str) -> None:
        self._post("resend", {"type": "signup", "email": email})

    def get_user(self, access_token: str) -> Optional[User]:
        try:
            response = requests.get(
                f"{self._auth_url}/user",
                headers=self._headers(access_token),
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise AuthError(f"Auth request failed: {e}") from e

        if response.status_code in (401, 403):
            return None
        if response.status_code >= 400:
            raise _error_from_response(response)
        return User.from_record(response.json())


class MockAuth(AuthProvider):
    """
    In-memory auth for testing and development.

    Accounts registered with ``require_confirmation`` cannot sign in until
    ``confirm`` is called, mirroring a project with email confirmation on.
    """

    def __init__(self, require_confirmation: bool = False):
        self.require_confirmation = require_confirmation
        self._accounts: Dict[str, Dict[str, Any]] = {}
        self._tokens: Dict[str, User] = {}
        self._refresh_tokens: Dict[str, User] = {}
        self.resent_to: list[str] = []

    @property
    def name(self) -> str:
        return "mock"

    def add_account(self, email: str, password: str, confirmed: bool = True) -> User:
        """Register an account directly (for testing)."""
        user = User(id=str(uuid.uuid4()), email=email)
        self._accounts[email] = {"password": password, "user": user, "confirmed": confirmed}
        return user

    def confirm(self, email: str) -> None:
        self._accounts[email]["confirmed"] = True

    def _issue(self, user: User) -> AuthSession:
        token = uuid.uuid4().hex
        refresh_token = uuid.uuid4().hex
        self._tokens[token] = user
        self._refresh_tokens[refresh_token] = user
        return AuthSession(
            access_token=token,
            user=user,
            refresh_token=refresh_token,
            expires_in=3600,
            expires_at=int(time.time()) + 3600,
        )

    def expire(self, access_token: str) -> None:
        """Invalidate an access token while keeping its refresh token usable."""
        self._tokens.pop(access_token, None)

    def sign_in(self, email: str, password: str) -> AuthSession:
        account = self._accounts.get(email)
        if account is None or account["password"] != password:
            raise AuthError("Invalid login credentials", code="invalid_credentials", status=400)
        if not account["confirmed"]:
            raise AuthError(EMAIL_NOT_CONFIRMED, code="email_not_confirmed", status=400)
        return self._issue(account["user"])

    def sign_up(self, email: str, password: str) -> Optional[AuthSession]:
        if email in self._accounts:
            raise AuthError("User already registered", code="user_already_exists", status=422)
        if len(password) < 6:
            raise AuthError("Password should be at least 6 characters", code="weak_password", status=422)
        user = self.add_account(email, password, confirmed=not self.require_confirmation)
        if self.require_confirmation:
            return None
        return self._issue(user)

    def refresh_session(self, refresh_token: str) -> AuthSession:
        # Refresh tokens are single use
        user = self._refresh_tokens.pop(refresh_token, None)
        if user is None:
            raise AuthError(
                "Invalid Refresh Token: Refresh Token Not Found",
                code="refresh_token_not_found",
                status=400,
            )
        return self._issue(user)

    def sign_out(self, session: AuthSession) -> None:
        self._tokens.pop(session.access_token, None)
        self._refresh_tokens.pop(session.refresh_token, None)

    def resend_confirmation(self, email: str) -> None:
        if email not in self._accounts:
            raise AuthError("User not found", code="user_not_found", status=404)
        self.resent_to.append(email)

    def get_user(self, access_token: str) -> Optional[User]:
        return self._tokens.get(access_token)
