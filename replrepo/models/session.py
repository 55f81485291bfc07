"""
Authenticated identity models.

The session is an opaque credential handed out by the auth service. The
web layer keeps it in the signed session cookie via ``to_dict``/``from_dict``.
"""

import time
from dataclasses import dataclass, asdict
from typing import Optional


# Seconds before expiry at which a session is refreshed
REFRESH_MARGIN = 60


@dataclass
class User:
    """The signed-in user as reported by the auth service."""

    id: str
    email: str = ""

    @classmethod
    def from_record(cls, record: Optional[dict]) -> Optional["User"]:
        if not record or not record.get("id"):
            return None
        return cls(id=str(record["id"]), email=record.get("email") or "")


@dataclass
class AuthSession:
    """
    Credentials for a signed-in user.

    Attributes:
        access_token: Bearer token sent with every data request.
        user: The user the token belongs to.
        refresh_token: Token for obtaining a new access token.
        expires_in: Lifetime of the access token in seconds.
        expires_at: Unix time the access token expires, or 0 if unknown.
    """

    access_token: str
    user: User
    refresh_token: str = ""
    expires_in: int = 0
    expires_at: int = 0

    def needs_refresh(self, now: float = None, margin: int = REFRESH_MARGIN) -> bool:
        """True when the access token has expired or is about to."""
        if not self.expires_at:
            return False
        now = time.time() if now is None else now
        return now >= self.expires_at - margin

    def to_dict(self) -> dict:
        """Flatten into JSON-safe values for cookie storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["AuthSession"]:
        """
        Rebuild a session from ``to_dict`` output or an auth token payload.

        Returns None if the data is absent or malformed.
        """
        if not data or not data.get("access_token"):
            return None
        user = User.from_record(data.get("user"))
        if user is None:
            return None
        expires_in = int(data.get("expires_in") or 0)
        expires_at = int(data.get("expires_at") or 0)
        if not expires_at and expires_in:
            expires_at = int(time.time()) + expires_in
        return cls(
            access_token=data["access_token"],
            user=user,
            refresh_token=data.get("refresh_token") or "",
            expires_in=expires_in,
            expires_at=expires_at,
        )

