"""
Authentication module.

Wraps the hosted auth service that issues the sessions used for writes.
"""

from replrepo.auth.base import AuthProvider, AuthError, EMAIL_NOT_CONFIRMED
from replrepo.auth.supabase_auth import SupabaseAuth, MockAuth

__all__ = [
    "AuthProvider",
    "AuthError",
    "EMAIL_NOT_CONFIRMED",
    "SupabaseAuth",
    "MockAuth",
]
