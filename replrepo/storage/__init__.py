"""
Storage module.

Handles persistence and retrieval of catalog, list and review rows via
Supabase or an in-memory backend.
"""

from replrepo.storage.base import Storage, StorageError
from replrepo.storage.supabase import SupabaseStorage, MockSupabaseStorage

__all__ = [
    "Storage",
    "StorageError",
    "SupabaseStorage",
    "MockSupabaseStorage",
]
