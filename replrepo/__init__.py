"""
ReplRepo - a catalog of starter-template repositories.

Browse and search templates, save them into personal lists, and leave
star ratings and reviews. Persistence and authentication live in Supabase.
"""

__version__ = "1.0.0"
