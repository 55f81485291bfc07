"""
Configuration module.

Handles environment variables, backend credentials, and application settings.
"""

from replrepo.config.config import (
    APP_ENV,
    DEBUG,
    LOG_LEVEL,
    SUPABASE_URL,
    SUPABASE_KEY,
    REQUEST_TIMEOUT,
    FLASK_SECRET_KEY,
    WEB_PORT,
    SAVED_LIST_NAME,
    is_production,
    is_development,
    is_backend_configured,
    validate_config,
    print_config_summary,
)

__all__ = [
    "APP_ENV",
    "DEBUG",
    "LOG_LEVEL",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "REQUEST_TIMEOUT",
    "FLASK_SECRET_KEY",
    "WEB_PORT",
    "SAVED_LIST_NAME",
    "is_production",
    "is_development",
    "is_backend_configured",
    "validate_config",
    "print_config_summary",
]
