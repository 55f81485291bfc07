"""
Configuration module for ReplRepo.

Loads environment variables from .env file and exposes them as typed configuration values.
Uses python-dotenv for loading and provides safe defaults where appropriate.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from project root
# The .env file should be in the root directory (parent of replrepo/)
_project_root = Path(__file__).parent.parent.parent
_env_path = _project_root / ".env"
load_dotenv(_env_path)


# =============================================================================
# Application Environment
# =============================================================================

# Application environment: "development", "staging", or "production"
# Default: "development" for safe local testing
APP_ENV: str = os.getenv("APP_ENV", "development")

# Enable Flask debug mode (only in development)
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

# Log level passed to loguru
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


# =============================================================================
# Supabase Configuration
# =============================================================================

# Supabase project URL (e.g. https://abcd.supabase.co)
# Required for production; empty string as default for development
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "").rstrip("/")

# Supabase anon/public API key
# Required for production; empty string as default for development
SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")

# HTTP request timeout in seconds for every remote call
REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))


# =============================================================================
# Web Configuration
# =============================================================================

DEFAULT_SECRET_KEY = "dev-secret-key"

# Key used to sign the session cookie holding the auth tokens
FLASK_SECRET_KEY: str = os.getenv("FLASK_SECRET_KEY", DEFAULT_SECRET_KEY)

# Port for the development server
WEB_PORT: int = int(os.getenv("WEB_PORT", "5001"))

# Name of the list that quick saves from the listing page go into
SAVED_LIST_NAME: str = os.getenv("SAVED_LIST_NAME", "Saved")


# =============================================================================
# Helper Functions
# =============================================================================

VALID_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def is_production() -> bool:
    """Check if running in production environment."""
    return APP_ENV == "production"


def is_development() -> bool:
    """Check if running in development environment."""
    return APP_ENV == "development"


def is_backend_configured() -> bool:
    """Check whether both Supabase settings are present."""
    return bool(SUPABASE_URL and SUPABASE_KEY)


def validate_config() -> list[str]:
    """
    Validate that required configuration is present for production.

    Returns:
        List of missing or invalid configuration keys (empty if all valid).
    """
    errors = []

    if is_production():
        if not SUPABASE_URL:
            errors.append("SUPABASE_URL is required in production")
        if not SUPABASE_KEY:
            errors.append("SUPABASE_KEY is required in production")
        if FLASK_SECRET_KEY == DEFAULT_SECRET_KEY:
            errors.append("FLASK_SECRET_KEY must be changed in production")

    if SUPABASE_URL and not SUPABASE_URL.startswith(("http://", "https://")):
        errors.append("SUPABASE_URL must start with http:// or https://")

    if REQUEST_TIMEOUT < 1:
        errors.append("REQUEST_TIMEOUT must be at least 1 second")

    if LOG_LEVEL not in VALID_LOG_LEVELS:
        errors.append(f"LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}")

    if not SAVED_LIST_NAME.strip():
        errors.append("SAVED_LIST_NAME cannot be empty")

    return errors


def print_config_summary() -> None:
    """Print a summary of current configuration (safe for logs, no secrets)."""
    print(f"  APP_ENV: {APP_ENV}")
    print(f"  DEBUG: {DEBUG}")
    print(f"  LOG_LEVEL: {LOG_LEVEL}")
    print(f"  SUPABASE_URL: {SUPABASE_URL or '(not set)'}")
    print(f"  SUPABASE_KEY: {'***' if SUPABASE_KEY else '(not set)'}")
    print(f"  FLASK_SECRET_KEY: {'***' if FLASK_SECRET_KEY != DEFAULT_SECRET_KEY else '(default)'}")
    print(f"  REQUEST_TIMEOUT: {REQUEST_TIMEOUT}s")
    print(f"  WEB_PORT: {WEB_PORT}")
    print(f"  SAVED_LIST_NAME: {SAVED_LIST_NAME}")
