"""
Configuration module for the ownership certificate service.

Centralizes all configuration with environment variable support and
validation. The certificate secret is read once here and injected into
the issuer and verifier; core functions never read the environment.
"""

import os
from datetime import timedelta
from typing import Dict, Optional

from ownercert import ConfigurationError, Secret

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("OWNERCERT_ENV", "dev")  # dev|stage|prod

# Secret (required outside dev)
CERTIFICATE_SECRET = os.getenv("CERTIFICATE_SECRET", "")
DEV_SECRET = os.getenv("OWNERCERT_DEV_SECRET", "dev-only-secret")

# Verification links printed on documents
BASE_URL = os.getenv("BASE_URL", "http://localhost:8000")

# Validity window (0 disables the corresponding check)
CERTIFICATE_MAX_AGE_DAYS = int(os.getenv("CERTIFICATE_MAX_AGE_DAYS", "365"))
CERTIFICATE_CLOCK_SKEW_SECONDS = int(os.getenv("CERTIFICATE_CLOCK_SKEW_SECONDS", "3600"))

# Document branding
PLATFORM_NAME = os.getenv("PLATFORM_NAME", "SMARTY LOGOS(TM) AI LOGO GENERATOR PLATFORM")

# Logging
LOG_LEVEL = os.getenv("OWNERCERT_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("OWNERCERT_LOG_JSON", "true").lower() in ("1", "true", "yes")
LOG_FILE = os.getenv("OWNERCERT_LOG_FILE") or None


# ============================================================
# Loaders
# ============================================================

def load_secret() -> Secret:
    """
    Load the certificate secret.

    Raises:
        ConfigurationError: if CERTIFICATE_SECRET is unset outside dev
    """
    if CERTIFICATE_SECRET:
        return Secret(CERTIFICATE_SECRET)
    if ENV == "dev":
        return Secret(DEV_SECRET)
    raise ConfigurationError(f"CERTIFICATE_SECRET must be set when OWNERCERT_ENV={ENV}")


def max_age() -> Optional[timedelta]:
    if CERTIFICATE_MAX_AGE_DAYS <= 0:
        return None
    return timedelta(days=CERTIFICATE_MAX_AGE_DAYS)


def clock_skew() -> Optional[timedelta]:
    if CERTIFICATE_CLOCK_SKEW_SECONDS <= 0:
        return None
    return timedelta(seconds=CERTIFICATE_CLOCK_SKEW_SECONDS)


# ============================================================
# Validation
# ============================================================

def validate_config() -> Dict[str, bool]:
    """
    Report which settings are present and usable.
    Returns dict of setting -> ok.
    """
    return {
        "certificate_secret": bool(CERTIFICATE_SECRET) or ENV == "dev",
        "base_url": BASE_URL.startswith(("http://", "https://")),
        "max_age": CERTIFICATE_MAX_AGE_DAYS >= 0,
    }


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("OWNERCERT_DEBUG", "").lower() in ("1", "true", "yes")
