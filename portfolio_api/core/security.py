"""
Admin gate: a single shared secret compared against the X-Admin-Password header.

There is no user or session model. An unset ADMIN_PASSWORD disables every
admin endpoint instead of letting anything through.
"""

import hmac
from typing import Optional

from portfolio_api.core.config import settings
from portfolio_api.core.errors import Unauthorized
from portfolio_api.core.logging_config import get_logger

logger = get_logger(__name__)

ADMIN_HEADER = "X-Admin-Password"


def admin_enabled() -> bool:
    return bool(settings.ADMIN_PASSWORD)


def verify_admin_secret(candidate: Optional[str]) -> bool:
    """Constant-time comparison against the configured secret. False when admin is disabled."""
    secret = settings.ADMIN_PASSWORD
    if not secret or candidate is None:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), secret.encode("utf-8"))


def ensure_admin(candidate: Optional[str]) -> None:
    """Raise Unauthorized unless candidate matches the admin secret."""
    if not admin_enabled():
        logger.warning("Admin request rejected: ADMIN_PASSWORD not configured")
        raise Unauthorized("Admin access is disabled")
    if not verify_admin_secret(candidate):
        raise Unauthorized("Unauthorized. Invalid admin password.")
