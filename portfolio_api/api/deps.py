from typing import Optional

from fastapi import Header

from portfolio_api.core.security import ADMIN_HEADER, ensure_admin
from portfolio_api.db import get_session

__all__ = ["get_session", "require_admin"]


def require_admin(
    admin_password: Optional[str] = Header(default=None, alias=ADMIN_HEADER),
) -> None:
    """
    Gate for admin endpoints.
    Use as a router or route dependency: dependencies=[Depends(require_admin)]
    """
    ensure_admin(admin_password)
