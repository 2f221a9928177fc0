"""
Response envelope shared by every endpoint:

    {"success": true, "message": "...", "data": ..., "pagination": {...}}

Errors use the same envelope with success false (see core.errors).
"""

from typing import Any, Dict, Optional

from portfolio_api.services.pagination import Page


def envelope(
    data: Any = None,
    message: Optional[str] = None,
    page: Optional[Page] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if page is not None:
        body["pagination"] = page.to_dict()
    return body
