from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query, Request, status
from sqlmodel import Session

from portfolio_api.api.deps import get_session, require_admin
from portfolio_api.api.responses import envelope
from portfolio_api.core.rate_limit import contact_rate_limit, get_client_ip
from portfolio_api.models.contact import ContactStatus
from portfolio_api.services.contact_store import ContactStore, contact_to_dict
from portfolio_api.services.email import send_contact_notification

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(contact_rate_limit)])
def create_contact(
    request: Request,
    background_tasks: BackgroundTasks,
    payload: Any = Body(default=None),
    session: Session = Depends(get_session),
) -> Any:
    """
    Public contact form submission.
    The owner notification goes out after the response; its failure never affects the 201.
    """
    contact = ContactStore(session).create(
        payload,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    background_tasks.add_task(send_contact_notification, contact)

    return envelope(
        message="Thank you for your message! I will get back to you soon.",
        data={"id": contact.id, "name": contact.name, "created_at": contact.created_at},
    )


@router.get("", dependencies=[Depends(require_admin)])
def list_contacts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status: Optional[ContactStatus] = None,
    session: Session = Depends(get_session),
) -> Any:
    result = ContactStore(session).list(
        status=status.value if status else None,
        page=page,
        limit=limit,
    )
    return envelope(
        data=[contact_to_dict(c, include_private=False) for c in result.items],
        page=result,
    )


@router.get("/stats", dependencies=[Depends(require_admin)])
def contact_stats(session: Session = Depends(get_session)) -> Any:
    return envelope(data=ContactStore(session).stats())


@router.get("/{contact_id}", dependencies=[Depends(require_admin)])
def get_contact(contact_id: int, session: Session = Depends(get_session)) -> Any:
    """Single submission with origin metadata. Reading does not change its status."""
    contact = ContactStore(session).get(contact_id)
    return envelope(data=contact_to_dict(contact))


@router.patch("/{contact_id}", dependencies=[Depends(require_admin)])
def update_contact(
    contact_id: int,
    payload: Any = Body(default=None),
    session: Session = Depends(get_session),
) -> Any:
    new_status = payload.get("status") if isinstance(payload, dict) else None
    contact = ContactStore(session).update_status(contact_id, new_status)
    return envelope(message="Contact updated successfully", data=contact_to_dict(contact))


@router.delete("/{contact_id}", dependencies=[Depends(require_admin)])
def delete_contact(contact_id: int, session: Session = Depends(get_session)) -> Any:
    ContactStore(session).delete(contact_id)
    return envelope(message="Contact deleted successfully")
