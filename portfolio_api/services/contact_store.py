"""
Contact Store

Persistence and lifecycle of contact-form submissions. One implementation
serves every deployment target; the database behind the session (SQLite
or PostgreSQL) is chosen by DATABASE_URL.
"""

from typing import Any, Dict, Mapping, Optional, Union

from sqlalchemy import func
from sqlmodel import Session, select, desc

from portfolio_api.core.errors import NotFound
from portfolio_api.core.logging_config import get_logger
from portfolio_api.core.timeutils import start_of_local_day, utcnow
from portfolio_api.core.validation import validate_payload
from portfolio_api.models.contact import Contact, ContactStatus
from portfolio_api.schemas import ContactCreate, ContactStatusUpdate
from portfolio_api.services.pagination import Page, paginate

logger = get_logger(__name__)

# Origin metadata kept out of list views
PRIVATE_FIELDS = {"ip_address", "user_agent"}


def contact_to_dict(contact: Contact, include_private: bool = True) -> Dict[str, Any]:
    return {
        name: getattr(contact, name)
        for name in Contact.model_fields
        if include_private or name not in PRIVATE_FIELDS
    }


class ContactStore:
    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        fields: Union[ContactCreate, Mapping[str, Any]],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Contact:
        """Validate and persist a submission with status "new"."""
        data = validate_payload(ContactCreate, fields)

        contact = Contact(
            name=data.name,
            email=data.email,
            subject=data.subject,
            message=data.message,
            status=ContactStatus.NEW.value,
            ip_address=ip_address[:64] if ip_address else None,
            user_agent=user_agent[:500] if user_agent else None,
            created_at=utcnow(),
        )
        self.session.add(contact)
        self.session.commit()
        self.session.refresh(contact)

        logger.info("Contact created", contact_id=contact.id, email=contact.email)
        return contact

    def list(
        self,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[Contact]:
        """Newest first, optionally filtered by status."""
        statement = select(Contact)
        if status:
            statement = statement.where(Contact.status == status)
        statement = statement.order_by(desc(Contact.created_at), desc(Contact.id))
        return paginate(self.session, statement, page, limit)

    def get(self, contact_id: int) -> Contact:
        contact = self.session.get(Contact, contact_id)
        if contact is None:
            raise NotFound("Contact not found")
        return contact

    def update_status(self, contact_id: int, status: Any) -> Contact:
        data = validate_payload(ContactStatusUpdate, {"status": status})
        contact = self.get(contact_id)

        previous = contact.status
        contact.status = data.status
        self.session.add(contact)
        self.session.commit()
        self.session.refresh(contact)

        logger.info("Contact status updated", contact_id=contact.id, previous=previous, status=contact.status)
        return contact

    def delete(self, contact_id: int) -> None:
        contact = self.get(contact_id)
        self.session.delete(contact)
        self.session.commit()
        logger.info("Contact deleted", contact_id=contact_id)

    def stats(self) -> Dict[str, int]:
        total = self.session.exec(select(func.count(Contact.id))).one()
        new_count = self.session.exec(
            select(func.count(Contact.id)).where(Contact.status == ContactStatus.NEW.value)
        ).one()
        today = self.session.exec(
            select(func.count(Contact.id)).where(Contact.created_at >= start_of_local_day())
        ).one()
        unique_senders = self.session.exec(select(func.count(func.distinct(Contact.email)))).one()

        return {
            "total": total,
            "new": new_count,
            "today": today,
            "unique_senders": unique_senders,
        }
