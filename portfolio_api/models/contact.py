"""
Contact Model

Messages submitted through the public contact form. Only the status moves
after creation: new -> read -> replied, or archived at any point.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel, Column
from sqlalchemy import DateTime, Text, Index

from portfolio_api.core.timeutils import utcnow


class ContactStatus(str, Enum):
    NEW = "new"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"


class Contact(SQLModel, table=True):
    """A single contact-form submission."""

    __tablename__ = "contact"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(max_length=254, index=True)
    subject: Optional[str] = Field(default=None, max_length=200)
    message: str = Field(sa_column=Column(Text, nullable=False))
    status: str = Field(default=ContactStatus.NEW.value, max_length=20)

    # Origin metadata (not exposed in list views)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))

    __table_args__ = (
        Index("ix_contact_status_created", "status", "created_at"),
    )


__all__ = ["Contact", "ContactStatus"]
