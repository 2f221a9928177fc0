"""
Tests for the contact store.

Tests cover:
- Creating submissions
- Listing with pagination and status filter
- Reading without side effects
- Status updates and their error order
- Deletion
- Statistics
"""

from datetime import timedelta, timezone

import pytest

from portfolio_api.core.errors import NotFound, ValidationFailed
from portfolio_api.core.timeutils import utcnow
from portfolio_api.models.contact import Contact
from portfolio_api.services.contact_store import PRIVATE_FIELDS, contact_to_dict


class TestCreateContact:
    """Tests for ContactStore.create."""

    def test_create_sets_new_status(self, contact_store, contact_data):
        contact = contact_store.create(contact_data(name="  Ada Lovelace "))

        assert contact.id is not None
        assert contact.status == "new"
        assert contact.name == "Ada Lovelace"
        assert contact.email == "ada@example.com"
        assert contact.created_at is not None

    def test_create_records_origin(self, contact_store, contact_data):
        contact = contact_store.create(contact_data(), ip_address="203.0.113.9", user_agent="x" * 600)

        assert contact.ip_address == "203.0.113.9"
        assert len(contact.user_agent) == 500

    def test_create_truncates_long_ip(self, contact_store, contact_data):
        contact = contact_store.create(contact_data(), ip_address="2001:db8::1, " * 10)
        assert len(contact.ip_address) == 64

    def test_created_at_is_utc(self, contact_store, contact_data):
        contact = contact_store.create(contact_data())

        assert Contact.__table__.c.created_at.type.timezone is True
        # SQLite hands timestamps back without tzinfo; the value is still UTC
        created = contact.created_at.replace(tzinfo=timezone.utc)
        assert abs(utcnow() - created) < timedelta(minutes=1)

    def test_create_invalid_persists_nothing(self, contact_store, contact_data):
        with pytest.raises(ValidationFailed) as exc_info:
            contact_store.create(contact_data(message="short"))

        assert exc_info.value.errors[0].field == "message"
        assert contact_store.list().total == 0


class TestListContacts:
    """Tests for ContactStore.list."""

    def test_newest_first(self, contact_store, sample_contacts):
        page = contact_store.list()
        assert [c.id for c in page.items] == [c.id for c in reversed(sample_contacts)]

    def test_pagination(self, contact_store, sample_contacts):
        page = contact_store.list(page=2, limit=2)

        assert page.total == 3
        assert page.pages == 2
        assert len(page.items) == 1
        assert page.to_dict() == {"current": 2, "pages": 2, "total": 3, "limit": 2}

    def test_filter_by_status(self, contact_store, sample_contacts):
        contact_store.update_status(sample_contacts[0].id, "archived")

        page = contact_store.list(status="archived")
        assert [c.id for c in page.items] == [sample_contacts[0].id]

    def test_list_output_hides_origin(self, sample_contacts):
        data = contact_to_dict(sample_contacts[0], include_private=False)
        assert not PRIVATE_FIELDS & set(data)
        assert "ip_address" in contact_to_dict(sample_contacts[0])


class TestGetContact:
    """Tests for ContactStore.get."""

    def test_get_does_not_mark_read(self, contact_store, sample_contacts):
        contact = contact_store.get(sample_contacts[0].id)
        assert contact.status == "new"
        assert contact_store.get(sample_contacts[0].id).status == "new"

    def test_get_missing(self, contact_store):
        with pytest.raises(NotFound) as exc_info:
            contact_store.get(999)
        assert exc_info.value.message == "Contact not found"


class TestUpdateStatus:
    """Tests for ContactStore.update_status."""

    def test_update_status(self, contact_store, sample_contacts):
        contact = contact_store.update_status(sample_contacts[1].id, "replied")
        assert contact.status == "replied"

    def test_invalid_status_is_validation_error(self, contact_store, sample_contacts):
        with pytest.raises(ValidationFailed):
            contact_store.update_status(sample_contacts[0].id, "bogus")

    def test_invalid_status_checked_before_existence(self, contact_store):
        with pytest.raises(ValidationFailed):
            contact_store.update_status(999, "bogus")

    def test_valid_status_missing_contact(self, contact_store):
        with pytest.raises(NotFound):
            contact_store.update_status(999, "read")


class TestDeleteContact:
    """Tests for ContactStore.delete."""

    def test_delete(self, contact_store, sample_contacts):
        contact_store.delete(sample_contacts[0].id)

        with pytest.raises(NotFound):
            contact_store.get(sample_contacts[0].id)
        assert contact_store.list().total == 2

    def test_delete_missing(self, contact_store):
        with pytest.raises(NotFound):
            contact_store.delete(999)


class TestContactStats:
    """Tests for ContactStore.stats."""

    def test_stats(self, contact_store, sample_contacts):
        contact_store.update_status(sample_contacts[1].id, "read")

        assert contact_store.stats() == {
            "total": 3,
            "new": 2,
            "today": 3,
            "unique_senders": 2,
        }

    def test_today_excludes_older_submissions(self, contact_store, test_session, sample_contacts):
        old = sample_contacts[0]
        old.created_at = utcnow() - timedelta(days=3)
        test_session.add(old)
        test_session.commit()

        assert contact_store.stats()["today"] == 2

    def test_stats_empty(self, contact_store):
        assert contact_store.stats() == {"total": 0, "new": 0, "today": 0, "unique_senders": 0}
