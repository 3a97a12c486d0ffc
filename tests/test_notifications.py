"""Tests for notification dispatch and management."""

from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from eventlens.core.errors import NotFound, PersistenceError, Unauthorized
from eventlens.models import Notification, NotificationType, User
from eventlens.services.notifications import (
    NotificationDispatcher,
    NotificationSpec,
    delete_notification,
    list_notifications,
    mark_as_read,
)


def system_notice(recipient: User | None = None, email: str | None = None) -> NotificationSpec:
    return NotificationSpec(
        type=NotificationType.system,
        title="Welcome",
        message="Thanks for joining",
        recipient_id=recipient.id if recipient else None,
        email=email,
    )


class TestNotify:
    """Tests for NotificationDispatcher.notify."""

    def test_delivers_to_recipient_email(
        self, session: Session, dispatcher: NotificationDispatcher, channel, guest: User
    ):
        notification = dispatcher.notify(session, system_notice(guest))

        assert notification.is_sent is True
        assert channel.sent == [(guest.email, "Welcome", "Thanks for joining")]

    def test_explicit_email_wins(
        self, session: Session, dispatcher: NotificationDispatcher, channel, guest: User
    ):
        dispatcher.notify(session, system_notice(guest, email="other@example.com"))
        assert channel.sent[0][0] == "other@example.com"

    def test_no_address_no_delivery(
        self, session: Session, dispatcher: NotificationDispatcher, channel
    ):
        notification = dispatcher.notify(session, system_notice())

        assert notification.is_sent is False
        assert channel.sent == []
        assert session.get(Notification, notification.id) is not None

    def test_delivery_failure_is_swallowed(
        self, session: Session, dispatcher: NotificationDispatcher, channel, guest: User
    ):
        channel.fail = True

        notification = dispatcher.notify(session, system_notice(guest))

        stored = session.get(Notification, notification.id)
        assert stored is not None
        assert stored.is_sent is False

    def test_record_failure_propagates(
        self, session: Session, dispatcher: NotificationDispatcher, channel, guest: User, monkeypatch
    ):
        def failing_commit():
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(session, "commit", failing_commit)

        with pytest.raises(PersistenceError):
            dispatcher.notify(session, system_notice(guest))
        assert channel.sent == []


class TestNotificationInbox:
    """Tests for listing, reading and deleting notifications."""

    @pytest.fixture(name="notification")
    def notification_fixture(self, session: Session, dispatcher, guest: User) -> Notification:
        return dispatcher.notify(session, system_notice(guest))

    def test_list_only_own(
        self, session: Session, dispatcher, notification: Notification, guest: User, outsider: User
    ):
        dispatcher.notify(session, system_notice(outsider))

        assert [n.id for n in list_notifications(session, guest)] == [notification.id]

    def test_mark_as_read(self, session: Session, notification: Notification, guest: User):
        updated = mark_as_read(session, guest, notification.id)
        assert updated.is_read is True

    def test_mark_as_read_other_user(
        self, session: Session, notification: Notification, outsider: User
    ):
        with pytest.raises(Unauthorized):
            mark_as_read(session, outsider, notification.id)

    def test_mark_as_read_missing(self, session: Session, guest: User):
        with pytest.raises(NotFound):
            mark_as_read(session, guest, uuid4())

    def test_delete(self, session: Session, notification: Notification, guest: User):
        delete_notification(session, guest, notification.id)
        assert session.exec(select(Notification)).all() == []
