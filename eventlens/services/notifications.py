"""Notification dispatch and management.

Creating the notification record is the durable part and must succeed;
delivering it by email is best-effort and attempted exactly once.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlmodel import Session, select

from eventlens.core.database import commit
from eventlens.core.errors import NotFound, PersistenceError, Unauthorized
from eventlens.models import Notification, NotificationType, User
from eventlens.services.email import NotificationChannel

logger = logging.getLogger(__name__)


@dataclass
class NotificationSpec:
    """What to notify about and whom."""

    type: NotificationType
    title: str
    message: str
    recipient_id: UUID | None = None
    email: str | None = None
    related_event_id: UUID | None = None
    related_photo_id: UUID | None = None


class NotificationDispatcher:
    """Creates notification records and hands them to a delivery channel."""

    def __init__(self, channel: NotificationChannel) -> None:
        self.channel = channel

    def notify(self, session: Session, spec: NotificationSpec) -> Notification:
        """
        Record a notification, then attempt delivery once.

        Raises PersistenceError if the record cannot be written. Delivery
        failures are logged and leave ``is_sent`` False.
        """
        notification = Notification(
            recipient_id=spec.recipient_id,
            email=spec.email,
            type=spec.type,
            title=spec.title,
            message=spec.message,
            related_event_id=spec.related_event_id,
            related_photo_id=spec.related_photo_id,
        )
        session.add(notification)
        commit(session)

        address = self._address_for(session, notification)
        if address:
            self._deliver(session, notification, address)
        return notification

    def _address_for(self, session: Session, notification: Notification) -> str | None:
        if notification.email:
            return notification.email
        if notification.recipient_id is None:
            return None
        recipient = session.get(User, notification.recipient_id)
        return recipient.email if recipient else None

    def _deliver(self, session: Session, notification: Notification, address: str) -> None:
        try:
            self.channel.deliver(address, notification.title, notification.message)
        except Exception as e:
            logger.warning(f"Delivery of notification {notification.id} failed: {e}")
            return

        notification.is_sent = True
        session.add(notification)
        try:
            commit(session)
        except PersistenceError:
            logger.error(f"Notification {notification.id} delivered but not marked sent")


def list_notifications(session: Session, user: User) -> list[Notification]:
    """Return a user's notifications, newest first."""
    statement = (
        select(Notification)
        .where(Notification.recipient_id == user.id)
        .order_by(Notification.created_at.desc())
    )
    return list(session.exec(statement).all())


def _owned_notification(session: Session, user: User, notification_id: UUID, action: str) -> Notification:
    notification = session.get(Notification, notification_id)
    if notification is None:
        raise NotFound(f"Notification not found with id of {notification_id}")
    if notification.recipient_id != user.id:
        raise Unauthorized(f"Not authorized to {action} this notification")
    return notification


def mark_as_read(session: Session, user: User, notification_id: UUID) -> Notification:
    notification = _owned_notification(session, user, notification_id, "update")
    notification.is_read = True
    session.add(notification)
    commit(session)
    session.refresh(notification)
    return notification


def delete_notification(session: Session, user: User, notification_id: UUID) -> None:
    notification = _owned_notification(session, user, notification_id, "delete")
    session.delete(notification)
    commit(session)
