"""Notification model for user-facing notices.

Notifications are durable records first and emails second: a record is
always written, delivery is attempted once and only flips ``is_sent`` when
it succeeds.
"""

from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class NotificationType(StrEnum):
    event_invite = "event_invite"
    photo_tagged = "photo_tagged"
    event_reminder = "event_reminder"
    system = "system"


class Notification(SQLModel, table=True):
    """A notification addressed to a user or a bare email.

    ``related_event_id`` and ``related_photo_id`` are plain references
    rather than foreign keys so that deleting a photo or event keeps the
    notification history.

    Attributes:
        id: Unique identifier (UUID).
        recipient_id: Recipient user, if known.
        email: Explicit delivery address; falls back to the recipient's
            email when unset.
        type: Notification kind.
        title: Short title, also used as the email subject.
        message: Body text.
        related_event_id: Event this notification is about.
        related_photo_id: Photo this notification is about.
        is_read: Set by the recipient.
        is_sent: Set by the dispatcher after a successful delivery.
        created_at: When the notification was created.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    recipient_id: UUID | None = Field(default=None, foreign_key="user.id", index=True)
    email: str | None = None
    type: NotificationType
    title: str
    message: str
    related_event_id: UUID | None = None
    related_photo_id: UUID | None = None
    is_read: bool = Field(default=False)
    is_sent: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
