"""Event model for photo-sharing events.

This module defines the Event model: an occasion created by an organizer,
with an invitee list and the photos uploaded to it. Events are the central
entity that invitations and photo tagging hang off.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from eventlens.models.invitee import Invitee
    from eventlens.models.photo import Photo


class Event(SQLModel, table=True):
    """An event organized by a user.

    The creator is fixed at creation time and is the only user allowed to
    manage the invitee list. Invitees and photos are owned by the event and
    removed with it.

    Attributes:
        id: Unique identifier (UUID).
        name: Event name.
        description: Free-text description.
        date: When the event takes place.
        location: Where the event takes place.
        creator_id: User who created the event. Immutable.
        is_private: If True, only the creator and bound invitees can see
            the event and its photos.
        cover_image: Optional storage locator of a cover image.
        created_at: When the event was created.
        invitees: People invited to this event.
        photos: Photos uploaded to this event.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100)
    description: str | None = Field(default=None, max_length=500)
    date: datetime
    location: str | None = Field(default=None, max_length=200)
    creator_id: UUID = Field(foreign_key="user.id", index=True)
    is_private: bool = Field(default=True)
    cover_image: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    invitees: list["Invitee"] = Relationship(
        back_populates="event",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    photos: list["Photo"] = Relationship(
        back_populates="event",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    def invitee_for_user(self, user_id: UUID) -> "Invitee | None":
        """Return the invitee entry bound to ``user_id``, if any."""
        return next((inv for inv in self.invitees if inv.user_id == user_id), None)

    def can_view(self, user_id: UUID | None) -> bool:
        """Whether ``user_id`` may see this event and its photos."""
        if not self.is_private:
            return True
        if user_id is None:
            return False
        return self.creator_id == user_id or self.invitee_for_user(user_id) is not None
