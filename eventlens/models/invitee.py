"""Invitee model for tracking event invitations.

Each row is one invitation: a person (known user or bare email) with an
invite code that works as a bearer credential for viewing and responding
to the invitation without logging in.
"""

import secrets
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from eventlens.models.event import Event


class InviteStatus(StrEnum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


def generate_invite_code() -> str:
    """Generate an opaque invite code carrying 128 random bits."""
    return secrets.token_urlsafe(16)


class Invitee(SQLModel, table=True):
    """A person invited to an event.

    An invitee is either bound to a known user or to a bare email. When
    both are set the user identity is the one used for deduplication. The
    invite code is generated once when the row is created and never
    reissued; the user binding is set at most once.

    Attributes:
        id: Unique identifier (UUID).
        event_id: Foreign key to the parent Event.
        user_id: Bound user, or None for email-only invitations that no
            authenticated user has responded to yet.
        email: Email address the invitation is delivered to.
        invite_code: Opaque bearer token for this invitation.
        status: One of "pending", "accepted" or "declined".
        invited_at: When the invitee was added.
        event: Reference to the parent Event object.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    user_id: UUID | None = Field(default=None, foreign_key="user.id", index=True)
    email: str | None = Field(default=None, index=True)
    invite_code: str = Field(default_factory=generate_invite_code, unique=True, index=True)
    status: InviteStatus = Field(default=InviteStatus.pending)
    invited_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationship
    event: Optional["Event"] = Relationship(back_populates="invitees")
