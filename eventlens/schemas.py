"""Request and response bodies for the JSON API."""

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel

from eventlens.models import InviteStatus, NotificationType


class UserCreate(SQLModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)


class UserRead(SQLModel):
    id: UUID
    name: str
    email: str
    face_id: str | None


class InviteeRead(SQLModel):
    id: UUID
    user_id: UUID | None
    email: str | None
    invite_code: str | None
    status: InviteStatus
    invited_at: datetime


class EventCreate(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    date: datetime
    location: str | None = Field(default=None, max_length=200)
    is_private: bool = True


class EventUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    date: datetime | None = None
    location: str | None = Field(default=None, max_length=200)
    is_private: bool | None = None


class EventRead(SQLModel):
    id: UUID
    name: str
    description: str | None
    date: datetime
    location: str | None
    creator_id: UUID
    is_private: bool
    created_at: datetime
    invitees: list[InviteeRead] = []


class InviteeIn(SQLModel):
    user_id: UUID | None = None
    email: str | None = None


class AddInviteesRequest(SQLModel):
    invitees: list[InviteeIn]


class SkippedInviteeRead(SQLModel):
    user_id: UUID | None
    email: str | None
    reason: str


class AddInviteesResponse(SQLModel):
    invitees: list[InviteeRead]
    added: list[InviteeRead]
    skipped: list[SkippedInviteeRead]


class InviteResponseRequest(SQLModel):
    status: str
    invite_code: str | None = None


class SendInvitationsRequest(SQLModel):
    invitee_ids: list[UUID]


class InvitationOutcomeRead(SQLModel):
    id: UUID
    email: str | None
    reason: str | None = None


class SendInvitationsResponse(SQLModel):
    sent: list[InvitationOutcomeRead]
    failed: list[InvitationOutcomeRead]


class EventSummary(SQLModel):
    id: UUID
    name: str
    date: datetime
    location: str | None
    description: str | None
    creator: str | None


class InvitationSummary(SQLModel):
    id: UUID
    status: InviteStatus
    invite_code: str


class InvitationVerificationRead(SQLModel):
    event: EventSummary
    invitation: InvitationSummary


class DetectedFaceRead(SQLModel):
    face_id: str
    user_id: UUID | None
    box_width: float
    box_height: float
    box_left: float
    box_top: float
    confidence: float


class PhotoRead(SQLModel):
    id: UUID
    event_id: UUID
    uploader_id: UUID
    filename: str
    original_name: str
    size: int
    mimetype: str
    is_processed: bool
    uploaded_at: datetime
    detected_faces: list[DetectedFaceRead] = []


class NotificationRead(SQLModel):
    id: UUID
    recipient_id: UUID | None
    type: NotificationType
    title: str
    message: str
    related_event_id: UUID | None
    related_photo_id: UUID | None
    is_read: bool
    is_sent: bool
    created_at: datetime
