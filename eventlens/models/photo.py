"""Photo and detected face models.

A Photo is created synchronously when a file is uploaded and is filled in
exactly once by the ingestion pipeline, which appends the faces it matched
and flips ``is_processed``.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from eventlens.models.event import Event


class Photo(SQLModel, table=True):
    """An uploaded event photo.

    Attributes:
        id: Unique identifier (UUID).
        event_id: Foreign key to the owning Event.
        uploader_id: User who uploaded the photo.
        filename: Stored file name.
        original_name: File name as uploaded by the client.
        storage_path: Storage locator of the image bytes.
        size: Size of the image in bytes.
        mimetype: Content type reported at upload.
        is_processed: False until the ingestion pipeline finishes. Stays
            False if face detection or search failed.
        uploaded_at: When the photo was uploaded.
        detected_faces: Matched faces, in discovery order.
        event: Reference to the owning Event object.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    uploader_id: UUID = Field(foreign_key="user.id", index=True)
    filename: str
    original_name: str
    storage_path: str
    size: int
    mimetype: str
    is_processed: bool = Field(default=False, index=True)
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    detected_faces: list["DetectedFace"] = Relationship(
        back_populates="photo",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "DetectedFace.position",
        },
    )
    event: Optional["Event"] = Relationship(back_populates="photos")


class DetectedFace(SQLModel, table=True):
    """A registry match recorded on a photo.

    The bounding box is relative to the image size (0.0-1.0) and the
    confidence is the registry's similarity score (0-100).

    Attributes:
        id: Unique identifier (UUID).
        photo_id: Foreign key to the parent Photo.
        position: Discovery order within the photo.
        face_id: Registry signature id that matched.
        user_id: User the signature belongs to.
        box_width: Bounding box width.
        box_height: Bounding box height.
        box_left: Bounding box left offset.
        box_top: Bounding box top offset.
        confidence: Match similarity.
        photo: Reference to the parent Photo object.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    photo_id: UUID = Field(foreign_key="photo.id", index=True)
    position: int = 0
    face_id: str
    user_id: UUID | None = Field(default=None, foreign_key="user.id", index=True)
    box_width: float = 0.0
    box_height: float = 0.0
    box_left: float = 0.0
    box_top: float = 0.0
    confidence: float

    # Relationship
    photo: Optional[Photo] = Relationship(back_populates="detected_faces")
