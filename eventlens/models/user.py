"""User model for application identities.

Users are the identities that create events, get invited, upload photos
and get tagged in them. A user's registered face signature links the face
registry back to this table.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """An application user.

    Attributes:
        id: Unique identifier (UUID). Also used as the external image id
            when registering the user's face with the registry.
        name: Display name.
        email: Email address, unique across users.
        face_id: Signature id assigned by the face registry for the user's
            profile image, or None if no face has been registered.
        created_at: When the user was created.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    face_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
