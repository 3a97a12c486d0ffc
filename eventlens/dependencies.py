"""Request dependencies: caller identity and external collaborators.

Authentication is handled upstream; by the time a request reaches this
service the caller's user id travels in the ``X-User-Id`` header.
"""
from functools import lru_cache
from uuid import UUID

from fastapi import Depends, Header
from sqlmodel import Session

from eventlens.core.config import settings
from eventlens.core.database import get_session
from eventlens.core.errors import Unauthorized
from eventlens.models import User
from eventlens.services.email import SendGridEmailChannel
from eventlens.services.face_registry import RekognitionFaceRegistry
from eventlens.services.notifications import NotificationDispatcher
from eventlens.services.storage import LocalPhotoStorage


@lru_cache(maxsize=1)
def get_face_registry() -> RekognitionFaceRegistry:
    return RekognitionFaceRegistry(
        collection_id=settings.rekognition_collection_id,
        threshold=settings.face_match_threshold,
        max_results=settings.face_match_max_results,
    )


@lru_cache(maxsize=1)
def get_email_channel() -> SendGridEmailChannel:
    return SendGridEmailChannel(settings.sendgrid_api_key, settings.email_from)


@lru_cache(maxsize=1)
def get_storage() -> LocalPhotoStorage:
    return LocalPhotoStorage(settings.upload_dir)


def get_dispatcher(channel=Depends(get_email_channel)) -> NotificationDispatcher:
    return NotificationDispatcher(channel)


def get_optional_user(
    x_user_id: UUID | None = Header(default=None),
    session: Session = Depends(get_session),
) -> User | None:
    """Resolve the caller, or None for anonymous requests."""
    if x_user_id is None:
        return None
    user = session.get(User, x_user_id)
    if user is None:
        raise Unauthorized("User no longer exists")
    return user


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    """Resolve the caller, rejecting anonymous requests."""
    if user is None:
        raise Unauthorized("Not authorized to access this route")
    return user
