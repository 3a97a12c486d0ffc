"""Photo upload, listing and deletion."""

import logging
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

from sqlmodel import Session, select

from eventlens.core.database import commit
from eventlens.core.errors import (
    ExternalServiceError,
    InvalidInput,
    NotFound,
    PersistenceError,
    Unauthorized,
)
from eventlens.models import DetectedFace, Event, Photo, User
from eventlens.services.storage import LocalPhotoStorage

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    data: bytes


def upload_photos(
    session: Session,
    event: Event,
    uploader: User,
    files: list[UploadedFile],
    storage: LocalPhotoStorage,
) -> list[Photo]:
    """
    Store uploaded files and create their Photo rows.

    Only the event creator and invitees bound to a user can upload. The
    batch is all or nothing: every file is stored before the rows are
    written in one commit, and on any failure the files stored so far are
    released. The caller is responsible for scheduling ingestion of the
    returned photos.
    """
    if not files:
        raise InvalidInput("Please upload at least one photo")

    if event.creator_id != uploader.id and event.invitee_for_user(uploader.id) is None:
        raise Unauthorized("Not authorized to upload photos to this event")

    photos = []
    try:
        for file in files:
            path = storage.save(str(event.id), file.filename, file.data)
            photos.append(
                Photo(
                    event_id=event.id,
                    uploader_id=uploader.id,
                    filename=Path(path).name,
                    original_name=file.filename,
                    storage_path=path,
                    size=len(file.data),
                    mimetype=file.content_type,
                )
            )
        session.add_all(photos)
        commit(session)
    except (ExternalServiceError, PersistenceError):
        for photo in photos:
            storage.delete(photo.storage_path)
        logger.error(f"Upload to event {event.id} failed, released {len(photos)} stored files")
        raise

    for photo in photos:
        session.refresh(photo)
    logger.info(f"Uploaded {len(photos)} photos to event {event.id}")
    return photos


def list_event_photos(session: Session, event: Event, viewer: User) -> list[Photo]:
    if not event.can_view(viewer.id):
        raise Unauthorized("Not authorized to access photos from this event")

    statement = (
        select(Photo)
        .where(Photo.event_id == event.id)
        .order_by(Photo.uploaded_at.desc())
    )
    return list(session.exec(statement).all())


def list_user_photos(session: Session, user: User) -> list[Photo]:
    """Return photos in which ``user`` was recognized, newest first."""
    tagged = select(DetectedFace.photo_id).where(DetectedFace.user_id == user.id)
    statement = (
        select(Photo)
        .where(Photo.id.in_(tagged))
        .order_by(Photo.uploaded_at.desc())
    )
    return list(session.exec(statement).all())


def delete_photo(
    session: Session,
    photo_id: UUID,
    requester: User,
    storage: LocalPhotoStorage,
) -> None:
    """Delete a photo and release its stored file.

    Allowed for the uploader and the creator of the photo's event.
    """
    photo = session.get(Photo, photo_id)
    if photo is None:
        raise NotFound(f"Photo not found with id of {photo_id}")

    event = session.get(Event, photo.event_id)
    if event is None:
        raise NotFound("Associated event not found")

    if photo.uploader_id != requester.id and event.creator_id != requester.id:
        raise Unauthorized("Not authorized to delete this photo")

    path = photo.storage_path
    session.delete(photo)
    commit(session)
    storage.delete(path)
