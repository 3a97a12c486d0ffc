"""Photo routes for uploading, listing and deleting event photos."""
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel import Session

from eventlens.core.database import get_session
from eventlens.core.scheduler import schedule_ingest
from eventlens.dependencies import get_current_user, get_storage
from eventlens.models import User
from eventlens.routes.events import get_event_or_404
from eventlens.schemas import PhotoRead
from eventlens.services.photos import (
    UploadedFile,
    delete_photo,
    list_event_photos,
    list_user_photos,
    upload_photos,
)
from eventlens.services.storage import LocalPhotoStorage

router = APIRouter(prefix="/photos", tags=["photos"])


@router.post("/upload/{event_id}", response_model=list[PhotoRead], status_code=201)
async def upload(
    event_id: UUID,
    files: list[UploadFile] = File(...),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    storage: LocalPhotoStorage = Depends(get_storage),
):
    """
    Upload photos to an event.

    Responds as soon as the files are stored. Face detection runs in the
    background; ``is_processed`` on each photo flips once it is done.
    """
    event = get_event_or_404(session, event_id)
    uploaded = [
        UploadedFile(
            filename=file.filename or "photo.jpg",
            content_type=file.content_type or "application/octet-stream",
            data=await file.read(),
        )
        for file in files
    ]
    photos = upload_photos(session, event, user, uploaded, storage)
    for photo in photos:
        schedule_ingest(photo.id)
    return photos


@router.get("/event/{event_id}", response_model=list[PhotoRead])
async def event_photos(
    event_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List an event's photos, newest first."""
    event = get_event_or_404(session, event_id)
    return list_event_photos(session, event, user)


@router.get("/user", response_model=list[PhotoRead])
async def my_photos(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List photos the caller was recognized in."""
    return list_user_photos(session, user)


@router.delete("/{photo_id}")
async def remove_photo(
    photo_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    storage: LocalPhotoStorage = Depends(get_storage),
):
    """Delete a photo. Allowed for its uploader and the event creator."""
    delete_photo(session, photo_id, user, storage)
    return {"success": True}
