"""Photo ingestion: face detection, matching and tag notifications.

An ingestion run processes one photo, off the request path. It either
finishes by writing all matched faces and ``is_processed`` in one commit,
or aborts and leaves the photo untouched. Tag notifications go out only
after that commit. Aborted photos are never retried; ``find_stale_photos``
exists so they can at least be reported.
"""

import logging
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlmodel import Session, select

from eventlens.core.database import commit
from eventlens.core.errors import ExternalServiceError, PersistenceError
from eventlens.models import DetectedFace, Event, NotificationType, Photo, User
from eventlens.services.face_registry import FaceRegistry
from eventlens.services.notifications import NotificationDispatcher, NotificationSpec
from eventlens.services.storage import LocalPhotoStorage

logger = logging.getLogger(__name__)


class PhotoIngestPipeline:
    """Runs detection and matching for uploaded photos."""

    def __init__(
        self,
        registry: FaceRegistry,
        dispatcher: NotificationDispatcher,
        storage: LocalPhotoStorage,
    ) -> None:
        self.registry = registry
        self.dispatcher = dispatcher
        self.storage = storage

    def ingest(self, session: Session, photo_id: UUID) -> bool:
        """
        Process a single photo.

        Returns True if the photo ended up processed, False if the run was
        aborted (photo or event gone, or the registry call failed).
        """
        photo = session.get(Photo, photo_id)
        if photo is None:
            logger.warning(f"Photo not found with id: {photo_id}")
            return False

        event = session.get(Event, photo.event_id)
        if event is None:
            logger.warning(f"Event not found for photo: {photo_id}")
            return False
        event_id = event.id
        event_name = event.name

        try:
            image = self.storage.read(photo.storage_path)
            regions = self.registry.detect(image)
        except ExternalServiceError as e:
            logger.error(f"Face detection failed for photo {photo_id}: {e}")
            return False

        if not regions:
            photo.is_processed = True
            session.add(photo)
            commit(session)
            logger.info(f"No faces detected in photo {photo_id}")
            return True

        try:
            matches = self.registry.search(image)
        except ExternalServiceError as e:
            logger.error(f"Face search failed for photo {photo_id}: {e}")
            return False

        faces: list[DetectedFace] = []
        for match in matches:
            user = self._resolve_user(session, match.external_user_id)
            if user is None:
                logger.info(
                    f"Skipping match {match.signature_id}: no user {match.external_user_id!r}"
                )
                continue

            region = match.bounding_region
            faces.append(
                DetectedFace(
                    photo_id=photo_id,
                    position=len(faces),
                    face_id=match.signature_id,
                    user_id=user.id,
                    box_width=region.width,
                    box_height=region.height,
                    box_left=region.left,
                    box_top=region.top,
                    confidence=match.confidence,
                )
            )

        tagged_user_ids = [face.user_id for face in faces]
        photo.is_processed = True
        session.add(photo)
        session.add_all(faces)
        commit(session)
        logger.info(f"Processed photo {photo_id}: {len(faces)} of {len(matches)} matches tagged")

        # Tag notifications only ever refer to saved faces.
        for user_id in tagged_user_ids:
            try:
                self.dispatcher.notify(
                    session,
                    NotificationSpec(
                        type=NotificationType.photo_tagged,
                        title="You were recognized in a photo",
                        message=f"You were recognized in a photo from the event: {event_name}",
                        recipient_id=user_id,
                        related_event_id=event_id,
                        related_photo_id=photo_id,
                    ),
                )
            except PersistenceError as e:
                logger.error(f"Tag notification for user {user_id} on photo {photo_id} lost: {e}")
        return True

    def _resolve_user(self, session: Session, external_user_id: str) -> User | None:
        try:
            user_id = UUID(external_user_id)
        except (TypeError, ValueError):
            return None
        return session.get(User, user_id)


def find_stale_photos(session: Session, older_than: timedelta) -> list[Photo]:
    """Return photos still unprocessed ``older_than`` after upload."""
    cutoff = datetime.now(UTC) - older_than
    statement = (
        select(Photo)
        .where(Photo.is_processed == False)  # noqa: E712
        .where(Photo.uploaded_at < cutoff)
        .order_by(Photo.uploaded_at)
    )
    return list(session.exec(statement).all())
