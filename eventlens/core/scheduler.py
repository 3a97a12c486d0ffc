"""Background job scheduler for photo ingestion.

Each uploaded photo gets one ingestion job on a bounded thread pool. Jobs
run once, in no particular order, and are neither cancelled nor retried.
A periodic job reports photos that never finished processing.
"""
import logging
from datetime import timedelta
from uuid import UUID

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from eventlens.core.config import settings
from eventlens.core.database import engine
from eventlens.dependencies import get_email_channel, get_face_registry, get_storage
from eventlens.services.ingest import PhotoIngestPipeline, find_stale_photos
from eventlens.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(
    executors={"default": ThreadPoolExecutor(settings.ingest_workers)},
    # Queued jobs still run once a worker frees up, however late.
    job_defaults={"misfire_grace_time": None, "coalesce": False},
)


def build_pipeline() -> PhotoIngestPipeline:
    return PhotoIngestPipeline(
        registry=get_face_registry(),
        dispatcher=NotificationDispatcher(get_email_channel()),
        storage=get_storage(),
    )


def ingest_job(photo_id: UUID):
    """Background ingestion job for one photo."""
    try:
        with Session(engine) as session:
            build_pipeline().ingest(session, photo_id)
    except Exception as e:
        logger.error(f"Ingestion of photo {photo_id} failed: {e}")


def schedule_ingest(photo_id: UUID):
    """Submit a photo for ingestion without waiting for it."""
    scheduler.add_job(ingest_job, args=[photo_id], id=f"ingest:{photo_id}")
    logger.debug(f"Scheduled ingestion of photo {photo_id}")


def stale_photo_job():
    """Log photos that are still unprocessed long after upload."""
    try:
        with Session(engine) as session:
            stale = find_stale_photos(
                session, timedelta(minutes=settings.stale_after_minutes)
            )
            if stale:
                logger.warning(
                    f"{len(stale)} photos unprocessed after {settings.stale_after_minutes} "
                    f"minutes: {', '.join(str(photo.id) for photo in stale)}"
                )
    except Exception as e:
        logger.error(f"Stale photo report failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        stale_photo_job,
        trigger=IntervalTrigger(minutes=settings.stale_report_minutes),
        id="stale_photo_report",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started with {settings.ingest_workers} ingestion workers"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")
