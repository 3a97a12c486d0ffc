"""Notification routes for the caller's inbox."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from eventlens.core.database import get_session
from eventlens.dependencies import get_current_user
from eventlens.models import User
from eventlens.schemas import NotificationRead
from eventlens.services.notifications import (
    delete_notification,
    list_notifications,
    mark_as_read,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationRead])
async def get_notifications(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return list_notifications(session, user)


@router.put("/{notification_id}/read", response_model=NotificationRead)
async def read_notification(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return mark_as_read(session, user, notification_id)


@router.delete("/{notification_id}")
async def remove_notification(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    delete_notification(session, user, notification_id)
    return {"success": True}
