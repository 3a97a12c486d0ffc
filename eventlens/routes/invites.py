"""Invitation routes for sending and verifying invite codes."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from eventlens.core.config import settings
from eventlens.core.database import get_session
from eventlens.dependencies import get_current_user, get_dispatcher
from eventlens.models import User
from eventlens.routes.events import get_event_or_404
from eventlens.schemas import (
    InvitationVerificationRead,
    SendInvitationsRequest,
    SendInvitationsResponse,
)
from eventlens.services.invitations import send_invitations, verify_invitation
from eventlens.services.notifications import NotificationDispatcher

router = APIRouter(prefix="/invite", tags=["invitations"])


@router.post("/{event_id}", response_model=SendInvitationsResponse)
async def post_invitations(
    event_id: UUID,
    data: SendInvitationsRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Email invitations to selected invitees.

    Returns which invitations went out and which failed, with a reason for
    each failure. One failure doesn't stop the others.
    """
    event = get_event_or_404(session, event_id)
    result = send_invitations(
        session, event, user, data.invitee_ids, dispatcher, settings.public_base_url
    )
    return SendInvitationsResponse.model_validate(result, from_attributes=True)


@router.get("/verify/{event_id}/{code}", response_model=InvitationVerificationRead)
async def get_verification(
    event_id: UUID,
    code: str,
    session: Session = Depends(get_session),
):
    """Public lookup of an invitation by its code."""
    verification = verify_invitation(session, event_id, code)
    return InvitationVerificationRead.model_validate(verification, from_attributes=True)
