"""Event routes for managing events and their invitee lists."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session, or_, select

from eventlens.core.database import commit, get_session
from eventlens.core.errors import NotFound, Unauthorized
from eventlens.dependencies import get_current_user, get_optional_user, get_storage
from eventlens.models import Event, Invitee, User
from eventlens.schemas import (
    AddInviteesRequest,
    AddInviteesResponse,
    EventCreate,
    EventRead,
    EventUpdate,
    InviteeRead,
    InviteResponseRequest,
)
from eventlens.services.invitations import (
    InviteeSpec,
    add_invitees,
    remove_invitee,
    require_creator,
    respond_to_invite,
)
from eventlens.services.storage import LocalPhotoStorage

router = APIRouter(prefix="/events", tags=["events"])


def get_event_or_404(session: Session, event_id: UUID) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise NotFound(f"Event not found with id of {event_id}")
    return event


def event_view(event: Event, viewer: User) -> EventRead:
    """
    Render an event for ``viewer``.

    Invite codes are bearer credentials, so only the creator sees every
    invitee in full. Other viewers see their own entry and, for the rest,
    neither the email nor the code.
    """
    view = EventRead.model_validate(event, from_attributes=True)
    if event.creator_id != viewer.id:
        view.invitees = [
            invitee
            if invitee.user_id == viewer.id
            else invitee.model_copy(update={"email": None, "invite_code": None})
            for invitee in view.invitees
        ]
    return view


@router.post("", response_model=EventRead, status_code=201)
async def create_event(
    data: EventCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create a new event with the caller as its creator."""
    event = Event(**data.model_dump(), creator_id=user.id)
    session.add(event)
    commit(session)
    session.refresh(event)
    return event


@router.get("", response_model=list[EventRead])
async def list_events(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    List events the caller created or is invited to.

    Only invitations bound to the caller's user count; email-only
    invitations show up once the caller responds to them while logged in.
    """
    invited = select(Invitee.event_id).where(Invitee.user_id == user.id)
    statement = (
        select(Event)
        .where(or_(Event.creator_id == user.id, Event.id.in_(invited)))
        .order_by(Event.date.desc())
    )
    return [event_view(event, user) for event in session.exec(statement).all()]


@router.get("/{event_id}", response_model=EventRead)
async def get_event(
    event_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Return a single event if the caller may see it."""
    event = get_event_or_404(session, event_id)
    if not event.can_view(user.id):
        raise Unauthorized("Not authorized to access this event")
    return event_view(event, user)


@router.put("/{event_id}", response_model=EventRead)
async def update_event(
    event_id: UUID,
    data: EventUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Update event details. The creator can't be changed."""
    event = get_event_or_404(session, event_id)
    require_creator(event, user, "update")

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(event, key, value)
    session.add(event)
    commit(session)
    session.refresh(event)
    return event


@router.delete("/{event_id}")
async def delete_event(
    event_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    storage: LocalPhotoStorage = Depends(get_storage),
):
    """
    Delete an event.

    Removes its invitees and photos along with it and releases the stored
    photo files.
    """
    event = get_event_or_404(session, event_id)
    require_creator(event, user, "delete")

    paths = [photo.storage_path for photo in event.photos]
    session.delete(event)
    commit(session)
    for path in paths:
        storage.delete(path)
    return {"success": True}


@router.post("/{event_id}/invitees", response_model=AddInviteesResponse)
async def post_invitees(
    event_id: UUID,
    data: AddInviteesRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Add invitees to an event.

    Unknown users and people who are already invited are reported under
    ``skipped``; everyone else gets a pending invitation with its own code.
    """
    event = get_event_or_404(session, event_id)
    specs = [InviteeSpec(user_id=inv.user_id, email=inv.email) for inv in data.invitees]
    result = add_invitees(session, event, user, specs)
    return AddInviteesResponse.model_validate(result, from_attributes=True)


@router.delete("/{event_id}/invitees/{invitee_id}", response_model=list[InviteeRead])
async def delete_invitee(
    event_id: UUID,
    invitee_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Remove an invitee from an event."""
    event = get_event_or_404(session, event_id)
    return remove_invitee(session, event, user, invitee_id)


@router.put("/{event_id}/invite-response", response_model=InviteeRead)
async def invite_response(
    event_id: UUID,
    data: InviteResponseRequest,
    user: User | None = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    """
    Accept or decline an invitation using its invite code.

    Works without logging in. A logged-in responder gets bound to an
    invitation that isn't bound to anyone yet.
    """
    event = get_event_or_404(session, event_id)
    return respond_to_invite(session, event, user, data.invite_code, data.status)
