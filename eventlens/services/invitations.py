"""Invitation lifecycle for event invitee lists.

Invite codes are bearer credentials: anyone holding one can view and
respond to that single invitation. Codes are generated once per invitee
and never reissued. All mutations of an event's invitee list go out as a
single commit, so a batch is never half-saved.
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlmodel import Session

from eventlens.core.database import commit
from eventlens.core.errors import InvalidInput, NotFound, PersistenceError, Unauthorized
from eventlens.models import Event, Invitee, InviteStatus, NotificationType, User
from eventlens.services.notifications import NotificationDispatcher, NotificationSpec

logger = logging.getLogger(__name__)

RESPONSE_STATUSES = (InviteStatus.accepted, InviteStatus.declined)


@dataclass
class InviteeSpec:
    """Who to invite: a known user or a bare email."""

    user_id: UUID | None = None
    email: str | None = None


@dataclass
class SkippedInvitee:
    user_id: UUID | None
    email: str | None
    reason: str


@dataclass
class AddInviteesResult:
    invitees: list[Invitee]
    added: list[Invitee] = field(default_factory=list)
    skipped: list[SkippedInvitee] = field(default_factory=list)


@dataclass
class InvitationOutcome:
    id: UUID
    email: str | None
    reason: str | None = None


@dataclass
class SendInvitationsResult:
    sent: list[InvitationOutcome] = field(default_factory=list)
    failed: list[InvitationOutcome] = field(default_factory=list)


@dataclass
class InvitationVerification:
    """Redacted view of an event for an invite code holder."""

    event: dict
    invitation: dict


def normalize_email(email: str) -> str:
    return email.strip().lower()


def require_creator(event: Event, requester: User, action: str) -> None:
    if event.creator_id != requester.id:
        raise Unauthorized(f"Not authorized to {action} for this event")


def find_by_code(event: Event, code: str) -> Invitee | None:
    return next((inv for inv in event.invitees if inv.invite_code == code), None)


def add_invitees(
    session: Session,
    event: Event,
    requester: User,
    specs: list[InviteeSpec],
) -> AddInviteesResult:
    """
    Add invitees to an event, skipping ones that can't or needn't be added.

    An entry naming an unknown user, an already-invited user, or (for
    email-only entries) an already-invited email is skipped with a reason
    instead of failing the batch. Each added invitee gets a fresh invite
    code and starts out pending.
    """
    require_creator(event, requester, "add invitees")

    result = AddInviteesResult(invitees=[])
    for spec in specs:
        if spec.user_id is not None:
            user = session.get(User, spec.user_id)
            if user is None:
                result.skipped.append(SkippedInvitee(spec.user_id, spec.email, "User not found"))
                continue
            if event.invitee_for_user(user.id) is not None:
                result.skipped.append(SkippedInvitee(spec.user_id, spec.email, "Already invited"))
                continue
            invitee = Invitee(event_id=event.id, user_id=user.id, email=user.email)
        elif spec.email and spec.email.strip():
            email = normalize_email(spec.email)
            if any(inv.email == email for inv in event.invitees):
                result.skipped.append(SkippedInvitee(None, spec.email, "Already invited"))
                continue
            invitee = Invitee(event_id=event.id, email=email)
        else:
            result.skipped.append(SkippedInvitee(None, None, "No user or email given"))
            continue

        event.invitees.append(invitee)
        result.added.append(invitee)

    session.add(event)
    commit(session)
    session.refresh(event)

    logger.info(
        f"Event {event.id}: added {len(result.added)} invitees, skipped {len(result.skipped)}"
    )
    result.invitees = list(event.invitees)
    return result


def remove_invitee(session: Session, event: Event, requester: User, invitee_id: UUID) -> list[Invitee]:
    require_creator(event, requester, "remove invitees")

    invitee = next((inv for inv in event.invitees if inv.id == invitee_id), None)
    if invitee is None:
        raise NotFound("Invitee not found")

    event.invitees.remove(invitee)
    session.add(event)
    commit(session)
    session.refresh(event)
    return list(event.invitees)


def respond_to_invite(
    session: Session,
    event: Event,
    responder: User | None,
    code: str | None,
    status: str,
) -> Invitee:
    """
    Record a response to the invitation identified by ``code``.

    Responses may be resubmitted to change the status. If the invitation
    isn't bound to a user yet and the responder is logged in, the
    responder is bound to it. A binding, once set, is never changed.
    """
    if status not in RESPONSE_STATUSES:
        raise InvalidInput("Please provide valid status (accepted/declined)")
    if not code:
        raise InvalidInput("Please provide invite code")

    invitee = find_by_code(event, code)
    if invitee is None:
        raise InvalidInput("Invalid invite code")

    invitee.status = InviteStatus(status)

    if invitee.user_id is None and responder is not None:
        if event.invitee_for_user(responder.id) is None:
            invitee.user_id = responder.id
        else:
            # One entry per user; leave the email-only entry unbound.
            logger.info(
                f"User {responder.id} already has an invitation to event {event.id}, not binding"
            )

    session.add(invitee)
    commit(session)
    session.refresh(invitee)
    return invitee


def verify_invitation(session: Session, event_id: UUID, code: str) -> InvitationVerification:
    """Look up an invitation by code without exposing other invitees."""
    event = session.get(Event, event_id)
    if event is None:
        raise NotFound("Event not found")

    invitee = find_by_code(event, code)
    if invitee is None:
        raise NotFound("Invalid invitation code")

    creator = session.get(User, event.creator_id)
    return InvitationVerification(
        event={
            "id": event.id,
            "name": event.name,
            "date": event.date,
            "location": event.location,
            "description": event.description,
            "creator": creator.name if creator else None,
        },
        invitation={
            "id": invitee.id,
            "status": invitee.status,
            "invite_code": invitee.invite_code,
        },
    )


def invitation_link(base_url: str, event: Event, invitee: Invitee) -> str:
    return f"{base_url.rstrip('/')}/events/{event.id}/join?code={invitee.invite_code}"


def send_invitations(
    session: Session,
    event: Event,
    requester: User,
    invitee_ids: list[UUID],
    dispatcher: NotificationDispatcher,
    base_url: str,
) -> SendInvitationsResult:
    """
    Email invitations to the given invitees of an event.

    Each invitee is handled independently: unknown ids and failed
    deliveries end up in ``failed`` with a reason while the rest proceed.
    """
    require_creator(event, requester, "send invitations")
    if not invitee_ids:
        raise InvalidInput("Please provide invitee IDs")

    creator = session.get(User, event.creator_id)
    host = creator.name if creator else "The organizer"
    event_name = event.name
    event_id = event.id
    by_id = {inv.id: inv for inv in event.invitees}

    result = SendInvitationsResult()
    for invitee_id in invitee_ids:
        invitee = by_id.get(invitee_id)
        if invitee is None:
            result.failed.append(
                InvitationOutcome(invitee_id, None, "Invitee not found in event")
            )
            continue

        email = invitee.email
        details = [f"Date: {event.date:%Y-%m-%d}"]
        if event.location:
            details.append(f"Location: {event.location}")
        if event.description:
            details.append(f"Description: {event.description}")
        message = "\n\n".join(
            [
                f"{host} has invited you to {event_name}",
                "\n".join(details),
                f"View the invitation and respond: {invitation_link(base_url, event, invitee)}",
            ]
        )

        try:
            notification = dispatcher.notify(
                session,
                NotificationSpec(
                    type=NotificationType.event_invite,
                    title=f"You're invited to {event_name}",
                    message=message,
                    recipient_id=invitee.user_id,
                    email=email,
                    related_event_id=event_id,
                ),
            )
        except PersistenceError:
            result.failed.append(InvitationOutcome(invitee_id, email, "Failed to record invitation"))
            continue

        if notification.is_sent:
            result.sent.append(InvitationOutcome(invitee_id, email))
        else:
            result.failed.append(InvitationOutcome(invitee_id, email, "Failed to send email"))

    logger.info(
        f"Event {event_id}: sent {len(result.sent)} invitations, {len(result.failed)} failed"
    )
    return result
