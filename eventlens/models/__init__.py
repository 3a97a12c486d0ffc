from eventlens.models.event import Event
from eventlens.models.invitee import Invitee, InviteStatus
from eventlens.models.notification import Notification, NotificationType
from eventlens.models.photo import DetectedFace, Photo
from eventlens.models.user import User

__all__ = [
    "Event",
    "Invitee",
    "InviteStatus",
    "Notification",
    "NotificationType",
    "Photo",
    "DetectedFace",
    "User",
]
