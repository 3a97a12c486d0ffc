"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from eventlens.core.database import get_session
from eventlens.core.errors import ExternalServiceError
from eventlens.dependencies import get_email_channel, get_face_registry, get_storage
from eventlens.main import app
from eventlens.models import Event, Photo, User
from eventlens.services.face_registry import BoundingRegion, DetectedRegion, FaceMatch
from eventlens.services.notifications import NotificationDispatcher
from eventlens.services.storage import LocalPhotoStorage


class FakeFaceRegistry:
    """In-memory face registry returning canned results."""

    def __init__(self):
        self.regions: list[DetectedRegion] = []
        self.matches: list[FaceMatch] = []
        self.detect_error: Exception | None = None
        self.search_error: Exception | None = None
        self.registered: dict[str, str] = {}
        self.search_calls = 0

    def register(self, user_id: str, image_bytes: bytes) -> str:
        signature_id = f"face-{len(self.registered) + 1}"
        self.registered[signature_id] = user_id
        return signature_id

    def detect(self, image_bytes: bytes) -> list[DetectedRegion]:
        if self.detect_error:
            raise self.detect_error
        return list(self.regions)

    def search(self, image_bytes: bytes) -> list[FaceMatch]:
        self.search_calls += 1
        if self.search_error:
            raise self.search_error
        return list(self.matches)


class FakeChannel:
    """Notification channel that records deliveries or fails on demand."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    def deliver(self, address: str, subject: str, body: str) -> bool:
        if self.fail:
            raise ExternalServiceError("Failed to send email")
        self.sent.append((address, subject, body))
        return True


class FlakyStorage(LocalPhotoStorage):
    """Local storage that fails on the n-th save."""

    def __init__(self, root, fail_on: int):
        super().__init__(root)
        self.fail_on = fail_on
        self.calls = 0
        self.saved: list[str] = []

    def save(self, prefix: str, filename: str, data: bytes) -> str:
        self.calls += 1
        if self.calls == self.fail_on:
            raise ExternalServiceError("Failed to store photo")
        path = super().save(prefix, filename, data)
        self.saved.append(path)
        return path


def make_region(width=0.2, height=0.3, left=0.1, top=0.1) -> BoundingRegion:
    return BoundingRegion(width=width, height=height, left=left, top=top)


def make_match(user: User | None, confidence: float = 95.0, signature_id: str = "sig-1") -> FaceMatch:
    return FaceMatch(
        signature_id=signature_id,
        external_user_id=str(user.id) if user else "deleted-user",
        bounding_region=make_region(),
        confidence=confidence,
    )


def auth(user: User) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="registry")
def registry_fixture() -> FakeFaceRegistry:
    return FakeFaceRegistry()


@pytest.fixture(name="channel")
def channel_fixture() -> FakeChannel:
    return FakeChannel()


@pytest.fixture(name="dispatcher")
def dispatcher_fixture(channel: FakeChannel) -> NotificationDispatcher:
    return NotificationDispatcher(channel)


@pytest.fixture(name="storage")
def storage_fixture(tmp_path) -> LocalPhotoStorage:
    return LocalPhotoStorage(tmp_path / "uploads")


@pytest.fixture(name="client")
def client_fixture(
    session: Session,
    registry: FakeFaceRegistry,
    channel: FakeChannel,
    storage: LocalPhotoStorage,
):
    """Create a test client with the test database and fake collaborators."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_face_registry] = lambda: registry
    app.dependency_overrides[get_email_channel] = lambda: channel
    app.dependency_overrides[get_storage] = lambda: storage
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def create_user(session: Session, name: str, email: str) -> User:
    user = User(name=name, email=email)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="creator")
def creator_fixture(session: Session) -> User:
    return create_user(session, "Olivia Organizer", "olivia@example.com")


@pytest.fixture(name="guest")
def guest_fixture(session: Session) -> User:
    return create_user(session, "Gabe Guest", "gabe@example.com")


@pytest.fixture(name="outsider")
def outsider_fixture(session: Session) -> User:
    return create_user(session, "Oscar Outsider", "oscar@example.com")


@pytest.fixture(name="sample_event")
def sample_event_fixture(session: Session, creator: User) -> Event:
    """Create a sample event for testing."""
    event = Event(
        name="Summer Party",
        description="Backyard barbecue",
        date=datetime.now(UTC) + timedelta(days=7),
        location="Olivia's place",
        creator_id=creator.id,
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@pytest.fixture(name="sample_photo")
def sample_photo_fixture(
    session: Session, sample_event: Event, creator: User, storage: LocalPhotoStorage
) -> Photo:
    """Create a stored, unprocessed photo for the sample event."""
    path = storage.save(str(sample_event.id), "party.jpg", b"fake-jpeg-bytes")
    photo = Photo(
        event_id=sample_event.id,
        uploader_id=creator.id,
        filename="party.jpg",
        original_name="party.jpg",
        storage_path=path,
        size=15,
        mimetype="image/jpeg",
    )
    session.add(photo)
    session.commit()
    session.refresh(photo)
    return photo
