"""User routes for accounts and profile face registration."""
from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel import Session, select

from eventlens.core.database import commit, get_session
from eventlens.core.errors import InvalidInput
from eventlens.dependencies import get_current_user, get_face_registry
from eventlens.models import User
from eventlens.schemas import UserCreate, UserRead
from eventlens.services.face_registry import FaceRegistry
from eventlens.services.invitations import normalize_email

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
async def create_user(data: UserCreate, session: Session = Depends(get_session)):
    """Create a user. Emails are unique, compared case-insensitively."""
    email = normalize_email(data.email)
    if session.exec(select(User).where(User.email == email)).first():
        raise InvalidInput("Email already exists")

    user = User(name=data.name.strip(), email=email)
    session.add(user)
    commit(session)
    session.refresh(user)
    return user


@router.get("/me", response_model=UserRead)
async def me(user: User = Depends(get_current_user)):
    return user


@router.post("/me/face", response_model=UserRead)
async def register_face(
    image: UploadFile = File(...),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    registry: FaceRegistry = Depends(get_face_registry),
):
    """
    Register the caller's profile face with the face registry.

    Photos uploaded afterwards can recognize the caller. The image must
    contain a face.
    """
    data = await image.read()
    if not data:
        raise InvalidInput("Please upload an image")

    user.face_id = registry.register(str(user.id), data)
    session.add(user)
    commit(session)
    session.refresh(user)
    return user
