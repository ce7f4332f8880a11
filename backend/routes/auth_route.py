import tomllib

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from models.auth import User
from models.common import get_session
from routes.deps import current_user
from services import accounts
from services.security import create_access_token
from settings import PROJECT_PATH

router = APIRouter()


def get_version() -> str:
    """Read version from pyproject.toml"""
    with open(PROJECT_PATH / "pyproject.toml", "rb") as f:
        pyproject = tomllib.load(f)
    return pyproject["project"]["version"]


@router.get("/")
async def index():
    return {"version": get_version(), "status": "ok"}


@router.get("/health")
async def health():
    return {"status": "ok", "message": "Mediator API is running"}


class RegisterPayload(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None


class LoginPayload(BaseModel):
    identifier: str | None = None
    email: str | None = None
    username: str | None = None
    password: str | None = None


class ForgotPasswordPayload(BaseModel):
    email: str | None = None


class ResetPasswordPayload(BaseModel):
    token: str | None = None
    password: str | None = None


def _credential(user: User) -> dict:
    return {"token": create_access_token(user.id), **user.public_profile()}


@router.post("/auth/register", status_code=201)
async def register(payload: RegisterPayload, session: Session = Depends(get_session)):
    user = accounts.register(
        session,
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )
    return _credential(user)


@router.post("/auth/login")
async def login(payload: LoginPayload, session: Session = Depends(get_session)):
    user = accounts.authenticate(
        session,
        identifier=payload.identifier or payload.email or payload.username,
        password=payload.password,
    )
    return _credential(user)


@router.get("/auth/me")
async def me(user: User = Depends(current_user)):
    return user.public_profile()


@router.post("/auth/forgot-password")
async def forgot_password(
    payload: ForgotPasswordPayload, session: Session = Depends(get_session)
):
    accounts.start_password_reset(session, email=payload.email)
    # same answer whether or not the email is known
    return {"message": "If that email exists, a password reset link has been sent"}


@router.post("/auth/reset-password")
async def reset_password(
    payload: ResetPasswordPayload, session: Session = Depends(get_session)
):
    accounts.reset_password(session, token=payload.token, password=payload.password)
    return {"message": "Password reset successfully"}
