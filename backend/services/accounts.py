import datetime
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

import settings
from models.auth import User, is_valid_email, normalize_email
from models.types import utcnow
from services.errors import Conflict, InvalidOperation, Unauthorized
from services.security import (
    generate_reset_token,
    get_password_hash,
    verify_password,
)

logger = logging.getLogger("mediator.auth")


def find_by_email(session: Session, email: str) -> User | None:
    return session.exec(select(User).where(User.email == normalize_email(email))).first()


def find_by_username(session: Session, username: str) -> User | None:
    return session.exec(select(User).where(User.username == username)).first()


def register(session: Session, *, username: str, email: str, password: str) -> User:
    username = (username or "").strip()
    email = normalize_email(email)
    if not username or not email or not password:
        raise InvalidOperation("All fields are required")
    if not is_valid_email(email):
        raise InvalidOperation("Invalid email address")

    if find_by_email(session, email):
        raise Conflict("Email already exists")
    if find_by_username(session, username):
        raise Conflict("Username already exists")

    user = User(
        username=username,
        email=email,
        password_hash=get_password_hash(password),
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # someone registered the same name between our check and the insert
        session.rollback()
        raise Conflict("Username or email already exists")
    session.refresh(user)
    logger.info(f"Registered user {user.username} ({user.id})")
    return user


def authenticate(session: Session, *, identifier: str, password: str) -> User:
    """Login with either email or username"""
    if not identifier or not password:
        raise InvalidOperation("Email/username and password are required")

    user = find_by_email(session, identifier) or find_by_username(
        session, identifier.strip()
    )
    if not user:
        logger.debug(f"Login attempt for unknown user {identifier!r}")
        raise Unauthorized("Invalid credentials")
    if not verify_password(password, user.password_hash):
        logger.debug(f"Invalid password for user {user.id}")
        raise Unauthorized("Invalid credentials")
    return user


def start_password_reset(session: Session, *, email: str) -> str | None:
    """Store a reset token for the user owning the email.

    Returns the token, or None when the email is unknown: callers must answer
    the same way in both cases.
    """
    if not email:
        raise InvalidOperation("Email is required")

    user = find_by_email(session, email)
    if not user:
        return None

    user.reset_token = generate_reset_token()
    user.reset_token_expires = utcnow() + datetime.timedelta(
        minutes=settings.RESET_TOKEN_EXPIRE_MINUTES
    )
    session.add(user)
    session.commit()

    from services.email import send_password_reset_email

    send_password_reset_email(user=user, token=user.reset_token)
    return user.reset_token


def reset_password(session: Session, *, token: str, password: str) -> User:
    if not token or not password:
        raise InvalidOperation("Token and password are required")

    user = session.exec(select(User).where(User.reset_token == token)).first()
    if not user:
        raise InvalidOperation("Invalid or expired reset token")
    if user.reset_token_expires and user.reset_token_expires < utcnow():
        raise InvalidOperation("Reset token has expired")

    user.password_hash = get_password_hash(password)
    user.reset_token = None
    user.reset_token_expires = None
    session.add(user)
    session.commit()
    logger.info(f"Password reset for user {user.id}")
    return user
