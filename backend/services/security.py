# Password hashing (bcrypt through passlib) and signed bearer tokens (JWT)

import datetime
import logging
import secrets

from jose import JWTError, jwt
from passlib.context import CryptContext

import settings

logger = logging.getLogger("mediator.auth")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user_id: int, expires_delta: datetime.timedelta | None = None
) -> str:
    if expires_delta is None:
        expires_delta = datetime.timedelta(days=settings.TOKEN_EXPIRE_DAYS)
    expire = datetime.datetime.now(datetime.timezone.utc) + expires_delta
    to_encode = {"exp": expire, "sub": str(user_id)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.TOKEN_ALGORITHM)


def verify_access_token(token: str) -> int | None:
    """Return the user id carried by a valid token, None otherwise"""
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.TOKEN_ALGORITHM]
        )
    except JWTError as e:  # expired tokens land here too
        logger.debug(f"JWT verification error: {e}")
        return None

    subject = payload.get("sub")
    if subject is None:
        logger.warning("Token payload missing 'sub' field")
        return None
    try:
        return int(subject)
    except ValueError:
        logger.warning(f"Token subject is not a user id: {subject!r}")
        return None


def generate_reset_token() -> str:
    return secrets.token_hex(32)
