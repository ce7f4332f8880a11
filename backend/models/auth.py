"""Authentication models"""

import datetime
import re

from sqlmodel import SQLModel, Field, Column

from .types import UtcAwareDateTime, utcnow

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email) -> str:
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True)
    email: str = Field(unique=True, index=True)
    password_hash: str
    reset_token: str | None = Field(default=None, index=True)
    reset_token_expires: datetime.datetime | None = Field(
        default=None,
        sa_column=Column(UtcAwareDateTime(), nullable=True),
    )
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )

    def public_profile(self) -> dict:
        return {
            "userId": self.id,
            "username": self.username,
            "email": self.email,
            "signupDate": self.created_at.isoformat(),
        }

    def __str__(self):
        return self.username
