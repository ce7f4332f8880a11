import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, Column, Index, UniqueConstraint, text
from sqlmodel import SQLModel, Field

from models.types import UtcAwareDateTime, utcnow


class RequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


def canonical_pair(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


class Friendship(SQLModel, table=True):
    __tablename__ = "friends"
    __table_args__ = (
        UniqueConstraint("user_id_1", "user_id_2", name="uq_friend_pair"),
        CheckConstraint("user_id_1 < user_id_2", name="ck_friend_order"),
    )

    id: int | None = Field(default=None, primary_key=True)
    # Canonical pair (always user_id_1 < user_id_2)
    user_id_1: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    user_id_2: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )

    def other(self, user_id: int) -> int:
        return self.user_id_2 if user_id == self.user_id_1 else self.user_id_1


class FriendRequest(SQLModel, table=True):
    __tablename__ = "friend_requests"
    __table_args__ = (
        # One pending request per unordered pair, whoever sent it
        Index(
            "uq_pending_friend_request",
            "pair_low_id",
            "pair_high_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
        CheckConstraint("from_user_id <> to_user_id", name="ck_friend_request_self"),
    )

    id: int | None = Field(default=None, primary_key=True)
    from_user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    to_user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    pair_low_id: int
    pair_high_id: int
    status: RequestStatus = Field(default=RequestStatus.pending, index=True)
    requested_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
    responded_at: datetime.datetime | None = Field(
        default=None,
        sa_column=Column(UtcAwareDateTime(), nullable=True),
    )

    @classmethod
    def between(cls, from_user_id: int, to_user_id: int) -> "FriendRequest":
        low, high = canonical_pair(from_user_id, to_user_id)
        return cls(
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            pair_low_id=low,
            pair_high_id=high,
        )
