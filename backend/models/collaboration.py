import datetime

from sqlalchemy import Column, UniqueConstraint
from sqlmodel import SQLModel, Field

from models.friendship import RequestStatus
from models.types import UtcAwareDateTime, utcnow


class Collaboration(SQLModel, table=True):
    """A request to write to someone else's list; once approved it is the grant."""

    __tablename__ = "collaborations"
    __table_args__ = (
        UniqueConstraint("list_id", "user_id", name="uq_collaboration_list_user"),
    )

    id: int | None = Field(default=None, primary_key=True)
    list_id: int = Field(foreign_key="lists.id", ondelete="CASCADE", index=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    status: RequestStatus = Field(default=RequestStatus.pending, index=True)
    requested_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
    responded_at: datetime.datetime | None = Field(
        default=None,
        sa_column=Column(UtcAwareDateTime(), nullable=True),
    )
