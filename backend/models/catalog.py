"""Lists, media items and everything hanging off them"""

import datetime
from enum import Enum
from typing import Any

from sqlalchemy import CheckConstraint, Column, JSON, UniqueConstraint
from sqlmodel import SQLModel, Field

from models.types import UtcAwareDateTime, utcnow


class MediaType(str, Enum):
    movie = "movie"
    book = "book"
    album = "album"

    @property
    def auto_list_name(self) -> str:
        return f"My {self.value.capitalize()}s"

    @property
    def auto_list_description(self) -> str:
        return f"Auto-generated list for {self.value}s"


class MediaList(SQLModel, table=True):
    __tablename__ = "lists"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    description: str | None = None
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    is_public: bool = Field(default=True, index=True)
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )


class MediaItem(SQLModel, table=True):
    __tablename__ = "media_items"
    __table_args__ = (
        UniqueConstraint("list_id", "external_id", name="uq_media_item_external"),
        CheckConstraint(
            "media_type IN ('movie', 'book', 'album')", name="ck_media_type"
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    list_id: int = Field(foreign_key="lists.id", ondelete="CASCADE", index=True)
    media_type: MediaType
    external_id: str
    title: str
    year: str | None = None
    poster_url: str | None = None
    additional_data: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON, nullable=True)
    )
    notes: str | None = None
    added_by: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    added_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )


class Rating(SQLModel, table=True):
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("media_item_id", "user_id", name="uq_rating_item_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_rating_range"),
    )

    id: int | None = Field(default=None, primary_key=True)
    media_item_id: int = Field(
        foreign_key="media_items.id", ondelete="CASCADE", index=True
    )
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    rating: int
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
    updated_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )


class WatchedWith(SQLModel, table=True):
    __tablename__ = "watched_with"

    media_item_id: int = Field(
        foreign_key="media_items.id", ondelete="CASCADE", primary_key=True
    )
    friend_id: int = Field(foreign_key="users.id", ondelete="CASCADE", primary_key=True)
