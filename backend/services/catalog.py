"""Lists, media items and ratings, always scoped to who is asking.

Read access: owner, approved collaborator or anyone for public lists.
Write access to items: owner or approved collaborator.
List settings and deletions: owner only.
"""

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.catalog import MediaItem, MediaList, MediaType, Rating, WatchedWith
from models.types import utcnow
from services.collaboration import is_collaborator
from services.errors import Forbidden, InvalidOperation, NotFound
from services.friendship import friend_ids

logger = logging.getLogger("mediator.catalog")


def parse_media_type(media_type: str | MediaType | None) -> MediaType:
    try:
        return MediaType(media_type)
    except ValueError:
        raise InvalidOperation(
            "Valid mediaType is required (movie, book, or album)"
        ) from None


def get_list(session: Session, list_id: int) -> MediaList:
    media_list = session.get(MediaList, list_id)
    if not media_list:
        raise NotFound("List not found")
    return media_list


def get_media_item(
    session: Session, media_item_id: int, list_id: int | None = None
) -> MediaItem:
    item = session.get(MediaItem, media_item_id)
    if not item or (list_id is not None and item.list_id != list_id):
        raise NotFound("Media item not found")
    return item


def can_write(session: Session, media_list: MediaList, user_id: int) -> bool:
    return media_list.user_id == user_id or is_collaborator(
        session, media_list.id, user_id
    )


def can_view(session: Session, media_list: MediaList, user_id: int) -> bool:
    return media_list.is_public or can_write(session, media_list, user_id)


def _require_owner(media_list: MediaList, user_id: int):
    if media_list.user_id != user_id:
        raise Forbidden("Access denied")


def _require_writer(session: Session, media_list: MediaList, user_id: int):
    if not can_write(session, media_list, user_id):
        raise Forbidden("Access denied")


def lists_for_user(session: Session, user_id: int) -> list[MediaList]:
    return list(
        session.exec(
            select(MediaList)
            .where(MediaList.user_id == user_id)
            .order_by(MediaList.created_at.desc(), MediaList.id.desc())
        )
    )


def public_lists(session: Session) -> list[MediaList]:
    return list(
        session.exec(
            select(MediaList)
            .where(MediaList.is_public == True)  # noqa: E712
            .order_by(MediaList.created_at.desc(), MediaList.id.desc())
        )
    )


def create_list(
    session: Session,
    *,
    user_id: int,
    name: str,
    description: str | None = None,
    is_public: bool = True,
) -> MediaList:
    name = (name or "").strip()
    if not name:
        raise InvalidOperation("List name is required")
    media_list = MediaList(
        name=name, description=description, user_id=user_id, is_public=is_public
    )
    session.add(media_list)
    session.commit()
    session.refresh(media_list)
    return media_list


def update_list(
    session: Session,
    *,
    list_id: int,
    actor_id: int,
    name: str | None = None,
    description: str | None = None,
    is_public: bool | None = None,
) -> MediaList:
    media_list = get_list(session, list_id)
    _require_owner(media_list, actor_id)
    if name is not None:
        if not name.strip():
            raise InvalidOperation("List name is required")
        media_list.name = name.strip()
    if description is not None:
        media_list.description = description
    if is_public is not None:
        media_list.is_public = is_public
    session.add(media_list)
    session.commit()
    session.refresh(media_list)
    return media_list


def delete_list(session: Session, *, list_id: int, actor_id: int) -> None:
    media_list = get_list(session, list_id)
    _require_owner(media_list, actor_id)
    session.delete(media_list)
    session.commit()
    logger.debug(f"List {list_id} deleted by {actor_id}")


def find_auto_list(
    session: Session, user_id: int, media_type: MediaType
) -> MediaList | None:
    return session.exec(
        select(MediaList)
        .where(
            MediaList.user_id == user_id,
            MediaList.name == media_type.auto_list_name,
        )
        .order_by(MediaList.id)
    ).first()


def get_or_create_auto_list(
    session: Session, *, user_id: int, media_type: str | MediaType
) -> MediaList:
    media_type = parse_media_type(media_type)
    auto_list = find_auto_list(session, user_id, media_type)
    if auto_list:
        return auto_list
    logger.debug(f"Creating the {media_type.value} auto-list for user {user_id}")
    return create_list(
        session,
        user_id=user_id,
        name=media_type.auto_list_name,
        description=media_type.auto_list_description,
        is_public=False,
    )


def average_rating(session: Session, media_item_id: int) -> float | None:
    return session.exec(
        select(func.avg(Rating.rating)).where(Rating.media_item_id == media_item_id)
    ).one()


def media_item_payload(session: Session, item: MediaItem, viewer_id: int) -> dict:
    ratings = session.exec(
        select(Rating)
        .where(Rating.media_item_id == item.id)
        .order_by(Rating.id)
    ).all()
    watched_with = session.exec(
        select(WatchedWith.friend_id).where(WatchedWith.media_item_id == item.id)
    ).all()
    user_rating = next((r.rating for r in ratings if r.user_id == viewer_id), None)
    payload = item.model_dump(mode="json")
    payload.update(
        {
            "ratings": [r.model_dump(mode="json") for r in ratings],
            "averageRating": average_rating(session, item.id),
            "userRating": user_rating,
            "watchedWith": sorted(watched_with),
        }
    )
    return payload


def list_detail(session: Session, *, list_id: int, viewer_id: int) -> dict:
    media_list = get_list(session, list_id)
    is_owner = media_list.user_id == viewer_id
    collaborator = is_collaborator(session, list_id, viewer_id)
    if not (is_owner or collaborator or media_list.is_public):
        raise Forbidden("Access denied")

    items = session.exec(
        select(MediaItem)
        .where(MediaItem.list_id == list_id)
        .order_by(MediaItem.added_at.desc(), MediaItem.id.desc())
    ).all()
    payload = media_list.model_dump(mode="json")
    payload.update(
        {
            "mediaItems": [
                media_item_payload(session, item, viewer_id) for item in items
            ],
            "isOwner": is_owner,
            "isCollaborator": collaborator,
        }
    )
    return payload


def user_auto_list_detail(
    session: Session, *, user_id: int, media_type: str | MediaType, viewer_id: int
) -> dict:
    media_type = parse_media_type(media_type)
    auto_list = find_auto_list(session, user_id, media_type)
    if not auto_list:
        raise NotFound("List not found")
    return list_detail(session, list_id=auto_list.id, viewer_id=viewer_id)


def add_media_item(
    session: Session,
    *,
    list_id: int,
    actor_id: int,
    media_type: str | MediaType,
    external_id: str,
    title: str,
    year: str | None = None,
    poster_url: str | None = None,
    additional_data: dict[str, Any] | None = None,
) -> tuple[MediaItem, bool]:
    """Add an item to the list; returns the item and whether it was created.

    Items are unique per (list, external id): adding the same search result
    twice hands back the row already stored.
    """
    media_list = get_list(session, list_id)
    _require_writer(session, media_list, actor_id)
    if not media_type or not external_id or not title:
        raise InvalidOperation("Media type, external ID, and title are required")
    media_type = parse_media_type(media_type)
    external_id = str(external_id)

    def existing_item() -> MediaItem | None:
        return session.exec(
            select(MediaItem).where(
                MediaItem.list_id == list_id, MediaItem.external_id == external_id
            )
        ).first()

    item = existing_item()
    if item:
        return item, False

    item = MediaItem(
        list_id=list_id,
        media_type=media_type,
        external_id=external_id,
        title=title,
        year=year or None,
        poster_url=poster_url or None,
        additional_data=additional_data or None,
        added_by=actor_id,
    )
    session.add(item)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        item = existing_item()
        if item is None:
            raise
        return item, False
    session.refresh(item)
    return item, True


def delete_media_item(
    session: Session, *, media_item_id: int, actor_id: int, list_id: int | None = None
) -> None:
    item = get_media_item(session, media_item_id, list_id)
    media_list = get_list(session, item.list_id)
    # collaborators can add, only the owner removes
    _require_owner(media_list, actor_id)
    session.delete(item)
    session.commit()


def rate_media_item(
    session: Session,
    *,
    media_item_id: int,
    actor_id: int,
    rating: int,
    list_id: int | None = None,
) -> float | None:
    """Store the user's rating, replacing a previous one; returns the new average"""
    if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
        raise InvalidOperation("Rating must be between 1 and 5")
    item = get_media_item(session, media_item_id, list_id)
    media_list = get_list(session, item.list_id)
    if not can_view(session, media_list, actor_id):
        raise Forbidden("Access denied")

    def existing_rating() -> Rating | None:
        return session.exec(
            select(Rating).where(
                Rating.media_item_id == item.id, Rating.user_id == actor_id
            )
        ).first()

    current = existing_rating()
    if current is None:
        session.add(Rating(media_item_id=item.id, user_id=actor_id, rating=rating))
        try:
            session.commit()
        except IntegrityError:
            # a concurrent first rating by the same user won the insert
            session.rollback()
            current = existing_rating()
    if current is not None:
        current.rating = rating
        current.updated_at = utcnow()
        session.add(current)
        session.commit()
    return average_rating(session, item.id)


def update_notes(
    session: Session,
    *,
    media_item_id: int,
    actor_id: int,
    notes: str | None,
    list_id: int | None = None,
) -> MediaItem:
    item = get_media_item(session, media_item_id, list_id)
    _require_writer(session, get_list(session, item.list_id), actor_id)
    item.notes = notes or None
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def set_watched_with(
    session: Session,
    *,
    media_item_id: int,
    actor_id: int,
    friend_ids_: list[int],
    list_id: int | None = None,
) -> list[int]:
    """Replace the set of friends the item was enjoyed with"""
    item = get_media_item(session, media_item_id, list_id)
    _require_writer(session, get_list(session, item.list_id), actor_id)

    wanted = set(friend_ids_)
    strangers = wanted - friend_ids(session, actor_id)
    if strangers:
        raise InvalidOperation(
            f"Not friends with: {', '.join(str(i) for i in sorted(strangers))}"
        )

    current = session.exec(
        select(WatchedWith).where(WatchedWith.media_item_id == item.id)
    ).all()
    for row in current:
        if row.friend_id not in wanted:
            session.delete(row)
    for friend_id in sorted(wanted - {row.friend_id for row in current}):
        session.add(WatchedWith(media_item_id=item.id, friend_id=friend_id))
    session.commit()
    return sorted(wanted)
