from typing import Any

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from models.auth import User
from models.common import CamelModel, get_session
from routes.deps import current_user
from services import catalog
from services.errors import InvalidOperation

router = APIRouter(prefix="/lists")


class ListPayload(CamelModel):
    name: str | None = None
    description: str | None = None
    is_public: bool | None = None


class AutoListPayload(CamelModel):
    media_type: str | None = None


class MediaItemPayload(CamelModel):
    media_type: str | None = None
    external_id: str | int | None = None
    title: str | None = None
    year: str | int | None = None
    poster_url: str | None = None
    additional_data: dict[str, Any] | None = None


class RatingPayload(CamelModel):
    rating: int | None = None


class NotesPayload(CamelModel):
    notes: str | None = None


class WatchedWithPayload(CamelModel):
    friend_ids: list[int] = []


@router.get("")
async def my_lists(
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return [ml.model_dump(mode="json") for ml in catalog.lists_for_user(session, user.id)]


@router.get("/public")
async def public_lists(session: Session = Depends(get_session)):
    return [ml.model_dump(mode="json") for ml in catalog.public_lists(session)]


@router.post("/auto")
async def auto_list(
    payload: AutoListPayload,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    """Get, or lazily create, the user's default list for a media type"""
    media_list = catalog.get_or_create_auto_list(
        session, user_id=user.id, media_type=payload.media_type
    )
    return media_list.model_dump(mode="json")


@router.get("/user/{user_id}/auto/{media_type}")
async def user_auto_list(
    user_id: int,
    media_type: str,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return catalog.user_auto_list_detail(
        session, user_id=user_id, media_type=media_type, viewer_id=user.id
    )


@router.post("", status_code=201)
async def create_list(
    payload: ListPayload,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    media_list = catalog.create_list(
        session,
        user_id=user.id,
        name=payload.name,
        description=payload.description,
        is_public=payload.is_public is not False,
    )
    return media_list.model_dump(mode="json")


@router.get("/{list_id}")
async def get_list(
    list_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return catalog.list_detail(session, list_id=list_id, viewer_id=user.id)


@router.put("/{list_id}")
async def update_list(
    list_id: int,
    payload: ListPayload,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    media_list = catalog.update_list(
        session,
        list_id=list_id,
        actor_id=user.id,
        name=payload.name,
        description=payload.description,
        is_public=payload.is_public,
    )
    return media_list.model_dump(mode="json")


@router.delete("/{list_id}")
async def delete_list(
    list_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    catalog.delete_list(session, list_id=list_id, actor_id=user.id)
    return {"message": "List deleted successfully"}


@router.post("/{list_id}/media", status_code=201)
async def add_media_item(
    list_id: int,
    payload: MediaItemPayload,
    response: Response,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    item, created = catalog.add_media_item(
        session,
        list_id=list_id,
        actor_id=user.id,
        media_type=payload.media_type,
        external_id=payload.external_id,
        title=payload.title,
        year=str(payload.year) if payload.year is not None else None,
        poster_url=payload.poster_url,
        additional_data=payload.additional_data,
    )
    if not created:
        response.status_code = 200
    return item.model_dump(mode="json")


@router.post("/{list_id}/media/{media_id}/rate")
async def rate_media_item(
    list_id: int,
    media_id: int,
    payload: RatingPayload,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    if payload.rating is None:
        raise InvalidOperation("Rating must be between 1 and 5")
    average = catalog.rate_media_item(
        session,
        media_item_id=media_id,
        actor_id=user.id,
        rating=payload.rating,
        list_id=list_id,
    )
    return {"message": "Rating saved", "averageRating": average}


@router.put("/{list_id}/media/{media_id}/notes")
async def update_notes(
    list_id: int,
    media_id: int,
    payload: NotesPayload,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    item = catalog.update_notes(
        session,
        media_item_id=media_id,
        actor_id=user.id,
        notes=payload.notes,
        list_id=list_id,
    )
    return item.model_dump(mode="json")


@router.put("/{list_id}/media/{media_id}/watched-with")
async def set_watched_with(
    list_id: int,
    media_id: int,
    payload: WatchedWithPayload,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    watched_with = catalog.set_watched_with(
        session,
        media_item_id=media_id,
        actor_id=user.id,
        friend_ids_=payload.friend_ids,
        list_id=list_id,
    )
    return {"mediaItemId": media_id, "watchedWith": watched_with}


@router.delete("/{list_id}/media/{media_id}")
async def delete_media_item(
    list_id: int,
    media_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    catalog.delete_media_item(
        session, media_item_id=media_id, actor_id=user.id, list_id=list_id
    )
    return {"message": "Media item deleted successfully"}
