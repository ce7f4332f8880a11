from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from models.auth import User
from models.common import CamelModel, get_session
from models.friendship import FriendRequest
from routes.deps import current_user
from services import friendship as svc
from services.errors import InvalidOperation

router = APIRouter(prefix="/friends")


class FriendRequestPayload(CamelModel):
    to_user_id: int | None = None


class RespondPayload(BaseModel):
    status: str | None = None


def _request_payload(fr: FriendRequest, other: User) -> dict:
    return {
        "id": fr.id,
        "from_user_id": fr.from_user_id,
        "to_user_id": fr.to_user_id,
        "status": fr.status,
        "requested_at": fr.requested_at.isoformat(),
        "responded_at": fr.responded_at.isoformat() if fr.responded_at else None,
        "username": other.username,
    }


@router.get("")
async def list_friends(
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return [
        {"id": friend.id, "username": friend.username}
        for friend in svc.list_friends(session, user.id)
    ]


@router.get("/directory")
async def directory(
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return svc.directory(session, user.id)


@router.get("/search/{username}")
async def search_users(
    username: str,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return svc.search_users(session, user.id, username)


@router.post("/request")
async def send_friend_request(
    payload: FriendRequestPayload,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    if not payload.to_user_id:
        raise InvalidOperation("toUserId is required")
    fr = svc.send_friend_request(
        session, from_user_id=user.id, to_user_id=payload.to_user_id
    )
    return {"message": "Friend request sent", "requestId": fr.id}


@router.get("/requests/incoming")
async def incoming_requests(
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return [
        _request_payload(fr, sender)
        for fr, sender in svc.list_incoming_requests(session, user.id)
    ]


@router.get("/requests/outgoing")
async def outgoing_requests(
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return [
        _request_payload(fr, recipient)
        for fr, recipient in svc.list_outgoing_requests(session, user.id)
    ]


@router.post("/request/{request_id}/respond")
async def respond_to_friend_request(
    request_id: int,
    payload: RespondPayload,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    fr = svc.respond_to_friend_request(
        session, request_id=request_id, status=payload.status, actor_id=user.id
    )
    return {"message": f"Friend request {fr.status.value}", "status": fr.status}


@router.delete("/request/outgoing/{to_user_id}")
async def cancel_friend_request(
    to_user_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    cancelled = svc.cancel_friend_request(
        session, from_user_id=user.id, to_user_id=to_user_id
    )
    return {"message": "Friend request cancelled", "cancelled": cancelled}


@router.delete("/{friend_id}")
async def remove_friend(
    friend_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    removed = svc.remove_friend(session, user_id=user.id, other_id=friend_id)
    return {"message": "Friend removed", "removed": removed}
