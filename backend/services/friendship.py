import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.auth import User
from models.friendship import (
    FriendRequest,
    Friendship,
    RequestStatus,
    canonical_pair,
)
from models.types import utcnow
from services.errors import Conflict, Forbidden, InvalidOperation, NotFound

logger = logging.getLogger("mediator.friends")

RESPONSES = (RequestStatus.approved, RequestStatus.rejected)


def parse_response_status(status: str | RequestStatus) -> RequestStatus:
    try:
        parsed = RequestStatus(status)
    except ValueError:
        parsed = None
    if parsed not in RESPONSES:
        raise InvalidOperation("Status must be either approved or rejected")
    return parsed


def get_friendship(session: Session, a: int, b: int) -> Friendship | None:
    low, high = canonical_pair(a, b)
    return session.exec(
        select(Friendship).where(
            Friendship.user_id_1 == low,
            Friendship.user_id_2 == high,
        )
    ).first()


def are_friends(session: Session, a: int, b: int) -> bool:
    return get_friendship(session, a, b) is not None


def get_pending_request(session: Session, a: int, b: int) -> FriendRequest | None:
    """The pending request between two users, whichever direction it goes"""
    low, high = canonical_pair(a, b)
    return session.exec(
        select(FriendRequest).where(
            FriendRequest.pair_low_id == low,
            FriendRequest.pair_high_id == high,
            FriendRequest.status == RequestStatus.pending,
        )
    ).first()


def has_pending_request(session: Session, a: int, b: int) -> bool:
    return get_pending_request(session, a, b) is not None


def send_friend_request(
    session: Session, *, from_user_id: int, to_user_id: int
) -> FriendRequest:
    if from_user_id == to_user_id:
        raise InvalidOperation("Cannot send friend request to yourself")
    if session.get(User, to_user_id) is None:
        raise NotFound("User not found")

    # check and insert share the session transaction, the partial unique
    # index catches whoever loses a race between the two
    if are_friends(session, from_user_id, to_user_id):
        raise Conflict("Already friends")
    pending = get_pending_request(session, from_user_id, to_user_id)
    if pending:
        if pending.from_user_id == from_user_id:
            raise Conflict("Friend request already sent")
        raise Conflict("This user already sent you a friend request")

    request = FriendRequest.between(from_user_id, to_user_id)
    session.add(request)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Friend request already sent")
    session.refresh(request)
    logger.debug(f"Friend request {request.id}: {from_user_id} -> {to_user_id}")
    return request


def respond_to_friend_request(
    session: Session,
    *,
    request_id: int,
    status: str | RequestStatus,
    actor_id: int,
) -> FriendRequest:
    status = parse_response_status(status)
    request = session.get(FriendRequest, request_id)
    if request is None:
        raise NotFound("Friend request not found")
    if request.to_user_id != actor_id:
        raise Forbidden("Only the recipient can respond to a friend request")
    if request.status != RequestStatus.pending:
        raise InvalidOperation("Friend request was already answered")

    request.status = status
    request.responded_at = utcnow()
    session.add(request)
    if status == RequestStatus.approved and not are_friends(
        session, request.from_user_id, request.to_user_id
    ):
        low, high = canonical_pair(request.from_user_id, request.to_user_id)
        session.add(Friendship(user_id_1=low, user_id_2=high))
    try:
        session.commit()
    except IntegrityError:
        # the friendship row appeared concurrently: keep the answer anyway
        session.rollback()
        request = session.get(FriendRequest, request_id)
        request.status = status
        request.responded_at = utcnow()
        session.add(request)
        session.commit()
    session.refresh(request)
    logger.debug(f"Friend request {request.id} {status.value}")
    return request


def cancel_friend_request(
    session: Session, *, from_user_id: int, to_user_id: int
) -> bool:
    """Withdraw a pending outgoing request, False when there was nothing to cancel"""
    request = session.exec(
        select(FriendRequest).where(
            FriendRequest.from_user_id == from_user_id,
            FriendRequest.to_user_id == to_user_id,
            FriendRequest.status == RequestStatus.pending,
        )
    ).first()
    if not request:
        return False
    session.delete(request)
    session.commit()
    return True


def remove_friend(session: Session, *, user_id: int, other_id: int) -> bool:
    """Drop the friendship; the request history stays where it is"""
    friendship = get_friendship(session, user_id, other_id)
    if not friendship:
        return False
    session.delete(friendship)
    session.commit()
    logger.debug(f"Friendship {user_id} <-> {other_id} removed")
    return True


def friend_ids(session: Session, user_id: int) -> set[int]:
    friendships = session.exec(
        select(Friendship).where(
            or_(Friendship.user_id_1 == user_id, Friendship.user_id_2 == user_id)
        )
    ).all()
    return {fr.other(user_id) for fr in friendships}


def list_friends(session: Session, user_id: int) -> list[User]:
    ids = friend_ids(session, user_id)
    if not ids:
        return []
    return list(
        session.exec(select(User).where(User.id.in_(ids)).order_by(User.username))
    )


def list_incoming_requests(
    session: Session, user_id: int
) -> list[tuple[FriendRequest, User]]:
    rows = session.exec(
        select(FriendRequest, User)
        .join(User, User.id == FriendRequest.from_user_id)
        .where(
            FriendRequest.to_user_id == user_id,
            FriendRequest.status == RequestStatus.pending,
        )
        .order_by(FriendRequest.requested_at.desc())
    ).all()
    return list(rows)


def list_outgoing_requests(
    session: Session, user_id: int
) -> list[tuple[FriendRequest, User]]:
    rows = session.exec(
        select(FriendRequest, User)
        .join(User, User.id == FriendRequest.to_user_id)
        .where(
            FriendRequest.from_user_id == user_id,
            FriendRequest.status == RequestStatus.pending,
        )
        .order_by(FriendRequest.requested_at.desc())
    ).all()
    return list(rows)


def _pending_peer_ids(session: Session, user_id: int) -> set[int]:
    requests = session.exec(
        select(FriendRequest).where(
            FriendRequest.status == RequestStatus.pending,
            or_(
                FriendRequest.from_user_id == user_id,
                FriendRequest.to_user_id == user_id,
            ),
        )
    ).all()
    return {
        fr.to_user_id if fr.from_user_id == user_id else fr.from_user_id
        for fr in requests
    }


def _directory_entries(session: Session, user_id: int, users) -> list[dict]:
    friends = friend_ids(session, user_id)
    pending = _pending_peer_ids(session, user_id)
    return [
        {
            "id": user.id,
            "username": user.username,
            "isFriend": user.id in friends,
            "hasPendingRequest": user.id in pending,
        }
        for user in users
    ]


def directory(session: Session, user_id: int) -> list[dict]:
    users = session.exec(
        select(User).where(User.id != user_id).order_by(User.username)
    ).all()
    return _directory_entries(session, user_id, users)


def search_users(session: Session, user_id: int, query: str) -> list[dict]:
    query = (query or "").strip()
    if len(query) < 2:
        raise InvalidOperation("Username must be at least 2 characters")
    users = session.exec(
        select(User)
        .where(User.id != user_id, User.username.icontains(query, autoescape=True))
        .order_by(User.username)
        .limit(50)
    ).all()
    return _directory_entries(session, user_id, users)
