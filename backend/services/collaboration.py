import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.auth import User
from models.catalog import MediaList
from models.collaboration import Collaboration
from models.friendship import RequestStatus
from models.types import utcnow
from services.errors import Conflict, Forbidden, InvalidOperation, NotFound
from services.friendship import parse_response_status

logger = logging.getLogger("mediator.collaborations")


def is_collaborator(session: Session, list_id: int, user_id: int) -> bool:
    """Approval is the grant: checked every time someone writes to a list"""
    return (
        session.exec(
            select(Collaboration.id).where(
                Collaboration.list_id == list_id,
                Collaboration.user_id == user_id,
                Collaboration.status == RequestStatus.approved,
            )
        ).first()
        is not None
    )


def request_collaboration(
    session: Session, *, list_id: int, user_id: int
) -> Collaboration:
    media_list = session.get(MediaList, list_id)
    if not media_list:
        raise NotFound("List not found")
    if not media_list.is_public:
        raise Forbidden("This list is not public")
    if media_list.user_id == user_id:
        raise InvalidOperation("You cannot request to collaborate on your own list")

    # any previous request blocks a new one, rejected ones included
    existing = session.exec(
        select(Collaboration).where(
            Collaboration.list_id == list_id, Collaboration.user_id == user_id
        )
    ).first()
    if existing:
        raise Conflict("Collaboration request already exists")

    collaboration = Collaboration(list_id=list_id, user_id=user_id)
    session.add(collaboration)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Collaboration request already exists")
    session.refresh(collaboration)
    logger.debug(f"User {user_id} asked to collaborate on list {list_id}")
    return collaboration


def respond_to_collaboration(
    session: Session,
    *,
    request_id: int,
    status: str | RequestStatus,
    actor_id: int,
) -> Collaboration:
    status = parse_response_status(status)
    collaboration = session.get(Collaboration, request_id)
    if not collaboration:
        raise NotFound("Collaboration request not found")
    media_list = session.get(MediaList, collaboration.list_id)
    if not media_list:
        raise NotFound("List not found")
    if media_list.user_id != actor_id:
        raise Forbidden("Only the list owner can answer collaboration requests")

    collaboration.status = status
    collaboration.responded_at = utcnow()
    session.add(collaboration)
    session.commit()
    session.refresh(collaboration)
    logger.debug(f"Collaboration {collaboration.id} {status.value}")
    return collaboration


def list_incoming_for_owner(
    session: Session, user_id: int
) -> list[tuple[Collaboration, MediaList, User]]:
    """Requests against the lists the user owns, newest first"""
    rows = session.exec(
        select(Collaboration, MediaList, User)
        .join(MediaList, MediaList.id == Collaboration.list_id)
        .join(User, User.id == Collaboration.user_id)
        .where(MediaList.user_id == user_id)
        .order_by(Collaboration.requested_at.desc())
    ).all()
    return list(rows)


def list_outgoing_for_user(
    session: Session, user_id: int
) -> list[tuple[Collaboration, MediaList]]:
    rows = session.exec(
        select(Collaboration, MediaList)
        .join(MediaList, MediaList.id == Collaboration.list_id)
        .where(Collaboration.user_id == user_id)
        .order_by(Collaboration.requested_at.desc())
    ).all()
    return list(rows)


def list_collaborators(
    session: Session, *, list_id: int, actor_id: int
) -> list[tuple[Collaboration, User]]:
    media_list = session.get(MediaList, list_id)
    if not media_list:
        raise NotFound("List not found")
    if media_list.user_id != actor_id:
        raise Forbidden("Access denied")
    rows = session.exec(
        select(Collaboration, User)
        .join(User, User.id == Collaboration.user_id)
        .where(Collaboration.list_id == list_id)
        .order_by(Collaboration.requested_at.desc())
    ).all()
    return list(rows)
