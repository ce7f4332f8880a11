from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from models.auth import User
from models.common import CamelModel, get_session
from routes.deps import current_user
from services import collaboration as svc
from services.errors import InvalidOperation

router = APIRouter(prefix="/collaborations")


class CollaborationRequestPayload(CamelModel):
    list_id: int | None = None


class RespondPayload(BaseModel):
    status: str | None = None


@router.post("/request", status_code=201)
async def request_collaboration(
    payload: CollaborationRequestPayload,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    if not payload.list_id:
        raise InvalidOperation("List ID is required")
    collaboration = svc.request_collaboration(
        session, list_id=payload.list_id, user_id=user.id
    )
    return collaboration.model_dump(mode="json")


@router.get("/requests")
async def incoming_requests(
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    """Requests made against the lists the current user owns"""
    return [
        {
            **collaboration.model_dump(mode="json"),
            "listName": media_list.name,
            "username": requester.username,
        }
        for collaboration, media_list, requester in svc.list_incoming_for_owner(
            session, user.id
        )
    ]


@router.get("/my-requests")
async def my_requests(
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return [
        {**collaboration.model_dump(mode="json"), "listName": media_list.name}
        for collaboration, media_list in svc.list_outgoing_for_user(session, user.id)
    ]


@router.put("/requests/{request_id}")
async def respond_to_collaboration(
    request_id: int,
    payload: RespondPayload,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    collaboration = svc.respond_to_collaboration(
        session, request_id=request_id, status=payload.status, actor_id=user.id
    )
    return collaboration.model_dump(mode="json")


@router.get("/list/{list_id}")
async def list_collaborators(
    list_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return [
        {**collaboration.model_dump(mode="json"), "username": collaborator.username}
        for collaboration, collaborator in svc.list_collaborators(
            session, list_id=list_id, actor_id=user.id
        )
    ]
