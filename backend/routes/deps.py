from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from models.auth import User
from models.common import get_session
from services.search import SearchGateway
from services.security import verify_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> int | None:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    return verify_access_token(credentials.credentials)


def get_current_user(
    user_id: int | None = Depends(get_current_user_id),
    session: Session = Depends(get_session),
) -> User | None:
    if not user_id:
        return None
    return session.get(User, user_id)


def current_user(user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_search_gateway(request: Request) -> SearchGateway:
    return request.app.state.search
