from fastapi import APIRouter, Depends, Query

from routes.deps import get_search_gateway
from services.errors import InvalidOperation, NotFound
from services.search import SearchGateway
from utils import time_it

router = APIRouter(prefix="/search")

KINDS = {"movies": "Movie", "books": "Book", "albums": "Album"}


def _kind(kind: str) -> str:
    if kind not in KINDS:
        raise NotFound("Unknown search category")
    return kind


@router.get("/{kind}")
@time_it
async def search(
    kind: str,
    q: str = "",
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=50),
    gateway: SearchGateway = Depends(get_search_gateway),
):
    if not q.strip():
        raise InvalidOperation("Query parameter is required")
    adapter = gateway.adapter(_kind(kind))
    return await adapter.search(q.strip(), page=page, limit=limit)


@router.get("/{kind}/{external_id:path}")
async def details(
    kind: str,
    external_id: str,
    gateway: SearchGateway = Depends(get_search_gateway),
):
    adapter = gateway.adapter(_kind(kind))
    found = await adapter.details(external_id)
    if not found:
        raise NotFound(f"{KINDS[kind]} not found")
    return found
