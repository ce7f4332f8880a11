import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import setproctitle

import settings
from brotli_asgi import BrotliMiddleware
from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from routes.auth_route import get_version, router as auth_router
from routes.collaboration_route import router as collaboration_router
from routes.friendship_route import router as friendship_router
from routes.lists_route import router as lists_router
from routes.search_route import router as search_router
from services.errors import MediatorError
from services.search import SearchGateway
from starlette.middleware import Middleware

from utils import setup_logs

logger = logging.getLogger("mediator.main")
setup_logs()
setproctitle.setproctitle("Mediator API")


def update_database():  # pragma: no cover
    """Init the DB or run the Alembic migrations"""
    import alembic.config

    if not Path("alembic.ini").is_file():
        os.chdir(settings.BACKEND_DIR)

    try:
        alembic.config.main(
            argv=[
                "--raiseerr",
                "upgrade",
                "head",
            ]
        )
    except Exception as e:
        logger.exception(f"Cannot run DB migrations: {e}")


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app"""
    logger.debug("Starting...")
    update_database()
    search = SearchGateway()
    app.state.search = search
    yield
    await search.close()
    logger.debug("Closing app")


async def mediator_error_handler(request: Request, exc: MediatorError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.message}, headers=headers
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""

    app = FastAPI(
        title="Mediator",
        description="Catalog, rate and share movies, books and albums",
        version=get_version(),
        middleware=[
            Middleware(BrotliMiddleware, minimum_size=1000),
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["*"],
                allow_headers=["*"],
            ),
        ],
        swagger_ui_parameters={
            "defaultModelsExpandDepth": 0,
        },  # collapse the swagger schema
        lifespan=app_lifespan,
    )
    app.add_exception_handler(MediatorError, mediator_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # Mount routers
    api_router = APIRouter()
    api_router.include_router(auth_router, tags=["auth"])
    api_router.include_router(search_router, tags=["search"])
    api_router.include_router(lists_router, tags=["lists"])
    api_router.include_router(collaboration_router, tags=["collaborations"])
    api_router.include_router(friendship_router, tags=["friends"])
    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app
