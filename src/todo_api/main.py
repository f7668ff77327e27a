from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .errors import RepositoryError
from .logging_config import configure_logging
from .repositories import LabelRepository, TodoRepository, build_repositories
from .routers import labels as labels_router
from .routers import todos as todos_router
from .schemas import UserCreate, UserOut
from .settings import Settings, get_settings

logger = structlog.get_logger(__name__)

openapi_tags = [
    {"name": "root", "description": "Greeting and sample user endpoints."},
    {"name": "todos", "description": "CRUD operations for Todo items."},
    {"name": "labels", "description": "Create, list and delete Labels."},
]

# The id handed back by POST /users; users are not persisted.
SAMPLE_USER_ID = 1337


def _add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(RepositoryError)
    async def repository_exception_handler(request: Request, exc: RepositoryError) -> JSONResponse:
        logger.error(
            "repository_error",
            error=type(exc).__name__,
            message=exc.message,
            method=request.method,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=exc.to_dict(),
        )


# PUBLIC_INTERFACE
def create_app(
    todo_repository: Optional[TodoRepository] = None,
    label_repository: Optional[LabelRepository] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the FastAPI application around a pair of repositories.

    Any repository left out is constructed from settings (PERSISTENCE_BACKEND).
    The same routers are mounted whichever backend is in use.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    if todo_repository is None or label_repository is None:
        default_todos, default_labels = build_repositories(settings)
        todo_repository = todo_repository or default_todos
        label_repository = label_repository or default_labels

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "application_starting",
            backend=type(app.state.todo_repository).__name__,
            cors_origins=settings.cors_allow_origins,
        )
        yield
        logger.info("application_shutting_down")

    app = FastAPI(
        title="Todo API",
        description="CRUD service for todos and labels with pluggable storage backends.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.todo_repository = todo_repository
    app.state.label_repository = label_repository

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                process_time_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response

    _add_exception_handlers(app)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Hello", tags=["root"], response_class=PlainTextResponse)
    def root() -> str:
        return "Hello, World!"

    # PUBLIC_INTERFACE
    @app.post(
        "/users",
        response_model=UserOut,
        status_code=status.HTTP_201_CREATED,
        summary="Create User",
        tags=["root"],
    )
    def create_user(payload: UserCreate) -> UserOut:
        """
        Echo the submitted username back with a fixed sample id.
        """
        return UserOut(id=SAMPLE_USER_ID, username=payload.username)

    app.include_router(todos_router.router)
    app.include_router(labels_router.router)
    return app


app = create_app()
