from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .errors import ForwardedError, error_message
from .repositories import TodoStore, build_store
from .routers import todos as todos_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

openapi_tags = [
    {"name": "health", "description": "Service health and store connectivity."},
    {
        "name": "todos",
        "description": "CRUD operations for Todo items.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    store: TodoStore = app.state.store
    # Connection failures are logged by the store; startup continues degraded.
    await run_in_threadpool(store.open)
    try:
        yield
    finally:
        await run_in_threadpool(store.close)


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, store: Optional[TodoStore] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use; read from the environment when omitted.
        store: Store instance to serve; built from settings when omitted.

    Returns:
        The configured FastAPI app. Logging is configured and the store is
        opened on startup; the store is closed on shutdown (app lifespan).
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Todo API",
        description="REST API for managing todos backed by a document store.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store or build_store(settings)
    logger.info("Using %s todo store", app.state.store.name)

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ForwardedError)
    async def forwarded_error_handler(request: Request, exc: ForwardedError) -> JSONResponse:
        """
        Translate any forwarded handler error into a 500 response whose body is
        the original error's message.
        """
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=(type(exc.error), exc.error, exc.error.__traceback__),
        )
        return JSONResponse(status_code=500, content={"message": error_message(exc.error)})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "message": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "message": "Request validation failed",
                "detail": jsonable_errors(exc),
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check(request: Request) -> JSONResponse:
        """
        Health check endpoint.

        Returns:
            200 with message 'Healthy' when the store is reachable, otherwise
            503 with message 'Degraded'.
        """
        current: TodoStore = request.app.state.store
        ready = current.is_ready()
        return JSONResponse(
            status_code=200 if ready else 503,
            content={
                "message": "Healthy" if ready else "Degraded",
                "backend": current.name,
                "store_ready": ready,
            },
        )

    # Include routers
    app.include_router(todos_router.router)
    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Strip non-serializable context (e.g. exception objects) from validation errors."""
    return [
        {key: value for key, value in err.items() if key in {"type", "loc", "msg"}}
        for err in exc.errors()
    ]


app = create_app()
