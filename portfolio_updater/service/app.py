"""FastAPI application exposing the chat, setup and health endpoints."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any, Callable, List, Optional, TypeVar

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import ServiceConfig, load_config
from ..errors import ServiceError
from ..logging import get_logger
from ..orchestrator import ContentOrchestrator, SetupOutcome, UpdateOutcome

logger = get_logger("service")

_T = TypeVar("_T")


class ChatRequest(BaseModel):
    prompt: Optional[str] = None


class ChatResponse(BaseModel):
    ok: bool = True
    repository: str
    branch: str
    commitSha: str
    commitUrl: str
    files: List[str]


class SetupResponse(BaseModel):
    ok: bool = True
    repository: str
    branch: str
    setup: Optional[str] = None
    message: Optional[str] = None
    commitSha: Optional[str] = None
    commitUrl: Optional[str] = None
    files: Optional[List[str]] = None


class HealthResponse(BaseModel):
    ok: bool
    service: str
    now: str


def cors_headers(config: ServiceConfig) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": config.cors_origin,
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type,Authorization,X-Setup-Key",
    }


def _error_response(
    status_code: int,
    message: str,
    *,
    retryable: bool = False,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "error": message, "retryable": retryable},
        headers=headers,
    )


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


async def _in_executor(func: Callable[[], _T]) -> _T:
    # Orchestrator calls block on HTTP; keep the event loop free for other requests.
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def create_app(
    config: ServiceConfig | None = None,
    orchestrator_factory: Callable[[ServiceConfig], ContentOrchestrator] = ContentOrchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing content-update operations."""

    settings = config or load_config()
    app = FastAPI(title="Portfolio Updater", version="1.0.0")
    app.state.config = settings

    async def get_orchestrator() -> ContentOrchestrator:
        # One orchestrator per request keeps request state isolated.
        return orchestrator_factory(settings)

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next: Any) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=cors_headers(settings))
        response = await call_next(request)
        response.headers.update(cors_headers(settings))
        return response

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            ok=True,
            service=settings.service_name,
            now=datetime.now(UTC).isoformat(),
        )

    @app.post("/chat", response_model=ChatResponse)
    async def chat(
        payload: ChatRequest,
        orchestrator: ContentOrchestrator = Depends(get_orchestrator),
    ) -> ChatResponse:
        outcome: UpdateOutcome = await _in_executor(
            lambda: orchestrator.run_update(payload.prompt)
        )
        return ChatResponse(
            repository=outcome.repository,
            branch=outcome.branch,
            commitSha=outcome.commit.sha,
            commitUrl=outcome.commit.url,
            files=outcome.files,
        )

    @app.post(
        "/setup",
        response_model=SetupResponse,
        response_model_exclude_none=True,
    )
    async def setup(
        orchestrator: ContentOrchestrator = Depends(get_orchestrator),
        x_setup_key: Optional[str] = Header(default=None),
        authorization: Optional[str] = Header(default=None),
    ) -> SetupResponse:
        provided = x_setup_key or _bearer_token(authorization)
        outcome: SetupOutcome = await _in_executor(lambda: orchestrator.run_setup(provided))
        if outcome.commit is None:
            return SetupResponse(
                repository=outcome.repository,
                branch=outcome.branch,
                message="Setup already completed. No changes applied.",
            )
        return SetupResponse(
            repository=outcome.repository,
            branch=outcome.branch,
            setup="completed",
            commitSha=outcome.commit.sha,
            commitUrl=outcome.commit.url,
            files=outcome.files,
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(_: Request, exc: ServiceError) -> JSONResponse:
        upstream_status = getattr(exc, "upstream_status", None)
        if upstream_status is not None:
            logger.warning(
                "%s (%d, upstream %d): %s",
                type(exc).__name__,
                exc.status_code,
                upstream_status,
                exc.message,
            )
        else:
            logger.warning("%s (%d): %s", type(exc).__name__, exc.status_code, exc.message)
        return _error_response(exc.status_code, exc.message, retryable=exc.retryable)

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, "Invalid JSON body.")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unrouted paths and unsupported methods share one response.
        if exc.status_code in (404, 405):
            return _error_response(404, "Not found")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(_: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error while serving request")
        # Runs outside the CORS middleware, so the headers are attached here.
        return _error_response(500, "Internal server error.", headers=cors_headers(settings))

    return app


def run_service(
    host: str = "0.0.0.0", port: int = 8000, config: ServiceConfig | None = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(config)
    uvicorn.run(app, host=host, port=port)
