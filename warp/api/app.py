"""
FastAPI Application - REST API for the game client.

Endpoints:
    POST   /api/generate-level     Generate and validate a level from a prompt
    POST   /api/npc-dialog         Generate (or reuse cached) NPC dialog
    POST   /api/levels/adaptive    Adapt difficulty and generate the next level
    POST   /api/npc-chat           Sanitize player text and get an NPC reply
    POST   /api/difficulty         Compute the next difficulty (no backend call)
    GET    /api/health             Liveness and backend configuration

The caller identity used for rate limiting is the client host. It is never
logged or stored beyond the admission window.

All responses are JSON with explicit Pydantic schemas.
"""

from datetime import datetime, timezone
import logging
import os
from typing import Optional, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..errors import InvalidInput, RateLimited
from ..gateway import Gateway, GatewayConfig, GeminiBackend, DialogResult
from ..prompting import PerformanceStats, next_difficulty, difficulty_to_description
from .schemas import (
    # Request models
    GenerateLevelRequest,
    NpcDialogRequest,
    AdaptiveLevelRequest,
    NpcChatRequest,
    DifficultyRequest,
    PerformanceStatsInfo,
    # Response models
    ErrorResponse,
    LevelResponse,
    LevelErrorResponse,
    AdaptiveLevelResponse,
    AdaptiveLevelErrorResponse,
    DialogResponse,
    DialogErrorResponse,
    DifficultyResponse,
    HealthResponse,
    LevelData,
)

# Environment configuration
WARP_ENV = os.getenv("WARP_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def _stats_from_model(stats: PerformanceStatsInfo) -> PerformanceStats:
    return PerformanceStats.from_dict(stats.model_dump())


def create_app(gateway: Optional[Gateway] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        gateway: Optional Gateway instance (built from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    if gateway is None:
        config = GatewayConfig.from_env()
        backend = GeminiBackend.from_config(config)
        if not backend.configured:
            logger.warning("GEMINI_API_KEY is not set; generation requests will fall back")
        gateway = Gateway(backend, config=config)

    app = FastAPI(
        title="Warp Level Gateway API",
        description="""
Generative level and NPC dialog gateway for a 2.5D platformer.

## Failure handling

| Status | Meaning |
|--------|---------|
| `400` | Prompt missing, not text, or too long |
| `429` | Rate limit exceeded for this client |
| `500` | Generation failed; body carries a fallback |

Generated levels are always validated. A level that fails any rule is
discarded entirely and reported as `{"error": ..., "fallback": true}`.
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.gateway = gateway

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(message: str, status_code: int = 400) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=message).model_dump(by_alias=True),
        )

    def caller_identity(request: Request) -> str:
        return request.client.host if request.client else "unknown"

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput):
        return make_error_response(str(exc), status_code=400)

    @app.exception_handler(RateLimited)
    async def rate_limited_handler(request: Request, exc: RateLimited):
        return make_error_response(str(exc), status_code=429)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return make_error_response("Invalid request body", status_code=400)

    def dialog_response(result: DialogResult) -> Union[DialogResponse, JSONResponse]:
        if not result.ok:
            return JSONResponse(
                status_code=500,
                content=DialogErrorResponse(
                    error=result.error, dialog=result.dialog
                ).model_dump(by_alias=True),
            )
        return DialogResponse(dialog=result.dialog, cached=result.cached)

    # =========================================================================
    # Level Endpoints
    # =========================================================================

    @app.post(
        "/api/generate-level",
        response_model=LevelResponse,
        responses={
            400: {"model": ErrorResponse},
            429: {"model": ErrorResponse},
            500: {"model": LevelErrorResponse},
        },
        tags=["Levels"],
        summary="Generate a validated level from a prompt",
    )
    async def generate_level(body: GenerateLevelRequest, request: Request):
        """
        Generate a level. The backend output is extracted and validated;
        only a fully playable level is returned.
        """
        result = await gateway.generate_level(body.prompt, caller_identity(request))
        if not result.ok:
            return JSONResponse(
                status_code=500,
                content=LevelErrorResponse(error=result.error).model_dump(by_alias=True),
            )
        return LevelResponse(level_data=LevelData.model_validate(result.level.to_dict()))

    @app.post(
        "/api/levels/adaptive",
        response_model=AdaptiveLevelResponse,
        responses={
            400: {"model": ErrorResponse},
            429: {"model": ErrorResponse},
            500: {"model": AdaptiveLevelErrorResponse},
        },
        tags=["Levels"],
        summary="Generate the next level adapted to player performance",
    )
    async def generate_adaptive_level(body: AdaptiveLevelRequest, request: Request):
        """
        Compute the next difficulty from the last level's stats, then
        compose the level prompt server-side and generate.
        """
        result = await gateway.generate_adaptive_level(
            _stats_from_model(body.stats),
            body.level_number,
            caller_identity(request),
        )
        if not result.ok:
            return JSONResponse(
                status_code=500,
                content=AdaptiveLevelErrorResponse(
                    error=result.error, difficulty=result.difficulty
                ).model_dump(by_alias=True),
            )
        return AdaptiveLevelResponse(
            difficulty=result.difficulty,
            level_data=LevelData.model_validate(result.level.to_dict()),
        )

    @app.post(
        "/api/difficulty",
        response_model=DifficultyResponse,
        tags=["Levels"],
        summary="Compute the next difficulty",
    )
    async def compute_difficulty(body: DifficultyRequest) -> DifficultyResponse:
        """Pure computation; not rate limited and never calls the backend."""
        difficulty = next_difficulty(_stats_from_model(body.stats))
        return DifficultyResponse(
            difficulty=difficulty,
            description=difficulty_to_description(difficulty),
        )

    # =========================================================================
    # Dialog Endpoints
    # =========================================================================

    @app.post(
        "/api/npc-dialog",
        response_model=DialogResponse,
        responses={
            400: {"model": ErrorResponse},
            429: {"model": ErrorResponse},
            500: {"model": DialogErrorResponse},
        },
        tags=["Dialog"],
        summary="Generate NPC dialog from a prompt",
    )
    async def npc_dialog(body: NpcDialogRequest, request: Request):
        """
        Generate NPC dialog. Replies are cached by `cacheKey`; a cached
        reply is returned with `cached=true` without calling the backend.
        """
        result = await gateway.generate_dialog(
            body.prompt, body.cache_key, caller_identity(request)
        )
        return dialog_response(result)

    @app.post(
        "/api/npc-chat",
        response_model=DialogResponse,
        responses={
            400: {"model": ErrorResponse},
            429: {"model": ErrorResponse},
            500: {"model": DialogErrorResponse},
        },
        tags=["Dialog"],
        summary="Talk to an NPC with raw player text",
    )
    async def npc_chat(body: NpcChatRequest, request: Request):
        """
        Player text is sanitized here before it is embedded in a prompt.
        """
        result = await gateway.converse(
            body.npc_name,
            body.player_message,
            body.level_number,
            caller_identity(request),
        )
        return dialog_response(result)

    # =========================================================================
    # Health
    # =========================================================================

    @app.get(
        "/api/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            has_api_key=bool(gateway.config.api_key),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    logger.debug("Warp API created (env=%s)", WARP_ENV)
    return app


# For running directly: uvicorn warp.api.app:app
app = create_app()
