"""FastAPI application entry point."""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from api.routes import game, league
from api.schemas import ErrorResponse
from config import config
from core.errors import (
    ArithmeticOverflow,
    AuthorizationError,
    EligibilityError,
    GameError,
    StateConflictError,
    TerminalOutcome,
    ValidationError,
)

logging.basicConfig(level=config.logging.level, format=config.logging.format)
logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    enabled=config.rate_limit.enabled,
    default_limits=[f"{config.rate_limit.requests_per_minute}/minute"],
)

# HTTP status per error category
ERROR_STATUS: dict[type[GameError], int] = {
    ValidationError: 400,
    AuthorizationError: 403,
    StateConflictError: 409,
    TerminalOutcome: 409,
    EligibilityError: 403,
    ArithmeticOverflow: 500,
}


def error_status(exc: GameError) -> int:
    """Map a game error to its HTTP status code."""
    for category, status in ERROR_STATUS.items():
        if isinstance(exc, category):
            return status
    return 400


def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


def _game_error_handler(request: Request, exc: GameError) -> JSONResponse:
    """Report a game error with its stable code."""
    status = error_status(exc)
    log = logger.error if status >= 500 else logger.info
    log("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content={"error": exc.code, "detail": exc.message},
    )


app = FastAPI(
    title="High/Low League",
    description="Seeded High/Low card game with a prize-pool leaderboard",
    version="0.1.0",
)

# Add rate limiter to app state and exception handlers
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(GameError, _game_error_handler)

# CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors.allowed_origins,
    allow_credentials=config.cors.allow_credentials,
    allow_methods=config.cors.allow_methods,
    allow_headers=config.cors.allow_headers,
)


@app.get("/api/health")
@limiter.limit(f"{config.rate_limit.requests_per_minute}/minute")
async def health_check(request: Request) -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in sorted(set(ERROR_STATUS.values()))
}
app.include_router(game.router, prefix="/api/game", tags=["game"], responses=ERROR_RESPONSES)
app.include_router(league.router, prefix="/api/league", tags=["league"], responses=ERROR_RESPONSES)


def run() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.logging.level.lower())


if __name__ == "__main__":
    run()
