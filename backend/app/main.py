from __future__ import annotations
import asyncio
import uuid
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.logging_setup import configure_logging
from app.routes.system import router as system_router
from app.routes.auth import router as auth_router
from app.routes import admin, events, games, leaderboard, media, offers, players, scores
from app.services.feed import get_change_feed, relay_redis_changes
from app.services.verification import close_http_client
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    relay = None
    if settings.jobs_backend == "rq":
        # Fraud results are written by RQ workers; bring their change notices into this process
        relay = asyncio.create_task(
            relay_redis_changes(get_change_feed(), settings.redis_url, settings.score_changes_channel)
        )
    yield
    # Shutdown
    if relay is not None:
        relay.cancel()
        with suppress(asyncio.CancelledError):
            await relay
    await close_http_client()
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for arcade high-score events",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(auth_router)
app.include_router(players.router)
app.include_router(games.router)
app.include_router(events.router)
app.include_router(scores.router)
app.include_router(leaderboard.router)
app.include_router(offers.router)
app.include_router(media.router)
app.include_router(scores.admin_router)
app.include_router(players.admin_router)
app.include_router(games.admin_router)
app.include_router(events.admin_router)
app.include_router(offers.admin_router)
app.include_router(admin.router)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    structlog.contextvars.clear_contextvars()
    return response
