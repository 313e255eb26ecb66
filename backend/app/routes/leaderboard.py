from __future__ import annotations
import asyncio
from uuid import UUID
import structlog
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.db import get_session, get_sessionmaker
from app.models.catalog import Game
from app.models.submission import ScoreSubmission
from app.schemas.leaderboard import GameLeaderboard, TopScore
from app.services.feed import ChangeFeed, Subscription, get_change_feed
from app.services.ranking import rank_games, top_scores

log = structlog.get_logger()

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


async def _ranked_submissions(session: AsyncSession, exclude_rejected: bool = False) -> list[ScoreSubmission]:
    # Every status ranks unless the caller opts out of rejected scores
    stmt = select(ScoreSubmission)
    if exclude_rejected:
        stmt = stmt.where(ScoreSubmission.status != "rejected")
    return (await session.execute(stmt)).scalars().all()


async def _boards(
    session: AsyncSession, event_id: UUID | None, exclude_rejected: bool = False
) -> list[GameLeaderboard]:
    games = (await session.execute(select(Game))).scalars().all()
    return rank_games(await _ranked_submissions(session, exclude_rejected), games, event_id=event_id)


@router.get("", response_model=list[GameLeaderboard])
async def leaderboard(
    event_id: UUID | None = Query(default=None),
    exclude_rejected: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
):
    return await _boards(session, event_id, exclude_rejected)


@router.get("/top", response_model=list[TopScore])
async def top(
    limit: int = Query(default=10, ge=1, le=100),
    event_id: UUID | None = Query(default=None),
    exclude_rejected: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
):
    return top_scores(await _ranked_submissions(session, exclude_rejected), limit=limit, event_id=event_id)


async def _watch_disconnect(websocket: WebSocket, sub: Subscription) -> None:
    # Clients never send anything; a receive only returns when they go away
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        sub.cancel()


@router.websocket("/ws")
async def leaderboard_ws(
    websocket: WebSocket,
    event_id: UUID | None = None,
    exclude_rejected: bool = False,
    sessionmaker: async_sessionmaker[AsyncSession] = Depends(get_sessionmaker),
    feed: ChangeFeed = Depends(get_change_feed),
):
    async def snapshot() -> list[dict]:
        async with sessionmaker() as session:
            return [b.model_dump(mode="json") for b in await _boards(session, event_id, exclude_rejected)]

    await websocket.accept()
    async with feed.subscribe() as sub:
        watcher = asyncio.create_task(_watch_disconnect(websocket, sub))
        log.info("leaderboard_ws_open", subscribers=feed.subscriber_count)
        try:
            await websocket.send_json(await snapshot())
            async for change in sub:
                if change.collection != "score_submissions":
                    continue
                await websocket.send_json(await snapshot())
        except WebSocketDisconnect:
            log.info("leaderboard_ws_dropped")
        finally:
            watcher.cancel()
    log.info("leaderboard_ws_closed")
