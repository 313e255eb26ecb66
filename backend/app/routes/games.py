from __future__ import annotations
from uuid import UUID
import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth_deps import require_admin
from app.db import get_session
from app.models.catalog import Game
from app.schemas.catalog import GameCreate, GameUpdate, GamePublic

log = structlog.get_logger()

router = APIRouter(prefix="/games", tags=["games"])
admin_router = APIRouter(prefix="/admin/games", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[GamePublic])
async def list_games(
    include_inactive: int = Query(default=0, ge=0, le=1),
    session: AsyncSession = Depends(get_session),
):
    stmt = select(Game).order_by(Game.name.asc())
    if not include_inactive:
        stmt = stmt.where(Game.is_active.is_(True))
    return [GamePublic.model_validate(g) for g in (await session.execute(stmt)).scalars().all()]


@admin_router.post("", response_model=GamePublic, status_code=201)
async def create_game(payload: GameCreate, session: AsyncSession = Depends(get_session)):
    g = Game(name=payload.name, is_active=payload.is_active)
    session.add(g)
    await session.commit()
    await session.refresh(g)
    log.info("game_created", game_id=str(g.id), name=g.name)
    return GamePublic.model_validate(g)


@admin_router.patch("/{game_id}", response_model=GamePublic)
async def update_game(game_id: UUID, payload: GameUpdate, session: AsyncSession = Depends(get_session)):
    g = await session.get(Game, game_id)
    if not g:
        raise HTTPException(status_code=404, detail="Game not found")
    if payload.name is not None:
        g.name = payload.name
    if payload.is_active is not None:
        g.is_active = payload.is_active
    await session.commit()
    await session.refresh(g)
    return GamePublic.model_validate(g)


@admin_router.delete("/{game_id}", status_code=204)
async def delete_game(game_id: UUID, session: AsyncSession = Depends(get_session)):
    g = await session.get(Game, game_id)
    if not g:
        raise HTTPException(status_code=404, detail="Game not found")
    # Scores stay; the leaderboard falls back to the name stored on each score
    await session.delete(g)
    await session.commit()
    log.info("game_deleted", game_id=str(game_id))
