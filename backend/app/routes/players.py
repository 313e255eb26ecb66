from __future__ import annotations
from uuid import UUID
import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth_deps import get_current_user, require_admin
from app.db import get_session
from app.models.catalog import Event
from app.models.player import Player
from app.schemas.player import PlayerCreate, PlayerUpdate, PlayerPublic, EventAssignment
from app.schemas.submission import SortDirection

log = structlog.get_logger()

router = APIRouter(prefix="/players", tags=["players"])
admin_router = APIRouter(prefix="/admin/players", tags=["admin"], dependencies=[Depends(require_admin)])

_SORT_COLUMNS = {
    "name": Player.name,
    "created_at": Player.created_at,
    "group_size": Player.group_size,
}


async def _name_taken(session: AsyncSession, name: str, exclude: UUID | None = None) -> bool:
    stmt = select(Player.id).where(Player.name == name)
    if exclude is not None:
        stmt = stmt.where(Player.id != exclude)
    return (await session.scalar(stmt.limit(1))) is not None


@router.post("", response_model=PlayerPublic, status_code=201)
async def register_player(
    payload: PlayerCreate,
    session: AsyncSession = Depends(get_session),
    user=Depends(get_current_user),
):
    if await _name_taken(session, payload.name):
        raise HTTPException(status_code=409, detail="Player name already taken")
    p = Player(name=payload.name, instagram=payload.instagram, group_size=payload.group_size, owner_id=user.id)
    session.add(p)
    try:
        await session.commit()
    except IntegrityError:
        # lost a race with another registration of the same name
        await session.rollback()
        raise HTTPException(status_code=409, detail="Player name already taken")
    await session.refresh(p)
    log.info("player_registered", player_id=str(p.id), group_size=p.group_size)
    return PlayerPublic.model_validate(p)


@router.get("", response_model=list[PlayerPublic])
async def list_players(session: AsyncSession = Depends(get_session)):
    rows = (await session.execute(select(Player).order_by(Player.name.asc()))).scalars().all()
    return [PlayerPublic.model_validate(p) for p in rows]


@router.get("/{player_id}", response_model=PlayerPublic)
async def get_player(player_id: UUID, session: AsyncSession = Depends(get_session)):
    p = await session.get(Player, player_id)
    if not p:
        raise HTTPException(status_code=404, detail="Player not found")
    return PlayerPublic.model_validate(p)


@admin_router.get("", response_model=list[PlayerPublic])
async def admin_list_players(
    sort: str = Query(default="created_at", pattern="^(name|created_at|group_size)$"),
    direction: SortDirection = Query(default="desc"),
    session: AsyncSession = Depends(get_session),
):
    col = _SORT_COLUMNS[sort]
    stmt = select(Player).order_by(col.desc() if direction == "desc" else col.asc(), Player.id.asc())
    rows = (await session.execute(stmt)).scalars().all()
    return [PlayerPublic.model_validate(p) for p in rows]


@admin_router.patch("/{player_id}", response_model=PlayerPublic)
async def update_player(
    player_id: UUID,
    payload: PlayerUpdate,
    session: AsyncSession = Depends(get_session),
):
    p = await session.get(Player, player_id)
    if not p:
        raise HTTPException(status_code=404, detail="Player not found")
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] is not None:
        if await _name_taken(session, changes["name"], exclude=p.id):
            raise HTTPException(status_code=409, detail="Player name already taken")
        p.name = changes["name"]
    if "instagram" in changes:
        p.instagram = changes["instagram"]
    if changes.get("group_size") is not None:
        p.group_size = changes["group_size"]
    await session.commit()
    await session.refresh(p)
    return PlayerPublic.model_validate(p)


@admin_router.delete("/{player_id}", status_code=204)
async def delete_player(player_id: UUID, session: AsyncSession = Depends(get_session)):
    p = await session.get(Player, player_id)
    if not p:
        raise HTTPException(status_code=404, detail="Player not found")
    # Scores carry their own copy of the player's name and stay on the boards
    await session.delete(p)
    await session.commit()
    log.info("player_deleted", player_id=str(player_id))


@admin_router.post("/assign-event", response_model=list[PlayerPublic])
async def assign_event(payload: EventAssignment, session: AsyncSession = Depends(get_session)):
    ev = await session.get(Event, payload.event_id)
    if not ev:
        raise HTTPException(status_code=404, detail="Event not found")
    ids = list(dict.fromkeys(payload.player_ids))
    found = (await session.execute(select(Player).where(Player.id.in_(ids)))).scalars().all()
    missing = set(ids) - {p.id for p in found}
    if missing:
        raise HTTPException(status_code=404, detail=f"{len(missing)} player(s) not found")
    await session.execute(
        update(Player).where(Player.id.in_(ids)).values(event_id=ev.id, event_name=ev.name)
    )
    await session.commit()
    rows = (await session.execute(select(Player).where(Player.id.in_(ids)).order_by(Player.name.asc()))).scalars().all()
    log.info("players_assigned_event", event_id=str(ev.id), count=len(ids))
    return [PlayerPublic.model_validate(p) for p in rows]
