from __future__ import annotations
from uuid import UUID
import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth_deps import require_admin
from app.db import get_session
from app.models.catalog import Event
from app.models.player import Player
from app.schemas.catalog import EventCreate, EventUpdate, EventPublic

log = structlog.get_logger()

router = APIRouter(prefix="/events", tags=["events"])
admin_router = APIRouter(prefix="/admin/events", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[EventPublic])
async def list_events(
    active_only: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
):
    stmt = select(Event).order_by(Event.created_at.desc(), Event.id.asc())
    if active_only:
        stmt = stmt.where(Event.is_active.is_(True))
    return [EventPublic.model_validate(e) for e in (await session.execute(stmt)).scalars().all()]


@admin_router.post("", response_model=EventPublic, status_code=201)
async def create_event(payload: EventCreate, session: AsyncSession = Depends(get_session)):
    ev = Event(name=payload.name, is_active=payload.is_active)
    session.add(ev)
    await session.commit()
    await session.refresh(ev)
    log.info("event_created", event_id=str(ev.id), name=ev.name)
    return EventPublic.model_validate(ev)


@admin_router.patch("/{event_id}", response_model=EventPublic)
async def update_event(event_id: UUID, payload: EventUpdate, session: AsyncSession = Depends(get_session)):
    ev = await session.get(Event, event_id)
    if not ev:
        raise HTTPException(status_code=404, detail="Event not found")
    if payload.name is not None and payload.name != ev.name:
        ev.name = payload.name
        # players show the event they belong to; scores keep the name they were submitted under
        await session.execute(update(Player).where(Player.event_id == ev.id).values(event_name=ev.name))
    if payload.is_active is not None:
        ev.is_active = payload.is_active
    await session.commit()
    await session.refresh(ev)
    return EventPublic.model_validate(ev)


@admin_router.delete("/{event_id}", status_code=204)
async def delete_event(event_id: UUID, session: AsyncSession = Depends(get_session)):
    ev = await session.get(Event, event_id)
    if not ev:
        raise HTTPException(status_code=404, detail="Event not found")
    await session.execute(update(Player).where(Player.event_id == ev.id).values(event_id=None, event_name=None))
    await session.delete(ev)
    await session.commit()
    log.info("event_deleted", event_id=str(event_id))
