from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from uuid import UUID
import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth_deps import require_admin
from app.config import settings
from app.db import get_session
from app.models.offer import Offer
from app.schemas.offer import OfferIn, OfferActiveUpdate, OfferPublic
from app.services.time_windows import offer_is_running

log = structlog.get_logger()

router = APIRouter(prefix="/offers", tags=["offers"])
admin_router = APIRouter(prefix="/admin/offers", tags=["admin"], dependencies=[Depends(require_admin)])


def _apply(o: Offer, payload: OfferIn) -> None:
    # Switching between one-time and recurring clears the other schedule
    o.title = payload.title
    o.description = payload.description
    o.reward_type = payload.reward_type
    o.value = payload.value
    o.trigger_type = payload.trigger_type
    o.start_time = payload.start_time
    o.end_time = payload.end_time
    o.days_of_week = list(payload.days_of_week)
    o.recurring_start_time = payload.recurring_start_time
    o.recurring_end_time = payload.recurring_end_time
    o.is_active = payload.is_active


async def _load(session: AsyncSession, offer_id: UUID) -> Offer:
    o = await session.get(Offer, offer_id)
    if not o:
        raise HTTPException(status_code=404, detail="Offer not found")
    return o


@router.get("/live", response_model=list[OfferPublic])
async def live_offers(session: AsyncSession = Depends(get_session)):
    now = datetime.now(dt_tz.utc)
    rows = (
        await session.execute(select(Offer).where(Offer.is_active.is_(True)).order_by(Offer.created_at.desc()))
    ).scalars().all()
    return [OfferPublic.model_validate(o) for o in rows if offer_is_running(o, now, settings.event_timezone)]


@admin_router.get("", response_model=list[OfferPublic])
async def list_offers(session: AsyncSession = Depends(get_session)):
    rows = (await session.execute(select(Offer).order_by(Offer.created_at.desc(), Offer.id.asc()))).scalars().all()
    return [OfferPublic.model_validate(o) for o in rows]


@admin_router.post("", response_model=OfferPublic, status_code=201)
async def create_offer(payload: OfferIn, session: AsyncSession = Depends(get_session)):
    o = Offer()
    _apply(o, payload)
    session.add(o)
    await session.commit()
    await session.refresh(o)
    log.info("offer_created", offer_id=str(o.id), trigger=o.trigger_type)
    return OfferPublic.model_validate(o)


@admin_router.put("/{offer_id}", response_model=OfferPublic)
async def replace_offer(offer_id: UUID, payload: OfferIn, session: AsyncSession = Depends(get_session)):
    o = await _load(session, offer_id)
    _apply(o, payload)
    await session.commit()
    await session.refresh(o)
    return OfferPublic.model_validate(o)


@admin_router.patch("/{offer_id}/active", response_model=OfferPublic)
async def set_offer_active(offer_id: UUID, payload: OfferActiveUpdate, session: AsyncSession = Depends(get_session)):
    o = await _load(session, offer_id)
    o.is_active = payload.is_active
    await session.commit()
    await session.refresh(o)
    return OfferPublic.model_validate(o)


@admin_router.delete("/{offer_id}", status_code=204)
async def delete_offer(offer_id: UUID, session: AsyncSession = Depends(get_session)):
    o = await _load(session, offer_id)
    await session.delete(o)
    await session.commit()
    log.info("offer_deleted", offer_id=str(offer_id))
