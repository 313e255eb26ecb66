from __future__ import annotations
import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth_deps import require_admin
from app.config import settings
from app.db import get_session
from app.models.app_config import AppConfig, EVENT_CONFIG_KEY
from app.schemas.media import MediaConfigIn, MediaConfigPublic

log = structlog.get_logger()

router = APIRouter(tags=["media"])

EMBED_URL = "https://www.youtube.com/embed/videoseries?list={playlist_id}"


def _public(playlist_id: str | None) -> MediaConfigPublic:
    pid = playlist_id or settings.default_playlist_id
    return MediaConfigPublic(
        playlist_id=pid,
        embed_url=EMBED_URL.format(playlist_id=pid),
        is_default=not playlist_id,
    )


@router.get("/media", response_model=MediaConfigPublic)
async def media(session: AsyncSession = Depends(get_session)):
    cfg = await session.get(AppConfig, EVENT_CONFIG_KEY)
    return _public(cfg.playlist_id if cfg else None)


@router.put("/admin/settings/media", response_model=MediaConfigPublic, tags=["admin"])
async def set_media(
    payload: MediaConfigIn,
    session: AsyncSession = Depends(get_session),
    admin=Depends(require_admin),
):
    cfg = await session.get(AppConfig, EVENT_CONFIG_KEY)
    if cfg is None:
        cfg = AppConfig(key=EVENT_CONFIG_KEY)
        session.add(cfg)
    cfg.playlist_id = payload.playlist_id
    await session.commit()
    log.info("media_playlist_set", playlist_id=payload.playlist_id, admin_id=str(admin.id))
    return _public(payload.playlist_id)
