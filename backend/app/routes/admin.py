from __future__ import annotations
from uuid import UUID
import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth_deps import require_admin
from app.db import get_session
from app.models.user import Admin, User
from app.schemas.auth import AdminGrant

log = structlog.get_logger()

router = APIRouter(prefix="/admin/admins", tags=["admin"])


@router.post("", status_code=201)
async def grant_admin(
    payload: AdminGrant,
    session: AsyncSession = Depends(get_session),
    admin=Depends(require_admin),
):
    if not await session.get(User, payload.user_id):
        raise HTTPException(status_code=404, detail="User not found")
    if await session.get(Admin, payload.user_id) is None:
        session.add(Admin(user_id=payload.user_id))
        await session.commit()
        log.info("admin_granted", user_id=str(payload.user_id), by=str(admin.id))
    return {"user_id": str(payload.user_id), "is_admin": True}


@router.delete("/{user_id}", status_code=204)
async def revoke_admin(
    user_id: UUID,
    session: AsyncSession = Depends(get_session),
    admin=Depends(require_admin),
):
    if user_id == admin.id:
        raise HTTPException(status_code=409, detail="Admins cannot revoke themselves")
    row = await session.get(Admin, user_id)
    if not row:
        raise HTTPException(status_code=404, detail="Not an admin")
    await session.delete(row)
    await session.commit()
    log.info("admin_revoked", user_id=str(user_id), by=str(admin.id))
