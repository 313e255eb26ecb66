from __future__ import annotations
from uuid import UUID
import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.db import get_session
from app.security import decode_token
from app.models.user import User, Admin

security = HTTPBearer()

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> User:
    token = credentials.credentials
    try:
        data = decode_token(token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if data.get("type") != "access":
        raise HTTPException(status_code=401, detail="Wrong token type")
    try:
        user_id = UUID(str(data.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")
    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user

async def is_admin(session: AsyncSession, user_id: UUID) -> bool:
    return await session.get(Admin, user_id) is not None

async def require_admin(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> User:
    # Server-side membership is the only thing that grants admin rights
    if not await is_admin(session, user.id):
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
