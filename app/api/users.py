"""User profile endpoints."""

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from app.api.deps import CurrentUser, DbSession
from app.models.user import User
from app.schemas.user import PhoneUpdate, UserCreate, UserOut

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, db: DbSession) -> User:
    """Register a profile for a user already known to the auth gateway."""
    existing = await db.execute(select(User).where(User.email == payload.email))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    user = User(**payload.model_dump())
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info(f"Created user {user.id}")
    return user


@router.get("/me", response_model=UserOut)
async def get_me(user: CurrentUser) -> User:
    return user


@router.patch("/me/phone", response_model=UserOut)
async def update_phone(payload: PhoneUpdate, user: CurrentUser, db: DbSession) -> User:
    """Set the number alert notifications are sent to."""
    phone = payload.phone_number.strip()
    if not phone:
        raise HTTPException(status_code=400, detail="Phone number is required")

    user.phone_number = phone
    await db.flush()
    await db.refresh(user)
    logger.info(f"User {user.id} updated phone number")
    return user
