from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from app.models.user import User
from app.auth.schemas_auth import UserCreateAuthSchema 
from app.auth.security import get_password_hash

async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    user = await db.get(User, user_id)
    return user

async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).filter(User.email == email))
    return result.scalars().first()

async def get_users_paginated(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[User]:
    result = await db.execute(
        select(User).offset(skip).limit(limit).order_by(User.id)
    )
    return result.scalars().all()

async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    name: Optional[str] = None,
    role: str = "customer",
) -> User:
    db_user = User(
        email=email,
        name=name,
        hashed_password=get_password_hash(password),
        is_active=True,
        role=role,
    )
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    return db_user

async def register_new_user(db: AsyncSession, user_in: UserCreateAuthSchema) -> User:
    return await create_user(db, email=user_in.email, password=user_in.password, name=user_in.name)

async def update_user_role(db: AsyncSession, db_user: User, role: str, is_active: Optional[bool] = None) -> User:
    db_user.role = role
    if is_active is not None:
        db_user.is_active = is_active
    await db.commit()
    await db.refresh(db_user)
    return db_user
