from fastapi import APIRouter, Depends, HTTPException, status, Path
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Annotated, List
import logging

from app.database import get_db
from app.models import MAX_ROW_ID
from app.models.user import User
from app.schemas.user import UserResponseSchema, UserRoleUpdateSchema
from app.auth import user_crud 
from app.auth.dependencies import get_current_active_user, get_current_admin_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"]
)

@router.get(
    "/",
    response_model=List[UserResponseSchema],
    summary="Get all users (Admin operation)",
    dependencies=[Depends(get_current_admin_user)]
)
async def get_all_users_endpoint(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 100
):
    try:
        users = await user_crud.get_users_paginated(db, skip=skip, limit=limit)
        return users
    except Exception as e:
        logger.error(f"Error fetching users: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while fetching users."
        )

@router.get(
    "/me",
    response_model=UserResponseSchema,
    summary="Get current authenticated user's details"
)
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return current_user

@router.patch(
    "/{user_id}/role",
    response_model=UserResponseSchema,
    summary="Change a user's role or active flag (Admin operation)"
)
async def update_user_role_endpoint(
    user_id: Annotated[int, Path(le=MAX_ROW_ID)],
    role_update: UserRoleUpdateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    db_user = await user_crud.get_user_by_id(db, user_id=user_id)
    if not db_user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {user_id} not found."
        )
    try:
        db_user = await user_crud.update_user_role(db, db_user, role_update.role, role_update.is_active)
    except Exception as e:
        await db.rollback()
        logger.error(f"Error updating role of user id {user_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while updating the user."
        )
    logger.info(f"Admin ID {current_user.id} set role of user ID {user_id} to '{db_user.role}'.")
    return db_user
