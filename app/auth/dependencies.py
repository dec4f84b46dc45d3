from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.database import get_db
from app.models.user import User, CHECK_IN_ROLES
from app.auth import security 
from app.auth import user_crud 

logger = logging.getLogger(__name__)

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)

async def get_current_user(
    token: str = Depends(security.oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    token_data = security.decode_access_token(token)
    if token_data is None or token_data.user_id is None:
        logger.warning("Token validation error: invalid, expired or missing 'sub' claim.")
        raise credentials_exception

    user = await user_crud.get_user_by_id(db, user_id=token_data.user_id)
    if user is None:
        logger.warning(f"User not found for ID {token_data.user_id} from token.")
        raise credentials_exception
    return user

async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        logger.warning(f"Inactive user access attempt: {current_user.email} (ID: {current_user.id})")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled. Contact an administrator.")
    return current_user

async def get_current_admin_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    if current_user.role != "admin":
        logger.warning(f"Non-admin user {current_user.email} (ID: {current_user.id}) attempted admin action.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, 
            detail="Operation not permitted. Administrator privileges required."
        )
    return current_user

async def get_current_staff_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    if current_user.role not in CHECK_IN_ROLES:
        logger.warning(f"User {current_user.email} (ID: {current_user.id}) with role '{current_user.role}' attempted staff action.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operation not permitted. Staff or administrator privileges required."
        )
    return current_user
