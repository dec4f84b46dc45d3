from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
import logging

from app.database import get_db
from app.auth import schemas_auth, security
from app.auth import user_crud
from app.auth.schemas_auth import UserWithTokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _bearer(user) -> dict:
    return {"access_token": security.token_for_user(user), "token_type": "bearer"}


@router.post("/token", response_model=schemas_auth.Token, summary="Exchange email and password for a bearer token")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
):
    user = await user_crud.get_user_by_email(db, email=form_data.username)
    if not user or not security.verify_password(form_data.password, user.hashed_password):
        logger.warning(f"Failed login attempt for email: {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        logger.warning(f"Login attempt on disabled account: {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account disabled. Contact an administrator.",
        )

    logger.info(f"User {user.email} ({user.role}) logged in.")
    return _bearer(user)

@router.post(
    "/register",
    response_model=UserWithTokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer account and sign it in"
)
async def register_user(
    user_in: schemas_auth.UserCreateAuthSchema,
    db: AsyncSession = Depends(get_db)
):
    if await user_crud.get_user_by_email(db, email=user_in.email):
        logger.warning(f"Registration attempt with existing email: {user_in.email}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered.")

    try:
        created_user = await user_crud.register_new_user(db=db, user_in=user_in)
    except IntegrityError:
        # lost a race with a concurrent registration of the same email
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered.")
    except Exception as e_general:
        await db.rollback()
        logger.error(f"Unexpected error registering {user_in.email}: {str(e_general)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during registration."
        )

    logger.info(f"Customer account created: {created_user.email} (ID: {created_user.id})")
    return {"user": created_user, "token": _bearer(created_user)}
