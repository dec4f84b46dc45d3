from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
import logging

from app.config import settings
from app.auth.schemas_auth import TokenData

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

TOKEN_ISSUER = "tickezy"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def create_access_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "role": role,
        "iss": TOKEN_ISSUER,
        "iat": now,
        "exp": now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def token_for_user(user) -> str:
    return create_access_token(user.id, user.role)

def decode_access_token(token: str) -> TokenData | None:
    """Return the token's claims, or None when it is forged, expired or malformed.

    The role claim is informational only; permissions are always checked
    against the stored user, so a role change takes effect immediately.
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM], issuer=TOKEN_ISSUER
        )
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None

    sub = payload.get("sub")
    if sub is None or not str(sub).isdigit():
        return None
    return TokenData(user_id=int(sub), role=payload.get("role"))
