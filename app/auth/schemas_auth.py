from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from app.schemas.user import UserResponseSchema

class Token(BaseModel):
    access_token: str
    token_type: str

class TokenData(BaseModel):
    user_id: Optional[int] = None
    role: Optional[str] = None

class UserCreateAuthSchema(BaseModel): 
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = Field(default=None, min_length=2, max_length=100) 

class UserWithTokenResponse(BaseModel):
    user: UserResponseSchema
    token: Token
