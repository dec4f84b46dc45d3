from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

class UserRoleUpdateSchema(BaseModel):
    role: str = Field(..., pattern="^(customer|staff|admin)$")
    is_active: Optional[bool] = None

class UserResponseSchema(BaseModel):
    id: int
    email: EmailStr
    name: Optional[str] = None
    is_active: bool
    role: str
    created_at: datetime

    class Config:
        from_attributes = True
