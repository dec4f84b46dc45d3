from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.models import MAX_ROW_ID
from app.models.payment import PaymentMethod, PaymentStatus


class PaymentCreateSchema(BaseModel):
    event_id: int = Field(..., ge=1, le=MAX_ROW_ID)
    ticket_id: str
    amount: Decimal = Field(..., ge=0)
    payment_method: PaymentMethod
    transaction_id: Optional[str] = Field(default=None, min_length=4, max_length=64)

class PaymentStatusUpdateSchema(BaseModel):
    status: PaymentStatus

class PaymentResponseSchema(BaseModel):
    id: int
    user_id: int
    event_id: int
    ticket_id: str
    amount: Decimal
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    transaction_id: str
    payment_date: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
