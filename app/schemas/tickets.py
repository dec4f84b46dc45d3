from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from app.config import settings
from app.models import MAX_ROW_ID
from app.models.payment import PaymentMethod
from app.models.tickets import TicketStatus


class TicketPurchaseSchema(BaseModel):
    event_id: int = Field(..., alias="eventId", ge=1, le=MAX_ROW_ID)
    quantity: int = Field(default=1, ge=1, le=settings.MAX_TICKETS_PER_PURCHASE)
    payment_method: PaymentMethod = Field(default=PaymentMethod.STRIPE, alias="paymentMethod")

    class Config:
        populate_by_name = True

class TicketStatusUpdateSchema(BaseModel):
    status: TicketStatus

class TicketVerifySchema(BaseModel):
    qr_data: str = Field(..., alias="qrData", min_length=1, max_length=512)

    class Config:
        populate_by_name = True

class TicketResponseSchema(BaseModel):
    id: str
    user_id: int
    event_id: int
    quantity: int
    status: TicketStatus
    qr_payload: str
    qr_code_url: str
    purchase_date: datetime
    used_at: Optional[datetime] = None
    checked_in_by: Optional[str] = None

    class Config:
        from_attributes = True

class VerificationReceiptSchema(BaseModel):
    ticket_id: str
    event_id: int
    event_title: str
    holder_name: str
    used_at: datetime
    checked_in_by: str

    class Config:
        from_attributes = True
