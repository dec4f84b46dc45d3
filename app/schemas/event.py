from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.models.event import EventCategory, EventStatus


class EventBaseSchema(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    location: Optional[str] = Field(default=None, max_length=255)
    event_date: Optional[datetime] = None
    price: Decimal = Field(default=Decimal("0.00"), ge=0)
    total_tickets: int = Field(..., ge=0)
    category: EventCategory = EventCategory.OTHER
    status: EventStatus = EventStatus.UPCOMING
    is_published: bool = False

class EventCreateSchema(EventBaseSchema):
    pass

class EventUpdateSchema(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    location: Optional[str] = Field(default=None, max_length=255)
    event_date: Optional[datetime] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    total_tickets: Optional[int] = Field(default=None, ge=0)
    category: Optional[EventCategory] = None
    status: Optional[EventStatus] = None
    is_published: Optional[bool] = None

class EventResponseSchema(EventBaseSchema):
    id: int
    tickets_sold: int
    tickets_available: int
    author_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
