from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.models import Base
from datetime import datetime, timezone
import enum


class EventCategory(str, enum.Enum):
    CONCERT = "CONCERT"
    SPORTS = "SPORTS"
    CONFERENCE = "CONFERENCE"
    THEATER = "THEATER"
    OTHER = "OTHER"


class EventStatus(str, enum.Enum):
    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    location = Column(String, nullable=True)
    event_date = Column(DateTime(timezone=True), nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    total_tickets = Column(Integer, nullable=False, default=0)
    tickets_sold = Column(Integer, nullable=False, default=0)
    category = Column(Enum(EventCategory), nullable=False, default=EventCategory.OTHER)
    status = Column(Enum(EventStatus), nullable=False, default=EventStatus.UPCOMING)
    is_published = Column(Boolean, nullable=False, default=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    author = relationship("User", back_populates="events")
    tickets = relationship("Ticket", back_populates="event")
    payments = relationship("Payment", back_populates="event")

    __table_args__ = (
        CheckConstraint("tickets_sold >= 0", name="ck_events_tickets_sold_non_negative"),
        CheckConstraint("tickets_sold <= total_tickets", name="ck_events_tickets_sold_within_capacity"),
    )

    @property
    def tickets_available(self) -> int:
        return max((self.total_tickets or 0) - (self.tickets_sold or 0), 0)
