from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum
import uuid
from app.models import Base


class TicketStatus(str, enum.Enum):
    VALID = "VALID"
    USED = "USED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


# statuses that occupy a seat in the event's inventory
SEAT_HOLDING_STATUSES = (TicketStatus.VALID, TicketStatus.USED)


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    status = Column(Enum(TicketStatus), nullable=False, default=TicketStatus.VALID)
    qr_payload = Column(String(255), nullable=False)
    qr_code_url = Column(Text, nullable=False)
    purchase_date = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    used_at = Column(DateTime(timezone=True), nullable=True)
    checked_in_by = Column(String(255), nullable=True)

    owner = relationship("User", back_populates="tickets")
    event = relationship("Event", back_populates="tickets")
    payments = relationship("Payment", back_populates="ticket", cascade="all, delete-orphan")

    @property
    def holds_seat(self) -> bool:
        return self.status in SEAT_HOLDING_STATUSES
