from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Enum, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum
from app.models import Base


class NotificationType(str, enum.Enum):
    TICKET_CONFIRMATION = "TICKET_CONFIRMATION"
    EVENT_REMINDER = "EVENT_REMINDER"
    PAYMENT_SUCCESS = "PAYMENT_SUCCESS"
    EVENT_UPDATE = "EVENT_UPDATE"
    ADMIN_MESSAGE = "ADMIN_MESSAGE"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(Enum(NotificationType), nullable=False)
    related_event_id = Column(Integer, nullable=True)
    related_ticket_id = Column(String(36), nullable=True)
    timestamp = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    is_read = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="notifications")
