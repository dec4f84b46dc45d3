from typing import Sequence
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import AsyncSessionLocal
from app.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationEmitter:
    """Best-effort in-app notifications.

    Runs after the purchase has committed, on its own session. A failure is
    logged and reported through the return value; it never reaches the
    caller of the purchase.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal):
        self.session_factory = session_factory

    async def ticket_confirmed(
        self,
        user_id: int,
        event_id: int,
        event_title: str,
        ticket_ids: Sequence[str],
    ) -> bool:
        count = len(ticket_ids)
        noun = "ticket" if count == 1 else "tickets"
        notification = Notification(
            user_id=user_id,
            title="Ticket confirmed",
            message=f"Your purchase of {count} {noun} for '{event_title}' was successful.",
            type=NotificationType.TICKET_CONFIRMATION,
            related_event_id=event_id,
            related_ticket_id=ticket_ids[0] if ticket_ids else None,
        )
        try:
            async with self.session_factory() as db:
                db.add(notification)
                await db.commit()
        except Exception:
            logger.exception(
                f"Could not record ticket confirmation for user_id {user_id}, event_id {event_id}."
            )
            return False
        logger.info(f"Ticket confirmation (ID: {notification.id}) recorded for user_id {user_id}, event_id {event_id}.")
        return True


def get_notification_emitter() -> NotificationEmitter:
    return NotificationEmitter()
