from sqlalchemy import update, case
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.models.event import Event
from app.services.exceptions import EventNotFound, InsufficientInventory

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Per-event seat accounting.

    Both operations are single conditional UPDATE statements run inside the
    caller's transaction; nothing here commits. The capacity check lives in
    the WHERE clause, so two concurrent reservations can never both pass it
    against the same stale ``tickets_sold``.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def reserve(self, event_id: int, quantity: int) -> None:
        result = await self.db.execute(
            update(Event)
            .where(Event.id == event_id, Event.tickets_sold + quantity <= Event.total_tickets)
            .values(tickets_sold=Event.tickets_sold + quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            logger.debug(f"Reserved {quantity} seat(s) on event_id {event_id}.")
            return

        event = await self.db.get(Event, event_id, populate_existing=True)
        if event is None:
            raise EventNotFound(event_id)
        logger.info(
            f"Reservation of {quantity} seat(s) on event_id {event_id} refused: "
            f"{event.tickets_sold}/{event.total_tickets} sold."
        )
        raise InsufficientInventory(event_id, quantity, event.tickets_available)

    async def release(self, event_id: int, quantity: int) -> None:
        await self.db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(
                tickets_sold=case(
                    (Event.tickets_sold >= quantity, Event.tickets_sold - quantity),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )
        logger.debug(f"Released {quantity} seat(s) on event_id {event_id}.")

    @staticmethod
    def available(event: Event) -> int:
        return event.tickets_available
