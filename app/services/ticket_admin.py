from datetime import datetime, timezone
from typing import List
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tickets import Ticket, TicketStatus, SEAT_HOLDING_STATUSES
from app.services.exceptions import TicketingError, TicketNotFound
from app.services.inventory import InventoryLedger

logger = logging.getLogger(__name__)


class TicketAdmin:
    """Ticket lookups and administrative overrides.

    Overrides skip the check-in state machine but not the seat accounting:
    a ticket leaving VALID/USED gives its seat back, a ticket returning to
    VALID/USED has to win one again.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.inventory = InventoryLedger(db)

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self.db.get(Ticket, ticket_id)
        if ticket is None:
            raise TicketNotFound(ticket_id)
        return ticket

    async def list_tickets(self, skip: int = 0, limit: int = 100) -> List[Ticket]:
        result = await self.db.execute(
            select(Ticket).order_by(Ticket.purchase_date.desc()).offset(skip).limit(limit)
        )
        return result.scalars().all()

    async def list_user_tickets(self, user_id: int, skip: int = 0, limit: int = 100) -> List[Ticket]:
        result = await self.db.execute(
            select(Ticket).where(Ticket.user_id == user_id)
            .order_by(Ticket.purchase_date.desc()).offset(skip).limit(limit)
        )
        return result.scalars().all()

    async def list_event_tickets(self, event_id: int, skip: int = 0, limit: int = 100) -> List[Ticket]:
        result = await self.db.execute(
            select(Ticket).where(Ticket.event_id == event_id)
            .order_by(Ticket.purchase_date.desc()).offset(skip).limit(limit)
        )
        return result.scalars().all()

    async def apply_status(self, ticket: Ticket, new_status: TicketStatus) -> None:
        """Move ``ticket`` to ``new_status`` without committing."""
        was_holding = ticket.status in SEAT_HOLDING_STATUSES
        will_hold = new_status in SEAT_HOLDING_STATUSES
        if was_holding and not will_hold:
            await self.inventory.release(ticket.event_id, ticket.quantity)
        elif will_hold and not was_holding:
            await self.inventory.reserve(ticket.event_id, ticket.quantity)

        ticket.status = new_status
        if new_status == TicketStatus.USED:
            if ticket.used_at is None:
                ticket.used_at = datetime.now(timezone.utc)
        else:
            ticket.used_at = None
            ticket.checked_in_by = None

    async def update_status(self, ticket_id: str, new_status: TicketStatus) -> Ticket:
        ticket = await self.get_ticket(ticket_id)
        previous = ticket.status
        try:
            await self.apply_status(ticket, new_status)
            await self.db.commit()
        except TicketingError:
            await self.db.rollback()
            raise
        await self.db.refresh(ticket)
        logger.info(f"Ticket (ID: {ticket_id}) status overridden {previous.value} -> {new_status.value}.")
        return ticket

    async def delete_ticket(self, ticket_id: str) -> None:
        ticket = await self.get_ticket(ticket_id)
        if ticket.holds_seat:
            await self.inventory.release(ticket.event_id, ticket.quantity)
        await self.db.delete(ticket)
        await self.db.commit()
        logger.info(f"Ticket (ID: {ticket_id}, user: {ticket.user_id}, event: {ticket.event_id}) deleted.")
