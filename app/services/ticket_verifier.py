"""Venue check-in.

A scan redeems a ticket exactly once. The VALID -> USED write is a
conditional UPDATE on the current status, so of two simultaneous scans of
the same code only one can change the row; the other sees zero affected
rows and reports the ticket as already used.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.tickets import Ticket, TicketStatus
from app.models.user import User
from app.services.exceptions import AlreadyUsed, Forbidden, TicketNotFound, TicketVoided
from app.services.qr import parse_payload

logger = logging.getLogger(__name__)


@dataclass
class VerificationReceipt:
    ticket_id: str
    event_id: int
    event_title: str
    holder_name: str
    used_at: datetime
    checked_in_by: str


class TicketVerifier:
    REDEEM_ATTEMPTS = 2

    def __init__(self, db: AsyncSession):
        self.db = db

    async def verify(self, qr_data: str, actor: User) -> VerificationReceipt:
        if not actor.can_check_in:
            logger.warning(f"User ID {actor.id} (role {actor.role}) attempted ticket verification.")
            raise Forbidden("Only staff or administrators can verify tickets.")

        payload = parse_payload(qr_data)
        used_at = datetime.now(timezone.utc)

        # a zero-row update can race a concurrent status change back to VALID
        for attempt in range(self.REDEEM_ATTEMPTS):
            if await self._redeem(payload.ticket_id, payload.event_id, used_at, actor.email):
                break
            await self._reject(payload.ticket_id, payload.event_id, final=attempt == self.REDEEM_ATTEMPTS - 1)

        ticket = (
            await self.db.execute(
                select(Ticket)
                .options(selectinload(Ticket.event), selectinload(Ticket.owner))
                .where(Ticket.id == payload.ticket_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()
        await self.db.commit()

        logger.info(f"Ticket {ticket.id} checked in for event_id {ticket.event_id} by {actor.email}.")
        return VerificationReceipt(
            ticket_id=ticket.id,
            event_id=ticket.event_id,
            event_title=ticket.event.title,
            holder_name=ticket.owner.display_name,
            used_at=used_at,
            checked_in_by=actor.email,
        )

    async def _redeem(self, ticket_id: str, event_id: int, used_at: datetime, checked_in_by: str) -> bool:
        result = await self.db.execute(
            update(Ticket)
            .where(
                Ticket.id == ticket_id,
                Ticket.event_id == event_id,
                Ticket.status == TicketStatus.VALID,
            )
            .values(status=TicketStatus.USED, used_at=used_at, checked_in_by=checked_in_by)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def _reject(self, ticket_id: str, event_id: int, final: bool = True):
        """Explain a missed redemption, or return when it is worth retrying."""
        result = await self.db.execute(
            select(Ticket)
            .where(Ticket.id == ticket_id, Ticket.event_id == event_id)
            .execution_options(populate_existing=True)
        )
        ticket = result.scalars().first()
        current_status = ticket.status if ticket is not None else None
        used_at = ticket.used_at if ticket is not None else None

        if current_status == TicketStatus.VALID and not final:
            logger.info(f"Ticket {ticket_id} changed under a scan; retrying redemption.")
            return
        await self.db.rollback()

        if current_status is None:
            logger.info(f"Scan rejected: no ticket {ticket_id} for event_id {event_id}.")
            raise TicketNotFound(ticket_id)
        if current_status in (TicketStatus.USED, TicketStatus.VALID):
            # VALID here means the row kept changing under us; report it as taken
            logger.info(f"Scan rejected: ticket {ticket_id} already used at {used_at}.")
            raise AlreadyUsed(ticket_id, used_at)
        logger.info(f"Scan rejected: ticket {ticket_id} is {current_status.value}.")
        raise TicketVoided(ticket_id, current_status)
