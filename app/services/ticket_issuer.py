"""Turning a purchase request into tickets.

One purchase of ``quantity`` seats produces ``quantity`` ticket rows, each
with ``quantity=1``, its own QR code and its own payment row, so every seat
can be checked in independently. Seat reservation, tickets and payments are
committed in a single transaction.
"""
from datetime import datetime, timezone
from typing import List, Optional
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import MAX_ROW_ID
from app.models.event import Event
from app.models.payment import Payment, PaymentMethod, PaymentStatus
from app.models.tickets import Ticket, TicketStatus
from app.models.user import User
from app.services import qr
from app.services.exceptions import EventNotFound, InvalidQuantity, TicketingError
from app.services.inventory import InventoryLedger
from app.services.payments import generate_transaction_id

logger = logging.getLogger(__name__)


class TicketIssuer:
    def __init__(self, db: AsyncSession, inventory: Optional[InventoryLedger] = None):
        self.db = db
        self.inventory = inventory or InventoryLedger(db)

    def validate_quantity(self, quantity) -> int:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidQuantity(quantity, settings.MAX_TICKETS_PER_PURCHASE)
        if quantity < 1 or quantity > settings.MAX_TICKETS_PER_PURCHASE:
            raise InvalidQuantity(quantity, settings.MAX_TICKETS_PER_PURCHASE)
        return quantity

    async def issue(
        self,
        user: User,
        event_id: int,
        quantity: int = 1,
        payment_method: PaymentMethod = PaymentMethod.STRIPE,
    ) -> List[Ticket]:
        quantity = self.validate_quantity(quantity)

        if not 1 <= event_id <= MAX_ROW_ID:
            raise EventNotFound(event_id)
        event = await self.db.get(Event, event_id)
        if event is None:
            raise EventNotFound(event_id)

        try:
            await self.inventory.reserve(event_id, quantity)

            now = datetime.now(timezone.utc)
            tickets = []
            for _ in range(quantity):
                ticket = self._build_ticket(user.id, event_id, now)
                ticket.payments.append(
                    Payment(
                        user_id=user.id,
                        event_id=event_id,
                        amount=event.price,
                        payment_method=payment_method,
                        payment_status=PaymentStatus.SUCCESS,
                        transaction_id=generate_transaction_id(now),
                        payment_date=now,
                    )
                )
                self.db.add(ticket)
                tickets.append(ticket)

            await self.db.commit()
        except TicketingError:
            await self.db.rollback()
            raise
        except Exception:
            await self.db.rollback()
            logger.error(
                f"Failure issuing {quantity} ticket(s) for user_id {user.id}, event_id {event_id}; rolled back.",
                exc_info=True,
            )
            raise

        logger.info(
            f"Issued {quantity} ticket(s) {[t.id for t in tickets]} to user_id {user.id} for event_id {event_id}."
        )
        return tickets

    @staticmethod
    def _build_ticket(user_id: int, event_id: int, purchased_at: datetime) -> Ticket:
        ticket_id = str(uuid.uuid4())
        payload = qr.build_payload(event_id, ticket_id)
        return Ticket(
            id=ticket_id,
            user_id=user_id,
            event_id=event_id,
            quantity=1,
            status=TicketStatus.VALID,
            qr_payload=payload,
            qr_code_url=qr.render_data_uri(payload),
            purchase_date=purchased_at,
            used_at=None,
            checked_in_by=None,
            payments=[],
        )
