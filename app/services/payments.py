from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
import logging
import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.event import Event
from app.models.payment import Payment, PaymentMethod, PaymentStatus
from app.models.tickets import Ticket, TicketStatus
from app.models.user import User
from app.services.exceptions import (
    DuplicateTransaction,
    EventNotFound,
    Forbidden,
    PaymentNotFound,
    TicketingError,
    TicketNotFound,
)
from app.services.ticket_admin import TicketAdmin

logger = logging.getLogger(__name__)

_TXN_ALPHABET = string.ascii_uppercase + string.digits


def generate_transaction_id(now: Optional[datetime] = None) -> str:
    """Human-readable transaction reference, e.g. ``TXN-20251104-ABCD1234``."""
    now = now or datetime.now(timezone.utc)
    suffix = "".join(secrets.choice(_TXN_ALPHABET) for _ in range(8))
    return f"TXN-{now:%Y%m%d}-{suffix}"


class PaymentService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.tickets = TicketAdmin(db)

    async def create_payment(
        self,
        user: User,
        event_id: int,
        ticket_id: str,
        amount: Decimal,
        payment_method: PaymentMethod,
        transaction_id: Optional[str] = None,
    ) -> Payment:
        """Record a payment awaiting external confirmation (PENDING)."""
        event = await self.db.get(Event, event_id)
        if event is None:
            raise EventNotFound(event_id)
        ticket = await self.db.get(Ticket, ticket_id)
        if ticket is None or ticket.event_id != event_id:
            raise TicketNotFound(ticket_id)
        if ticket.user_id != user.id and user.role != "admin":
            raise Forbidden("Not authorized to pay for this ticket.")

        if transaction_id:
            existing = await self.db.execute(select(Payment.id).where(Payment.transaction_id == transaction_id))
            if existing.first() is not None:
                raise DuplicateTransaction(transaction_id)

        payment = Payment(
            user_id=user.id,
            event_id=event_id,
            ticket_id=ticket_id,
            amount=amount,
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING,
            transaction_id=transaction_id or generate_transaction_id(),
            payment_date=datetime.now(timezone.utc),
        )
        self.db.add(payment)
        await self.db.commit()
        await self.db.refresh(payment)
        logger.info(f"Payment (ID: {payment.id}, txn {payment.transaction_id}) created by user_id {user.id} for ticket {ticket_id}.")
        return payment

    async def get_payment(self, payment_id: int, user: Optional[User] = None) -> Payment:
        payment = await self.db.get(Payment, payment_id)
        if payment is None:
            raise PaymentNotFound(payment_id)
        if user is not None and user.role != "admin" and payment.user_id != user.id:
            raise Forbidden("Not authorized to access this payment.")
        return payment

    async def list_payments(self, user: User, skip: int = 0, limit: int = 100) -> List[Payment]:
        query = select(Payment)
        if user.role != "admin":
            query = query.where(Payment.user_id == user.id)
        result = await self.db.execute(
            query.order_by(Payment.created_at.desc(), Payment.id.desc()).offset(skip).limit(limit)
        )
        return result.scalars().all()

    async def filter_payments(
        self,
        status: Optional[PaymentStatus] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Payment]:
        query = select(Payment)
        if status is not None:
            query = query.where(Payment.payment_status == status)
        if start_date is not None:
            query = query.where(Payment.payment_date >= start_date)
        if end_date is not None:
            query = query.where(Payment.payment_date <= end_date)
        result = await self.db.execute(query.order_by(Payment.payment_date.desc(), Payment.id.desc()))
        return result.scalars().all()

    async def update_status(self, payment_id: int, new_status: PaymentStatus) -> Payment:
        """Set a payment's status and carry it over to the linked ticket.

        SUCCESS revives a cancelled or refunded ticket (a used ticket stays
        used); REFUNDED refunds the ticket and gives its seat back. The
        payment and the ticket change commit together.
        """
        payment = await self.get_payment(payment_id)
        try:
            payment.payment_status = new_status
            if new_status == PaymentStatus.SUCCESS and payment.payment_date is None:
                payment.payment_date = datetime.now(timezone.utc)

            ticket = await self.db.get(Ticket, payment.ticket_id)
            if ticket is not None:
                if new_status == PaymentStatus.SUCCESS and ticket.status in (TicketStatus.CANCELLED, TicketStatus.REFUNDED):
                    await self.tickets.apply_status(ticket, TicketStatus.VALID)
                elif new_status == PaymentStatus.REFUNDED and ticket.status != TicketStatus.REFUNDED:
                    await self.tickets.apply_status(ticket, TicketStatus.REFUNDED)

            await self.db.commit()
        except TicketingError:
            await self.db.rollback()
            raise
        await self.db.refresh(payment)
        logger.info(f"Payment (ID: {payment_id}) status set to {new_status.value}.")
        return payment

    async def delete_payment(self, payment_id: int) -> None:
        payment = await self.get_payment(payment_id)
        await self.db.delete(payment)
        await self.db.commit()
        logger.info(f"Payment (ID: {payment_id}) deleted.")
