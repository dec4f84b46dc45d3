from datetime import datetime, timedelta, timezone
from decimal import Decimal
import re

import pytest

from app.database import AsyncSessionLocal
from app.models.event import Event
from app.models.payment import PaymentMethod, PaymentStatus
from app.models.tickets import Ticket, TicketStatus
from app.services.exceptions import DuplicateTransaction, Forbidden, PaymentNotFound, TicketNotFound
from app.services.payments import PaymentService, generate_transaction_id
from app.services.ticket_issuer import TicketIssuer
from app.services.ticket_verifier import TicketVerifier
from tests.helpers import auth_headers, create_event, create_user, fetch

pytestmark = pytest.mark.anyio


async def _issue_one(user, event):
    async with AsyncSessionLocal() as s:
        (ticket,) = await TicketIssuer(s).issue(user, event.id, quantity=1)
    return ticket


async def _create_pending(user, event, ticket, **kwargs):
    async with AsyncSessionLocal() as s:
        return await PaymentService(s).create_payment(
            user, event.id, ticket.id, Decimal("25.00"), PaymentMethod.STRIPE, **kwargs
        )


def test_generated_transaction_ids_are_readable_and_distinct():
    now = datetime(2025, 11, 4, tzinfo=timezone.utc)
    ids = {generate_transaction_id(now) for _ in range(50)}

    assert len(ids) == 50
    for txn in ids:
        assert re.fullmatch(r"TXN-20251104-[A-Z0-9]{8}", txn)


async def test_explicit_payment_starts_pending(customer):
    event = await create_event()
    ticket = await _issue_one(customer, event)

    payment = await _create_pending(customer, event, ticket)

    assert payment.payment_status == PaymentStatus.PENDING
    assert payment.transaction_id.startswith("TXN-")
    assert payment.ticket_id == ticket.id


async def test_supplied_transaction_id_is_kept_and_must_be_unique(customer):
    event = await create_event()
    ticket = await _issue_one(customer, event)

    payment = await _create_pending(customer, event, ticket, transaction_id="pi_3NvXyz")
    assert payment.transaction_id == "pi_3NvXyz"

    with pytest.raises(DuplicateTransaction):
        await _create_pending(customer, event, ticket, transaction_id="pi_3NvXyz")


async def test_payment_for_a_ticket_of_another_event_is_rejected(customer):
    event = await create_event(title="Main stage")
    other = await create_event(title="Side stage")
    ticket = await _issue_one(customer, event)

    with pytest.raises(TicketNotFound):
        await _create_pending(customer, other, ticket)


async def test_refund_propagates_to_ticket_and_releases_the_seat(customer):
    event = await create_event(total_tickets=2)
    ticket = await _issue_one(customer, event)
    payment = await _create_pending(customer, event, ticket)

    async with AsyncSessionLocal() as s:
        refunded = await PaymentService(s).update_status(payment.id, PaymentStatus.REFUNDED)

    assert refunded.payment_status == PaymentStatus.REFUNDED
    assert (await fetch(Ticket, ticket.id)).status == TicketStatus.REFUNDED
    assert (await fetch(Event, event.id)).tickets_sold == 0


async def test_success_revives_a_refunded_ticket(customer):
    event = await create_event(total_tickets=2)
    ticket = await _issue_one(customer, event)
    payment = await _create_pending(customer, event, ticket)

    async with AsyncSessionLocal() as s:
        await PaymentService(s).update_status(payment.id, PaymentStatus.REFUNDED)
    async with AsyncSessionLocal() as s:
        confirmed = await PaymentService(s).update_status(payment.id, PaymentStatus.SUCCESS)

    assert confirmed.payment_status == PaymentStatus.SUCCESS
    assert confirmed.payment_date is not None
    assert (await fetch(Ticket, ticket.id)).status == TicketStatus.VALID
    assert (await fetch(Event, event.id)).tickets_sold == 1


async def test_success_leaves_a_used_ticket_used(customer, staff):
    event = await create_event()
    ticket = await _issue_one(customer, event)
    payment = await _create_pending(customer, event, ticket)

    async with AsyncSessionLocal() as s:
        await TicketVerifier(s).verify(ticket.qr_payload, staff)
    async with AsyncSessionLocal() as s:
        await PaymentService(s).update_status(payment.id, PaymentStatus.SUCCESS)

    assert (await fetch(Ticket, ticket.id)).status == TicketStatus.USED


async def test_visibility_of_payments(customer, admin):
    other = await create_user("other@example.com")
    event = await create_event()
    mine = await _issue_one(customer, event)
    theirs = await _issue_one(other, event)

    async with AsyncSessionLocal() as s:
        service = PaymentService(s)
        assert {p.ticket_id for p in await service.list_payments(customer)} == {mine.id}
        assert {p.ticket_id for p in await service.list_payments(admin)} == {mine.id, theirs.id}

        their_payment = (await service.list_payments(other))[0]
        with pytest.raises(Forbidden):
            await service.get_payment(their_payment.id, customer)
        assert (await service.get_payment(their_payment.id, admin)).id == their_payment.id


async def test_filter_by_status_and_dates(customer):
    event = await create_event()
    ticket = await _issue_one(customer, event)
    pending = await _create_pending(customer, event, ticket)
    now = datetime.now(timezone.utc)

    async with AsyncSessionLocal() as s:
        service = PaymentService(s)
        only_pending = await service.filter_payments(status=PaymentStatus.PENDING)
        assert [p.id for p in only_pending] == [pending.id]

        assert len(await service.filter_payments(start_date=now - timedelta(hours=1))) == 2
        assert await service.filter_payments(end_date=now - timedelta(days=1)) == []


async def test_delete_payment(customer):
    event = await create_event()
    ticket = await _issue_one(customer, event)
    payment = await _create_pending(customer, event, ticket)

    async with AsyncSessionLocal() as s:
        await PaymentService(s).delete_payment(payment.id)
    async with AsyncSessionLocal() as s:
        with pytest.raises(PaymentNotFound):
            await PaymentService(s).get_payment(payment.id)


async def test_payment_api_rejects_out_of_range_event_id(client, customer):
    event = await create_event()
    ticket = await _issue_one(customer, event)

    r = await client.post(
        "/payments",
        json={
            "event_id": 99999999999999999999,
            "ticket_id": ticket.id,
            "amount": "25.00",
            "payment_method": "CASH",
        },
        headers=auth_headers(customer),
    )
    assert r.status_code == 422

    r = await client.get("/payments/99999999999999999999", headers=auth_headers(customer))
    assert r.status_code == 422
