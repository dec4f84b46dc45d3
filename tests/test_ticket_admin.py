import pytest
from sqlalchemy import select

from app.database import AsyncSessionLocal
from app.models.event import Event
from app.models.payment import Payment
from app.models.tickets import Ticket, TicketStatus
from app.services.exceptions import InsufficientInventory, TicketNotFound
from app.services.ticket_admin import TicketAdmin
from app.services.ticket_issuer import TicketIssuer
from tests.helpers import create_event, fetch

pytestmark = pytest.mark.anyio


async def _issue(user, event, quantity=1):
    async with AsyncSessionLocal() as s:
        return await TicketIssuer(s).issue(user, event.id, quantity=quantity)


async def test_deleting_a_valid_ticket_releases_its_seat(customer):
    event = await create_event(total_tickets=5)
    tickets = await _issue(customer, event, quantity=3)
    assert (await fetch(Event, event.id)).tickets_sold == 3

    async with AsyncSessionLocal() as s:
        await TicketAdmin(s).delete_ticket(tickets[0].id)

    assert (await fetch(Event, event.id)).tickets_sold == 2
    assert await fetch(Ticket, tickets[0].id) is None
    async with AsyncSessionLocal() as s:
        orphaned = (await s.execute(select(Payment).where(Payment.ticket_id == tickets[0].id))).scalars().all()
    assert orphaned == []


async def test_deleting_a_cancelled_ticket_does_not_release_twice(customer):
    event = await create_event(total_tickets=5)
    tickets = await _issue(customer, event, quantity=2)

    async with AsyncSessionLocal() as s:
        await TicketAdmin(s).update_status(tickets[0].id, TicketStatus.CANCELLED)
    assert (await fetch(Event, event.id)).tickets_sold == 1

    async with AsyncSessionLocal() as s:
        await TicketAdmin(s).delete_ticket(tickets[0].id)
    assert (await fetch(Event, event.id)).tickets_sold == 1


async def test_reinstating_a_cancelled_ticket_needs_a_free_seat(customer):
    event = await create_event(total_tickets=1)
    (ticket,) = await _issue(customer, event)

    async with AsyncSessionLocal() as s:
        await TicketAdmin(s).update_status(ticket.id, TicketStatus.CANCELLED)
    (replacement,) = await _issue(customer, event)
    assert (await fetch(Event, event.id)).tickets_sold == 1

    async with AsyncSessionLocal() as s:
        with pytest.raises(InsufficientInventory):
            await TicketAdmin(s).update_status(ticket.id, TicketStatus.VALID)

    assert (await fetch(Ticket, ticket.id)).status == TicketStatus.CANCELLED
    assert (await fetch(Event, event.id)).tickets_sold == 1


async def test_override_to_used_stamps_used_at_and_back_clears_it(customer):
    event = await create_event()
    (ticket,) = await _issue(customer, event)

    async with AsyncSessionLocal() as s:
        used = await TicketAdmin(s).update_status(ticket.id, TicketStatus.USED)
    assert used.used_at is not None
    assert (await fetch(Event, event.id)).tickets_sold == 1

    async with AsyncSessionLocal() as s:
        valid = await TicketAdmin(s).update_status(ticket.id, TicketStatus.VALID)
    assert valid.used_at is None
    assert valid.checked_in_by is None
    assert (await fetch(Event, event.id)).tickets_sold == 1


async def test_missing_ticket(db):
    async with AsyncSessionLocal() as s:
        with pytest.raises(TicketNotFound):
            await TicketAdmin(s).delete_ticket("00000000-0000-0000-0000-000000000000")
