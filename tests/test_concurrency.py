import asyncio

import pytest
from sqlalchemy import select, func

from app.database import AsyncSessionLocal
from app.models.event import Event
from app.models.tickets import Ticket, TicketStatus
from tests.helpers import auth_headers, create_event, create_user, fetch

pytestmark = pytest.mark.anyio


async def test_simultaneous_purchases_never_oversell(client, db):
    buyers = [await create_user(f"buyer{i}@example.com") for i in range(6)]
    event = await create_event(total_tickets=5)

    responses = await asyncio.gather(*[
        client.post("/tickets", json={"event_id": event.id, "quantity": 1}, headers=auth_headers(buyer))
        for buyer in buyers
    ])

    codes = sorted(r.status_code for r in responses)
    assert codes == [201] * 5 + [400]

    refreshed = await fetch(Event, event.id)
    assert refreshed.tickets_sold == refreshed.total_tickets == 5
    async with AsyncSessionLocal() as s:
        issued = await s.scalar(select(func.count(Ticket.id)).where(Ticket.event_id == event.id))
    assert issued == 5


async def test_competing_multi_seat_purchases(client, db):
    buyers = [await create_user(f"group{i}@example.com") for i in range(3)]
    event = await create_event(total_tickets=5)

    responses = await asyncio.gather(*[
        client.post("/tickets", json={"event_id": event.id, "quantity": 2}, headers=auth_headers(buyer))
        for buyer in buyers
    ])

    assert sorted(r.status_code for r in responses) == [201, 201, 400]
    assert (await fetch(Event, event.id)).tickets_sold == 4


async def test_simultaneous_scans_redeem_once(client, customer, staff, admin):
    event = await create_event()
    r = await client.post("/tickets", json={"event_id": event.id}, headers=auth_headers(customer))
    ticket = r.json()[0]

    responses = await asyncio.gather(
        client.post("/tickets/verify", json={"qr_data": ticket["qr_payload"]}, headers=auth_headers(staff)),
        client.post("/tickets/verify", json={"qr_data": ticket["qr_payload"]}, headers=auth_headers(admin)),
    )

    assert sorted(r.status_code for r in responses) == [200, 400]
    rejected = next(r for r in responses if r.status_code == 400)
    assert "already been used" in rejected.json()["detail"]
    assert (await fetch(Ticket, ticket["id"])).status == TicketStatus.USED
